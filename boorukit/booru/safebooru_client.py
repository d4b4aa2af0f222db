"""Safebooru client."""

from typing import Any, Dict, List, Tuple

from . import schemas
from .autocomplete import TagSuggestion, parse_post_count_from_label
from .base import Backend, DapiClient
from .models import SafebooruPost, SafebooruRating


class SafebooruClient(DapiClient):
    """Client for Safebooru, a SFW-only board with no tag limit and no auth."""

    backend = Backend(
        name='safebooru',
        base_url='https://safebooru.org',
        sort_prefix='sort:',
        max_tags=None,
        post_type=SafebooruPost,
        rating_type=SafebooruRating,
        post_schema=schemas.SAFEBOORU_POST,
    )
    sends_credentials = False

    def _autocomplete_request(self, query: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        return '/autocomplete.php', {'q': query}

    def _parse_suggestions(self, data: List[Dict[str, Any]], limit: int) -> List[TagSuggestion]:
        return [
            TagSuggestion(
                name=item['value'],
                label=item.get('label', item['value']),
                post_count=parse_post_count_from_label(item.get('label', '')),
            )
            for item in data[:limit]
        ]
