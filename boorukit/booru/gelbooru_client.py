"""Gelbooru client."""

from typing import Any, Dict, List, Tuple
import logging

from . import schemas
from .autocomplete import TagSuggestion, parse_category, parse_post_count_from_label
from .base import Backend, DapiClient
from .models import GelbooruPost, GelbooruRating

logger = logging.getLogger(__name__)


class GelbooruClient(DapiClient):
    """Client for the Gelbooru DAPI.

    Gelbooru requires an API key and user id (account options page) and
    answers HTTP 401 without them. Results come wrapped as
    ``{"@attributes": {...}, "post": [...]}``. There is no tag limit.
    """

    backend = Backend(
        name='gelbooru',
        base_url='https://gelbooru.com',
        sort_prefix='sort:',
        max_tags=None,
        post_type=GelbooruPost,
        rating_type=GelbooruRating,
        post_schema=schemas.GELBOORU_POST,
    )
    auth_hint = "Gelbooru requires API credentials. Use set_credentials(api_key, user_id)"

    def _unwrap_page(self, data: Any) -> List[Dict[str, Any]]:
        if data is None:
            return []
        # A bare array shows up on some mirrors
        if isinstance(data, list):
            return super()._unwrap_page(data)
        schemas.validate(data, schemas.GELBOORU_ENVELOPE)
        # "post" is omitted entirely when nothing matches
        return super()._unwrap_page(data.get('post'))

    def _autocomplete_request(self, query: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        params = {
            'page': 'autocomplete2',
            'term': query,
            'type': 'tag_query',
            'limit': limit,
        }
        params.update(self._auth_params())
        return '/index.php', params

    def _parse_suggestions(self, data: List[Dict[str, Any]], limit: int) -> List[TagSuggestion]:
        suggestions = []
        for item in data[:limit]:
            label = item.get('label', item['value'])
            post_count = item.get('post_count')
            if post_count is None:
                post_count = parse_post_count_from_label(label)
            suggestions.append(TagSuggestion(
                name=item['value'],
                label=label,
                post_count=int(post_count) if post_count is not None else None,
                category=parse_category(item.get('category')),
            ))
        return suggestions
