"""Danbooru client."""

from typing import Any, Dict, List, Tuple
import logging

from ..errors import PostNotFound
from . import schemas
from .autocomplete import TagSuggestion
from .base import Backend, BooruClient
from .models import DanbooruPost, DanbooruRating

logger = logging.getLogger(__name__)


class DanbooruClient(BooruClient):
    """Client for the Danbooru JSON API.

    Anonymous Danbooru searches accept at most two tags, and rating/sort tags
    count towards that limit. Credentials are optional and sent as
    ``login``/``api_key`` when set.
    """

    backend = Backend(
        name='danbooru',
        base_url='https://danbooru.donmai.us',
        sort_prefix='order:',
        max_tags=2,
        post_type=DanbooruPost,
        rating_type=DanbooruRating,
        post_schema=schemas.DANBOORU_POST,
    )
    auth_hint = "Danbooru rejected the credentials. Check set_credentials(api_key, username)"

    def _auth_params(self) -> Dict[str, str]:
        if self.query.has_credentials:
            return {'login': self.query.user_id, 'api_key': self.query.api_key}
        return {}

    def _page_request(self) -> Tuple[str, Dict[str, Any]]:
        params = {
            'limit': self.query.limit,
            # Danbooru pages start at 1
            'page': self.query.page + 1,
            'tags': self.query.tag_string,
        }
        params.update(self._auth_params())
        return '/posts.json', params

    def _id_request(self, post_id: int) -> Tuple[str, Dict[str, Any]]:
        return f'/posts/{post_id}.json', self._auth_params()

    def _unwrap_single(self, data: Any, post_id: int) -> Dict[str, Any]:
        # The id endpoint answers with a bare object instead of an array
        if isinstance(data, list):
            return super()._unwrap_single(data, post_id)
        if not data:
            raise PostNotFound(post_id)
        schemas.validate(data, schemas.DANBOORU_POST)
        return data

    def _autocomplete_request(self, query: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        return '/autocomplete.json', {
            'search[query]': query,
            'search[type]': 'tag_query',
            'limit': limit,
        }

    def _parse_suggestions(self, data: List[Dict[str, Any]], limit: int) -> List[TagSuggestion]:
        return [
            TagSuggestion(
                name=item['value'],
                label=item.get('label', item['value']),
                post_count=item.get('post_count'),
                category=item.get('category'),
            )
            for item in data[:limit]
        ]
