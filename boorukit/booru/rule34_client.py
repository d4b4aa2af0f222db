"""Rule34 client."""

from typing import Any, Dict, List, Tuple
import logging

from ..errors import Unauthorized
from . import schemas
from .autocomplete import TagSuggestion, parse_post_count_from_label
from .base import Backend, DapiClient
from .models import Rule34Post, Rule34Rating

logger = logging.getLogger(__name__)

# Rule34 answers HTTP 200 with this text instead of a 401
MISSING_AUTH_MARKER = "Missing authentication"


class Rule34Client(DapiClient):
    """Client for the Rule34 DAPI (adult content, not filtered by default).

    Requires an API key and user id. Results are a bare JSON array; an empty
    body means no results.
    """

    backend = Backend(
        name='rule34',
        base_url='https://api.rule34.xxx',
        sort_prefix='sort:',
        max_tags=None,
        post_type=Rule34Post,
        rating_type=Rule34Rating,
        post_schema=schemas.RULE34_POST,
    )
    auth_hint = "Rule34 requires API credentials. Use set_credentials(api_key, user_id)"

    def _check_body(self, text: str):
        if MISSING_AUTH_MARKER in text:
            logger.warning("rule34 rejected credentials (auth error in HTTP 200 body)")
            raise Unauthorized(self.auth_hint)

    def _autocomplete_request(self, query: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        # The endpoint takes no limit; results are truncated client-side
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
