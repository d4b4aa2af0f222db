"""Common machinery for booru API clients."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type
import logging

import httpx

from ..errors import ParseError, PostNotFound, RateLimited, RequestError, Unauthorized
from ..utils.http_client import create_http_client
from . import schemas
from .autocomplete import TagSuggestion
from .cache_manager import ResponseCache
from .models import BasePost
from .query_builder import Query, QueryBuilder

logger = logging.getLogger(__name__)

# Query parameters never written to logs
_SECRET_PARAMS = {'api_key', 'user_id', 'login'}


@dataclass(frozen=True)
class Backend:
    """Fixed capabilities of one booru backend."""

    name: str
    base_url: str
    sort_prefix: str
    max_tags: Optional[int]
    post_type: Type[BasePost]
    rating_type: Type[Enum]
    post_schema: Dict[str, Any]


class BooruClient(ABC):
    """Abstract base for booru API clients.

    A client wraps a frozen Query and performs exactly one HTTP round trip per
    call. It never retries or rate-limits on its own; compose ``with_retry``
    and ``RateLimiter`` (or use a PageStream) for that.

    Subclasses declare ``backend`` and the request shapes, and override the
    ``_check_body`` / ``_unwrap_page`` / ``_unwrap_single`` hooks for their
    backend's quirks.
    """

    backend: ClassVar[Backend]
    auth_hint: ClassVar[str] = "Invalid or missing API credentials"

    def __init__(self, query: Query, http_client: Optional[httpx.AsyncClient] = None,
                 cache: Optional[ResponseCache] = None):
        self.query = query
        self.http_client = http_client
        self.cache = cache

    @classmethod
    def builder(cls, http_client: Optional[httpx.AsyncClient] = None) -> QueryBuilder:
        """Create a query builder for this backend."""
        return QueryBuilder(cls, http_client=http_client)

    @property
    def base_url(self) -> str:
        return self.query.base_url.rstrip('/')

    # ---- request shapes ----------------------------------------------------------

    @abstractmethod
    def _page_request(self) -> Tuple[str, Dict[str, Any]]:
        """Path and query parameters for a page fetch."""

    @abstractmethod
    def _id_request(self, post_id: int) -> Tuple[str, Dict[str, Any]]:
        """Path and query parameters for an id lookup."""

    @abstractmethod
    def _autocomplete_request(self, query: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        """Path and query parameters for tag autocomplete."""

    def _auth_params(self) -> Dict[str, str]:
        if self.query.has_credentials:
            return {'api_key': self.query.api_key, 'user_id': self.query.user_id}
        return {}

    # ---- backend quirk hooks ------------------------------------------------------

    def _check_body(self, text: str):
        """Inspect the raw body before JSON decoding. No-op by default."""

    def _unwrap_page(self, data: Any) -> List[Dict[str, Any]]:
        """Extract the list of raw posts from a decoded page response."""
        if data is None:
            return []
        schemas.validate(data, schemas.array_of(self.backend.post_schema))
        return data

    def _unwrap_single(self, data: Any, post_id: int) -> Dict[str, Any]:
        """Extract one raw post from a decoded id-lookup response."""
        posts = self._unwrap_page(data)
        if not posts:
            raise PostNotFound(post_id)
        return posts[0]

    def _parse_suggestions(self, data: Any, limit: int) -> List[TagSuggestion]:
        raise NotImplementedError

    # ---- HTTP ---------------------------------------------------------------------

    async def _send(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.get(url, params=params)
        async with create_http_client() as client:
            return await client.get(url, params=params)

    async def _fetch(self, path: str, params: Dict[str, Any]) -> httpx.Response:
        """Issue a GET and map transport failures and error statuses to BooruErrors."""
        url = f"{self.base_url}{path}"
        safe_params = {k: v for k, v in params.items() if k not in _SECRET_PARAMS}
        logger.debug(f"GET {url} {safe_params}")

        try:
            response = await self._send(url, params)
        except httpx.TimeoutException as e:
            raise RequestError(f"timed out requesting {url}: {e}", is_timeout=True) from e
        except httpx.ConnectError as e:
            raise RequestError(f"could not connect to {url}: {e}", is_connect=True) from e
        except httpx.HTTPError as e:
            raise RequestError(f"{type(e).__name__} requesting {url}: {e}") from e

        status = response.status_code
        if status == 401:
            logger.warning(f"{self.backend.name} rejected credentials (HTTP 401)")
            raise Unauthorized(self.auth_hint)
        if status == 429:
            retry_after = response.headers.get('Retry-After')
            try:
                retry_after = float(retry_after) if retry_after is not None else None
            except ValueError:
                retry_after = None
            raise RateLimited(retry_after)
        if status >= 400:
            raise RequestError(f"HTTP {status} for {url}", status_code=status)

        return response

    def _decode(self, response: httpx.Response) -> Any:
        """Decode a response body to JSON; an empty body decodes to None."""
        text = response.text
        self._check_body(text)
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"response is not valid JSON: {e}") from e

    def _build_post(self, raw: Dict[str, Any]) -> BasePost:
        try:
            return self.backend.post_type.from_dict(raw)
        except (TypeError, ValueError) as e:
            raise ParseError(f"unexpected post shape: {e}") from e

    # ---- public API ---------------------------------------------------------------

    async def get_by_id(self, post_id: int) -> BasePost:
        """Retrieve a single post by its ID.

        Raises:
            PostNotFound: If the backend returns no post for this ID
            Unauthorized: If the backend rejects the credentials
            RequestError: On transport failures and HTTP error statuses
            ParseError: If the body is not the expected JSON
        """
        path, params = self._id_request(post_id)
        response = await self._fetch(path, params)
        raw = self._unwrap_single(self._decode(response), post_id)
        return self._build_post(raw)

    async def get(self) -> List[BasePost]:
        """Retrieve the page of posts described by the query.

        Raises:
            Unauthorized: If the backend rejects the credentials
            RequestError: On transport failures and HTTP error statuses
            ParseError: If the body is not the expected JSON
        """
        key = None
        if self.cache is not None:
            key = self.query.fingerprint(self.backend.name)
            cached = self.cache.get(key)
            if cached is not None:
                return [self._build_post(raw) for raw in cached]

        path, params = self._page_request()
        response = await self._fetch(path, params)
        posts = [self._build_post(raw) for raw in self._unwrap_page(self._decode(response))]
        logger.debug(f"{self.backend.name}: {len(posts)} posts on page {self.query.page}")

        if key is not None:
            self.cache.insert(key, [post.to_dict() for post in posts])
        return posts

    async def autocomplete(self, query: str, limit: int = 10) -> List[TagSuggestion]:
        """Suggest tags starting with ``query``.

        Args:
            query: Partial tag
            limit: Maximum suggestions to return

        Returns:
            List of TagSuggestion, best match first
        """
        path, params = self._autocomplete_request(query, limit)
        response = await self._fetch(path, params)
        data = self._decode(response)
        if not data:
            return []
        if not isinstance(data, list):
            raise ParseError("autocomplete response is not a list")
        try:
            return self._parse_suggestions(data, limit)
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"unexpected autocomplete item: {e}") from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tags={list(self.query.tags)}, page={self.query.page})"


class DapiClient(BooruClient):
    """Shared request shapes for Gelbooru-style ``index.php?page=dapi`` APIs."""

    # Whether api_key/user_id are sent when set
    sends_credentials: ClassVar[bool] = True

    def _dapi_params(self, **extra) -> Dict[str, Any]:
        params = {'page': 'dapi', 's': 'post', 'q': 'index', 'json': '1'}
        params.update(extra)
        if self.sends_credentials:
            params.update(self._auth_params())
        return params

    def _page_request(self) -> Tuple[str, Dict[str, Any]]:
        return '/index.php', self._dapi_params(
            pid=self.query.page,
            limit=self.query.limit,
            tags=self.query.tag_string,
        )

    def _id_request(self, post_id: int) -> Tuple[str, Dict[str, Any]]:
        return '/index.php', self._dapi_params(id=post_id)
