"""Declarative query construction for booru clients."""

import copy
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Optional, Tuple, Type
import logging

import httpx

from ..errors import TagLimitExceeded
from .cache_manager import ResponseCache, cache_key
from .models import Sort
from .tag_validator import validate_tag_strict

if TYPE_CHECKING:
    from ..utils.rate_limiter import RateLimiter
    from ..utils.retry import RetryConfig
    from .base import BooruClient
    from .stream import PageStream, PostStream

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


@dataclass(frozen=True)
class Query:
    """Frozen set of parameters for one fetch."""

    tags: Tuple[str, ...] = ()
    limit: int = DEFAULT_LIMIT
    page: int = 0
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    base_url: str = ''

    @property
    def tag_string(self) -> str:
        """Tags joined by single spaces in insertion order, as sent on the wire."""
        return ' '.join(self.tags)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.user_id)

    def fingerprint(self, backend: str) -> str:
        return cache_key(backend, self.tags, self.limit, self.page)


class QueryBuilder:
    """Accumulates tags, rating, sort, pagination and credentials for one backend.

    Every method returns a new builder and leaves the receiver untouched, so
    a failed ``tag()`` call cannot corrupt a builder the caller still holds.

    Example:
        client = (DanbooruClient.builder()
                  .tag('cat_ears')
                  .rating(DanbooruRating.GENERAL)
                  .limit(10)
                  .build())
        posts = await client.get()
    """

    def __init__(self, client_cls: Type['BooruClient'],
                 http_client: Optional[httpx.AsyncClient] = None):
        """Initialize a builder with the backend's defaults.

        Args:
            client_cls: Concrete BooruClient subclass to build
            http_client: Shared HTTP client; a short-lived one is used per
                request when omitted
        """
        self.client_cls = client_cls
        self.query = Query(base_url=client_cls.backend.base_url)
        self.http_client = http_client
        self.cache: Optional[ResponseCache] = None
        self.strict_tags = False

    def _evolve(self, **changes) -> 'QueryBuilder':
        clone = copy.copy(self)
        clone.query = replace(self.query, **changes)
        return clone

    def _with_attr(self, name: str, value) -> 'QueryBuilder':
        clone = copy.copy(self)
        setattr(clone, name, value)
        return clone

    @property
    def backend(self):
        return self.client_cls.backend

    @property
    def max_tags(self) -> Optional[int]:
        return self.client_cls.backend.max_tags

    def _append(self, token: str) -> 'QueryBuilder':
        max_tags = self.max_tags
        count = len(self.query.tags)
        if max_tags is not None and count >= max_tags:
            raise TagLimitExceeded(self.client_cls.__name__, max_tags, count + 1)
        return self._evolve(tags=self.query.tags + (token,))

    def tag(self, name: str) -> 'QueryBuilder':
        """Add a tag to the search query.

        Raises:
            TagLimitExceeded: If the backend's tag limit is already reached
            InvalidTag: In strict mode, if the tag fails validation
        """
        if self.strict_tags:
            validate_tag_strict(name)
        return self._append(name)

    def tags(self, names: Iterable[str]) -> 'QueryBuilder':
        """Add several tags; fails on the first one over the limit."""
        builder = self
        for name in names:
            builder = builder.tag(name)
        return builder

    def rating(self, rating) -> 'QueryBuilder':
        """Filter by rating. Counts against the tag limit like any other tag."""
        rating_type = self.backend.rating_type
        if not isinstance(rating, rating_type):
            raise TypeError(f"{self.client_cls.__name__} expects a {rating_type.__name__}, "
                            f"got {type(rating).__name__}")
        return self._append(f"rating:{rating.value}")

    def sort(self, order: Sort) -> 'QueryBuilder':
        """Sort results, using the backend's sort prefix (order: or sort:)."""
        return self._append(f"{self.backend.sort_prefix}{Sort(order).value}")

    def random(self) -> 'QueryBuilder':
        return self._append(f"{self.backend.sort_prefix}random")

    def blacklist_tag(self, name: str) -> 'QueryBuilder':
        """Exclude posts carrying a tag."""
        if self.strict_tags:
            validate_tag_strict(name)
        return self._append(f"-{name}")

    def blacklist_tags(self, names: Iterable[str]) -> 'QueryBuilder':
        builder = self
        for name in names:
            builder = builder.blacklist_tag(name)
        return builder

    def limit(self, n: int) -> 'QueryBuilder':
        return self._evolve(limit=n)

    def page(self, n: int) -> 'QueryBuilder':
        """Set the page cursor (zero-based)."""
        return self._evolve(page=n)

    def set_credentials(self, api_key: str, user_id: str) -> 'QueryBuilder':
        return self._evolve(api_key=api_key, user_id=user_id)

    def with_custom_url(self, url: str) -> 'QueryBuilder':
        """Point the client at another host (mirrors, mock servers)."""
        return self._evolve(base_url=url)

    default_url = with_custom_url

    def with_http_client(self, http_client: httpx.AsyncClient) -> 'QueryBuilder':
        return self._with_attr('http_client', http_client)

    def with_cache(self, cache: Optional[ResponseCache]) -> 'QueryBuilder':
        """Serve page fetches from a shared response cache when possible."""
        return self._with_attr('cache', cache)

    def strict(self, enabled: bool = True) -> 'QueryBuilder':
        """Validate every tag added afterwards, rejecting any with warnings."""
        return self._with_attr('strict_tags', enabled)

    def tag_count(self) -> int:
        return len(self.query.tags)

    def has_tags(self) -> bool:
        return bool(self.query.tags)

    def build(self) -> 'BooruClient':
        """Freeze the query into a client. No I/O happens here."""
        return self.client_cls(self.query, http_client=self.http_client, cache=self.cache)

    def into_page_stream(self, max_pages: Optional[int] = None,
                         rate_limiter: Optional['RateLimiter'] = None,
                         retry: Optional['RetryConfig'] = None) -> 'PageStream':
        from .stream import PageStream
        return PageStream(self, max_pages=max_pages, rate_limiter=rate_limiter, retry=retry)

    def into_post_stream(self, max_posts: Optional[int] = None,
                         max_pages: Optional[int] = None,
                         rate_limiter: Optional['RateLimiter'] = None,
                         retry: Optional['RetryConfig'] = None) -> 'PostStream':
        from .stream import PostStream
        return PostStream(self, max_posts=max_posts, max_pages=max_pages,
                          rate_limiter=rate_limiter, retry=retry)

    def __repr__(self) -> str:
        return (f"QueryBuilder({self.client_cls.__name__}, tags={list(self.query.tags)}, "
                f"limit={self.query.limit}, page={self.query.page})")
