"""Lazy pagination over booru clients.

A PageStream turns single-page fetches into a sequence of pages; a PostStream
flattens that into individual posts. Both are one-way: once a stream sees an
empty page, hits its cap or fails, it never fetches again.
"""

from collections import deque
from typing import TYPE_CHECKING, Deque, List, Optional
import logging

from ..utils.retry import RetryConfig, with_retry
from .models import BasePost

if TYPE_CHECKING:
    from ..utils.rate_limiter import RateLimiter
    from .query_builder import QueryBuilder

logger = logging.getLogger(__name__)


class _Exclusive:
    """Guards a stream against overlapping ``next()`` calls."""

    def __init__(self, owner):
        self.owner = owner

    def __enter__(self):
        if self.owner._busy:
            raise RuntimeError(f"{type(self.owner).__name__}.next() is not reentrant; "
                               f"await the previous call before starting another")
        self.owner._busy = True

    def __exit__(self, exc_type, exc, tb):
        self.owner._busy = False
        return False


class PageStream:
    """Fetches consecutive pages of a query until an empty page, cap or error.

    Example:
        stream = DanbooruClient.builder().tag('cat_ears').limit(50).into_page_stream(max_pages=3)
        async for page in stream:
            for post in page:
                print(post.id)
    """

    def __init__(self, builder: 'QueryBuilder', max_pages: Optional[int] = None,
                 rate_limiter: Optional['RateLimiter'] = None,
                 retry: Optional[RetryConfig] = None):
        """Initialize the stream at the builder's current page.

        Args:
            builder: Query to paginate; each fetch builds a fresh client from it
            max_pages: Stop after this many successful fetches
            rate_limiter: Token bucket acquired before every fetch
            retry: Retry policy applied to every fetch (none when omitted)
        """
        self.builder = builder
        self.max_pages = max_pages
        self.rate_limiter = rate_limiter
        self.retry = retry

        self.current_page = builder.query.page
        self.pages_fetched = 0
        self.exhausted = False
        self._busy = False

    async def _fetch(self, page: int) -> List[BasePost]:
        client = self.builder.page(page).build()

        async def attempt():
            if self.rate_limiter is not None:
                await self.rate_limiter.acquire()
            return await client.get()

        if self.retry is None:
            return await attempt()
        return await with_retry(self.retry, attempt)

    async def next(self) -> Optional[List[BasePost]]:
        """Fetch the next page.

        Returns:
            The page's posts, an empty list for the page that ended the
            stream, or None once the stream is exhausted

        Raises:
            BooruError: The fetch failed. Raised once; the stream is exhausted
                afterwards.
            RuntimeError: If called again before a previous call completed
        """
        with _Exclusive(self):
            if self.exhausted:
                return None
            if self.max_pages is not None and self.pages_fetched >= self.max_pages:
                logger.debug(f"Page stream reached max_pages={self.max_pages}")
                self.exhausted = True
                return None

            try:
                posts = await self._fetch(self.current_page)
            except Exception:
                self.exhausted = True
                logger.debug(f"Page stream stopped by error on page {self.current_page}")
                raise

            if not posts:
                logger.debug(f"Page stream exhausted at empty page {self.current_page}")
                self.exhausted = True
                return []

            self.current_page += 1
            self.pages_fetched += 1
            return posts

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[BasePost]:
        page = await self.next()
        if not page:
            raise StopAsyncIteration
        return page

    def __repr__(self) -> str:
        return (f"PageStream(page={self.current_page}, fetched={self.pages_fetched}, "
                f"exhausted={self.exhausted})")


class PostStream:
    """Yields posts one at a time across pages, in page order.

    Posts from the most recent page are buffered and handed out oldest first.
    When ``max_posts`` is reached the stream stops; the rest of the buffered
    page is dropped.
    """

    def __init__(self, builder: 'QueryBuilder', max_posts: Optional[int] = None,
                 max_pages: Optional[int] = None,
                 rate_limiter: Optional['RateLimiter'] = None,
                 retry: Optional[RetryConfig] = None):
        self.pages = PageStream(builder, max_pages=max_pages,
                                rate_limiter=rate_limiter, retry=retry)
        self.max_posts = max_posts
        self.posts_yielded = 0
        self._buffer: Deque[BasePost] = deque()
        self._busy = False

    @property
    def current_page(self) -> int:
        return self.pages.current_page

    async def next(self) -> Optional[BasePost]:
        """Return the next post, or None when no more posts will come.

        Raises:
            BooruError: A page fetch failed
            RuntimeError: If called again before a previous call completed
        """
        with _Exclusive(self):
            if self.max_posts is not None and self.posts_yielded >= self.max_posts:
                return None

            if not self._buffer:
                page = await self.pages.next()
                if not page:
                    return None
                self._buffer.extend(page)

            self.posts_yielded += 1
            return self._buffer.popleft()

    async def collect(self) -> List[BasePost]:
        """Drain the stream into a list.

        Raises the first error encountered; posts gathered before it are
        discarded. Use ``next()`` directly to keep partial results.
        """
        posts = []
        while True:
            post = await self.next()
            if post is None:
                return posts
            posts.append(post)

    def __aiter__(self):
        return self

    async def __anext__(self) -> BasePost:
        post = await self.next()
        if post is None:
            raise StopAsyncIteration
        return post

    def __repr__(self) -> str:
        return (f"PostStream(page={self.current_page}, yielded={self.posts_yielded}, "
                f"max_posts={self.max_posts})")
