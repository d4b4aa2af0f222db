"""boorukit: async clients for Danbooru, Gelbooru, Rule34 and Safebooru."""

import logging

from .errors import (
    BooruError,
    RequestError,
    ParseError,
    TagLimitExceeded,
    PostNotFound,
    EmptyResponse,
    InvalidUrl,
    Unauthorized,
    InvalidTag,
    RateLimited,
    BooruIOError,
    ConfigError,
)
from .booru import (
    Sort,
    DanbooruRating,
    GelbooruRating,
    Rule34Rating,
    SafebooruRating,
    DanbooruClient,
    GelbooruClient,
    Rule34Client,
    SafebooruClient,
    QueryBuilder,
    PageStream,
    PostStream,
    ResponseCache,
    Downloader,
    DownloadOptions,
)
from .utils import RateLimiter, RetryConfig, with_retry, create_http_client

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'BooruError',
    'RequestError',
    'ParseError',
    'TagLimitExceeded',
    'PostNotFound',
    'EmptyResponse',
    'InvalidUrl',
    'Unauthorized',
    'InvalidTag',
    'RateLimited',
    'BooruIOError',
    'ConfigError',
    'Sort',
    'DanbooruRating',
    'GelbooruRating',
    'Rule34Rating',
    'SafebooruRating',
    'DanbooruClient',
    'GelbooruClient',
    'Rule34Client',
    'SafebooruClient',
    'QueryBuilder',
    'PageStream',
    'PostStream',
    'ResponseCache',
    'Downloader',
    'DownloadOptions',
    'RateLimiter',
    'RetryConfig',
    'with_retry',
    'create_http_client',
]
