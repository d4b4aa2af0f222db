"""Booru API clients, query building and pagination."""

from .models import (
    Sort,
    DanbooruRating,
    GelbooruRating,
    Rule34Rating,
    SafebooruRating,
    DanbooruPost,
    GelbooruPost,
    Rule34Post,
    SafebooruPost,
)
from .base import Backend, BooruClient
from .query_builder import Query, QueryBuilder
from .danbooru_client import DanbooruClient
from .gelbooru_client import GelbooruClient
from .rule34_client import Rule34Client
from .safebooru_client import SafebooruClient
from .stream import PageStream, PostStream
from .cache_manager import ResponseCache, cache_key
from .tag_validator import TagValidation, validate_tag, validate_tag_strict, validate_tags, normalize_tag
from .autocomplete import TagSuggestion
from .downloader import Downloader, DownloadOptions, DownloadProgress, DownloadResult

__all__ = [
    'Sort',
    'DanbooruRating',
    'GelbooruRating',
    'Rule34Rating',
    'SafebooruRating',
    'DanbooruPost',
    'GelbooruPost',
    'Rule34Post',
    'SafebooruPost',
    'Backend',
    'BooruClient',
    'Query',
    'QueryBuilder',
    'DanbooruClient',
    'GelbooruClient',
    'Rule34Client',
    'SafebooruClient',
    'PageStream',
    'PostStream',
    'ResponseCache',
    'cache_key',
    'TagValidation',
    'validate_tag',
    'validate_tag_strict',
    'validate_tags',
    'normalize_tag',
    'TagSuggestion',
    'Downloader',
    'DownloadOptions',
    'DownloadProgress',
    'DownloadResult',
]
