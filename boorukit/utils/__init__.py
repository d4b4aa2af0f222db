"""Resilience primitives, HTTP, configuration and logging helpers."""

from .rate_limiter import RateLimiter
from .retry import RetryConfig, is_retryable, with_retry
from .http_client import create_http_client
from .config_loader import ConfigLoader, load_config, get_credentials
from .logger import setup_logger, get_logger

__all__ = [
    'RateLimiter',
    'RetryConfig',
    'is_retryable',
    'with_retry',
    'create_http_client',
    'ConfigLoader',
    'load_config',
    'get_credentials',
    'setup_logger',
    'get_logger',
]
