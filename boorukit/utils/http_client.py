"""Factory for the pooled httpx client shared by booru clients."""

from typing import Any, Dict, Optional
import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "boorukit/1.0"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_MAX_CONNECTIONS = 20
DEFAULT_MAX_KEEPALIVE = 10


def create_http_client(http_config: Optional[Dict[str, Any]] = None,
                       transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create a long-lived async HTTP client.

    The returned client is meant to be created once, passed to every
    QueryBuilder via ``with_http_client`` and closed by the caller.

    Args:
        http_config: The ``http`` config section (timeouts, pool limits, user agent)
        transport: Optional transport override (mock transports in tests)

    Returns:
        Configured httpx.AsyncClient
    """
    http_config = http_config or {}
    timeout = httpx.Timeout(
        float(http_config.get('timeout', DEFAULT_TIMEOUT)),
        connect=float(http_config.get('connect_timeout', DEFAULT_CONNECT_TIMEOUT)),
    )
    limits = httpx.Limits(
        max_connections=int(http_config.get('max_connections', DEFAULT_MAX_CONNECTIONS)),
        max_keepalive_connections=int(
            http_config.get('max_keepalive_connections', DEFAULT_MAX_KEEPALIVE)
        ),
    )
    user_agent = http_config.get('user_agent') or DEFAULT_USER_AGENT

    logger.debug(f"Creating HTTP client (timeout={timeout.read}s, "
                 f"max_connections={limits.max_connections})")

    kwargs = {}
    if transport is not None:
        kwargs['transport'] = transport

    return httpx.AsyncClient(
        timeout=timeout,
        limits=limits,
        headers={'User-Agent': user_agent, 'Accept': 'application/json'},
        follow_redirects=True,
        **kwargs,
    )
