"""Error taxonomy shared by every boorukit module."""

from typing import Optional


class BooruError(Exception):
    """Base exception for boorukit."""

    @property
    def is_network_error(self) -> bool:
        return isinstance(self, RequestError)

    @property
    def is_parse_error(self) -> bool:
        return isinstance(self, ParseError)

    @property
    def is_not_found(self) -> bool:
        return isinstance(self, (PostNotFound, EmptyResponse))


class RequestError(BooruError):
    """Raised when the HTTP request fails or the backend answers with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 is_timeout: bool = False, is_connect: bool = False):
        self.status_code = status_code
        self.is_timeout = is_timeout
        self.is_connect = is_connect
        super().__init__(f"HTTP request failed: {message}")

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and 500 <= self.status_code < 600


class ParseError(BooruError):
    """Raised when a response body is not JSON or does not match the expected shape."""

    def __init__(self, message: str):
        super().__init__(f"Failed to parse API response: {message}")


class TagLimitExceeded(BooruError):
    """Raised when a tag would push a query over the backend's tag limit."""

    def __init__(self, client: str, max: int, attempted: int):
        self.client = client
        self.max = max
        self.attempted = attempted
        super().__init__(
            f"{client} allows a maximum of {max} tags, but {attempted} were provided"
        )


class PostNotFound(BooruError):
    """Raised when an id lookup comes back structurally empty."""

    def __init__(self, post_id: int):
        self.post_id = post_id
        super().__init__(f"Post not found with ID: {post_id}")


class EmptyResponse(BooruError):
    """Raised when the API returned nothing where data was expected."""

    def __init__(self):
        super().__init__("Empty response from API")


class InvalidUrl(BooruError):
    """Raised for unusable URLs (e.g. a post without a file URL)."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class Unauthorized(BooruError):
    """Raised when a backend rejects the request for missing or bad credentials.

    Backends signal this differently (HTTP 401, or an error string inside an
    HTTP 200 body); both end up here with a remediation hint.
    """

    def __init__(self, hint: str):
        self.hint = hint
        super().__init__(f"Authentication required: {hint}")


class InvalidTag(BooruError):
    """Raised by strict tag validation."""

    def __init__(self, tag: str, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f"Invalid tag '{tag}': {reason}")


class RateLimited(BooruError):
    """Raised when the backend explicitly throttles us (HTTP 429)."""

    def __init__(self, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__("Rate limit exceeded, please wait before making more requests")


class BooruIOError(BooruError):
    """Raised for local filesystem failures (downloads)."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"I/O error: {message}")


class ConfigError(BooruError):
    """Raised when configuration is invalid or missing."""
