"""Exception types raised by the content gateway and configuration loader."""

from __future__ import annotations

from typing import Optional


class BlogsiteError(Exception):
    """Base class for blogsite errors."""


class ConfigError(BlogsiteError):
    """Raised when the site configuration cannot be loaded or validated."""


class GatewayError(BlogsiteError):
    """A request to the content gateway failed.

    ``kind`` is a stable identifier used when the failure is reported in
    rendered output (for example in the listing page payloads).
    """

    kind = "gateway-error"

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class NetworkError(GatewayError):
    """Connection failure, timeout or server-side (5xx) error."""

    kind = "network-error"


class RateLimitedError(GatewayError):
    """The CMS answered with HTTP 429."""

    kind = "rate-limited"

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message, url=url)
        self.retry_after = retry_after


class MalformedResponseError(GatewayError):
    """The CMS answered with something that is not a valid API payload."""

    kind = "malformed-response"


__all__ = [
    "BlogsiteError",
    "ConfigError",
    "GatewayError",
    "MalformedResponseError",
    "NetworkError",
    "RateLimitedError",
]
