"""
Error taxonomy for the BFS Statistics Gateway.

Every failure raised by the clients is a GatewayError subclass so the tool
layer can turn it into a caller-visible message with a matching tip.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway failures."""

    error_type = "error"


class ValidationError(GatewayError):
    """Invalid caller input, rejected before any network call."""

    error_type = "validation"


class NotFoundError(GatewayError):
    """The dataset (or the requested slice of it) does not exist upstream."""

    error_type = "not_found"


class NoRecordsFoundError(NotFoundError):
    """A data query legitimately matched zero observations."""

    error_type = "no_records"


class UpstreamError(GatewayError):
    """Non-success HTTP status, timeout, transport failure or unparsable payload."""

    error_type = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class RateLimitedError(UpstreamError):
    """HTTP 429 from the upstream."""

    error_type = "rate_limited"

    def __init__(self, message: str, url: Optional[str] = None, retry_after: Optional[float] = None):
        super().__init__(message, status_code=429, url=url)
        self.retry_after = retry_after
