# fleet_gps_sync/models/requests.py
"""
Vendor-agnostic request specification models.

This module defines the contract between the adapters (which build request
specs) and VendorClient (which executes them). The client never needs to
know about vendor-specific auth schemes, query strings or response formats.
"""

import logging
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

logger: logging.Logger = logging.getLogger(__name__)

__all__: list[str] = [
    'HTTPMethod',
    'PaginationState',
    'RateLimitInfo',
    'RequestSpec',
    'ResponseFormat',
]


class HTTPMethod(str, Enum):
    """Supported HTTP methods for vendor requests."""

    GET = 'GET'
    POST = 'POST'


class ResponseFormat(str, Enum):
    """How VendorClient decodes a successful response body."""

    JSON = 'json'  # object or array
    TEXT = 'text'  # raw body, e.g. SkyBitz XML


class RequestSpec(BaseModel):
    """
    Complete specification for one vendor HTTP request.

    The adapter is responsible for:
    - Building the full URL
    - Serializing query parameters
    - Injecting authentication headers or a Basic auth pair
    - Declaring how the body should be decoded

    The client is responsible for:
    - Executing the HTTP request
    - Retrying transient failures and honoring rate limits
    - Decoding the body per response_format

    Attributes:
        url: Complete URL ready for the HTTP request.
        method: HTTP method.
        headers: All headers including token authentication.
        auth: (username, password) for HTTP Basic auth, applied by httpx.
        query_params: Serialized query parameters.
        body: JSON request body for POST requests.
        response_format: JSON or TEXT decoding of the response body.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    url: str
    method: HTTPMethod = HTTPMethod.GET
    headers: dict[str, str] = Field(default_factory=dict)
    auth: tuple[str, str] | None = Field(default=None, repr=False)
    query_params: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] | None = None
    response_format: ResponseFormat = ResponseFormat.JSON


class RateLimitInfo(BaseModel):
    """
    Rate limit metadata extracted from HTTP response headers.

    Attributes:
        retry_after_seconds: Seconds to wait before retrying.
        limit: Maximum requests allowed in the rate limit window.
        remaining: Requests remaining in the current window.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    retry_after_seconds: float = 1.0
    limit: int | None = None
    remaining: int | None = None

    @classmethod
    def from_response_headers(cls, headers: dict[str, str]) -> Self:
        """
        Extract rate limit information from HTTP response headers.

        Header lookup is case-insensitive. Unparseable values fall back to
        defaults rather than failing the retry path.

        Args:
            headers: HTTP response headers.

        Returns:
            RateLimitInfo, defaulting to a 1 second retry delay.
        """
        normalized_headers: dict[str, str] = {
            key.lower(): value for key, value in headers.items()
        }

        def _to_int(raw: str | None) -> int | None:
            if raw is None:
                return None
            try:
                return int(raw)
            except ValueError:
                return None

        try:
            retry_after: float = float(normalized_headers.get('retry-after', '1'))
        except ValueError:
            retry_after = 1.0

        return cls(
            retry_after_seconds=max(retry_after, 0.0),
            limit=_to_int(normalized_headers.get('x-ratelimit-limit')),
            remaining=_to_int(normalized_headers.get('x-ratelimit-remaining')),
        )


class PaginationState(BaseModel):
    """
    Cursor pagination state for vendors that page their listings (Samsara).

    Attributes:
        has_next_page: Whether more data is available.
        next_page_params: Query parameters to add for the next request,
            e.g. {'after': 'endCursorString...'}.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    has_next_page: bool
    next_page_params: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def initial_cursor(cls) -> Self:
        """First page: no 'after' parameter."""
        return cls(has_next_page=True, next_page_params={})

    @classmethod
    def next_cursor(cls, cursor_token: str) -> Self:
        """Subsequent page addressed by an opaque cursor."""
        return cls(has_next_page=True, next_page_params={'after': cursor_token})

    @classmethod
    def finished(cls) -> Self:
        """Terminal state (no more pages)."""
        return cls(has_next_page=False)
