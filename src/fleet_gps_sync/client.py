# fleet_gps_sync/client.py
"""
Shared HTTP client for the GPS vendor adapters.

Adapters describe each call as a RequestSpec (URL, auth headers, query
string, expected body format); VendorClient sends it and decodes the body.
It has no knowledge of Spireon, SkyBitz or Samsara payloads.

Failure handling:
    429              retried after Retry-After (plus a short buffer)
    5xx, timeouts,
    dropped sockets  retried with capped exponential backoff
    other 4xx        raised at once as VendorConnectionError
    bad JSON body    raised at once as VendorConnectionError

When the attempts run out the last TransientVendorError propagates. It is a
VendorConnectionError, so adapters and the orchestrator catch only that.

TLS follows HttpConfig: default CA verification, verification off,
a custom CA bundle path, or the OS store through `truststore`.
"""

import logging
from collections.abc import Callable
from ssl import SSLContext
from types import TracebackType
from typing import Any, Final, Self

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)

from fleet_gps_sync.common import build_truststore_ssl_context
from fleet_gps_sync.config import HttpConfig
from fleet_gps_sync.models import RateLimitInfo, RequestSpec, ResponseFormat

__all__: list[str] = [
    'RateLimitError',
    'TransientVendorError',
    'VendorClient',
    'VendorConnectionError',
]

logger: logging.Logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_STATUS_RATE_LIMITED: Final[int] = 429
HTTP_STATUS_SERVER_ERROR_MIN: Final[int] = 500
HTTP_STATUS_SERVER_ERROR_MAX: Final[int] = 599

RETRY_BACKOFF_MAX_SECONDS: Final[float] = 60.0
RATE_LIMIT_BUFFER_SECONDS: Final[float] = 0.5


# =============================================================================
# Exception Hierarchy
# =============================================================================


class VendorConnectionError(Exception):
    """
    Base exception for failures talking to a GPS vendor.

    Adapters also raise it for vendor-reported errors (a non-zero SkyBitz
    error code), payloads of the wrong shape and incomplete credentials.

    Attributes:
        status_code: Vendor HTTP status, or None when no response arrived.
        response_body: Body text kept for diagnosis, or None.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code: int | None = status_code
        self.response_body: str | None = response_body


class TransientVendorError(VendorConnectionError):
    """Timeout, dropped connection or 5xx; the only type the retry policy retries."""

    pass


class RateLimitError(TransientVendorError):
    """
    Raised when a vendor rate limit is exceeded (HTTP 429).

    Attributes:
        rate_limit_info: Retry-After and remaining-quota values from the headers.
    """

    def __init__(self, rate_limit_info: RateLimitInfo) -> None:
        super().__init__(
            f'Rate limit exceeded, retry after {rate_limit_info.retry_after_seconds}s',
            status_code=HTTP_STATUS_RATE_LIMITED,
        )
        self.rate_limit_info: RateLimitInfo = rate_limit_info


# =============================================================================
# Wait Strategy
# =============================================================================


def _build_wait_strategy(backoff_factor: float) -> Callable[[RetryCallState], float]:
    """tenacity `wait` callable: Retry-After for 429, doubling backoff otherwise."""

    def _wait_for_rate_limit_or_exponential(retry_state: RetryCallState) -> float:
        exception: BaseException | None = (
            retry_state.outcome.exception() if retry_state.outcome else None
        )

        if isinstance(exception, RateLimitError):
            return exception.rate_limit_info.retry_after_seconds + RATE_LIMIT_BUFFER_SECONDS

        attempt_number: int = retry_state.attempt_number
        exponential_wait: float = backoff_factor * (2 ** (attempt_number - 1))
        return min(exponential_wait, RETRY_BACKOFF_MAX_SECONDS)

    return _wait_for_rate_limit_or_exponential


# =============================================================================
# HTTP Client
# =============================================================================


class VendorClient:
    """
    Pooled httpx client shared by every adapter in the process.

    One instance is built per application and closed on shutdown; it is
    safe to use from the FastAPI threadpool.

    Example:
        >>> with VendorClient(HttpConfig()) as client:
        ...     payload = client.request(RequestSpec(url='https://api.samsara.com/fleet/vehicles'))
    """

    def __init__(
        self,
        http_config: HttpConfig,
        pool_connections: int = 5,
        pool_maxsize: int = 10,
    ) -> None:
        """
        Args:
            http_config: Timeouts, attempt count, backoff and TLS settings.
            pool_connections: Keepalive connections kept open.
            pool_maxsize: Upper bound on open connections.

        Raises:
            RuntimeError: If use_truststore is set but truststore is missing.
        """
        self._http_config: HttpConfig = http_config

        ssl_verify: SSLContext | bool | str = self._build_ssl_context()

        connect_timeout: int
        read_timeout: int
        connect_timeout, read_timeout = http_config.request_timeout
        default_timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=connect_timeout,
            pool=connect_timeout,
        )

        self._http_client: httpx.Client = httpx.Client(
            timeout=default_timeout,
            verify=ssl_verify,
            limits=httpx.Limits(
                max_keepalive_connections=pool_connections,
                max_connections=pool_maxsize,
            ),
        )

        self._retrying: Retrying = Retrying(
            retry=retry_if_exception_type(TransientVendorError),
            wait=_build_wait_strategy(http_config.retry_backoff_factor),
            stop=stop_after_attempt(http_config.max_retries),
            reraise=True,
        )

        logger.info(
            'Initialized VendorClient: max_retries=%d, timeout=%r, pool_size=%d',
            http_config.max_retries,
            http_config.request_timeout,
            pool_maxsize,
        )

    def _build_ssl_context(self) -> SSLContext | bool | str:
        """Value for httpx `verify`: an SSLContext, a bool or a CA bundle path."""
        if self._http_config.use_truststore:
            logger.debug('Building SSLContext from truststore (OS certificate store)')
            return build_truststore_ssl_context()

        logger.debug('Using SSL verification setting: %r', self._http_config.verify_ssl)
        return self._http_config.verify_ssl

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release pooled connections. Idempotent."""
        self._http_client.close()
        logger.debug('VendorClient closed')

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def request(self, request_spec: RequestSpec) -> Any:
        """
        Send one vendor call, retrying transient failures.

        Returns:
            A dict or list for ResponseFormat.JSON; the body text for
            ResponseFormat.TEXT (SkyBitz XML).

        Raises:
            VendorConnectionError: Rejected request or unusable body; also
                the last TransientVendorError or RateLimitError once the
                attempts are used up.
        """
        return self._retrying(self._execute_once, request_spec)

    # -------------------------------------------------------------------------
    # Single attempt
    # -------------------------------------------------------------------------

    def _execute_once(self, request_spec: RequestSpec) -> Any:
        response: httpx.Response = self._send_http_request(request_spec)
        return self._handle_response(response, request_spec.response_format)

    def _send_http_request(self, request_spec: RequestSpec) -> httpx.Response:
        """Transport failures become TransientVendorError."""
        try:
            return self._http_client.request(
                method=request_spec.method.value,
                url=request_spec.url,
                params=request_spec.query_params,
                headers=request_spec.headers,
                auth=request_spec.auth,
                json=request_spec.body,
            )
        except httpx.TimeoutException as error:
            logger.warning('Request timeout (will retry): %s', request_spec.url)
            raise TransientVendorError(f'Request timeout: {error}') from error
        except httpx.RequestError as error:
            logger.warning(
                'Connection error (will retry): %s - %s', request_spec.url, error
            )
            raise TransientVendorError(f'Connection error: {error}') from error

    def _handle_response(
        self,
        response: httpx.Response,
        response_format: ResponseFormat,
    ) -> Any:
        """Classify the status code, then decode the body."""
        status_code: int = response.status_code

        if status_code == HTTP_STATUS_RATE_LIMITED:
            rate_limit_info: RateLimitInfo = RateLimitInfo.from_response_headers(
                dict(response.headers)
            )
            logger.warning(
                'Rate limited (will retry after %.1fs): remaining=%s',
                rate_limit_info.retry_after_seconds,
                rate_limit_info.remaining,
            )
            raise RateLimitError(rate_limit_info)

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code <= HTTP_STATUS_SERVER_ERROR_MAX:
            logger.warning(
                'Server error %d (will retry): %s',
                status_code,
                response.text[:200],
            )
            raise TransientVendorError(
                message=f'Server error: HTTP {status_code}',
                status_code=status_code,
                response_body=response.text,
            )

        # Rejected credentials land here (401/403)
        if not response.is_success:
            logger.error(
                'Client error %d (not retryable): %s',
                status_code,
                response.text[:500],
            )
            raise VendorConnectionError(
                message=f'Client error: HTTP {status_code}',
                status_code=status_code,
                response_body=response.text,
            )

        if response_format is ResponseFormat.TEXT:
            return response.text

        try:
            json_body: Any = response.json()
        except ValueError as parse_error:
            raise VendorConnectionError(
                message=f'Invalid JSON in response: {parse_error}',
                status_code=status_code,
                response_body=response.text[:500],
            ) from parse_error

        if not isinstance(json_body, dict | list):
            raise VendorConnectionError(
                message=(
                    'Expected JSON object or array in response, got '
                    f'{type(json_body).__name__}. Content: {response.text[:200]}'
                ),
                status_code=status_code,
                response_body=response.text[:500],
            )

        return json_body
