"""
Base HTTP client with retry, rate limiting, and error mapping.

Owns the ``httpx.AsyncClient`` lifecycle, attaches the catalog
credential to every request, and turns every transport or HTTP
failure into ``CatalogUnavailable``.
"""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from game_market.catalog.errors import CatalogUnavailable
from game_market.config import CatalogAPIConfig, RetryConfig, get_settings
from game_market.logger import get_logger
from game_market.utils.rate_limiter import RateLimiter

# Upstream error bodies can be whole HTML pages
MAX_DETAIL_CHARS = 500


class _RateLimited(Exception):
    """Internal marker for HTTP 429 so tenacity can retry it."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        super().__init__(f"Rate limit exceeded. Retry after {self.retry_after}s")


def _parse_retry_after(value: str | None) -> float | None:
    """Seconds from a Retry-After header; HTTP-date values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, (httpx.TransportError, _RateLimited))


class BaseAPIClient:
    """
    Async JSON API client.

    Provides:
    - HTTP client management (async context manager)
    - Static credential and content-type headers
    - Request pacing, paused for the server's Retry-After on HTTP 429
    - Retry with exponential backoff for transport errors and HTTP 429
    - Mapping of every failure to CatalogUnavailable
    """

    source_name = "catalog_api"

    def __init__(
        self,
        *,
        api_config: CatalogAPIConfig | None = None,
        retry_config: RetryConfig | None = None,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_config: Catalog API configuration (settings if None)
            retry_config: Retry configuration (settings if None)
            rate_limiter: Custom rate limiter (creates one from api_config if None)
            transport: Optional httpx transport, mainly for tests
        """
        if api_config is None or retry_config is None:
            settings = get_settings()
            api_config = api_config or settings.catalog
            retry_config = retry_config or settings.retry

        self._api_config = api_config
        self._retry_config = retry_config
        self._transport = transport
        self._rate_limiter = rate_limiter or RateLimiter.from_config(api_config)
        self._logger = get_logger(
            self.__class__.__name__,
            component="catalog_client",
            source=self.source_name,
        )
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._api_config.base_url

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._api_config.base_url,
                timeout=httpx.Timeout(float(self._api_config.timeout_seconds)),
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "api-key": self._api_config.api_key.get_secret_value(),
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _log_retry_attempt(self, retry_state: Any) -> None:
        """Log retry attempts for observability."""
        self._logger.warning(
            "Retrying request",
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
            exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self._retry_config.max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_config.base_delay_seconds,
                max=self._retry_config.max_delay_seconds,
                exp_base=self._retry_config.exponential_base,
            ),
            before_sleep=self._log_retry_attempt,
            reraise=True,
        )

    async def _send(self, path: str, params: dict[str, Any] | None) -> httpx.Response:
        await self._rate_limiter.acquire()
        self._logger.debug("Making request", path=path, params=params)
        response = await self.client.get(path, params=params)
        if response.status_code == 429:
            error = _RateLimited(response)
            if error.retry_after is not None:
                # The whole client waits, not just this request
                self._rate_limiter.pause(
                    min(error.retry_after, self._retry_config.max_delay_seconds)
                )
            raise error
        return response

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a JSON document.

        Args:
            path: Endpoint path relative to the base URL
            params: Query parameters (None values are dropped)

        Returns:
            Decoded JSON body

        Raises:
            CatalogUnavailable: On any non-2xx status, transport failure,
                timeout or undecodable body
        """
        if params is not None:
            params = {k: v for k, v in params.items() if v is not None}
        endpoint = f"{self.base_url}/{path.lstrip('/')}"

        try:
            response = await self._retrying()(self._send, path, params)
        except _RateLimited as e:
            raise self._unavailable(endpoint, e.response, original_error=e) from e
        except httpx.TimeoutException as e:
            self._logger.error("Request timed out", endpoint=endpoint)
            raise CatalogUnavailable(
                f"Request to {endpoint} timed out",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            self._logger.error("Transport failure", endpoint=endpoint, error=str(e))
            raise CatalogUnavailable(
                f"Request to {endpoint} failed: {e}",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e
        except RetryError as e:
            raise CatalogUnavailable(
                f"Request failed after {self._retry_config.max_attempts} attempts",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e

        if not response.is_success:
            raise self._unavailable(endpoint, response)

        try:
            return response.json()
        except ValueError as e:
            raise CatalogUnavailable(
                "Response body is not valid JSON",
                source=self.source_name,
                endpoint=endpoint,
                status_code=response.status_code,
                detail=response.text[:MAX_DETAIL_CHARS],
                original_error=e,
            ) from e

    def _unavailable(
        self,
        endpoint: str,
        response: httpx.Response,
        *,
        original_error: Exception | None = None,
    ) -> CatalogUnavailable:
        detail = response.text[:MAX_DETAIL_CHARS]
        self._logger.error(
            "API request failed",
            endpoint=endpoint,
            status_code=response.status_code,
            reason=response.reason_phrase,
            detail=detail,
        )
        return CatalogUnavailable(
            f"API request failed: {response.status_code} {response.reason_phrase}".rstrip(),
            source=self.source_name,
            endpoint=endpoint,
            status_code=response.status_code,
            detail=detail,
            original_error=original_error,
        )
