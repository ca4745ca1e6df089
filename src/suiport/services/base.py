"""Base API client with circuit breaker protection.

This module provides:
- CircuitState enum for circuit breaker states
- CircuitBreaker dataclass for tracking consecutive upstream failures
- BaseAPIClient class for making single-attempt HTTP requests

Retries are not performed here: callers wrap each request in a
RetryPolicy so that every external call shares the same linear backoff.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import httpx
import structlog

from suiport.core.exceptions import CircuitBreakerOpenError, ExternalServiceError

log = structlog.get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Requests allowed
    OPEN = "open"  # Requests blocked until cooldown elapses
    HALF_OPEN = "half_open"  # One probe request allowed


@dataclass
class CircuitBreaker:
    """Opens after ``failure_threshold`` consecutive failures.

    After ``cooldown_seconds`` the breaker goes half-open and lets a probe
    through; a failed probe reopens it, a successful one closes it.
    """

    failure_threshold: int = 5
    cooldown_seconds: int = 30
    failure_count: int = field(default=0, init=False)
    last_failure_time: datetime | None = field(default=None, init=False)
    state: CircuitState = field(default=CircuitState.CLOSED, init=False)

    def record_success(self) -> None:
        """Reset the failure count and close the circuit."""
        if self.state != CircuitState.CLOSED:
            log.info("circuit_breaker_closed", previous_state=self.state.value)
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Count a failure and open the circuit when the threshold is reached."""
        self.failure_count += 1
        self.last_failure_time = datetime.now(UTC)

        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            log.warning(
                "circuit_breaker_opened",
                failure_count=self.failure_count,
                threshold=self.failure_threshold,
            )

    def can_execute(self) -> bool:
        """Check whether a request may go out, moving OPEN to HALF_OPEN after cooldown."""
        if self.state != CircuitState.OPEN:
            return True

        if self.last_failure_time is None:
            return False

        elapsed = datetime.now(UTC) - self.last_failure_time
        if elapsed > timedelta(seconds=self.cooldown_seconds):
            self.state = CircuitState.HALF_OPEN
            log.info("circuit_breaker_half_open", cooldown_elapsed=elapsed.total_seconds())
            return True
        return False

    def raise_if_open(self, service: str) -> None:
        """Raise CircuitBreakerOpenError if requests are currently blocked."""
        if not self.can_execute():
            raise CircuitBreakerOpenError(
                f"Circuit breaker is open for {service}. Next probe in "
                f"{self.seconds_until_half_open():.1f} seconds."
            )

    def seconds_until_half_open(self) -> float:
        """Seconds remaining until the circuit goes half-open, or 0 if ready."""
        if self.last_failure_time is None:
            return 0.0
        elapsed = datetime.now(UTC) - self.last_failure_time
        return max(0.0, self.cooldown_seconds - elapsed.total_seconds())


class BaseAPIClient:
    """Base API client with lazy httpx client and circuit breaker.

    Attributes:
        service_name: Name used in errors and log events.
        base_url: Base URL for all requests.
        timeout: Request timeout in seconds.
        headers: Default headers for all requests.

    Example:
        client = BaseAPIClient(base_url="https://api.example.com")
        response = await client.get("/endpoint")
        await client.close()
    """

    service_name = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        circuit_breaker_threshold: int = 5,
        circuit_breaker_cooldown: int = 30,
    ) -> None:
        """Initialize BaseAPIClient.

        Args:
            base_url: Base URL for all requests.
            timeout: Request timeout in seconds (default: 30).
            headers: Default headers for all requests.
            circuit_breaker_threshold: Failures before circuit opens (default: 5).
            circuit_breaker_cooldown: Seconds before half-open (default: 30).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self._client: httpx.AsyncClient | None = None
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=circuit_breaker_threshold,
            cooldown_seconds=circuit_breaker_cooldown,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
            log.debug("httpx_client_created", base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", base_url=self.base_url)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make a single HTTP request guarded by the circuit breaker.

        Args:
            method: HTTP method.
            path: Request path (appended to base_url).
            **kwargs: Additional arguments passed to httpx.request.

        Returns:
            httpx.Response on success.

        Raises:
            CircuitBreakerOpenError: If the circuit breaker is open.
            ExternalServiceError: On HTTP error status or transport failure.
        """
        self._circuit_breaker.raise_if_open(self.service_name)
        client = await self._get_client()

        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            # 4xx other than 429 says nothing about upstream health
            if status_code == 429 or status_code >= 500:
                self._circuit_breaker.record_failure()
            log.warning(
                "request_status_error",
                service=self.service_name,
                method=method,
                path=path,
                status_code=status_code,
            )
            raise ExternalServiceError(
                service=self.service_name,
                message=str(e),
                status_code=status_code,
            ) from e
        except httpx.RequestError as e:
            self._circuit_breaker.record_failure()
            log.warning(
                "request_connection_error",
                service=self.service_name,
                method=method,
                path=path,
                error=str(e),
            )
            raise ExternalServiceError(service=self.service_name, message=str(e)) from e

        self._circuit_breaker.record_success()
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return await self._request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self._request("POST", path, **kwargs)
