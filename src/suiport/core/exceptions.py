"""SuiPort exception hierarchy.

This module defines the base exception class and specialized exceptions
for the error categories of the pricing core and its collaborators.
"""


class SuiPortError(Exception):
    """Base exception for all SuiPort errors.

    All custom exceptions in SuiPort should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class DatabaseConnectionError(SuiPortError):
    """Raised when the database connection fails.

    Example:
        raise DatabaseConnectionError("Supabase: Connection refused")
    """

    pass


class StorageError(SuiPortError):
    """Raised when a read or write against persistent storage fails.

    The price resolver treats cache storage as best-effort: it logs this
    error and continues. Repositories raise it so that the caller decides.

    Attributes:
        table: Name of the table involved, if known.

    Example:
        raise StorageError("upsert failed", table="tokens")
    """

    def __init__(self, message: str, table: str | None = None) -> None:
        self.table = table
        super().__init__(f"{table}: {message}" if table else message)


class ConfigurationError(SuiPortError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("Missing required env var: SUPABASE_URL")
    """

    pass


class ValidationError(SuiPortError):
    """Raised when data validation fails."""

    pass


class InvalidInputError(ValidationError):
    """Raised when a coin type or wallet address is missing or malformed.

    Surfaced immediately to the caller as a user-facing failure, never retried.

    Attributes:
        field: Name of the offending input.

    Example:
        raise InvalidInputError("Wallet address is required", field="address")
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ExternalServiceError(SuiPortError):
    """Raised when an external service call fails.

    Use this for errors from the Sui RPC node, 7k, CoinGecko, DexScreener.

    Attributes:
        service: Name of the external service that failed.
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise ExternalServiceError(service="coingecko", message="Rate limited", status_code=429)
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class SourceUnavailableError(SuiPortError):
    """Raised when a price source cannot produce a price after retries.

    Never fatal: the cascade moves to the next stage or returns absent.

    Attributes:
        source: Name of the price source.
    """

    def __init__(self, source: str, message: str = "no price available") -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class CircuitBreakerOpenError(SuiPortError):
    """Raised when a client's circuit breaker is open.

    Example:
        raise CircuitBreakerOpenError("Circuit is open for DexScreener API")
    """

    pass
