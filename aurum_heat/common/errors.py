"""Domain errors and failure typing."""


class CollectorError(Exception):
    """Base class for collection failures."""

    error_code = "COLLECTOR_ERROR"


class ConfigError(CollectorError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class AuthError(CollectorError):
    """Raised when the service refuses to open a session."""

    error_code = "AUTH_ERROR"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(CollectorError):
    """Raised for connection failures and unusable responses."""

    error_code = "TRANSPORT_ERROR"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(CollectorError):
    """Raised when a response body does not match the expected shape."""

    error_code = "DECODE_ERROR"
