"""Custom exception hierarchy for the API gateway."""


class GatewayError(Exception):
    """Base exception for all gateway errors."""


class ConfigurationError(GatewayError):
    """Raised when configuration is missing or invalid."""


class BodyPreparationError(GatewayError):
    """Raised when an inbound body cannot be read or re-encoded for a backend.

    Attributes:
        message: Error message
        content_type: Inbound Content-Type header (optional)
    """

    def __init__(self, message: str, content_type: str | None = None) -> None:
        super().__init__(message)
        self.content_type = content_type
