"""Exception classes for carrots."""


class CarrotsError(Exception):
    """Base exception for carrots."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: What went wrong.
            target: URL, repository or setting the failure concerns.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Render as "<prefix> for '<target>': <message>"."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class ConfigurationError(CarrotsError):
    """Raised when the server configuration is missing or invalid."""

    error_prefix = "Invalid configuration"


class UpstreamError(CarrotsError):
    """Raised when a request to GitHub fails."""

    error_prefix = "Upstream request failed"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        status: int | None = None,
    ) -> None:
        """Initialize the error with the HTTP status, if one was received."""
        super().__init__(message, target)
        self.status = status


class RateLimitError(UpstreamError):
    """Raised when GitHub rejects a request as rate limited (HTTP 403)."""

    error_prefix = "Rate limited"
