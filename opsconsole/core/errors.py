from typing import List, Optional


class MissingConfigurationError(RuntimeError):
    """Required Azure credentials are not configured; the server cannot start."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


class RequestValidationFailed(Exception):
    """A required request field was missing or empty (HTTP 400)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UpstreamError(Exception):
    """An Azure management call failed (HTTP 500).

    ``message`` is the user-facing summary, the wrapped provider error
    text is exposed as ``error``.
    """

    def __init__(self, message: str, error: str, status_code: int = 500):
        self.message = message
        self.error = error
        self.status_code = status_code
        super().__init__(f"{message}: {error}")


class TemplateConfigurationError(Exception):
    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            f"Missing required environment variables for template: {', '.join(missing)}"
        )


class TemplateProvisioningError(Exception):
    """Azure returned a resource without the id needed for the next step."""


class FetchError(Exception):
    """Inventory request failed, either with an HTTP status or a network error."""

    def __init__(self, reason: str, status: Optional[int] = None):
        self.reason = reason
        self.status = status
        super().__init__(reason)


class ApiCommandError(Exception):
    """A console command (start/stop/template) was rejected or could not be sent."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)
