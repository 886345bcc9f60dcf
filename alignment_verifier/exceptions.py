"""Custom exception hierarchy for the alignment verifier.

Exception Hierarchy:
    AlignmentVerifierError (base)
    ├── ConfigurationError
    └── ExternalServiceError

Configuration errors are raised before any upstream call is made and are
always surfaced to the caller. External service errors are raised by the
provider adapters; the verification engine recovers from them locally and
keeps producing a report from whatever data it did get.

Example Usage:
    >>> from alignment_verifier.exceptions import ConfigurationError
    >>> if not settings.tracker.api_token:
    ...     raise ConfigurationError("Jira is not configured", service="tracker")
"""


class AlignmentVerifierError(Exception):
    """Base exception for all alignment verifier errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(AlignmentVerifierError):
    """Configuration-related errors.

    Raised when configuration files are invalid or when credentials for one
    of the collaborators (task tracker, code host) are missing.

    Attributes:
        service: Which collaborator is misconfigured ("tracker", "code_host"),
            or None for general configuration problems.
    """

    def __init__(self, message: str, service: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            service: Name of the misconfigured collaborator
        """
        self.service = service
        super().__init__(message)


class ExternalServiceError(AlignmentVerifierError):
    """Communication with the task tracker or code host failed.

    Examples:
        - HTTP request failed or returned a non-2xx status
        - Response body could not be decoded
        - Network connectivity issue
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            service: Name of the service that failed ("jira", "github")
            status_code: HTTP status code (if applicable)
        """
        self.service = service
        self.status_code = status_code

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        # Preserve original message
        self.message = message
