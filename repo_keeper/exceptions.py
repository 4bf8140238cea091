"""Custom exception hierarchy for repo-keeper.

Exception Hierarchy:
    RepoKeeperError (base)
    ├── ConfigurationError
    ├── ExternalServiceError
    │   └── OneDevAPIError
    └── ProvisioningError

Example Usage:
    >>> from repo_keeper.exceptions import ConfigurationError
    >>> try:
    ...     load_config(path)
    ... except FileNotFoundError as e:
    ...     raise ConfigurationError(f"Config file not found: {path}") from e
"""


class RepoKeeperError(Exception):
    """Base exception for all repo-keeper errors.

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


class ConfigurationError(RepoKeeperError):
    """Configuration-related errors.

    Raised when configuration files are invalid, missing, or contain
    values that cannot be interpreted.

    Examples:
        - Configuration file not found
        - Invalid YAML syntax
        - Unparseable activity duration
        - Unreadable token file
    """

    pass


class ExternalServiceError(RepoKeeperError):
    """External service communication errors.

    Raised when communication with a hosting backend fails
    (HTTP errors, API failures, timeouts, etc.).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        # Preserve original message
        self.message = message


class OneDevAPIError(ExternalServiceError):
    """A OneDev REST call failed or returned a non-success status."""

    pass


class ProvisioningError(RepoKeeperError):
    """Destination project could not be located or created.

    Attributes:
        repository: Name of the repository being provisioned
        stage: Provisioning step that failed (whoami, search, create, clone_url)
    """

    def __init__(
        self,
        message: str,
        repository: str | None = None,
        stage: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            repository: Name of the repository being provisioned
            stage: Provisioning step that failed
        """
        self.repository = repository
        self.stage = stage

        parts = [message]
        if repository:
            parts.append(f"repository: {repository}")
        if stage:
            parts.append(f"stage: {stage}")

        full_message = message if len(parts) == 1 else f"{message} ({', '.join(parts[1:])})"
        super().__init__(full_message)
        self.message = message
