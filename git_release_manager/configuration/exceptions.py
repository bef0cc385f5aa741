"""Contains exceptions raised when reconciling application configuration."""

from pathlib import Path


class GitHubAuthenticationConfigurationUndefinedError(Exception):
    """Raised when the GitHub authentication configuration is undefined or ambiguous."""

    pass


class ReleaseNotesConfigurationError(Exception):
    """Raised when the release notes configuration file cannot be read or is invalid."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the configuration file path and the reason."""
        super().__init__(f"Invalid release notes configuration file {path}: {reason}")
        self.path = path
        self.reason = reason


class GitHubClientConfigurationError(ValueError):
    """Raised when a GitHub client cannot be set up from the given repository and credentials."""

    pass
