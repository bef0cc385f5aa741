"""Reconcile GitHub authentication and release notes configuration."""

from pathlib import Path

import structlog
from pydantic import ValidationError
from ruamel.yaml.error import YAMLError

from git_release_manager.configuration.exceptions import (
    GitHubAuthenticationConfigurationUndefinedError,
    ReleaseNotesConfigurationError,
)
from git_release_manager.configuration.models import GitHubAuthenticationType, ReleaseNotesConfig
from git_release_manager.utils.yaml import dump_yaml_to_file, load_yaml_file

logger = structlog.get_logger(__name__)

_GITHUB_APP_SETTINGS = (
    ("GitHub App ID", "github_app_id", "GITHUB_APP_ID"),
    ("GitHub App private key path", "github_app_private_key_path", "GITHUB_APP_PRIVATE_KEY_PATH"),
    ("GitHub App installation ID", "github_app_installation_id", "GITHUB_APP_INSTALLATION_ID"),
)


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    Args:
        github_pat_token (str | None): The GitHub PAT token.
        github_app_id (int | None): The GitHub App ID.
        github_app_private_key_path (Path | None): The path to the GitHub App private key.
        github_app_installation_id (int | None): The GitHub App installation ID.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If neither or both of PAT and App
            configurations are defined, or the App configuration is incomplete.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication used.
    """
    app_values = (github_app_id, github_app_private_key_path, github_app_installation_id)

    if github_pat_token and any(app_values):
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")

    if github_pat_token:
        return GitHubAuthenticationType.PAT

    if all(app_values):
        return GitHubAuthenticationType.APP

    if any(app_values):
        missing = [
            f"{name} (command line option {cli_name}, environment variable {env_name})"
            for (name, cli_name, env_name), value in zip(_GITHUB_APP_SETTINGS, app_values)
            if not value
        ]
        raise GitHubAuthenticationConfigurationUndefinedError("Incomplete GitHub App configuration - missing settings include " + ", ".join(missing))

    raise GitHubAuthenticationConfigurationUndefinedError(
        "No GitHub authentication configuration provided. Please provide either a PAT or a GitHub App configuration."
    )


def load_release_notes_configuration(path: Path) -> ReleaseNotesConfig:
    """Load the release notes configuration, falling back to defaults when the file does not exist.

    Raises:
        ReleaseNotesConfigurationError: If the file is not valid YAML or does not match the schema.
    """
    if not path.exists():
        logger.info("Release notes configuration file not found, using defaults", path=str(path))
        return ReleaseNotesConfig()
    try:
        content = load_yaml_file(path)
    except YAMLError as exc:
        raise ReleaseNotesConfigurationError(path, f"not valid YAML: {exc}") from exc
    if content is None:
        return ReleaseNotesConfig()
    if not isinstance(content, dict):
        raise ReleaseNotesConfigurationError(path, "expected a mapping at the top level")
    try:
        config = ReleaseNotesConfig.model_validate(content)
    except ValidationError as exc:
        raise ReleaseNotesConfigurationError(path, str(exc)) from exc
    logger.debug(
        "Loaded release notes configuration",
        path=str(path),
        include=config.issue_labels_include,
        exclude=config.issue_labels_exclude,
        aliases=len(config.label_aliases),
    )
    return config


def write_sample_configuration(path: Path, config: ReleaseNotesConfig | None = None) -> None:
    """Write a complete release notes configuration, the defaults unless ``config`` is given."""
    config = config or ReleaseNotesConfig()
    dump_yaml_to_file(config.model_dump(mode="json", by_alias=True), path)
    logger.info("Wrote release notes configuration", path=str(path))
