"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Coroutine, TypeVar

import structlog
import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from git_release_manager.configuration.driver import (
    run_build_release_notes,
    run_close_milestone,
    run_create_labels,
    run_create_release,
    run_discard_release,
    run_export_releases,
    run_open_milestone,
    run_publish_release,
    run_resolve_linked_issues,
)
from git_release_manager.configuration.env import get_settings
from git_release_manager.configuration.exceptions import (
    GitHubAuthenticationConfigurationUndefinedError,
    GitHubClientConfigurationError,
    ReleaseNotesConfigurationError,
)
from git_release_manager.configuration.models import GitHubConnectionConfig, ReleaseNotesConfig
from git_release_manager.configuration.reconcile import (
    load_release_notes_configuration,
    validate_github_authentication_configuration,
    write_sample_configuration,
)
from git_release_manager.provider.exceptions import VcsProviderError
from git_release_manager.provider.models import LinkResolutionStrategy
from git_release_manager.release_notes.exceptions import EmptyReleaseError, LabelValidationError, ReleaseStateError
from git_release_manager.utils.constants import DEFAULT_CONFIG_FILE_NAME, GITHUB_API_URL

load_dotenv()

T = TypeVar("T")

EXPECTED_ERRORS = (
    VcsProviderError,
    LabelValidationError,
    EmptyReleaseError,
    ReleaseStateError,
    ReleaseNotesConfigurationError,
    GitHubAuthenticationConfigurationUndefinedError,
    GitHubClientConfigurationError,
)

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


def configure_logging(debug: bool = False) -> None:
    """Configure structlog to render human readable logs on stderr."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if debug else logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def run_workflow(workflow: Coroutine[Any, Any, T]) -> T:
    """Run an async workflow, reporting expected failures without a traceback."""
    try:
        return asyncio.run(workflow)
    except EXPECTED_ERRORS as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def write_output(content: str, output: Path | None) -> None:
    """Write content to a file, or to stdout when no file is given."""
    if output is None:
        typer.echo(content)
        return
    if output.parent != Path(""):
        output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    typer.echo(f"Wrote {output}", err=True)


def load_configuration_or_exit(config_path: Path | None) -> ReleaseNotesConfig:
    """Load the release notes configuration, exiting with an error message if it is invalid."""
    path = config_path or get_settings().RELEASE_NOTES_CONFIG_PATH
    try:
        return load_release_notes_configuration(path)
    except ReleaseNotesConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


@typer_app.command(name="init")
def init_cli(
    path: Annotated[
        Path, Option("--path", envvar="RELEASE_NOTES_CONFIG_PATH", help="Where to write the sample configuration.")
    ] = Path(DEFAULT_CONFIG_FILE_NAME),
    force: Annotated[bool, Option("--force", help="Overwrite an existing configuration file.")] = False,
) -> None:
    """Write a sample release notes configuration file with every setting at its default."""
    if path.exists() and not force:
        typer.echo(f"Configuration file already exists: {path.absolute()} (use --force to overwrite)", err=True)
        raise typer.Exit(1)
    write_sample_configuration(path)
    typer.echo(f"Wrote sample configuration to {path}")


# --- Repository commands ---
repo_app = typer.Typer(help="Repository-related commands")


def repo_callback(
    ctx: typer.Context,
    repo: Annotated[str, Argument(envvar="REPO", help="Repository name (owner/repo).")],
    github_api_url: Annotated[str, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = GITHUB_API_URL,
    github_pat_token: Annotated[str | None, Option(envvar="GITHUB_PAT_TOKEN", help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
) -> None:
    """Set the repository and credentials for the current context."""
    configure_logging(debug)
    try:
        github_auth_type = asyncio.run(
            validate_github_authentication_configuration(
                github_pat_token=github_pat_token,
                github_app_id=github_app_id,
                github_app_private_key_path=github_app_private_key_path,
                github_app_installation_id=github_app_installation_id,
            )
        )
    except GitHubAuthenticationConfigurationUndefinedError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    ctx.obj = GitHubConnectionConfig(
        repo=repo,
        github_api_url=github_api_url,
        github_authentication_type=github_auth_type,
        github_pat_token=github_pat_token,
        github_app_id=github_app_id,
        github_app_private_key_path=github_app_private_key_path,
        github_app_installation_id=github_app_installation_id,
    )


repo_app.callback()(repo_callback)


@repo_app.command(name="create-release-notes")
def create_release_notes_cli(
    ctx: typer.Context,
    milestone: Annotated[str, Option("--milestone", "-m", help="Title of the milestone to build release notes for.")],
    config_path: Annotated[Path | None, Option("--config", help="Path to the release notes configuration file.")] = None,
    output: Annotated[Path | None, Option("--output", "-o", help="File to write the release notes to. Defaults to stdout.")] = None,
) -> None:
    """Build markdown release notes from the issues closed in a milestone."""
    connection: GitHubConnectionConfig = ctx.obj
    config = load_configuration_or_exit(config_path)
    content = run_workflow(run_build_release_notes(connection, milestone, config))
    write_output(content, output)


@repo_app.command(name="create")
def create_release_cli(
    ctx: typer.Context,
    milestone: Annotated[str, Option("--milestone", "-m", help="Milestone to create the release from; also the release tag.")],
    name: Annotated[str | None, Option("--name", "-n", help="Release name. Defaults to the milestone title.")] = None,
    target_commitish: Annotated[
        str | None, Option("--target-commitish", "-c", help="Branch or commit to tag. Defaults to the configured default branch.")
    ] = None,
    prerelease: Annotated[bool, Option("--pre", help="Mark the release as a prerelease.")] = False,
    config_path: Annotated[Path | None, Option("--config", help="Path to the release notes configuration file.")] = None,
) -> None:
    """Create a draft release from a milestone, or refresh the notes of its draft release."""
    connection: GitHubConnectionConfig = ctx.obj
    config = load_configuration_or_exit(config_path)
    release = run_workflow(
        run_create_release(connection, milestone, config, name=name, target_commitish=target_commitish, prerelease=prerelease)
    )
    typer.echo(f"Draft release {release.tag_name}: {release.html_url}" if release.draft else f"Release {release.tag_name}: {release.html_url}")


@repo_app.command(name="publish")
def publish_release_cli(
    ctx: typer.Context,
    tag_name: Annotated[str, Option("--tag", "-t", help="Tag of the draft release to publish.")],
) -> None:
    """Publish a draft release."""
    connection: GitHubConnectionConfig = ctx.obj
    release = run_workflow(run_publish_release(connection, tag_name, load_configuration_or_exit(None)))
    typer.echo(f"Published release {release.tag_name}: {release.html_url}")


@repo_app.command(name="discard")
def discard_release_cli(
    ctx: typer.Context,
    tag_name: Annotated[str, Option("--tag", "-t", "--milestone", "-m", help="Tag of the draft release to delete.")],
) -> None:
    """Delete a draft release."""
    connection: GitHubConnectionConfig = ctx.obj
    release = run_workflow(run_discard_release(connection, tag_name, load_configuration_or_exit(None)))
    typer.echo(f"Discarded draft release {release.tag_name}")


@repo_app.command(name="close")
def close_milestone_cli(
    ctx: typer.Context,
    milestone: Annotated[str, Option("--milestone", "-m", help="Title of the milestone to close.")],
    config_path: Annotated[Path | None, Option("--config", help="Path to the release notes configuration file.")] = None,
) -> None:
    """Close a milestone, commenting on its closed issues when close.use-issue-comments is set."""
    connection: GitHubConnectionConfig = ctx.obj
    config = load_configuration_or_exit(config_path)
    closure = run_workflow(run_close_milestone(connection, milestone, config))
    typer.echo(f"Closed milestone {closure.milestone.title}")
    if config.close.use_issue_comments:
        typer.echo(
            f"Commented on {len(closure.commented)} issues, "
            f"{len(closure.already_commented)} already commented, {len(closure.failed)} failed"
        )


@repo_app.command(name="open")
def open_milestone_cli(
    ctx: typer.Context,
    milestone: Annotated[str, Option("--milestone", "-m", help="Title of the milestone to reopen.")],
) -> None:
    """Reopen a closed milestone."""
    connection: GitHubConnectionConfig = ctx.obj
    reopened = run_workflow(run_open_milestone(connection, milestone))
    typer.echo(f"Opened milestone {reopened.title}")


@repo_app.command(name="linked-issues")
def linked_issues_cli(
    ctx: typer.Context,
    issue_number: Annotated[int, Argument(help="Issue or pull request number.")],
    strategy: Annotated[
        LinkResolutionStrategy,
        Option(
            "--strategy",
            help="'active' replays every link event; 'most-recent' only considers the latest connect/disconnect pair.",
        ),
    ] = LinkResolutionStrategy.ACTIVE,
) -> None:
    """List the issues and pull requests currently linked to an issue or pull request."""
    connection: GitHubConnectionConfig = ctx.obj
    linked = run_workflow(run_resolve_linked_issues(connection, issue_number, strategy))
    if not linked:
        typer.echo(f"No issues or pull requests are linked to #{issue_number}")
        return
    for issue in linked:
        typer.echo(f"#{issue.number} [{issue.issue_type}] {issue.title} {issue.html_url}")


@repo_app.command(name="export")
def export_cli(
    ctx: typer.Context,
    tag_name: Annotated[str | None, Option("--tag", help="Only export the release with this tag.")] = None,
    skip_prereleases: Annotated[bool, Option("--skip-prereleases", help="Leave prereleases out of the export.")] = False,
    config_path: Annotated[Path | None, Option("--config", help="Path to the release notes configuration file.")] = None,
    output: Annotated[Path | None, Option("--output", "-o", help="File to write the export to. Defaults to stdout.")] = None,
) -> None:
    """Export existing releases, newest first, to a single markdown document."""
    connection: GitHubConnectionConfig = ctx.obj
    config = load_configuration_or_exit(config_path)
    content = run_workflow(run_export_releases(connection, config, tag_name=tag_name, skip_prereleases=skip_prereleases))
    write_output(content, output)


@repo_app.command(name="create-labels")
def create_labels_cli(ctx: typer.Context) -> None:
    """Replace every label of the repository with the default label set."""
    connection: GitHubConnectionConfig = ctx.obj
    created = run_workflow(run_create_labels(connection))
    typer.echo(f"Created {len(created)} labels:")
    for label in created:
        typer.echo(f"  - {label.name} (#{label.color})")


typer_app.add_typer(repo_app, name="repo")


if __name__ == "__main__":
    typer_app()
