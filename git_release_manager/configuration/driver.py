"""Async workflows behind the CLI entry points."""

import structlog

from git_release_manager.configuration.models import GitHubConnectionConfig, ReleaseNotesConfig
from git_release_manager.github.adapter import GitHubKitAdapter
from git_release_manager.provider.models import Issue, Label, LinkResolutionStrategy, Milestone, Release
from git_release_manager.release_notes.builder import ReleaseNotesBuilder
from git_release_manager.release_notes.exporter import ReleaseExporter
from git_release_manager.release_notes.labels import replace_labels
from git_release_manager.release_notes.milestone_state import close_milestone, open_milestone
from git_release_manager.release_notes.models import MilestoneClosure
from git_release_manager.release_notes.releases import ReleaseManager

logger = structlog.get_logger(__name__)


async def create_adapter(connection: GitHubConnectionConfig) -> GitHubKitAdapter:
    """Create a GitHub adapter for the configured repository."""
    return await GitHubKitAdapter.create(
        repo=connection.repo,
        github_auth_type=connection.github_authentication_type,
        github_pat_token=connection.github_pat_token,
        github_app_id=connection.github_app_id,
        github_app_private_key_path=connection.github_app_private_key_path,
        github_app_installation_id=connection.github_app_installation_id,
        github_api_url=connection.github_api_url,
    )


async def run_build_release_notes(connection: GitHubConnectionConfig, milestone_title: str, config: ReleaseNotesConfig) -> str:
    """Build the markdown release notes of a milestone."""
    adapter = await create_adapter(connection)
    return await ReleaseNotesBuilder(adapter, config).build(milestone_title)


async def run_resolve_linked_issues(
    connection: GitHubConnectionConfig,
    issue_number: int,
    strategy: LinkResolutionStrategy = LinkResolutionStrategy.ACTIVE,
) -> list[Issue]:
    """Resolve the issues and pull requests linked to an issue or pull request."""
    adapter = await create_adapter(connection)
    return await adapter.resolve_linked_issues(issue_number, strategy)


async def run_export_releases(
    connection: GitHubConnectionConfig,
    config: ReleaseNotesConfig,
    tag_name: str | None = None,
    skip_prereleases: bool = False,
) -> str:
    """Export existing releases to a single markdown document."""
    adapter = await create_adapter(connection)
    return await ReleaseExporter(adapter, config.export).export(tag_name=tag_name, skip_prereleases=skip_prereleases)


async def run_create_labels(connection: GitHubConnectionConfig) -> list[Label]:
    """Replace the repository's labels with the default label set."""
    adapter = await create_adapter(connection)
    return await replace_labels(adapter)


async def run_create_release(
    connection: GitHubConnectionConfig,
    milestone_title: str,
    config: ReleaseNotesConfig,
    name: str | None = None,
    target_commitish: str | None = None,
    prerelease: bool = False,
) -> Release:
    """Create or refresh the draft release of a milestone."""
    adapter = await create_adapter(connection)
    return await ReleaseManager(adapter, config).create_from_milestone(
        milestone_title, name=name, target_commitish=target_commitish, prerelease=prerelease
    )


async def run_publish_release(connection: GitHubConnectionConfig, tag_name: str, config: ReleaseNotesConfig) -> Release:
    """Publish the draft release with a tag."""
    adapter = await create_adapter(connection)
    return await ReleaseManager(adapter, config).publish(tag_name)


async def run_discard_release(connection: GitHubConnectionConfig, tag_name: str, config: ReleaseNotesConfig) -> Release:
    """Delete the draft release with a tag."""
    adapter = await create_adapter(connection)
    return await ReleaseManager(adapter, config).discard(tag_name)


async def run_close_milestone(connection: GitHubConnectionConfig, milestone_title: str, config: ReleaseNotesConfig) -> MilestoneClosure:
    """Close a milestone, commenting on its issues if configured."""
    adapter = await create_adapter(connection)
    return await close_milestone(adapter, milestone_title, config.close)


async def run_open_milestone(connection: GitHubConnectionConfig, milestone_title: str) -> Milestone:
    """Reopen a closed milestone."""
    adapter = await create_adapter(connection)
    return await open_milestone(adapter, milestone_title)
