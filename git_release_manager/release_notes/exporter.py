"""Export of existing releases to a single markdown document."""

import re

import structlog

from ..configuration.models import ExportConfig
from ..provider.abc import VcsProviderBase
from ..provider.models import Release

logger = structlog.get_logger(__name__)


class ReleaseExporter:
    """Renders releases, newest first, as ``# name`` sections followed by their bodies."""

    def __init__(self, provider: VcsProviderBase, config: ExportConfig) -> None:
        """Initialize with a provider and the export configuration."""
        self.provider = provider
        self.config = config

    def release_title(self, release: Release) -> str:
        """Title of a release, optionally suffixed with its creation date."""
        title = release.name or release.tag_name
        if self.config.include_created_date_in_title and release.created_at is not None:
            title = f"{title} ({release.created_at.strftime(self.config.created_date_string_format)})"
        return title

    def release_body(self, release: Release) -> str:
        """Body of a release with the configured pattern removed."""
        body = release.body or ""
        if self.config.perform_regex_removal and self.config.regex_text:
            flags = re.MULTILINE if self.config.multiline_regex else re.DOTALL
            body = re.sub(self.config.regex_text, "", body, flags=flags)
        return body.strip()

    def render(self, releases: list[Release]) -> str:
        """Render releases in the order given."""
        sections = [f"# {self.release_title(release)}\n\n{self.release_body(release)}\n" for release in releases]
        return "\n".join(sections)

    async def export(self, tag_name: str | None = None, skip_prereleases: bool = False) -> str:
        """Export every release, or only the one tagged ``tag_name``."""
        releases = await self.provider.list_releases(skip_prereleases=skip_prereleases)
        if tag_name is not None:
            releases = [release for release in releases if release.tag_name == tag_name]
        logger.info("Exporting releases", owner=self.provider.owner, repo=self.provider.repo_name, releases=len(releases), tag_name=tag_name)
        return self.render(releases)
