"""Create, publish and discard the release of a milestone."""

from dataclasses import replace

import structlog

from ..configuration.models import ReleaseNotesConfig
from ..provider.abc import VcsProviderBase
from ..provider.exceptions import NotFoundError
from ..provider.models import Release
from .builder import ReleaseNotesBuilder
from .exceptions import ReleaseStateError

logger = structlog.get_logger(__name__)


class ReleaseManager:
    """Manages the release whose tag is the title of a milestone."""

    def __init__(self, provider: VcsProviderBase, config: ReleaseNotesConfig) -> None:
        """Initialize with a provider bound to a repository and the release notes configuration."""
        self.provider = provider
        self.config = config

    async def get_existing_release(self, tag_name: str) -> Release:
        """Get the release with ``tag_name``, raising ``NotFoundError`` if there is none."""
        release = await self.provider.get_release(tag_name)
        if release is None:
            raise NotFoundError(f"Unable to find a release with tag '{tag_name}'.")
        return release

    async def create_from_milestone(
        self,
        milestone_title: str,
        name: str | None = None,
        target_commitish: str | None = None,
        prerelease: bool = False,
    ) -> Release:
        """Create a draft release from the notes of a milestone, or refresh the notes of its existing release.

        The release is tagged with the milestone title and targets
        ``target_commitish``, or the configured default branch.

        Raises:
            ReleaseStateError: If the release is already published and updating
                published releases is not allowed.
        """
        body = await ReleaseNotesBuilder(self.provider, self.config).build(milestone_title)
        release = await self.provider.get_release(milestone_title)

        if release is None:
            return await self.provider.create_release(
                tag_name=milestone_title,
                name=name or milestone_title,
                body=body,
                draft=True,
                prerelease=prerelease,
                target_commitish=target_commitish or self.config.default_branch,
            )

        if not release.draft and not self.config.create.allow_update_to_published_release:
            logger.error("Release already published", tag_name=milestone_title, release_url=release.html_url)
            raise ReleaseStateError(
                milestone_title,
                f"Release with tag '{milestone_title}' is not in draft state, so not updating it. "
                "Set create.allow-update-to-published-release to update published releases.",
            )

        logger.info("Updating existing release", tag_name=milestone_title, draft=release.draft)
        updated = replace(
            release,
            name=name or release.name,
            body=body,
            prerelease=prerelease,
            target_commitish=target_commitish or release.target_commitish,
        )
        return await self.provider.update_release(updated)

    async def publish(self, tag_name: str) -> Release:
        """Publish the draft release with ``tag_name``."""
        release = await self.get_existing_release(tag_name)
        if not release.draft:
            logger.warning("Release is already published", tag_name=tag_name)
        return await self.provider.publish_release(release)

    async def discard(self, tag_name: str) -> Release:
        """Delete the draft release with ``tag_name``.

        Raises:
            ReleaseStateError: If the release has been published.
        """
        release = await self.get_existing_release(tag_name)
        if not release.draft:
            raise ReleaseStateError(tag_name, f"Release with tag '{tag_name}' is published and cannot be discarded.")
        await self.provider.delete_release(release)
        return release
