"""Resolution of the target and previous milestones of a release."""

import structlog
from packaging.version import Version

from ..provider.exceptions import NotFoundError
from ..provider.models import Milestone

logger = structlog.get_logger(__name__)


class MilestoneResolver:
    """Finds milestones by title and by version order."""

    def __init__(self, milestones: list[Milestone]) -> None:
        """Initialize with a snapshot of the repository's milestones."""
        self.milestones = milestones

    def resolve_target(self, title: str) -> Milestone:
        """Return the milestone whose title matches ``title`` exactly.

        Raises:
            NotFoundError: If no milestone has that title.
        """
        for milestone in self.milestones:
            if milestone.title == title:
                return milestone
        raise NotFoundError(f"Could not find milestone for '{title}'.")

    def resolve_previous(self, target: Milestone) -> Milestone | None:
        """Return the milestone with the highest version lower than the target's.

        Milestone titles are not guaranteed to be created in order, so the
        version parsed from the title decides what came before. Milestones
        sharing a version are collapsed to the first one encountered.
        """
        by_version: dict[Version, Milestone] = {}
        for milestone in sorted(self.milestones, key=lambda m: m.version, reverse=True):
            by_version.setdefault(milestone.version, milestone)

        for version, milestone in by_version.items():
            if version < target.version:
                logger.debug("Resolved previous milestone", target=target.title, previous=milestone.title)
                return milestone

        logger.debug("No previous milestone found", target=target.title)
        return None
