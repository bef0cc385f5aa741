"""Default label set and its synchronization to a repository."""

import structlog

from ..provider.abc import VcsProviderBase
from ..provider.models import Label

logger = structlog.get_logger(__name__)

DEFAULT_LABELS: list[Label] = [
    Label(name="Breaking change", color="b60205", description="Functionality breaking changes"),
    Label(name="Bug", color="ee0701", description="Something isn't working"),
    Label(name="Build", color="009800", description="Build related issue"),
    Label(name="Documentation", color="d4c5f9", description="Related to documentation"),
    Label(name="Feature", color="84b6eb", description="Request for a new feature"),
    Label(name="Good First Issue", color="7057ff", description="Good for newcomers"),
    Label(name="Help Wanted", color="33aa3f", description="Extra attention is needed"),
    Label(name="Improvement", color="207de5", description="Improvement of an existing feature"),
    Label(name="Internal Refactoring", color="ffd700", description="Internal changes that need no release notes"),
    Label(name="Question", color="cc317c", description="Further information is requested"),
]


async def replace_labels(provider: VcsProviderBase, labels: list[Label] | None = None) -> list[Label]:
    """Delete every label of the repository and create ``labels`` (the defaults if omitted)."""
    desired = DEFAULT_LABELS if labels is None else labels
    existing = await provider.list_labels()
    logger.info("Replacing repository labels", owner=provider.owner, repo=provider.repo_name, existing=len(existing), desired=len(desired))
    for label in existing:
        await provider.delete_label(label)
    created: list[Label] = []
    for label in desired:
        created.append(await provider.create_label(label))
    return created
