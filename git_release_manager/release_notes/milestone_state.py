"""Open and close milestones."""

import structlog

from ..configuration.models import CloseConfig
from ..provider.abc import VcsProviderBase
from ..provider.exceptions import ForbiddenError, NotFoundError
from ..provider.models import ItemState, ItemStateFilter, Milestone
from .models import MilestoneClosure

logger = structlog.get_logger(__name__)


async def close_milestone(provider: VcsProviderBase, milestone_title: str, config: CloseConfig) -> MilestoneClosure:
    """Close an open milestone and, if configured, comment on its closed issues.

    An issue that already carries the comment is not commented on again.
    Issues that cannot be commented on are reported in ``failed`` and do
    not stop the remaining comments.
    """
    milestone = await provider.get_milestone(milestone_title, ItemStateFilter.OPEN)
    closed = await provider.set_milestone_state(milestone, ItemState.CLOSED)
    if not config.use_issue_comments:
        return MilestoneClosure(milestone=closed)

    comment = config.render_issue_comment(milestone.title, provider.owner, provider.repo_name)
    closure = MilestoneClosure(milestone=closed)
    for issue in await provider.list_issues(milestone, ItemStateFilter.CLOSED):
        comments = await provider.list_issue_comments(issue)
        if any(existing.body.strip() == comment.strip() for existing in comments):
            closure.already_commented.append(issue)
            continue
        try:
            await provider.create_issue_comment(issue, comment)
        except (ForbiddenError, NotFoundError) as exc:
            logger.warning("Unable to comment on issue", issue_number=issue.number, milestone=milestone.title, error=str(exc))
            closure.failed.append(issue)
            continue
        closure.commented.append(issue)
    logger.info(
        "Closed milestone",
        milestone=milestone.title,
        commented=len(closure.commented),
        already_commented=len(closure.already_commented),
        failed=len(closure.failed),
    )
    return closure


async def open_milestone(provider: VcsProviderBase, milestone_title: str) -> Milestone:
    """Reopen a closed milestone."""
    milestone = await provider.get_milestone(milestone_title, ItemStateFilter.CLOSED)
    return await provider.set_milestone_state(milestone, ItemState.OPEN)
