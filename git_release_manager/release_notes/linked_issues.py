"""Resolution of linked issues and pull requests from connect/disconnect timelines."""

from typing import Iterable

import structlog

from ..provider.abc import VcsProviderBase
from ..provider.models import Issue, LinkResolutionStrategy, TimelineEvent, TimelineEventType

logger = structlog.get_logger(__name__)


def resolve_most_recent_link(events: Iterable[TimelineEvent]) -> int | None:
    """Return the subject of the most recent connected event if it is still linked.

    Only the latest connected event and the latest disconnected event are
    considered. A disconnected event at the same instant as the connected
    event severs the link.
    """
    newest_first = sorted(events, key=lambda event: event.created_at, reverse=True)
    connected = next((e for e in newest_first if e.event_type is TimelineEventType.CONNECTED), None)
    disconnected = next((e for e in newest_first if e.event_type is TimelineEventType.DISCONNECTED), None)

    if connected is None:
        return None
    if disconnected is None:
        return connected.subject_number
    if disconnected.created_at >= connected.created_at:
        return None
    return connected.subject_number


def resolve_active_links(events: Iterable[TimelineEvent]) -> list[int]:
    """Return every subject that is linked once the whole timeline has been replayed.

    Events are replayed oldest first; on equal timestamps connections are
    applied before disconnections. A disconnected event without a subject
    unlinks the most recently connected subject that is still linked.
    """
    ordered = sorted(
        events,
        key=lambda event: (event.created_at, event.event_type is TimelineEventType.DISCONNECTED),
    )
    # Insertion order tracks connection recency.
    linked: dict[int, None] = {}
    for event in ordered:
        if event.event_type is TimelineEventType.CONNECTED:
            if event.subject_number is None:
                continue
            linked.pop(event.subject_number, None)
            linked[event.subject_number] = None
        elif event.subject_number is not None:
            linked.pop(event.subject_number, None)
        elif linked:
            linked.pop(next(reversed(linked)))
    return sorted(linked)


def resolve_linked_numbers(events: list[TimelineEvent], strategy: LinkResolutionStrategy = LinkResolutionStrategy.ACTIVE) -> list[int]:
    """Resolve linked subject numbers with the requested strategy."""
    if strategy is LinkResolutionStrategy.MOST_RECENT:
        subject = resolve_most_recent_link(events)
        return [] if subject is None else [subject]
    return resolve_active_links(events)


async def resolve_linked_issues(
    provider: VcsProviderBase,
    issue_number: int,
    strategy: LinkResolutionStrategy = LinkResolutionStrategy.ACTIVE,
) -> list[Issue]:
    """Fetch the issues and pull requests currently linked to ``issue_number``.

    Raises:
        NotFoundError: If ``issue_number`` is neither an issue nor a pull request.
    """
    events = await provider.list_link_events(issue_number)
    numbers = resolve_linked_numbers(events, strategy)
    logger.info(
        "Resolved linked issues",
        owner=provider.owner,
        repo=provider.repo_name,
        issue_number=issue_number,
        strategy=strategy.value,
        event_count=len(events),
        linked=numbers,
    )
    linked_issues: list[Issue] = []
    for number in numbers:
        linked_issues.append(await provider.get_issue(number))
    return linked_issues
