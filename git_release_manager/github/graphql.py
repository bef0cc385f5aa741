"""GraphQL query and response parsing for connected/disconnected timeline events."""

from datetime import datetime
from typing import Any

from git_release_manager.provider.models import TimelineEvent, TimelineEventType

# The number may refer to an issue or to a pull request, so the same
# selection is made on both fields and whichever resolves is used.
_TIMELINE_FIELD_TEMPLATE = """
    {field}(number: $issueNumber) {{
      timelineItems(first: $pageSize, after: $after, itemTypes: [CONNECTED_EVENT, DISCONNECTED_EVENT]) {{
        pageInfo {{
          hasNextPage
          endCursor
        }}
        nodes {{
          __typename
          ... on ConnectedEvent {{
            createdAt
            source {{ ...LinkedNumber }}
            subject {{ ...LinkedNumber }}
          }}
          ... on DisconnectedEvent {{
            createdAt
            source {{ ...LinkedNumber }}
            subject {{ ...LinkedNumber }}
          }}
        }}
      }}
    }}"""

CONNECT_AND_DISCONNECT_EVENTS_QUERY = (
    """
query ConnectAndDisconnectEvents($repoOwner: String!, $repoName: String!, $issueNumber: Int!, $pageSize: Int!, $after: String) {
  repository(owner: $repoOwner, name: $repoName) {"""
    + _TIMELINE_FIELD_TEMPLATE.format(field="issue")
    + _TIMELINE_FIELD_TEMPLATE.format(field="pullRequest")
    + """
  }
}

fragment LinkedNumber on ReferencedSubject {
  __typename
  ... on Issue {
    number
  }
  ... on PullRequest {
    number
  }
}
"""
)


def select_timeline(data: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return the ``timelineItems`` connection of whichever field resolved."""
    repository = (data or {}).get("repository") or {}
    for field in ("issue", "pullRequest"):
        node = repository.get(field)
        if node:
            return node.get("timelineItems") or {"nodes": [], "pageInfo": {"hasNextPage": False}}
    return None


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _linked_number(node: dict[str, Any], issue_number: int) -> int | None:
    """Number of the counterpart of ``issue_number`` in a link event."""
    for key in ("subject", "source"):
        number = (node.get(key) or {}).get("number")
        if number is not None and number != issue_number:
            return int(number)
    return None


def parse_timeline_nodes(nodes: list[dict[str, Any]], issue_number: int) -> list[TimelineEvent]:
    """Convert timeline nodes of ``issue_number`` into timeline events, skipping unknown types."""
    events: list[TimelineEvent] = []
    known_types = {event_type.value: event_type for event_type in TimelineEventType}
    for node in nodes:
        event_type = known_types.get(node.get("__typename", ""))
        if event_type is None or not node.get("createdAt"):
            continue
        events.append(
            TimelineEvent(
                event_type=event_type,
                created_at=_parse_timestamp(node["createdAt"]),
                subject_number=_linked_number(node, issue_number),
            )
        )
    return events
