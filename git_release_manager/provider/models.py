"""Provider-agnostic data models for milestones, issues, labels and releases."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from packaging.version import InvalidVersion, Version

LOWEST_VERSION = Version("0")


class ItemStateFilter(str, Enum):
    """State filter applied when listing milestones and issues."""

    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class ItemState(str, Enum):
    """State a milestone or issue can be set to."""

    OPEN = "open"
    CLOSED = "closed"


class LinkResolutionStrategy(str, Enum):
    """How linked issues are derived from a timeline of link events."""

    ACTIVE = "active"
    MOST_RECENT = "most-recent"


class TimelineEventType(str, Enum):
    """Kinds of timeline events used to resolve linked issues."""

    CONNECTED = "ConnectedEvent"
    DISCONNECTED = "DisconnectedEvent"


def parse_milestone_version(title: str) -> Version:
    """Parse a milestone title into a comparable version.

    A leading ``v`` is tolerated. Titles that are not versions compare as the
    lowest possible version.
    """
    candidate = title.strip()
    if candidate[:1] in ("v", "V"):
        candidate = candidate[1:]
    try:
        return Version(candidate)
    except InvalidVersion:
        return LOWEST_VERSION


@dataclass(frozen=True)
class Milestone:
    """A milestone snapshot fetched from the provider."""

    number: int
    title: str
    description: str = ""
    html_url: str = ""
    state: str = "open"
    version: Version = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Derive the comparable version from the title."""
        object.__setattr__(self, "version", parse_milestone_version(self.title))


@dataclass(frozen=True)
class Issue:
    """An issue or pull request snapshot fetched from the provider."""

    number: int
    title: str
    html_url: str
    labels: tuple[str, ...] = ()
    is_pull_request: bool = False
    state: str = "closed"

    @property
    def issue_type(self) -> str:
        """Human readable kind of this issue."""
        return "Pull Request" if self.is_pull_request else "Issue"


@dataclass(frozen=True)
class Label:
    """A repository label. Names compare case-insensitively."""

    name: str
    color: str
    description: str | None = None

    @property
    def key(self) -> str:
        """Case-insensitive comparison key for the label name."""
        return self.name.casefold()


@dataclass(frozen=True)
class IssueComment:
    """A comment left on an issue or pull request."""

    id: int
    body: str
    author: str | None = None
    created_at: datetime | None = None
    html_url: str = ""


@dataclass(frozen=True)
class Release:
    """A published or draft release."""

    id: int
    tag_name: str
    name: str | None
    body: str | None
    draft: bool
    prerelease: bool
    created_at: datetime | None = None
    html_url: str = ""
    target_commitish: str | None = None


@dataclass(frozen=True)
class TimelineEvent:
    """A connected or disconnected event taken from an issue timeline.

    ``subject_number`` is the public number of the other issue or pull
    request. It is always present on connected events and may be absent on
    disconnected events.
    """

    event_type: TimelineEventType
    created_at: datetime
    subject_number: int | None = None
