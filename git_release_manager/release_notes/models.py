"""Data models for release notes generation."""

from dataclasses import dataclass, field

from ..provider.models import Issue, Milestone


@dataclass(frozen=True)
class IssueGroup:
    """Issues sharing one include label, rendered under a single heading."""

    label: str
    heading: str
    issues: list[Issue]


@dataclass(frozen=True)
class ReleaseNotesFooter:
    """Footer appended after the issue groups."""

    heading: str
    content: str


@dataclass(frozen=True)
class ReleaseNotesDocument:
    """Ordered sections of a release notes document."""

    summary: str
    description: str
    groups: list[IssueGroup] = field(default_factory=list)
    footer: ReleaseNotesFooter | None = None


@dataclass(frozen=True)
class MilestoneClosure:
    """Outcome of closing a milestone."""

    milestone: Milestone
    commented: list[Issue] = field(default_factory=list)
    already_commented: list[Issue] = field(default_factory=list)
    failed: list[Issue] = field(default_factory=list)
