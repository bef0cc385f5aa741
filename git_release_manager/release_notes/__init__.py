"""Release notes generation module."""

from .builder import ReleaseNotesBuilder
from .classifier import LabelClassifier
from .exceptions import EmptyReleaseError, LabelValidationError, ReleaseStateError
from .exporter import ReleaseExporter
from .linked_issues import resolve_linked_issues
from .markdown import MarkdownWriter
from .milestone_state import close_milestone, open_milestone
from .milestones import MilestoneResolver
from .models import IssueGroup, MilestoneClosure, ReleaseNotesDocument, ReleaseNotesFooter
from .releases import ReleaseManager

__all__ = [
    "ReleaseNotesBuilder",
    "LabelClassifier",
    "MilestoneResolver",
    "MarkdownWriter",
    "ReleaseExporter",
    "ReleaseManager",
    "close_milestone",
    "open_milestone",
    "resolve_linked_issues",
    "IssueGroup",
    "ReleaseNotesDocument",
    "ReleaseNotesFooter",
    "MilestoneClosure",
    "LabelValidationError",
    "EmptyReleaseError",
    "ReleaseStateError",
]
