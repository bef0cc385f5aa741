"""Validation and grouping of issues by their configured labels."""

import structlog

from ..configuration.models import ReleaseNotesConfig
from ..provider.models import Issue
from .exceptions import LabelValidationError
from .models import IssueGroup

logger = structlog.get_logger(__name__)


class LabelClassifier:
    """Classifies milestone issues using the include and exclude labels of the configuration."""

    def __init__(self, config: ReleaseNotesConfig) -> None:
        """Initialize with the release notes configuration."""
        self.config = config
        self._include = {label.casefold() for label in config.issue_labels_include}
        self._exclude = {label.casefold() for label in config.issue_labels_exclude}

    def count_matches(self, issue: Issue) -> tuple[int, int]:
        """Return how many of the issue's labels are included and excluded labels."""
        included = sum(1 for label in issue.labels if label.casefold() in self._include)
        excluded = sum(1 for label in issue.labels if label.casefold() in self._exclude)
        return included, excluded

    def is_included(self, issue: Issue) -> bool:
        """Validate an issue and report whether it belongs in the release notes.

        Raises:
            LabelValidationError: If the issue does not carry exactly one
                include or exclude label.
        """
        included, excluded = self.count_matches(issue)
        if included + excluded != 1:
            logger.error(
                "Issue does not have exactly one release notes label",
                issue_url=issue.html_url,
                labels=list(issue.labels),
                included=included,
                excluded=excluded,
            )
            raise LabelValidationError(issue.html_url, self.config.all_issue_labels)
        return included == 1

    def classify(self, issues: list[Issue]) -> list[Issue]:
        """Validate every issue and keep the included ones in provider order."""
        retained = [issue for issue in issues if self.is_included(issue)]
        logger.debug("Classified issues", total=len(issues), retained=len(retained))
        return retained

    def heading_for(self, label: str, count: int) -> str:
        """Heading for a group of ``count`` issues carrying ``label``."""
        alias = self.config.find_label_alias(label)
        if count == 1:
            return alias.header if alias else label
        return alias.plural if alias else f"{label}s"

    def group(self, issues: list[Issue]) -> list[IssueGroup]:
        """Group issues by include label in the configured label order, skipping empty groups."""
        groups: list[IssueGroup] = []
        seen: set[str] = set()
        for label in self.config.issue_labels_include:
            key = label.casefold()
            if key in seen:
                continue
            seen.add(key)
            members = [issue for issue in issues if any(issue_label.casefold() == key for issue_label in issue.labels)]
            if members:
                groups.append(IssueGroup(label=label, heading=self.heading_for(label, len(members)), issues=members))
        return groups
