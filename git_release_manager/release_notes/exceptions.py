"""Exceptions raised while building release notes."""


class LabelValidationError(Exception):
    """Raised when an issue does not carry exactly one include or exclude label."""

    def __init__(self, issue_url: str, configured_labels: list[str]) -> None:
        """Initializes the exception with the offending issue and the configured labels."""
        if len(configured_labels) > 1:
            expected = f"{', '.join(configured_labels[:-1])} or {configured_labels[-1]}"
        else:
            expected = ", ".join(configured_labels)
        super().__init__(f"Bad Issue {issue_url} expected to find a single label with either {expected}.")
        self.issue_url = issue_url
        self.configured_labels = configured_labels


class EmptyReleaseError(Exception):
    """Raised when a milestone has no issues that can be reported."""

    def __init__(self, milestone_title: str) -> None:
        """Initializes the exception with the milestone title."""
        super().__init__(
            f"No closed issues have been found for milestone {milestone_title}, or all assigned issues are meant to be "
            "excluded from release notes, aborting creation of release."
        )
        self.milestone_title = milestone_title


class ReleaseStateError(Exception):
    """Raised when a release is not in the state an operation needs, such as discarding a published release."""

    def __init__(self, tag_name: str, message: str) -> None:
        """Initializes the exception with the release tag and what went wrong."""
        super().__init__(message)
        self.tag_name = tag_name
