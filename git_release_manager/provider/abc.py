"""Base ABC for version control providers."""

from abc import ABC, abstractmethod

from .models import (
    Issue,
    IssueComment,
    ItemState,
    ItemStateFilter,
    Label,
    LinkResolutionStrategy,
    Milestone,
    Release,
    TimelineEvent,
)


class VcsProviderBase(ABC):
    """Capabilities a version control backend must offer to build release notes.

    Every operation is bound to the single repository the provider was
    created for. Operations raise ``NotFoundError``, ``ForbiddenError`` or
    ``ApiError`` from ``git_release_manager.provider.exceptions``.
    """

    owner: str
    repo_name: str

    # Milestones
    @abstractmethod
    async def list_milestones(self, state: ItemStateFilter = ItemStateFilter.ALL) -> list[Milestone]:
        """List all milestones of the repository."""
        pass

    @abstractmethod
    async def get_milestone(self, title: str, state: ItemStateFilter = ItemStateFilter.ALL) -> Milestone:
        """Get the milestone whose title matches exactly."""
        pass

    @abstractmethod
    async def set_milestone_state(self, milestone: Milestone, state: ItemState) -> Milestone:
        """Open or close a milestone."""
        pass

    # Issues
    @abstractmethod
    async def list_issues(self, milestone: Milestone, state: ItemStateFilter = ItemStateFilter.ALL) -> list[Issue]:
        """List issues and pull requests assigned to a milestone."""
        pass

    @abstractmethod
    async def get_issue(self, issue_number: int) -> Issue:
        """Get a single issue or pull request by its public number."""
        pass

    @abstractmethod
    async def list_issue_comments(self, issue: Issue) -> list[IssueComment]:
        """List the comments of an issue or pull request."""
        pass

    @abstractmethod
    async def create_issue_comment(self, issue: Issue, body: str) -> IssueComment:
        """Comment on an issue or pull request."""
        pass

    # Labels
    @abstractmethod
    async def list_labels(self) -> list[Label]:
        """List labels for the repository."""
        pass

    @abstractmethod
    async def create_label(self, label: Label) -> Label:
        """Create a label for the repository."""
        pass

    @abstractmethod
    async def delete_label(self, label: Label) -> None:
        """Delete a label from the repository."""
        pass

    # Releases
    @abstractmethod
    async def list_releases(self, skip_prereleases: bool = False) -> list[Release]:
        """List releases, newest first by creation time."""
        pass

    @abstractmethod
    async def get_release(self, tag_name: str) -> Release | None:
        """Get the release, draft or published, with the given tag, or None if there is none."""
        pass

    @abstractmethod
    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = True,
        prerelease: bool = False,
        target_commitish: str | None = None,
    ) -> Release:
        """Create a release for a tag, which is created on publish if it does not exist yet."""
        pass

    @abstractmethod
    async def update_release(self, release: Release) -> Release:
        """Update the name, body, tag, target and draft or prerelease flags of a release."""
        pass

    @abstractmethod
    async def publish_release(self, release: Release) -> Release:
        """Publish a draft release."""
        pass

    @abstractmethod
    async def delete_release(self, release: Release) -> None:
        """Delete a release."""
        pass

    # Commits
    @abstractmethod
    async def count_commits_between(self, base: str | None, head: str) -> int:
        """Count commits in ``head`` that are not in ``base``.

        Returns 0 when ``base`` (or ``head``) does not exist as a ref.
        """
        pass

    @abstractmethod
    def get_commits_url(self, head: str, base: str | None = None) -> str:
        """Web URL showing the commits between two refs, or up to ``head``."""
        pass

    @abstractmethod
    def get_milestone_query_string(self) -> str:
        """Query string appended to a milestone URL to show its closed issues."""
        pass

    # Linked issues
    @abstractmethod
    async def list_link_events(self, issue_number: int) -> list[TimelineEvent]:
        """List connected/disconnected timeline events of an issue or pull request."""
        pass

    @abstractmethod
    async def resolve_linked_issues(self, issue_number: int, strategy: LinkResolutionStrategy = LinkResolutionStrategy.ACTIVE) -> list[Issue]:
        """Resolve the issues and pull requests currently linked to an issue or pull request."""
        pass
