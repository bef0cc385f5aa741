"""GitHub provider adapter for the githubkit library."""

from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import GraphQLFailed, RequestFailed
from githubkit.utils import UNSET
from githubkit.versions.latest import models as github_models

from git_release_manager.configuration.models import GitHubAuthenticationType
from git_release_manager.provider.abc import VcsProviderBase
from git_release_manager.provider.exceptions import ApiError, ForbiddenError, NotFoundError, VcsProviderError
from git_release_manager.provider.models import (
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
from git_release_manager.provider.pagination import PAGE_SIZE, fetch_all_pages
from git_release_manager.release_notes.linked_issues import resolve_linked_issues
from git_release_manager.utils.constants import GITHUB_API_URL, MILESTONE_CLOSED_QUERY_STRING
from git_release_manager.utils.github import last_page_from_links, split_repository_in_configuration, web_url_from_api_url
from git_release_manager.utils.retry import retry_on_rate_limit

from .client import GitHubClient, get_github_client
from .graphql import CONNECT_AND_DISCONNECT_EVENTS_QUERY, parse_timeline_nodes, select_timeline

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

MISSING_REF_STATUS_CODES = (404, 422)
"""Status codes GitHub answers with when a compared ref does not exist."""


def translate_github_errors(func: F) -> F:
    """Decorator translating githubkit failures into provider errors."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except VcsProviderError:
            raise
        except RequestFailed as exc:
            status_code = exc.response.status_code
            url = getattr(exc.response, "url", None)
            logger.error("GitHub request failed", function=func.__name__, status_code=status_code, url=str(url))
            if status_code == 404:
                raise NotFoundError(f"GitHub resource not found in {func.__name__}: {url}") from exc
            if status_code == 403:
                raise ForbiddenError(f"GitHub denied access in {func.__name__}: {url}") from exc
            raise ApiError(f"GitHub {status_code} error in {func.__name__}: {exc}") from exc
        except Exception as exc:
            logger.error("GitHub operation failed", function=func.__name__, error=str(exc), error_type=type(exc).__name__)
            raise ApiError(f"GitHub error in {func.__name__}: {exc}") from exc

    return wrapper  # type: ignore


def _is_set(value: Any) -> bool:
    return value is not None and value is not UNSET


def to_milestone(milestone: github_models.Milestone) -> Milestone:
    """Convert a githubkit milestone."""
    return Milestone(
        number=milestone.number,
        title=milestone.title,
        description=milestone.description or "",
        html_url=milestone.html_url,
        state=milestone.state,
    )


def to_issue(issue: github_models.Issue) -> Issue:
    """Convert a githubkit issue, which may also be a pull request."""
    labels: list[str] = []
    for label in issue.labels:
        name = label if isinstance(label, str) else label.name
        if _is_set(name) and name:
            labels.append(name)
    return Issue(
        number=issue.number,
        title=issue.title,
        html_url=issue.html_url,
        labels=tuple(labels),
        is_pull_request=_is_set(issue.pull_request),
        state=issue.state,
    )


def to_label(label: github_models.Label) -> Label:
    """Convert a githubkit label."""
    return Label(name=label.name, color=label.color, description=label.description)


def to_issue_comment(comment: github_models.IssueComment) -> IssueComment:
    """Convert a githubkit issue comment."""
    return IssueComment(
        id=comment.id,
        body=comment.body if _is_set(comment.body) else "",
        author=comment.user.login if comment.user else None,
        created_at=comment.created_at,
        html_url=comment.html_url,
    )


def to_release(release: github_models.Release) -> Release:
    """Convert a githubkit release."""
    return Release(
        id=release.id,
        tag_name=release.tag_name,
        name=release.name,
        body=release.body if _is_set(release.body) else None,
        draft=release.draft,
        prerelease=release.prerelease,
        created_at=release.created_at,
        html_url=release.html_url,
        target_commitish=release.target_commitish,
    )


class GitHubKitAdapter(VcsProviderBase):
    """GitHub provider adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str, github_api_url: str = GITHUB_API_URL) -> None:
        """Initialize the GitHub provider adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name
        self.web_url = web_url_from_api_url(github_api_url)

    @classmethod
    async def create(
        cls,
        repo: str,
        github_auth_type: GitHubAuthenticationType,
        github_pat_token: str | None = None,
        github_app_id: int | None = None,
        github_app_private_key_path: Path | None = None,
        github_app_installation_id: int | None = None,
        github_api_url: str = GITHUB_API_URL,
    ) -> Self:
        """Create a new GitHub provider adapter.

        Args:
            repo: Repository in 'owner/repo' format
            github_auth_type: Type of authentication (PAT or APP)
            github_pat_token: Personal access token (required for PAT auth)
            github_app_id: GitHub App ID (required for APP auth)
            github_app_private_key_path: Path to private key file (required for APP auth)
            github_app_installation_id: Installation ID (required for APP auth)
            github_api_url: GitHub API URL (defaults to https://api.github.com)

        Returns:
            Configured GitHubKitAdapter instance

        Raises:
            GitHubClientConfigurationError: If the repository is malformed, the private key
                cannot be read, or parameters required by the chosen auth type are missing
        """
        owner, repo_name = await split_repository_in_configuration(repo=repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=github_api_url,
            owner=owner,
            repo_name=repo_name,
        )
        client = get_github_client(
            github_auth_type=github_auth_type,
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
            github_api_url=github_api_url,
        )
        return cls(client, owner, repo_name, github_api_url=github_api_url)

    # Milestones
    @translate_github_errors
    async def list_milestones(self, state: ItemStateFilter = ItemStateFilter.ALL) -> list[Milestone]:
        """List all milestones for the repository, handling pagination."""

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[github_models.Milestone]:
            response: Response[list[github_models.Milestone]] = await self.client.rest.issues.async_list_milestones(
                owner=self.owner, repo=self.repo_name, state=state.value, per_page=PAGE_SIZE, page=page
            )
            return response.parsed_data

        milestones = await fetch_all_pages(_fetch_page)
        logger.info("Fetched milestones", owner=self.owner, repo=self.repo_name, state=state.value, total_milestones=len(milestones))
        return [to_milestone(milestone) for milestone in milestones]

    async def get_milestone(self, title: str, state: ItemStateFilter = ItemStateFilter.ALL) -> Milestone:
        """Get the milestone whose title matches exactly."""
        for milestone in await self.list_milestones(state):
            if milestone.title == title:
                return milestone
        raise NotFoundError(f"Could not find milestone for '{title}'.")

    @translate_github_errors
    @retry_on_rate_limit()
    async def set_milestone_state(self, milestone: Milestone, state: ItemState) -> Milestone:
        """Open or close a milestone."""
        response: Response[github_models.Milestone] = await self.client.rest.issues.async_update_milestone(
            owner=self.owner, repo=self.repo_name, milestone_number=milestone.number, state=state.value
        )
        logger.info("Set milestone state", owner=self.owner, repo=self.repo_name, milestone=milestone.title, state=state.value)
        return to_milestone(response.parsed_data)

    # Issues
    @translate_github_errors
    async def list_issues(self, milestone: Milestone, state: ItemStateFilter = ItemStateFilter.ALL) -> list[Issue]:
        """List issues and pull requests assigned to a milestone, handling pagination."""

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[github_models.Issue]:
            response: Response[list[github_models.Issue]] = await self.client.rest.issues.async_list_for_repo(
                owner=self.owner,
                repo=self.repo_name,
                milestone=str(milestone.number),
                state=state.value,
                per_page=PAGE_SIZE,
                page=page,
            )
            return response.parsed_data

        issues = await fetch_all_pages(_fetch_page)
        logger.info("Fetched issues for milestone", owner=self.owner, repo=self.repo_name, milestone=milestone.title, total_issues=len(issues))
        return [to_issue(issue) for issue in issues]

    @translate_github_errors
    @retry_on_rate_limit()
    async def get_issue(self, issue_number: int) -> Issue:
        """Get an issue or pull request by number."""
        response: Response[github_models.Issue] = await self.client.rest.issues.async_get(
            owner=self.owner, repo=self.repo_name, issue_number=issue_number
        )
        return to_issue(response.parsed_data)

    @translate_github_errors
    async def list_issue_comments(self, issue: Issue) -> list[IssueComment]:
        """List all comments of an issue or pull request, handling pagination."""

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[github_models.IssueComment]:
            response: Response[list[github_models.IssueComment]] = await self.client.rest.issues.async_list_comments(
                owner=self.owner, repo=self.repo_name, issue_number=issue.number, per_page=PAGE_SIZE, page=page
            )
            return response.parsed_data

        comments = await fetch_all_pages(_fetch_page)
        return [to_issue_comment(comment) for comment in comments]

    @translate_github_errors
    @retry_on_rate_limit()
    async def create_issue_comment(self, issue: Issue, body: str) -> IssueComment:
        """Comment on an issue or pull request."""
        response: Response[github_models.IssueComment] = await self.client.rest.issues.async_create_comment(
            owner=self.owner, repo=self.repo_name, issue_number=issue.number, body=body
        )
        logger.debug("Created issue comment", owner=self.owner, repo=self.repo_name, issue_number=issue.number)
        return to_issue_comment(response.parsed_data)

    # Labels
    @translate_github_errors
    async def list_labels(self) -> list[Label]:
        """List all labels for the repository, handling pagination."""

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[github_models.Label]:
            response: Response[list[github_models.Label]] = await self.client.rest.issues.async_list_labels_for_repo(
                owner=self.owner, repo=self.repo_name, per_page=PAGE_SIZE, page=page
            )
            return response.parsed_data

        labels = await fetch_all_pages(_fetch_page)
        return [to_label(label) for label in labels]

    @translate_github_errors
    @retry_on_rate_limit()
    async def create_label(self, label: Label) -> Label:
        """Create a label for the repository."""
        params: dict[str, Any] = {"name": label.name, "color": label.color}
        if label.description is not None:
            params["description"] = label.description
        response: Response[github_models.Label] = await self.client.rest.issues.async_create_label(
            owner=self.owner, repo=self.repo_name, **params
        )
        logger.debug("Created label", owner=self.owner, repo=self.repo_name, label=label.name)
        return to_label(response.parsed_data)

    @translate_github_errors
    @retry_on_rate_limit()
    async def delete_label(self, label: Label) -> None:
        """Delete a label from the repository."""
        await self.client.rest.issues.async_delete_label(owner=self.owner, repo=self.repo_name, name=label.name)
        logger.debug("Deleted label", owner=self.owner, repo=self.repo_name, label=label.name)

    # Releases
    @translate_github_errors
    async def list_releases(self, skip_prereleases: bool = False) -> list[Release]:
        """List all releases for the repository, newest first, handling pagination."""

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[github_models.Release]:
            response: Response[list[github_models.Release]] = await self.client.rest.repos.async_list_releases(
                owner=self.owner, repo=self.repo_name, per_page=PAGE_SIZE, page=page
            )
            return response.parsed_data

        releases = [to_release(release) for release in await fetch_all_pages(_fetch_page)]
        if skip_prereleases:
            releases = [release for release in releases if not release.prerelease]
        releases.sort(key=lambda release: release.created_at.timestamp() if release.created_at else 0.0, reverse=True)
        logger.info("Fetched releases", owner=self.owner, repo=self.repo_name, skip_prereleases=skip_prereleases, total_releases=len(releases))
        return releases

    async def get_release(self, tag_name: str) -> Release | None:
        """Get the release with the given tag.

        The get-by-tag endpoint does not return drafts, so the tag is looked
        up in the full release list instead.
        """
        for release in await self.list_releases():
            if release.tag_name == tag_name:
                return release
        return None

    @translate_github_errors
    @retry_on_rate_limit()
    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = True,
        prerelease: bool = False,
        target_commitish: str | None = None,
    ) -> Release:
        """Create a release for a tag."""
        params: dict[str, Any] = {"tag_name": tag_name, "name": name, "body": body, "draft": draft, "prerelease": prerelease}
        if target_commitish:
            params["target_commitish"] = target_commitish
        response: Response[github_models.Release] = await self.client.rest.repos.async_create_release(
            owner=self.owner, repo=self.repo_name, **params
        )
        logger.info("Created release", owner=self.owner, repo=self.repo_name, tag_name=tag_name, draft=draft)
        return to_release(response.parsed_data)

    @translate_github_errors
    @retry_on_rate_limit()
    async def update_release(self, release: Release) -> Release:
        """Update an existing release."""
        params: dict[str, Any] = {
            "tag_name": release.tag_name,
            "body": release.body or "",
            "draft": release.draft,
            "prerelease": release.prerelease,
        }
        if release.name is not None:
            params["name"] = release.name
        if release.target_commitish:
            params["target_commitish"] = release.target_commitish
        response: Response[github_models.Release] = await self.client.rest.repos.async_update_release(
            owner=self.owner, repo=self.repo_name, release_id=release.id, **params
        )
        logger.info("Updated release", owner=self.owner, repo=self.repo_name, tag_name=release.tag_name)
        return to_release(response.parsed_data)

    @translate_github_errors
    @retry_on_rate_limit()
    async def publish_release(self, release: Release) -> Release:
        """Publish a draft release."""
        response: Response[github_models.Release] = await self.client.rest.repos.async_update_release(
            owner=self.owner, repo=self.repo_name, release_id=release.id, tag_name=release.tag_name, draft=False
        )
        logger.info("Published release", owner=self.owner, repo=self.repo_name, tag_name=release.tag_name)
        return to_release(response.parsed_data)

    @translate_github_errors
    @retry_on_rate_limit()
    async def delete_release(self, release: Release) -> None:
        """Delete a release."""
        await self.client.rest.repos.async_delete_release(owner=self.owner, repo=self.repo_name, release_id=release.id)
        logger.info("Deleted release", owner=self.owner, repo=self.repo_name, tag_name=release.tag_name)

    # Commits
    @translate_github_errors
    async def count_commits_between(self, base: str | None, head: str) -> int:
        """Count commits in ``head`` not in ``base``, or all commits reachable from ``head`` without a base.

        A ref that does not exist yet, typically the tag of a release that
        has not been published, counts as zero commits.
        """
        try:
            if base is None:
                return await self._count_reachable_commits(head)
            return await self._compare_ahead_by(base, head)
        except RequestFailed as exc:
            if exc.response.status_code not in MISSING_REF_STATUS_CODES:
                raise
            logger.warning("Ref not found while counting commits", owner=self.owner, repo=self.repo_name, base=base, head=head)
            return 0

    @retry_on_rate_limit()
    async def _compare_ahead_by(self, base: str, head: str) -> int:
        response: Response[github_models.CommitComparison] = await self.client.rest.repos.async_compare_commits(
            owner=self.owner, repo=self.repo_name, basehead=f"{base}...{head}", per_page=1
        )
        return response.parsed_data.ahead_by

    @retry_on_rate_limit()
    async def _count_reachable_commits(self, head: str) -> int:
        # With one commit per page, the number of the last page is the commit count.
        response = await self.client.rest.repos.async_list_commits(owner=self.owner, repo=self.repo_name, sha=head, per_page=1)
        last_page = last_page_from_links(response.raw_response.links)
        if last_page is not None:
            return last_page
        return len(response.json())

    def get_commits_url(self, head: str, base: str | None = None) -> str:
        """Compare view between two refs, or the commit history of ``head``."""
        if base:
            return f"{self.web_url}/{self.owner}/{self.repo_name}/compare/{base}...{head}"
        return f"{self.web_url}/{self.owner}/{self.repo_name}/commits/{head}"

    def get_milestone_query_string(self) -> str:
        """Query string showing the closed issues of a milestone."""
        return MILESTONE_CLOSED_QUERY_STRING

    # Linked issues
    @translate_github_errors
    async def list_link_events(self, issue_number: int) -> list[TimelineEvent]:
        """List connected/disconnected events of an issue or pull request, following timeline pages.

        Raises:
            NotFoundError: If the number is neither an issue nor a pull request.
        """
        events: list[TimelineEvent] = []
        after: str | None = None
        while True:
            data = await self._query_link_events(issue_number, after)
            timeline = select_timeline(data)
            if timeline is None:
                raise NotFoundError(f"Unable to find issue/pull request {issue_number}")
            events.extend(parse_timeline_nodes(timeline.get("nodes") or [], issue_number))
            page_info = timeline.get("pageInfo") or {}
            if not page_info.get("hasNextPage") or not page_info.get("endCursor"):
                break
            after = page_info["endCursor"]
        logger.debug("Fetched link events", owner=self.owner, repo=self.repo_name, issue_number=issue_number, total_events=len(events))
        return events

    @retry_on_rate_limit()
    async def _query_link_events(self, issue_number: int, after: str | None) -> dict[str, Any] | None:
        variables = {
            "repoOwner": self.owner,
            "repoName": self.repo_name,
            "issueNumber": issue_number,
            "pageSize": PAGE_SIZE,
            "after": after,
        }
        try:
            return await self.client.async_graphql(CONNECT_AND_DISCONNECT_EVENTS_QUERY, variables=variables)
        except GraphQLFailed as exc:
            # Whichever of issue/pullRequest does not match the number is reported as NOT_FOUND.
            errors = exc.response.errors or []
            if all(getattr(error, "type", None) == "NOT_FOUND" for error in errors):
                return exc.response.data
            raise

    async def resolve_linked_issues(self, issue_number: int, strategy: LinkResolutionStrategy = LinkResolutionStrategy.ACTIVE) -> list[Issue]:
        """Resolve the issues and pull requests currently linked to an issue or pull request."""
        return await resolve_linked_issues(self, issue_number, strategy)
