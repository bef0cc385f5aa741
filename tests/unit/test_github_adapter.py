"""Unit tests for the GitHubKitAdapter class and related GitHub operations."""

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from githubkit.exception import GraphQLFailed, RequestFailed

from git_release_manager.github.adapter import GitHubKitAdapter, to_issue
from git_release_manager.provider.exceptions import ApiError, ForbiddenError, NotFoundError
from git_release_manager.provider.models import (
    Issue,
    ItemState,
    ItemStateFilter,
    Label,
    LinkResolutionStrategy,
    Milestone,
    Release,
    TimelineEventType,
)


class DummyResponse:
    """A dummy response object to mock GitHub API responses."""

    def __init__(self, parsed_data: Any = None, json_data: Any = None, links: dict[str, dict[str, str]] | None = None) -> None:
        """Initialize the dummy response with parsed data, raw JSON and parsed Link header entries."""
        self.status_code: int = 200
        self.parsed_data = parsed_data
        self._json_data = json_data
        self.raw_response = SimpleNamespace(links=links or {})

    def json(self) -> Any:
        """Return the raw JSON payload."""
        return self._json_data


def make_request_failed(status_code: int, headers: dict[str, str] | None = None) -> RequestFailed:
    """Build a githubkit request failure with the given status code."""
    response = MagicMock(status_code=status_code, headers=headers or {}, url="https://api.github.com/repos/owner/repo")
    return RequestFailed(response)


def make_graphql_failed(data: dict[str, Any] | None, error_types: list[str]) -> GraphQLFailed:
    """Build a githubkit GraphQL failure carrying partial data."""
    exc = GraphQLFailed.__new__(GraphQLFailed)
    exc.response = SimpleNamespace(data=data, errors=[SimpleNamespace(type=error_type, message=error_type) for error_type in error_types])
    return exc


def github_milestone(number: int, title: str) -> SimpleNamespace:
    """A githubkit-like milestone."""
    return SimpleNamespace(
        number=number,
        title=title,
        description=None,
        html_url=f"https://github.com/owner/repo/milestone/{number}",
        state="closed",
    )


def github_issue(number: int, labels: list[Any], pull_request: Any = None) -> SimpleNamespace:
    """A githubkit-like issue."""
    return SimpleNamespace(
        number=number,
        title=f"Issue {number}",
        html_url=f"https://github.com/owner/repo/issues/{number}",
        labels=labels,
        pull_request=pull_request,
        state="closed",
    )


def github_release(release_id: int, tag_name: str, day: int, prerelease: bool = False, draft: bool = False) -> SimpleNamespace:
    """A githubkit-like release."""
    return SimpleNamespace(
        id=release_id,
        tag_name=tag_name,
        name=None,
        body="Notes",
        draft=draft,
        prerelease=prerelease,
        created_at=datetime(2024, 1, day, tzinfo=timezone.utc),
        html_url=f"https://github.com/owner/repo/releases/tag/{tag_name}",
        target_commitish="main",
    )


def timeline_data(nodes: list[dict[str, Any]], end_cursor: str | None = None, field: str = "issue") -> dict[str, Any]:
    """GraphQL data holding one page of timeline items on ``field``."""
    timeline = {"pageInfo": {"hasNextPage": end_cursor is not None, "endCursor": end_cursor}, "nodes": nodes}
    other = "pullRequest" if field == "issue" else "issue"
    return {"repository": {field: {"timelineItems": timeline}, other: None}}


def connected_node(created_at: str, source: int, subject: int) -> dict[str, Any]:
    """A ConnectedEvent timeline node."""
    return {"__typename": "ConnectedEvent", "createdAt": created_at, "source": {"number": source}, "subject": {"number": subject}}


@pytest.fixture
def adapter() -> GitHubKitAdapter:
    """Adapter wrapping a mocked githubkit client."""
    return GitHubKitAdapter(MagicMock(), "owner", "repo")


@pytest.mark.asyncio
async def test_list_milestones_paginates(adapter: GitHubKitAdapter) -> None:
    """Test that milestones are fetched page by page until a short page."""
    first_page = [github_milestone(n, f"0.{n}.0") for n in range(1, 101)]
    adapter.client.rest.issues.async_list_milestones = AsyncMock(
        side_effect=[DummyResponse(first_page), DummyResponse([github_milestone(101, "1.0.0")])]
    )

    milestones = await adapter.list_milestones()

    assert len(milestones) == 101
    assert milestones[-1] == Milestone(number=101, title="1.0.0", html_url="https://github.com/owner/repo/milestone/101", state="closed")
    calls = adapter.client.rest.issues.async_list_milestones.await_args_list
    assert [call.kwargs["page"] for call in calls] == [1, 2]
    assert all(call.kwargs["state"] == "all" and call.kwargs["per_page"] == 100 for call in calls)


@pytest.mark.asyncio
async def test_get_milestone_by_title(adapter: GitHubKitAdapter) -> None:
    """Test finding a milestone by exact title."""
    adapter.client.rest.issues.async_list_milestones = AsyncMock(return_value=DummyResponse([github_milestone(1, "1.0.0")]))

    assert (await adapter.get_milestone("1.0.0")).number == 1
    with pytest.raises(NotFoundError):
        await adapter.get_milestone("2.0.0")


@pytest.mark.asyncio
async def test_list_issues_for_milestone(adapter: GitHubKitAdapter) -> None:
    """Test that milestone issues are requested by milestone number and converted."""
    adapter.client.rest.issues.async_list_for_repo = AsyncMock(
        return_value=DummyResponse(
            [
                github_issue(1, [SimpleNamespace(name="bug"), "enhancement"]),
                github_issue(2, [], pull_request=SimpleNamespace(url="https://api.github.com/repos/owner/repo/pulls/2")),
            ]
        )
    )

    issues = await adapter.list_issues(Milestone(number=7, title="1.0.0"), ItemStateFilter.CLOSED)

    assert issues[0].labels == ("bug", "enhancement")
    assert issues[0].is_pull_request is False
    assert issues[1].is_pull_request is True
    call = adapter.client.rest.issues.async_list_for_repo.await_args
    assert call.kwargs["milestone"] == "7"
    assert call.kwargs["state"] == "closed"


def test_to_issue_skips_unnamed_labels() -> None:
    """Test that labels without a name are ignored."""
    issue = to_issue(github_issue(1, [SimpleNamespace(name=None), SimpleNamespace(name="bug")]))

    assert issue.labels == ("bug",)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,expected",
    [
        pytest.param(make_request_failed(404), NotFoundError, id="not found"),
        pytest.param(make_request_failed(403), ForbiddenError, id="forbidden"),
        pytest.param(make_request_failed(500), ApiError, id="server error"),
        pytest.param(ConnectionError("reset"), ApiError, id="transport error"),
    ],
)
async def test_get_issue_translates_errors(adapter: GitHubKitAdapter, error: Exception, expected: type[Exception]) -> None:
    """Test that githubkit failures are translated into provider errors."""
    adapter.client.rest.issues.async_get = AsyncMock(side_effect=error)

    with pytest.raises(expected) as exc_info:
        await adapter.get_issue(1)

    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_list_issues_error_drops_partial_results(adapter: GitHubKitAdapter) -> None:
    """Test that a failing page fails the whole listing."""
    first_page = [github_issue(n, ["bug"]) for n in range(1, 101)]
    adapter.client.rest.issues.async_list_for_repo = AsyncMock(side_effect=[DummyResponse(first_page), make_request_failed(502)])

    with pytest.raises(ApiError):
        await adapter.list_issues(Milestone(number=1, title="1.0.0"))


@pytest.mark.asyncio
async def test_count_commits_between_tags(adapter: GitHubKitAdapter) -> None:
    """Test counting commits between two tags with the compare endpoint."""
    adapter.client.rest.repos.async_compare_commits = AsyncMock(return_value=DummyResponse(SimpleNamespace(ahead_by=5)))

    assert await adapter.count_commits_between("0.9.0", "1.0.0") == 5
    assert adapter.client.rest.repos.async_compare_commits.await_args.kwargs["basehead"] == "0.9.0...1.0.0"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [pytest.param(404, id="not found"), pytest.param(422, id="unprocessable")])
async def test_count_commits_between_missing_ref(adapter: GitHubKitAdapter, status_code: int) -> None:
    """Test that a ref which does not exist counts as zero commits."""
    adapter.client.rest.repos.async_compare_commits = AsyncMock(side_effect=make_request_failed(status_code))

    assert await adapter.count_commits_between("does-not-exist", "1.0.0") == 0


@pytest.mark.asyncio
async def test_count_commits_between_server_error(adapter: GitHubKitAdapter) -> None:
    """Test that other failures while counting commits are reported."""
    adapter.client.rest.repos.async_compare_commits = AsyncMock(side_effect=make_request_failed(500))

    with pytest.raises(ApiError):
        await adapter.count_commits_between("0.9.0", "1.0.0")


@pytest.mark.asyncio
async def test_count_commits_without_base(adapter: GitHubKitAdapter) -> None:
    """Test that without a base the commits reachable from the head are counted from the last page link."""
    links = {
        "next": {"url": "https://api.github.com/repositories/1/commits?sha=1.0.0&per_page=1&page=2", "rel": "next"},
        "last": {"url": "https://api.github.com/repositories/1/commits?sha=1.0.0&per_page=1&page=4213", "rel": "last"},
    }
    adapter.client.rest.repos.async_list_commits = AsyncMock(return_value=DummyResponse(json_data=[{"sha": "a"}], links=links))

    assert await adapter.count_commits_between(None, "1.0.0") == 4213
    adapter.client.rest.repos.async_list_commits.assert_awaited_once_with(owner="owner", repo="repo", sha="1.0.0", per_page=1)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "json_data,expected",
    [pytest.param([{"sha": "a"}], 1, id="single commit"), pytest.param([], 0, id="empty repository")],
)
async def test_count_commits_without_base_single_page(adapter: GitHubKitAdapter, json_data: list[dict[str, str]], expected: int) -> None:
    """Test that without a Link header the commits of the only page are counted."""
    adapter.client.rest.repos.async_list_commits = AsyncMock(return_value=DummyResponse(json_data=json_data))

    assert await adapter.count_commits_between(None, "1.0.0") == expected


@pytest.mark.asyncio
async def test_count_commits_without_base_missing_head(adapter: GitHubKitAdapter) -> None:
    """Test that a head which does not exist yet counts as zero commits."""
    adapter.client.rest.repos.async_list_commits = AsyncMock(side_effect=make_request_failed(404))

    assert await adapter.count_commits_between(None, "1.0.0") == 0


@pytest.mark.parametrize(
    "api_url,base,expected",
    [
        pytest.param("https://api.github.com", "0.9.0", "https://github.com/owner/repo/compare/0.9.0...1.0.0", id="compare"),
        pytest.param("https://api.github.com", None, "https://github.com/owner/repo/commits/1.0.0", id="history"),
        pytest.param("https://ghe.example.com/api/v3", "0.9.0", "https://ghe.example.com/owner/repo/compare/0.9.0...1.0.0", id="enterprise"),
    ],
)
def test_get_commits_url(api_url: str, base: str | None, expected: str) -> None:
    """Test web links to the commits of a release."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo", github_api_url=api_url)

    assert adapter.get_commits_url("1.0.0", base) == expected


def test_get_milestone_query_string(adapter: GitHubKitAdapter) -> None:
    """Test the query string listing closed milestone issues."""
    assert adapter.get_milestone_query_string() == "closed=1"


@pytest.mark.asyncio
async def test_list_releases_newest_first(adapter: GitHubKitAdapter) -> None:
    """Test that releases are sorted newest first and prereleases can be skipped."""
    adapter.client.rest.repos.async_list_releases = AsyncMock(
        return_value=DummyResponse([github_release(1, "0.9.0", 1), github_release(3, "1.1.0-rc1", 20, prerelease=True), github_release(2, "1.0.0", 10)])
    )

    assert [release.tag_name for release in await adapter.list_releases()] == ["1.1.0-rc1", "1.0.0", "0.9.0"]
    assert [release.tag_name for release in await adapter.list_releases(skip_prereleases=True)] == ["1.0.0", "0.9.0"]


@pytest.mark.asyncio
async def test_create_and_delete_label(adapter: GitHubKitAdapter) -> None:
    """Test creating and deleting labels."""
    adapter.client.rest.issues.async_create_label = AsyncMock(
        return_value=DummyResponse(SimpleNamespace(name="Bug", color="ee0701", description="Broken"))
    )
    adapter.client.rest.issues.async_delete_label = AsyncMock()

    created = await adapter.create_label(Label(name="Bug", color="ee0701", description="Broken"))
    await adapter.delete_label(created)

    assert created == Label(name="Bug", color="ee0701", description="Broken")
    assert adapter.client.rest.issues.async_create_label.await_args.kwargs["description"] == "Broken"
    adapter.client.rest.issues.async_delete_label.assert_awaited_once_with(owner="owner", repo="repo", name="Bug")


@pytest.mark.asyncio
async def test_list_link_events_follows_pages(adapter: GitHubKitAdapter) -> None:
    """Test that timeline pages are followed by cursor."""
    adapter.client.async_graphql = AsyncMock(
        side_effect=[
            timeline_data([connected_node("2024-01-01T00:00:10Z", 369, 113)], end_cursor="cursor-1"),
            timeline_data([{"__typename": "DisconnectedEvent", "createdAt": "2024-01-01T00:00:20Z", "source": None, "subject": None}]),
        ]
    )

    events = await adapter.list_link_events(113)

    assert [(event.event_type, event.subject_number) for event in events] == [
        (TimelineEventType.CONNECTED, 369),
        (TimelineEventType.DISCONNECTED, None),
    ]
    variables = [call.kwargs["variables"] for call in adapter.client.async_graphql.await_args_list]
    assert [v["after"] for v in variables] == [None, "cursor-1"]
    assert variables[0]["issueNumber"] == 113


@pytest.mark.asyncio
async def test_list_link_events_pull_request(adapter: GitHubKitAdapter) -> None:
    """Test that a pull request number is resolved through the tolerated NOT_FOUND issue field."""
    data = timeline_data([connected_node("2024-01-01T00:00:10Z", 369, 113)], field="pullRequest")
    adapter.client.async_graphql = AsyncMock(side_effect=make_graphql_failed(data, ["NOT_FOUND"]))

    events = await adapter.list_link_events(369)

    assert [event.subject_number for event in events] == [113]


@pytest.mark.asyncio
async def test_list_link_events_unknown_number(adapter: GitHubKitAdapter) -> None:
    """Test that a number which is neither an issue nor a pull request is reported."""
    data = {"repository": {"issue": None, "pullRequest": None}}
    adapter.client.async_graphql = AsyncMock(side_effect=make_graphql_failed(data, ["NOT_FOUND", "NOT_FOUND"]))

    with pytest.raises(NotFoundError, match="Unable to find issue/pull request 999"):
        await adapter.list_link_events(999)


@pytest.mark.asyncio
async def test_resolve_linked_issues(adapter: GitHubKitAdapter) -> None:
    """Test resolving the issue linked to an issue end to end."""
    adapter.client.async_graphql = AsyncMock(return_value=timeline_data([connected_node("2024-01-01T00:00:10Z", 113, 369)]))
    adapter.client.rest.issues.async_get = AsyncMock(
        return_value=DummyResponse(github_issue(369, [], pull_request=SimpleNamespace(url="https://api.github.com/repos/owner/repo/pulls/369")))
    )

    linked = await adapter.resolve_linked_issues(113, LinkResolutionStrategy.MOST_RECENT)

    assert linked == [
        Issue(number=369, title="Issue 369", html_url="https://github.com/owner/repo/issues/369", is_pull_request=True, state="closed")
    ]
    assert adapter.client.rest.issues.async_get.await_args.kwargs["issue_number"] == 369


@pytest.mark.asyncio
async def test_list_issue_comments(adapter: GitHubKitAdapter) -> None:
    """Test listing the comments of an issue."""
    created_at = datetime(2024, 2, 1, tzinfo=timezone.utc)
    adapter.client.rest.issues.async_list_comments = AsyncMock(
        return_value=DummyResponse(
            [
                SimpleNamespace(id=1, body="Fixed in #369", user=SimpleNamespace(login="octocat"), created_at=created_at, html_url="c1"),
                SimpleNamespace(id=2, body=None, user=None, created_at=created_at, html_url="c2"),
            ]
        )
    )

    comments = await adapter.list_issue_comments(Issue(number=113, title="t", html_url="u"))

    assert [(comment.id, comment.body, comment.author) for comment in comments] == [(1, "Fixed in #369", "octocat"), (2, "", None)]
    assert adapter.client.rest.issues.async_list_comments.await_args.kwargs["issue_number"] == 113


@pytest.mark.asyncio
async def test_create_issue_comment(adapter: GitHubKitAdapter) -> None:
    """Test commenting on an issue."""
    created_at = datetime(2024, 2, 1, tzinfo=timezone.utc)
    adapter.client.rest.issues.async_create_comment = AsyncMock(
        return_value=DummyResponse(SimpleNamespace(id=5, body="Released", user=SimpleNamespace(login="bot"), created_at=created_at, html_url="c5"))
    )

    comment = await adapter.create_issue_comment(Issue(number=113, title="t", html_url="u"), "Released")

    assert (comment.id, comment.body, comment.author) == (5, "Released", "bot")
    adapter.client.rest.issues.async_create_comment.assert_awaited_once_with(owner="owner", repo="repo", issue_number=113, body="Released")


@pytest.mark.asyncio
async def test_set_milestone_state(adapter: GitHubKitAdapter) -> None:
    """Test closing a milestone."""
    closed = github_milestone(7, "1.0.0")
    adapter.client.rest.issues.async_update_milestone = AsyncMock(return_value=DummyResponse(closed))

    milestone = await adapter.set_milestone_state(Milestone(number=7, title="1.0.0"), ItemState.CLOSED)

    assert milestone.state == "closed"
    adapter.client.rest.issues.async_update_milestone.assert_awaited_once_with(owner="owner", repo="repo", milestone_number=7, state="closed")


@pytest.mark.asyncio
async def test_get_release_includes_drafts(adapter: GitHubKitAdapter) -> None:
    """Test that releases are looked up by tag in the full list, so drafts are found."""
    adapter.client.rest.repos.async_list_releases = AsyncMock(
        return_value=DummyResponse([github_release(1, "0.9.0", 1), github_release(2, "1.0.0", 10, draft=True)])
    )

    found = await adapter.get_release("1.0.0")

    assert found is not None
    assert (found.id, found.draft, found.target_commitish) == (2, True, "main")
    assert await adapter.get_release("2.0.0") is None


@pytest.mark.asyncio
async def test_create_release(adapter: GitHubKitAdapter) -> None:
    """Test creating a draft release."""
    adapter.client.rest.repos.async_create_release = AsyncMock(return_value=DummyResponse(github_release(3, "1.0.0", 10, draft=True)))

    created = await adapter.create_release("1.0.0", "1.0.0", "Notes", target_commitish="main")

    assert created.id == 3
    assert adapter.client.rest.repos.async_create_release.await_args.kwargs == {
        "owner": "owner",
        "repo": "repo",
        "tag_name": "1.0.0",
        "name": "1.0.0",
        "body": "Notes",
        "draft": True,
        "prerelease": False,
        "target_commitish": "main",
    }


@pytest.mark.asyncio
async def test_update_and_publish_release(adapter: GitHubKitAdapter) -> None:
    """Test editing a release and publishing it."""
    adapter.client.rest.repos.async_update_release = AsyncMock(return_value=DummyResponse(github_release(3, "1.0.0", 10)))
    draft = Release(id=3, tag_name="1.0.0", name="First", body="New notes", draft=True, prerelease=False, target_commitish="main")

    await adapter.update_release(draft)
    published = await adapter.publish_release(draft)

    update_call, publish_call = adapter.client.rest.repos.async_update_release.await_args_list
    assert update_call.kwargs["release_id"] == 3
    assert (update_call.kwargs["name"], update_call.kwargs["body"], update_call.kwargs["draft"]) == ("First", "New notes", True)
    assert publish_call.kwargs == {"owner": "owner", "repo": "repo", "release_id": 3, "tag_name": "1.0.0", "draft": False}
    assert published.draft is False


@pytest.mark.asyncio
async def test_delete_release(adapter: GitHubKitAdapter) -> None:
    """Test deleting a release."""
    adapter.client.rest.repos.async_delete_release = AsyncMock()

    await adapter.delete_release(Release(id=3, tag_name="1.0.0", name=None, body=None, draft=True, prerelease=False))

    adapter.client.rest.repos.async_delete_release.assert_awaited_once_with(owner="owner", repo="repo", release_id=3)


@pytest.mark.asyncio
async def test_delete_release_forbidden(adapter: GitHubKitAdapter) -> None:
    """Test that a denied release deletion is translated."""
    adapter.client.rest.repos.async_delete_release = AsyncMock(side_effect=make_request_failed(403))

    with pytest.raises(ForbiddenError):
        await adapter.delete_release(Release(id=3, tag_name="1.0.0", name=None, body=None, draft=True, prerelease=False))
