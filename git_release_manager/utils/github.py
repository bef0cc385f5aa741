"""Contains utility functions for GitHub interactions."""

from urllib.parse import parse_qs, urlsplit

from git_release_manager.configuration.exceptions import GitHubClientConfigurationError

from .constants import GITHUB_API_URL, GITHUB_WEB_URL


async def split_repository_in_configuration(repo: str | None) -> tuple[str, str]:
    """Splits the repository in the configuration into owner and repository."""
    if repo is None:
        raise GitHubClientConfigurationError("A repository in 'owner/repo' format is required.")
    repo = repo.strip("/")
    parts = repo.split("/")
    if len(parts) != 2 or not all(parts):
        raise GitHubClientConfigurationError("Repository must be in the format 'owner/repo' with no leading/trailing slashes or extra parts.")
    owner, repository = parts
    return owner, repository


def web_url_from_api_url(github_api_url: str) -> str:
    """Derive the web URL of a GitHub instance from its REST API URL.

    ``https://api.github.com`` maps to ``https://github.com``; GitHub
    Enterprise Server API URLs (``https://host/api/v3``) map to ``https://host``.
    """
    api_url = github_api_url.rstrip("/")
    if api_url == GITHUB_API_URL:
        return GITHUB_WEB_URL
    if api_url.endswith("/api/v3"):
        return api_url[: -len("/api/v3")]
    return api_url


def last_page_from_links(links: dict[str, dict[str, str]]) -> int | None:
    """Page number of the ``rel="last"`` entry of a parsed ``Link`` header, if there is one."""
    url = links.get("last", {}).get("url")
    if not url:
        return None
    pages = parse_qs(urlsplit(url).query).get("page")
    if not pages or not pages[0].isdigit():
        return None
    return int(pages[0])
