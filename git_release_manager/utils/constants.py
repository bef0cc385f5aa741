"""Shared constants used across the application."""

# GitHub Constants
# ----------------

GITHUB_API_URL = "https://api.github.com"
"""Default GitHub REST API URL."""

GITHUB_WEB_URL = "https://github.com"
"""Web URL matching the default GitHub REST API URL."""

MILESTONE_CLOSED_QUERY_STRING = "closed=1"
"""Query string showing the closed issues of a GitHub milestone."""

# Release Notes Constants
# -----------------------

DEFAULT_CONFIG_FILE_NAME = "GitReleaseManager.yaml"
"""Default name of the release notes configuration file."""
