"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_CONFIG_FILE_NAME,
    GITHUB_API_URL,
    GITHUB_WEB_URL,
    MILESTONE_CLOSED_QUERY_STRING,
)
from .retry import retry_on_rate_limit

__all__ = [
    "DEFAULT_CONFIG_FILE_NAME",
    "GITHUB_API_URL",
    "GITHUB_WEB_URL",
    "MILESTONE_CLOSED_QUERY_STRING",
    "retry_on_rate_limit",
]
