"""Models for application and release notes configuration."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

logger = structlog.get_logger(__name__)


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


@dataclass
class GitHubConnectionConfig:
    """Repository and credentials used to connect to GitHub."""

    repo: str
    github_api_url: str
    github_authentication_type: GitHubAuthenticationType
    github_pat_token: str | None = None
    github_app_id: int | None = None
    github_app_private_key_path: Path | None = None
    github_app_installation_id: int | None = None


def _hyphenate(field_name: str) -> str:
    return field_name.replace("_", "-")


class ConfigurationModel(BaseModel):
    """Base model reading and writing hyphenated configuration keys.

    Keys this tool does not use, such as the SHA section settings of older
    GitReleaseManager.yaml files, are ignored rather than rejected.
    """

    model_config = ConfigDict(alias_generator=_hyphenate, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def log_ignored_keys(cls, data: Any) -> Any:
        """Log configuration keys that do not map to a setting."""
        if not isinstance(data, dict):
            return data
        known: set[str] = set()
        for name, field in cls.model_fields.items():
            known.update({name, _hyphenate(name)})
            if isinstance(field.validation_alias, AliasChoices):
                known.update(choice for choice in field.validation_alias.choices if isinstance(choice, str))
        ignored = sorted(str(key) for key in data if key not in known)
        if ignored:
            logger.debug("Ignoring unknown configuration keys", section=cls.__name__, keys=ignored)
        return data


class LabelAlias(ConfigurationModel):
    """Headings to use for a label instead of the raw label name."""

    name: str
    header: str
    plural: str


class CreateConfig(ConfigurationModel):
    """Settings for the footer appended to generated release notes and for creating releases."""

    include_footer: bool = False
    footer_heading: str = "Where to get it"
    footer_content: str = "You can download this release from [GitHub](https://github.com/releases/tag/{milestone})"
    footer_includes_milestone: bool = True
    milestone_replace_text: str = "{milestone}"
    allow_update_to_published_release: bool = False


class ExportConfig(ConfigurationModel):
    """Settings for exporting existing releases to a single document."""

    include_created_date_in_title: bool = False
    created_date_string_format: str = "%B %d, %Y"
    perform_regex_removal: bool = False
    regex_text: str = ""
    multiline_regex: bool = False


DEFAULT_ISSUE_COMMENT = (
    ":tada: This issue has been resolved in version {milestone} :tada:\n"
    "\n"
    "The release is available on:\n"
    "\n"
    "- [GitHub release](https://github.com/{owner}/{repository}/releases/tag/{milestone})"
)


class CloseConfig(ConfigurationModel):
    """Settings for commenting on issues when their milestone is closed.

    ``issue_comment`` may contain ``{milestone}``, ``{owner}`` and
    ``{repository}`` placeholders.
    """

    use_issue_comments: bool = False
    issue_comment: str = DEFAULT_ISSUE_COMMENT

    def render_issue_comment(self, milestone_title: str, owner: str, repository: str) -> str:
        """Fill the placeholders of the issue comment template."""
        return (
            self.issue_comment.replace("{milestone}", milestone_title).replace("{owner}", owner).replace("{repository}", repository)
        )


class ReleaseNotesConfig(ConfigurationModel):
    """Release notes configuration, usually read from GitReleaseManager.yaml."""

    default_branch: str = "master"
    issue_labels_include: list[str] = Field(default_factory=lambda: ["Bug", "Feature", "Improvement"])
    issue_labels_exclude: list[str] = Field(default_factory=lambda: ["Internal Refactoring"])
    label_aliases: list[LabelAlias] = Field(
        default_factory=list,
        alias="label-aliases",
        validation_alias=AliasChoices("label-aliases", "label_aliases", "issue-labels-alias"),
    )
    create: CreateConfig = Field(default_factory=CreateConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    close: CloseConfig = Field(default_factory=CloseConfig)

    @field_validator("label_aliases")
    @classmethod
    def validate_unique_label_aliases(cls, aliases: list[LabelAlias]) -> list[LabelAlias]:
        """Ensure at most one alias exists per label name, ignoring case."""
        seen: set[str] = set()
        for alias in aliases:
            key = alias.name.casefold()
            if key in seen:
                raise ValueError(f"Duplicate label alias for label '{alias.name}'")
            seen.add(key)
        return aliases

    @property
    def all_issue_labels(self) -> list[str]:
        """Include labels followed by exclude labels, without duplicates."""
        return list(dict.fromkeys(self.issue_labels_include + self.issue_labels_exclude))

    def find_label_alias(self, label: str) -> LabelAlias | None:
        """Return the alias configured for ``label``, ignoring case."""
        aliases = {alias.name.casefold(): alias for alias in self.label_aliases}
        return aliases.get(label.casefold())
