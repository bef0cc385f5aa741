"""Main release notes generation orchestration."""

import structlog

from ..configuration.models import ReleaseNotesConfig
from ..provider.abc import VcsProviderBase
from ..provider.models import ItemStateFilter, Milestone
from .classifier import LabelClassifier
from .exceptions import EmptyReleaseError
from .markdown import MarkdownWriter
from .milestones import MilestoneResolver
from .models import ReleaseNotesDocument, ReleaseNotesFooter

logger = structlog.get_logger(__name__)


def pluralize(count: int, noun: str) -> str:
    """Return ``"1 issue"`` or ``"3 issues"`` style wording."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def compose_summary(issue_count: int, issues_url: str, commit_count: int, commits_url: str) -> str:
    """Compose the opening sentence of the release notes."""
    if issue_count > 0 and commit_count > 0:
        return (
            f"As part of this release we had [{pluralize(commit_count, 'commit')}]({commits_url}) "
            f"which resulted in [{pluralize(issue_count, 'issue')}]({issues_url}) being closed."
        )
    if issue_count > 0:
        return f"As part of this release we had [{pluralize(issue_count, 'issue')}]({issues_url}) closed."
    if commit_count > 0:
        return f"As part of this release we had [{pluralize(commit_count, 'commit')}]({commits_url})."
    return ""


def compose_footer(config: ReleaseNotesConfig, milestone_title: str) -> ReleaseNotesFooter | None:
    """Build the footer if the configuration asks for one."""
    if not config.create.include_footer:
        return None
    content = config.create.footer_content
    token = config.create.milestone_replace_text
    if config.create.footer_includes_milestone and token:
        content = content.replace(token, milestone_title)
    return ReleaseNotesFooter(heading=config.create.footer_heading, content=content)


class ReleaseNotesBuilder:
    """Builds the release notes of one milestone.

    Each call to ``build`` fetches a fresh snapshot of milestones and issues
    from the provider, so a builder holds no state between builds. The
    document is returned whole or not at all: label validation errors, an
    empty release and provider errors all abort the build.
    """

    def __init__(self, provider: VcsProviderBase, config: ReleaseNotesConfig, writer: MarkdownWriter | None = None) -> None:
        """Initialize with a provider bound to a repository and the release notes configuration."""
        self.provider = provider
        self.config = config
        self.classifier = LabelClassifier(config)
        self.writer = writer or MarkdownWriter()

    async def count_commits(self, previous: Milestone | None, target: Milestone) -> int:
        """Count commits between the previous milestone's tag and the target's."""
        base = previous.title if previous is not None else None
        return await self.provider.count_commits_between(base, target.title)

    async def build_document(self, milestone_title: str) -> ReleaseNotesDocument:
        """Resolve, classify and count everything the release notes need."""
        logger.info("Building release notes", owner=self.provider.owner, repo=self.provider.repo_name, milestone=milestone_title)

        milestones = await self.provider.list_milestones(ItemStateFilter.ALL)
        resolver = MilestoneResolver(milestones)
        target = resolver.resolve_target(milestone_title)

        issues = await self.provider.list_issues(target, ItemStateFilter.CLOSED)
        included = self.classifier.classify(issues)

        previous = resolver.resolve_previous(target)
        commit_count = await self.count_commits(previous, target)

        if not included:
            logger.error("No issues to report", milestone=milestone_title, issues_on_milestone=len(issues))
            raise EmptyReleaseError(milestone_title)

        issues_url = f"{target.html_url}?{self.provider.get_milestone_query_string()}"
        commits_url = self.provider.get_commits_url(target.title, previous.title if previous is not None else None)

        document = ReleaseNotesDocument(
            summary=compose_summary(len(included), issues_url, commit_count, commits_url),
            description=target.description,
            groups=self.classifier.group(included),
            footer=compose_footer(self.config, milestone_title),
        )
        logger.info(
            "Built release notes",
            milestone=milestone_title,
            previous_milestone=previous.title if previous is not None else None,
            issues=len(included),
            commits=commit_count,
        )
        return document

    async def build(self, milestone_title: str) -> str:
        """Build the markdown release notes for ``milestone_title``.

        Raises:
            NotFoundError: If no milestone has that title.
            LabelValidationError: If an issue has zero or several release notes labels.
            EmptyReleaseError: If no issue of the milestone carries an include label.
        """
        document = await self.build_document(milestone_title)
        return self.writer.render(document)
