"""Markdown rendering for release notes."""

import structlog

from .models import IssueGroup, ReleaseNotesDocument

logger = structlog.get_logger(__name__)


class MarkdownWriter:
    """Renders a release notes document to markdown."""

    def render_group(self, group: IssueGroup) -> str:
        """Render one label group as a bold heading followed by a bullet list."""
        lines = [f"__{group.heading}__", ""]
        lines.extend(f"- [__#{issue.number}__]({issue.html_url}) {issue.title}" for issue in group.issues)
        return "\n".join(lines) + "\n\n"

    def render(self, document: ReleaseNotesDocument) -> str:
        """Render the whole document.

        Layout: summary line, milestone description, a blank line, each issue
        group, then the optional ``### heading`` footer.
        """
        parts = [f"{document.summary}\n", f"{document.description}\n", "\n"]
        parts.extend(self.render_group(group) for group in document.groups)
        if document.footer is not None:
            parts.append(f"### {document.footer.heading}\n")
            parts.append(f"{document.footer.content}\n")
        content = "".join(parts)
        logger.debug("Rendered release notes", groups=len(document.groups), length=len(content))
        return content
