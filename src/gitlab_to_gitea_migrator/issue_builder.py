"""Build target issue payloads from GitLab issue data."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import IssuePayload

if TYPE_CHECKING:
    from .models import Issue
    from .resolver import Resolution


def build_source_header(issue: Issue) -> str:
    """Build the header that tags an issue body with its GitLab origin.

    Returns an empty string for issues without a source number.
    """
    if issue.source_number is None:
        return ""
    header = f"**Migrated from GitLab issue #{issue.source_number}**\n"
    if issue.web_url:
        header += f"**GitLab URL:** {issue.web_url}\n"
    header += "\n---\n\n"
    return header


def build_issue_body(issue: Issue, *, tag_source: bool = False) -> str:
    """Build the target issue body, optionally prefixed with the source header."""
    body = issue.body or ""
    if not tag_source:
        return body

    header = build_source_header(issue)
    if not header or body.startswith(header):
        return body
    return header + body


def build_issue_payload(issue: Issue, resolution: Resolution, *, tag_source: bool = False) -> IssuePayload:
    """Combine a source issue with its resolved references into a target payload."""
    return IssuePayload(
        title=issue.title,
        body=build_issue_body(issue, tag_source=tag_source),
        due_date=issue.due_date,
        milestone_id=resolution.milestone_id,
        label_ids=list(resolution.label_ids),
    )
