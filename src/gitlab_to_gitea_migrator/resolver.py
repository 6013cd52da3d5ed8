"""Resolve source milestone titles and label names to target IDs."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from .models import ResolutionWarning

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .models import Issue, Label, Milestone


class Resolution(NamedTuple):
    """Result of resolving the references of one issue."""

    milestone_id: int | None
    label_ids: list[int]
    warnings: list[ResolutionWarning]


def resolve_references(
    issue: Issue,
    milestones: Mapping[str, Milestone],
    labels: Mapping[str, Label],
) -> Resolution:
    """Map an issue's milestone title and label names to target IDs.

    Unknown references are dropped and reported as warnings; resolution never fails.
    Label IDs keep the order of the issue's labels.
    """
    warnings: list[ResolutionWarning] = []

    milestone_id: int | None = None
    if issue.milestone_title is not None:
        milestone = milestones.get(issue.milestone_title)
        if milestone is not None and milestone.id is not None:
            milestone_id = milestone.id
        else:
            warnings.append(ResolutionWarning("unknown-milestone", issue.milestone_title))

    label_ids: list[int] = []
    for name in issue.labels:
        label = labels.get(name)
        if label is not None and label.id is not None:
            label_ids.append(label.id)
        else:
            warnings.append(ResolutionWarning("unknown-label", name))

    return Resolution(milestone_id=milestone_id, label_ids=label_ids, warnings=warnings)
