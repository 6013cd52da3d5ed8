"""Data models exchanged between the source system, the target system and the Migrator.

These are read-only projections of remote resources. They are intentionally
simple and system-agnostic; `id` and `index` are only meaningful for
resources read from (or created in) the target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal


@dataclass
class Milestone:
    """A milestone for grouping issues. Identified by its exact title."""

    title: str
    description: str = ""
    due_date: datetime | None = None
    state: Literal["open", "closed"] = "open"
    id: int | None = None


@dataclass
class Label:
    """A label/tag that can be applied to issues. Identified by its exact name."""

    name: str
    color: str  # Hex triplet, e.g. "#ff0000"
    description: str = ""
    id: int | None = None


@dataclass
class Issue:
    """An issue from the source or target system. Identified by its exact title.

    For source issues `source_number` and `web_url` describe where the issue
    came from; for target issues `index` is the per-repository issue number.
    """

    title: str
    body: str = ""
    state: Literal["open", "closed"] = "open"
    due_date: datetime | None = None
    milestone_title: str | None = None
    labels: list[str] = field(default_factory=list)
    index: int | None = None
    source_number: int | None = None
    web_url: str = ""


@dataclass
class IssuePayload:
    """Target-side content of an issue, with references resolved to target IDs."""

    title: str
    body: str
    due_date: datetime | None = None
    milestone_id: int | None = None
    label_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class ResolutionWarning:
    """A milestone or label reference that has no counterpart in the target."""

    kind: Literal["unknown-milestone", "unknown-label"]
    value: str
