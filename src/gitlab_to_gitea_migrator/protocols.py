"""Protocols defining the contracts for source and target systems.

The migration architecture separates concerns into three components:

1. SourceSystem: Reads milestones, labels and open issues from the source (GitLab)
2. TargetSystem: Reads existing state from and writes changes to the target (Gitea, GitHub)
3. Migrator: Orchestrates the phases, matches by title/name and resolves references

This separation allows:
- Adding new target systems without changing the orchestration code
- Testing the Migrator against in-memory implementations
- Clear boundaries for system-specific logic (API quirks, field conversions)

Error contract:
    Implementations wrap every failure of the underlying client library in
    RemoteOperationError, naming the failed operation. Setup failures in
    validate_access() raise SetupError. The Migrator never retries.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import Issue, IssuePayload, Label, Milestone


class SourceSystem(Protocol):
    """Protocol for reading data from the source system.

    The listing methods return lazy, finite, non-restartable sequences. Pages
    of PAGE_SIZE items are requested in increasing page order, starting at 1,
    and the sequence ends at the first empty page.
    """

    def validate_access(self) -> None:
        """Check credentials and connectivity, and load the source project.

        Raises:
            SetupError: If the server, the credentials or the project are not usable
        """
        ...

    def get_open_milestones(self) -> Iterator[Milestone]:
        """Yield the active milestones of the source project."""
        ...

    def get_labels(self) -> Iterator[Label]:
        """Yield all labels of the source project."""
        ...

    def get_open_issues(self) -> Iterator[Issue]:
        """Yield the open issues of the source project."""
        ...


class TargetSystem(Protocol):
    """Protocol for reading from and writing to the target system.

    The get_* methods fully drain the target's pagination and return lookup
    tables keyed by identity (milestone title, label name, issue title).
    Milestones and issues are listed in all states, so closed items are
    recognized as already migrated.

    The Migrator calls methods in this order:
    1. validate_access()
    2. get_milestones() / create_milestone()
    3. get_labels() / create_label()
    4. get_issues(), get_milestones(), get_labels(), then per issue
       create_issue() or edit_issue() followed by replace_issue_labels()
    """

    def validate_access(self) -> None:
        """Check credentials and connectivity, and load the target repository.

        Raises:
            SetupError: If the server, the credentials or the repository are not usable
        """
        ...

    def get_milestones(self) -> dict[str, Milestone]:
        """Return all target milestones (all states) keyed by title."""
        ...

    def get_labels(self) -> dict[str, Label]:
        """Return all target labels keyed by name."""
        ...

    def get_issues(self) -> dict[str, Issue]:
        """Return all target issues (all states) keyed by title."""
        ...

    def create_milestone(self, milestone: Milestone) -> Milestone:
        """Create a milestone from its title, description and due date."""
        ...

    def create_label(self, label: Label) -> Label:
        """Create a label from its name, description and color."""
        ...

    def create_issue(self, payload: IssuePayload) -> Issue:
        """Create an issue with milestone and labels already resolved to target IDs."""
        ...

    def edit_issue(self, index: int, payload: IssuePayload) -> Issue:
        """Overwrite title, body, milestone and due date of an existing issue."""
        ...

    def replace_issue_labels(self, index: int, label_ids: list[int]) -> list[Label]:
        """Replace the full label set of an existing issue."""
        ...
