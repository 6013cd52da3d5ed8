"""Migration engine that coordinates source and target systems.

The Migrator class is the central coordinator for migration. It:
1. Runs the three migration phases in dependency order
2. Matches source items against target lookup tables by title/name
3. Resolves issue milestone and label references to target IDs
4. Reports statistics and resolution warnings

Migration Flow
--------------
Phase 1: Milestones
    - Fetch all target milestones (all states) once
    - Stream the active source milestones page by page
    - Create each milestone whose title is not in the target table

Phase 2: Labels
    - Fetch all target labels once
    - Stream all source labels page by page
    - Create each label whose name is not in the target table

Phase 3: Issues
    - Fetch target issues (all states), milestones and labels once
    - Stream the open source issues page by page; for each issue:
        a. Resolve milestone title and label names to target IDs
        b. Build the target payload (title, body, due date, milestone, labels)
        c. Title not in the target table: create the issue
        d. Title in the target table: edit the issue, then replace its labels

The lookup tables are snapshots taken at phase start and are never refreshed
while a phase runs. A title that occurs twice in the source issues is
therefore created twice within one run; re-runs update instead.

Error Handling
--------------
Any RemoteOperationError aborts the run: it is wrapped in a PhaseError naming
the phase, the state becomes FAILED and the remaining phases are skipped.
Nothing is retried or rolled back. The issue update uses two calls (edit,
then replace labels); if the second fails the issue keeps its new content
with its old labels and the run still fails.

Unknown milestone or label references are not errors. They are logged as
warnings, collected in the statistics, and the issue is migrated without them.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .exceptions import MigrationError, PhaseError
from .issue_builder import build_issue_payload
from .resolver import resolve_references

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .models import Issue, Label, Milestone, ResolutionWarning
    from .protocols import SourceSystem, TargetSystem


class MigrationPhase(enum.Enum):
    """States of a migration run. DONE and FAILED are terminal."""

    INIT = "init"
    MILESTONES = "milestones"
    LABELS = "labels"
    ISSUES = "issues"
    DONE = "done"
    FAILED = "failed"


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    milestones_created: int = 0
    milestones_skipped: int = 0
    labels_created: int = 0
    labels_skipped: int = 0
    issues_created: int = 0
    issues_updated: int = 0
    warnings: list[ResolutionWarning] = field(default_factory=list)


@dataclass
class MigrationResult:
    """Result of a successful migration run."""

    success: bool
    stats: MigrationStats


class Migrator:
    """Orchestrates migration from a source system to a target system.

    Usage:
        source = GitLabSource(gitlab_client, "group/project")
        target = GiteaTarget(gitea_client, "owner/repo")
        source.validate_access()
        target.validate_access()
        result = Migrator(source, target).migrate()

    A Migrator instance performs one run. All progress is reported through
    the injected logger.
    """

    _source: SourceSystem
    _target: TargetSystem
    _logger: logging.Logger
    _tag_source: bool
    phase: MigrationPhase
    stats: MigrationStats

    def __init__(
        self,
        source: SourceSystem,
        target: TargetSystem,
        *,
        logger: logging.Logger | None = None,
        tag_source: bool = False,
    ) -> None:
        """Initialize the migrator.

        Args:
            source: Source system to migrate from
            target: Target system to migrate to
            logger: Logger receiving all progress output, defaults to the module logger
            tag_source: Prefix migrated issue bodies with a reference to the source issue
        """
        self._source = source
        self._target = target
        self._logger = logger or logging.getLogger(__name__)
        self._tag_source = tag_source
        self.phase = MigrationPhase.INIT
        self.stats = MigrationStats()

    def migrate(self) -> MigrationResult:
        """Run all phases in order: milestones, labels, issues.

        Returns:
            MigrationResult with statistics

        Raises:
            PhaseError: If a phase fails; the remaining phases are not run
        """
        if self.phase is not MigrationPhase.INIT:
            msg = f"Migrator already ran (state: {self.phase.value})"
            raise MigrationError(msg)

        phases: list[tuple[MigrationPhase, Callable[[], None]]] = [
            (MigrationPhase.MILESTONES, self.migrate_milestones),
            (MigrationPhase.LABELS, self.migrate_labels),
            (MigrationPhase.ISSUES, self.migrate_issues),
        ]
        for phase, run_phase in phases:
            self.phase = phase
            self._logger.info(f"Migrating {phase.value}")
            try:
                run_phase()
            except MigrationError as e:
                self.phase = MigrationPhase.FAILED
                raise PhaseError(phase.value, e) from e

        self.phase = MigrationPhase.DONE
        return MigrationResult(success=True, stats=self.stats)

    def migrate_milestones(self) -> None:
        """Create the active source milestones missing from the target."""
        existing = self._target.get_milestones()

        for milestone in self._source.get_open_milestones():
            if milestone.title in existing:
                self._logger.debug(f"Milestone already exists: {milestone.title}")
                self.stats.milestones_skipped += 1
                continue

            self._target.create_milestone(milestone)
            self.stats.milestones_created += 1
            self._logger.info(f"Created milestone: {milestone.title}")

    def migrate_labels(self) -> None:
        """Create the source labels missing from the target."""
        existing = self._target.get_labels()

        for label in self._source.get_labels():
            if label.name in existing:
                self._logger.debug(f"Label already exists: {label.name}")
                self.stats.labels_skipped += 1
                continue

            self._target.create_label(label)
            self.stats.labels_created += 1
            self._logger.info(f"Created label: {label.name} ({label.color})")

    def migrate_issues(self) -> None:
        """Create or update every open source issue in the target."""
        target_issues = self._target.get_issues()
        target_milestones = self._target.get_milestones()
        target_labels = self._target.get_labels()

        for issue in self._source.get_open_issues():
            self.migrate_issue(issue, target_milestones, target_labels, target_issues)

    def migrate_issue(
        self,
        issue: Issue,
        milestones: Mapping[str, Milestone],
        labels: Mapping[str, Label],
        existing_issues: Mapping[str, Issue],
    ) -> None:
        """Migrate a single issue: create it, or overwrite the target issue with the same title."""
        resolution = resolve_references(issue, milestones, labels)
        for warning in resolution.warnings:
            if warning.kind == "unknown-milestone":
                self._logger.warning(f"Unknown milestone '{warning.value}' on issue '{issue.title}'")
            else:
                self._logger.warning(f"Unknown label '{warning.value}' on issue '{issue.title}'")
        self.stats.warnings.extend(resolution.warnings)

        payload = build_issue_payload(issue, resolution, tag_source=self._tag_source)

        existing = existing_issues.get(issue.title)
        if existing is None or existing.index is None:
            self._target.create_issue(payload)
            self.stats.issues_created += 1
            self._logger.info(f"Created issue: {issue.title}")
            return

        self._target.edit_issue(existing.index, payload)
        try:
            self._target.replace_issue_labels(existing.index, payload.label_ids)
        except MigrationError:
            self._logger.error(f"Issue '{issue.title}' (#{existing.index}) was edited but its labels were not replaced")
            raise
        self.stats.issues_updated += 1
        self._logger.info(f"Updated issue: {issue.title}")
