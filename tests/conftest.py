"""
Pytest configuration and fixtures.

This module configures pytest behavior for different test types:
- Integration tests: Fail on any warnings from the code under test
- Unit tests: Allow warnings (unknown references are expected in some scenarios)

It also provides in-memory source and target systems for driving the Migrator
without network access.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from typing_extensions import override

import pytest

from gitlab_to_gitea_migrator.exceptions import RemoteOperationError
from gitlab_to_gitea_migrator.models import Issue, IssuePayload, Label, Milestone
from gitlab_to_gitea_migrator.pagination import PAGE_SIZE, build_lookup, iter_pages

if TYPE_CHECKING:
    from collections.abc import Generator, Iterator

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Custom logging handler to capture warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Capture WARNING and above level logs."""
        _integration_test_warnings.setdefault(self.test_nodeid, []).append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """
    Automatically fail integration tests if any WARNING level logs are emitted from the code under test.

    An unknown milestone or label on a real test project means the migration
    order or the matching is broken, so integration runs must stay warning-free.
    """
    if request.node.get_closest_marker("integration") is None:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """Mark a passed integration test as failed if warnings were logged during its call phase."""
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        warning_records = _integration_test_warnings.get(item.nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]
            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(item.nodeid, None)


class FakeSource:
    """In-memory SourceSystem serving its items in pages of PAGE_SIZE."""

    milestones: list[Milestone]
    labels: list[Label]
    issues: list[Issue]
    page_requests: list[tuple[str, int]]

    def __init__(self) -> None:
        self.milestones = []
        self.labels = []
        self.issues = []
        self.page_requests = []

    def _pages(self, kind: str, items: list[Any]) -> Iterator[Any]:
        def fetch_page(page: int) -> list[Any]:
            self.page_requests.append((kind, page))
            start = (page - 1) * PAGE_SIZE
            return items[start : start + PAGE_SIZE]

        return iter_pages(fetch_page)

    def validate_access(self) -> None:
        pass

    def get_open_milestones(self) -> Iterator[Milestone]:
        return self._pages("milestones", [m for m in self.milestones if m.state == "open"])

    def get_labels(self) -> Iterator[Label]:
        return self._pages("labels", self.labels)

    def get_open_issues(self) -> Iterator[Issue]:
        return self._pages("issues", [i for i in self.issues if i.state == "open"])


class FakeTarget:
    """In-memory TargetSystem recording every call it receives."""

    milestones: list[Milestone]
    labels: list[Label]
    issues: list[Issue]
    calls: list[tuple[Any, ...]]
    fail_on: set[str]

    def __init__(self) -> None:
        self.milestones = []
        self.labels = []
        self.issues = []
        self.calls = []
        self.fail_on = set()
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise RemoteOperationError(call[0].replace("_", " "), "HTTP 500: Internal Server Error")

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def add_milestone(self, title: str, *, state: str = "open") -> Milestone:
        milestone = Milestone(title=title, state=state, id=self._new_id())  # type: ignore[arg-type]
        self.milestones.append(milestone)
        return milestone

    def add_label(self, name: str, color: str = "#ff0000") -> Label:
        label = Label(name=name, color=color, id=self._new_id())
        self.labels.append(label)
        return label

    def add_issue(self, title: str, *, index: int, state: str = "open", labels: list[str] | None = None) -> Issue:
        issue = Issue(title=title, state=state, index=index, labels=labels or [])  # type: ignore[arg-type]
        self.issues.append(issue)
        return issue

    def validate_access(self) -> None:
        pass

    def get_milestones(self) -> dict[str, Milestone]:
        self._record("get_milestones")
        return build_lookup(self.milestones, lambda m: m.title)

    def get_labels(self) -> dict[str, Label]:
        self._record("get_labels")
        return build_lookup(self.labels, lambda label: label.name)

    def get_issues(self) -> dict[str, Issue]:
        self._record("get_issues")
        return build_lookup(self.issues, lambda issue: issue.title)

    def create_milestone(self, milestone: Milestone) -> Milestone:
        self._record("create_milestone", milestone.title)
        created = replace(milestone, id=self._new_id())
        self.milestones.append(created)
        return created

    def create_label(self, label: Label) -> Label:
        self._record("create_label", label.name)
        created = replace(label, id=self._new_id())
        self.labels.append(created)
        return created

    def _apply(self, issue: Issue, payload: IssuePayload) -> None:
        milestones_by_id = {m.id: m.title for m in self.milestones}
        labels_by_id = {label.id: label.name for label in self.labels}
        issue.title = payload.title
        issue.body = payload.body
        issue.due_date = payload.due_date
        issue.milestone_title = milestones_by_id.get(payload.milestone_id)
        issue.labels = [labels_by_id[label_id] for label_id in payload.label_ids]

    def create_issue(self, payload: IssuePayload) -> Issue:
        self._record("create_issue", payload)
        issue = Issue(title=payload.title, index=max((i.index or 0 for i in self.issues), default=0) + 1)
        self._apply(issue, payload)
        self.issues.append(issue)
        return issue

    def _issue(self, index: int) -> Issue:
        return next(issue for issue in self.issues if issue.index == index)

    def edit_issue(self, index: int, payload: IssuePayload) -> Issue:
        self._record("edit_issue", index, payload)
        issue = self._issue(index)
        labels = issue.labels
        self._apply(issue, payload)
        issue.labels = labels
        return issue

    def replace_issue_labels(self, index: int, label_ids: list[int]) -> list[Label]:
        self._record("replace_issue_labels", index, list(label_ids))
        issue = self._issue(index)
        labels_by_id = {label.id: label for label in self.labels}
        issue.labels = [labels_by_id[label_id].name for label_id in label_ids]
        return [labels_by_id[label_id] for label_id in label_ids]


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def fake_target() -> FakeTarget:
    return FakeTarget()
