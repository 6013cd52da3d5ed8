"""GitHub implementation of the TargetSystem protocol.

GitHub identifies milestones and issues by their per-repository number, so
Milestone.id and Issue.index both hold that number. Labels are set by name;
label IDs are translated back to names using the labels seen while listing
or creating them. GitHub issues have no due date, so issue due dates are
not migrated.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import requests
from github import GithubException, UnknownObjectException

from . import utils
from .exceptions import MigrationError, RemoteOperationError, SetupError
from .models import Issue, IssuePayload, Label, Milestone
from .pagination import build_lookup, iter_pages

if TYPE_CHECKING:
    from collections.abc import Iterator

    import github.Issue
    import github.Label
    import github.Milestone
    from github import Github
    from github.Repository import Repository

logger: logging.Logger = logging.getLogger(__name__)


@contextmanager
def _operation(name: str) -> Iterator[None]:
    try:
        yield
    except (GithubException, requests.RequestException) as e:
        raise RemoteOperationError(name, e) from e


def _to_milestone(milestone: github.Milestone.Milestone) -> Milestone:
    return Milestone(
        title=milestone.title,
        description=milestone.description or "",
        due_date=milestone.due_on,
        state="closed" if milestone.state == "closed" else "open",
        id=milestone.number,
    )


def _to_label(label: github.Label.Label) -> Label:
    return Label(
        name=label.name,
        color=f"#{label.color}",
        description=label.description or "",
        id=label.id,
    )


def _to_issue(issue: github.Issue.Issue) -> Issue:
    return Issue(
        title=issue.title,
        body=issue.body or "",
        state="closed" if issue.state == "closed" else "open",
        milestone_title=issue.milestone.title if issue.milestone else None,
        labels=[label.name for label in issue.labels],
        index=issue.number,
        web_url=issue.html_url,
    )


class GitHubTarget:
    """Reads existing state from and writes milestones, labels and issues to a GitHub repository."""

    _client: Github
    _project_path: str
    _repo: Repository | None
    _milestones: dict[int, github.Milestone.Milestone]
    _labels: dict[int, Label]

    def __init__(self, client: Github, project_path: str) -> None:
        self._client = client
        self._project_path = project_path
        self._repo = None
        self._milestones = {}
        self._labels = {}

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            msg = "GitHub repository not loaded yet. Call validate_access() first."
            raise MigrationError(msg)
        return self._repo

    def validate_access(self) -> None:
        """Check the GitHub credentials by loading the current user, then load the repository."""
        try:
            _ = self._client.get_user().login
        except (GithubException, requests.RequestException) as e:
            msg = f"getting GitHub user info: {e}"
            raise SetupError(msg) from e

        try:
            utils.split_project_path(self._project_path)
        except ValueError as e:
            msg = f"wrong format of GitHub project name: {e}"
            raise SetupError(msg) from e

        try:
            self._repo = self._client.get_repo(self._project_path)
        except UnknownObjectException as e:
            msg = f"getting GitHub repo info: repository {self._project_path} not found"
            raise SetupError(msg) from e
        except (GithubException, requests.RequestException) as e:
            msg = f"getting GitHub repo info: {e}"
            raise SetupError(msg) from e

        logger.info(f"GitHub API access validated for repository {self._project_path} (id {self._repo.id})")

    def get_milestones(self) -> dict[str, Milestone]:
        with _operation("list GitHub milestones"):
            paginated = self.repo.get_milestones(state="all")
            milestones = list(iter_pages(lambda page: paginated.get_page(page - 1)))
        for milestone in milestones:
            self._milestones[milestone.number] = milestone
        return build_lookup((_to_milestone(m) for m in milestones), lambda m: m.title)

    def get_labels(self) -> dict[str, Label]:
        with _operation("list GitHub labels"):
            paginated = self.repo.get_labels()
            labels = [_to_label(label) for label in iter_pages(lambda page: paginated.get_page(page - 1))]
        for label in labels:
            self._labels[label.id] = label
        return build_lookup(labels, lambda label: label.name)

    def get_issues(self) -> dict[str, Issue]:
        with _operation("list GitHub issues"):
            paginated = self.repo.get_issues(state="all")
            issues = list(iter_pages(lambda page: paginated.get_page(page - 1)))
        # The issues endpoint also returns pull requests
        return build_lookup(
            (_to_issue(issue) for issue in issues if issue.pull_request is None),
            lambda issue: issue.title,
        )

    def _milestone(self, number: int) -> github.Milestone.Milestone:
        if number not in self._milestones:
            self._milestones[number] = self.repo.get_milestone(number)
        return self._milestones[number]

    def _labels_by_id(self, label_ids: list[int]) -> list[Label]:
        labels: list[Label] = []
        for label_id in label_ids:
            if label_id not in self._labels:
                msg = f"GitHub label with id {label_id} was not listed or created in this run"
                raise MigrationError(msg)
            labels.append(self._labels[label_id])
        return labels

    def create_milestone(self, milestone: Milestone) -> Milestone:
        with _operation("create milestone"):
            if milestone.due_date is not None:
                created = self.repo.create_milestone(
                    title=milestone.title,
                    state="open",
                    description=milestone.description,
                    due_on=milestone.due_date.date(),
                )
            else:
                created = self.repo.create_milestone(
                    title=milestone.title, state="open", description=milestone.description
                )
        self._milestones[created.number] = created
        return _to_milestone(created)

    def create_label(self, label: Label) -> Label:
        with _operation("create label"):
            created = self.repo.create_label(
                name=label.name,
                color=label.color.lstrip("#"),
                description=label.description,
            )
        created_label = _to_label(created)
        self._labels[created.id] = created_label
        return created_label

    def create_issue(self, payload: IssuePayload) -> Issue:
        if payload.due_date is not None:
            logger.debug(f"GitHub issues have no due date, dropping it for '{payload.title}'")
        labels = [label.name for label in self._labels_by_id(payload.label_ids)]
        with _operation("create issue"):
            if payload.milestone_id is not None:
                created = self.repo.create_issue(
                    title=payload.title,
                    body=payload.body,
                    milestone=self._milestone(payload.milestone_id),
                    labels=labels,
                )
            else:
                created = self.repo.create_issue(title=payload.title, body=payload.body, labels=labels)
        return _to_issue(created)

    def edit_issue(self, index: int, payload: IssuePayload) -> Issue:
        if payload.due_date is not None:
            logger.debug(f"GitHub issues have no due date, dropping it for '{payload.title}'")
        with _operation("edit issue"):
            issue = self.repo.get_issue(index)
            # None clears the milestone
            milestone = self._milestone(payload.milestone_id) if payload.milestone_id is not None else None
            issue.edit(title=payload.title, body=payload.body, milestone=milestone)
            return _to_issue(issue)

    def replace_issue_labels(self, index: int, label_ids: list[int]) -> list[Label]:
        labels = self._labels_by_id(label_ids)
        with _operation("replace issue labels"):
            issue = self.repo.get_issue(index)
            issue.set_labels(*(label.name for label in labels))
        return labels
