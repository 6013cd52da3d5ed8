"""Gitea implementation of the TargetSystem protocol."""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from . import utils
from .exceptions import RemoteOperationError, SetupError
from .gitea_client import GiteaClient, GiteaError
from .models import Issue, IssuePayload, Label, Milestone
from .pagination import PAGE_SIZE, build_lookup, iter_pages

if TYPE_CHECKING:
    from collections.abc import Iterator

logger: logging.Logger = logging.getLogger(__name__)


@contextmanager
def _operation(name: str) -> Iterator[None]:
    try:
        yield
    except GiteaError as e:
        raise RemoteOperationError(name, e) from e
    except KeyError as e:
        raise RemoteOperationError(name, f"missing field {e} in Gitea response") from e


def _parse_timestamp(value: str | None) -> dt.datetime | None:
    if not value:
        return None
    return dt.datetime.fromisoformat(value)


def _format_timestamp(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.UTC)
    return value.isoformat()


def _milestone_from_json(data: dict[str, Any]) -> Milestone:
    return Milestone(
        title=data["title"],
        description=data.get("description") or "",
        due_date=_parse_timestamp(data.get("due_on")),
        state="closed" if data.get("state") == "closed" else "open",
        id=data["id"],
    )


def _label_from_json(data: dict[str, Any]) -> Label:
    return Label(
        name=data["name"],
        color=data.get("color") or "",
        description=data.get("description") or "",
        id=data["id"],
    )


def _issue_from_json(data: dict[str, Any]) -> Issue:
    milestone = data.get("milestone")
    return Issue(
        title=data["title"],
        body=data.get("body") or "",
        state="closed" if data.get("state") == "closed" else "open",
        due_date=_parse_timestamp(data.get("due_date")),
        milestone_title=milestone["title"] if milestone else None,
        labels=[label["name"] for label in data.get("labels") or []],
        index=data["number"],
        web_url=data.get("html_url") or "",
    )


class GiteaTarget:
    """Reads existing state from and writes milestones, labels and issues to a Gitea repository."""

    _client: GiteaClient
    _project_path: str
    owner: str
    repo: str
    repo_id: int | None

    def __init__(self, client: GiteaClient, project_path: str) -> None:
        self._client = client
        self._project_path = project_path
        self.owner = ""
        self.repo = ""
        self.repo_id = None

    def validate_access(self) -> None:
        """Check the Gitea credentials by loading the current user, then load the repository."""
        try:
            # get the user info to check that the auth and connection works
            self._client.get_my_user_info()
        except GiteaError as e:
            msg = f"getting Gitea user info: {e}"
            raise SetupError(msg) from e

        try:
            self.owner, self.repo = utils.split_project_path(self._project_path)
        except ValueError as e:
            msg = f"wrong format of Gitea project name: {e}"
            raise SetupError(msg) from e

        try:
            self.repo_id = self._client.get_repo(self.owner, self.repo)["id"]
        except GiteaError as e:
            msg = f"getting Gitea repo info: {e}"
            raise SetupError(msg) from e
        except KeyError as e:
            msg = f"getting Gitea repo info: missing field {e} in Gitea response"
            raise SetupError(msg) from e

        logger.info(f"Gitea API access validated for repository {self._project_path} (id {self.repo_id})")

    def get_milestones(self) -> dict[str, Milestone]:
        with _operation("list Gitea milestones"):
            items = iter_pages(
                lambda page: self._client.list_repo_milestones(
                    self.owner, self.repo, state="all", page=page, limit=PAGE_SIZE
                )
            )
            return build_lookup((_milestone_from_json(item) for item in items), lambda m: m.title)

    def get_labels(self) -> dict[str, Label]:
        with _operation("list Gitea labels"):
            items = iter_pages(
                lambda page: self._client.list_repo_labels(self.owner, self.repo, page=page, limit=PAGE_SIZE)
            )
            return build_lookup((_label_from_json(item) for item in items), lambda label: label.name)

    def get_issues(self) -> dict[str, Issue]:
        with _operation("list Gitea issues"):
            items = iter_pages(
                lambda page: self._client.list_repo_issues(
                    self.owner, self.repo, state="all", page=page, limit=PAGE_SIZE
                )
            )
            # Older Gitea versions ignore the type filter
            issues = (_issue_from_json(item) for item in items if not item.get("pull_request"))
            return build_lookup(issues, lambda issue: issue.title)

    def create_milestone(self, milestone: Milestone) -> Milestone:
        options: dict[str, Any] = {"title": milestone.title, "description": milestone.description}
        if milestone.due_date is not None:
            options["due_on"] = _format_timestamp(milestone.due_date)
        with _operation("create milestone"):
            return _milestone_from_json(self._client.create_milestone(self.owner, self.repo, options))

    def create_label(self, label: Label) -> Label:
        color = label.color if label.color.startswith("#") else f"#{label.color}"
        options = {"name": label.name, "color": color, "description": label.description}
        with _operation("create label"):
            return _label_from_json(self._client.create_label(self.owner, self.repo, options))

    def create_issue(self, payload: IssuePayload) -> Issue:
        options: dict[str, Any] = {"title": payload.title, "body": payload.body, "labels": payload.label_ids}
        if payload.milestone_id is not None:
            options["milestone"] = payload.milestone_id
        if payload.due_date is not None:
            options["due_date"] = _format_timestamp(payload.due_date)
        with _operation("create issue"):
            return _issue_from_json(self._client.create_issue(self.owner, self.repo, options))

    def edit_issue(self, index: int, payload: IssuePayload) -> Issue:
        # Milestone 0 clears the milestone
        options: dict[str, Any] = {
            "title": payload.title,
            "body": payload.body,
            "milestone": payload.milestone_id or 0,
        }
        if payload.due_date is not None:
            options["due_date"] = _format_timestamp(payload.due_date)
        else:
            options["unset_due_date"] = True
        with _operation("edit issue"):
            return _issue_from_json(self._client.edit_issue(self.owner, self.repo, index, options))

    def replace_issue_labels(self, index: int, label_ids: list[int]) -> list[Label]:
        with _operation("replace issue labels"):
            return [
                _label_from_json(item)
                for item in self._client.replace_issue_labels(self.owner, self.repo, index, list(label_ids))
            ]
