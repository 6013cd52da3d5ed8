"""GitLab implementation of the SourceSystem protocol."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests
from gitlab.exceptions import GitlabError

from . import gitlab_utils as glu
from .exceptions import MigrationError, RemoteOperationError, SetupError
from .models import Issue, Label, Milestone
from .pagination import PAGE_SIZE, iter_pages

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from gitlab import Gitlab
    from gitlab.v4.objects import Project as GitlabProject

logger: logging.Logger = logging.getLogger(__name__)


class GitLabSource:
    """Reads milestones, labels and open issues from a GitLab project."""

    _client: Gitlab
    _project_path: str
    _project: GitlabProject | None

    def __init__(self, client: Gitlab, project_path: str) -> None:
        self._client = client
        self._project_path = project_path
        self._project = None

    @property
    def project(self) -> GitlabProject:
        if self._project is None:
            msg = "GitLab project not loaded yet. Call validate_access() first."
            raise MigrationError(msg)
        return self._project

    def validate_access(self) -> None:
        """Check the GitLab credentials by loading the current user, then load the project."""
        try:
            # get the current user to check that the auth and connection works
            self._client.auth()
        except (GitlabError, requests.RequestException) as e:
            msg = f"getting GitLab user status: {e}"
            raise SetupError(msg) from e

        try:
            self._project = self._client.projects.get(self._project_path)
        except (GitlabError, requests.RequestException) as e:
            msg = f"getting GitLab project info: {e}"
            raise SetupError(msg) from e

        logger.info(f"GitLab API access validated for project {self._project_path} (id {self._project.id})")

    def _page_fetcher(self, operation: str, manager: Any, **filters: Any) -> Callable[[int], list[Any]]:
        def fetch_page(page: int) -> list[Any]:
            try:
                return manager.list(page=page, per_page=PAGE_SIZE, **filters)
            except (GitlabError, requests.RequestException) as e:
                raise RemoteOperationError(operation, e) from e

        return fetch_page

    def get_open_milestones(self) -> Iterator[Milestone]:
        fetch_page = self._page_fetcher("list GitLab milestones", self.project.milestones, state="active")
        for gitlab_milestone in iter_pages(fetch_page):
            yield Milestone(
                title=gitlab_milestone.title,
                description=getattr(gitlab_milestone, "description", None) or "",
                due_date=glu.parse_due_date(getattr(gitlab_milestone, "due_date", None)),
                state="open" if gitlab_milestone.state == "active" else "closed",
            )

    def get_labels(self) -> Iterator[Label]:
        fetch_page = self._page_fetcher("list GitLab labels", self.project.labels)
        for gitlab_label in iter_pages(fetch_page):
            yield Label(
                name=gitlab_label.name,
                color=gitlab_label.color,
                description=getattr(gitlab_label, "description", None) or "",
            )

    def get_open_issues(self) -> Iterator[Issue]:
        fetch_page = self._page_fetcher("list GitLab issues", self.project.issues, state="opened")
        for gitlab_issue in iter_pages(fetch_page):
            milestone: dict[str, Any] | None = getattr(gitlab_issue, "milestone", None)
            yield Issue(
                title=gitlab_issue.title,
                body=getattr(gitlab_issue, "description", None) or "",
                state="open" if gitlab_issue.state == "opened" else "closed",
                due_date=glu.parse_due_date(getattr(gitlab_issue, "due_date", None)),
                milestone_title=milestone["title"] if milestone else None,
                labels=list(getattr(gitlab_issue, "labels", None) or []),
                source_number=gitlab_issue.iid,
                web_url=getattr(gitlab_issue, "web_url", ""),
            )
