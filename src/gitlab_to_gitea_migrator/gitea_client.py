"""Minimal Gitea REST API client built on requests."""

from __future__ import annotations

import logging
from typing import Any

import requests

logger: logging.Logger = logging.getLogger(__name__)


class GiteaError(Exception):
    """Raised when a Gitea API request fails."""

    status: int | None
    message: str

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        prefix = f"HTTP {status}: " if status is not None else ""
        super().__init__(f"{prefix}{message}")


class GiteaClient:
    """Gitea API client with token authentication.

    Only the endpoints needed for milestone, label and issue migration are
    implemented. All methods return the decoded JSON response.
    """

    base_url: str
    session: requests.Session

    def __init__(self, server_url: str, token: str, *, session: requests.Session | None = None) -> None:
        self.base_url = server_url.rstrip("/") + "/api/v1"
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {token}",
                "Accept": "application/json",
            }
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"Gitea {method} {url} params={params}")
        try:
            response = self.session.request(method, url, params=params, json=json)
        except requests.RequestException as e:
            raise GiteaError(None, str(e)) from e

        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = None
            message = data.get("message") if isinstance(data, dict) else None
            raise GiteaError(response.status_code, message or response.text or response.reason)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            msg = f"invalid JSON in response: {e}"
            raise GiteaError(response.status_code, msg) from e

    def get_my_user_info(self) -> dict[str, Any]:
        return self._request("GET", "/user")

    def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        return self._request("GET", f"/repos/{owner}/{repo}")

    def list_repo_milestones(
        self, owner: str, repo: str, *, state: str = "all", page: int = 1, limit: int = 50
    ) -> list[dict[str, Any]]:
        params = {"state": state, "page": page, "limit": limit}
        return self._request("GET", f"/repos/{owner}/{repo}/milestones", params=params) or []

    def list_repo_labels(self, owner: str, repo: str, *, page: int = 1, limit: int = 50) -> list[dict[str, Any]]:
        params = {"page": page, "limit": limit}
        return self._request("GET", f"/repos/{owner}/{repo}/labels", params=params) or []

    def list_repo_issues(
        self, owner: str, repo: str, *, state: str = "all", page: int = 1, limit: int = 50
    ) -> list[dict[str, Any]]:
        params = {"state": state, "type": "issues", "page": page, "limit": limit}
        return self._request("GET", f"/repos/{owner}/{repo}/issues", params=params) or []

    def create_milestone(self, owner: str, repo: str, options: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/repos/{owner}/{repo}/milestones", json=options)

    def create_label(self, owner: str, repo: str, options: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/repos/{owner}/{repo}/labels", json=options)

    def create_issue(self, owner: str, repo: str, options: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/repos/{owner}/{repo}/issues", json=options)

    def edit_issue(self, owner: str, repo: str, index: int, options: dict[str, Any]) -> dict[str, Any]:
        return self._request("PATCH", f"/repos/{owner}/{repo}/issues/{index}", json=options)

    def replace_issue_labels(self, owner: str, repo: str, index: int, label_ids: list[int]) -> list[dict[str, Any]]:
        return self._request("PUT", f"/repos/{owner}/{repo}/issues/{index}/labels", json={"labels": label_ids}) or []
