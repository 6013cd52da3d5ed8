from __future__ import annotations

import datetime as dt
import logging
from typing import Final

from gitlab import Gitlab

from . import utils

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_SERVER: Final[str] = "https://gitlab.com"
_TOKEN_ENV_VAR: Final[str] = "GITLAB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "gitlab/cli/ro_token"  # noqa: S105


def get_token(token: str | None = None, pass_path: str | None = None) -> str | None:
    """Get GitLab token from argument, pass path, env var GITLAB_TOKEN, or default pass location."""
    return utils.resolve_token(
        "GitLab",
        token=token,
        pass_path=pass_path,
        env_var=_TOKEN_ENV_VAR,
        default_pass_path=_DEFAULT_TOKEN_PASS_PATH,
    )


def get_client(url: str = DEFAULT_SERVER, token: str | None = None) -> Gitlab:
    """Get a GitLab client for the server at url using the token."""
    return Gitlab(url=url.rstrip("/"), private_token=token)


def parse_due_date(due_date: str | None) -> dt.datetime | None:
    """Convert a GitLab due date ("YYYY-MM-DD") to a UTC midnight timestamp."""
    if not due_date:
        return None
    return dt.datetime.strptime(due_date, "%Y-%m-%d").replace(tzinfo=dt.UTC)
