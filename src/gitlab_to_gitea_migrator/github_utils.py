from __future__ import annotations

import logging
from typing import Final

from github import Auth, Github

from . import utils
from .pagination import PAGE_SIZE

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_SERVER: Final[str] = "https://api.github.com"
_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105


def get_token(token: str | None = None, pass_path: str | None = None) -> str | None:
    """Get GitHub token from argument, pass path, env var GITHUB_TOKEN, or default pass location."""
    return utils.resolve_token(
        "GitHub",
        token=token,
        pass_path=pass_path,
        env_var=_TOKEN_ENV_VAR,
        default_pass_path=_DEFAULT_TOKEN_PASS_PATH,
    )


def get_client(token: str, base_url: str = DEFAULT_SERVER) -> Github:
    """Get a GitHub client using the token."""
    return Github(auth=Auth.Token(token), base_url=base_url.rstrip("/"), per_page=PAGE_SIZE)
