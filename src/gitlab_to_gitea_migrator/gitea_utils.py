from __future__ import annotations

import logging
from typing import Final

from . import utils
from .gitea_client import GiteaClient

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "GITEA_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "gitea/cli/token"  # noqa: S105


def get_token(token: str | None = None, pass_path: str | None = None) -> str | None:
    """Get Gitea token from argument, pass path, env var GITEA_TOKEN, or default pass location."""
    return utils.resolve_token(
        "Gitea",
        token=token,
        pass_path=pass_path,
        env_var=_TOKEN_ENV_VAR,
        default_pass_path=_DEFAULT_TOKEN_PASS_PATH,
    )


def get_client(server_url: str, token: str) -> GiteaClient:
    """Get a Gitea client for the server at server_url using the token."""
    return GiteaClient(server_url, token)
