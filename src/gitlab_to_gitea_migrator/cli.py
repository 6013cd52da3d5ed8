"""
Command-line interface for the GitLab to Gitea migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from . import gitea_utils, github_utils
from . import gitlab_utils as glu
from .exceptions import MigrationError, SetupError
from .gitea_target import GiteaTarget
from .github_target import GitHubTarget
from .gitlab_source import GitLabSource
from .migrator import Migrator
from .utils import PassError, setup_logging

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .protocols import TargetSystem

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate labels, issues and milestones from GitLab to Gitea (or GitHub)."
    )

    _ = parser.add_argument("--gitlab-project", required=True, help="GitLab project path (namespace/name)")
    _ = parser.add_argument(
        "--gitlab-server", default=glu.DEFAULT_SERVER, help=f"GitLab server URL (default: {glu.DEFAULT_SERVER})"
    )
    _ = parser.add_argument("--gitlab-token", help="Token for GitLab API access (default: env var GITLAB_TOKEN)")
    _ = parser.add_argument(
        "--gitlab-pass-token", help="Path for GitLab token in pass utility (default: gitlab/cli/ro_token)"
    )

    _ = parser.add_argument(
        "--target", choices=["gitea", "github"], default="gitea", help="Target system (default: gitea)"
    )
    _ = parser.add_argument(
        "--target-project", help="Target project path (owner/name). Defaults to the GitLab project path"
    )
    _ = parser.add_argument(
        "--target-server",
        help=f"Target server URL. Required for Gitea; GitHub defaults to {github_utils.DEFAULT_SERVER}",
    )
    _ = parser.add_argument(
        "--target-token", help="Token for target API access (default: env var GITEA_TOKEN or GITHUB_TOKEN)"
    )
    _ = parser.add_argument(
        "--target-pass-token", help="Path for target token in pass utility (default: gitea/cli/token or github/cli/token)"
    )

    _ = parser.add_argument(
        "--tag-source",
        action="store_true",
        help="Prefix migrated issue bodies with a link to the GitLab issue",
    )
    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)
    if args.target == "gitea" and not args.target_server:
        parser.error("--target-server is required when the target is gitea")
    return args


def _require_token(service: str, lookup: Callable[[], str | None]) -> str:
    try:
        token = lookup()
    except (PassError, ValueError, OSError) as e:
        msg = f"reading {service} token: {e}"
        raise SetupError(msg) from e
    if not token:
        msg = f"reading {service} token: no token specified nor found"
        raise SetupError(msg)
    return token


def build_source(args: argparse.Namespace) -> GitLabSource:
    """Create the GitLab source from the command line arguments."""
    token = _require_token("GitLab", lambda: glu.get_token(args.gitlab_token, args.gitlab_pass_token))
    client = glu.get_client(args.gitlab_server, token)
    return GitLabSource(client, args.gitlab_project)


def build_target(args: argparse.Namespace) -> TargetSystem:
    """Create the Gitea or GitHub target from the command line arguments."""
    project = args.target_project or args.gitlab_project

    if args.target == "github":
        token = _require_token("GitHub", lambda: github_utils.get_token(args.target_token, args.target_pass_token))
        client = github_utils.get_client(token, args.target_server or github_utils.DEFAULT_SERVER)
        return GitHubTarget(client, project)

    token = _require_token("Gitea", lambda: gitea_utils.get_token(args.target_token, args.target_pass_token))
    return GiteaTarget(gitea_utils.get_client(args.target_server, token), project)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose)

    try:
        source = build_source(args)
        target = build_target(args)
        source.validate_access()
        target.validate_access()
    except SetupError:
        logger.exception("Creating migrator failed")
        sys.exit(1)

    migrator = Migrator(source, target, tag_source=args.tag_source)
    try:
        result = migrator.migrate()
    except MigrationError:
        logger.exception("Migrating the project failed")
        sys.exit(1)

    stats = result.stats
    logger.info(
        f"Migration finished successfully: "
        f"{stats.milestones_created} milestones created, "
        f"{stats.labels_created} labels created, "
        f"{stats.issues_created} issues created, "
        f"{stats.issues_updated} issues updated, "
        f"{len(stats.warnings)} unresolved references"
    )
    sys.exit(0)
