"""
GitLab to Gitea Migration Tool

Migrates the milestones, labels and open issues of a GitLab project to a
Gitea (or GitHub) repository. Re-running the migration does not create
duplicates: existing milestones and labels are skipped, existing issues
are updated in place.
"""

from __future__ import annotations

from .cli import main
from .exceptions import MigrationError, PhaseError, RemoteOperationError, SetupError
from .gitea_target import GiteaTarget
from .github_target import GitHubTarget
from .gitlab_source import GitLabSource
from .migrator import MigrationPhase, MigrationResult, MigrationStats, Migrator
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "GitHubTarget",
    "GitLabSource",
    "GiteaTarget",
    "MigrationError",
    "MigrationPhase",
    "MigrationResult",
    "MigrationStats",
    "Migrator",
    "PhaseError",
    "RemoteOperationError",
    "SetupError",
    "main",
    "setup_logging",
]
