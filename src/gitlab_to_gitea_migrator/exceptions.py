"""
Custom exception classes for the GitLab to Gitea migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class SetupError(MigrationError):
    """Raised when the migration cannot start (credentials, server, project lookup)."""


class RemoteOperationError(MigrationError):
    """Raised when a remote listing or mutation fails.

    The message is prefixed with the name of the failed operation.
    """

    operation: str

    def __init__(self, operation: str, cause: object) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {cause}")


class PhaseError(MigrationError):
    """Raised by the migrator when a migration phase aborts."""

    phase: str

    def __init__(self, phase: str, cause: object) -> None:
        self.phase = phase
        super().__init__(f"migrating {phase}: {cause}")
