"""
Integration tests for the GitLab to Gitea migration using real APIs

These tests read a real GitLab project and write into a real Gitea repository.

Test source: GitLab project (set via SOURCE_GITLAB_TEST_PROJECT environment variable)
Test target: Gitea repository (set via TARGET_GITEA_TEST_SERVER and TARGET_GITEA_TEST_PROJECT)

The Gitea repository must exist and should be disposable: running the tests
creates milestones, labels and issues in it.
"""

import os

import pytest

from gitlab_to_gitea_migrator import GiteaTarget, GitLabSource, MigrationPhase, Migrator
from gitlab_to_gitea_migrator import gitea_utils
from gitlab_to_gitea_migrator import gitlab_utils as glu

_REQUIRED_ENV_VARS = ("SOURCE_GITLAB_TEST_PROJECT", "TARGET_GITEA_TEST_SERVER", "TARGET_GITEA_TEST_PROJECT")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not all(os.environ.get(name) for name in _REQUIRED_ENV_VARS),
        reason=f"Set {', '.join(_REQUIRED_ENV_VARS)} to run integration tests",
    ),
]


@pytest.fixture(scope="module")
def gitlab_source() -> GitLabSource:
    token = glu.get_token()
    source = GitLabSource(glu.get_client(glu.DEFAULT_SERVER, token), os.environ["SOURCE_GITLAB_TEST_PROJECT"])
    source.validate_access()
    return source


@pytest.fixture(scope="module")
def gitea_target() -> GiteaTarget:
    token = gitea_utils.get_token()
    assert token, "No Gitea token found (set GITEA_TOKEN)"
    client = gitea_utils.get_client(os.environ["TARGET_GITEA_TEST_SERVER"], token)
    target = GiteaTarget(client, os.environ["TARGET_GITEA_TEST_PROJECT"])
    target.validate_access()
    return target


def test_read_source(gitlab_source: GitLabSource) -> None:
    labels = list(gitlab_source.get_labels())
    issues = list(gitlab_source.get_open_issues())

    assert all(label.name for label in labels)
    assert all(issue.state == "open" for issue in issues)
    assert all(issue.source_number is not None for issue in issues)


def test_migration_is_idempotent(gitlab_source: GitLabSource, gitea_target: GiteaTarget) -> None:
    first = Migrator(gitlab_source, gitea_target).migrate()
    assert first.success

    milestones = gitea_target.get_milestones()
    labels = gitea_target.get_labels()
    issues = gitea_target.get_issues()

    source_issues = list(gitlab_source.get_open_issues())
    source_titles = {issue.title for issue in source_issues}
    assert source_titles <= set(issues)
    assert {m.title for m in gitlab_source.get_open_milestones()} <= set(milestones)
    assert {label.name for label in gitlab_source.get_labels()} <= set(labels)

    migrator = Migrator(gitlab_source, gitea_target)
    second = migrator.migrate()

    assert migrator.phase is MigrationPhase.DONE
    assert second.stats.milestones_created == 0
    assert second.stats.labels_created == 0
    assert second.stats.issues_created == 0
    assert second.stats.issues_updated == len(source_issues)
    assert len(gitea_target.get_milestones()) == len(milestones)
    assert len(gitea_target.get_labels()) == len(labels)
    assert len(gitea_target.get_issues()) == len(issues)
