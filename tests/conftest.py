"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from alignment_verifier.config.settings import AppSettings, VerificationConfig
from alignment_verifier.exceptions import ExternalServiceError
from alignment_verifier.models.domain import (
    Branch,
    CodeMatch,
    Commit,
    IssuePage,
    PullRequest,
    Task,
    TrackerBoard,
    TrackerIssue,
    TrackerProject,
)
from alignment_verifier.providers.base import CodeHost, TaskTracker

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FakeTaskTracker(TaskTracker):
    """In-memory tracker.

    ``boards`` maps project key to boards; ``board_issues`` maps board id to
    the full issue list, which is served in pages. ``fail`` holds method
    names that should raise ExternalServiceError.
    """

    def __init__(
        self,
        projects: list[TrackerProject] | None = None,
        boards: dict[str, list[TrackerBoard]] | None = None,
        board_issues: dict[int, list[TrackerIssue]] | None = None,
        search_results: list[TrackerIssue] | None = None,
        fail: set[str] | None = None,
    ):
        self.projects = projects or []
        self.boards = boards or {}
        self.board_issues = board_issues or {}
        self.search_results = search_results or []
        self.fail = fail or set()
        self.page_requests: list[tuple[int, int, int]] = []
        self.queries: list[str] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise ExternalServiceError(f"{name} failed", service="jira", status_code=503)

    async def list_projects(self) -> list[TrackerProject]:
        self._maybe_fail("list_projects")
        return list(self.projects)

    async def list_boards(self, project_key: str) -> list[TrackerBoard]:
        self._maybe_fail("list_boards")
        return list(self.boards.get(project_key, []))

    async def list_board_issues(self, board_id: int, start_at: int, page_size: int) -> IssuePage:
        self._maybe_fail("list_board_issues")
        self.page_requests.append((board_id, start_at, page_size))
        issues = self.board_issues.get(board_id, [])
        page = issues[start_at : start_at + page_size]
        return IssuePage(issues=page, has_more=start_at + len(page) < len(issues))

    async def search_issues(self, query: str, max_results: int) -> list[TrackerIssue]:
        self._maybe_fail("search_issues")
        self.queries.append(query)
        return self.search_results[:max_results]

    def project_query(self, project_key: str, statuses: list[str] | None = None) -> str:
        query = f"project = {project_key}"
        if statuses:
            query += " AND status IN (" + ", ".join(statuses) + ")"
        return query


class FakeCodeHost(CodeHost):
    """In-memory code host. ``code`` maps a search term to its hits."""

    def __init__(
        self,
        commits: list[Commit] | None = None,
        pull_requests: list[PullRequest] | None = None,
        branches: list[Branch] | None = None,
        code: dict[str, list[CodeMatch]] | None = None,
        fail: set[str] | None = None,
    ):
        self.commits = commits or []
        self.pull_requests = pull_requests or []
        self.branches = branches or []
        self.code = code or {}
        self.fail = fail or set()
        self.calls: list[str] = []
        self.search_terms: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise ExternalServiceError(f"{name} failed", service="github", status_code=500)

    async def list_commits(self, repository: str, max_count: int) -> list[Commit]:
        self._record("list_commits")
        return self.commits[:max_count]

    async def list_pull_requests(self, repository: str, state: str, max_count: int) -> list[PullRequest]:
        self._record("list_pull_requests")
        return self.pull_requests[:max_count]

    async def list_branches(self, repository: str) -> list[Branch]:
        self._record("list_branches")
        return list(self.branches)

    async def search_code(self, repository: str, term: str, max_count: int) -> list[CodeMatch]:
        self.search_terms.append(term)
        self._record("search_code")
        return self.code.get(term, [])[:max_count]


def make_issue(key: str, status: str = "To Do", summary: str = "", assignee: str | None = None) -> TrackerIssue:
    return TrackerIssue(key=key, summary=summary or f"Work on {key}", status_label=status, assignee=assignee)


def make_commit(message: str, days_ago: float = 1, sha: str = "abc1234def") -> Commit:
    return Commit(
        sha=sha,
        message=message,
        date=NOW - timedelta(days=days_ago),
        url=f"https://github.com/acme/app/commit/{sha}",
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return NOW


@pytest.fixture
def verification_config() -> VerificationConfig:
    """Default engine configuration."""
    return VerificationConfig()


@pytest.fixture
def configured_settings() -> AppSettings:
    """Settings with both collaborators configured."""
    return AppSettings(
        tracker={
            "base_url": "https://acme.atlassian.net",
            "email": "bot@acme.test",
            "api_token": "jira-token",
        },
        code_host={
            "owner": "acme",
            "api_token": "ghp_test_token",
        },
    )


@pytest.fixture
def sample_task() -> Task:
    """A task that is marked done."""
    return Task(key="SCRUM-5", summary="Fix login bug for SSO users", status_label="Done", assignee="Jane Doe")


@pytest.fixture
def fake_tracker():
    """Factory fixture for in-memory task trackers."""
    return FakeTaskTracker


@pytest.fixture
def fake_code_host():
    """Factory fixture for in-memory code hosts."""
    return FakeCodeHost


@pytest.fixture
def issue():
    """Factory fixture for tracker issues."""
    return make_issue


@pytest.fixture
def commit():
    """Factory fixture for commits dated relative to ``NOW``."""
    return make_commit
