"""Tests for alignment_verifier/providers/github_rest.py - GitHub code host implementation."""

from datetime import UTC, datetime
from unittest.mock import Mock, patch

import pytest
from github import GithubException

from alignment_verifier.exceptions import ExternalServiceError
from alignment_verifier.providers.github_rest import GitHubRestCodeHost


@pytest.fixture
def mock_github_repo():
    """Create a mock GitHub repository."""
    return Mock()


@pytest.fixture
def mock_github_client(mock_github_repo):
    """Create a mock Github client returning ``mock_github_repo``."""
    client = Mock()
    client.get_repo = Mock(return_value=mock_github_repo)
    client.close = Mock()
    return client


@pytest.fixture
def code_host(mock_github_client):
    """GitHubRestCodeHost wired to the mock client."""
    host = GitHubRestCodeHost(token="ghp_test_token_123", owner="acme")
    host._client = mock_github_client
    return host


def _gh_commit(sha: str, message: str, date: datetime | None):
    gh_commit = Mock()
    gh_commit.sha = sha
    gh_commit.html_url = f"https://github.com/acme/app/commit/{sha}"
    gh_commit.commit.message = message
    gh_commit.commit.author.date = date
    return gh_commit


def _gh_pull(number: int, title: str, body: str | None, state: str):
    pr = Mock()
    pr.number = number
    pr.title = title
    pr.body = body
    pr.state = state
    pr.html_url = f"https://github.com/acme/app/pull/{number}"
    return pr


class TestGitHubRestCodeHostInit:
    """Tests for initialization and connection management."""

    def test_init_with_defaults(self):
        host = GitHubRestCodeHost(token=" token ", owner="acme")

        assert host.token == "token"
        assert host.base_url == "https://api.github.com"
        assert host._client is None

    def test_full_name(self):
        host = GitHubRestCodeHost(token="t", owner="acme")

        assert host.full_name("app") == "acme/app"
        assert host.full_name("other-org/app") == "other-org/app"

    @pytest.mark.asyncio
    @patch("alignment_verifier.providers.github_rest.Github")
    async def test_connect_and_disconnect(self, mock_github_class):
        mock_client = Mock()
        mock_github_class.return_value = mock_client
        host = GitHubRestCodeHost(token="t", owner="acme", base_url="https://github.example.com/api/v3/")

        async with host:
            assert host._client is mock_client
            assert mock_github_class.call_args.kwargs["base_url"] == "https://github.example.com/api/v3"

        mock_client.close.assert_called_once()
        assert host._client is None

    @pytest.mark.asyncio
    async def test_client_built_without_retries(self):
        """PyGithub's default retry policy is disabled."""
        host = GitHubRestCodeHost(token="t", owner="acme")

        await host.connect()
        try:
            assert host._client._Github__requester._Requester__retry is None
        finally:
            await host.disconnect()

    @pytest.mark.asyncio
    @patch("alignment_verifier.providers.github_rest.Github")
    async def test_connect_passes_retry_none(self, mock_github_class):
        host = GitHubRestCodeHost(token="t", owner="acme")

        await host.connect()

        assert mock_github_class.call_args.kwargs["retry"] is None


class TestListCommits:
    """Tests for list_commits."""

    @pytest.mark.asyncio
    async def test_converts_and_limits(self, code_host, mock_github_repo, mock_github_client):
        naive = datetime(2026, 2, 20, 10, 0)
        mock_github_repo.get_commits.return_value = iter(
            [
                _gh_commit("a" * 40, "fix SCRUM-5 login bug\n\nDetails", naive),
                _gh_commit("b" * 40, "second", None),
                _gh_commit("c" * 40, "third", naive),
            ]
        )

        commits = await code_host.list_commits("app", 2)

        assert len(commits) == 2
        assert commits[0].headline == "fix SCRUM-5 login bug"
        assert commits[0].date == datetime(2026, 2, 20, 10, 0, tzinfo=UTC)
        assert commits[0].short_sha == "aaaaaaa"
        mock_github_client.get_repo.assert_called_once_with("acme/app")

    @pytest.mark.asyncio
    async def test_repository_cached(self, code_host, mock_github_repo, mock_github_client):
        mock_github_repo.get_commits.side_effect = lambda: iter([])

        await code_host.list_commits("app", 5)
        await code_host.list_commits("app", 5)

        mock_github_client.get_repo.assert_called_once()

    @pytest.mark.asyncio
    async def test_github_error_translated(self, code_host, mock_github_client):
        mock_github_client.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, None)

        with pytest.raises(ExternalServiceError) as exc_info:
            await code_host.list_commits("missing", 5)

        assert exc_info.value.status_code == 404
        assert exc_info.value.service == "github"

    @pytest.mark.asyncio
    async def test_connection_error_translated(self, code_host, mock_github_client):
        mock_github_client.get_repo.side_effect = ConnectionError("reset by peer")

        with pytest.raises(ExternalServiceError, match="reset by peer"):
            await code_host.list_commits("app", 5)


class TestPullRequestsAndBranches:
    """Tests for list_pull_requests and list_branches."""

    @pytest.mark.asyncio
    async def test_list_pull_requests(self, code_host, mock_github_repo):
        mock_github_repo.get_pulls.return_value = iter(
            [_gh_pull(12, "SCRUM-7 phone", None, "closed"), _gh_pull(11, "Docs", "body", "open")]
        )

        pulls = await code_host.list_pull_requests("app", "all", 50)

        assert [(p.id, p.body, p.is_closed) for p in pulls] == [(12, "", True), (11, "body", False)]
        mock_github_repo.get_pulls.assert_called_once_with(state="all", sort="created", direction="desc")

    @pytest.mark.asyncio
    async def test_unknown_state_means_all(self, code_host, mock_github_repo):
        mock_github_repo.get_pulls.return_value = iter([])

        await code_host.list_pull_requests("app", "merged", 10)

        assert mock_github_repo.get_pulls.call_args.kwargs["state"] == "all"

    @pytest.mark.asyncio
    async def test_list_branches(self, code_host, mock_github_repo):
        main, feature = Mock(), Mock()
        main.name = "main"
        feature.name = "feature/scrum-5"
        mock_github_repo.get_branches.return_value = [main, feature]

        branches = await code_host.list_branches("app")

        assert [b.name for b in branches] == ["main", "feature/scrum-5"]


class TestSearchCode:
    """Tests for search_code."""

    @pytest.mark.asyncio
    async def test_query_and_limit(self, code_host, mock_github_client):
        hits = []
        for path in ("src/login.py", "src/sso.py", "tests/test_login.py", "README.md"):
            hit = Mock()
            hit.path = path
            hit.html_url = f"https://github.com/acme/app/blob/main/{path}"
            hits.append(hit)
        mock_github_client.search_code.return_value = iter(hits)

        matches = await code_host.search_code("app", "SCRUM-5", 3)

        assert [m.path for m in matches] == ["src/login.py", "src/sso.py", "tests/test_login.py"]
        mock_github_client.search_code.assert_called_once_with(query="SCRUM-5 repo:acme/app")

    @pytest.mark.asyncio
    async def test_rate_limit_translated(self, code_host, mock_github_client):
        mock_github_client.search_code.side_effect = GithubException(403, {"message": "rate limited"}, None)

        with pytest.raises(ExternalServiceError) as exc_info:
            await code_host.search_code("app", "SCRUM-5", 3)

        assert exc_info.value.status_code == 403
