"""GitHub code host implementation using PyGithub."""

import asyncio
from collections.abc import Callable
from datetime import UTC
from itertools import islice
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from alignment_verifier.exceptions import ExternalServiceError
from alignment_verifier.models.domain import Branch, CodeMatch, Commit, PullRequest
from alignment_verifier.providers.base import CodeHost

log = structlog.get_logger(__name__)

T = TypeVar("T")

PER_PAGE = 100


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


class GitHubRestCodeHost(CodeHost):
    """GitHub implementation using PyGithub library."""

    def __init__(
        self,
        token: str,
        owner: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub code host.

        Args:
            token: GitHub personal access token or App token
            owner: Organization or user that owns the repositories
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        # Normalize base_url by removing trailing slash
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repos: dict[str, GHRepository] = {}

    async def connect(self) -> None:
        """Initialize GitHub client."""
        if self._client is None:
            # No retries: errors and rate limits surface on the first response
            self._client = Github(
                auth=Auth.Token(self.token), base_url=self.base_url, per_page=PER_PAGE, retry=None
            )
            log.info("github_connected", base_url=self.base_url, owner=self.owner)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repos.clear()

    def full_name(self, repository: str) -> str:
        """Qualify a bare repository name with the configured owner."""
        if "/" in repository:
            return repository
        return f"{self.owner}/{repository}"

    async def list_commits(self, repository: str, max_count: int) -> list[Commit]:
        """List recent commits of the default branch."""
        log.info("list_commits", repository=repository, max_count=max_count)

        def _list() -> list[Commit]:
            repo = self._get_repo(repository)
            return [self._convert_commit(c) for c in islice(repo.get_commits(), max_count)]

        return await self._call("list_commits", repository, _list)

    async def list_pull_requests(self, repository: str, state: str, max_count: int) -> list[PullRequest]:
        """List pull requests, newest first."""
        log.info("list_pull_requests", repository=repository, state=state, max_count=max_count)

        gh_state = state if state in ("open", "closed", "all") else "all"

        def _list() -> list[PullRequest]:
            repo = self._get_repo(repository)
            pulls = repo.get_pulls(state=gh_state, sort="created", direction="desc")
            return [self._convert_pull_request(pr) for pr in islice(pulls, max_count)]

        return await self._call("list_pull_requests", repository, _list)

    async def list_branches(self, repository: str) -> list[Branch]:
        """List all branches."""
        log.info("list_branches", repository=repository)

        def _list() -> list[Branch]:
            repo = self._get_repo(repository)
            return [Branch(name=b.name) for b in repo.get_branches()]

        return await self._call("list_branches", repository, _list)

    async def search_code(self, repository: str, term: str, max_count: int) -> list[CodeMatch]:
        """Search code within one repository."""
        log.info("search_code", repository=repository, term=term)

        query = f"{term} repo:{self.full_name(repository)}"

        def _search() -> list[CodeMatch]:
            results = self._require_client().search_code(query=query)
            return [CodeMatch(path=item.path, url=item.html_url) for item in islice(results, max_count)]

        return await self._call("search_code", repository, _search)

    async def _call(self, operation: str, repository: str, func: Callable[[], T]) -> T:
        """Run a PyGithub call in a thread, translating failures."""
        if self._client is None:
            await self.connect()

        try:
            return await _run_sync(func)
        except GithubException as e:
            log.error(f"github_{operation}_failed", repository=repository, status=e.status, error=str(e))
            raise ExternalServiceError(
                f"GitHub {operation} failed for {repository}",
                service="github",
                status_code=e.status,
            ) from e
        except OSError as e:
            # requests' connection errors derive from OSError
            log.error(f"github_{operation}_failed", repository=repository, error=str(e))
            raise ExternalServiceError(f"GitHub {operation} failed for {repository}: {e}", service="github") from e

    def _require_client(self) -> Github:
        if self._client is None:
            raise ExternalServiceError("GitHub client is not connected", service="github")
        return self._client

    def _get_repo(self, repository: str) -> GHRepository:
        full_name = self.full_name(repository)
        if full_name not in self._repos:
            self._repos[full_name] = self._require_client().get_repo(full_name)
        return self._repos[full_name]

    def _convert_commit(self, gh_commit) -> Commit:
        """Convert a PyGithub Commit to our Commit model."""
        git_commit = gh_commit.commit
        author = git_commit.author
        date = author.date if author is not None else None
        if date is not None and date.tzinfo is None:
            date = date.replace(tzinfo=UTC)
        return Commit(
            sha=gh_commit.sha,
            message=git_commit.message or "",
            date=date,
            url=gh_commit.html_url or "",
        )

    def _convert_pull_request(self, gh_pr) -> PullRequest:
        """Convert a PyGithub PullRequest to our PullRequest model."""
        return PullRequest(
            id=gh_pr.number,
            title=gh_pr.title or "",
            body=gh_pr.body or "",
            state=gh_pr.state or "",
            url=gh_pr.html_url or "",
        )
