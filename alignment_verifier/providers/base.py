"""
Abstract base classes for the two external collaborators.

The verification engine talks only to these interfaces. Implementations
normalize provider payloads into the models in ``models.domain`` and report
any upstream failure as ``ExternalServiceError``; all handling of
missing or null JSON fields happens inside the implementations.
"""

from abc import ABC, abstractmethod
from typing import Any

from alignment_verifier.models.domain import (
    Branch,
    CodeMatch,
    Commit,
    IssuePage,
    PullRequest,
    TrackerBoard,
    TrackerIssue,
    TrackerProject,
)


class TaskTracker(ABC):
    """Abstract base class for task tracker implementations.

    All methods are async to support non-blocking I/O with HTTP clients.
    """

    async def connect(self) -> None:
        """Prepare connections. The default implementation does nothing."""

    async def disconnect(self) -> None:
        """Release connections. The default implementation does nothing."""

    async def __aenter__(self) -> "TaskTracker":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    @abstractmethod
    async def list_projects(self) -> list[TrackerProject]:
        """List every project visible to the configured account.

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    async def list_boards(self, project_key: str) -> list[TrackerBoard]:
        """List agile boards belonging to a project.

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    async def list_board_issues(self, board_id: int, start_at: int, page_size: int) -> IssuePage:
        """Fetch one page of a board's issues.

        Args:
            board_id: Board identifier
            start_at: Zero-based offset of the first issue
            page_size: Maximum number of issues on the page

        Returns:
            IssuePage whose ``has_more`` tells whether another page exists.

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    async def search_issues(self, query: str, max_results: int) -> list[TrackerIssue]:
        """Run a query-language search (JQL for Jira).

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    def project_query(self, project_key: str, statuses: list[str] | None = None) -> str:
        """Build a search query selecting a project's issues.

        Args:
            project_key: Project key to select
            statuses: Optional exact status names to restrict to

        Returns:
            Query string suitable for ``search_issues``.
        """


class CodeHost(ABC):
    """Abstract base class for code host implementations."""

    async def connect(self) -> None:
        """Prepare connections. The default implementation does nothing."""

    async def disconnect(self) -> None:
        """Release connections. The default implementation does nothing."""

    async def __aenter__(self) -> "CodeHost":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    @abstractmethod
    async def list_commits(self, repository: str, max_count: int) -> list[Commit]:
        """List the most recent commits of the default branch, newest first.

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    async def list_pull_requests(self, repository: str, state: str, max_count: int) -> list[PullRequest]:
        """List pull requests, newest first.

        Args:
            repository: Repository name
            state: "open", "closed" or "all"
            max_count: Maximum number of pull requests returned

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    async def list_branches(self, repository: str) -> list[Branch]:
        """List all branches.

        Raises:
            ExternalServiceError: If the request fails
        """

    @abstractmethod
    async def search_code(self, repository: str, term: str, max_count: int) -> list[CodeMatch]:
        """Search the repository's code for a term.

        Raises:
            ExternalServiceError: If the request fails
        """
