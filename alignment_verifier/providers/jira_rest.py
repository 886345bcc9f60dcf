"""Jira Cloud task tracker implementation using direct REST API calls."""

from typing import Any

import structlog

from alignment_verifier.models.domain import IssuePage, TrackerBoard, TrackerIssue, TrackerProject
from alignment_verifier.providers.base import TaskTracker
from alignment_verifier.utils.connection_pool import HTTPConnectionPool

log = structlog.get_logger(__name__)

PROJECT_PAGE_SIZE = 50
MAX_PROJECT_PAGES = 20
SEARCH_FIELDS = "summary,status,assignee"


class JiraRestTracker(TaskTracker):
    """Jira implementation using the platform (v2/v3) and agile (1.0) REST APIs."""

    def __init__(
        self,
        base_url: str,
        email: str,
        token: str,
        timeout: float = 30.0,
    ):
        """Initialize Jira tracker.

        Args:
            base_url: Jira site URL (e.g., https://acme.atlassian.net)
            email: Account email for Basic auth
            token: API token for Basic auth
            timeout: HTTP timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.token = token.strip() if token else token
        self.timeout = timeout
        self._pool: HTTPConnectionPool | None = None

    async def connect(self) -> None:
        """Initialize the connection pool."""
        if self._pool is None:
            self._pool = HTTPConnectionPool.with_basic_auth(
                self.base_url, self.email, self.token, service="jira", timeout=self.timeout
            )
            await self._pool.initialize()
            log.info("jira_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def list_projects(self) -> list[TrackerProject]:
        """List projects, following the paginated project search."""
        log.info("list_projects")

        projects: list[TrackerProject] = []
        start_at = 0
        for _ in range(MAX_PROJECT_PAGES):
            data = await self._get_json(
                "/rest/api/3/project/search",
                params={"startAt": start_at, "maxResults": PROJECT_PAGE_SIZE},
            )
            values = data.get("values") or []
            projects.extend(self._parse_project(value) for value in values)

            if not values or data.get("isLast", True):
                break
            start_at += len(values)

        return projects

    async def list_boards(self, project_key: str) -> list[TrackerBoard]:
        """List agile boards for a project."""
        log.info("list_boards", project=project_key)

        data = await self._get_json("/rest/agile/1.0/board", params={"projectKeyOrId": project_key})
        return [
            TrackerBoard(id=int(board["id"]), name=board.get("name") or "")
            for board in data.get("values") or []
            if board.get("id") is not None
        ]

    async def list_board_issues(self, board_id: int, start_at: int, page_size: int) -> IssuePage:
        """Fetch one page of board issues (backlog included)."""
        log.debug("list_board_issues", board_id=board_id, start_at=start_at, page_size=page_size)

        data = await self._get_json(
            f"/rest/agile/1.0/board/{board_id}/issue",
            params={"startAt": start_at, "maxResults": page_size, "fields": SEARCH_FIELDS},
        )
        raw_issues = data.get("issues") or []
        issues = [self._parse_issue(raw) for raw in raw_issues if raw.get("key")]

        total = data.get("total")
        if not raw_issues:
            has_more = False
        elif isinstance(total, int):
            has_more = start_at + len(raw_issues) < total
        else:
            has_more = len(raw_issues) == page_size

        return IssuePage(issues=issues, has_more=has_more)

    async def search_issues(self, query: str, max_results: int) -> list[TrackerIssue]:
        """Run a JQL search."""
        log.info("search_issues", jql=query, max_results=max_results)

        data = await self._get_json(
            "/rest/api/2/search",
            params={"jql": query, "maxResults": max_results, "fields": SEARCH_FIELDS},
        )
        return [self._parse_issue(raw) for raw in data.get("issues") or [] if raw.get("key")]

    def project_query(self, project_key: str, statuses: list[str] | None = None) -> str:
        """Build the JQL selecting a project's issues, optionally by status."""
        jql = f'project = "{_escape_jql(project_key)}"'
        if statuses:
            quoted = ", ".join(f'"{_escape_jql(status)}"' for status in statuses)
            jql += f" AND status IN ({quoted})"
        return jql

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if self._pool is None:
            await self.connect()
        assert self._pool is not None
        return await self._pool.get_json(path, params=params)

    def _parse_project(self, data: dict[str, Any]) -> TrackerProject:
        """Parse a project entry from /rest/api/3/project/search."""
        return TrackerProject(
            id=str(data.get("id") or ""),
            key=data.get("key") or "",
            name=data.get("name") or "",
        )

    def _parse_issue(self, data: dict[str, Any]) -> TrackerIssue:
        """Parse an issue from the agile or search API.

        Field mappings:
            - data["key"] -> key
            - data["fields"]["summary"] -> summary (empty string if missing)
            - data["fields"]["status"]["name"] -> status_label ("Unknown" if missing)
            - data["fields"]["assignee"]["displayName"] -> assignee (None if unassigned)
        """
        fields = data.get("fields") or {}
        status = fields.get("status") or {}
        assignee = fields.get("assignee") or {}
        return TrackerIssue(
            key=data["key"],
            summary=fields.get("summary") or "",
            status_label=status.get("name") or "Unknown",
            assignee=assignee.get("displayName") or None,
        )


def _escape_jql(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')
