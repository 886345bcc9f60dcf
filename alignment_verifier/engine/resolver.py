"""
Task resolution: from a free-text project hint to an ordered list of tasks.

Project hints are resolved against the tracker's project list (exact key,
then name) and fall back to being used as a literal key. Tasks are read
board by board with bounded pagination, filtering by status while paging so
no more pages are fetched than needed. When a single project's boards yield
nothing, a query-language search is tried as a second strategy.
"""

import re
from collections.abc import Sequence

import structlog

from alignment_verifier.config.settings import VerificationConfig
from alignment_verifier.exceptions import ExternalServiceError
from alignment_verifier.models.domain import ProjectResolution, Task, TrackerIssue, TrackerProject
from alignment_verifier.providers.base import TaskTracker

log = structlog.get_logger(__name__)

_HINT_PREFIX = re.compile(r"^(PROJECT|SPACE)-?", re.IGNORECASE)


def normalize_project_hint(hint: str) -> str:
    """Uppercase a hint and strip a leading PROJECT/SPACE prefix.

    Example:
        >>> normalize_project_hint("project-scrum")
        'SCRUM'
    """
    return _HINT_PREFIX.sub("", hint.strip().upper(), count=1).strip()


def status_matches(status_label: str, status_filter: Sequence[str] | None) -> bool:
    """Case-insensitive substring match of a status label against a filter.

    An empty or missing filter accepts every status.
    """
    if not status_filter:
        return True
    label = status_label.lower()
    return any(wanted.lower() in label for wanted in status_filter)


def find_project(projects: Sequence[TrackerProject], normalized_hint: str) -> TrackerProject | None:
    """Find a project by exact key, then by exact or partial name."""
    for project in projects:
        if project.key.upper() == normalized_hint:
            return project
    for project in projects:
        name = project.name.upper()
        if name == normalized_hint or normalized_hint in name:
            return project
    return None


class TaskResolver:
    """Resolves projects and fetches tasks from a task tracker."""

    def __init__(self, tracker: TaskTracker, config: VerificationConfig) -> None:
        self.tracker = tracker
        self.config = config

    async def resolve_project(self, hint: str | None) -> ProjectResolution | None:
        """Resolve a project hint to a canonical project key.

        Args:
            hint: Project key, project name or space name; None for all projects

        Returns:
            ProjectResolution, or None when no hint was given.
        """
        if not hint or not hint.strip():
            return None

        normalized = normalize_project_hint(hint)

        try:
            projects = await self.tracker.list_projects()
        except ExternalServiceError as e:
            log.warning("project_list_failed", hint=hint, error=e.message)
            projects = []

        project = find_project(projects, normalized) if normalized else None
        if project is None:
            log.warning("project_not_found", hint=hint, fallback_key=normalized)
            return ProjectResolution(hint=hint, normalized_hint=normalized, key=normalized, found=False)

        log.info("project_resolved", hint=hint, key=project.key)
        return ProjectResolution(hint=hint, normalized_hint=normalized, key=project.key, found=True)

    async def fetch_tasks(
        self,
        project_key: str | None,
        status_filter: Sequence[str] | None = None,
        max_tasks: int | None = None,
    ) -> list[Task]:
        """Fetch up to ``max_tasks`` tasks from one project or from all projects.

        Args:
            project_key: Project to read; None reads every project in turn
            status_filter: Status fragments to keep (case-insensitive substring)
            max_tasks: Upper bound on returned tasks; defaults to the configured value

        Returns:
            Tasks in tracker order.

        Raises:
            ValueError: If max_tasks is smaller than 1
        """
        limit = self.config.default_max_tasks if max_tasks is None else max_tasks
        if limit < 1:
            raise ValueError(f"max_tasks must be at least 1, got {limit}")

        tasks: list[Task] = []

        if project_key:
            await self._collect_from_boards(project_key, status_filter, limit, tasks)
            if not tasks:
                log.info("board_path_empty", project=project_key)
                await self._collect_from_search(project_key, status_filter, limit, tasks)
        else:
            try:
                projects = await self.tracker.list_projects()
            except ExternalServiceError as e:
                log.warning("project_list_failed", error=e.message)
                projects = []

            log.info("fetching_all_projects", projects=len(projects))
            for project in projects:
                if len(tasks) >= limit:
                    break
                await self._collect_from_boards(project.key, status_filter, limit, tasks)

        log.info("tasks_fetched", project=project_key or "all", count=len(tasks))
        return tasks

    async def _collect_from_boards(
        self,
        project_key: str,
        status_filter: Sequence[str] | None,
        limit: int,
        tasks: list[Task],
    ) -> None:
        """Append a project's board issues to ``tasks`` until ``limit``."""
        try:
            boards = await self.tracker.list_boards(project_key)
        except ExternalServiceError as e:
            log.warning("board_list_failed", project=project_key, error=e.message)
            return

        page_size = self.config.board_page_size
        for board in boards:
            start_at = 0
            while len(tasks) < limit:
                try:
                    page = await self.tracker.list_board_issues(board.id, start_at, page_size)
                except ExternalServiceError as e:
                    log.warning("board_page_failed", board_id=board.id, start_at=start_at, error=e.message)
                    break

                self._extend(tasks, page.issues, status_filter, limit)

                if not page.issues or not page.has_more:
                    break
                start_at += page_size

            if len(tasks) >= limit:
                return

    async def _collect_from_search(
        self,
        project_key: str,
        status_filter: Sequence[str] | None,
        limit: int,
        tasks: list[Task],
    ) -> None:
        """Fallback: query-language search for a project's issues."""
        query = self.tracker.project_query(project_key, list(status_filter) if status_filter else None)
        try:
            issues = await self.tracker.search_issues(query, limit)
        except ExternalServiceError as e:
            log.warning("issue_search_failed", project=project_key, error=e.message)
            return
        self._extend(tasks, issues, status_filter, limit)

    @staticmethod
    def _extend(
        tasks: list[Task],
        issues: Sequence[TrackerIssue],
        status_filter: Sequence[str] | None,
        limit: int,
    ) -> None:
        """Append matching issues whose key is not already in ``tasks``."""
        seen = {task.key for task in tasks}
        for issue in issues:
            if len(tasks) >= limit:
                return
            if issue.key in seen or not status_matches(issue.status_label, status_filter):
                continue
            seen.add(issue.key)
            tasks.append(Task.from_issue(issue))
