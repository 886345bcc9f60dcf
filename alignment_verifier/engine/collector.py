"""
Evidence collection from the code host.

Repository history (commits, pull requests, branches) is fetched once per
run and shared by all tasks; code search is the only per-task call. Every
upstream call is isolated: a failure is logged and degrades to an empty
result so the run still produces a report from whatever succeeded.
"""

import asyncio
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

import structlog

from alignment_verifier.config.settings import VerificationConfig
from alignment_verifier.engine.matcher import EvidenceMatcher
from alignment_verifier.exceptions import ExternalServiceError
from alignment_verifier.models.domain import (
    Branch,
    CodeMatch,
    Commit,
    Evidence,
    EvidenceCounts,
    PullRequest,
    Task,
)
from alignment_verifier.providers.base import CodeHost

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class RepositoryHistory:
    """Commits, pull requests and branches fetched once for a run."""

    commits: list[Commit] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    branches: list[Branch] = field(default_factory=list)


class EvidenceCollector:
    """Builds per-task Evidence from a code host."""

    def __init__(
        self,
        code_host: CodeHost,
        config: VerificationConfig,
        matcher: EvidenceMatcher | None = None,
    ) -> None:
        self.code_host = code_host
        self.config = config
        self.matcher = matcher or EvidenceMatcher(config.domain_hints)

    async def collect(self, repository: str, tasks: Sequence[Task]) -> dict[str, Evidence]:
        """Collect evidence for every task.

        Args:
            repository: Repository name on the code host
            tasks: Tasks to collect evidence for

        Returns:
            Mapping of task key to Evidence, in task order.
        """
        history = await self.fetch_history(repository)

        semaphore = asyncio.Semaphore(self.config.code_search_concurrency)

        async def _search(task: Task) -> list[CodeMatch]:
            async with semaphore:
                return await self.search_code(repository, task)

        code_matches = await asyncio.gather(*(_search(task) for task in tasks))

        return {
            task.key: self.build_evidence(task, history, matches)
            for task, matches in zip(tasks, code_matches, strict=True)
        }

    async def fetch_history(self, repository: str) -> RepositoryHistory:
        """Fetch commits, pull requests and branches concurrently."""
        commits, pull_requests, branches = await asyncio.gather(
            self._isolated(
                "commits",
                repository,
                self.code_host.list_commits(repository, self.config.commit_limit),
            ),
            self._isolated(
                "pull_requests",
                repository,
                self.code_host.list_pull_requests(repository, "all", self.config.pull_request_limit),
            ),
            self._isolated("branches", repository, self.code_host.list_branches(repository)),
        )

        log.info(
            "repository_history_fetched",
            repository=repository,
            commits=len(commits),
            pull_requests=len(pull_requests),
            branches=len(branches),
        )
        return RepositoryHistory(commits=commits, pull_requests=pull_requests, branches=branches)

    async def search_code(self, repository: str, task: Task) -> list[CodeMatch]:
        """Search code for a task, stopping at the first term with results.

        Returns:
            Matches deduplicated by path and capped at the display limit.
        """
        terms = self.matcher.code_search_terms(task)[: self.config.code_search_terms]

        found: list[CodeMatch] = []
        for term in terms:
            try:
                results = await self.code_host.search_code(repository, term, self.config.code_search_results)
            except ExternalServiceError as e:
                log.warning("code_search_failed", task=task.key, term=term, error=e.message)
                continue
            if results:
                found.extend(results[: self.config.code_search_results])
                break

        unique: dict[str, CodeMatch] = {}
        for match in found:
            unique.setdefault(match.path, match)
        return list(unique.values())[: self.config.display_limit]

    def build_evidence(
        self,
        task: Task,
        history: RepositoryHistory,
        code_matches: list[CodeMatch],
    ) -> Evidence:
        """Filter the shared history through the matcher for one task."""
        commits = [c for c in history.commits if self.matcher.matches(task, c.message)]
        pull_requests = [
            pr for pr in history.pull_requests if self.matcher.matches(task, f"{pr.title} {pr.body}")
        ]
        branches = [b.name for b in history.branches if self.matcher.matches(task, b.name)]

        counts = EvidenceCounts(
            commits=len(commits),
            pull_requests=len(pull_requests),
            branches=len(branches),
            code_matches=len(code_matches),
        )
        if counts.total:
            log.debug("evidence_found", task=task.key, **counts.to_dict())

        limit = self.config.display_limit
        return Evidence(
            commits=commits[:limit],
            pull_requests=pull_requests[:limit],
            branches=branches[:limit],
            code_matches=code_matches[:limit],
            counts=counts,
        )

    async def _isolated(self, kind: str, repository: str, call: Awaitable[list[T]]) -> list[T]:
        """Await an upstream fetch, degrading a failure to an empty list."""
        try:
            return await call
        except ExternalServiceError as e:
            log.warning(f"{kind}_fetch_failed", repository=repository, error=e.message, status=e.status_code)
            return []
