"""
Verification pipeline facade.

Wires the resolver, collector, classifier and report builder into the single
operation exposed to callers:

    resolve project -> fetch tasks -> collect evidence -> classify -> report

Example:
    >>> async with create_task_tracker(settings) as tracker, create_code_host(settings) as host:
    ...     verifier = AlignmentVerifier(tracker, host, settings.verification)
    ...     report = await verifier.verify("my-service", project_hint="SCRUM")
"""

import asyncio
from collections.abc import Sequence

import structlog

from alignment_verifier.config.settings import AppSettings, VerificationConfig
from alignment_verifier.engine.classifier import AlignmentClassifier
from alignment_verifier.engine.collector import EvidenceCollector
from alignment_verifier.engine.report import build_report
from alignment_verifier.engine.resolver import TaskResolver
from alignment_verifier.models.report import VerificationReport
from alignment_verifier.providers.base import CodeHost, TaskTracker

log = structlog.get_logger(__name__)


class AlignmentVerifier:
    """Verifies that tracker task statuses match repository activity."""

    def __init__(
        self,
        tracker: TaskTracker,
        code_host: CodeHost,
        config: VerificationConfig | None = None,
    ) -> None:
        self.config = config or VerificationConfig()
        self.resolver = TaskResolver(tracker, self.config)
        self.collector = EvidenceCollector(code_host, self.config)
        self.classifier = AlignmentClassifier(self.config)

    async def verify(
        self,
        repository: str,
        project_hint: str | None = None,
        status_filter: Sequence[str] | None = None,
        max_tasks: int | None = None,
    ) -> VerificationReport:
        """Run one verification.

        Args:
            repository: Repository name on the code host
            project_hint: Project key or name; None verifies all projects
            status_filter: Status fragments restricting which tasks are checked
            max_tasks: Maximum number of tasks to check

        Returns:
            VerificationReport. Upstream failures degrade to empty evidence
            rather than raising.

        Raises:
            ValueError: If max_tasks is smaller than 1
        """
        if not repository or not repository.strip():
            raise ValueError("repository is required")

        log.info(
            "verification_started",
            repository=repository,
            project_hint=project_hint,
            status_filter=list(status_filter) if status_filter else None,
            max_tasks=max_tasks,
        )

        resolution = await self.resolver.resolve_project(project_hint)
        tasks = await self.resolver.fetch_tasks(
            resolution.key if resolution else None,
            status_filter,
            max_tasks,
        )

        if not tasks:
            log.info("no_tasks_found", repository=repository, project=resolution.key if resolution else None)
            return build_report(repository, resolution, [])

        evidence = await self.collector.collect(repository, tasks)
        results = [self.classifier.classify(task, evidence[task.key]) for task in tasks]
        report = build_report(repository, resolution, results)

        log.info(
            "verification_completed",
            repository=repository,
            project=report.resolved_project,
            tasks=report.tasks_analyzed,
            score=report.alignment_score,
            misaligned=len(report.misaligned),
        )
        return report


async def run_verification(
    settings: AppSettings,
    repository: str,
    project_hint: str | None = None,
    status_filter: Sequence[str] | None = None,
    max_tasks: int | None = None,
) -> VerificationReport:
    """Create both providers from settings and run one verification.

    Raises:
        ConfigurationError: If credentials for either provider are missing
    """
    # Imported here so the engine can be used without pulling in the adapters.
    from alignment_verifier.providers.factory import create_code_host, create_task_tracker

    settings.require_credentials()
    tracker = create_task_tracker(settings)
    code_host = create_code_host(settings)

    async with tracker, code_host:
        verifier = AlignmentVerifier(tracker, code_host, settings.verification)
        return await verifier.verify(repository, project_hint, status_filter, max_tasks)


def verify_alignment(
    settings: AppSettings,
    repository: str,
    project_hint: str | None = None,
    status_filter: Sequence[str] | None = None,
    max_tasks: int | None = None,
) -> VerificationReport:
    """Synchronous entry point around ``run_verification``."""
    return asyncio.run(run_verification(settings, repository, project_hint, status_filter, max_tasks))
