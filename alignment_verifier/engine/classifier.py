"""
Alignment classification.

A task's verdict comes from an ordered rule table keyed on its status
category, whether any evidence was found, and (for in-progress work only)
whether recent history suggests the work is already finished. The first
rule that applies wins.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from alignment_verifier.config.settings import VerificationConfig
from alignment_verifier.enums import AlignmentVerdict, StatusCategory
from alignment_verifier.models.domain import Evidence, Task
from alignment_verifier.models.report import TaskAlignmentResult

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CompletionSignal:
    """Hints that an in-progress task is actually finished."""

    completion_keywords: bool = False
    closed_pull_requests: bool = False

    @property
    def present(self) -> bool:
        return self.completion_keywords or self.closed_pull_requests


@dataclass(frozen=True)
class RuleContext:
    task: Task
    evidence: Evidence
    signal: CompletionSignal


@dataclass(frozen=True)
class AlignmentRule:
    """One row of the classification table.

    ``warning`` may be a template using ``{status}`` (the task's status label)
    or a callable producing the text from the rule context.
    """

    name: str
    applies: Callable[[RuleContext], bool]
    verdict: AlignmentVerdict
    warning: str | Callable[[RuleContext], str] | None = None
    recommendation: str | None = None

    def render_warning(self, ctx: RuleContext) -> str | None:
        if self.warning is None:
            return None
        if callable(self.warning):
            return self.warning(ctx)
        return self.warning.format(status=ctx.task.status_label)


def _completion_warning(ctx: RuleContext) -> str:
    suffix = ", PRs merged" if ctx.signal.closed_pull_requests else ""
    return f"Task IN PROGRESS but code appears complete (commits with completion keywords found{suffix})"


def _is(category: StatusCategory) -> Callable[[RuleContext], bool]:
    return lambda ctx: ctx.task.status_category == category


ALIGNMENT_RULES: tuple[AlignmentRule, ...] = (
    AlignmentRule(
        name="done_without_evidence",
        applies=lambda ctx: ctx.task.status_category == StatusCategory.DONE and not ctx.evidence.has_evidence,
        verdict=AlignmentVerdict.MISALIGNED,
        warning="Task marked as {status} but no code evidence found",
        recommendation="Verify task status or search for alternative task keys/descriptions",
    ),
    AlignmentRule(
        name="done_with_evidence",
        applies=_is(StatusCategory.DONE),
        verdict=AlignmentVerdict.ALIGNED,
    ),
    AlignmentRule(
        name="in_progress_without_evidence",
        applies=lambda ctx: ctx.task.status_category == StatusCategory.IN_PROGRESS and not ctx.evidence.has_evidence,
        verdict=AlignmentVerdict.MISALIGNED,
        warning="Task marked as {status} but no code evidence found (no commits, branches, or PRs)",
        recommendation="Task may not have been started yet, or evidence is in a different repository",
    ),
    AlignmentRule(
        name="in_progress_looks_complete",
        applies=lambda ctx: ctx.task.status_category == StatusCategory.IN_PROGRESS and ctx.signal.present,
        verdict=AlignmentVerdict.MISALIGNED,
        warning=_completion_warning,
        recommendation="Update task status to DONE",
    ),
    AlignmentRule(
        name="in_progress_with_evidence",
        applies=_is(StatusCategory.IN_PROGRESS),
        verdict=AlignmentVerdict.ALIGNED,
    ),
    AlignmentRule(
        name="todo_with_evidence",
        applies=lambda ctx: ctx.task.status_category == StatusCategory.TODO and ctx.evidence.has_evidence,
        verdict=AlignmentVerdict.MISALIGNED,
        warning="Task TO DO but code already exists",
        recommendation="Update task status to IN PROGRESS or DONE",
    ),
    AlignmentRule(
        name="todo_without_evidence",
        applies=_is(StatusCategory.TODO),
        verdict=AlignmentVerdict.ALIGNED,
    ),
    AlignmentRule(
        name="unknown_status",
        applies=lambda ctx: True,
        verdict=AlignmentVerdict.ALIGNED,
    ),
)


class AlignmentClassifier:
    """Turns (task, evidence) into a TaskAlignmentResult."""

    def __init__(
        self,
        config: VerificationConfig,
        rules: tuple[AlignmentRule, ...] = ALIGNMENT_RULES,
    ) -> None:
        self.config = config
        self.rules = rules
        self._completion_keywords = [kw.lower() for kw in config.completion_keywords]

    def classify(self, task: Task, evidence: Evidence, now: datetime | None = None) -> TaskAlignmentResult:
        """Classify a task against its evidence.

        Args:
            task: Task under verification
            evidence: Evidence collected for the task
            now: Reference time for the recent-commit window (defaults to now, UTC)

        Returns:
            TaskAlignmentResult carrying the name of the rule that applied.
        """
        signal = CompletionSignal()
        if task.status_category == StatusCategory.IN_PROGRESS and evidence.has_evidence:
            signal = self.completion_signal(evidence, now)

        ctx = RuleContext(task=task, evidence=evidence, signal=signal)
        rule = next(r for r in self.rules if r.applies(ctx))

        result = TaskAlignmentResult(
            task=task,
            evidence=evidence,
            verdict=rule.verdict,
            rule=rule.name,
            warning=rule.render_warning(ctx),
            recommendation=rule.recommendation,
        )
        if not result.is_aligned:
            log.info("task_misaligned", task=task.key, rule=rule.name, status=task.status_label)
        return result

    def completion_signal(self, evidence: Evidence, now: datetime | None = None) -> CompletionSignal:
        """Look for completion hints in commits from the recent window.

        Without any recent commit the signal is absent, even if matched pull
        requests are closed.
        """
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(days=self.config.recent_commit_days)

        recent = [c for c in evidence.commits if c.date is not None and c.date > cutoff]
        if not recent:
            return CompletionSignal()

        messages = [c.message.lower() for c in recent]
        has_keywords = any(kw in msg for msg in messages for kw in self._completion_keywords)
        has_closed = any(pr.is_closed for pr in evidence.pull_requests)
        return CompletionSignal(completion_keywords=has_keywords, closed_pull_requests=has_closed)
