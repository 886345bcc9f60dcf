"""Per-task alignment results and the aggregated verification report."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from alignment_verifier.enums import AlignmentVerdict
from alignment_verifier.models.domain import Evidence, EvidenceCounts, Task


@dataclass
class TaskAlignmentResult:
    """Verdict for a single task.

    ``rule`` names the classifier rule that produced the verdict so a report
    reader can see why a task was flagged.
    """

    task: Task
    evidence: Evidence
    verdict: AlignmentVerdict
    rule: str
    warning: str | None = None
    recommendation: str | None = None

    @property
    def evidence_counts(self) -> EvidenceCounts:
        return self.evidence.counts

    @property
    def is_aligned(self) -> bool:
        return self.verdict == AlignmentVerdict.ALIGNED

    def to_dict(self) -> dict:
        return {
            "key": self.task.key,
            "summary": self.task.summary,
            "status": self.task.status_label,
            "status_category": self.task.status_category.value,
            "assignee": self.task.assignee or "Unassigned",
            "evidence": self.evidence_counts.to_dict(),
            "evidence_details": self.evidence.to_dict(),
            "alignment": self.verdict.value,
            "rule": self.rule,
            "warning": self.warning,
            "recommendation": self.recommendation,
        }


@dataclass
class VerificationReport:
    """Final report returned by a verification run."""

    repository: str
    resolved_project: str | None
    project_hint: str | None
    tasks_analyzed: int
    alignment_score: int
    aligned: list[TaskAlignmentResult] = field(default_factory=list)
    misaligned: list[TaskAlignmentResult] = field(default_factory=list)
    summary: str = ""
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def all_aligned(self) -> bool:
        return not self.misaligned

    def to_dict(self) -> dict:
        return {
            "repository": self.repository,
            "project": self.resolved_project or "all",
            "project_hint": self.project_hint,
            "tasks_analyzed": self.tasks_analyzed,
            "alignment_score": self.alignment_score,
            "aligned": [r.to_dict() for r in self.aligned],
            "misaligned": [r.to_dict() for r in self.misaligned],
            "summary": self.summary,
            "generated_at": self.generated_at.isoformat(),
        }

    def to_markdown(self) -> str:
        md = f"# Alignment Report: {self.repository}\n\n"
        md += f"**Project:** {self.resolved_project or 'all'}\n\n"
        md += f"**Score:** {self.alignment_score}% ({len(self.aligned)}/{self.tasks_analyzed} aligned)\n\n"
        md += f"*Generated: {self.generated_at.strftime('%Y-%m-%d %H:%M:%S')}*\n\n"
        md += f"{self.summary}\n\n"

        if self.misaligned:
            md += "## Misaligned\n\n"
            for result in self.misaligned:
                md += _result_markdown(result)

        if self.aligned:
            md += "## Aligned\n\n"
            for result in self.aligned:
                md += _result_markdown(result)

        return md


def _result_markdown(result: TaskAlignmentResult) -> str:
    counts = result.evidence_counts
    md = f"### {result.verdict.emoji} {result.task.key}: {result.task.summary}\n"
    md += f"- Status: {result.task.status_label}\n"
    md += f"- Assignee: {result.task.assignee or 'Unassigned'}\n"
    md += (
        f"- Evidence: {counts.commits} commit(s), {counts.pull_requests} PR(s), "
        f"{counts.branches} branch(es), {counts.code_matches} code match(es)\n"
    )
    if result.warning:
        md += f"- ⚠ {result.warning}\n"
    if result.recommendation:
        md += f"- Recommendation: {result.recommendation}\n"
    return md + "\n"
