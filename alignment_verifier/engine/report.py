"""Folds per-task results into a scored VerificationReport."""

from collections.abc import Sequence

from alignment_verifier.models.domain import ProjectResolution
from alignment_verifier.models.report import TaskAlignmentResult, VerificationReport

NO_TASKS_SUMMARY = "No tasks found matching the criteria."


def alignment_score(aligned: int, total: int) -> int:
    """Percentage of aligned tasks, rounded half up; 0 when there are no tasks.

    Example:
        >>> alignment_score(1, 8)
        13
    """
    if total <= 0:
        return 0
    return (200 * aligned + total) // (2 * total)


def build_summary(
    aligned: int,
    total: int,
    score: int,
    resolution: ProjectResolution | None = None,
) -> str:
    if total == 0:
        summary = NO_TASKS_SUMMARY
    else:
        summary = f"{aligned}/{total} tasks aligned ({score}%). {total - aligned} misalignment(s) found."
    if resolution is not None and resolution.was_renamed:
        summary += f' (Resolved "{resolution.normalized_hint}" to "{resolution.key}")'
    return summary


def build_report(
    repository: str,
    resolution: ProjectResolution | None,
    results: Sequence[TaskAlignmentResult],
) -> VerificationReport:
    """Build the final report.

    Args:
        repository: Repository that was verified
        resolution: Project resolution, or None when all projects were read
        results: Per-task results in evaluation order

    Returns:
        VerificationReport with results partitioned in their original order.
    """
    aligned = [r for r in results if r.is_aligned]
    misaligned = [r for r in results if not r.is_aligned]
    total = len(results)
    score = alignment_score(len(aligned), total)

    return VerificationReport(
        repository=repository,
        resolved_project=resolution.key if resolution else None,
        project_hint=resolution.hint if resolution else None,
        tasks_analyzed=total,
        alignment_score=score,
        aligned=aligned,
        misaligned=misaligned,
        summary=build_summary(len(aligned), total, score, resolution),
    )
