"""Data models for the alignment verifier.

Key Models:
    - Task: Tracker task with derived status category and keywords
    - Evidence: Commits, PRs, branches and code matches linked to a task
    - TaskAlignmentResult: Verdict for one task
    - VerificationReport: Scored report over all analyzed tasks

Example:
    >>> from alignment_verifier.models import Task
    >>> task = Task(key="SCRUM-5", summary="Fix login bug", status_label="Done")
    >>> task.keywords
    ['fix', 'login', 'bug']
"""

from alignment_verifier.models.domain import (
    Branch,
    CodeMatch,
    Commit,
    Evidence,
    EvidenceCounts,
    IssuePage,
    ProjectResolution,
    PullRequest,
    Task,
    TrackerBoard,
    TrackerIssue,
    TrackerProject,
)
from alignment_verifier.models.report import TaskAlignmentResult, VerificationReport

__all__ = [
    "Branch",
    "CodeMatch",
    "Commit",
    "Evidence",
    "EvidenceCounts",
    "IssuePage",
    "ProjectResolution",
    "PullRequest",
    "Task",
    "TaskAlignmentResult",
    "TrackerBoard",
    "TrackerIssue",
    "TrackerProject",
    "VerificationReport",
]
