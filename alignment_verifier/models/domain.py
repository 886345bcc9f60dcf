"""
Domain models for the alignment verifier.

These dataclasses are the normalized internal representation of data coming
from the task tracker (projects, boards, issues) and the code host (commits,
pull requests, branches, code search hits). Provider adapters convert raw
API payloads into these models so the engine never touches untyped JSON.

Example:
    Building a task from tracker data::

        task = Task(
            key="SCRUM-5",
            summary="Fix login bug for SSO users",
            status_label="Done",
            assignee="Jane Doe",
        )
        task.status_category  # StatusCategory.DONE
        task.keywords         # ['fix', 'login', 'bug', 'sso', 'users']
"""

from dataclasses import dataclass, field
from datetime import datetime

from alignment_verifier.enums import StatusCategory
from alignment_verifier.keywords import extract_keywords


@dataclass
class TrackerProject:
    """A project in the task tracker."""

    id: str
    """Tracker-internal project identifier."""

    key: str
    """Short project key used as the prefix of issue keys (e.g., "SCRUM")."""

    name: str
    """Human-readable project or space name."""


@dataclass
class ProjectResolution:
    """Outcome of resolving a free-text project hint to a project key."""

    hint: str
    """Hint exactly as the caller supplied it."""

    normalized_hint: str
    """Hint after uppercasing and prefix stripping."""

    key: str
    """Resolved project key (the normalized hint when nothing matched)."""

    found: bool = False
    """Whether a tracker project actually matched the hint."""

    @property
    def was_renamed(self) -> bool:
        return self.key != self.normalized_hint


@dataclass
class TrackerBoard:
    """An agile board belonging to a project."""

    id: int
    name: str = ""


@dataclass
class TrackerIssue:
    """An issue as reported by the task tracker, before derivation."""

    key: str
    summary: str
    status_label: str
    assignee: str | None = None


@dataclass
class IssuePage:
    """One page of board issues."""

    issues: list[TrackerIssue] = field(default_factory=list)
    has_more: bool = False


@dataclass
class Task:
    """A tracker task under verification.

    ``status_category`` and ``keywords`` are derived once from
    ``status_label`` and ``summary`` at construction time and cached on the
    instance. Tasks are not modified afterwards.
    """

    key: str
    """Unique task key (e.g., "SCRUM-5")."""

    summary: str
    """Free-text task summary."""

    status_label: str
    """Status label exactly as the tracker reports it."""

    assignee: str | None = None
    """Display name of the assignee, if any."""

    status_category: StatusCategory = field(init=False)
    keywords: list[str] = field(init=False)

    def __post_init__(self) -> None:
        self.status_category = StatusCategory.from_label(self.status_label)
        self.keywords = extract_keywords(self.summary)

    @classmethod
    def from_issue(cls, issue: TrackerIssue) -> "Task":
        """Create a task from a tracker issue."""
        return cls(
            key=issue.key,
            summary=issue.summary,
            status_label=issue.status_label,
            assignee=issue.assignee,
        )


@dataclass
class Commit:
    """A commit on the code host."""

    sha: str
    """Full commit SHA."""

    message: str
    """Full commit message, including the body."""

    date: datetime | None
    """Author date, timezone-aware. None if the host did not report one."""

    url: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def headline(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass
class PullRequest:
    """A pull request on the code host."""

    id: int
    """Repository-scoped pull request number."""

    title: str
    body: str
    state: str
    """Provider state ("open", "closed", "merged")."""

    url: str

    @property
    def is_closed(self) -> bool:
        """Whether the PR has been closed or merged."""
        return self.state.lower() in ("closed", "merged")


@dataclass
class Branch:
    """A branch on the code host."""

    name: str


@dataclass
class CodeMatch:
    """A code search hit."""

    path: str
    url: str


@dataclass
class EvidenceCounts:
    """True number of matches per evidence kind, before any display cap."""

    commits: int = 0
    pull_requests: int = 0
    branches: int = 0
    code_matches: int = 0

    @property
    def total(self) -> int:
        return self.commits + self.pull_requests + self.branches + self.code_matches

    def to_dict(self) -> dict[str, int]:
        return {
            "commits": self.commits,
            "pull_requests": self.pull_requests,
            "branches": self.branches,
            "code_matches": self.code_matches,
            "total": self.total,
        }


@dataclass
class Evidence:
    """Repository artifacts linked to one task.

    Each list holds at most the display limit of items; ``counts`` keeps the
    true number of matches, which is what ``has_evidence`` looks at.
    """

    commits: list[Commit] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)
    code_matches: list[CodeMatch] = field(default_factory=list)
    counts: EvidenceCounts = field(default_factory=EvidenceCounts)

    @property
    def has_evidence(self) -> bool:
        return self.counts.total > 0

    def to_dict(self) -> dict:
        return {
            "commits": [
                {
                    "sha": c.short_sha,
                    "message": c.headline,
                    "date": c.date.isoformat() if c.date else None,
                    "url": c.url,
                }
                for c in self.commits
            ],
            "pull_requests": [
                {"id": pr.id, "title": pr.title, "state": pr.state, "url": pr.url}
                for pr in self.pull_requests
            ],
            "branches": list(self.branches),
            "code_matches": [{"path": m.path, "url": m.url} for m in self.code_matches],
        }
