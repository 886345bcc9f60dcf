"""Enumerations for task status categories and alignment verdicts."""

from enum import Enum


class StatusCategory(str, Enum):
    """Coarse classification of a tracker-specific status label.

    Trackers let every project define its own workflow, so labels such as
    "Selected for Development" or "Resolved" are folded into four buckets
    before classification.
    """

    DONE = "done"
    IN_PROGRESS = "in_progress"
    TODO = "todo"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str | None) -> "StatusCategory":
        """Derive the category of a status label.

        The table is evaluated in order and the first category with a
        matching substring wins, so "Done" beats "Open" for a label such as
        "Done (reopened)".

        Args:
            label: Status label as reported by the tracker

        Returns:
            The matching category, or UNKNOWN for unrecognized labels.
        """
        label_lower = (label or "").lower()
        for category, fragments in _STATUS_LABEL_TABLE:
            if any(fragment in label_lower for fragment in fragments):
                return category
        return cls.UNKNOWN


_STATUS_LABEL_TABLE: tuple[tuple[StatusCategory, tuple[str, ...]], ...] = (
    (StatusCategory.DONE, ("done", "closed", "resolved")),
    (StatusCategory.IN_PROGRESS, ("progress", "selected for development")),
    (StatusCategory.TODO, ("to do", "open", "backlog")),
)


class AlignmentVerdict(str, Enum):
    """Whether a task's reported status agrees with the code evidence."""

    ALIGNED = "aligned"
    MISALIGNED = "misaligned"

    def __str__(self) -> str:
        return self.value

    @property
    def emoji(self) -> str:
        return {
            AlignmentVerdict.ALIGNED: "✓",
            AlignmentVerdict.MISALIGNED: "✗",
        }[self]
