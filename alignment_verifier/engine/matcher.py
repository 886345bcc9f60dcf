"""
Evidence matching: decides whether a piece of repository history is about a task.

Clauses are evaluated in order and the first satisfied one wins:

1. Exact key: the text contains the task key, the key without its hyphen
   ("SCRUM5") or with the hyphen replaced by a space ("SCRUM 5").
2. Keyword overlap: at least two of the task's summary keywords occur as
   substrings of the text.
3. Domain hint: a configured hint whose pattern matches the task key finds
   enough of its own keywords in the text.

Matching is case-insensitive and pure; the same matcher instance is shared
by all tasks of a run.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from alignment_verifier.config.settings import DomainHintConfig
from alignment_verifier.models.domain import Task

MIN_KEYWORD_HITS = 2
MAX_CODE_SEARCH_KEYWORDS = 2


@dataclass(frozen=True)
class DomainHint:
    """Compiled form of a DomainHintConfig."""

    pattern: re.Pattern[str]
    keywords: tuple[str, ...]
    min_hits: int = MIN_KEYWORD_HITS

    @classmethod
    def from_config(cls, config: DomainHintConfig) -> "DomainHint":
        return cls(
            pattern=re.compile(config.pattern, re.IGNORECASE),
            keywords=tuple(config.keywords),
            min_hits=config.min_hits,
        )

    def applies_to(self, task_key: str) -> bool:
        return self.pattern.search(task_key) is not None

    def hits(self, text: str) -> int:
        return sum(1 for kw in self.keywords if kw in text)


def key_variants(task_key: str) -> tuple[str, ...]:
    """Lowercased spellings of a task key that count as an exact reference."""
    key = task_key.lower()
    return (key, key.replace("-", "", 1), key.replace("-", " ", 1))


class EvidenceMatcher:
    """Matches commits, pull requests and branches against tasks."""

    def __init__(self, domain_hints: Sequence[DomainHintConfig] = ()) -> None:
        self.domain_hints = [DomainHint.from_config(hint) for hint in domain_hints]

    def matches(self, task: Task, text: str | None) -> bool:
        """Whether ``text`` refers to ``task``.

        Args:
            task: Task under verification
            text: Commit message, "title body" of a pull request, or a branch name

        Returns:
            True if any matching clause is satisfied. Empty text never matches.
        """
        if not text:
            return False
        haystack = text.lower()

        if any(variant in haystack for variant in key_variants(task.key)):
            return True

        if sum(1 for kw in task.keywords if kw in haystack) >= MIN_KEYWORD_HITS:
            return True

        return any(hint.applies_to(task.key) and hint.hits(haystack) >= hint.min_hits for hint in self.domain_hints)

    def code_search_terms(self, task: Task) -> list[str]:
        """Code search terms for a task: its key, then up to two keywords."""
        return [task.key, *task.keywords[:MAX_CODE_SEARCH_KEYWORDS]]
