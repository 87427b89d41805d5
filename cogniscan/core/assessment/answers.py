"""
Answer Store

Single source of truth for a session's captured responses, keyed by
question index.
"""
from typing import Dict, Iterator, List, Optional


class AnswerStore:
    """Mapping from question index to captured text."""

    def __init__(self):
        self._answers: Dict[int, str] = {}

    def record(self, index: int, text: str) -> None:
        """Record (or overwrite) the answer for a question."""
        self._answers[index] = text

    def get(self, index: int) -> Optional[str]:
        return self._answers.get(index)

    def has_answer(self, index: int) -> bool:
        """True when a non-empty answer exists for the index."""
        return bool(self._answers.get(index, "").strip())

    def clear(self, index: int) -> None:
        self._answers.pop(index, None)

    def answered_indices(self) -> List[int]:
        return sorted(i for i in self._answers if self.has_answer(i))

    def as_dict(self) -> Dict[int, str]:
        """Copy of the stored answers; mutating it does not touch the store."""
        return dict(self._answers)

    def __contains__(self, index: object) -> bool:
        return index in self._answers

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._answers))

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"AnswerStore({self._answers!r})"
