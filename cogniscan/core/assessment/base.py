"""
Assessment Engine - Base Types

Question definitions, per-question phase, and the session context handed
in from the identity boundary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class Category(str, Enum):
    MEMORY = "memory"
    PROBLEM_SOLVING = "problem-solving"
    SPEECH = "speech"


class QuestionKind(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    RECALL = "recall"
    PATTERN = "pattern"
    SPEECH_CAPTURE = "speech-capture"


class StimulusPhase(str, Enum):
    """
    Per-question phase.

    PRESENTING – recall stimulus visible, no input accepted
    CAPTURING  – input accepted (option selection or speech in progress)
    ANSWERED   – an answer is recorded for the current question
    """
    PRESENTING = "presenting"
    CAPTURING = "capturing"
    ANSWERED = "answered"


@dataclass(frozen=True)
class Question:
    """
    One assessment item. Immutable once a session starts.

    `correct_answer` grades option questions; `expected_terms` grades
    speech-capture questions. Questions with neither are scored on
    completion (speech) or not scored at all (recall).
    """
    id: int
    category: Category
    kind: QuestionKind
    prompt: str
    options: Tuple[str, ...] = ()
    stimulus_sequence: Tuple[str, ...] = ()
    expected_terms: FrozenSet[str] = frozenset()
    correct_answer: Optional[str] = None

    def __post_init__(self):
        # Accept lists from callers but store immutable containers
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "kind", QuestionKind(self.kind))
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "stimulus_sequence", tuple(self.stimulus_sequence))
        object.__setattr__(
            self, "expected_terms", frozenset(t.strip().lower() for t in self.expected_terms)
        )

        if self.kind == QuestionKind.RECALL and not self.stimulus_sequence:
            raise ValueError(f"Recall question {self.id} needs a stimulus sequence")
        if self.kind in (QuestionKind.MULTIPLE_CHOICE, QuestionKind.PATTERN) and not self.options:
            raise ValueError(f"Question {self.id} ({self.kind.value}) needs options")
        if self.correct_answer is not None and self.correct_answer not in self.options:
            raise ValueError(f"Correct answer for question {self.id} is not one of its options")

    @property
    def is_recall(self) -> bool:
        return self.kind == QuestionKind.RECALL

    @property
    def accepts_speech(self) -> bool:
        return self.kind == QuestionKind.SPEECH_CAPTURE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "kind": self.kind.value,
            "prompt": self.prompt,
            "options": list(self.options),
            "stimulus_sequence": list(self.stimulus_sequence),
        }


@dataclass(frozen=True)
class SessionContext:
    """
    Identity boundary value.

    The core never looks up ambient auth state; whoever creates a session
    passes this in.
    """
    is_active: bool = True
    user_id: Optional[str] = None


@dataclass
class SessionState:
    """Mutable state owned by exactly one QuestionFlowController."""
    current_index: int = 0
    stimulus_phase: StimulusPhase = StimulusPhase.CAPTURING
    stimulus_visible: bool = False
    interim_transcript: str = ""
    visited: set = field(default_factory=lambda: {0})
    completed: bool = False
    closed: bool = False
