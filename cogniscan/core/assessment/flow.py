"""
Question Flow Controller

Finite-state machine for one assessment session. Timer-driven events
(stimulus hide, auto-advance) and user navigation are transitions of the
same machine, so they cannot race: every question change cancels whatever
the previous question left pending.

Per-question phases:
    PRESENTING  (recall only) stimulus visible, no input, Next disabled
    CAPTURING   input accepted
    ANSWERED    an answer is recorded

Usage:
    controller = QuestionFlowController(DEFAULT_QUESTIONS, SessionContext(True, "u1"))
    controller.start()
    controller.select_option("32")
    controller.next()
    ...
    report = controller.finish()
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence, Set

from cogniscan.utils import (
    bind_logger,
    get_logger,
    CaptureError,
    NavigationError,
    SessionClosedError,
    ValidationError,
)
from .answers import AnswerStore
from .base import Question, QuestionKind, SessionContext, SessionState, StimulusPhase
from .questions import DEFAULT_QUESTIONS
from .scoring import ScoreReport, score_session
from .speech import SpeechCaptureAdapter
from .timer import (
    DEFAULT_AUTO_ADVANCE_MS,
    DEFAULT_PRESENTATION_MS,
    CancellableTimer,
    Scheduler,
    StimulusTimer,
)

logger = get_logger(__name__)


class QuestionFlowController:
    """
    Drives which question is shown, whether navigation is allowed, and when
    the session completes. Owns the session's AnswerStore and SessionState
    exclusively.
    """

    def __init__(
        self,
        questions: Optional[Sequence[Question]] = None,
        context: Optional[SessionContext] = None,
        speech: Optional[SpeechCaptureAdapter] = None,
        stimulus_duration_ms: int = DEFAULT_PRESENTATION_MS,
        auto_advance_delay_ms: int = DEFAULT_AUTO_ADVANCE_MS,
        scheduler: Optional[Scheduler] = None,
        weights: Optional[Dict[str, float]] = None,
        on_change: Optional[Callable[["QuestionFlowController"], None]] = None,
        on_complete: Optional[Callable[[ScoreReport], None]] = None,
    ):
        questions = tuple(DEFAULT_QUESTIONS if questions is None else questions)
        if not questions:
            raise ValueError("An assessment needs at least one question")
        ids = [q.id for q in questions]
        if len(set(ids)) != len(ids):
            raise ValueError("Question ids must be unique")

        self.context = context or SessionContext()
        self.log = bind_logger(logger, user=self.context.user_id or "anonymous")
        if not self.context.is_active:
            raise SessionClosedError("Cannot start an assessment without an active session")

        self.questions = questions
        self.answers = AnswerStore()
        self.state = SessionState()
        self.speech = speech or SpeechCaptureAdapter(None)
        self.auto_advance_delay_ms = auto_advance_delay_ms
        self.weights = weights
        self.report: Optional[ScoreReport] = None
        self.capture_error: Optional[CaptureError] = None

        self._stimulus = StimulusTimer(stimulus_duration_ms, scheduler)
        self._auto_advance = CancellableTimer(scheduler, name="auto-advance")
        self._on_change = on_change
        self._on_complete = on_complete
        self._started = False

    # ── Read-only views ───────────────────────────────────────────────────

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def question(self) -> Question:
        return self.questions[self.state.current_index]

    @property
    def phase(self) -> StimulusPhase:
        return self.state.stimulus_phase

    @property
    def is_last(self) -> bool:
        return self.state.current_index == len(self.questions) - 1

    @property
    def visited(self) -> Set[int]:
        return set(self.state.visited)

    @property
    def progress(self) -> float:
        return round((self.state.current_index + 1) / len(self.questions) * 100, 1)

    @property
    def can_go_next(self) -> bool:
        """
        Forward navigation needs an answer, except for recall questions once
        their stimulus has been hidden.
        """
        if self.state.closed:
            return False
        if self.question.is_recall:
            return self.phase != StimulusPhase.PRESENTING
        return self.answers.has_answer(self.state.current_index)

    @property
    def can_go_previous(self) -> bool:
        return not self.state.closed and self.state.current_index > 0

    @property
    def stimulus_items(self):
        return self._stimulus.items

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.log.info(f"Assessment started ({len(self.questions)} questions)")
        self._enter(0)

    def close(self) -> None:
        """Tear down: no timer or speech callback fires after this returns."""
        if self.state.closed:
            return
        self._cancel_pending()
        self.state.closed = True
        self.state.stimulus_visible = False
        self.log.info(
            f"Assessment session closed at question {self.state.current_index + 1}"
            f"{' (completed)' if self.state.completed else ''}"
        )

    # ── Answer capture ────────────────────────────────────────────────────

    def select_option(self, option: str) -> None:
        """Record an option click. Re-selecting overwrites the answer."""
        self._ensure_open()
        question = self.question
        self._ensure_accepting_input()
        if not question.options:
            raise ValidationError("This question has no options to select", field="answer")
        if option not in question.options:
            raise ValidationError(f"'{option}' is not an option for this question", field="answer")

        if self.phase == StimulusPhase.ANSWERED:
            self._set_phase(StimulusPhase.CAPTURING)
        self._commit(self.state.current_index, option)

    def submit_text(self, text: str) -> None:
        """Typed response for free-response questions (speech fallback)."""
        self._ensure_open()
        self._ensure_accepting_input()
        if self.question.options:
            raise ValidationError("Select one of the options for this question", field="answer")
        if not text or not text.strip():
            raise ValidationError("Answer text must not be empty", field="answer")
        self.speech.stop()
        self._commit(self.state.current_index, text.strip())

    def start_speech(self) -> bool:
        """
        Begin speech capture for the current speech question.

        Returns False when speech is unavailable and that was already
        reported; raises UnsupportedCapabilityError the first time.
        """
        self._ensure_open()
        self._ensure_accepting_input()
        if not self.question.accepts_speech:
            raise ValidationError("This question does not take a spoken answer", field="answer")

        index = self.state.current_index
        self.capture_error = None
        started = self.speech.start(
            on_final=lambda text: self._on_final_transcript(index, text),
            on_error=self._on_capture_error,
        )
        if started:
            self._set_phase(StimulusPhase.CAPTURING)
            self._notify()
        return started

    def stop_speech(self) -> None:
        self.speech.stop()
        if (
            not self.state.closed
            and self.phase == StimulusPhase.CAPTURING
            and self.answers.has_answer(self.state.current_index)
        ):
            self._set_phase(StimulusPhase.ANSWERED)
            self._notify()

    # ── Navigation ────────────────────────────────────────────────────────

    def next(self) -> int:
        self._ensure_open()
        if self.is_last:
            raise NavigationError(
                "Already at the last question; finish the assessment instead",
                self.state.current_index,
            )
        if not self.can_go_next:
            raise NavigationError(
                "Answer the current question before moving on",
                self.state.current_index,
            )
        self._enter(self.state.current_index + 1)
        return self.state.current_index

    def previous(self) -> int:
        self._ensure_open()
        if not self.can_go_previous:
            raise NavigationError("Already at the first question", self.state.current_index)
        self._enter(self.state.current_index - 1)
        return self.state.current_index

    def jump_to(self, index: int) -> int:
        """Jump backwards, or to any question already visited."""
        self._ensure_open()
        if not 0 <= index < len(self.questions):
            raise NavigationError(f"No question at index {index}", self.state.current_index)
        if index == self.state.current_index:
            return index
        if index > self.state.current_index and index not in self.state.visited:
            raise NavigationError(
                "Cannot skip ahead to a question that has not been reached",
                self.state.current_index,
                details={"target_index": index},
            )
        self._enter(index)
        return index

    def finish(self) -> ScoreReport:
        """Score the session from the last question and tear it down."""
        self._ensure_open()
        if not self.is_last:
            raise NavigationError(
                "The assessment can only be finished from the last question",
                self.state.current_index,
            )
        if not self.can_go_next:
            raise NavigationError(
                "Answer the current question before finishing",
                self.state.current_index,
            )

        self._cancel_pending()
        report = score_session(self.questions, self.answers, self.weights)
        self.report = report
        self.state.completed = True
        self.log.info(
            f"Assessment completed: risk score {report.risk_score:.1f} ({report.risk_level.value}), "
            f"{report.answered_count}/{report.total_questions} answered"
        )
        self.close()
        if self._on_complete is not None:
            self._on_complete(report)
        return report

    # ── Snapshot ──────────────────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view of the session for presentation."""
        return {
            "current_index": self.state.current_index,
            "total_questions": len(self.questions),
            "question": self.question.to_dict(),
            "phase": self.phase.value,
            "stimulus_visible": self.state.stimulus_visible,
            "stimulus_items": list(self.stimulus_items),
            "answers": self.answers.as_dict(),
            "interim_transcript": self.speech.interim_transcript if self.speech.listening else "",
            "can_go_next": self.can_go_next,
            "can_go_previous": self.can_go_previous,
            "is_last": self.is_last,
            "progress": self.progress,
            "visited": sorted(self.state.visited),
            "speech_supported": self.speech.supported,
            "speech_listening": self.speech.listening,
            "speech_invocation": self.speech.invocation,
            "capture_error": self.capture_error.to_dict() if self.capture_error else None,
            "completed": self.state.completed,
            "closed": self.state.closed,
        }

    # ── Internal transitions ──────────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self.state.closed:
            raise SessionClosedError()
        if not self._started:
            raise NavigationError("Assessment has not been started")

    def _ensure_accepting_input(self) -> None:
        if self.phase == StimulusPhase.PRESENTING:
            raise NavigationError(
                "Input is not accepted while the sequence is being presented",
                self.state.current_index,
            )

    def _cancel_pending(self) -> None:
        self._stimulus.cancel()
        self._auto_advance.cancel()
        self.speech.stop()

    def _enter(self, index: int) -> None:
        self._cancel_pending()
        self.state.current_index = index
        self.state.visited.add(index)
        self.state.stimulus_visible = False
        self.capture_error = None

        question = self.questions[index]
        if question.kind == QuestionKind.RECALL:
            self._set_phase(StimulusPhase.PRESENTING)
            self.state.stimulus_visible = True
            self._stimulus.present(question.stimulus_sequence, self._on_stimulus_hidden)
        elif self.answers.has_answer(index):
            self._set_phase(StimulusPhase.ANSWERED)
        else:
            self._set_phase(StimulusPhase.CAPTURING)

        self.log.debug(f"Entered question {index + 1}/{len(self.questions)} ({question.kind.value})")
        self._notify()

    def _set_phase(self, phase: StimulusPhase) -> None:
        if phase != self.state.stimulus_phase:
            self.log.debug(
                f"Q{self.state.current_index + 1}: "
                f"{self.state.stimulus_phase.value} -> {phase.value}"
            )
        self.state.stimulus_phase = phase

    def _commit(self, index: int, text: str) -> None:
        self.answers.record(index, text)
        self._set_phase(StimulusPhase.ANSWERED)
        self._notify()

    def _on_stimulus_hidden(self) -> None:
        if self.state.closed:
            return
        self.state.stimulus_visible = False
        self._set_phase(StimulusPhase.CAPTURING)
        if not self.is_last:
            self._auto_advance.start(self.auto_advance_delay_ms, self._on_auto_advance)
        self._notify()

    def _on_auto_advance(self) -> None:
        if self.state.closed or self.is_last:
            return
        self.log.debug(f"Auto-advancing from recall question {self.state.current_index + 1}")
        self._enter(self.state.current_index + 1)

    def _on_final_transcript(self, index: int, text: str) -> None:
        if self.state.closed or index != self.state.current_index:
            return
        if not text.strip():
            self._on_capture_error(CaptureError("No speech was detected. Please try again."))
            return
        self._commit(index, text.strip())

    def _on_capture_error(self, error: CaptureError) -> None:
        if self.state.closed:
            return
        self.capture_error = error
        if self.answers.has_answer(self.state.current_index):
            self._set_phase(StimulusPhase.ANSWERED)
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
