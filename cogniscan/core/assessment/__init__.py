"""
Assessment Engine

Timed memory stimuli, option and speech responses, navigation rules and
scoring for the self-administered cognitive screening.

Usage:
    from cogniscan.core.assessment import QuestionFlowController, SessionContext

    controller = QuestionFlowController(context=SessionContext(True, "user-1"))
    controller.start()
"""
from .base import Category, QuestionKind, StimulusPhase, Question, SessionContext, SessionState
from .answers import AnswerStore
from .questions import DEFAULT_QUESTIONS
from .timer import CancellableTimer, StimulusTimer
from .speech import CaptureState, SpeechRecognizer, RelayedRecognizer, SpeechCaptureAdapter
from .scoring import CategoryScore, ScoreReport, score_session, question_credit
from .flow import QuestionFlowController

__all__ = [
    "Category",
    "QuestionKind",
    "StimulusPhase",
    "Question",
    "SessionContext",
    "SessionState",
    "AnswerStore",
    "DEFAULT_QUESTIONS",
    "CancellableTimer",
    "StimulusTimer",
    "CaptureState",
    "SpeechRecognizer",
    "RelayedRecognizer",
    "SpeechCaptureAdapter",
    "CategoryScore",
    "ScoreReport",
    "score_session",
    "question_credit",
    "QuestionFlowController",
]
