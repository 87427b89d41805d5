"""
Request/response models for the assessment endpoints.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AnswerRequest(BaseModel):
    """Option click or typed free-text response for the current question."""
    option: Optional[str] = None
    text: Optional[str] = None


class JumpRequest(BaseModel):
    index: int = Field(..., ge=0, description="Zero-based question index")


class TranscriptRequest(BaseModel):
    """Transcript event relayed from the browser's speech recognizer."""
    text: str
    is_final: bool = False
    invocation: Optional[int] = None


class SpeechErrorRequest(BaseModel):
    message: str = "Speech recognition failed"
    invocation: Optional[int] = None


class CreateSessionRequest(BaseModel):
    speech_supported: bool = Field(
        default=True,
        description="Whether the client offers speech-to-text",
    )


class SessionStateResponse(BaseModel):
    session_id: str
    current_index: int
    total_questions: int
    question: Dict[str, Any]
    phase: str
    stimulus_visible: bool
    stimulus_items: List[str]
    answers: Dict[int, str]
    interim_transcript: str
    can_go_next: bool
    can_go_previous: bool
    is_last: bool
    progress: float
    visited: List[int]
    speech_supported: bool
    speech_listening: bool
    speech_invocation: int
    capture_error: Optional[Dict[str, Any]] = None
    completed: bool
    closed: bool


class CategoryScoreResponse(BaseModel):
    category: str
    score: float
    max_score: int = 100
    graded_questions: int
    answered_questions: int


class ScoreReportResponse(BaseModel):
    session_id: str
    category_scores: List[CategoryScoreResponse]
    risk_score: float
    risk_level: str
    tier: Dict[str, Any]
    answered_count: int
    total_questions: int
