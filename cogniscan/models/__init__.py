"""
API Schemas
"""
from .assessment import (
    AnswerRequest,
    JumpRequest,
    TranscriptRequest,
    SpeechErrorRequest,
    CreateSessionRequest,
    SessionStateResponse,
    CategoryScoreResponse,
    ScoreReportResponse,
)
from .analysis import ScanTypeInfo, AnalysisResponse, HealthResponse

__all__ = [
    "AnswerRequest",
    "JumpRequest",
    "TranscriptRequest",
    "SpeechErrorRequest",
    "CreateSessionRequest",
    "SessionStateResponse",
    "CategoryScoreResponse",
    "ScoreReportResponse",
    "ScanTypeInfo",
    "AnalysisResponse",
    "HealthResponse",
]
