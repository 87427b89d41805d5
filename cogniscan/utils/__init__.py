"""
Utilities Package - Logging and Exception Handling
"""
from .logging import bind_logger, get_logger, setup_logging, SessionLogger
from .exceptions import (
    CogniScanError,
    ValidationError,
    UnsupportedCapabilityError,
    CaptureError,
    NavigationError,
    SessionClosedError,
    AnalysisInProgressError,
    InferenceError,
    RateLimitError,
    QuotaExceededError,
    TransportError,
    ParseError,
)

__all__ = [
    "bind_logger",
    "get_logger",
    "SessionLogger",
    "setup_logging",
    "CogniScanError",
    "ValidationError",
    "UnsupportedCapabilityError",
    "CaptureError",
    "NavigationError",
    "SessionClosedError",
    "AnalysisInProgressError",
    "InferenceError",
    "RateLimitError",
    "QuotaExceededError",
    "TransportError",
    "ParseError",
]
