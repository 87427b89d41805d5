"""
Custom Exception Hierarchy

Error taxonomy for the assessment engine and the scan-analysis pipeline.
Each error carries a stable code and structured details for API responses.
"""
from typing import Optional, Dict, Any


class CogniScanError(Exception):
    """Base exception for all screening errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(CogniScanError):
    """Upload rejected before any network call. Needs new input to retry."""

    def __init__(
        self,
        message: str = "Please upload an image file (JPEG, PNG, DICOM)",
        field: str = "file",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field


class UnsupportedCapabilityError(CogniScanError):
    """Speech-to-text is not available on this platform."""

    def __init__(
        self,
        message: str = "Speech recognition is not supported on this device",
        capability: str = "speech_to_text",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UNSUPPORTED_CAPABILITY",
            details={"capability": capability, **(details or {})}
        )
        self.capability = capability


class CaptureError(CogniScanError):
    """Speech recognition failed. The user may retry immediately."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CAPTURE_ERROR",
            details=details
        )


class NavigationError(CogniScanError):
    """A question-flow transition that the current state does not permit."""

    def __init__(
        self,
        message: str,
        current_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="NAVIGATION_ERROR",
            details={"current_index": current_index, **(details or {})}
        )
        self.current_index = current_index


class SessionClosedError(CogniScanError):
    """Operation attempted on a session that was torn down or never active."""

    def __init__(
        self,
        message: str = "Session is not active",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="SESSION_CLOSED",
            details=details
        )


class AnalysisInProgressError(CogniScanError):
    """A second analysis was requested while one is still pending."""

    def __init__(
        self,
        message: str = "An analysis is already in progress for this upload",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="ANALYSIS_IN_PROGRESS",
            details=details
        )


class InferenceError(CogniScanError):
    """Service-level failure from the external inference endpoint."""

    def __init__(
        self,
        message: str,
        code: str = "INFERENCE_ERROR",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=code,
            details={"status_code": status_code, **(details or {})}
        )
        self.status_code = status_code


class RateLimitError(InferenceError):
    """HTTP 429 from the inference service."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again in a moment.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="RATE_LIMITED",
            status_code=429,
            details=details
        )


class QuotaExceededError(InferenceError):
    """HTTP 402 from the inference service."""

    def __init__(
        self,
        message: str = "AI credits depleted. Please add credits to your workspace.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="QUOTA_EXCEEDED",
            status_code=402,
            details=details
        )


class TransportError(InferenceError):
    """Any other non-2xx response or network failure."""

    def __init__(
        self,
        message: str = "AI analysis failed",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="TRANSPORT_ERROR",
            status_code=status_code,
            details=details
        )


class ParseError(CogniScanError):
    """Inference response did not match the verdict shape. Never surfaced."""

    def __init__(
        self,
        message: str,
        strategy: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="PARSE_ERROR",
            details={"strategy": strategy, **(details or {})}
        )
        self.strategy = strategy
