"""
Unit Tests for the error taxonomy.
"""
import pytest

from cogniscan.utils import (
    AnalysisInProgressError,
    CaptureError,
    CogniScanError,
    InferenceError,
    NavigationError,
    ParseError,
    QuotaExceededError,
    RateLimitError,
    SessionClosedError,
    TransportError,
    UnsupportedCapabilityError,
    ValidationError,
)


class TestErrorTaxonomy:

    @pytest.mark.parametrize("error,code", [
        (ValidationError(), "VALIDATION_ERROR"),
        (UnsupportedCapabilityError(), "UNSUPPORTED_CAPABILITY"),
        (CaptureError("mic blocked"), "CAPTURE_ERROR"),
        (NavigationError("nope", current_index=2), "NAVIGATION_ERROR"),
        (SessionClosedError(), "SESSION_CLOSED"),
        (AnalysisInProgressError(), "ANALYSIS_IN_PROGRESS"),
        (RateLimitError(), "RATE_LIMITED"),
        (QuotaExceededError(), "QUOTA_EXCEEDED"),
        (TransportError(status_code=500), "TRANSPORT_ERROR"),
        (ParseError("bad json", strategy="whole_body"), "PARSE_ERROR"),
    ])
    def test_codes(self, error, code):
        assert isinstance(error, CogniScanError)
        assert error.code == code
        assert error.to_dict()["error"] == code

    def test_to_dict_shape(self):
        data = NavigationError("Answer first", current_index=3).to_dict()

        assert data == {
            "error": "NAVIGATION_ERROR",
            "message": "Answer first",
            "details": {"current_index": 3},
        }

    def test_validation_default_message(self):
        error = ValidationError()
        assert error.message == "Please upload an image file (JPEG, PNG, DICOM)"
        assert error.details["field"] == "file"

    def test_inference_errors_carry_status(self):
        assert RateLimitError().status_code == 429
        assert QuotaExceededError().status_code == 402
        assert TransportError(status_code=503).details["status_code"] == 503
        for error_type in (RateLimitError, QuotaExceededError, TransportError):
            assert issubclass(error_type, InferenceError)

    def test_str_is_message(self):
        assert str(CaptureError("mic blocked")) == "mic blocked"
