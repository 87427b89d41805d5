"""
Clinical Scan Analysis

Validates an uploaded brain scan, submits it to the external inference
service and converts the model's free text into a strict verdict.

ARCHITECTURE CONSTRAINTS:
- Non-image uploads never reach the network
- The caller always receives an in-contract verdict (fallback on parse failure)
- Risk tier comes from the verdict as-is; no further inference
"""
from .base import ScanType, ScanUpload, Verdict, AnalysisResult, FALLBACK_VERDICT
from .validator import ScanValidator
from .client import InferenceClient, InferenceResponse, build_prompt
from .parser import ResponseParser, ParseAttempt, ParseOutcome, parse_verdict
from .pipeline import ScanAnalysisSession

__all__ = [
    "ScanType",
    "ScanUpload",
    "Verdict",
    "AnalysisResult",
    "FALLBACK_VERDICT",
    "ScanValidator",
    "InferenceClient",
    "InferenceResponse",
    "build_prompt",
    "ResponseParser",
    "ParseAttempt",
    "ParseOutcome",
    "parse_verdict",
    "ScanAnalysisSession",
]
