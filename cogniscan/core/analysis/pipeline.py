"""
Scan Analysis Pipeline

Validator gates the client; client output goes through the parser and the
risk classifier. Validation errors stop at `select_file`; transport-class
errors abort the current attempt but keep the previous result.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Optional, Union

from cogniscan.core.risk import RiskClassifier
from cogniscan.utils import (
    bind_logger,
    get_logger,
    AnalysisInProgressError,
    SessionClosedError,
    ValidationError,
)
from cogniscan.core.assessment.base import SessionContext
from .base import AnalysisResult, ScanType, ScanUpload
from .client import InferenceClient
from .parser import ResponseParser
from .validator import ScanValidator

logger = get_logger(__name__)


class ScanAnalysisSession:
    """One clinician's upload-and-analyze workflow."""

    def __init__(
        self,
        client: InferenceClient,
        context: Optional[SessionContext] = None,
        validator: Optional[ScanValidator] = None,
        parser: Optional[ResponseParser] = None,
        classifier: Optional[RiskClassifier] = None,
    ):
        self.context = context or SessionContext()
        self.log = bind_logger(logger, user=self.context.user_id)
        if not self.context.is_active:
            raise SessionClosedError("Scan analysis requires an active session")

        self.client = client
        self.validator = validator or ScanValidator()
        self.parser = parser or ResponseParser()
        self.classifier = classifier or RiskClassifier()

        self.upload: Optional[ScanUpload] = None
        self.scan_type: Optional[ScanType] = None
        self.last_result: Optional[AnalysisResult] = None

    def _ensure_idle(self) -> None:
        # The pending request owns the current selection until it settles
        if self.client.in_flight:
            raise AnalysisInProgressError()

    def select_scan_type(self, scan_type: Union[ScanType, str]) -> ScanType:
        self._ensure_idle()
        try:
            self.scan_type = ScanType(scan_type)
        except ValueError:
            raise ValidationError(
                f"Unknown scan type: {scan_type}. Valid: {[s.value for s in ScanType]}",
                field="scan_type",
            )
        if self.upload is not None:
            self.upload.scan_type = self.scan_type
        return self.scan_type

    def select_file(self, upload: ScanUpload) -> ScanUpload:
        """Validate and keep a new selection; the previous one is discarded."""
        self._ensure_idle()
        if upload.scan_type is None:
            upload.scan_type = self.scan_type
        self.validator.validate(upload)
        if upload.scan_type is not None:
            self.scan_type = upload.scan_type
        self.upload = upload
        self.log.info(f"File '{upload.file_name}' ready for analysis")
        return upload

    def reset(self) -> None:
        self._ensure_idle()
        self.upload = None
        self.scan_type = None
        self.last_result = None

    async def analyze(self) -> AnalysisResult:
        """
        Run one analysis attempt for the current selection.

        Raises ValidationError when nothing valid is selected, and the
        client's AnalysisInProgressError / RateLimitError /
        QuotaExceededError / TransportError unchanged.
        """
        if self.upload is None:
            raise ValidationError("Select a scan image before analyzing", field="file")
        if self.upload.scan_type is None:
            raise ValidationError("Select a scan type before analyzing", field="scan_type")

        upload = replace(self.upload)
        response = await self.client.analyze(upload)
        outcome = self.parser.parse(response.text)
        verdict = outcome.verdict

        result = AnalysisResult(
            scan_type=ScanType(upload.scan_type),
            file_name=upload.file_name,
            risk_level=verdict.risk_level,
            confidence=verdict.confidence,
            findings=list(verdict.findings),
            recommendations=list(verdict.recommendations),
            image_ref=upload.data_uri(),
            tier=self.classifier.classify(verdict.risk_level),
            is_fallback=outcome.is_fallback,
            latency_ms=response.latency_ms,
        )
        self.last_result = result
        self.log.info(
            f"Analysis complete for '{upload.file_name}': {result.risk_level.value} "
            f"({result.confidence:.0f}% confidence{', fallback' if result.is_fallback else ''})"
        )
        return result
