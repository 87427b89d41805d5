"""
Scan Analysis - Base Types

Upload, verdict and result contracts for the clinical scan pipeline.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from cogniscan.core.risk import RiskLevel, RiskTier


class ScanType(str, Enum):
    CT = "CT"
    MRI = "MRI"
    PET = "PET"

    @property
    def description(self) -> str:
        return _SCAN_DESCRIPTIONS[self]


_SCAN_DESCRIPTIONS = {
    ScanType.CT: "Computed Tomography Scan",
    ScanType.MRI: "Magnetic Resonance Imaging",
    ScanType.PET: "Positron Emission Tomography",
}


@dataclass
class ScanUpload:
    """A selected scan file. Replaced on new selection, dropped on reset."""
    file: bytes
    file_name: str
    mime_type: str
    scan_type: Optional[ScanType] = None

    def encode(self) -> str:
        """Base64 text of the image, as sent to the inference service."""
        return base64.b64encode(self.file).decode("ascii")

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.encode()}"


@dataclass(frozen=True)
class Verdict:
    """
    Structured output of the analysis: always in contract.

    risk_level is one of three tiers and confidence a finite number in
    [0, 100]; the parser never builds a Verdict that breaks this.
    """
    risk_level: RiskLevel
    confidence: float
    findings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "findings", tuple(self.findings))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskLevel": self.risk_level.value,
            "confidence": self.confidence,
            "findings": list(self.findings),
            "recommendations": list(self.recommendations),
        }


FALLBACK_VERDICT = Verdict(
    risk_level=RiskLevel.MODERATE,
    confidence=85.0,
    findings=(
        "AI analysis completed but response format needs review",
        "Please consult with a qualified neurologist",
        "Manual review of scan recommended",
        "Further clinical correlation suggested",
    ),
    recommendations=(
        "Comprehensive neurological examination recommended",
        "Consider follow-up imaging in 6-12 months",
        "Correlate with cognitive assessment results",
        "Consult with specialist for detailed interpretation",
    ),
)


@dataclass(frozen=True)
class AnalysisResult:
    scan_type: ScanType
    file_name: str
    risk_level: RiskLevel
    confidence: float
    findings: List[str]
    recommendations: List[str]
    image_ref: str
    tier: RiskTier
    is_fallback: bool = False
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_type": self.scan_type.value,
            "file_name": self.file_name,
            "risk_level": self.risk_level.value,
            "confidence": self.confidence,
            "findings": list(self.findings),
            "recommendations": list(self.recommendations),
            "image_ref": self.image_ref,
            "tier": self.tier.to_dict(),
            "is_fallback": self.is_fallback,
            "latency_ms": round(self.latency_ms, 2),
        }
