"""
Risk Tiers

Shared three-tier classification used by both the cognitive assessment and
the scan-analysis pipeline, plus the presentation mapping shown to users.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from cogniscan.utils import get_logger

logger = get_logger(__name__)

LOW_UPPER_BOUND = 30.0       # scores strictly below are low
MODERATE_UPPER_BOUND = 60.0  # scores up to and including are moderate


class RiskLevel(str, Enum):
    """Coarse risk classification."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


def classify_score(score: float) -> RiskLevel:
    """
    Map a 0-100 risk score to a tier.

    <30 low, 30-60 moderate, >60 high. Exact boundary values resolve to the
    lower-severity tier, so 30 and 60 are both moderate.
    """
    if score < LOW_UPPER_BOUND:
        return RiskLevel.LOW
    if score <= MODERATE_UPPER_BOUND:
        return RiskLevel.MODERATE
    return RiskLevel.HIGH


@dataclass(frozen=True)
class NextStep:
    title: str
    detail: str


@dataclass(frozen=True)
class RiskTier:
    """Presentation-ready description of a risk level."""
    level: RiskLevel
    label: str
    headline: str
    next_steps: Tuple[NextStep, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "level": self.level.value,
            "label": self.label,
            "headline": self.headline,
            "next_steps": [
                {"title": s.title, "detail": s.detail} for s in self.next_steps
            ],
        }


_LOW_STEPS = (
    NextStep("Continue Healthy Habits",
             "Maintain regular exercise, balanced diet, and mental stimulation"),
    NextStep("Annual Screening",
             "Consider repeating this assessment annually as a preventive measure"),
    NextStep("Stay Informed",
             "Keep learning about cognitive health and early warning signs"),
)

_ELEVATED_STEPS = (
    NextStep("Clinical Evaluation",
             "Schedule an appointment with a healthcare professional for comprehensive testing"),
    NextStep("Brain Scan Analysis",
             "A clinician can submit CT, MRI or PET scans for AI-assisted review"),
    NextStep("Early Intervention",
             "Early detection significantly improves treatment outcomes"),
)

_TIERS: Dict[RiskLevel, RiskTier] = {
    RiskLevel.LOW: RiskTier(
        level=RiskLevel.LOW,
        label="Low",
        headline=(
            "Your assessment indicates normal cognitive function. Continue maintaining "
            "healthy lifestyle habits and consider annual screenings."
        ),
        next_steps=_LOW_STEPS,
    ),
    RiskLevel.MODERATE: RiskTier(
        level=RiskLevel.MODERATE,
        label="Moderate",
        headline=(
            "Your results suggest some areas that may benefit from attention. We recommend "
            "consulting with a healthcare professional for a clinical evaluation."
        ),
        next_steps=_ELEVATED_STEPS,
    ),
    RiskLevel.HIGH: RiskTier(
        level=RiskLevel.HIGH,
        label="High",
        headline=(
            "Your assessment indicates concerning patterns. We strongly recommend scheduling "
            "a clinical evaluation with a healthcare professional as soon as possible."
        ),
        next_steps=_ELEVATED_STEPS,
    ),
}


class RiskClassifier:
    """
    Maps a risk level to its presentation tier.

    No inference happens here: the level handed in (from scoring, a parsed
    verdict, or the fallback verdict) is authoritative.
    """

    def classify(self, level: Union[RiskLevel, str]) -> RiskTier:
        level = RiskLevel(level)
        return _TIERS[level]

    def classify_score(self, score: float) -> RiskTier:
        return self.classify(classify_score(score))
