"""
Response Parser

Turns noisy model text into a strict Verdict. Strategies are tried in order;
each is total (returns a ParseAttempt, never raises):

    1. fenced_block  – first ```json fenced block
    2. brace_region  – first '{' through last '}' in the text
    3. whole_body    – the entire text as JSON

If no attempt yields a value in contract, the fixed FALLBACK_VERDICT is
returned. Callers therefore always get a well-formed verdict; the
ParseError is logged and goes no further.
"""
from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictStr, field_validator

from cogniscan.core.risk import RiskLevel
from cogniscan.utils import get_logger, ParseError
from .base import FALLBACK_VERDICT, Verdict

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\n?([\s\S]*?)\n?[ \t]*```")


class VerdictSchema(BaseModel):
    """Shape a model answer must have to be accepted."""
    model_config = ConfigDict(extra="ignore")

    risk_level: RiskLevel = Field(validation_alias=AliasChoices("riskLevel", "risk_level"))
    confidence: float
    findings: List[StrictStr]
    recommendations: List[StrictStr]

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _require_number(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("confidence must be a number")
        return value

    @field_validator("confidence")
    @classmethod
    def _require_range(cls, value: float) -> float:
        if not math.isfinite(value) or not 0.0 <= value <= 100.0:
            raise ValueError("confidence must be a finite number in [0, 100]")
        return value

    def to_verdict(self) -> Verdict:
        return Verdict(
            risk_level=self.risk_level,
            confidence=float(self.confidence),
            findings=tuple(self.findings),
            recommendations=tuple(self.recommendations),
        )


@dataclass(frozen=True)
class ParseAttempt:
    """Tagged result of one strategy: a verdict, or the reason there is none."""
    strategy: str
    verdict: Optional[Verdict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.verdict is not None


@dataclass(frozen=True)
class ParseOutcome:
    verdict: Verdict
    is_fallback: bool
    attempts: Tuple[ParseAttempt, ...] = field(default_factory=tuple)

    @property
    def strategy(self) -> Optional[str]:
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.strategy
        return None


def _validate_candidate(strategy: str, candidate: Optional[str]) -> ParseAttempt:
    if candidate is None:
        return ParseAttempt(strategy, error="no candidate region")
    try:
        value = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        return ParseAttempt(strategy, error=f"invalid JSON: {e}")
    if not isinstance(value, dict):
        return ParseAttempt(strategy, error=f"expected an object, got {type(value).__name__}")
    try:
        schema = VerdictSchema.model_validate(value)
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        return ParseAttempt(strategy, error=f"schema mismatch: {e}")
    return ParseAttempt(strategy, verdict=schema.to_verdict())


def fenced_block(text: str) -> ParseAttempt:
    match = _FENCE_RE.search(text)
    return _validate_candidate("fenced_block", match.group(1) if match else None)


def brace_region(text: str) -> ParseAttempt:
    start = text.find("{")
    end = text.rfind("}")
    candidate = text[start:end + 1] if start != -1 and end > start else None
    return _validate_candidate("brace_region", candidate)


def whole_body(text: str) -> ParseAttempt:
    return _validate_candidate("whole_body", text.strip())


DEFAULT_STRATEGIES: Tuple[Callable[[str], ParseAttempt], ...] = (
    fenced_block,
    brace_region,
    whole_body,
)


class ResponseParser:
    """Runs the strategies in order and falls back to FALLBACK_VERDICT."""

    def __init__(self, strategies: Tuple[Callable[[str], ParseAttempt], ...] = DEFAULT_STRATEGIES):
        self.strategies = strategies
        self._fallback_count = 0

    @property
    def fallback_count(self) -> int:
        return self._fallback_count

    def parse(self, text: Optional[str]) -> ParseOutcome:
        body = text if isinstance(text, str) else ""
        attempts: List[ParseAttempt] = []

        for strategy in self.strategies:
            attempt = strategy(body)
            attempts.append(attempt)
            if attempt.ok:
                logger.debug(f"Verdict parsed with strategy '{attempt.strategy}'")
                return ParseOutcome(attempt.verdict, is_fallback=False, attempts=tuple(attempts))

        error = ParseError(
            "Inference response did not contain a valid verdict",
            strategy=attempts[-1].strategy if attempts else "none",
            details={"attempts": {a.strategy: a.error for a in attempts}},
        )
        self._fallback_count += 1
        logger.warning(f"{error.message}; using fallback verdict. {error.details}")
        return ParseOutcome(FALLBACK_VERDICT, is_fallback=True, attempts=tuple(attempts))


def parse_verdict(text: Optional[str]) -> ParseOutcome:
    return ResponseParser().parse(text)
