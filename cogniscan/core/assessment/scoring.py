"""
Scoring Engine

Pure function from (questions, answers) to per-category scores and an
aggregate risk score. No clock, no randomness, no shared state: the same
answers always produce the same report.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from cogniscan.core.risk import RiskClassifier, RiskLevel, RiskTier, classify_score
from .answers import AnswerStore
from .base import Category, Question, QuestionKind

DEFAULT_WEIGHTS: Dict[Category, float] = {
    Category.MEMORY: 1.0,
    Category.PROBLEM_SOLVING: 1.0,
    Category.SPEECH: 1.0,
}

_WORD_RE = re.compile(r"[a-z0-9']+")


@dataclass(frozen=True)
class CategoryScore:
    category: Category
    score: float            # 0-100
    graded_questions: int
    answered_questions: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "category": self.category.value,
            "score": round(self.score, 1),
            "max_score": 100,
            "graded_questions": self.graded_questions,
            "answered_questions": self.answered_questions,
        }


@dataclass(frozen=True)
class ScoreReport:
    category_scores: Dict[Category, CategoryScore]
    risk_score: float
    risk_level: RiskLevel
    tier: RiskTier
    answered_count: int
    total_questions: int
    question_credit: Dict[int, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "category_scores": [s.to_dict() for s in self.category_scores.values()],
            "risk_score": round(self.risk_score, 1),
            "risk_level": self.risk_level.value,
            "tier": self.tier.to_dict(),
            "answered_count": self.answered_count,
            "total_questions": self.total_questions,
        }


def _normalize(text: str) -> str:
    return " ".join(text.strip().lower().split())


def question_credit(question: Question, answer: Optional[str]) -> Optional[float]:
    """
    Credit in [0, 1] for one answer, or None when the question is not graded.

    Option questions need a correct answer to be graded. Speech questions
    with expected terms earn the fraction of terms spoken; without terms
    any transcript earns full credit.
    """
    answered = bool(answer and answer.strip())

    if question.kind == QuestionKind.SPEECH_CAPTURE:
        if not question.expected_terms:
            return 1.0 if answered else 0.0
        if not answered:
            return 0.0
        spoken = set(_WORD_RE.findall(answer.lower()))
        hits = sum(1 for term in question.expected_terms if term in spoken)
        return hits / len(question.expected_terms)

    if question.correct_answer is not None:
        if not answered:
            return 0.0
        return 1.0 if _normalize(answer) == _normalize(question.correct_answer) else 0.0

    return None


def score_session(
    questions: Sequence[Question],
    answers: Union[AnswerStore, Mapping[int, str]],
    weights: Optional[Mapping[Union[Category, str], float]] = None,
) -> ScoreReport:
    """
    Score a completed session.

    Args:
        questions: Question list in presentation order; answers are keyed
                   by position in this list.
        answers: AnswerStore or plain index → text mapping.
        weights: Per-category weights for the aggregate; defaults to equal.

    Returns:
        ScoreReport. Categories without graded questions are left out of
        the weighted mean. Risk score = 100 − weighted mean, clamped to
        [0, 100]. Scores are kept unrounded; `to_dict` rounds to one decimal.
    """
    answer_map = answers.as_dict() if isinstance(answers, AnswerStore) else dict(answers)
    resolved_weights = {
        Category(k): float(v) for k, v in (weights or DEFAULT_WEIGHTS).items()
    }

    credits: Dict[int, float] = {}
    per_category: Dict[Category, List[float]] = {}
    answered_per_category: Dict[Category, int] = {}
    answered_count = 0

    for index, question in enumerate(questions):
        answer = answer_map.get(index)
        if answer and answer.strip():
            answered_count += 1
            answered_per_category[question.category] = answered_per_category.get(question.category, 0) + 1

        credit = question_credit(question, answer)
        if credit is None:
            continue
        credits[index] = credit
        per_category.setdefault(question.category, []).append(credit)

    category_scores: Dict[Category, CategoryScore] = {}
    for category in Category:
        graded = per_category.get(category)
        if not graded:
            continue
        category_scores[category] = CategoryScore(
            category=category,
            score=100.0 * sum(graded) / len(graded),
            graded_questions=len(graded),
            answered_questions=answered_per_category.get(category, 0),
        )

    total_weight = 0.0
    weighted_sum = 0.0
    for category, cat_score in category_scores.items():
        weight = resolved_weights.get(category, 0.0)
        if weight <= 0 or not math.isfinite(weight):
            continue
        total_weight += weight
        weighted_sum += weight * cat_score.score

    # Nothing graded means no evidence of performance: maximum risk
    mean = weighted_sum / total_weight if total_weight > 0 else 0.0
    # Tier from the unrounded score; rounding is for display only
    risk_score = min(100.0, max(0.0, 100.0 - mean))
    risk_level = classify_score(risk_score)

    return ScoreReport(
        category_scores=category_scores,
        risk_score=risk_score,
        risk_level=risk_level,
        tier=RiskClassifier().classify(risk_level),
        answered_count=answered_count,
        total_questions=len(questions),
        question_credit=credits,
    )
