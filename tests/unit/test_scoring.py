"""
Unit Tests for the Scoring Engine

Correctness per question kind, category aggregation, weighting, purity.
"""
import pytest

from cogniscan.core.assessment import (
    DEFAULT_QUESTIONS,
    AnswerStore,
    Category,
    Question,
    QuestionKind,
    question_credit,
    score_session,
)
from cogniscan.core.risk import RiskLevel


def _perfect_answers():
    answers = {}
    for index, question in enumerate(DEFAULT_QUESTIONS):
        if question.correct_answer is not None:
            answers[index] = question.correct_answer
        elif question.kind == QuestionKind.SPEECH_CAPTURE:
            answers[index] = " ".join(sorted(question.expected_terms)) or "I went to the market"
    return answers


class TestQuestionCredit:

    def test_option_match_is_case_and_space_insensitive(self):
        question = DEFAULT_QUESTIONS[2]
        assert question_credit(question, "  32 ") == 1.0
        assert question_credit(question, "24") == 0.0

    def test_unanswered_option_question_scores_zero(self):
        assert question_credit(DEFAULT_QUESTIONS[1], None) == 0.0
        assert question_credit(DEFAULT_QUESTIONS[1], "   ") == 0.0

    def test_recall_is_not_graded(self):
        assert question_credit(DEFAULT_QUESTIONS[0], None) is None

    def test_speech_with_expected_terms_partial_credit(self):
        question = Question(
            id=1, category=Category.SPEECH, kind=QuestionKind.SPEECH_CAPTURE,
            prompt="Say", expected_terms=frozenset({"Apple", "chair", "blue", "seven"}),
        )
        assert question_credit(question, "Apple, chair.") == 0.5
        assert question_credit(question, "apple chair blue seven") == 1.0

    def test_speech_without_terms_scores_completion_only(self):
        question = Question(
            id=1, category=Category.SPEECH, kind=QuestionKind.SPEECH_CAPTURE,
            prompt="Describe your day",
        )
        assert question_credit(question, "anything at all") == 1.0
        assert question_credit(question, "") == 0.0

    def test_option_question_without_key_not_graded(self):
        question = Question(
            id=1, category=Category.MEMORY, kind=QuestionKind.MULTIPLE_CHOICE,
            prompt="Pick one", options=("a", "b"),
        )
        assert question_credit(question, "a") is None


class TestScoreSession:

    def test_perfect_session_is_low_risk(self):
        report = score_session(DEFAULT_QUESTIONS, _perfect_answers())

        assert report.risk_score == 0.0
        assert report.risk_level == RiskLevel.LOW
        assert all(s.score == 100.0 for s in report.category_scores.values())
        assert set(report.category_scores) == {
            Category.MEMORY, Category.PROBLEM_SOLVING, Category.SPEECH
        }

    def test_empty_session_is_high_risk(self):
        report = score_session(DEFAULT_QUESTIONS, {})

        assert report.risk_score == 100.0
        assert report.risk_level == RiskLevel.HIGH
        assert report.answered_count == 0

    def test_category_scores(self, short_questions):
        answers = {1: "Chair", 2: "16", 3: "apple"}
        report = score_session(short_questions, answers)

        assert report.category_scores[Category.MEMORY].score == 0.0
        assert report.category_scores[Category.PROBLEM_SOLVING].score == 100.0
        assert report.category_scores[Category.SPEECH].score == pytest.approx(100 / 3)
        # mean(0, 100, 33.33) = 44.44 → risk 55.56
        assert report.risk_score == pytest.approx(55.556, abs=1e-3)
        assert report.to_dict()["risk_score"] == 55.6
        assert report.risk_level == RiskLevel.MODERATE

    def test_weights_shift_aggregate(self, short_questions):
        answers = {1: "Chair", 2: "16", 3: "apple chair blue"}
        equal = score_session(short_questions, answers)
        memory_heavy = score_session(
            short_questions, answers, {"memory": 3.0, "problem-solving": 1.0, "speech": 1.0}
        )

        assert memory_heavy.risk_score > equal.risk_score

    def test_zero_weight_category_excluded(self, short_questions):
        answers = {1: "Chair", 2: "16", 3: "apple chair blue"}
        report = score_session(
            short_questions, answers, {"memory": 0.0, "problem-solving": 1.0, "speech": 1.0}
        )
        assert report.risk_score == 0.0

    def test_accepts_answer_store(self, short_questions):
        store = AnswerStore()
        store.record(1, "Apple")
        store.record(2, "16")
        store.record(3, "apple chair blue")

        assert score_session(short_questions, store).risk_score == 0.0

    def test_pure_and_deterministic(self):
        answers = {1: "Apple, Chair, Blue", 2: "24", 5: "Apple"}
        first = score_session(DEFAULT_QUESTIONS, answers)
        second = score_session(DEFAULT_QUESTIONS, dict(reversed(list(answers.items()))))

        assert first.to_dict() == second.to_dict()
        assert answers == {1: "Apple, Chair, Blue", 2: "24", 5: "Apple"}

    def test_report_serialises(self, short_questions):
        data = score_session(short_questions, {1: "Apple"}).to_dict()

        assert data["risk_level"] in ("low", "moderate", "high")
        assert data["tier"]["level"] == data["risk_level"]
        assert data["total_questions"] == 4


class TestTierBoundaries:
    """The tier follows the unrounded score, not its one-decimal display."""

    @staticmethod
    def _two_category_bank():
        return [
            Question(
                id=1, category=Category.MEMORY, kind=QuestionKind.MULTIPLE_CHOICE,
                prompt="Pick a", options=("a", "b"), correct_answer="a",
            ),
            Question(
                id=2, category=Category.PROBLEM_SOLVING, kind=QuestionKind.PATTERN,
                prompt="Pick b", options=("a", "b"), correct_answer="b",
            ),
        ]

    def test_just_below_low_threshold_stays_low(self):
        # memory 100, problem-solving 0 → risk 29.96
        report = score_session(
            self._two_category_bank(), {0: "a", 1: "a"},
            {"memory": 70.04, "problem-solving": 29.96},
        )

        assert report.risk_score == pytest.approx(29.96)
        assert report.risk_level == RiskLevel.LOW
        assert report.tier.level == RiskLevel.LOW
        assert report.to_dict()["risk_score"] == 30.0

    def test_just_above_moderate_threshold_is_high(self):
        # memory 100, problem-solving 0 → risk 60.04
        report = score_session(
            self._two_category_bank(), {0: "a", 1: "a"},
            {"memory": 39.96, "problem-solving": 60.04},
        )

        assert report.risk_score == pytest.approx(60.04)
        assert report.risk_level == RiskLevel.HIGH
        assert report.to_dict()["risk_score"] == 60.0
