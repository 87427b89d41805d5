"""
Default question bank for the self-administered cognitive screening.
"""
from typing import List

from .base import Category, Question, QuestionKind

MEMORY_SEQUENCE = ("Apple", "Chair", "Blue", "Seven", "Garden")

DEFAULT_QUESTIONS: List[Question] = [
    Question(
        id=1,
        category=Category.MEMORY,
        kind=QuestionKind.RECALL,
        prompt="Memorize the following sequence of items. You'll be asked to recall them.",
        stimulus_sequence=MEMORY_SEQUENCE,
    ),
    Question(
        id=2,
        category=Category.MEMORY,
        kind=QuestionKind.MULTIPLE_CHOICE,
        prompt="Which items were in the previous sequence?",
        options=(
            "Apple, Chair, Blue",
            "Orange, Table, Red",
            "Apple, Door, Green",
            "Banana, Sofa, Yellow",
        ),
        correct_answer="Apple, Chair, Blue",
    ),
    Question(
        id=3,
        category=Category.PROBLEM_SOLVING,
        kind=QuestionKind.PATTERN,
        prompt="What comes next in this sequence: 2, 4, 8, 16, ?",
        options=("20", "24", "32", "64"),
        correct_answer="32",
    ),
    Question(
        id=4,
        category=Category.PROBLEM_SOLVING,
        kind=QuestionKind.MULTIPLE_CHOICE,
        prompt=(
            "If all roses are flowers and some flowers fade quickly, "
            "which statement must be true?"
        ),
        options=(
            "All roses fade quickly",
            "Some roses might fade quickly",
            "No roses fade quickly",
            "Only roses fade quickly",
        ),
        correct_answer="Some roses might fade quickly",
    ),
    Question(
        id=5,
        category=Category.PROBLEM_SOLVING,
        kind=QuestionKind.PATTERN,
        prompt="Which number doesn't belong: 3, 5, 7, 9, 12, 15",
        options=("3", "9", "12", "15"),
        correct_answer="12",
    ),
    Question(
        id=6,
        category=Category.MEMORY,
        kind=QuestionKind.MULTIPLE_CHOICE,
        prompt="What was the FIRST item in the sequence you memorized earlier?",
        options=("Apple", "Chair", "Blue", "Seven"),
        correct_answer="Apple",
    ),
    Question(
        id=7,
        category=Category.PROBLEM_SOLVING,
        kind=QuestionKind.MULTIPLE_CHOICE,
        prompt="A clock shows 3:15. What is the angle between the hour and minute hands?",
        options=("0 degrees", "7.5 degrees", "15 degrees", "30 degrees"),
        correct_answer="7.5 degrees",
    ),
    Question(
        id=8,
        category=Category.SPEECH,
        kind=QuestionKind.MULTIPLE_CHOICE,
        prompt="Choose the word that best completes: 'Hot is to Cold as Day is to ___'",
        options=("Night", "Sun", "Morning", "Bright"),
        correct_answer="Night",
    ),
    Question(
        id=9,
        category=Category.SPEECH,
        kind=QuestionKind.SPEECH_CAPTURE,
        prompt="Say out loud the first three items from the sequence you memorized.",
        expected_terms=frozenset({"apple", "chair", "blue"}),
    ),
    Question(
        id=10,
        category=Category.SPEECH,
        kind=QuestionKind.SPEECH_CAPTURE,
        prompt="In a few sentences, describe what you did yesterday.",
    ),
]
