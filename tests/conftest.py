"""
Pytest Configuration and Fixtures

Shared fixtures for assessment-engine and scan-pipeline tests.
"""
import json
import pytest
from pathlib import Path
from typing import Callable, List
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cogniscan.core.assessment import (
    Category,
    Question,
    QuestionFlowController,
    QuestionKind,
    RelayedRecognizer,
    SessionContext,
    SpeechCaptureAdapter,
)
from cogniscan.core.analysis import ScanType, ScanUpload


class FakeHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock with asyncio's call_later signature."""

    def __init__(self):
        self.now = 0.0
        self.handles: List[FakeHandle] = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, lambda: callback(*args))
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self.handles if not h.cancelled and not h.fired)

    def advance(self, ms: float) -> None:
        target = self.now + ms / 1000.0
        while True:
            due = [
                h for h in self.handles
                if not h.cancelled and not h.fired and h.when <= target + 1e-9
            ]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def context() -> SessionContext:
    return SessionContext(is_active=True, user_id="user-123")


@pytest.fixture
def short_questions() -> List[Question]:
    """Recall, option, pattern and speech items - one of each kind."""
    return [
        Question(
            id=1, category=Category.MEMORY, kind=QuestionKind.RECALL,
            prompt="Memorize these", stimulus_sequence=("Apple", "Chair", "Blue"),
        ),
        Question(
            id=2, category=Category.MEMORY, kind=QuestionKind.MULTIPLE_CHOICE,
            prompt="First item?", options=("Apple", "Chair", "Blue"), correct_answer="Apple",
        ),
        Question(
            id=3, category=Category.PROBLEM_SOLVING, kind=QuestionKind.PATTERN,
            prompt="2, 4, 8, ?", options=("10", "16"), correct_answer="16",
        ),
        Question(
            id=4, category=Category.SPEECH, kind=QuestionKind.SPEECH_CAPTURE,
            prompt="Say the items", expected_terms=frozenset({"apple", "chair", "blue"}),
        ),
    ]


@pytest.fixture
def recognizer() -> RelayedRecognizer:
    return RelayedRecognizer()


@pytest.fixture
def make_controller(scheduler, context, recognizer):
    """Factory for controllers on the fake clock with a relayed recognizer."""
    def _make(questions, speech_supported: bool = True, **kwargs) -> QuestionFlowController:
        adapter = SpeechCaptureAdapter(recognizer if speech_supported else None)
        return QuestionFlowController(
            questions,
            context,
            speech=adapter,
            scheduler=scheduler,
            **kwargs,
        )
    return _make


@pytest.fixture
def png_bytes() -> bytes:
    """Minimal PNG signature plus padding; content is never decoded."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def png_upload(png_bytes) -> ScanUpload:
    return ScanUpload(
        file=png_bytes,
        file_name="brain_mri.png",
        mime_type="image/png",
        scan_type=ScanType.MRI,
    )


@pytest.fixture
def verdict_payload() -> dict:
    return {
        "riskLevel": "high",
        "confidence": 92,
        "findings": [
            "Marked hippocampal atrophy bilaterally",
            "Enlarged lateral ventricles",
        ],
        "recommendations": [
            "Refer to memory clinic",
            "Repeat MRI in 6 months",
        ],
    }


@pytest.fixture
def fenced_response(verdict_payload) -> str:
    return (
        "Here is my assessment of the scan.\n\n"
        f"```json\n{json.dumps(verdict_payload, indent=2)}\n```\n\n"
        "Please correlate clinically."
    )
