"""
Speech Capture Adapter

Wraps a platform speech-to-text handle behind a narrow interface:
start/stop plus interim, final and error events. The capability check
happens once, when the adapter is built for a session.

Recognizer configuration is fixed: non-continuous, interim results on,
one locale. Each invocation yields interim transcripts and exactly one
final transcript, or an error.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from cogniscan.utils import get_logger, UnsupportedCapabilityError, CaptureError

logger = get_logger(__name__)


class CaptureState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class SpeechRecognizer(ABC):
    """
    Platform speech-to-text handle.

    Subclasses call `_emit_interim`, `_emit_final` and `_emit_error` as the
    platform reports results.
    """

    def __init__(self):
        self._listener: Optional["SpeechCaptureAdapter"] = None
        self.locale = "en-US"
        self.continuous = False
        self.interim_results = True

    def attach(self, listener: "SpeechCaptureAdapter") -> None:
        self._listener = listener

    def configure(self, locale: str, continuous: bool = False, interim_results: bool = True) -> None:
        self.locale = locale
        self.continuous = continuous
        self.interim_results = interim_results

    @abstractmethod
    def start(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    def _emit_interim(self, text: str, invocation: Optional[int] = None) -> None:
        if self._listener is not None:
            self._listener.on_interim(text, invocation)

    def _emit_final(self, text: str, invocation: Optional[int] = None) -> None:
        if self._listener is not None:
            self._listener.on_final(text, invocation)

    def _emit_error(self, message: str, invocation: Optional[int] = None) -> None:
        if self._listener is not None:
            self._listener.on_error(message, invocation)


class RelayedRecognizer(SpeechRecognizer):
    """
    Recognizer whose results are produced elsewhere and pushed in.

    Used when the speech capability lives in the user's browser and the
    transcripts arrive over the API.
    """

    def __init__(self):
        super().__init__()
        self.listening = False

    def start(self) -> None:
        self.listening = True

    def stop(self) -> None:
        self.listening = False

    def push_interim(self, text: str, invocation: Optional[int] = None) -> None:
        self._emit_interim(text, invocation)

    def push_final(self, text: str, invocation: Optional[int] = None) -> None:
        self.listening = False
        self._emit_final(text, invocation)

    def push_error(self, message: str, invocation: Optional[int] = None) -> None:
        self.listening = False
        self._emit_error(message, invocation)


class SpeechCaptureAdapter:
    """
    Idle → Listening → Idle lifecycle around a SpeechRecognizer.

    Interim transcripts are kept for display only. The final transcript is
    handed to the `on_final` callback once per invocation; anything the
    recognizer reports afterwards for that invocation is ignored.
    """

    def __init__(self, recognizer: Optional[SpeechRecognizer], locale: str = "en-US"):
        self._recognizer = recognizer
        self.supported = recognizer is not None
        self._unsupported_reported = False

        self.state = CaptureState.IDLE
        self.invocation = 0
        self.interim_transcript = ""
        self.final_transcript: Optional[str] = None
        self.last_error: Optional[CaptureError] = None

        self._committed = False
        self._on_final: Optional[Callable[[str], None]] = None
        self._on_error: Optional[Callable[[CaptureError], None]] = None

        if recognizer is not None:
            recognizer.configure(locale, continuous=False, interim_results=True)
            recognizer.attach(self)
        else:
            logger.info("Speech-to-text unavailable; speech capture disabled for this session")

    @property
    def listening(self) -> bool:
        return self.state == CaptureState.LISTENING

    def start(
        self,
        on_final: Callable[[str], None],
        on_error: Optional[Callable[[CaptureError], None]] = None
    ) -> bool:
        """
        Begin listening.

        Raises UnsupportedCapabilityError the first time it is called without
        a recognizer; later calls return False so the condition is surfaced
        once per session. Raises CaptureError if the recognizer refuses to
        start.
        """
        if not self.supported:
            if not self._unsupported_reported:
                self._unsupported_reported = True
                raise UnsupportedCapabilityError()
            return False

        if self.listening:
            self.stop()

        self.invocation += 1
        self.state = CaptureState.LISTENING
        self.interim_transcript = ""
        self.final_transcript = None
        self.last_error = None
        self._committed = False
        self._on_final = on_final
        self._on_error = on_error

        try:
            self._recognizer.start()
        except Exception as e:
            self.state = CaptureState.IDLE
            self._clear_callbacks()
            raise CaptureError(f"Could not start speech recognition: {e}") from e

        logger.debug(f"Speech capture started (invocation {self.invocation})")
        return True

    def stop(self) -> None:
        """Stop listening. Safe to call when already idle."""
        if not self.listening:
            return
        self.state = CaptureState.IDLE
        self._clear_callbacks()
        self._recognizer.stop()
        logger.debug(f"Speech capture stopped (invocation {self.invocation})")

    # ── Recognizer events ─────────────────────────────────────────────────

    def _is_current(self, invocation: Optional[int]) -> bool:
        if invocation is not None and invocation != self.invocation:
            return False
        return self.listening and not self._committed

    def on_interim(self, text: str, invocation: Optional[int] = None) -> None:
        if self._is_current(invocation):
            self.interim_transcript = text

    def on_final(self, text: str, invocation: Optional[int] = None) -> None:
        if not self._is_current(invocation):
            logger.debug("Ignoring final transcript outside the active invocation")
            return
        self._committed = True
        self.final_transcript = text
        self.interim_transcript = ""
        self.state = CaptureState.IDLE
        callback = self._on_final
        self._clear_callbacks()
        if callback is not None:
            callback(text)

    def on_error(self, message: str, invocation: Optional[int] = None) -> None:
        if not self._is_current(invocation):
            return
        self.state = CaptureState.IDLE
        self.interim_transcript = ""
        error = CaptureError(message, details={"invocation": self.invocation})
        self.last_error = error
        logger.warning(f"Speech recognition error: {message}")
        callback = self._on_error
        self._clear_callbacks()
        if callback is not None:
            callback(error)

    def _clear_callbacks(self) -> None:
        self._on_final = None
        self._on_error = None
