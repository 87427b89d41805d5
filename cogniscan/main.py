"""
CogniScan - FastAPI Application

API endpoints for:
- Self-administered cognitive assessment (question flow, speech relay, scoring)
- Clinical brain-scan analysis (upload validation, inference, verdict)
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional
import uuid

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cogniscan import __version__
from cogniscan.config import settings
from cogniscan.core.analysis import InferenceClient, ScanAnalysisSession, ScanType, ScanUpload
from cogniscan.core.assessment import (
    DEFAULT_QUESTIONS,
    QuestionFlowController,
    RelayedRecognizer,
    SessionContext,
    SpeechCaptureAdapter,
)
from cogniscan.models import (
    AnalysisResponse,
    AnswerRequest,
    CreateSessionRequest,
    HealthResponse,
    JumpRequest,
    ScanTypeInfo,
    ScoreReportResponse,
    SessionStateResponse,
    SpeechErrorRequest,
    TranscriptRequest,
)
from cogniscan.utils import (
    get_logger,
    setup_logging,
    AnalysisInProgressError,
    CaptureError,
    CogniScanError,
    NavigationError,
    QuotaExceededError,
    RateLimitError,
    SessionClosedError,
    TransportError,
    UnsupportedCapabilityError,
    ValidationError,
)

logger = get_logger(__name__)

# Most specific first
_ERROR_STATUS = [
    (ValidationError, 400),
    (UnsupportedCapabilityError, 422),
    (CaptureError, 422),
    (NavigationError, 409),
    (SessionClosedError, 410),
    (AnalysisInProgressError, 409),
    (RateLimitError, 429),
    (QuotaExceededError, 402),
    (TransportError, 502),
]


@dataclass
class _AssessmentEntry:
    controller: QuestionFlowController
    recognizer: Optional[RelayedRecognizer]


# ---- In-memory session registry (single process, no persistence) ----
_assessments: Dict[str, _AssessmentEntry] = {}
_scan_sessions: Dict[str, ScanAnalysisSession] = {}
START_TIME = datetime.now()


def _close_all_sessions() -> None:
    for entry in _assessments.values():
        entry.controller.close()
    _assessments.clear()


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_file)
    logger.info("CogniScan API ready to accept requests")
    yield
    _close_all_sessions()
    for session in _scan_sessions.values():
        await session.client.aclose()
    _scan_sessions.clear()
    logger.info("CogniScan API shut down.")


app = FastAPI(
    title="CogniScan API",
    description="Cognitive screening assessment and AI-assisted brain scan analysis",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CogniScanError)
async def cogniscan_error_handler(request, exc: CogniScanError):
    status_code = 500
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break
    if status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ---- Dependencies ----

def get_session_context(x_user_id: Optional[str] = Header(default=None)) -> SessionContext:
    """Identity boundary: the auth layer in front of us sets X-User-Id."""
    return SessionContext(is_active=bool(x_user_id), user_id=x_user_id)


def get_client_factory() -> Callable[[], InferenceClient]:
    def factory() -> InferenceClient:
        return InferenceClient(
            base_url=settings.inference_url,
            api_key=settings.inference_api_key,
            timeout=settings.inference_timeout_seconds,
            include_prompt=settings.inference_include_prompt,
        )
    return factory


def _get_entry(session_id: str) -> _AssessmentEntry:
    if session_id not in _assessments:
        raise HTTPException(status_code=404, detail=f"Assessment session {session_id} not found")
    return _assessments[session_id]


def _state_response(session_id: str, controller: QuestionFlowController) -> SessionStateResponse:
    return SessionStateResponse(session_id=session_id, **controller.snapshot())


# ---- Health ----

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        active_assessments=sum(1 for e in _assessments.values() if not e.controller.state.closed),
    )


# ---- Assessment ----

@app.get("/api/v1/assessment/questions", tags=["Assessment"])
async def list_questions():
    return {"questions": [q.to_dict() for q in DEFAULT_QUESTIONS]}


@app.post("/api/v1/assessment/sessions", response_model=SessionStateResponse, tags=["Assessment"])
async def create_assessment(
    request: Optional[CreateSessionRequest] = None,
    x_user_id: Optional[str] = Header(default=None),
):
    """
    Start a new assessment. The public screening does not require sign-in,
    so an anonymous context is active too.
    """
    request = request or CreateSessionRequest()
    recognizer = RelayedRecognizer() if request.speech_supported else None
    controller = QuestionFlowController(
        DEFAULT_QUESTIONS,
        SessionContext(is_active=True, user_id=x_user_id),
        speech=SpeechCaptureAdapter(recognizer, locale=settings.speech_locale),
        stimulus_duration_ms=settings.stimulus_duration_ms,
        auto_advance_delay_ms=settings.auto_advance_delay_ms,
        weights=settings.category_weights,
    )
    session_id = str(uuid.uuid4())
    _assessments[session_id] = _AssessmentEntry(controller, recognizer)
    controller.start()
    return _state_response(session_id, controller)


@app.get("/api/v1/assessment/sessions/{session_id}", response_model=SessionStateResponse, tags=["Assessment"])
async def get_assessment(session_id: str):
    entry = _get_entry(session_id)
    return _state_response(session_id, entry.controller)


@app.delete("/api/v1/assessment/sessions/{session_id}", tags=["Assessment"])
async def exit_assessment(session_id: str):
    """Navigating away: tear the session down and forget it."""
    entry = _get_entry(session_id)
    entry.controller.close()
    del _assessments[session_id]
    return {"session_id": session_id, "closed": True}


@app.post("/api/v1/assessment/sessions/{session_id}/answer", response_model=SessionStateResponse, tags=["Assessment"])
async def answer_question(session_id: str, request: AnswerRequest):
    entry = _get_entry(session_id)
    if request.option is not None:
        entry.controller.select_option(request.option)
    elif request.text is not None:
        entry.controller.submit_text(request.text)
    else:
        raise ValidationError("Provide either an option or a text answer", field="answer")
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/next", response_model=SessionStateResponse, tags=["Assessment"])
async def next_question(session_id: str):
    entry = _get_entry(session_id)
    entry.controller.next()
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/previous", response_model=SessionStateResponse, tags=["Assessment"])
async def previous_question(session_id: str):
    entry = _get_entry(session_id)
    entry.controller.previous()
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/jump", response_model=SessionStateResponse, tags=["Assessment"])
async def jump_to_question(session_id: str, request: JumpRequest):
    entry = _get_entry(session_id)
    entry.controller.jump_to(request.index)
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/finish", response_model=ScoreReportResponse, tags=["Assessment"])
async def finish_assessment(session_id: str):
    entry = _get_entry(session_id)
    report = entry.controller.finish()
    del _assessments[session_id]
    return ScoreReportResponse(session_id=session_id, **report.to_dict())


@app.post("/api/v1/assessment/sessions/{session_id}/speech/start", response_model=SessionStateResponse, tags=["Speech"])
async def start_speech(session_id: str):
    entry = _get_entry(session_id)
    entry.controller.start_speech()
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/speech/transcript", response_model=SessionStateResponse, tags=["Speech"])
async def relay_transcript(session_id: str, request: TranscriptRequest):
    entry = _get_entry(session_id)
    if entry.recognizer is None:
        raise UnsupportedCapabilityError()
    if request.is_final:
        entry.recognizer.push_final(request.text, request.invocation)
    else:
        entry.recognizer.push_interim(request.text, request.invocation)
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/speech/error", response_model=SessionStateResponse, tags=["Speech"])
async def relay_speech_error(session_id: str, request: SpeechErrorRequest):
    entry = _get_entry(session_id)
    if entry.recognizer is None:
        raise UnsupportedCapabilityError()
    entry.recognizer.push_error(request.message, request.invocation)
    return _state_response(session_id, entry.controller)


@app.post("/api/v1/assessment/sessions/{session_id}/speech/stop", response_model=SessionStateResponse, tags=["Speech"])
async def stop_speech(session_id: str):
    entry = _get_entry(session_id)
    entry.controller.stop_speech()
    return _state_response(session_id, entry.controller)


# ---- Clinical Scan Analysis ----

@app.get("/api/v1/analysis/scan-types", response_model=List[ScanTypeInfo], tags=["Analysis"])
async def list_scan_types():
    return [ScanTypeInfo(type=s.value, description=s.description) for s in ScanType]


def _require_clinician(context: SessionContext) -> str:
    if not context.is_active or not context.user_id:
        raise HTTPException(status_code=401, detail="Sign in to use the clinical dashboard")
    return context.user_id


def _scan_session_for(user_id: str, factory: Callable[[], InferenceClient]) -> ScanAnalysisSession:
    session = _scan_sessions.get(user_id)
    if session is None:
        session = ScanAnalysisSession(factory(), SessionContext(is_active=True, user_id=user_id))
        _scan_sessions[user_id] = session
    return session


@app.post("/api/v1/analysis/scans", response_model=AnalysisResponse, tags=["Analysis"])
async def analyze_scan(
    file: UploadFile = File(...),
    scan_type: str = Form(...),
    context: SessionContext = Depends(get_session_context),
    client_factory: Callable[[], InferenceClient] = Depends(get_client_factory),
):
    """
    Validate the upload, run inference and return the parsed verdict.

    Non-image uploads are rejected before any network call.
    """
    user_id = _require_clinician(context)
    session = _scan_session_for(user_id, client_factory)

    content = await file.read()
    if session.client.in_flight:
        raise AnalysisInProgressError()

    session.select_scan_type(scan_type)
    session.select_file(ScanUpload(
        file=content,
        file_name=file.filename or "scan",
        mime_type=file.content_type or "",
        scan_type=session.scan_type,
    ))
    result = await session.analyze()
    return AnalysisResponse(**result.to_dict())


@app.get("/api/v1/analysis/scans/latest", response_model=AnalysisResponse, tags=["Analysis"])
async def latest_scan_result(context: SessionContext = Depends(get_session_context)):
    user_id = _require_clinician(context)
    session = _scan_sessions.get(user_id)
    if session is None or session.last_result is None:
        raise HTTPException(status_code=404, detail="No analysis result yet")
    return AnalysisResponse(**session.last_result.to_dict())


@app.delete("/api/v1/analysis/session", tags=["Analysis"])
async def reset_scan_session(context: SessionContext = Depends(get_session_context)):
    user_id = _require_clinician(context)
    session = _scan_sessions.get(user_id)
    if session is not None:
        session.reset()
        del _scan_sessions[user_id]
        await session.client.aclose()
    return {"reset": True}


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
