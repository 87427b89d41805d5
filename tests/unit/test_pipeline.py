"""
Unit Tests for the Scan Analysis Pipeline
"""
import asyncio
import json
import pytest
import httpx

from cogniscan.core.analysis import (
    FALLBACK_VERDICT,
    InferenceClient,
    ScanAnalysisSession,
    ScanType,
    ScanUpload,
)
from cogniscan.core.assessment import SessionContext
from cogniscan.core.risk import RiskLevel
from cogniscan.utils import (
    AnalysisInProgressError,
    RateLimitError,
    SessionClosedError,
    TransportError,
    ValidationError,
)


class CountingHandler:
    """Mock transport handler that records how often it was hit."""

    def __init__(self, status: int = 200, body=None, text: str = None):
        self.calls = 0
        self.status = status
        self.body = body
        self.text = text

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.body is not None:
            return httpx.Response(self.status, json=self.body)
        return httpx.Response(self.status, text=self.text or "")


def _session(handler, context=None) -> ScanAnalysisSession:
    client = InferenceClient(
        base_url="https://inference.test/analyze",
        api_key="k",
        transport=httpx.MockTransport(handler),
    )
    return ScanAnalysisSession(client, context=context)


class TestSelection:

    def test_pdf_rejected_before_any_request(self, png_bytes):
        handler = CountingHandler()
        session = _session(handler)

        with pytest.raises(ValidationError):
            session.select_file(
                ScanUpload(file=png_bytes, file_name="report.pdf", mime_type="application/pdf")
            )

        assert session.upload is None
        assert handler.calls == 0

    def test_scan_type_applies_to_later_file(self, png_bytes):
        session = _session(CountingHandler())
        session.select_scan_type("CT")
        upload = session.select_file(ScanUpload(file=png_bytes, file_name="a.png", mime_type="image/png"))

        assert upload.scan_type is ScanType.CT

    def test_unknown_scan_type(self):
        with pytest.raises(ValidationError):
            _session(CountingHandler()).select_scan_type("XRAY")

    def test_inactive_context_rejected(self):
        with pytest.raises(SessionClosedError):
            _session(CountingHandler(), context=SessionContext(is_active=False))


@pytest.mark.asyncio
class TestAnalyze:

    async def test_nothing_selected(self):
        handler = CountingHandler()
        session = _session(handler)

        with pytest.raises(ValidationError):
            await session.analyze()
        assert handler.calls == 0

    async def test_missing_scan_type(self, png_bytes):
        session = _session(CountingHandler())
        session.select_file(ScanUpload(file=png_bytes, file_name="a.png", mime_type="image/png"))

        with pytest.raises(ValidationError) as exc_info:
            await session.analyze()
        assert exc_info.value.field == "scan_type"

    async def test_structured_result(self, png_upload, verdict_payload):
        session = _session(CountingHandler(body={"analysis": verdict_payload}))
        session.select_file(png_upload)

        result = await session.analyze()

        assert result.risk_level == RiskLevel.HIGH
        assert result.tier.level == RiskLevel.HIGH
        assert result.confidence == 92.0
        assert result.findings == verdict_payload["findings"]
        assert not result.is_fallback
        assert result.image_ref.startswith("data:image/png;base64,")
        assert session.last_result is result

    async def test_prose_yields_fallback(self, png_upload):
        session = _session(CountingHandler(text="Everything looks broadly normal."))
        session.select_file(png_upload)

        result = await session.analyze()

        assert result.is_fallback
        assert result.risk_level == FALLBACK_VERDICT.risk_level
        assert result.findings == list(FALLBACK_VERDICT.findings)

    async def test_transport_error_keeps_previous_result(self, png_upload, verdict_payload):
        handler = CountingHandler(body={"analysis": verdict_payload})
        session = _session(handler)
        session.select_file(png_upload)
        first = await session.analyze()

        handler.body = None
        handler.status = 503
        with pytest.raises(TransportError):
            await session.analyze()

        assert session.last_result is first

    async def test_rate_limit_propagates(self, png_upload):
        session = _session(CountingHandler(status=429))
        session.select_file(png_upload)

        with pytest.raises(RateLimitError):
            await session.analyze()
        assert session.last_result is None

    async def test_reset_clears_everything(self, png_upload, verdict_payload):
        session = _session(CountingHandler(text=json.dumps(verdict_payload)))
        session.select_file(png_upload)
        await session.analyze()

        session.reset()

        assert session.upload is None
        assert session.scan_type is None
        assert session.last_result is None


@pytest.mark.asyncio
class TestPendingAnalysis:
    """The selection is locked while a request is in flight."""

    @staticmethod
    def _gated_session(verdict_payload):
        release = asyncio.Event()

        async def handler(request):
            await release.wait()
            return httpx.Response(200, json={"analysis": verdict_payload})

        return _session(handler), release

    async def test_scan_type_change_rejected_mid_analysis(self, png_upload, verdict_payload):
        session, release = self._gated_session(verdict_payload)
        session.select_file(png_upload)

        pending = asyncio.create_task(session.analyze())
        await asyncio.sleep(0.01)

        with pytest.raises(AnalysisInProgressError):
            session.select_scan_type("CT")

        release.set()
        result = await pending

        assert result.scan_type is ScanType.MRI
        assert session.upload.scan_type is ScanType.MRI

    async def test_new_file_and_reset_rejected_mid_analysis(self, png_upload, png_bytes, verdict_payload):
        session, release = self._gated_session(verdict_payload)
        session.select_file(png_upload)

        pending = asyncio.create_task(session.analyze())
        await asyncio.sleep(0.01)

        other = ScanUpload(file=png_bytes, file_name="other.png", mime_type="image/png", scan_type=ScanType.PET)
        with pytest.raises(AnalysisInProgressError):
            session.select_file(other)
        with pytest.raises(AnalysisInProgressError):
            session.reset()

        release.set()
        result = await pending

        assert result.file_name == "brain_mri.png"
        assert session.upload is png_upload

    async def test_result_built_from_snapshot(self, png_upload, verdict_payload):
        session, release = self._gated_session(verdict_payload)
        session.select_file(png_upload)

        pending = asyncio.create_task(session.analyze())
        await asyncio.sleep(0.01)
        # Direct mutation of the caller's object does not reach the pending request
        png_upload.scan_type = ScanType.CT
        release.set()

        assert (await pending).scan_type is ScanType.MRI

    async def test_selection_allowed_again_after_settling(self, png_upload, verdict_payload):
        session, release = self._gated_session(verdict_payload)
        session.select_file(png_upload)
        release.set()
        await session.analyze()

        assert session.select_scan_type("CT") is ScanType.CT


class TestFallbackIsolation:

    @pytest.mark.asyncio
    async def test_fallback_results_do_not_share_lists(self, png_upload):
        session = _session(CountingHandler(text="no json here"))
        session.select_file(png_upload)

        first = await session.analyze()
        first.findings.append("edited by caller")
        second = await session.analyze()

        assert "edited by caller" not in second.findings
        assert "edited by caller" not in FALLBACK_VERDICT.findings
