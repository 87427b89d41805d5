"""
Inference Client

Submits an encoded scan to the external analysis service and returns the
raw model text. The model is NON-DECISIONAL from this client's point of view:
nothing here interprets the answer, the Response Parser does.

Outcome classes:
    success          → InferenceResponse (structured or free-text body)
    HTTP 429         → RateLimitError
    HTTP 402         → QuotaExceededError
    anything else    → TransportError (non-2xx or network failure)
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from cogniscan.utils import (
    get_logger,
    AnalysisInProgressError,
    QuotaExceededError,
    RateLimitError,
    TransportError,
)
from .base import ScanType, ScanUpload

logger = get_logger(__name__)

SYSTEM_PROMPT_TEMPLATE = """You are an expert neurologist AI assistant analyzing brain scans for signs of dementia and cognitive decline.

Your task is to analyze {scan_type} brain scans and provide a detailed clinical assessment. Focus on:
1. Detecting signs of dementia (Alzheimer's, vascular dementia, etc.)
2. Identifying brain atrophy, particularly in hippocampus and temporal lobes
3. Assessing white matter lesions and vascular changes
4. Evaluating ventricular enlargement
5. Comparing findings to age-appropriate norms

Provide your response in the following JSON format:
{{
  "riskLevel": "low" | "moderate" | "high",
  "confidence": 85-98 (number representing confidence percentage),
  "findings": ["finding 1", "finding 2", "finding 3", "finding 4"],
  "recommendations": ["recommendation 1", "recommendation 2", "recommendation 3", "recommendation 4"]
}}

Be specific and clinical in your findings. If signs of dementia are detected, note the severity and location."""


def build_prompt(scan_type: ScanType) -> str:
    """System prompt for gateways that forward one to the model."""
    return SYSTEM_PROMPT_TEMPLATE.format(scan_type=ScanType(scan_type).value)


@dataclass
class InferenceResponse:
    """Raw service output, not yet parsed."""
    text: str
    status_code: int = 200
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "status_code": self.status_code,
            "latency_ms": round(self.latency_ms, 2),
        }


def _reduce_body(response: httpx.Response) -> str:
    """
    Reduce a success body to the text the parser should see.

    {"analysis": {...}}                      → that object as JSON
    {"choices": [{"message": {"content"}}]}  → the model content
    anything else                            → the body verbatim
    """
    try:
        payload = response.json()
    except ValueError:
        return response.text

    if isinstance(payload, dict):
        analysis = payload.get("analysis")
        if isinstance(analysis, (dict, str)):
            return analysis if isinstance(analysis, str) else json.dumps(analysis)
        choices = payload.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message", {}) if isinstance(choices[0], dict) else {}
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
    return response.text


class InferenceClient:
    """
    Async HTTP client for the scan-analysis endpoint.

    At most one request is outstanding per client; a second `analyze()`
    while one is pending is rejected, not queued.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        include_prompt: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.include_prompt = include_prompt
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._in_flight = False
        self._request_count = 0
        self._last_request_time: Optional[datetime] = None

        if not api_key:
            logger.warning("No inference API key configured - requests will be sent unauthenticated")

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, upload: ScanUpload) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "imageData": upload.encode(),
            "scanType": ScanType(upload.scan_type).value,
        }
        if self.include_prompt:
            payload["prompt"] = build_prompt(upload.scan_type)
        return payload

    async def analyze(self, upload: ScanUpload) -> InferenceResponse:
        """
        Submit one validated upload.

        Raises:
            AnalysisInProgressError: another request from this client is pending
            RateLimitError / QuotaExceededError / TransportError: service failure
        """
        if self._in_flight:
            raise AnalysisInProgressError()
        if upload.scan_type is None:
            raise ValueError("Scan type must be selected before analysis")

        self._in_flight = True
        start_time = datetime.now()
        try:
            logger.info(f"Analyzing {ScanType(upload.scan_type).value} scan '{upload.file_name}'")
            try:
                response = await self._client.post(
                    self.base_url,
                    json=self._payload(upload),
                    headers=self._headers(),
                )
            except httpx.HTTPError as e:
                logger.error(f"Inference request failed: {e}")
                raise TransportError(details={"reason": str(e)}) from e

            self._request_count += 1
            self._last_request_time = datetime.now()
            latency = (self._last_request_time - start_time).total_seconds() * 1000

            if response.status_code == 429:
                logger.error("Inference rate limit exceeded")
                raise RateLimitError()
            if response.status_code == 402:
                logger.error("Inference credits depleted")
                raise QuotaExceededError()
            if not response.is_success:
                logger.error(f"Inference service error: {response.status_code} {response.text[:200]}")
                raise TransportError(status_code=response.status_code)

            return InferenceResponse(
                text=_reduce_body(response),
                status_code=response.status_code,
                latency_ms=latency,
            )
        finally:
            self._in_flight = False

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "InferenceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            "endpoint": self.base_url,
            "in_flight": self._in_flight,
            "request_count": self._request_count,
            "last_request": self._last_request_time.isoformat() if self._last_request_time else None,
        }
