"""
Request/response models for the scan-analysis endpoints.
"""
from typing import Any, Dict, List

from pydantic import BaseModel


class ScanTypeInfo(BaseModel):
    type: str
    description: str


class AnalysisResponse(BaseModel):
    scan_type: str
    file_name: str
    risk_level: str
    confidence: float
    findings: List[str]
    recommendations: List[str]
    image_ref: str
    tier: Dict[str, Any]
    is_fallback: bool
    latency_ms: float


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    active_assessments: int
