from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """
    Compact status for operator polling.
    """
    status: str = Field(..., description="Objects: N | No detections | Sending... | Detection error")
    fps: float
    frame_count: int
    detection_count: int
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last frame")
    uptime_seconds: int
    dispatch_state: str = Field(..., description="idle|sending")
    uploads_sent: int = 0
    uploads_failed: int = 0
    display_width: int
    display_height: int


class LogsResponse(BaseModel):
    entries: List[str]
    max_entries: int


class DetectionItem(BaseModel):
    label: str
    confidence: float
    left: float
    top: float
    right: float
    bottom: float
    space: str


class DetectionsResponse(BaseModel):
    status: str
    detections: List[DetectionItem]


class DisplaySize(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
