"""
Outbound report models exchanged with the transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .detection import Rect


@dataclass(frozen=True)
class DetectionReport:
    """
    A single detection upload.

    Attributes:
        label: Detection label (merged text for multi-character detections).
        confidence: Detection confidence (0-1).
        box: Bounding box in source-frame pixels.
        image_jpeg: JPEG-encoded crop of the detection.
        timestamp_ms: Unix time of the send decision, in milliseconds.
        device_id: Identifier of the reporting device.
    """
    label: str
    confidence: float
    box: Rect
    image_jpeg: bytes
    timestamp_ms: int
    device_id: str = "unknown"


@dataclass(frozen=True)
class TransportResult:
    """Outcome of a transport call."""
    ok: bool
    status_code: Optional[int] = None
    message: str = ""
