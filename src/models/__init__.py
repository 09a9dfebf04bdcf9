"""
Typed models for the detection relay.
"""

from .frame import FrameData
from .detection import CoordinateSpace, Detection, Rect
from .geometry import LetterboxTransform
from .report import DetectionReport, TransportResult
from .config import (
    RelayConfig,
    CameraConfig,
    ModelConfig,
    DecodeConfig,
    MergeConfig,
    DispatchConfig,
    TransportConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "CoordinateSpace",
    "Detection",
    "Rect",
    "LetterboxTransform",
    # Reporting
    "DetectionReport",
    "TransportResult",
    # Config
    "RelayConfig",
    "CameraConfig",
    "ModelConfig",
    "DecodeConfig",
    "MergeConfig",
    "DispatchConfig",
    "TransportConfig",
    "WebConfig",
]
