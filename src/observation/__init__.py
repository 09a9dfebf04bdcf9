"""
Observation layer for pluggable frame sources.

This layer abstracts the source of frames (camera, video file, still images)
from the processing pipeline. Each source implements the ObservationSource
interface and returns FrameData objects.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig
from .image_source import ImageSource, ImageSourceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "ImageSource",
    "ImageSourceConfig",
]
