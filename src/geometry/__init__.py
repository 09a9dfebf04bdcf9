"""
Coordinate-space conversions between model input, source frame and display.
"""

from .letterbox import (
    DEFAULT_CANVAS_SIZE,
    compute_transform,
    letterbox,
    prepare_input,
    to_model_space,
    to_source_space,
)
from .display import display_to_frame, frame_to_display

__all__ = [
    "DEFAULT_CANVAS_SIZE",
    "compute_transform",
    "letterbox",
    "prepare_input",
    "to_model_space",
    "to_source_space",
    "frame_to_display",
    "display_to_frame",
]
