"""
Letterbox resizing between source-frame space and the square model-input canvas.

The model expects a fixed square canvas. Frames are scaled so that their longer
edge fits the canvas, centered, and the remaining area is filled with a constant
background. The returned LetterboxTransform inverts model-space boxes back into
source-frame pixels.
"""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from models.detection import Rect
from models.geometry import LetterboxTransform
from ops.errors import InputError

DEFAULT_CANVAS_SIZE = 640
DEFAULT_FILL = (0, 0, 0)


def compute_transform(frame_width: int, frame_height: int, canvas_size: int = DEFAULT_CANVAS_SIZE) -> LetterboxTransform:
    """
    Compute the letterbox scale and padding for a frame size.

    Padding is a whole number of canvas pixels, matching where letterbox()
    places the resized image.

    Args:
        frame_width: Source frame width in pixels.
        frame_height: Source frame height in pixels.
        canvas_size: Side of the square model canvas.

    Raises:
        InputError: If either frame dimension is zero or negative.
    """
    if frame_width <= 0 or frame_height <= 0:
        raise InputError(f"Cannot letterbox a {frame_width}x{frame_height} frame")

    scale = min(canvas_size / frame_width, canvas_size / frame_height)
    new_w = max(1, int(frame_width * scale))
    new_h = max(1, int(frame_height * scale))
    return LetterboxTransform(
        scale=scale,
        pad_x=float((canvas_size - new_w) // 2),
        pad_y=float((canvas_size - new_h) // 2),
    )


def letterbox(
    frame: np.ndarray,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
    fill: Tuple[int, int, int] = DEFAULT_FILL,
) -> Tuple[np.ndarray, LetterboxTransform]:
    """
    Fit a frame onto a square canvas, preserving aspect ratio.

    Args:
        frame: Source frame (H x W x 3).
        canvas_size: Side of the square output canvas.
        fill: Background value for the padded area.

    Returns:
        Tuple of (canvas, transform).
    """
    frame_h, frame_w = frame.shape[:2] if frame.ndim >= 2 else (0, 0)
    transform = compute_transform(frame_w, frame_h, canvas_size)

    new_w = max(1, int(frame_w * transform.scale))
    new_h = max(1, int(frame_h * transform.scale))
    resized = cv2.resize(frame, (new_w, new_h), interpolation=cv2.INTER_LINEAR)

    canvas = np.empty((canvas_size, canvas_size) + frame.shape[2:], dtype=frame.dtype)
    canvas[...] = fill if frame.ndim == 3 else fill[0]
    x0 = int(transform.pad_x)
    y0 = int(transform.pad_y)
    canvas[y0:y0 + new_h, x0:x0 + new_w] = resized
    return canvas, transform


def prepare_input(canvas: np.ndarray) -> np.ndarray:
    """
    Convert a BGR canvas to the model input tensor.

    Returns:
        float32 array of shape (1, S, S, 3), RGB, normalized to [0, 1].
    """
    rgb = cv2.cvtColor(canvas, cv2.COLOR_BGR2RGB)
    return (rgb.astype(np.float32) / 255.0)[np.newaxis, ...]


def to_source_space(rect: Rect, transform: LetterboxTransform, frame_width: float, frame_height: float) -> Rect:
    """
    Map a canvas-space rect back to source-frame pixels.

    The result is clamped to the frame so it stays valid even when the input
    extends outside the letterboxed image.
    """
    return Rect(
        left=(rect.left - transform.pad_x) / transform.scale,
        top=(rect.top - transform.pad_y) / transform.scale,
        right=(rect.right - transform.pad_x) / transform.scale,
        bottom=(rect.bottom - transform.pad_y) / transform.scale,
    ).clamp(frame_width, frame_height)


def to_model_space(rect: Rect, transform: LetterboxTransform) -> Rect:
    """Map a source-frame rect onto the letterboxed canvas."""
    return Rect(
        left=rect.left * transform.scale + transform.pad_x,
        top=rect.top * transform.scale + transform.pad_y,
        right=rect.right * transform.scale + transform.pad_x,
        bottom=rect.bottom * transform.scale + transform.pad_y,
    )
