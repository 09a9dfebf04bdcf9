"""
Frame <-> display mapping for a "fit inside, centered" preview surface.
"""

from __future__ import annotations

from typing import Tuple

from models.detection import Rect


def _fit(frame_w: float, frame_h: float, display_w: float, display_h: float) -> Tuple[float, float, float]:
    """Return (scale, offset_x, offset_y) for a centered fit of the frame."""
    # The display reports 1x1 before its first layout
    frame_w = max(frame_w, 1)
    frame_h = max(frame_h, 1)
    display_w = max(display_w, 1)
    display_h = max(display_h, 1)

    scale = min(display_w / frame_w, display_h / frame_h)
    offset_x = (display_w - frame_w * scale) / 2.0
    offset_y = (display_h - frame_h * scale) / 2.0
    return scale, offset_x, offset_y


def frame_to_display(rect: Rect, frame_w: float, frame_h: float, display_w: float, display_h: float) -> Rect:
    """Map a source-frame rect to display pixels."""
    scale, ox, oy = _fit(frame_w, frame_h, display_w, display_h)
    return Rect(
        left=ox + rect.left * scale,
        top=oy + rect.top * scale,
        right=ox + rect.right * scale,
        bottom=oy + rect.bottom * scale,
    )


def display_to_frame(rect: Rect, frame_w: float, frame_h: float, display_w: float, display_h: float) -> Rect:
    """Map a display rect back to source-frame pixels, clamped to the frame."""
    scale, ox, oy = _fit(frame_w, frame_h, display_w, display_h)
    return Rect(
        left=(rect.left - ox) / scale,
        top=(rect.top - oy) / scale,
        right=(rect.right - ox) / scale,
        bottom=(rect.bottom - oy) / scale,
    ).clamp(frame_w, frame_h)
