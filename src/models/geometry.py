"""
Letterbox parameters produced when fitting a frame onto the model canvas.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LetterboxTransform:
    """
    Scale and padding applied to a source frame to place it on a square canvas.

    Attributes:
        scale: Uniform scale factor, min(canvas/width, canvas/height).
        pad_x: Horizontal padding on each side, in canvas pixels.
        pad_y: Vertical padding on each side, in canvas pixels.
    """
    scale: float
    pad_x: float = 0.0
    pad_y: float = 0.0

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"Letterbox scale must be positive, got {self.scale}")
        if self.pad_x < 0 or self.pad_y < 0:
            raise ValueError(f"Letterbox padding must be non-negative, got ({self.pad_x}, {self.pad_y})")
