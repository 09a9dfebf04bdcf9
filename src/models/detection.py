"""
Detection models for decoded detector output.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


class CoordinateSpace(str, Enum):
    """Coordinate system a box is expressed in."""
    MODEL_INPUT = "model_input"
    SOURCE_FRAME = "source_frame"
    DISPLAY = "display"


@dataclass(frozen=True)
class Rect:
    """
    An axis-aligned rectangle in pixel coordinates.

    Attributes:
        left: Left edge x coordinate.
        top: Top edge y coordinate.
        right: Right edge x coordinate.
        bottom: Bottom edge y coordinate.
    """
    left: float
    top: float
    right: float
    bottom: float

    def __post_init__(self) -> None:
        if self.left > self.right or self.top > self.bottom:
            raise ValueError(
                f"Malformed rect: ({self.left}, {self.top}, {self.right}, {self.bottom})"
            )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (left, top, right, bottom) tuple."""
        return (self.left, self.top, self.right, self.bottom)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (left, top, right, bottom) tuple."""
        return (int(self.left), int(self.top), int(self.right), int(self.bottom))

    def union(self, other: "Rect") -> "Rect":
        """Bounding envelope of both rects."""
        return Rect(
            left=min(self.left, other.left),
            top=min(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
        )

    def clamp(self, width: float, height: float) -> "Rect":
        """Clamp every edge into [0, width] x [0, height]."""
        return Rect(
            left=min(max(self.left, 0.0), width),
            top=min(max(self.top, 0.0), height),
            right=min(max(self.right, 0.0), width),
            bottom=min(max(self.bottom, 0.0), height),
        )

    @classmethod
    def from_center(cls, cx: float, cy: float, w: float, h: float) -> "Rect":
        """Create from center point and size."""
        return cls(left=cx - w / 2, top=cy - h / 2, right=cx + w / 2, bottom=cy + h / 2)


@dataclass(frozen=True)
class Detection:
    """
    A single labelled detection.

    Attributes:
        box: Bounding box in the coordinate space named by `space`.
        label: Human-readable label (possibly a merged multi-character label).
        confidence: Detection confidence score (0-1).
        space: Coordinate space of `box`.
    """
    box: Rect
    label: str
    confidence: float
    space: CoordinateSpace = CoordinateSpace.SOURCE_FRAME

    @property
    def left(self) -> float:
        return self.box.left

    @property
    def right(self) -> float:
        return self.box.right

    @property
    def width(self) -> float:
        return self.box.width

    @property
    def height(self) -> float:
        return self.box.height

    @property
    def center_y(self) -> float:
        return self.box.center_y

    def with_box(self, box: Rect, space: CoordinateSpace) -> "Detection":
        """Return a copy of this detection re-expressed in another space."""
        return replace(self, box=box, space=space)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "confidence": self.confidence,
            "left": self.box.left,
            "top": self.box.top,
            "right": self.box.right,
            "bottom": self.box.bottom,
            "space": self.space.value,
        }
