"""
Suppression of repeated reports for an unchanged detection.
"""

from __future__ import annotations

from typing import Optional

from models.detection import Detection

DEFAULT_GRID_PX = 4


def fingerprint(detection: Detection, grid_px: int = DEFAULT_GRID_PX) -> int:
    """
    Coarse identity hash of a detection.

    Edges are snapped down to a `grid_px` grid and confidence is truncated to
    whole percent, so frame-to-frame jitter maps to the same value.
    """
    snapped = tuple(int(edge / grid_px) * grid_px for edge in detection.box.as_tuple())
    return hash((detection.label, int(detection.confidence * 100)) + snapped)


class DedupGate:
    """
    Single-slot debouncer for outbound reports.

    Retains only the most recently accepted fingerprint. A candidate equal to
    it is suppressed; anything else is accepted and replaces it, whether or not
    the resulting send succeeds. Not thread-safe: call from the pipeline thread.
    """

    def __init__(self, grid_px: int = DEFAULT_GRID_PX):
        if grid_px <= 0:
            raise ValueError("grid_px must be positive")
        self.grid_px = grid_px
        self._last: Optional[int] = None

    @property
    def last_fingerprint(self) -> Optional[int]:
        return self._last

    def should_send(self, detection: Detection) -> bool:
        """Return True (and remember it) if `detection` differs from the last accepted one."""
        fp = fingerprint(detection, self.grid_px)
        if fp == self._last:
            return False
        self._last = fp
        return True

    def reset(self) -> None:
        self._last = None
