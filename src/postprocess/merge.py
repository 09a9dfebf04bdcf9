"""
Merging of horizontally adjacent detections into one composite.

Some models detect a multi-character label (typically a multi-digit number) as
separate boxes, one per character. This pass joins fragments that sit next to
each other on the same line, reading left to right: "1" + "2" -> "12".

It is a single left-to-right sweep over a running composite. A fragment is only
compared with the composite directly before it in left-edge order, so fragments
that sort between two already-merged groups (e.g. on skewed rows) are not
re-merged.
"""

from __future__ import annotations

from typing import List

from models.detection import Detection

DEFAULT_GAP_RATIO = 0.3
DEFAULT_LINE_RATIO = 0.6


def is_adjacent(
    current: Detection,
    candidate: Detection,
    gap_ratio: float = DEFAULT_GAP_RATIO,
    line_ratio: float = DEFAULT_LINE_RATIO,
) -> bool:
    """
    Check whether `candidate` continues `current` on the same line.

    The horizontal gap (negative when overlapping) must lie within
    +/- gap_ratio * current.width, and the vertical centers must differ by
    less than line_ratio * current.height.
    """
    horiz_gap = candidate.left - current.right
    tolerance = current.width * gap_ratio
    same_line = abs(candidate.center_y - current.center_y) < current.height * line_ratio
    return -tolerance <= horiz_gap <= tolerance and same_line


def absorb(current: Detection, candidate: Detection) -> Detection:
    """Merge `candidate` into `current`: envelope box, joined label, max confidence."""
    return Detection(
        box=current.box.union(candidate.box),
        label=current.label + candidate.label,
        confidence=max(current.confidence, candidate.confidence),
        space=current.space,
    )


def merge_adjacent(
    detections: List[Detection],
    gap_ratio: float = DEFAULT_GAP_RATIO,
    line_ratio: float = DEFAULT_LINE_RATIO,
) -> List[Detection]:
    """
    Merge adjacent fragments in one left-to-right sweep.

    Returns:
        Finalized composites, ordered by left edge.
    """
    if not detections:
        return []

    ordered = sorted(detections, key=lambda d: d.left)

    merged: List[Detection] = []
    current = ordered[0]
    for candidate in ordered[1:]:
        if is_adjacent(current, candidate, gap_ratio, line_ratio):
            current = absorb(current, candidate)
        else:
            merged.append(current)
            current = candidate
    merged.append(current)
    return merged
