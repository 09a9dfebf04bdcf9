"""
Greedy non-maximum suppression.
"""

from __future__ import annotations

from typing import List

from models.detection import Detection, Rect

DEFAULT_IOU_THRESHOLD = 0.45


def iou(a: Rect, b: Rect) -> float:
    """
    Calculate Intersection over Union (IoU) between two rects.

    Returns:
        IoU value between 0 and 1; 0 when the union area is zero.
    """
    inter_w = max(0.0, min(a.right, b.right) - max(a.left, b.left))
    inter_h = max(0.0, min(a.bottom, b.bottom) - max(a.top, b.top))
    intersection = inter_w * inter_h

    union = a.area + b.area - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def non_max_suppression(detections: List[Detection], iou_threshold: float = DEFAULT_IOU_THRESHOLD) -> List[Detection]:
    """
    Remove duplicate boxes for the same object.

    Candidates are visited by descending confidence (ties keep decode order)
    and accepted only if their IoU with every accepted box is at most
    `iou_threshold`.

    Returns:
        Accepted detections, in acceptance order.
    """
    ordered = sorted(detections, key=lambda d: d.confidence, reverse=True)

    kept: List[Detection] = []
    for candidate in ordered:
        if all(iou(candidate.box, k.box) <= iou_threshold for k in kept):
            kept.append(candidate)
    return kept
