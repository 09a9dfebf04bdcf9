"""
Post-processing of decoded detections: duplicate suppression and fragment merging.
"""

from .nms import DEFAULT_IOU_THRESHOLD, iou, non_max_suppression
from .merge import DEFAULT_GAP_RATIO, DEFAULT_LINE_RATIO, is_adjacent, merge_adjacent

__all__ = [
    "DEFAULT_IOU_THRESHOLD",
    "iou",
    "non_max_suppression",
    "DEFAULT_GAP_RATIO",
    "DEFAULT_LINE_RATIO",
    "is_adjacent",
    "merge_adjacent",
]
