"""
Decoding of raw detector output tensors into source-frame detections.

Two output layouts are supported:

- PACKED: N rows of (cx, cy, w, h, class_id, confidence), e.g. shape [1, 300, 6].
- PLANAR: 4 geometry planes (x, y, w, h) followed by C class-score planes, each
  of length N anchors, e.g. shape [1, 4 + C, 8400]. The best-scoring class per
  anchor is taken as that anchor's class and confidence.

Geometry is fractional in [0, 1] relative to the square model canvas. Both
decoders apply the confidence floor, undo the letterbox, clamp to the frame and
drop boxes narrower or shorter than the noise floor. Rows or anchors holding
non-finite values yield no detection.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np

from geometry.letterbox import DEFAULT_CANVAS_SIZE, to_source_space
from models.detection import CoordinateSpace, Detection, Rect
from models.geometry import LetterboxTransform
from ops.errors import DecodeError, InputError

DEFAULT_CONF_THRESHOLD = 0.70
DEFAULT_MIN_BOX_SIZE = 6.0
UNKNOWN_LABEL = "unknown"

PACKED_ROW_SIZE = 6
PLANAR_GEOMETRY_PLANES = 4


class DecodeMode(str, Enum):
    """Raw output layout of the detector."""
    PACKED = "packed"
    PLANAR = "planar"


def select_mode(shape: Sequence[int]) -> DecodeMode:
    """
    Pick the decode layout from a model's declared output shape.

    Args:
        shape: Output tensor shape, with or without a leading batch dimension of 1.

    Raises:
        DecodeError: If the shape matches neither layout.
    """
    dims = [int(d) for d in shape]
    while len(dims) > 2 and dims[0] == 1:
        dims = dims[1:]

    if len(dims) != 2:
        raise DecodeError(f"Unsupported output shape: {tuple(shape)}")
    if dims[1] == PACKED_ROW_SIZE:
        return DecodeMode.PACKED
    if dims[0] > PLANAR_GEOMETRY_PLANES:
        return DecodeMode.PLANAR
    raise DecodeError(f"Unsupported output shape: {tuple(shape)}")


def label_for(labels: Sequence[str], class_id: int) -> str:
    """Look up a class label; out-of-range ids map to the unknown label."""
    if 0 <= class_id < len(labels):
        return labels[class_id]
    return UNKNOWN_LABEL


def _to_detections(
    centers: np.ndarray,
    class_ids: np.ndarray,
    scores: np.ndarray,
    transform: LetterboxTransform,
    frame_size: Tuple[int, int],
    labels: Sequence[str],
    min_box_size: float,
    canvas_size: int,
) -> List[Detection]:
    """Shared tail of both decoders: canvas pixels -> frame space -> noise floor."""
    frame_w, frame_h = frame_size
    out: List[Detection] = []
    for (cx, cy, w, h), class_id, score in zip(centers, class_ids, scores):
        w = max(float(w), 0.0)
        h = max(float(h), 0.0)
        canvas_rect = Rect.from_center(
            float(cx) * canvas_size,
            float(cy) * canvas_size,
            w * canvas_size,
            h * canvas_size,
        )
        box = to_source_space(canvas_rect, transform, frame_w, frame_h)
        if box.width < min_box_size or box.height < min_box_size:
            continue
        out.append(
            Detection(
                box=box,
                label=label_for(labels, int(class_id)),
                confidence=float(score),
                space=CoordinateSpace.SOURCE_FRAME,
            )
        )
    return out


def decode_packed(
    tensor: np.ndarray,
    transform: LetterboxTransform,
    frame_size: Tuple[int, int],
    labels: Sequence[str],
    conf_threshold: float = DEFAULT_CONF_THRESHOLD,
    min_box_size: float = DEFAULT_MIN_BOX_SIZE,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
) -> List[Detection]:
    """
    Decode a PACKED output tensor.

    Args:
        tensor: Array whose total size is a multiple of 6.
        transform: Letterbox transform used to build the model input.
        frame_size: Source frame (width, height).
        labels: Label table indexed by class id.
        conf_threshold: Minimum confidence (inclusive).
        min_box_size: Minimum box width and height in source pixels.
        canvas_size: Side of the square model canvas.

    Returns:
        Detections in source-frame space, in decode order.
    """
    data = np.asarray(tensor, dtype=np.float32)
    if data.size == 0:
        return []
    if data.size % PACKED_ROW_SIZE != 0:
        raise InputError(f"Packed output of size {data.size} is not a multiple of {PACKED_ROW_SIZE}")

    rows = data.reshape(-1, PACKED_ROW_SIZE)
    keep = np.isfinite(rows).all(axis=1) & (rows[:, 5] >= np.float32(conf_threshold))
    rows = rows[keep]
    if len(rows) == 0:
        return []

    # class id is stored as a float; truncate toward zero
    class_ids = rows[:, 4].astype(np.int64)
    return _to_detections(
        rows[:, :4], class_ids, rows[:, 5],
        transform, frame_size, labels, min_box_size, canvas_size,
    )


def decode_planar(
    tensor: np.ndarray,
    transform: LetterboxTransform,
    frame_size: Tuple[int, int],
    labels: Sequence[str],
    conf_threshold: float = DEFAULT_CONF_THRESHOLD,
    min_box_size: float = DEFAULT_MIN_BOX_SIZE,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
) -> List[Detection]:
    """
    Decode a PLANAR output tensor.

    The last axis of `tensor` is the anchor axis; all leading axes are
    flattened into planes (batch dimension of 1 included).
    """
    data = np.asarray(tensor, dtype=np.float32)
    if data.size == 0:
        return []
    if data.ndim < 2:
        raise InputError("Planar output needs an explicit anchor axis")

    planes = data.reshape(-1, data.shape[-1])
    if planes.shape[0] <= PLANAR_GEOMETRY_PLANES:
        raise InputError(f"Planar output has {planes.shape[0]} planes, need more than {PLANAR_GEOMETRY_PLANES}")

    class_scores = planes[PLANAR_GEOMETRY_PLANES:]
    best_idx = class_scores.argmax(axis=0)
    best_score = class_scores.max(axis=0)
    # An anchor with no positive score has no class
    no_class = best_score <= 0
    best_idx = np.where(no_class, -1, best_idx)
    best_score = np.where(no_class, np.float32(0.0), best_score)

    # Anchors with a NaN or infinite value in any plane are dropped
    keep = np.isfinite(planes).all(axis=0) & (best_score >= np.float32(conf_threshold))
    if not keep.any():
        return []

    centers = planes[:PLANAR_GEOMETRY_PLANES, keep].T
    return _to_detections(
        centers, best_idx[keep], best_score[keep],
        transform, frame_size, labels, min_box_size, canvas_size,
    )


def decode(
    mode: DecodeMode,
    tensor: np.ndarray,
    transform: LetterboxTransform,
    frame_size: Tuple[int, int],
    labels: Sequence[str],
    conf_threshold: float = DEFAULT_CONF_THRESHOLD,
    min_box_size: float = DEFAULT_MIN_BOX_SIZE,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
) -> List[Detection]:
    """Decode `tensor` with the layout named by `mode`."""
    if mode == DecodeMode.PACKED:
        detections = decode_packed(
            tensor, transform, frame_size, labels, conf_threshold, min_box_size, canvas_size
        )
    elif mode == DecodeMode.PLANAR:
        detections = decode_planar(
            tensor, transform, frame_size, labels, conf_threshold, min_box_size, canvas_size
        )
    else:
        raise DecodeError(f"Unknown decode mode: {mode}")

    logging.debug(f"Decoded {len(detections)} detections ({mode.value})")
    return detections
