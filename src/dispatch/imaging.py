"""
Crop and encode detection images for upload.
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from models.detection import Rect
from ops.errors import InputError

DEFAULT_JPEG_QUALITY = 60


def crop_detection(frame: np.ndarray, rect: Rect) -> Optional[np.ndarray]:
    """
    Cut a source-frame rect out of a frame.

    The crop origin is clamped inside the frame and the crop is at least 1x1
    pixel and never extends past the frame edge.

    Returns:
        A copy of the cropped region, or None if the frame is empty.
    """
    if frame is None or frame.ndim < 2:
        return None
    frame_h, frame_w = frame.shape[:2]
    if frame_w == 0 or frame_h == 0:
        return None

    x = min(max(int(rect.left), 0), frame_w - 1)
    y = min(max(int(rect.top), 0), frame_h - 1)
    w = min(max(int(rect.width), 1), frame_w - x)
    h = min(max(int(rect.height), 1), frame_h - y)
    return frame[y:y + h, x:x + w].copy()


def encode_jpeg(image: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode an image as JPEG.

    Raises:
        InputError: If OpenCV cannot encode the image.
        MemoryError: Propagated from the encoder.
    """
    ok, buf = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise InputError(f"JPEG encoding failed for image of shape {image.shape}")
    return buf.tobytes()
