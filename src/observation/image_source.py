"""
Still-image observation source.

Reads a list of image files (or every image in a directory) once, in order.
Useful for replaying captured frames through the pipeline.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional

import cv2

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp")


@dataclass
class ImageSourceConfig(ObservationConfig):
    """
    Attributes:
        paths: Image files, or a single directory to scan.
    """
    paths: List[str] = field(default_factory=list)


def expand_image_paths(paths: List[str]) -> List[str]:
    """Expand directories into their sorted image files."""
    out: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            out.extend(
                os.path.join(path, name)
                for name in sorted(os.listdir(path))
                if name.lower().endswith(IMAGE_EXTENSIONS)
            )
        else:
            out.append(path)
    return out


class ImageSource(ObservationSource):
    def __init__(self, config: ImageSourceConfig):
        super().__init__(config)
        self._paths: List[str] = []
        self._pos = 0

    def open(self) -> None:
        self._paths = expand_image_paths(self._config.paths)
        if not self._paths:
            raise RuntimeError("No images to read")
        self._pos = 0
        self._frame_index = 0
        self._is_open = True
        logging.info(f"ImageSource opened: {len(self._paths)} images")

    def read(self) -> Optional[FrameData]:
        while self._is_open and self._pos < len(self._paths):
            path = self._paths[self._pos]
            self._pos += 1
            frame = cv2.imread(path, cv2.IMREAD_COLOR)
            if frame is None:
                logging.warning(f"Could not read image: {path}")
                continue
            self._frame_index += 1
            return FrameData.from_numpy(
                frame,
                timestamp=time.time(),
                frame_index=self._frame_index,
                source=path,
            )
        return None

    @property
    def is_exhausted(self) -> bool:
        return self._pos >= len(self._paths)

    def close(self) -> None:
        self._is_open = False
