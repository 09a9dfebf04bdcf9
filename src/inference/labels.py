"""
Label table loading.
"""

from __future__ import annotations

import logging
from typing import List

from decoding.decoder import UNKNOWN_LABEL


def load_labels(path: str) -> List[str]:
    """
    Read one label per line.

    Returns:
        The label list, or a single "unknown" label if the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            labels = [line.rstrip("\r\n") for line in f]
    except OSError as e:
        logging.warning(f"Failed to read labels from {path}: {e}")
        return [UNKNOWN_LABEL]

    # Drop the trailing empty line some editors leave behind
    while labels and not labels[-1].strip():
        labels.pop()
    if not labels:
        logging.warning(f"Label file {path} is empty")
        return [UNKNOWN_LABEL]
    return labels
