"""
Detector output decoding.
"""

from .decoder import (
    DEFAULT_CONF_THRESHOLD,
    DEFAULT_MIN_BOX_SIZE,
    UNKNOWN_LABEL,
    DecodeMode,
    decode,
    decode_packed,
    decode_planar,
    label_for,
    select_mode,
)

__all__ = [
    "DEFAULT_CONF_THRESHOLD",
    "DEFAULT_MIN_BOX_SIZE",
    "UNKNOWN_LABEL",
    "DecodeMode",
    "decode",
    "decode_packed",
    "decode_planar",
    "label_for",
    "select_mode",
]
