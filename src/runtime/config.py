"""
Configuration loading and validation.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)

    Raises:
        OSError, yaml.YAMLError: If a present file cannot be read or parsed.
    """
    config_dir = os.path.dirname(config_path)
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")

    merged: Dict[str, Any] = {}
    if os.path.exists(base_path):
        merged = _read_yaml(base_path)
    if os.path.exists(local_overrides_path):
        merged = _deep_merge(merged, _read_yaml(local_overrides_path))

    # Finally apply explicit config_path if it's not one of the files above
    explicit = os.path.abspath(config_path)
    if os.path.exists(config_path) and explicit not in (
        os.path.abspath(base_path),
        os.path.abspath(local_overrides_path),
    ):
        merged = _deep_merge(merged, _read_yaml(config_path))

    if not merged:
        logging.warning(f"No configuration found near {config_path}, using defaults")
    return merged


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    camera = config.get("camera", {}) or {}
    if "device_id" in camera and not isinstance(camera["device_id"], (int, str)):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if "resolution" in camera:
        res = camera["resolution"]
        if not isinstance(res, list) or len(res) != 2 or not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution must be a list of two positive integers"
    if camera.get("rotate", 0) not in (0, 90, 180, 270, None):
        return False, "camera.rotate must be one of: 0, 90, 180, 270"
    if "buffer_size" in camera and (not isinstance(camera["buffer_size"], int) or camera["buffer_size"] < 1):
        return False, "camera.buffer_size must be a positive integer"

    model = config.get("model", {}) or {}
    if "input_size" in model and (not isinstance(model["input_size"], int) or model["input_size"] <= 0):
        return False, "model.input_size must be a positive integer"

    decode = config.get("decode", {}) or {}
    for key in ("conf_threshold", "iou_threshold"):
        if key in decode:
            value = decode[key]
            if not _is_number(value) or not (0 <= value <= 1):
                return False, f"decode.{key} must be between 0 and 1"
    if "min_box_size" in decode and (not _is_number(decode["min_box_size"]) or decode["min_box_size"] < 0):
        return False, "decode.min_box_size must be a non-negative number"

    merge = config.get("merge", {}) or {}
    for key in ("gap_ratio", "line_ratio"):
        if key in merge and (not _is_number(merge[key]) or merge[key] < 0):
            return False, f"merge.{key} must be a non-negative number"

    dispatch = config.get("dispatch", {}) or {}
    for key in ("cooldown_seconds", "min_interval_seconds"):
        if key in dispatch and (not _is_number(dispatch[key]) or dispatch[key] < 0):
            return False, f"dispatch.{key} must be a non-negative number"
    if "dedup_grid_px" in dispatch and (not isinstance(dispatch["dedup_grid_px"], int) or dispatch["dedup_grid_px"] <= 0):
        return False, "dispatch.dedup_grid_px must be a positive integer"

    transport = config.get("transport", {}) or {}
    if transport.get("enabled"):
        if not isinstance(transport.get("base_url"), str) or not transport.get("base_url"):
            return False, "transport.base_url is required when transport.enabled is true"
    if "jpeg_quality" in transport:
        quality = transport["jpeg_quality"]
        if not isinstance(quality, int) or not (1 <= quality <= 100):
            return False, "transport.jpeg_quality must be an integer between 1 and 100"

    if "event_log_size" in config and (not isinstance(config["event_log_size"], int) or config["event_log_size"] <= 0):
        return False, "event_log_size must be a positive integer"

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.get("log_level", "INFO") not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None
