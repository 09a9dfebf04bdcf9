"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import threading

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.config import RelayConfig  # noqa: E402
from models.report import TransportResult  # noqa: E402
from runtime.context import create_context  # noqa: E402


class RecordingTransport:
    """Transport fake that records reports and returns a fixed result."""

    def __init__(self, result=None, error=None, block=None):
        self.result = result or TransportResult(ok=True, status_code=201, message="Created")
        self.error = error
        self.block = block
        self.reports = []
        self.sent = threading.Event()

    def send(self, report):
        if self.block is not None:
            self.block.wait(timeout=5)
        self.reports.append(report)
        self.sent.set()
        if self.error is not None:
            raise self.error
        return self.result

    def close(self):
        pass


class FakeRuntime:
    """Model runtime fake returning a preset output tensor."""

    def __init__(self, output, output_shape=None):
        self.output = np.asarray(output, dtype=np.float32)
        self._output_shape = tuple(output_shape or self.output.shape)
        self.calls = []

    @property
    def output_shape(self):
        return self._output_shape

    def run(self, input_tensor):
        self.calls.append(input_tensor.shape)
        return self.output


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30

decode:
  conf_threshold: 0.70
  min_box_size: 6
  iou_threshold: 0.45

dispatch:
  cooldown_seconds: 1.5
  min_interval_seconds: 0.8

transport:
  enabled: false

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
            "rotate": 0,
        },
        "model": {
            "path": "models/best.onnx",
            "labels_path": "models/labels.txt",
            "input_size": 640,
        },
        "decode": {
            "conf_threshold": 0.70,
            "min_box_size": 6,
            "iou_threshold": 0.45,
        },
        "merge": {
            "enabled": True,
            "gap_ratio": 0.3,
            "line_ratio": 0.6,
        },
        "dispatch": {
            "cooldown_seconds": 1.5,
            "min_interval_seconds": 0.8,
            "dedup_grid_px": 4,
        },
        "transport": {
            "enabled": True,
            "base_url": "https://db.example",
            "table": "detections",
            "jpeg_quality": 60,
        },
        "event_log_size": 100,
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def relay_config():
    """Config with no dispatch timing so tests do not wait on the cool-down."""
    cfg = RelayConfig()
    cfg.dispatch.cooldown_seconds = 0.0
    cfg.dispatch.min_interval_seconds = 0.0
    return cfg


@pytest.fixture
def context(relay_config, transport):
    ctx = create_context(relay_config, transport, labels=[str(i) for i in range(10)])
    yield ctx
    ctx.dispatcher.shutdown(wait=True)
