"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 30
    rotate: int = 0
    buffer_size: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 30),
            rotate=d.get("rotate", 0) or 0,
            buffer_size=d.get("buffer_size", 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "rotate": self.rotate,
            "buffer_size": self.buffer_size,
        }


@dataclass
class ModelConfig:
    """Model runtime configuration."""
    path: str = "models/best.onnx"
    labels_path: str = "models/labels.txt"
    input_size: int = 640
    providers: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        return cls(
            path=d.get("path", "models/best.onnx"),
            labels_path=d.get("labels_path", "models/labels.txt"),
            input_size=d.get("input_size", 640),
            providers=d.get("providers"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "path": self.path,
            "labels_path": self.labels_path,
            "input_size": self.input_size,
        }
        if self.providers is not None:
            d["providers"] = self.providers
        return d


@dataclass
class DecodeConfig:
    """Decoder and suppression thresholds."""
    conf_threshold: float = 0.70
    min_box_size: float = 6.0
    iou_threshold: float = 0.45

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DecodeConfig":
        return cls(
            conf_threshold=d.get("conf_threshold", 0.70),
            min_box_size=d.get("min_box_size", 6.0),
            iou_threshold=d.get("iou_threshold", 0.45),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conf_threshold": self.conf_threshold,
            "min_box_size": self.min_box_size,
            "iou_threshold": self.iou_threshold,
        }


@dataclass
class MergeConfig:
    """Adjacency merge tolerances, as fractions of the running composite's size."""
    enabled: bool = True
    gap_ratio: float = 0.3
    line_ratio: float = 0.6

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MergeConfig":
        return cls(
            enabled=d.get("enabled", True),
            gap_ratio=d.get("gap_ratio", 0.3),
            line_ratio=d.get("line_ratio", 0.6),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "gap_ratio": self.gap_ratio,
            "line_ratio": self.line_ratio,
        }


@dataclass
class TransportConfig:
    """REST transport configuration."""
    enabled: bool = False
    base_url: str = ""
    table: str = "detections"
    api_key: Optional[str] = None
    timeout_seconds: float = 10.0
    jpeg_quality: int = 60
    device_id: str = "unknown"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransportConfig":
        return cls(
            enabled=d.get("enabled", False),
            base_url=d.get("base_url", ""),
            table=d.get("table", "detections"),
            api_key=d.get("api_key"),
            timeout_seconds=d.get("timeout_seconds", 10.0),
            jpeg_quality=d.get("jpeg_quality", 60),
            device_id=d.get("device_id", "unknown"),
        )

    def to_dict(self) -> Dict[str, Any]:
        # api_key is never written back
        return {
            "enabled": self.enabled,
            "base_url": self.base_url,
            "table": self.table,
            "timeout_seconds": self.timeout_seconds,
            "jpeg_quality": self.jpeg_quality,
            "device_id": self.device_id,
        }


@dataclass
class DispatchConfig:
    """Dispatch slot timing."""
    cooldown_seconds: float = 1.5
    min_interval_seconds: float = 0.8
    dedup_grid_px: int = 4

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DispatchConfig":
        return cls(
            cooldown_seconds=d.get("cooldown_seconds", 1.5),
            min_interval_seconds=d.get("min_interval_seconds", 0.8),
            dedup_grid_px=d.get("dedup_grid_px", 4),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cooldown_seconds": self.cooldown_seconds,
            "min_interval_seconds": self.min_interval_seconds,
            "dedup_grid_px": self.dedup_grid_px,
        }


@dataclass
class WebConfig:
    """Operator HTTP surface."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class RelayConfig:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    decode: DecodeConfig = field(default_factory=DecodeConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/detection_relay.log"
    log_level: str = "INFO"
    event_log_size: int = 100

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RelayConfig":
        """Adapter: Create RelayConfig from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            decode=DecodeConfig.from_dict(d.get("decode", {}) or {}),
            merge=MergeConfig.from_dict(d.get("merge", {}) or {}),
            dispatch=DispatchConfig.from_dict(d.get("dispatch", {}) or {}),
            transport=TransportConfig.from_dict(d.get("transport", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/detection_relay.log"),
            log_level=d.get("log_level", "INFO"),
            event_log_size=d.get("event_log_size", 100),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "model": self.model.to_dict(),
            "decode": self.decode.to_dict(),
            "merge": self.merge.to_dict(),
            "dispatch": self.dispatch.to_dict(),
            "transport": self.transport.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
            "event_log_size": self.event_log_size,
        }
