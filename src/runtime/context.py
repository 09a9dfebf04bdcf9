from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from dispatch.coordinator import DispatchCoordinator
from dispatch.dedup import DedupGate
from models.config import RelayConfig
from models.detection import Detection
from ops.event_log import EventLog


@dataclass
class PipelineContext:
    """Holds per-process pipeline state and service references; avoids global singletons."""

    config: RelayConfig
    event_log: EventLog
    dedup: DedupGate
    dispatcher: DispatchCoordinator
    labels: List[str] = field(default_factory=lambda: ["unknown"])

    # Display surface size; 1x1 until the display reports
    display_size: Tuple[int, int] = (1, 1)

    # Render path output and operator-facing stats
    status: str = "No detections"
    latest_detections: List[Detection] = field(default_factory=list)
    fps: float = 0.0
    frame_count: int = 0
    last_frame_ts: Optional[float] = None
    start_time: float = field(default_factory=time.time)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set_display_size(self, width: int, height: int) -> None:
        with self._lock:
            self.display_size = (max(int(width), 1), max(int(height), 1))

    def get_display_size(self) -> Tuple[int, int]:
        with self._lock:
            return self.display_size

    def update_render(self, detections: List[Detection], status: str) -> None:
        with self._lock:
            self.latest_detections = list(detections)
            self.status = status

    def set_status(self, status: str) -> None:
        with self._lock:
            self.status = status

    def get_render_copy(self) -> Tuple[List[Detection], str]:
        with self._lock:
            return list(self.latest_detections), self.status

    def update_frame_stats(self, fps: float, timestamp: float) -> None:
        with self._lock:
            self.fps = fps
            self.frame_count += 1
            self.last_frame_ts = timestamp

    def get_system_stats_copy(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "fps": self.fps,
                "frame_count": self.frame_count,
                "last_frame_ts": self.last_frame_ts,
                "uptime_seconds": int(time.time() - self.start_time),
                "detection_count": len(self.latest_detections),
                "status": self.status,
                "display_size": self.display_size,
                "dispatch_state": self.dispatcher.state.value,
                "uploads_sent": self.dispatcher.sent_count,
                "uploads_failed": self.dispatcher.failed_count,
            }


def create_context(config: RelayConfig, transport: Any, labels: Optional[List[str]] = None) -> PipelineContext:
    """Build a PipelineContext and its owned state from config."""
    event_log = EventLog(max_entries=config.event_log_size)
    dispatcher = DispatchCoordinator(
        transport,
        event_log,
        cooldown_seconds=config.dispatch.cooldown_seconds,
        min_interval_seconds=config.dispatch.min_interval_seconds,
        jpeg_quality=config.transport.jpeg_quality,
        device_id=config.transport.device_id,
    )
    return PipelineContext(
        config=config,
        event_log=event_log,
        dedup=DedupGate(grid_px=config.dispatch.dedup_grid_px),
        dispatcher=dispatcher,
        labels=labels or ["unknown"],
    )
