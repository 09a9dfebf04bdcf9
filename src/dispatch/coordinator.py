"""
Single-slot dispatch of detection reports.

At most one report is in flight at a time. The pipeline thread calls
try_dispatch(); if the slot is idle the report is handed to a background worker
and the call returns immediately. After the send completes (successfully or
not) a fixed cool-down elapses before the slot accepts another report.
Reports offered while the slot is busy are dropped, never queued.

States:
    IDLE ----try_dispatch()----> SENDING
    SENDING --send done + cool-down--> IDLE
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional

import numpy as np

from models.detection import Rect
from models.report import DetectionReport
from ops.errors import InputError
from ops.event_log import EventLog
from .imaging import DEFAULT_JPEG_QUALITY, encode_jpeg
from .transport import Transport

DEFAULT_COOLDOWN_SECONDS = 1.5
DEFAULT_MIN_INTERVAL_SECONDS = 0.8


class DispatchState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class DispatchCoordinator:
    """
    Owns the dispatch slot and the background worker that performs uploads.

    Example:
        coordinator = DispatchCoordinator(transport, event_log)
        if coordinator.try_dispatch("12", 0.9, frame_box, crop):
            ...  # report accepted for upload
        coordinator.shutdown()
    """

    def __init__(
        self,
        transport: Transport,
        event_log: EventLog,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        min_interval_seconds: float = DEFAULT_MIN_INTERVAL_SECONDS,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        device_id: str = "unknown",
        clock: Optional[Callable[[], float]] = None,
        monotonic: Optional[Callable[[], float]] = None,
    ):
        self._transport = transport
        self._events = event_log
        self.cooldown_seconds = cooldown_seconds
        self.min_interval_seconds = min_interval_seconds
        self.jpeg_quality = jpeg_quality
        self.device_id = device_id
        # Wall clock stamps reports; the monotonic clock spaces sends
        self._clock = clock or time.time
        self._monotonic = monotonic or time.monotonic

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dispatch")
        self._lock = threading.Lock()
        self._state = DispatchState.IDLE
        self._idle = threading.Event()
        self._idle.set()
        self._last_send_at: Optional[float] = None
        self._last_send_mono: Optional[float] = None
        self._cooldown_timer: Optional[threading.Timer] = None

        self.sent_count = 0
        self.failed_count = 0

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def last_send_at(self) -> Optional[float]:
        return self._last_send_at

    def try_dispatch(self, label: str, confidence: float, box: Rect, crop: Optional[np.ndarray]) -> bool:
        """
        Hand a report to the worker if the slot is idle.

        Args:
            label: Detection label.
            confidence: Detection confidence.
            box: Bounding box in source-frame pixels.
            crop: Cropped detection image; None means the crop failed.

        Returns:
            True if the report was accepted for upload.
        """
        if crop is None:
            return False

        now = self._clock()
        mono = self._monotonic()
        with self._lock:
            if self._state is not DispatchState.IDLE:
                return False
            if self._last_send_mono is not None and mono - self._last_send_mono < self.min_interval_seconds:
                return False
            self._state = DispatchState.SENDING
            self._last_send_at = now
            self._last_send_mono = mono
            self._idle.clear()

        try:
            future = self._executor.submit(self._send, label, confidence, box, crop, now)
        except RuntimeError as e:
            # Executor already shut down
            logging.warning(f"Dispatch rejected: {e}")
            self._set_idle()
            return False

        future.add_done_callback(self._on_send_done)
        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the slot is idle. Returns False on timeout."""
        return self._idle.wait(timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting reports; optionally wait for the in-flight send."""
        self._executor.shutdown(wait=wait)
        timer = self._cooldown_timer
        if timer is not None:
            timer.cancel()
        self._set_idle()

    def _send(self, label: str, confidence: float, box: Rect, crop: np.ndarray, sent_at: float) -> None:
        """Worker: encode, upload and log the outcome. Never raises."""
        try:
            image = encode_jpeg(crop, self.jpeg_quality)
        except MemoryError:
            self.failed_count += 1
            self._events.error("Out of memory while encoding upload image")
            return
        except InputError as e:
            self.failed_count += 1
            self._events.error(f"Image encoding error: {e}")
            return
        except Exception as e:
            self.failed_count += 1
            self._events.error(f"Image encoding failed: {e}")
            return

        report = DetectionReport(
            label=label,
            confidence=confidence,
            box=box,
            image_jpeg=image,
            timestamp_ms=int(sent_at * 1000),
            device_id=self.device_id,
        )

        try:
            result = self._transport.send(report)
        except MemoryError:
            self.failed_count += 1
            self._events.error("Out of memory while sending upload")
            return
        except Exception as e:
            self.failed_count += 1
            self._events.error(f"Upload failed: {e}")
            return

        if result.ok:
            self.sent_count += 1
            self._events.info(f"Upload OK: '{label}' {int(confidence * 100)}%")
        else:
            self.failed_count += 1
            self._events.warning(f"Upload HTTP {result.status_code}: {result.message}")

    def _on_send_done(self, future: Future) -> None:
        """Completion callback: start the cool-down, then release the slot."""
        if not future.cancelled() and future.exception() is not None:
            logging.error(f"Dispatch worker error: {future.exception()}")

        if self.cooldown_seconds <= 0:
            self._set_idle()
            return
        timer = threading.Timer(self.cooldown_seconds, self._set_idle)
        timer.daemon = True
        self._cooldown_timer = timer
        timer.start()

    def _set_idle(self) -> None:
        with self._lock:
            self._state = DispatchState.IDLE
            self._cooldown_timer = None
            self._idle.set()
