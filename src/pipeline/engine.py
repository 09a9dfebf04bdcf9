"""
Pipeline engine for the detection relay.

This module owns the main processing loop: it reads frames from an
ObservationSource, runs each through the FrameProcessor and keeps going
regardless of per-frame errors.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from models.frame import FrameData
from observation.base import ObservationSource
from runtime.context import PipelineContext
from .processor import FrameProcessor, FrameResult


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        max_consecutive_failures: Max frame read failures before stopping.
        retry_delay: Seconds to wait after a failed frame read.
        stats_log_interval: Seconds between status log messages.
        max_frames: Stop after this many processed frames (None = run until stopped).
    """
    max_consecutive_failures: int = 10
    retry_delay: float = 0.5
    stats_log_interval: float = 60.0
    max_frames: Optional[int] = None


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    error_count: int = 0
    dispatched_count: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0


class PipelineEngine:
    """
    Main processing loop.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0))
        engine = PipelineEngine(source, ctx, FrameProcessor(ctx, runtime), PipelineConfig())
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        ctx: PipelineContext,
        processor: FrameProcessor,
        config: PipelineConfig,
    ):
        self.source = source
        self.ctx = ctx
        self.processor = processor
        self.config = config
        self.stats = PipelineStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, FrameResult], None]] = []

    def add_callback(self, callback: Callable[[FrameData, FrameResult], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, result) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the main processing loop.

        Opens the observation source, processes frames until stopped or
        exhausted, then closes resources.
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    if self.source.is_exhausted:
                        logging.info(f"Source exhausted after {self.stats.frame_count} frames")
                        break
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(self.config.retry_delay)
                    continue

                self.stats.consecutive_failures = 0
                self.process_one(frame_data)

                self._handle_periodic_tasks()

                if self.config.max_frames is not None and self.stats.frame_count >= self.config.max_frames:
                    logging.info(f"Reached max_frames={self.config.max_frames}, stopping")
                    break

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception as e:
            logging.exception(f"Pipeline error: {e}")
            self.ctx.event_log.error(f"Pipeline error: {e}")
        finally:
            self._cleanup()

    def process_one(self, frame_data: FrameData) -> Optional[FrameResult]:
        """
        Process one frame; errors are logged and never escape.

        Returns:
            The FrameResult, or None if processing failed.
        """
        self.stats.frame_count += 1
        try:
            result = self.processor.process(frame_data)
        except Exception as e:
            self.stats.error_count += 1
            logging.exception(f"Frame {frame_data.frame_index} failed")
            self.ctx.event_log.error(f"Error: {e}")
            self.ctx.set_status("Detection error")
            return None

        self.stats.dispatched_count += result.dispatched
        for callback in self._callbacks:
            try:
                callback(frame_data, result)
            except Exception as e:
                logging.warning(f"Callback error: {e}")
        return result

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"errors={self.stats.error_count}, "
                f"dispatched={self.stats.dispatched_count}, "
                f"fps={self.ctx.fps:.1f}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        """Clean up resources."""
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self.ctx.dispatcher.shutdown(wait=True)
        logging.info("Pipeline stopped")
