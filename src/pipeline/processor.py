"""
Per-frame detection processing.

For one frame:
    letterbox -> model runtime -> decode -> NMS -> frame->display -> merge
    -> [render state]
    -> display->frame -> crop -> dedup -> dispatch
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from decoding.decoder import DecodeMode, decode, select_mode
from dispatch.imaging import crop_detection
from geometry.display import display_to_frame, frame_to_display
from geometry.letterbox import letterbox, prepare_input
from inference.backend import ModelRuntime
from models.detection import CoordinateSpace, Detection
from models.frame import FrameData
from ops.errors import InputError
from postprocess.merge import merge_adjacent
from postprocess.nms import non_max_suppression
from runtime.context import PipelineContext


@dataclass
class FrameResult:
    """Outputs of one processed frame."""
    display_detections: List[Detection] = field(default_factory=list)
    frame_detections: List[Detection] = field(default_factory=list)
    dispatched: int = 0
    fps: float = 0.0


class FrameProcessor:
    """
    Runs the detection core for one frame at a time.

    Not reentrant: call from a single pipeline thread.

    Example:
        processor = FrameProcessor(ctx, runtime)
        result = processor.process(frame_data)
    """

    def __init__(
        self,
        ctx: PipelineContext,
        runtime: ModelRuntime,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.ctx = ctx
        self.runtime = runtime
        self.mode: DecodeMode = select_mode(runtime.output_shape)
        self._clock = clock or time.time
        self._last_frame_time: Optional[float] = None
        self._fps = 0.0
        logging.info(f"FrameProcessor using {self.mode.value} decode for output {tuple(runtime.output_shape)}")

    def process(self, frame_data: FrameData) -> FrameResult:
        """
        Detect, post-process, publish for rendering and offer for upload.

        Malformed input yields an empty result; other errors propagate to the
        caller's per-frame error handling.
        """
        try:
            detections = self.detect(frame_data)
        except InputError as e:
            self.ctx.event_log.warning(f"Skipping frame {frame_data.frame_index}: {e}")
            return FrameResult()

        cfg = self.ctx.config
        display_w, display_h = self.ctx.get_display_size()
        display_detections = [
            d.with_box(
                frame_to_display(d.box, frame_data.width, frame_data.height, display_w, display_h),
                CoordinateSpace.DISPLAY,
            )
            for d in detections
        ]
        if cfg.merge.enabled:
            display_detections = merge_adjacent(
                display_detections, cfg.merge.gap_ratio, cfg.merge.line_ratio
            )

        fps = self._update_fps()
        status = f"Objects: {len(display_detections)}" if display_detections else "No detections"
        self.ctx.update_render(display_detections, status)
        self.ctx.update_frame_stats(fps, frame_data.timestamp)
        self.ctx.event_log.info(f"Detections: {len(display_detections)}, FPS={fps:.1f}")

        frame_detections = [
            d.with_box(
                display_to_frame(d.box, frame_data.width, frame_data.height, display_w, display_h),
                CoordinateSpace.SOURCE_FRAME,
            )
            for d in display_detections
        ]
        dispatched = self._dispatch(frame_data, frame_detections)

        return FrameResult(
            display_detections=display_detections,
            frame_detections=frame_detections,
            dispatched=dispatched,
            fps=fps,
        )

    def detect(self, frame_data: FrameData) -> List[Detection]:
        """Run the model and return NMS-filtered detections in source-frame space."""
        if frame_data.is_empty:
            raise InputError(f"Empty frame ({frame_data.width}x{frame_data.height})")

        cfg = self.ctx.config
        canvas, transform = letterbox(frame_data.frame, cfg.model.input_size)
        output = self.runtime.run(prepare_input(canvas))

        detections = decode(
            self.mode,
            output,
            transform,
            (frame_data.width, frame_data.height),
            self.ctx.labels,
            conf_threshold=cfg.decode.conf_threshold,
            min_box_size=cfg.decode.min_box_size,
            canvas_size=cfg.model.input_size,
        )
        return non_max_suppression(detections, cfg.decode.iou_threshold)

    def _dispatch(self, frame_data: FrameData, detections: List[Detection]) -> int:
        """Offer each detection for upload: crop, then dedup, then the dispatch slot."""
        dispatched = 0
        for det in detections:
            crop = crop_detection(frame_data.frame, det.box)
            if crop is None:
                continue
            if not self.ctx.dedup.should_send(det):
                continue
            if self.ctx.dispatcher.try_dispatch(det.label, det.confidence, det.box, crop):
                dispatched += 1
                self.ctx.set_status("Sending...")
                logging.debug(f"Dispatched '{det.label}' {det.confidence:.2f} at {det.box.as_int_tuple()}")
        return dispatched

    def _update_fps(self) -> float:
        now = self._clock()
        if self._last_frame_time is not None:
            dt = now - self._last_frame_time
            if dt > 0:
                self._fps = 1.0 / dt
        self._last_frame_time = now
        return self._fps
