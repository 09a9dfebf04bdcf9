"""
Tests for the frame processor and the pipeline engine.
"""

import time
from typing import Optional
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from conftest import FakeRuntime
from models.frame import FrameData
from observation import ImageSource, ImageSourceConfig
from observation.base import ObservationConfig, ObservationSource
from ops.errors import DecodeError
from pipeline.engine import PipelineConfig, PipelineEngine
from pipeline.processor import FrameProcessor, FrameResult

# Two fragments "1" and "2" side by side on a 640x640 canvas
DIGITS = [
    [0.30, 0.5, 0.05, 0.1, 1, 0.9],
    [0.355, 0.5, 0.05, 0.1, 2, 0.8],
]


class MockObservationSource(ObservationSource):
    """Mock source for testing."""

    def __init__(self, config: ObservationConfig, frames: list = None, max_frames: int = 10):
        super().__init__(config)
        self._frames = frames
        self._max_frames = max_frames
        self._pos = 0

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self) -> Optional[FrameData]:
        if not self._is_open:
            return None

        if self._frames is not None:
            if self._pos >= len(self._frames):
                return None
            frame = self._frames[self._pos]
        else:
            if self._pos >= self._max_frames:
                return None
            frame = np.zeros((640, 640, 3), dtype=np.uint8)

        self._pos += 1
        self._frame_index += 1

        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        self._is_open = False


class StepClock:
    """Clock advancing by a fixed step per call."""

    def __init__(self, step=0.1):
        self.now = 0.0
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


def make_frame(width=640, height=640, index=1):
    return FrameData.from_numpy(np.zeros((height, width, 3), dtype=np.uint8), timestamp=time.time(), frame_index=index)


def runtime_with(rows):
    return FakeRuntime(np.array([rows], dtype=np.float32).reshape(1, -1, 6), output_shape=(1, 300, 6))


class TestFrameProcessor:
    """End-to-end per-frame processing with fake runtime and transport."""

    def test_merged_detection_is_rendered_and_dispatched(self, context, transport):
        context.set_display_size(640, 640)
        processor = FrameProcessor(context, runtime_with(DIGITS), clock=StepClock(0.1))

        result = processor.process(make_frame())
        assert context.dispatcher.wait_idle(timeout=5)

        assert [d.label for d in result.display_detections] == ["12"]
        assert result.display_detections[0].confidence == pytest.approx(0.9)
        np.testing.assert_allclose(
            result.display_detections[0].box.as_tuple(), (176, 288, 243.2, 352), atol=1e-3
        )
        assert result.dispatched == 1
        assert [r.label for r in transport.reports] == ["12"]

        detections, status = context.get_render_copy()
        assert [d.label for d in detections] == ["12"]
        assert status == "Sending..."

    def test_unchanged_detection_not_resent(self, context, transport):
        context.set_display_size(640, 640)
        processor = FrameProcessor(context, runtime_with(DIGITS))

        processor.process(make_frame(index=1))
        assert context.dispatcher.wait_idle(timeout=5)
        second = processor.process(make_frame(index=2))
        assert context.dispatcher.wait_idle(timeout=5)

        assert second.dispatched == 0
        assert len(transport.reports) == 1

    def test_merge_can_be_disabled(self, context):
        context.set_display_size(640, 640)
        context.config.merge.enabled = False
        processor = FrameProcessor(context, runtime_with(DIGITS))

        result = processor.process(make_frame())
        assert [d.label for d in result.display_detections] == ["1", "2"]

    def test_no_detections(self, context, transport):
        processor = FrameProcessor(context, runtime_with([[0.5, 0.5, 0.1, 0.1, 1, 0.2]]), clock=StepClock(0.1))

        processor.process(make_frame(index=1))
        result = processor.process(make_frame(index=2))

        assert result.display_detections == []
        assert result.fps == pytest.approx(10.0)
        assert context.status == "No detections"
        assert transport.reports == []
        assert context.event_log.snapshot()[-1].endswith("Detections: 0, FPS=10.0")

    def test_objects_status(self, context):
        context.set_display_size(640, 640)
        context.dispatcher.shutdown()
        processor = FrameProcessor(context, runtime_with(DIGITS))

        processor.process(make_frame())
        assert context.status == "Objects: 1"

    def test_detections_mapped_to_display(self, context):
        """Boxes from a 1280x720 frame map into a 640x360 display at half scale."""
        context.set_display_size(640, 360)
        processor = FrameProcessor(context, runtime_with([[0.5, 0.5, 0.1, 0.1, 3, 0.9]]))

        result = processor.process(make_frame(1280, 720))

        np.testing.assert_allclose(result.frame_detections[0].box.as_tuple(), (576, 296, 704, 424), atol=1e-3)
        np.testing.assert_allclose(result.display_detections[0].box.as_tuple(), (288, 148, 352, 212), atol=1e-3)

    def test_empty_frame_skipped(self, context):
        processor = FrameProcessor(context, runtime_with(DIGITS))
        empty = FrameData(frame=np.zeros((0, 0, 3), dtype=np.uint8), width=0, height=0, timestamp=0.0)

        result = processor.process(empty)

        assert result == FrameResult()
        assert processor.runtime.calls == []
        assert "Skipping frame" in context.event_log.snapshot()[-1]

    def test_model_input_tensor(self, context):
        processor = FrameProcessor(context, runtime_with(DIGITS))
        processor.process(make_frame(1280, 720))
        assert processor.runtime.calls == [(1, 640, 640, 3)]

    def test_unsupported_output_shape(self, context):
        with pytest.raises(DecodeError):
            FrameProcessor(context, FakeRuntime(np.zeros((1, 3, 5)), output_shape=(1, 3, 5)))


class TestPipelineEngine:
    """Tests for the processing loop."""

    def test_continues_after_frame_error(self, context):
        processor = MagicMock()
        processor.process.side_effect = [RuntimeError("boom"), FrameResult(), FrameResult()]
        source = MockObservationSource(ObservationConfig(source_id="test"), max_frames=3)
        engine = PipelineEngine(
            source, context, processor,
            PipelineConfig(max_consecutive_failures=1, retry_delay=0),
        )

        engine.run()

        assert processor.process.call_count == 3
        assert engine.stats.frame_count == 3
        assert engine.stats.error_count == 1
        assert any("Error: boom" in line for line in context.event_log.snapshot())
        assert not source.is_open

    def test_error_sets_status(self, context):
        processor = MagicMock()
        processor.process.side_effect = DecodeError("bad output")
        engine = PipelineEngine(
            MockObservationSource(ObservationConfig(), max_frames=1), context, processor, PipelineConfig()
        )

        assert engine.process_one(make_frame()) is None
        assert context.status == "Detection error"

    def test_max_frames(self, context):
        processor = MagicMock()
        processor.process.return_value = FrameResult()
        engine = PipelineEngine(
            MockObservationSource(ObservationConfig(), max_frames=100),
            context,
            processor,
            PipelineConfig(max_frames=5),
        )

        engine.run()
        assert engine.stats.frame_count == 5

    def test_callbacks_receive_results(self, context):
        context.set_display_size(640, 640)
        processor = FrameProcessor(context, runtime_with(DIGITS))
        engine = PipelineEngine(
            MockObservationSource(ObservationConfig(), max_frames=3),
            context,
            processor,
            PipelineConfig(max_consecutive_failures=1, retry_delay=0),
        )
        seen = []
        engine.add_callback(lambda frame_data, result: seen.append(result))

        engine.run()

        assert len(seen) == 3
        assert all(r.display_detections[0].label == "12" for r in seen)
        assert engine.stats.dispatched_count == 1
        assert context.frame_count == 3

    def test_exhausted_image_source_stops_without_retries(self, context, tmp_path):
        cv2.imwrite(str(tmp_path / "a.png"), np.zeros((64, 64, 3), dtype=np.uint8))
        cv2.imwrite(str(tmp_path / "b.png"), np.zeros((64, 64, 3), dtype=np.uint8))
        processor = MagicMock()
        processor.process.return_value = FrameResult()
        engine = PipelineEngine(
            ImageSource(ImageSourceConfig(paths=[str(tmp_path)])),
            context,
            processor,
            PipelineConfig(retry_delay=60),
        )

        with patch("pipeline.engine.time.sleep") as sleep:
            engine.run()

        sleep.assert_not_called()
        assert engine.stats.frame_count == 2
        assert engine.stats.consecutive_failures == 0

    def test_source_read_error_logged(self, context):
        source = MockObservationSource(ObservationConfig(source_id="test"))
        source.read = MagicMock(side_effect=OSError("device lost"))
        engine = PipelineEngine(source, context, MagicMock(), PipelineConfig())

        engine.run()

        assert any("Pipeline error: device lost" in line for line in context.event_log.snapshot())
        assert not source.is_open
