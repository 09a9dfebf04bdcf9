"""
Tests for report deduplication and crop/encode helpers.
"""

import numpy as np
import pytest

from dispatch.dedup import DedupGate, fingerprint
from dispatch.imaging import crop_detection, encode_jpeg
from models.detection import Detection, Rect


def det(left=100, top=100, right=150, bottom=150, label="12", confidence=0.9):
    return Detection(Rect(left, top, right, bottom), label=label, confidence=confidence)


class TestFingerprint:
    def test_sub_grid_jitter_ignored(self):
        assert fingerprint(det()) == fingerprint(det(left=101, top=102, right=151, bottom=149))

    def test_shift_past_grid_changes(self):
        assert fingerprint(det()) != fingerprint(det(left=105, right=155))

    def test_confidence_truncated_to_percent(self):
        assert fingerprint(det(confidence=0.905)) == fingerprint(det(confidence=0.909))

    def test_label_changes(self):
        assert fingerprint(det(label="12")) != fingerprint(det(label="13"))


class TestDedupGate:
    """Tests for the single-slot debouncer."""

    def test_repeat_suppressed(self):
        gate = DedupGate()
        assert gate.should_send(det()) is True
        assert gate.should_send(det()) is False

    def test_five_pixel_shift_accepted(self):
        gate = DedupGate()
        assert gate.should_send(det())
        assert gate.should_send(det(left=105, top=105, right=155, bottom=155))

    def test_single_slot_alternation(self):
        """Only the last fingerprint is remembered, so A, B, A all pass."""
        gate = DedupGate()
        a, b = det(label="1"), det(label="2")
        assert [gate.should_send(d) for d in (a, b, a)] == [True, True, True]

    def test_reset(self):
        gate = DedupGate()
        gate.should_send(det())
        gate.reset()
        assert gate.last_fingerprint is None
        assert gate.should_send(det())

    def test_grid_must_be_positive(self):
        with pytest.raises(ValueError):
            DedupGate(grid_px=0)


class TestCropDetection:
    """Tests for crop clamping."""

    def setup_method(self):
        self.frame = (np.arange(50 * 100 * 3) % 256).astype(np.uint8).reshape(50, 100, 3)

    def test_inside_frame(self):
        crop = crop_detection(self.frame, Rect(10, 5, 30, 25))
        assert crop.shape == (20, 20, 3)
        np.testing.assert_array_equal(crop, self.frame[5:25, 10:30])

    def test_clipped_at_frame_edge(self):
        crop = crop_detection(self.frame, Rect(90, 40, 200, 200))
        assert crop.shape == (10, 10, 3)

    def test_zero_size_rect_gives_one_pixel(self):
        crop = crop_detection(self.frame, Rect(10, 10, 10, 10))
        assert crop.shape == (1, 1, 3)

    def test_origin_clamped_inside(self):
        crop = crop_detection(self.frame, Rect(150, 80, 160, 90))
        assert crop.shape == (1, 1, 3)

    def test_crop_is_a_copy(self):
        crop = crop_detection(self.frame, Rect(0, 0, 10, 10))
        crop[...] = 0
        assert self.frame[0, 1, 0] != 0

    def test_empty_frame(self):
        assert crop_detection(np.zeros((0, 0, 3), dtype=np.uint8), Rect(0, 0, 10, 10)) is None


class TestEncodeJpeg:
    def test_jpeg_bytes(self):
        data = encode_jpeg(np.full((20, 20, 3), 128, dtype=np.uint8), quality=60)
        assert isinstance(data, bytes)
        assert data[:2] == b"\xff\xd8"
