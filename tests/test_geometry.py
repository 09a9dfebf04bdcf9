"""
Tests for letterbox and display coordinate mapping.
"""

import numpy as np
import pytest

from geometry.display import display_to_frame, frame_to_display
from geometry.letterbox import compute_transform, letterbox, prepare_input, to_model_space, to_source_space
from models.detection import Rect
from ops.errors import InputError


def _assert_rect_close(a: Rect, b: Rect, tol: float = 1e-6):
    np.testing.assert_allclose(a.as_tuple(), b.as_tuple(), atol=tol)


class TestComputeTransform:
    """Tests for letterbox scale/padding."""

    def test_landscape_frame(self):
        t = compute_transform(1280, 720, 640)
        assert t.scale == pytest.approx(0.5)
        assert t.pad_x == pytest.approx(0.0)
        assert t.pad_y == pytest.approx(140.0)

    def test_portrait_frame(self):
        t = compute_transform(720, 1280, 640)
        assert t.scale == pytest.approx(0.5)
        assert t.pad_x == pytest.approx(140.0)
        assert t.pad_y == pytest.approx(0.0)

    def test_square_frame_has_no_padding(self):
        t = compute_transform(640, 640, 640)
        assert t.scale == 1.0
        assert (t.pad_x, t.pad_y) == (0.0, 0.0)

    def test_odd_padding_is_whole_pixels(self):
        # 1280x722 -> 640x361 image, 279 rows of padding
        t = compute_transform(1280, 722, 640)
        assert t.pad_y == 139.0

    @pytest.mark.parametrize("w,h", [(0, 480), (640, 0), (-1, 10)])
    def test_zero_sized_frame_rejected(self, w, h):
        with pytest.raises(InputError):
            compute_transform(w, h)


class TestLetterbox:
    """Tests for the canvas builder."""

    def test_canvas_shape_and_fill(self):
        frame = np.full((720, 1280, 3), 255, dtype=np.uint8)
        canvas, transform = letterbox(frame, 640)

        assert canvas.shape == (640, 640, 3)
        # Padding rows are black, image rows are not
        assert canvas[0, 320].tolist() == [0, 0, 0]
        assert canvas[639, 320].tolist() == [0, 0, 0]
        assert canvas[320, 320].tolist() == [255, 255, 255]
        assert transform.pad_y == pytest.approx(140.0)

    def test_placement_matches_transform(self):
        frame = np.full((722, 1280, 3), 255, dtype=np.uint8)
        canvas, transform = letterbox(frame, 640)

        first_row = to_model_space(Rect(0, 0, 1280, 722), transform).top
        assert first_row == 139.0
        assert canvas[int(first_row), 320].tolist() == [255, 255, 255]
        assert canvas[int(first_row) - 1, 320].tolist() == [0, 0, 0]

    def test_empty_frame_rejected(self):
        with pytest.raises(InputError):
            letterbox(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_prepare_input(self):
        canvas = np.zeros((640, 640, 3), dtype=np.uint8)
        canvas[..., 0] = 255  # blue in BGR
        tensor = prepare_input(canvas)

        assert tensor.shape == (1, 640, 640, 3)
        assert tensor.dtype == np.float32
        # RGB order: blue ends up in the last channel
        assert tensor[0, 0, 0].tolist() == [0.0, 0.0, 1.0]


class TestLetterboxRoundTrip:
    """Model space -> source space inverts source space -> model space."""

    @pytest.mark.parametrize("size", [(1280, 720), (720, 1280), (640, 640), (1920, 1080)])
    def test_round_trip(self, size):
        w, h = size
        t = compute_transform(w, h, 640)
        rect = Rect(w * 0.1, h * 0.2, w * 0.6, h * 0.9)

        back = to_source_space(to_model_space(rect, t), t, w, h)
        _assert_rect_close(back, rect, tol=1e-4)

    def test_result_clamped_to_frame(self):
        t = compute_transform(1280, 720, 640)
        # Box that reaches into the top padding band
        back = to_source_space(Rect(0, 100, 64, 200), t, 1280, 720)
        assert back.top == 0.0
        assert back.bottom == pytest.approx(120.0)


class TestDisplayMapping:
    """Tests for frame <-> display fit-centered mapping."""

    def test_centered_fit_portrait_display(self):
        r = frame_to_display(Rect(0, 0, 1280, 720), 1280, 720, 1080, 1920)
        assert r.left == pytest.approx(0.0)
        assert r.right == pytest.approx(1080.0)
        assert r.top == pytest.approx((1920 - 607.5) / 2)
        assert r.height == pytest.approx(607.5)

    @pytest.mark.parametrize("display", [(1080, 1920), (1920, 1080), (640, 640), (1, 1)])
    def test_round_trip(self, display):
        dw, dh = display
        rect = Rect(100, 50, 300, 200)
        back = display_to_frame(frame_to_display(rect, 1280, 720, dw, dh), 1280, 720, dw, dh)
        _assert_rect_close(back, rect, tol=1e-4)

    def test_zero_display_treated_as_one_pixel(self):
        r = frame_to_display(Rect(0, 0, 1280, 720), 1280, 720, 0, 0)
        assert r.width == pytest.approx(1.0)

    def test_display_to_frame_clamps(self):
        # A box drawn in the letterbox band above the image maps to the frame edge
        r = display_to_frame(Rect(0, 0, 100, 100), 1280, 720, 1080, 1920)
        assert r.top == 0.0
        assert r.bottom == 0.0
