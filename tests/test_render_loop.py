"""Unit tests for the render loop.

Tests cover:
- Buffer allocation and resizing
- Idle and playing modes
- Present callback and frame timing
"""

import numpy as np
import pytest


def _make_loop(**kwargs):
    from pathtrace.config import CameraSettings, RenderSettings
    from pathtrace.core.render_loop import RenderLoop

    kwargs.setdefault("render_settings", RenderSettings(samples_per_pixel=1, bounce_limit=2))
    kwargs.setdefault("camera_settings", CameraSettings(origin=(0.0, 0.0, 1.0), aperture=0.0))
    return RenderLoop(**kwargs)


class TestBuffer:
    """Tests for resize and the pixel buffer."""

    def test_starts_empty_and_idle(self):
        loop = _make_loop()

        assert (loop.width, loop.height) == (0, 0)
        assert not loop.playing
        assert not loop.render_requested
        assert loop.frame_count == 0

    def test_resize_allocates_row_major_buffer(self):
        loop = _make_loop()

        assert loop.resize(6, 4) is True
        assert loop.pixels.shape == (4, 6)
        assert loop.pixels.dtype == np.uint32
        assert (loop.width, loop.height) == (6, 4)

    def test_resize_to_same_size_keeps_buffer(self):
        loop = _make_loop()
        loop.resize(6, 4)
        before = loop.pixels

        assert loop.resize(6, 4) is False
        assert loop.pixels is before

    def test_resize_to_new_size_replaces_buffer(self):
        loop = _make_loop()
        loop.resize(6, 4)
        before = loop.pixels

        assert loop.resize(4, 6) is True
        assert loop.pixels is not before
        assert loop.pixels.shape == (6, 4)

    def test_negative_size_rejected(self):
        loop = _make_loop()

        with pytest.raises(ValueError, match="non-negative"):
            loop.resize(-1, 4)

    def test_get_rgba(self):
        loop = _make_loop()
        loop.resize(3, 2)
        loop.render()

        rgba = loop.get_rgba()
        assert rgba.shape == (2, 3, 4)
        assert (rgba[..., 3] == 255).all()


class TestModes:
    """Tests for idle/playing scheduling."""

    def test_idle_tick_does_nothing(self):
        loop = _make_loop()
        loop.resize(4, 4)

        assert loop.tick() is False
        assert loop.frame_count == 0

    def test_request_renders_once(self):
        loop = _make_loop()
        loop.resize(4, 4)
        loop.request_render()

        assert loop.tick() is True
        assert not loop.render_requested
        assert loop.tick() is False
        assert loop.frame_count == 1

    def test_playing_renders_every_tick(self):
        loop = _make_loop()
        loop.resize(4, 4)
        loop.play()

        for _ in range(3):
            assert loop.tick() is True
        assert loop.frame_count == 3

        loop.pause()
        assert loop.tick() is False

    def test_toggle_play(self):
        loop = _make_loop()

        assert loop.toggle_play() is True
        assert loop.playing
        assert loop.toggle_play() is False
        assert not loop.playing

    def test_zero_size_render_is_noop(self):
        presented = []
        loop = _make_loop(present=lambda pixels, w, h: presented.append((w, h)))
        loop.resize(0, 4)
        loop.request_render()

        assert loop.tick() is False
        assert loop.frame_count == 0
        assert presented == []
        # The request is consumed even though nothing was drawn
        assert not loop.render_requested


class TestRendering:
    """Tests for render(), timing and presentation."""

    def test_present_receives_frame(self):
        presented = []
        loop = _make_loop(present=lambda pixels, w, h: presented.append((pixels, w, h)))
        loop.resize(5, 3)

        assert loop.render() is True
        assert len(presented) == 1
        pixels, w, h = presented[0]
        assert pixels is loop.pixels
        assert (w, h) == (5, 3)

    def test_frame_is_written(self):
        loop = _make_loop()
        loop.resize(4, 4)
        loop.render()

        assert (loop.pixels != 0).all()

    def test_frame_timing_uses_clock(self):
        ticks = iter([10.0, 10.25])
        loop = _make_loop(clock=lambda: next(ticks))
        loop.resize(2, 2)
        loop.render()

        assert loop.last_frame_ms == pytest.approx(250.0)
        assert loop.fps == pytest.approx(4.0)

    def test_fps_zero_before_first_frame(self):
        assert _make_loop().fps == 0.0

    def test_settings_changes_apply_to_next_frame(self):
        from pathtrace.config import RenderSettings

        loop = _make_loop()
        loop.resize(4, 4)
        loop.render_settings = RenderSettings(samples_per_pixel=1, bounce_limit=0)
        loop.render()

        assert (loop.pixels == 0xFF000000).all()

    def test_camera_follows_buffer_aspect_ratio(self):
        from pathtrace.camera.thin_lens import get_camera_info

        loop = _make_loop()
        loop.resize(8, 2)
        loop.render()

        info = get_camera_info()
        width = np.linalg.norm(info["horizontal"])
        height = np.linalg.norm(info["vertical"])
        assert width / height == pytest.approx(4.0, rel=1e-5)

    def test_repr(self):
        loop = _make_loop()
        loop.resize(2, 3)
        assert repr(loop) == "RenderLoop(width=2, height=3, mode=idle, frames=0)"
