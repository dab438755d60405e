"""Unit tests for the path tracing integrator.

Tests cover:
- Sky gradient for escaped rays
- Bounce limit and absorption
- Deterministic mirror paths
- Frame rendering into packed buffers
"""

import numpy as np
import pytest


class TestRayColor:
    """Tests for ray_color through trace_ray_color."""

    def test_zero_bounces_is_black(self):
        from pathtrace.core.integrator import trace_ray_color

        assert trace_ray_color((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0) == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize(
        "direction,expected",
        [
            ((0.0, 1.0, 0.0), (0.5, 0.7, 1.0)),
            ((0.0, -3.0, 0.0), (1.0, 1.0, 1.0)),
            ((2.0, 0.0, 0.0), (0.75, 0.85, 1.0)),
        ],
    )
    def test_miss_returns_sky_gradient(self, direction, expected):
        from pathtrace.core.integrator import trace_ray_color

        color = trace_ray_color((0.0, 0.0, 0.0), direction, 1)
        np.testing.assert_allclose(color, expected, atol=1e-5)

    def test_hit_with_one_bounce_is_black(self):
        """The only bounce is spent on the hit; nothing reaches the sky."""
        from pathtrace.core.integrator import trace_ray_color
        from pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -2.0), 0.5, albedo=(1.0, 1.0, 1.0))

        color = trace_ray_color((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 1)
        assert color == (0.0, 0.0, 0.0)

    def test_mirror_reflects_sky_scaled_by_albedo(self):
        """A head-on mirror bounce sends the ray back along +z into the sky."""
        from pathtrace.core.integrator import trace_ray_color
        from pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, 0.0), 1.0, albedo=(0.5, 0.5, 0.5), fuzz=0.0)

        color = trace_ray_color((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), 2)
        np.testing.assert_allclose(color, (0.375, 0.425, 0.5), atol=1e-5)

    def test_black_diffuse_absorbs(self):
        from pathtrace.core.integrator import trace_ray_color
        from pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -2.0), 0.5, albedo=(0.0, 0.0, 0.0))

        color = trace_ray_color((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10)
        np.testing.assert_allclose(color, (0.0, 0.0, 0.0), atol=1e-6)

    def test_glass_passes_light(self):
        """A glass sphere in front of the camera still shows the sky behind it."""
        from pathtrace.core.integrator import trace_ray_color
        from pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -2.0), 0.5, ior=1.5)

        color = trace_ray_color((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10)
        assert min(color) > 0.0


class TestRenderFrame:
    """Tests for render_frame and render."""

    @staticmethod
    def _level_camera():
        from pathtrace.config import CameraSettings

        return CameraSettings(origin=(0.0, 0.0, 0.0), look_at=(0.0, 0.0, -1.0), aperture=0.0)

    def test_render_shape_and_alpha(self):
        from pathtrace.config import RenderSettings
        from pathtrace.core.color import unpack_rgba
        from pathtrace.core.integrator import render

        pixels = render(16, 8, RenderSettings(samples_per_pixel=1, bounce_limit=1, gamma=1.0), self._level_camera())

        assert pixels.shape == (8, 16)
        assert pixels.dtype == np.uint32
        assert (unpack_rgba(pixels)[..., 3] == 255).all()

    def test_top_row_is_bluer_than_bottom_row(self):
        """Row 0 is the top of the image, where the sky is most saturated."""
        from pathtrace.config import RenderSettings
        from pathtrace.core.color import unpack_rgba
        from pathtrace.core.integrator import render

        pixels = render(8, 8, RenderSettings(samples_per_pixel=4, bounce_limit=1, gamma=1.0), self._level_camera())
        rgba = unpack_rgba(pixels).astype(int)

        assert rgba[0, :, 0].mean() < rgba[-1, :, 0].mean()
        # Blue saturates everywhere
        assert (rgba[..., 2] == 255).all()

    def test_zero_bounces_renders_black(self):
        from pathtrace.config import RenderSettings
        from pathtrace.core.integrator import render

        pixels = render(4, 4, RenderSettings(samples_per_pixel=2, bounce_limit=0), self._level_camera())
        assert (pixels == 0xFF000000).all()

    def test_default_scene_renders(self):
        from pathtrace.config import RenderSettings
        from pathtrace.core.integrator import render
        from pathtrace.scene.default_scene import create_default_scene

        _, camera_settings = create_default_scene()
        pixels = render(12, 8, RenderSettings(samples_per_pixel=2, bounce_limit=4), camera_settings)

        assert pixels.shape == (8, 12)
        # Not every pixel is the same color
        assert np.unique(pixels).size > 1

    def test_single_pixel_buffer(self):
        """A 1x1 frame samples the whole viewport and gets a finite sky color."""
        from pathtrace.config import RenderSettings
        from pathtrace.core.color import unpack_rgba
        from pathtrace.core.integrator import render

        pixels = render(1, 1, RenderSettings(samples_per_pixel=16, bounce_limit=1, gamma=1.0), self._level_camera())
        r, g, b, a = unpack_rgba(pixels)[0, 0].astype(int)

        assert a == 255
        assert b == 255
        # Sky red and green lie between 0.5 and 1.0
        assert 127 <= r <= 255
        assert 178 <= g <= 255

    def test_zero_size_buffer_is_noop(self):
        from pathtrace.config import RenderSettings
        from pathtrace.core.integrator import allocate_buffer, render_frame

        pixels = allocate_buffer(0, 5)
        render_frame(pixels, RenderSettings())
        assert pixels.shape == (5, 0)

    def test_requires_camera(self):
        from pathtrace.config import RenderSettings
        from pathtrace.core.integrator import allocate_buffer, render_frame

        with pytest.raises(RuntimeError, match="Camera not set up"):
            render_frame(allocate_buffer(4, 4), RenderSettings())

    @pytest.mark.parametrize(
        "buffer",
        [np.zeros((4, 4), dtype=np.float32), np.zeros(16, dtype=np.uint32)],
    )
    def test_rejects_bad_buffer(self, buffer):
        from pathtrace.config import RenderSettings
        from pathtrace.core.integrator import render_frame

        with pytest.raises(ValueError, match="uint32"):
            render_frame(buffer, RenderSettings())

    def test_allocate_buffer_layout(self):
        from pathtrace.core.integrator import allocate_buffer

        pixels = allocate_buffer(3, 2)
        assert pixels.shape == (2, 3)
        assert pixels.dtype == np.uint32
        assert not pixels.any()
