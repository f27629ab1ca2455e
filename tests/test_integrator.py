"""Tests for the radiance estimator.

Tests cover:
- Background gradient for escaping rays
- Depth limit semantics and termination
- Absorption and attenuation
- Index-matched glass being invisible
- Render target setup and accumulation
"""

import math

import numpy as np
import pytest


def _expected_background(direction):
    d = np.asarray(direction, dtype=np.float64)
    t = 0.5 * (d[1] / np.linalg.norm(d) + 1.0)
    return (1.0 - t) * np.array([1.0, 1.0, 1.0]) + t * np.array([0.5, 0.7, 1.0])


class TestBackground:
    @pytest.mark.parametrize(
        "direction",
        [(0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, -1.0), (0.3, 0.4, -2.0), (1.0, -5.0, 0.2)],
    )
    def test_miss_returns_gradient(self, direction):
        """Rays that hit nothing return the background formula exactly."""
        from raytracer.core.integrator import trace_ray

        color, scatter_count = trace_ray((0.0, 0.0, 0.0), direction, max_depth=5)
        np.testing.assert_allclose(color, _expected_background(direction), atol=1e-6)
        assert scatter_count == 0

    def test_miss_past_scene_objects(self):
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
        color, _ = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=5)
        np.testing.assert_allclose(color, [0.5, 0.7, 1.0], atol=1e-6)


class TestDepthLimit:
    def test_depth_zero_gives_sky_for_miss_and_black_for_hit(self):
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))

        hit_color, hit_scatters = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=0)
        assert hit_color == (0.0, 0.0, 0.0)
        assert hit_scatters == 0

        miss_color, _ = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=0)
        np.testing.assert_allclose(miss_color, _expected_background((0.0, 0.0, 1.0)), atol=1e-6)

    @pytest.mark.parametrize("max_depth", [1, 2, 5, 20])
    def test_terminates_between_mirrors(self, max_depth):
        """Two facing mirrors trap the ray; scattering stops at max_depth."""
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.manager import SceneManager

        scene = SceneManager()
        mirror = scene.add_metal_material((0.9, 0.9, 0.9), fuzz=0.0)
        scene.add_sphere((0.0, 0.0, 1001.0), 1000.0, mirror)
        scene.add_sphere((0.0, 0.0, -1001.0), 1000.0, mirror)

        color, scatter_count = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=max_depth)
        assert scatter_count == max_depth
        assert color == (0.0, 0.0, 0.0)

    def test_scatter_count_bounded_for_any_material(self):
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.presets import create_material_showcase_scene

        create_material_showcase_scene()
        for direction in [(0.0, 0.0, -1.0), (-1.0, 0.0, -1.0), (1.0, 0.0, -1.0), (0.0, -1.0, -1.0)]:
            for _ in range(10):
                color, scatter_count = trace_ray((0.0, 0.0, 1.0), direction, max_depth=3)
                assert 0 <= scatter_count <= 3
                assert all(0.0 <= c <= 1.0 for c in color)

    def test_negative_depth_rejected(self):
        from raytracer.core.integrator import trace_ray

        with pytest.raises(ValueError, match="max_depth"):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=-1)


class TestAttenuation:
    def test_mirror_attenuates_background(self):
        """One bounce off a flat-on mirror returns albedo times the sky behind the camera."""
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 1.0, (0.8, 0.6, 0.2), fuzz=0.0)

        color, scatter_count = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1)
        expected = np.array([0.8, 0.6, 0.2]) * _expected_background((0.0, 0.0, 1.0))
        np.testing.assert_allclose(color, expected, atol=1e-5)
        assert scatter_count == 1

    def test_diffuse_hit_is_attenuated(self):
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

        for _ in range(20):
            color, _ = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=10)
            assert all(not math.isnan(c) for c in color)
            assert all(0.0 <= c <= 0.5 + 1e-6 for c in color)


class TestTransparentDielectric:
    @pytest.mark.parametrize(
        "origin,direction",
        [
            ((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
            ((0.0, 0.0, 0.0), (0.1, 0.2, -1.0)),
            ((0.3, -0.2, 0.0), (0.1, 0.1, -1.0)),
        ],
    )
    def test_ior_one_sphere_is_invisible(self, origin, direction):
        """A glass sphere with ior 1.0 returns the color of the undeviated ray."""
        from raytracer.core.integrator import trace_ray
        from raytracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -3.0), 1.0, ior=1.0)

        for _ in range(10):
            color, scatter_count = trace_ray(origin, direction, max_depth=4)
            np.testing.assert_allclose(color, _expected_background(direction), atol=1e-4)
        assert scatter_count == 2


class TestRenderTarget:
    def test_render_before_setup_raises(self):
        from raytracer.core.integrator import get_linear_image_numpy, render_image

        with pytest.raises(RuntimeError, match="setup_render_target"):
            render_image(1)
        with pytest.raises(RuntimeError, match="setup_render_target"):
            get_linear_image_numpy()

    @pytest.mark.parametrize("width,height", [(0, 10), (10, -1), (4096, 10)])
    def test_invalid_dimensions(self, width, height):
        from raytracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_empty_scene_renders_gradient_top_row_first(self):
        """Row 0 of the output is the top of the image (bluest sky)."""
        from raytracer.camera.thin_lens import CameraConfig, setup_camera
        from raytracer.core.integrator import (
            get_linear_image_numpy,
            get_total_samples,
            render_image,
            setup_render_target,
        )

        setup_camera(CameraConfig(vfov=90.0, aspect_ratio=2.0))
        setup_render_target(8, 4)
        render_image(num_samples=3, max_depth=5)

        assert get_total_samples() == 3
        image = get_linear_image_numpy()
        assert image.shape == (4, 8, 3)
        assert image.dtype == np.float32
        # Red channel falls as the ray tilts up, so the top row is least red
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        assert np.all(image[..., 2] > 0.99)
