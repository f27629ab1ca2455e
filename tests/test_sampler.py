"""Tests for random sampling utilities and runtime initialisation."""

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 4096


class TestRandomDraws:
    """Statistical checks on the sampling functions."""

    def test_random_float_range_and_mean(self):
        from raytracer.core.sampler import random_float

        samples = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_float()

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= 0.0
        assert values.max() < 1.0
        assert abs(values.mean() - 0.5) < 0.03

    def test_random_in_unit_sphere(self):
        """Points lie strictly inside the unit sphere and average near the center."""
        from raytracer.core.sampler import random_in_unit_sphere

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        points = samples.to_numpy()
        assert np.all(np.sum(points**2, axis=1) < 1.0)
        assert np.all(np.abs(points.mean(axis=0)) < 0.05)

    def test_random_unit_vector(self):
        from raytracer.core.sampler import random_unit_vector

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_unit_vector()

        test_kernel()
        points = samples.to_numpy()
        np.testing.assert_allclose(np.linalg.norm(points, axis=1), 1.0, atol=1e-5)
        assert np.all(np.abs(points.mean(axis=0)) < 0.06)

    def test_random_in_unit_disk(self):
        from raytracer.core.sampler import random_in_unit_disk

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_in_unit_disk()

        test_kernel()
        points = samples.to_numpy()
        assert np.all(points[:, 2] == 0.0)
        assert np.all(points[:, 0] ** 2 + points[:, 1] ** 2 < 1.0)

    def test_jitter_pixel_stays_inside_pixel(self):
        from raytracer.core.sampler import jitter_pixel

        s_values = ti.field(dtype=ti.f32, shape=N_SAMPLES)
        t_values = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                s, t = jitter_pixel(3, 7, 10, 20)
                s_values[i] = s
                t_values[i] = t

        test_kernel()
        s = s_values.to_numpy()
        t = t_values.to_numpy()
        assert np.all((s >= 0.3) & (s < 0.4 + 1e-6))
        assert np.all((t >= 0.35) & (t < 0.4 + 1e-6))
        # Jitter actually varies between draws
        assert s.std() > 0.01


class TestInitRuntime:
    """Argument validation for init_runtime (validated before ti.init runs)."""

    def test_rejects_unknown_arch(self):
        from raytracer.core.runtime import init_runtime

        with pytest.raises(ValueError, match="arch"):
            init_runtime(arch="tpu")

    def test_rejects_negative_seed(self):
        from raytracer.core.runtime import init_runtime

        with pytest.raises(ValueError, match="seed"):
            init_runtime(seed=-1)
