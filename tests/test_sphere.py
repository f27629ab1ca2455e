"""Unit tests for sphere intersection.

Tests cover:
- Analytic roots of the ray-sphere equation
- Ray hitting sphere from outside (front face) and from inside (back face)
- Ray missing the sphere and the open (t_min, t_max) interval
- Degenerate spheres
"""

import math

import pytest
import taichi as ti


def _hit_query(center, radius, origin, direction, t_min=0.001, t_max=1000.0):
    """Run hit_sphere in a kernel and return (hit, t, point, normal, front_face)."""
    from raytracer.core.ray import vec3
    from raytracer.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(c: vec3, r: ti.f32, o: vec3, d: vec3, lo: ti.f32, hi: ti.f32):
        sphere = Sphere(center=c, radius=r)
        record = hit_sphere(o, d, sphere, lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(
        vec3(*center), radius, vec3(*origin), vec3(*direction), t_min, t_max
    )
    return hit[None], t_val[None], point[None], normal[None], front_face[None]


class TestSphereRoots:
    """Tests for the raw quadratic roots."""

    def test_roots_match_hand_computation(self):
        """Ray along -z from z=5 through a sphere of radius 2: roots 3 and 7."""
        from raytracer.core.ray import vec3
        from raytracer.geometry.sphere import make_sphere, sphere_roots

        has_roots = ti.field(dtype=ti.i32, shape=())
        t0 = ti.field(dtype=ti.f32, shape=())
        t1 = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(0.0, 0.0, 0.0), 2.0)
            h, a, b = sphere_roots(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), sphere)
            has_roots[None] = h
            t0[None] = a
            t1[None] = b

        test_kernel()
        assert has_roots[None] == 1
        assert abs(t0[None] - 3.0) < 1e-6
        assert abs(t1[None] - 7.0) < 1e-6

    def test_roots_with_offset_axis(self):
        """Offset ray y=0.6 through a unit sphere: t = 5 -/+ 0.8."""
        from raytracer.core.ray import vec3
        from raytracer.geometry.sphere import make_sphere, sphere_roots

        t0 = ti.field(dtype=ti.f32, shape=())
        t1 = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(0.0, 0.0, 0.0), 1.0)
            _, a, b = sphere_roots(vec3(0.0, 0.6, 5.0), vec3(0.0, 0.0, -1.0), sphere)
            t0[None] = a
            t1[None] = b

        test_kernel()
        assert abs(t0[None] - 4.2) < 1e-5
        assert abs(t1[None] - 5.8) < 1e-5


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_front_face(self):
        hit, t, point, normal, front_face = _hit_query(
            (0.0, 0.0, 0.0), 1.0, (0.0, 0.0, 5.0), (0.0, 0.0, -1.0)
        )
        assert hit == 1
        assert abs(t - 4.0) < 1e-5
        assert abs(point[2] - 1.0) < 1e-5
        assert abs(normal[2] - 1.0) < 1e-5
        assert front_face == 1

    def test_miss(self):
        hit, *_ = _hit_query((0.0, 0.0, 0.0), 1.0, (0.0, 2.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_sphere_behind_ray(self):
        hit, *_ = _hit_query((0.0, 0.0, 0.0), 1.0, (0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_ray_inside_sphere_hits_back_face(self):
        """From the center the far root is used and the normal faces the ray."""
        hit, t, point, normal, front_face = _hit_query(
            (0.0, 0.0, 0.0), 2.0, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0)
        )
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert abs(point[0] - 2.0) < 1e-5
        assert abs(normal[0] + 1.0) < 1e-5
        assert front_face == 0

    def test_non_unit_direction(self):
        """t scales inversely with direction length; the hit point does not."""
        hit, t, point, _, _ = _hit_query((0.0, 0.0, 0.0), 1.0, (0.0, 0.0, 5.0), (0.0, 0.0, -2.0))
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert abs(point[2] - 1.0) < 1e-5

    def test_t_max_excludes_far_hit(self):
        hit, *_ = _hit_query(
            (0.0, 0.0, 0.0), 1.0, (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_min=0.001, t_max=3.5
        )
        assert hit == 0

    def test_t_min_skips_near_root(self):
        """With the near root below t_min, the far root is returned."""
        hit, t, _, _, front_face = _hit_query(
            (0.0, 0.0, 0.0), 1.0, (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_min=4.5, t_max=100.0
        )
        assert hit == 1
        assert abs(t - 6.0) < 1e-5
        assert front_face == 0

    def test_normal_is_unit_length(self):
        hit, _, _, normal, _ = _hit_query(
            (1.0, -2.0, 3.0), 3.0, (0.0, 0.0, -10.0), (0.1, -0.2, 1.0)
        )
        assert hit == 1
        length = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
        assert abs(length - 1.0) < 1e-5

    @pytest.mark.parametrize("radius", [0.0, 1e-10])
    def test_degenerate_radius_never_hit(self, radius):
        hit, *_ = _hit_query((0.0, 0.0, 0.0), radius, (0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_zero_direction_never_hits(self):
        hit, *_ = _hit_query((0.0, 0.0, 0.0), 1.0, (0.0, 0.0, 0.5), (0.0, 0.0, 0.0))
        assert hit == 0
