"""Sphere primitive with robust ray-sphere intersection.

The intersection solves |origin + t * direction - center|^2 = radius^2 with
the cancellation-free quadratic formulation (q = -(h + sign(h) sqrt(D)),
roots q/a and c/q), then picks the nearest root inside (t_min, t_max).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.geometry.sphere import Sphere, hit_sphere, vec3
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import vec3

# Radius below which a sphere is treated as degenerate and never hit
MIN_RADIUS = 1e-8


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (non-negative float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere in range, 0 otherwise.
            The remaining fields are only meaningful when hit == 1.
        t: Ray parameter of the closest valid root.
        point: World-space intersection point.
        normal: Unit surface normal, flipped to face the incoming ray.
        front_face: 1 if the ray arrived from outside the sphere, 0 if it
            hit the inside (normal was flipped).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 for both roots, smaller first.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient (positive).
        c: Constant term.
        sqrt_d: Square root of the reduced discriminant h^2 - a*c.

    Returns:
        Tuple of (t0, t1) with t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-10:
        # h and sqrt_d both vanish: tangent ray through the origin plane
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        tmp = t0
        t0 = t1
        t1 = tmp

    return t0, t1


@ti.func
def sphere_roots(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Both roots of the ray-sphere equation, ignoring any parameter range.

    Returns:
        A tuple (has_roots, t0, t1) with t0 <= t1. has_roots is 0 when the
        discriminant is negative, the sphere is degenerate or the direction
        is zero.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    has_roots = 0
    t0 = 0.0
    t1 = 0.0
    if sphere.radius >= MIN_RADIUS and a > 0.0 and discriminant >= 0.0:
        has_roots = 1
        t0, t1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))
    return has_roots, t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere inside the open interval (t_min, t_max).

    The smaller root is tried first and the larger root only if the smaller
    one is out of range, so the record always holds the closest valid hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (any non-zero length).
        sphere: The sphere to test.
        t_min: Lower bound (exclusive); a small positive epsilon suppresses
            self-intersection of rays leaving a surface.
        t_max: Upper bound (exclusive).

    Returns:
        A HitRecord; check its hit field.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    has_roots, t0, t1 = sphere_roots(ray_origin, ray_direction, sphere)
    if has_roots == 1:
        t = t0
        valid = (t > t_min) and (t < t_max)
        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) > 0.0:
                is_front_face = 0
                hit_normal = -outward_normal
            else:
                is_front_face = 1
                hit_normal = outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)
