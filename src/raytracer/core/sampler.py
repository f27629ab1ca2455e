"""Random sampling utilities for Monte Carlo ray tracing.

Every random draw in the renderer goes through ``random_float``. Taichi keeps
one generator state per parallel thread, seeded from ``ti.init(random_seed=)``
(see ``core.runtime.init_runtime``), so pixels rendered on different threads
draw from independent streams and a fixed seed reproduces a render on the
same backend.

Functions that consume randomness are split from deterministic counterparts
elsewhere in the package (materials and camera take the drawn values as
arguments), which keeps the geometry testable with injected draws.
"""

import taichi as ti

from raytracer.core.ray import length_squared, safe_normalize, vec3

# Upper bound on rejection-sampling attempts; the acceptance rate is ~52% for
# the sphere and ~78% for the disk, so this is never reached in practice.
MAX_REJECTION_ATTEMPTS = 64


@ti.func
def random_float() -> ti.f32:
    """Uniform draw in [0, 1) from the calling thread's generator."""
    return ti.random(ti.f32)


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniformly distributed point strictly inside the unit sphere.

    Uses rejection sampling from the enclosing cube.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_float() * 2.0 - 1.0,
                random_float() * 2.0 - 1.0,
                random_float() * 2.0 - 1.0,
            )
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector uniformly distributed on the sphere surface."""
    return safe_normalize(random_in_unit_sphere())


@ti.func
def random_in_unit_disk() -> vec3:
    """Uniform point (x, y, 0) with x^2 + y^2 < 1, for lens sampling."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(random_float() * 2.0 - 1.0, random_float() * 2.0 - 1.0, 0.0)
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def jitter_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32):
    """Map a pixel plus a random sub-pixel offset to normalized (s, t).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A tuple (s, t) in [0, 1) x [0, 1).
    """
    s = (ti.cast(pixel_i, ti.f32) + random_float()) / ti.cast(width, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + random_float()) / ti.cast(height, ti.f32)
    return s, t
