"""Ray data structure and vector utilities.

Vectors are ``taichi.math.vec3`` values inside kernels and double as points,
directions and colors; callers track which is which. All functions here are
pure ``ti.func`` helpers with no random draws (see ``core.sampler`` for those).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 2.0).z
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Squared length below which a vector is treated as zero by safe_normalize
NORMALIZE_EPSILON = 1e-16

# Per-component magnitude below which a vector counts as degenerate
NEAR_ZERO_EPSILON = 1e-6


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Not required to be unit
            length; intersection code handles arbitrary scale.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point along the ray at parameter t: origin + t * direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared length; use where a comparison suffices to skip the sqrt."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    return ti.sqrt(tm.dot(v, v))


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector, returning it unchanged if it is (nearly) zero.

    ``tm.normalize`` divides by the length and yields NaN for a zero vector.
    Callers that cannot rule out a degenerate input use this instead.

    Args:
        v: The input vector.

    Returns:
        The unit vector along v, or v itself when |v|^2 < NORMALIZE_EPSILON.
    """
    result = v
    len_sq = tm.dot(v, v)
    if len_sq >= NORMALIZE_EPSILON:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is within NEAR_ZERO_EPSILON of zero."""
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal: v - 2 (v.n) n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, eta: ti.f32):
    """Refract a unit direction through a surface using Snell's law.

    Args:
        unit_incident: The incoming direction, unit length, pointing toward
            the surface.
        normal: The unit surface normal on the incident side.
        eta: Ratio of refractive indices n_incident / n_transmitted.

    Returns:
        A tuple (direction, ok). ``ok`` is 0 when the discriminant is
        negative (total internal reflection) and direction is then zero.
    """
    cos_i = -tm.dot(unit_incident, normal)
    discriminant = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    direction = vec3(0.0, 0.0, 0.0)
    ok = 0
    if discriminant >= 0.0:
        cos_t = ti.sqrt(discriminant)
        direction = eta * unit_incident + (eta * cos_i - cos_t) * normal
        ok = 1
    return direction, ok


@ti.func
def schlick_reflectance(cosine: ti.f32, eta: ti.f32) -> ti.f32:
    """Fresnel reflectance via Schlick's approximation.

    An index ratio of exactly 1 means there is no optical interface, so the
    reflectance is 0 at every angle rather than Schlick's (1 - cos)^5 tail.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        eta: Ratio of refractive indices across the interface.

    Returns:
        The reflectance in [0, 1].
    """
    reflectance = 0.0
    if eta != 1.0:
        r0 = ((1.0 - eta) / (1.0 + eta)) ** 2
        reflectance = r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
    return reflectance
