"""Dielectric (glass/water) material.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for the Fresnel reflectance
    - Total internal reflection when no refracted direction exists

When refraction is possible the material reflects with probability equal to
the reflectance and refracts otherwise. Glass absorbs nothing, so the
attenuation is always white.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import reflect, refract, safe_normalize, schlick_reflectance, vec3
from raytracer.core.sampler import random_float


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """n_incident / n_transmitted: 1/ior entering the medium, ior leaving it."""
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def dielectric_direction(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    u: ti.f32,
) -> vec3:
    """Reflected or refracted direction for a given uniform draw.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: Unit surface normal facing the incoming ray.
        front_face: 1 if the ray is entering the medium, 0 if leaving.
        u: Uniform draw in [0, 1) choosing between reflection and refraction.

    Returns:
        The unit scattered direction.
    """
    eta = refraction_ratio(ior, front_face)
    unit_direction = safe_normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)

    refracted, can_refract = refract(unit_direction, normal, eta)

    direction = vec3(0.0, 0.0, 0.0)
    if can_refract == 0 or u < schlick_reflectance(cos_theta, eta):
        direction = reflect(unit_direction, normal)
    else:
        direction = refracted
    return safe_normalize(direction)


@ti.func
def scatter_dielectric(ior: ti.f32, incident_direction: vec3, normal: vec3, front_face: ti.i32):
    """Scatter a ray at a dielectric interface.

    Returns:
        A tuple (scattered_direction, attenuation, did_scatter). Dielectrics
        always scatter.
    """
    direction = dielectric_direction(ior, incident_direction, normal, front_face, random_float())
    return direction, vec3(1.0, 1.0, 1.0), 1


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_DIELECTRIC_MATERIALS = 512

dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Register a dielectric material.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass). An ior of
            1.0 matches the surrounding air and is fully transparent.

    Returns:
        The index of the material within the dielectric registry.

    Raises:
        RuntimeError: If the registry is full.
        ValueError: If ior is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]
