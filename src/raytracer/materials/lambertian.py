"""Lambertian (ideal diffuse) material.

The scattered direction is the hit normal plus a random unit vector on the
sphere surface, which distributes outgoing rays with density proportional to
cos(theta) about the normal. The attenuation is the albedo.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation = scatter_lambertian(albedo, normal)
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import near_zero, vec3
from raytracer.core.sampler import random_unit_vector


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """Diffuse scatter direction for a given random offset.

    Args:
        normal: Unit surface normal facing the incoming ray.
        offset: Random unit vector.

    Returns:
        normal + offset, or the normal itself when the sum degenerates to
        (nearly) zero, i.e. the offset landed opposite the normal.
    """
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Scatter a ray off a diffuse surface.

    Diffuse surfaces always scatter; absorption is modelled only through
    albedo < 1.

    Args:
        albedo: The diffuse reflectance color.
        normal: Unit surface normal facing the incoming ray.

    Returns:
        A tuple (scattered_direction, attenuation).
    """
    direction = lambertian_direction(normal, random_unit_vector())
    return direction, albedo


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_LAMBERTIAN_MATERIALS = 512

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that an albedo has three components, each in [0, 1].

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Register a Lambertian material.

    Args:
        albedo: Diffuse reflectance as an (R, G, B) tuple in [0, 1].

    Returns:
        The index of the material within the Lambertian registry.

    Raises:
        RuntimeError: If the registry is full.
        ValueError: If any albedo component is outside [0, 1].
    """
    validate_albedo(albedo)

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = tm.vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]
