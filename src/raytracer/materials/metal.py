"""Metal (specular reflective) material with fuzz.

The incident direction is mirrored about the normal and then perturbed by
``fuzz`` times a random point in the unit sphere. If the perturbed direction
points into the surface the ray is absorbed.

    R = I - 2(I . N)N
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import reflect, safe_normalize, vec3
from raytracer.core.sampler import random_in_unit_sphere
from raytracer.materials.lambertian import validate_albedo


@ti.func
def metal_direction(incident_direction: vec3, normal: vec3, fuzz: ti.f32, jitter: vec3):
    """Fuzzed mirror direction for a given random jitter.

    Args:
        incident_direction: The incoming ray direction (any length).
        normal: Unit surface normal facing the incoming ray.
        fuzz: Roughness in [0, 1].
        jitter: Random point in the unit sphere.

    Returns:
        A tuple (direction, did_scatter). did_scatter is 0 when the fuzzed
        direction does not leave the surface (dot with normal <= 0).
    """
    reflected = reflect(safe_normalize(incident_direction), normal)
    direction = reflected + fuzz * jitter
    did_scatter = 1
    if tm.dot(direction, normal) <= 0.0:
        did_scatter = 0
        direction = vec3(0.0, 0.0, 0.0)
    return direction, did_scatter


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, incident_direction: vec3, normal: vec3):
    """Scatter a ray off a metal surface.

    Returns:
        A tuple (scattered_direction, attenuation, did_scatter).
    """
    direction, did_scatter = metal_direction(
        incident_direction, normal, fuzz, random_in_unit_sphere()
    )
    return direction, albedo, did_scatter


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_METAL_MATERIALS = 512

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Register a metal material.

    Args:
        albedo: Reflective tint as an (R, G, B) tuple in [0, 1].
        fuzz: Roughness in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the material within the metal registry.

    Raises:
        RuntimeError: If the registry is full.
        ValueError: If any albedo component or the fuzz is outside [0, 1].
    """
    validate_albedo(albedo)
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz ranges from 0 (perfect mirror) to 1 (maximum roughness)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = tm.vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]
