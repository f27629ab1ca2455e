"""Scene list storage and closest-hit query.

Spheres live in Structure-of-Arrays Taichi fields. ``intersect_world`` scans
every sphere, narrowing t_max to the closest hit found so far, and returns a
record tagged with the hit sphere's material id.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.world import add_sphere, clear_world, intersect_world
    >>> clear_world()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_world within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import vec3
from raytracer.geometry.sphere import HitRecord, Sphere, hit_sphere


@ti.dataclass
class SceneHitRecord:
    """Closest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any sphere was hit, 0 otherwise.
        t: Ray parameter of the closest hit.
        point: World-space hit point.
        normal: Unit normal facing the incoming ray.
        front_face: 1 if the ray hit the outside of the surface.
        material_id: Unified material id of the hit sphere; -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove all spheres. Field contents are overwritten on the next add."""
    num_spheres[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Append a sphere to the scene list.

    A zero radius is accepted and produces a sphere that is never hit.

    Args:
        center: Sphere center as (x, y, z).
        radius: Sphere radius, >= 0.
        material_id: Unified material id for shading.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If MAX_SPHERES would be exceeded.
        ValueError: If radius is negative.
    """
    if radius < 0.0:
        raise ValueError(f"Sphere radius must be non-negative, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = tm.vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    return int(num_spheres[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_world(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Closest hit among all spheres within (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        t_min: Lower bound (exclusive), a small positive epsilon.
        t_max: Upper bound (exclusive).

    Returns:
        The record of the globally closest hit, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i])

    return result
