"""Scene storage, management and preset scenes.

Components:
    world: Sphere list fields and the closest-hit query
    manager: SceneManager mapping unified material ids to material types
    presets: Ready-made scenes paired with a camera
"""

from .manager import MaterialInfo, MaterialType, SceneConfig, SceneManager, SphereInfo
from .presets import (
    create_material_showcase_scene,
    create_random_scene,
    create_two_sphere_scene,
)
from .world import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_world,
    get_sphere_count,
    intersect_world,
)

__all__ = [
    "SceneHitRecord",
    "MAX_SPHERES",
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "intersect_world",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "SceneManager",
    "create_two_sphere_scene",
    "create_material_showcase_scene",
    "create_random_scene",
]
