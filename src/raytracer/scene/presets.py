"""Preset scenes.

Each builder clears and fills a SceneManager and returns it together with a
matching CameraConfig:

- ``create_two_sphere_scene``: one diffuse sphere resting on a large ground
  sphere, viewed down -z.
- ``create_material_showcase_scene``: diffuse, glass and metal spheres side
  by side.
- ``create_random_scene``: the classic cover scene of many small random
  spheres around three large feature spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.presets import create_random_scene
    >>> scene, camera = create_random_scene(seed=7)
"""

import logging

import numpy as np

from raytracer.camera.thin_lens import CameraConfig
from raytracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# Small random spheres are placed on a grid of unit cells in [-11, 11)
GRID_MIN = -11
GRID_MAX = 11
SMALL_RADIUS = 0.2
CELL_JITTER = 0.6
# Small spheres must stay this far from each feature sphere center
FEATURE_CLEARANCE = 1.2

FEATURE_CENTERS = ((4.0, 1.0, 0.0), (-4.0, 1.0, 0.0), (0.0, 1.0, 0.0))


def _ground_and_center(scene: SceneManager, center_albedo: tuple[float, float, float]) -> None:
    scene.add_lambertian_sphere(center=(0.0, -100.5, -1.0), radius=100.0, albedo=(0.8, 0.8, 0.0))
    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.0), radius=0.5, albedo=center_albedo)


def create_two_sphere_scene(
    scene: SceneManager | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, CameraConfig]:
    """Diffuse sphere (0.7, 0.3, 0.3) at (0, 0, -1) on a yellow ground sphere.

    The camera sits at the origin looking down -z with a 90 degree vertical
    field of view and no depth of field.
    """
    scene = scene if scene is not None else SceneManager()
    scene.clear()
    _ground_and_center(scene, center_albedo=(0.7, 0.3, 0.3))

    camera = CameraConfig(
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )
    logger.debug("Built two-sphere scene")
    return scene, camera


def create_material_showcase_scene(
    scene: SceneManager | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, CameraConfig]:
    """Ground, a diffuse center sphere, a glass sphere (left) and a metal sphere (right)."""
    scene = scene if scene is not None else SceneManager()
    scene.clear()
    _ground_and_center(scene, center_albedo=(0.1, 0.2, 0.5))
    scene.add_dielectric_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, ior=1.5)
    scene.add_metal_sphere(center=(1.0, 0.0, -1.0), radius=0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.1)

    camera = CameraConfig(
        look_from=(0.0, 0.0, 1.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=60.0,
        aspect_ratio=aspect_ratio,
    )
    logger.debug("Built material showcase scene")
    return scene, camera


def create_random_scene(
    seed: int = 0,
    scene: SceneManager | None = None,
    aspect_ratio: float = 3.0 / 2.0,
) -> tuple[SceneManager, CameraConfig]:
    """Large grey ground sphere with a grid of random small spheres.

    Each grid cell (a, b) gets a sphere of radius 0.2 at
    (a + 0.6 * r, 0.2, b + 0.6 * r) unless it lands within 1.2 of a feature
    sphere. The material draw chooses diffuse (80%, random albedo), metal
    (15%, albedo in [0.5, 1), fuzz in [0, 0.5)) or glass (5%, ior 1.5).

    Args:
        seed: Seed for the NumPy generator; the same seed gives the same scene.
        scene: Manager to fill. A new one is created when omitted.
        aspect_ratio: Camera aspect ratio.

    Returns:
        Tuple of (scene, camera).
    """
    rng = np.random.default_rng(seed)
    scene = scene if scene is not None else SceneManager()
    scene.clear()

    scene.add_lambertian_sphere(center=(0.0, -1000.0, 0.0), radius=1000.0, albedo=(0.5, 0.5, 0.5))

    features = np.array(FEATURE_CENTERS)
    for a in range(GRID_MIN, GRID_MAX):
        for b in range(GRID_MIN, GRID_MAX):
            choose_mat = rng.random()
            center = np.array(
                [a + CELL_JITTER * rng.random(), SMALL_RADIUS, b + CELL_JITTER * rng.random()]
            )
            if np.any(np.linalg.norm(features - center, axis=1) <= FEATURE_CLEARANCE):
                continue

            center_t = tuple(float(c) for c in center)
            if choose_mat < 0.8:
                albedo = tuple(float(c) for c in rng.random(3))
                scene.add_lambertian_sphere(center_t, SMALL_RADIUS, albedo)
            elif choose_mat < 0.95:
                albedo = tuple(float(c) for c in 0.5 * (1.0 + rng.random(3)))
                fuzz = float(0.5 * rng.random())
                scene.add_metal_sphere(center_t, SMALL_RADIUS, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center_t, SMALL_RADIUS, ior=1.5)

    scene.add_dielectric_sphere(center=(0.0, 1.0, 0.0), radius=1.0, ior=1.5)
    scene.add_lambertian_sphere(center=(-4.0, 1.0, 0.0), radius=1.0, albedo=(0.4, 0.2, 0.1))
    scene.add_metal_sphere(center=(4.0, 1.0, 0.0), radius=1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    camera = CameraConfig(
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    logger.debug("Built random scene (seed=%d) with %d spheres", seed, scene.get_sphere_count())
    return scene, camera
