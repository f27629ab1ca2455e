"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    sampler: Random draws (unit sphere, unit disk, pixel jitter)
    runtime: Taichi initialisation with a fixed seed
    settings: Validated image and sampling parameters
    integrator: Radiance estimator and per-pixel accumulation kernels
    renderer: Host-side render loop with progress reporting

Only the field-free modules are imported here. integrator and renderer
declare Taichi fields at import time; import them directly after
``init_runtime`` has been called:
    from raytracer.core.renderer import Renderer
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    safe_normalize,
    schlick_reflectance,
    vec3,
)
from .runtime import DEFAULT_SEED, init_runtime
from .sampler import (
    jitter_pixel,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
)
from .settings import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, RenderSettings

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "safe_normalize",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "random_float",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "jitter_pixel",
    "init_runtime",
    "DEFAULT_SEED",
    "RenderSettings",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
]
