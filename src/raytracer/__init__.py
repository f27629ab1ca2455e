"""Taichi-based stochastic ray tracer for sphere scenes.

The renderer turns a declarative scene (spheres with Lambertian, metal or
dielectric materials) and a thin-lens camera into a grid of gamma-corrected
linear colors. The hot path runs as Taichi kernels, parallel over pixels.

Subpackages:
    core: Ray/vector kernel, sampler, radiance estimator and render loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: World storage, closest-hit query, scene manager and presets
    camera: Thin-lens camera with depth of field
    output: Clamping, gamma correction and image statistics

Taichi must be initialised (see ``raytracer.core.runtime.init_runtime``)
before importing any module that declares fields.
"""

__version__ = "0.1.0"
