"""Geometric primitives and ray intersection.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a record with
a hit flag rather than a sentinel t, so "no hit" is an explicit outcome:
    record = hit_sphere(origin, direction, sphere, t_min, t_max)
"""

from .sphere import MIN_RADIUS, HitRecord, Sphere, hit_sphere, make_sphere, sphere_roots

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "sphere_roots",
    "MIN_RADIUS",
]
