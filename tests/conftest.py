"""Pytest configuration for raytracer tests.

Taichi must be initialised once per session before any module that declares
fields is imported, so tests import package modules inside test functions.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session on CPU with a fixed seed.

    Repeated ti.init() calls reset every field, so this is session scoped.
    """
    from raytracer.core.runtime import init_runtime

    init_runtime(arch="cpu", seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear spheres, materials and the render target around each test."""
    from raytracer.core.integrator import reset_render_target
    from raytracer.materials.dielectric import clear_dielectric_materials
    from raytracer.materials.lambertian import clear_lambertian_materials
    from raytracer.materials.metal import clear_metal_materials
    from raytracer.scene.manager import _clear_material_tracking
    from raytracer.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_render_target()

    _clear_all()
    yield
    _clear_all()
