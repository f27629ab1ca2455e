"""Material scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with fuzz
    dielectric: Refraction with Schlick reflectance (glass, water)

Each material exposes a ``scatter_*`` Taichi function that draws its own
randomness, and a deterministic ``*_direction`` counterpart that takes the
random draw as an argument. Scatter results carry an explicit did_scatter
flag (metal) so absorption is a first-class outcome.

Material parameters are stored in per-type registries (Taichi fields); the
scene manager maps unified material ids onto (type, registry index).
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    dielectric_direction,
    get_dielectric_ior,
    get_dielectric_material_count,
    refraction_ratio,
    scatter_dielectric,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
    validate_albedo,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    metal_direction,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "lambertian_direction",
    "scatter_lambertian",
    "validate_albedo",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "metal_direction",
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "refraction_ratio",
    "dielectric_direction",
    "scatter_dielectric",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
]
