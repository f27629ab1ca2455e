"""Scene manager coordinating spheres and materials.

The manager owns the scene list for the duration of a render. It hands out
unified material ids and records, for each id, the material type tag and the
index into that type's registry, so the radiance estimator can dispatch on a
closed set of material kinds.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    0
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from raytracer.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from raytracer.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from raytracer.materials.metal import add_metal_material, clear_metal_materials
from raytracer.scene.world import add_sphere, clear_world

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Material type tag used for scatter dispatch."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


MAX_MATERIALS = 1536

# material_types[i] holds the MaterialType of material id i and
# material_type_indices[i] its index in the type-specific registry
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


# Manager whose spheres and materials are currently loaded into the fields
_active_manager: "SceneManager | None" = None


def _clear_material_tracking() -> None:
    global _active_manager
    num_materials[None] = 0
    _active_manager = None


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Material type tag for an id, or -1 for an unknown id."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Registry index for an id, or -1 for an unknown id."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Host-side record of a registered material.

    Attributes:
        material_id: The unified material id.
        material_type: The material type tag.
        type_index: The index within the type-specific registry.
        params: The parameters the material was created with.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of a sphere in the scene."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Declarative scene description.

    Attributes:
        materials: Material specs, each a dict with a "type" key
            ("lambertian", "metal" or "dielectric") plus its parameters.
        spheres: Sphere specs with "center", "radius" and "material_id".
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds the scene list and its materials.

    Registering a material returns a unified material id; spheres reference
    materials by that id. Creating a manager or calling ``clear`` resets the
    Taichi-side scene and material registries and makes that manager the
    active one. A manager that has lost the registries to another one is
    reloaded by ``activate``, which every mutating method and render_scene
    call first.

    Attributes:
        materials: MaterialInfo for every registered material, indexed by id.
        spheres: SphereInfo for every sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((0, -100.5, -1), 100.0, ground)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        global _active_manager
        clear_world()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        _active_manager = self

    def clear(self) -> None:
        """Remove all spheres and materials."""
        self._clear_all()

    @property
    def is_active(self) -> bool:
        """True if this manager's scene is the one loaded into the fields."""
        return _active_manager is self

    def activate(self) -> None:
        """Load this manager's scene into the fields if another manager replaced it."""
        if self.is_active:
            return
        logger.debug("Reloading scene with %d spheres into the registries", len(self.spheres))
        self.from_config(self.to_config())

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a diffuse material.

        Args:
            albedo: Diffuse reflectance as (R, G, B), each in [0, 1].

        Returns:
            The unified material id.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If any albedo component is outside [0, 1].
        """
        self.activate()
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a reflective metal material.

        Args:
            albedo: Reflective tint as (R, G, B), each in [0, 1].
            fuzz: Roughness in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material id.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If the albedo or fuzz is outside [0, 1].
        """
        self.activate()
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a transparent dielectric material.

        Args:
            ior: Index of refraction. Default is 1.5 (glass).

        Returns:
            The unified material id.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If ior is not positive.
        """
        self.activate()
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere that uses an existing material.

        Args:
            center: Sphere center as (x, y, z).
            radius: Sphere radius, >= 0. A zero radius is never hit.
            material_id: A unified id returned by one of the add_*_material
                methods.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is unknown or radius is negative.
        """
        self.activate()
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

        center = _as_triple(center)
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new diffuse material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return len(self.spheres)

    # =========================================================================
    # Scene Description
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene as a declarative SceneConfig."""
        config = SceneConfig()
        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with one built from a SceneConfig.

        Materials are created in list order, so a sphere's material_id is the
        position of its material in ``config.materials``.

        Raises:
            ValueError: If a material type is unknown or any parameter is
                invalid.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(_as_triple(mat_config.get("albedo", (0.5, 0.5, 0.5))))
            elif mat_type == "metal":
                self.add_metal_material(
                    _as_triple(mat_config.get("albedo", (0.8, 0.8, 0.8))),
                    float(mat_config.get("fuzz", 0.0)),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(float(mat_config.get("ior", 1.5)))
            else:
                raise ValueError(f"Unknown material type: {mat_type!r}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_triple(sphere_config.get("center", (0.0, 0.0, 0.0))),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
            )

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a JSON-compatible dictionary."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with "materials" and "spheres" keys."""
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )
