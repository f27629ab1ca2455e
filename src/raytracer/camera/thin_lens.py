"""Thin-lens camera model for primary ray generation.

The camera supports:
- Look-at positioning (look_from, look_at, vup)
- Vertical field of view and arbitrary aspect ratios
- Depth of field through a finite aperture focused at ``focus_dist``

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport lies on the focus plane, ``focus_dist`` in front of the camera.
Rays start at a random point on the lens disk (radius aperture / 2) and aim
at the viewport point for (s, t), so only the focus plane is sharp. With a
zero aperture this reduces to a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera.thin_lens import CameraConfig, setup_camera, get_ray
    >>> camera = CameraConfig(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>> # Inside a kernel: ray = get_ray(0.5, 0.5)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from raytracer.core.ray import Ray, make_ray, safe_normalize, vec3
from raytracer.core.sampler import jitter_pixel, random_in_unit_disk

logger = logging.getLogger(__name__)

# Minimum |cross(vup, w)| for a usable camera frame
PARALLEL_EPSILON = 1e-8


@dataclass
class CameraConfig:
    """User-facing camera parameters.

    Attributes:
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at (x, y, z).
        vup: Up direction used to fix the camera roll.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_dist: Distance from the camera to the plane in perfect focus.

    Raises:
        ValueError: If any parameter is out of range or the frame is
            degenerate (look_from == look_at, or vup parallel to the view
            direction).
    """

    look_from: tuple[float, float, float] = (0.0, 0.0, 0.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        for name in ("look_from", "look_at", "vup"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"{name} must have 3 components, got {value!r}")
            setattr(self, name, tuple(float(c) for c in value))

        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if not self.aperture >= 0.0:
            raise ValueError(f"aperture = {self.aperture} must be non-negative")
        if not self.focus_dist > 0.0:
            raise ValueError(f"focus_dist = {self.focus_dist} must be positive")

        view = np.subtract(self.look_from, self.look_at)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("look_from and look_at must be different points")
        w = view / np.linalg.norm(view)
        if np.linalg.norm(np.cross(self.vup, w)) < PARALLEL_EPSILON:
            raise ValueError(f"vup {self.vup} is zero or parallel to the view direction")

    @property
    def lens_radius(self) -> float:
        return self.aperture / 2.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Viewport on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: CameraConfig) -> None:
    """Derive the camera frame and viewport and store them in fields.

    Must be called from Python before rendering. The basis is computed in
    float64 with NumPy and stored as float32.

    Args:
        camera: Validated camera configuration.
    """
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    look_from = np.array(camera.look_from, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = look_from - look_at
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = look_from - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = look_from.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.lens_radius

    logger.debug(
        "Camera at %s looking at %s, vfov=%.1f, aperture=%.3f, focus_dist=%.3f",
        camera.look_from,
        camera.look_at,
        camera.vfov,
        camera.aperture,
        camera.focus_dist,
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray_through_lens(s: ti.f32, t: ti.f32, disk_point: vec3) -> Ray:
    """Ray through image coordinates (s, t) from a given lens sample.

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).
        disk_point: Point (x, y, 0) in the unit disk; scaled by the lens
            radius and placed on the lens plane.

    Returns:
        A Ray with unit direction aimed at the focus plane point for (s, t).
    """
    rd = _lens_radius[None] * disk_point
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None] + offset

    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    return make_ray(origin, safe_normalize(target - origin))


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Ray through (s, t) with a random lens sample for depth of field."""
    return get_ray_through_lens(s, t, random_in_unit_disk())


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Ray through a random point inside pixel (pixel_i, pixel_j).

    Pixel row 0 is the bottom of the image.
    """
    s, t = jitter_pixel(pixel_i, pixel_j, width, height)
    return get_ray(s, t)


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Current camera state for inspection.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (as tuples) and lens_radius.
    """

    def _triple(field) -> tuple[float, float, float]:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _triple(_camera_origin),
        "u": _triple(_camera_u),
        "v": _triple(_camera_v),
        "w": _triple(_camera_w),
        "horizontal": _triple(_viewport_horizontal),
        "vertical": _triple(_viewport_vertical),
        "lower_left": _triple(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
