"""Radiance estimator and per-pixel sample accumulation.

A camera ray is followed through the scene: at each hit the material decides
whether the ray scatters (multiplying the path throughput by its attenuation)
or is absorbed; a ray that escapes picks up the sky gradient. The recursion
of the textbook formulation is unrolled into a loop over a running
throughput, which gives the same color for the same random draws.

Depth semantics: ``max_depth`` bounds the number of scatter events. A path
makes at most ``max_depth + 1`` closest-hit queries. If the last query still
hits a surface, the path returns black.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera.thin_lens import setup_camera
    >>> from raytracer.core.integrator import render_image, setup_render_target
    >>> from raytracer.scene.presets import create_two_sphere_scene
    >>>
    >>> scene, camera = create_two_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=16, max_depth=50)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.camera.thin_lens import get_ray_jittered
from raytracer.core.ray import safe_normalize, vec3
from raytracer.core.settings import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from raytracer.materials.dielectric import get_dielectric_ior, scatter_dielectric
from raytracer.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from raytracer.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from raytracer.scene.manager import MaterialType, get_material_type, get_material_type_index
from raytracer.scene.world import intersect_world

# =============================================================================
# Rendering Constants
# =============================================================================

# Hits closer than T_MIN are ignored so scattered rays do not re-hit the
# surface they start on
T_MIN = 1e-3
T_MAX = 1e10

SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running average of samples, indexed [i, j] with j = 0 at the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Staging fields for trace_ray
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_scatter_count = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the accumulation buffers.

    Raises:
        ValueError: If either dimension is not positive or exceeds the
            preallocated maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def reset_render_target() -> None:
    """Clear the buffers and mark the target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Background and Material Dispatch
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical white to sky-blue gradient seen by rays that escape the scene."""
    unit_direction = safe_normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_WHITE + t * SKY_BLUE


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch on the material type of the hit surface.

    Returns:
        A tuple (scattered_direction, attenuation, did_scatter). An unknown
        material id absorbs the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation = scatter_lambertian(albedo, normal)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            ior, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def trace_radiance(origin: vec3, direction: vec3, max_depth: ti.i32):
    """Estimate the radiance arriving along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of scatter events.

    Returns:
        A tuple (color, scatter_count) where scatter_count is the number of
        material scatter evaluations made, at most max_depth.
    """
    ray_origin = origin
    ray_direction = direction
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    scatter_count = 0

    # Taichi functions cannot return from inside a loop
    active = 1

    for bounce in range(max_depth + 1):
        if active == 1:
            rec = intersect_world(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            elif bounce == max_depth:
                # No scatter events left; the path contributes nothing
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )
                scatter_count += 1

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color, scatter_count


@ti.func
def _sanitize_sample(color: vec3) -> vec3:
    """Zero any NaN or infinite channel of a single sample."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one jittered sample through every pixel and fold it into the average."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        color, _ = trace_radiance(ray.origin, ray.direction, max_depth)
        color = _sanitize_sample(color)

        _sample_count[i, j] += 1
        n = _sample_count[i, j]
        # avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


@ti.kernel
def _trace_probe(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
):
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        color, scatter_count = trace_radiance(vec3(ox, oy, oz), vec3(dx, dy, dz), max_depth)
        _probe_color[None] = color
        _probe_scatter_count[None] = scatter_count


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
) -> tuple[tuple[float, float, float], int]:
    """Estimate radiance for a single ray from Python.

    Uses the current scene and materials. Intended for testing and
    debugging; rendering goes through render_image.

    Returns:
        Tuple of ((R, G, B), scatter_count).

    Raises:
        ValueError: If max_depth is negative.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    _trace_probe(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], max_depth
    )
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2])), int(_probe_scatter_count[None])


def render_image(num_samples: int = 1, max_depth: int = 50) -> None:
    """Accumulate num_samples more samples into every pixel.

    Can be called repeatedly; the buffer holds the running average over all
    samples so far.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Samples accumulated per pixel (every pixel holds the same count)."""
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_linear_image_numpy() -> np.ndarray:
    """Averaged linear-space colors as a (height, width, 3) float32 array.

    Row 0 is the top of the image. Values are not clamped.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    image = _color_buffer.to_numpy()[:width, :height, :]
    # (width, height, 3) -> (height, width, 3), then put the top row first
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)
    return np.ascontiguousarray(image, dtype=np.float32)
