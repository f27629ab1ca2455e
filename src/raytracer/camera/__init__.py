"""Camera models for primary ray generation."""

from .thin_lens import (
    CameraConfig,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    get_ray_through_lens,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_ray_through_lens",
    "get_camera_info",
]
