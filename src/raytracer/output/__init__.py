"""Image post-processing: clamping, gamma correction and quantisation."""

from .postprocess import (
    DEFAULT_GAMMA,
    apply_gamma,
    clamp_image,
    compute_rmse,
    image_to_uint8,
    mean_pixel_variance,
)

__all__ = [
    "DEFAULT_GAMMA",
    "clamp_image",
    "apply_gamma",
    "image_to_uint8",
    "compute_rmse",
    "mean_pixel_variance",
]
