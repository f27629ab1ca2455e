"""Render settings for a single image.

Settings are validated when constructed so an invalid request fails before
any kernel runs.
"""

from dataclasses import dataclass

from raytracer.core.runtime import DEFAULT_SEED

# Maximum supported image dimensions (render buffers are preallocated to this
# size so changing resolution never recompiles kernels)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@dataclass(frozen=True)
class RenderSettings:
    """Image and sampling parameters for one render.

    Attributes:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).
        samples_per_pixel: Number of jittered camera rays averaged per pixel.
        max_depth: Maximum number of scatter events along a path. 0 means
            primary rays only (sky for misses, black for surface hits).
        seed: Seed the Taichi runtime must have been initialised with
            (``init_runtime(seed=...)``). A Renderer refuses settings whose
            seed differs from the runtime's, since the random streams are
            fixed when the runtime starts.

    Raises:
        ValueError: If any parameter is out of range.
    """

    width: int = 400
    height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")

    @property
    def aspect_ratio(self) -> float:
        """Width over height, for building a matching camera."""
        return self.width / self.height
