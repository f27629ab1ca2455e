"""Host-side render loop with progressive sample accumulation.

The Renderer owns the render target for one image. Each pass traces one
jittered sample per pixel and folds it into a running average, so a caller
can stop early (fewer passes) and still read a valid, noisier image.

Example:
    >>> from raytracer.core.runtime import init_runtime
    >>> init_runtime(arch="cpu", seed=42)
    >>> from raytracer.core.renderer import Renderer, render_scene
    >>> from raytracer.core.settings import RenderSettings
    >>> from raytracer.scene.presets import create_two_sphere_scene
    >>>
    >>> settings = RenderSettings(width=400, height=225, samples_per_pixel=16)
    >>> scene, camera = create_two_sphere_scene(aspect_ratio=settings.aspect_ratio)
    >>> image = render_scene(scene, camera, settings)  # (225, 400, 3) gamma corrected
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from raytracer.camera.thin_lens import CameraConfig, setup_camera
from raytracer.core.integrator import (
    clear_render_target,
    get_linear_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from raytracer.core.runtime import get_active_seed
from raytracer.core.settings import RenderSettings
from raytracer.output.postprocess import DEFAULT_GAMMA, apply_gamma, image_to_uint8
from raytracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Callback receives (current_samples, target_samples)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Accumulates samples for one image size and depth limit.

    The scene and camera are read from the global scene and camera fields;
    set them up (SceneManager, setup_camera) before rendering.

    Attributes:
        settings: The validated settings this renderer was created with.

    Raises:
        ValueError: If settings.seed is not the seed the runtime was
            initialised with.
    """

    def __init__(self, settings: RenderSettings) -> None:
        active_seed = get_active_seed()
        if active_seed is None:
            logger.warning(
                "Runtime not initialised through init_runtime; cannot confirm seed %d",
                settings.seed,
            )
        elif settings.seed != active_seed:
            raise ValueError(
                f"settings.seed = {settings.seed} does not match the runtime seed "
                f"{active_seed}; call init_runtime(seed={settings.seed}) first"
            )

        self.settings = settings
        setup_render_target(settings.width, settings.height)

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    @property
    def sample_count(self) -> int:
        """Samples accumulated per pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard accumulated samples, keeping the image size."""
        clear_render_target()

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Accumulate samples, optionally reporting progress after each batch.

        Args:
            num_samples: Samples to add per pixel. Defaults to
                settings.samples_per_pixel.
            batch_size: Samples rendered between callbacks.
            callback: Called with (current_samples, target_samples) after each
                batch.

        Raises:
            ValueError: If num_samples is negative or batch_size is not positive.
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Accumulate samples, yielding (current_samples, target_samples) per batch.

        Stopping iteration early leaves a valid image with fewer samples.

        Example:
            >>> for current, target in renderer.render_progressive(100, batch_size=10):
            ...     print(f"{current}/{target} samples")
        """
        if num_samples is None:
            num_samples = self.settings.samples_per_pixel
        if num_samples < 0:
            raise ValueError(f"num_samples must be non-negative, got {num_samples}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples
        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.settings.max_depth)
            remaining -= batch
            current = self.sample_count
            logger.debug("Accumulated %d/%d samples per pixel", current, target_samples)
            yield (current, target_samples)

    def get_linear_image(self) -> npt.NDArray[np.float32]:
        """Averaged linear colors, shape (height, width, 3), row 0 at the top."""
        return get_linear_image_numpy()

    def get_image(self, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.float32]:
        """Clamped, gamma-corrected colors in [0, 1], shape (height, width, 3)."""
        return apply_gamma(self.get_linear_image(), gamma)

    def get_image_uint8(self, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.uint8]:
        """Gamma-corrected colors quantised to 0-255, shape (height, width, 3)."""
        return image_to_uint8(self.get_image(gamma))

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.settings.max_depth}, samples={self.sample_count})"
        )


def render_scene(
    scene: SceneManager,
    camera: CameraConfig,
    settings: RenderSettings,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.float32]:
    """Render a scene from a camera and return the display-ready image.

    Args:
        scene: The scene to render. It is reloaded into the registries if
            another SceneManager has replaced it since it was built.
        camera: Camera configuration.
        settings: Image size, samples per pixel and depth limit.
        callback: Optional progress callback, see Renderer.render.

    Returns:
        Clamped, gamma-2 corrected colors, shape (height, width, 3), row 0 at
        the top of the image.

    Raises:
        ValueError: If settings.seed is not the runtime seed.
    """
    renderer = Renderer(settings)
    scene.activate()
    setup_camera(camera)
    logger.debug(
        "Rendering %d spheres at %dx%d, %d spp, max_depth=%d",
        scene.get_sphere_count(),
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
    )
    renderer.render(callback=callback)
    logger.info(
        "Rendered %dx%d image with %d samples per pixel",
        settings.width,
        settings.height,
        renderer.sample_count,
    )
    return renderer.get_image()
