"""Host-side image post-processing and statistics.

The renderer produces linear-space colors. Before display they are clamped to
[0, 1], gamma corrected (gamma 2, i.e. a square root per channel) and, if
needed, quantised to 8 bits. Encoding to a file format is left to the caller.
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

DEFAULT_GAMMA = 2.0

# Scale used for 8-bit quantisation; 1.0 maps to 255
QUANTIZE_SCALE = 255.99


def clamp_image(image: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Clamp every channel to [0, 1]. NaN channels become 0."""
    arr = np.nan_to_num(np.asarray(image, dtype=np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(arr, 0.0, 1.0)


def apply_gamma(image: npt.ArrayLike, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.float32]:
    """Clamp to [0, 1] and raise each channel to 1 / gamma.

    Args:
        image: Linear-space colors of any shape.
        gamma: Display gamma. The default 2.0 takes the square root.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    clamped = clamp_image(image)
    if gamma == 2.0:
        return np.sqrt(clamped)
    return np.power(clamped, 1.0 / gamma).astype(np.float32)


def image_to_uint8(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Quantise display-space colors in [0, 1] to 0-255.

    Each channel maps to ``int(255.99 * c)``; values are clamped first so the
    result never wraps.
    """
    scaled = np.floor(QUANTIZE_SCALE * clamp_image(image))
    return np.clip(scaled, 0, 255).astype(np.uint8)


def compute_rmse(a: npt.ArrayLike, b: npt.ArrayLike) -> float:
    """Root mean squared difference between two images of the same shape."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Image shapes differ: {a.shape} vs {b.shape}")
    return float(np.sqrt(np.mean((a - b) ** 2)))


def mean_pixel_variance(images: Sequence[npt.ArrayLike]) -> float:
    """Variance across repeated renders, averaged over pixels and channels.

    Args:
        images: Two or more renders of the same scene with the same shape.

    Raises:
        ValueError: If fewer than two images are given or shapes differ.
    """
    if len(images) < 2:
        raise ValueError(f"Need at least 2 images to measure variance, got {len(images)}")
    stack = np.stack([np.asarray(img, dtype=np.float64) for img in images])
    return float(np.mean(np.var(stack, axis=0)))
