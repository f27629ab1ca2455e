"""Taichi runtime initialisation.

Modules that declare fields (scene, materials, camera, integrator) allocate
them at import time, so ``init_runtime`` has to run before those imports.
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42

# Seed passed to the last init_runtime call, None before the first one
_active_seed: int | None = None


def init_runtime(arch: str = "cpu", seed: int = DEFAULT_SEED) -> None:
    """Initialise Taichi with a fixed random seed.

    Args:
        arch: "cpu" or "gpu". Taichi itself falls back to the CPU backend
            when a GPU backend is requested but unavailable.
        seed: Seed for Taichi's per-thread random generators.

    Raises:
        ValueError: If arch is not "cpu" or "gpu", or seed is negative.
    """
    global _active_seed

    if arch not in ("cpu", "gpu"):
        raise ValueError(f"Unknown arch {arch!r}; expected 'cpu' or 'gpu'")
    if seed < 0:
        raise ValueError(f"Random seed must be non-negative, got {seed}")

    ti.init(arch=ti.gpu if arch == "gpu" else ti.cpu, random_seed=seed)
    _active_seed = seed
    logger.info("Initialised Taichi runtime (requested arch=%s, seed=%d)", arch, seed)


def get_active_seed() -> int | None:
    """Seed the runtime was initialised with, or None if init_runtime was never called."""
    return _active_seed
