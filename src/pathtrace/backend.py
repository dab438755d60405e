"""Taichi backend initialization.

Taichi must be initialized before any module that declares fields is
imported (the camera, world, material registries and integrator all do).
Front ends call init_taichi() first and import the rest afterwards.

Every Taichi thread owns an independent random stream; random_seed seeds
all of them. max_threads=1 on the CPU backend gives a strictly
single-threaded, reproducible render.
"""

import logging
import platform

import taichi as ti

logger = logging.getLogger(__name__)

# Seed used when callers do not pick one
DEFAULT_RANDOM_SEED = 42

_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


def _init(arch, random_seed: int, max_threads: int | None) -> None:
    kwargs = {"arch": arch, "random_seed": random_seed}
    if max_threads is not None:
        kwargs["cpu_max_num_threads"] = max_threads
    ti.init(**kwargs)


def _running_on_cpu() -> bool:
    # ti.init() falls back to the CPU instead of raising when a GPU arch is missing
    return ti.lang.impl.current_cfg().arch == ti.cpu


def init_taichi(
    arch: str = "auto",
    random_seed: int = DEFAULT_RANDOM_SEED,
    max_threads: int | None = None,
) -> str:
    """Initialize Taichi and report which backend is in use.

    Args:
        arch: "auto", or one of "cpu", "gpu", "cuda", "vulkan", "metal".
            "auto" prefers Metal on macOS, then any GPU, then the CPU.
        random_seed: Seed for the per-thread random generators.
        max_threads: Cap on CPU worker threads. 1 forces a single thread
            and implies the CPU backend.

    Returns:
        Name of the backend actually in use. A GPU request that Taichi
        served on the CPU reports "CPU".

    Raises:
        ValueError: If arch is unknown or max_threads is less than 1.
    """
    if max_threads is not None and max_threads < 1:
        raise ValueError(f"max_threads must be >= 1, got {max_threads}")

    if max_threads == 1:
        arch = "cpu"

    if arch != "auto":
        if arch not in _ARCHES:
            raise ValueError(f"Unknown arch {arch!r}; expected auto or one of {sorted(_ARCHES)}")
        _init(_ARCHES[arch], random_seed, max_threads)
        name = arch.upper()
        if arch != "cpu" and _running_on_cpu():
            logger.warning("Backend %s unavailable, Taichi fell back to the CPU", name)
            name = "CPU"
        logger.info("Taichi initialized on %s (seed=%d)", name, random_seed)
        return name

    candidates = [("Metal (GPU)", ti.metal)] if platform.system() == "Darwin" else []
    candidates.append(("GPU", ti.gpu))
    for name, candidate in candidates:
        try:
            _init(candidate, random_seed, max_threads)
        except Exception as exc:  # Taichi raises backend-specific errors
            logger.debug("Backend %s unavailable: %s", name, exc)
            continue
        if _running_on_cpu():
            logger.debug("Backend %s unavailable, Taichi fell back to the CPU", name)
            break
        logger.info("Taichi initialized on %s (seed=%d)", name, random_seed)
        return name
    else:
        _init(ti.cpu, random_seed, max_threads)

    logger.info("Taichi initialized on CPU (seed=%d)", random_seed)
    return "CPU"
