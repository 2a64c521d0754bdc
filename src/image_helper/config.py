"""
Runtime configuration for the image pipeline.

Values can be passed explicitly or read from ``IMAGE_HELPER_*`` environment
variables via ``PipelineConfig.from_env()``.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_GRID: Tuple[int, int] = (16, 16)


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "" or value.strip().lower() == "none":
        return None
    return float(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PipelineConfig:
    """Settings shared by the loader, derivation pass and readiness gate.

    Attributes:
        default_grid: Grid cell size used when neither a slice nor its
            descriptor names one.
        batch_timeout: Seconds a batch may spend loading before pending loads
            are reported as stalled. ``None`` waits indefinitely.
        max_concurrent_loads: Upper bound on loads the host engine services
            at once. ``0`` means unbounded.
        strict_bounds: Reject slices and nine-slices that extend past the
            source image instead of logging a warning.
        encode_format: Pillow format name used for encoded fragments.
        settle_ticks: Scheduling ticks yielded to the event loop after the
            gate opens.
    """
    default_grid: Tuple[int, int] = DEFAULT_GRID
    batch_timeout: Optional[float] = None
    max_concurrent_loads: int = 0
    strict_bounds: bool = False
    encode_format: str = "PNG"
    settle_ticks: int = 1

    def __post_init__(self):
        if self.default_grid[0] <= 0 or self.default_grid[1] <= 0:
            raise ValueError(f"default_grid must be positive, got {self.default_grid}")
        if self.batch_timeout is not None and self.batch_timeout <= 0:
            raise ValueError("batch_timeout must be positive or None")
        if self.max_concurrent_loads < 0:
            raise ValueError("max_concurrent_loads must not be negative")
        if self.settle_ticks < 1:
            raise ValueError("settle_ticks must be at least 1")

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config from ``IMAGE_HELPER_*`` environment variables."""
        grid = os.getenv("IMAGE_HELPER_DEFAULT_GRID")
        default_grid = DEFAULT_GRID
        if grid:
            w, _, h = grid.lower().partition("x")
            default_grid = (int(w), int(h or w))
        return cls(
            default_grid=default_grid,
            batch_timeout=_env_float("IMAGE_HELPER_BATCH_TIMEOUT"),
            max_concurrent_loads=int(os.getenv("IMAGE_HELPER_MAX_CONCURRENT_LOADS", "0")),
            strict_bounds=_env_bool("IMAGE_HELPER_STRICT_BOUNDS", False),
            encode_format=os.getenv("IMAGE_HELPER_ENCODE_FORMAT", "PNG").upper(),
            settle_ticks=int(os.getenv("IMAGE_HELPER_SETTLE_TICKS", "1")),
        )
