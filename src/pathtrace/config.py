"""Render and camera settings.

Both settings objects are plain dataclasses that validate themselves on
construction, so out-of-range values are rejected before they can reach a
kernel. Interactive front ends that let a slider run past the valid range
use RenderSettings.clamped() to coerce values instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathtrace.camera.thin_lens import ThinLensCamera

# Up direction shared by every camera built from CameraSettings
WORLD_UP = (0.0, 1.0, 0.0)

# Smallest gamma accepted after clamping
MIN_GAMMA = 0.01

# Shortest view or right vector accepted when building a camera basis
_DEGENERATE_EPSILON = 1e-8

DEFAULT_SAMPLES_PER_PIXEL = 64
DEFAULT_BOUNCE_LIMIT = 10
DEFAULT_GAMMA = 1.05


@dataclass(frozen=True)
class RenderSettings:
    """Sampling and tone-mapping settings for one frame.

    Attributes:
        samples_per_pixel: Jittered samples averaged per pixel (>= 1).
        bounce_limit: Maximum path segments per sample (>= 0). 0 renders black.
        gamma: Display gamma applied as pow(x, 1 / gamma) (> 0).
    """

    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    bounce_limit: int = DEFAULT_BOUNCE_LIMIT
    gamma: float = DEFAULT_GAMMA

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.bounce_limit < 0:
            raise ValueError(f"bounce_limit must be >= 0, got {self.bounce_limit}")
        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be > 0, got {self.gamma}")

    @classmethod
    def clamped(
        cls,
        samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
        bounce_limit: int = DEFAULT_BOUNCE_LIMIT,
        gamma: float = DEFAULT_GAMMA,
    ) -> RenderSettings:
        """Build settings, coercing out-of-range values into range.

        samples_per_pixel is raised to 1, bounce_limit to 0 and gamma to
        MIN_GAMMA.
        """
        return cls(
            samples_per_pixel=max(1, int(samples_per_pixel)),
            bounce_limit=max(0, int(bounce_limit)),
            gamma=max(MIN_GAMMA, float(gamma)),
        )

    def with_changes(self, **changes) -> RenderSettings:
        """Return a copy with some fields replaced (validated again)."""
        return replace(self, **changes)


@dataclass(frozen=True)
class CameraSettings:
    """User-facing camera placement.

    The aspect ratio is not part of the settings: it follows the size of
    the buffer being rendered, see build().

    Attributes:
        origin: Camera position.
        look_at: Point the camera looks at.
        vfov: Vertical field of view in degrees, in (0, 180).
        aperture: Lens diameter (>= 0). 0 gives a pinhole camera.
        focus_distance: Distance to the plane of perfect focus (> 0).
        world_up: Up direction, fixed to WORLD_UP by default.
    """

    origin: tuple[float, float, float] = (0.0, 4.0, 5.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vfov: float = 90.0
    aperture: float = 0.1
    focus_distance: float = 10.0
    world_up: tuple[float, float, float] = WORLD_UP

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be >= 0, got {self.aperture}")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance must be > 0, got {self.focus_distance}")

        # A zero-length view, or one along world_up, has no camera basis
        view = [b - a for a, b in zip(self.origin, self.look_at)]
        view_length = math.hypot(*view)
        if view_length < _DEGENERATE_EPSILON:
            raise ValueError(f"origin and look_at must be distinct points, got {tuple(self.origin)}")
        ux, uy, uz = self.world_up
        vx, vy, vz = (c / view_length for c in view)
        right = (vy * uz - vz * uy, vz * ux - vx * uz, vx * uy - vy * ux)
        if math.hypot(*right) < _DEGENERATE_EPSILON:
            raise ValueError(
                f"View direction from origin to look_at is parallel to world_up {tuple(self.world_up)}"
            )

    def build(self, aspect_ratio: float) -> ThinLensCamera:
        """Create the immutable camera for a given image aspect ratio."""
        # Imported here so settings can be built before Taichi is initialized
        from pathtrace.camera.thin_lens import ThinLensCamera

        return ThinLensCamera(
            origin=tuple(self.origin),
            look_at=tuple(self.look_at),
            world_up=tuple(self.world_up),
            vfov=self.vfov,
            aspect_ratio=aspect_ratio,
            aperture=self.aperture,
            focus_distance=self.focus_distance,
        )

    def with_changes(self, **changes) -> CameraSettings:
        return replace(self, **changes)
