"""Thin-lens camera model with depth of field.

This module implements a perspective camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (origin, look_at, world_up)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Defocus blur through a finite aperture focused at focus_distance

The camera builds an orthonormal basis from the view parameters:
- forward: points from origin toward look_at
- right: points right in the image plane
- up: points up in the image plane

The viewport is placed focus_distance in front of the origin and scaled by
the same distance, so every point on it is in perfect focus. Ray origins are
jittered across a lens disk of radius aperture / 2. An aperture of 0 gives
a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     origin=(0.0, 0.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     world_up=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtrace.core.ray import Ray, make_ray, random_in_unit_disk, vec3

# Cross products shorter than this are treated as a degenerate basis
_DEGENERATE_EPSILON = 1e-8

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ThinLensCamera:
    """Placement and lens configuration for the camera.

    Instances are immutable. Changing a parameter means building a new
    camera and calling setup_camera() again.

    Attributes:
        origin: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        world_up: Up direction used to orient the camera, usually (0, 1, 0).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables defocus blur.
        focus_distance: Distance from the origin to the plane of perfect focus.
    """

    origin: tuple[float, float, float]
    look_at: tuple[float, float, float]
    world_up: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_distance: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())

_camera_ready = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def _validate_camera(camera: ThinLensCamera) -> None:
    if camera.vfov <= 0.0 or camera.vfov >= 180.0:
        raise ValueError(f"Vertical field of view {camera.vfov} must be in (0, 180) degrees")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"Aspect ratio {camera.aspect_ratio} must be positive")
    if camera.aperture < 0.0:
        raise ValueError(f"Aperture {camera.aperture} must be non-negative")
    if camera.focus_distance <= 0.0:
        raise ValueError(f"Focus distance {camera.focus_distance} must be positive")


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis and viewport geometry from the
    provided parameters and uploads them to Taichi fields. This must be
    called before any kernel that generates primary rays.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Raises:
        ValueError: If a parameter is out of range, if origin and look_at
            coincide, or if the view direction is parallel to world_up.
    """
    _validate_camera(camera)

    theta = math.radians(camera.vfov)
    viewport_height = 2.0 * math.tan(theta / 2.0)
    viewport_width = viewport_height * camera.aspect_ratio

    origin = np.array(camera.origin, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    world_up = np.array(camera.world_up, dtype=np.float64)

    view = look_at - origin
    view_length = np.linalg.norm(view)
    if view_length < _DEGENERATE_EPSILON:
        raise ValueError("Camera origin and look_at must be distinct points")
    forward = view / view_length

    right = np.cross(forward, world_up)
    right_length = np.linalg.norm(right)
    if right_length < _DEGENERATE_EPSILON:
        raise ValueError(
            f"View direction {tuple(forward)} is parallel to world_up {camera.world_up}"
        )
    right = right / right_length

    up = np.cross(right, forward)

    # Viewport spans focus_distance units in front of the lens
    horizontal = camera.focus_distance * viewport_width * right
    vertical = camera.focus_distance * viewport_height * up
    lower_left = origin - horizontal / 2.0 - vertical / 2.0 + camera.focus_distance * forward

    _camera_origin[None] = origin.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_forward[None] = forward.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0
    _camera_ready[None] = 1


def is_camera_ready() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_ready[None])


def reset_camera() -> None:
    """Mark the camera as not set up. Renders fail until setup_camera()."""
    _camera_ready[None] = 0


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a primary ray through viewport coordinates (u, v).

    The origin is jittered over the lens disk, then the ray is aimed at
    the corresponding point on the focus plane:
    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    The direction is not normalized.

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1].

    Returns:
        A Ray leaving the lens toward the focus plane.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_right[None] * rd.x + _camera_up[None] * rd.y

    origin = _camera_origin[None]
    target = _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]

    return make_ray(origin + offset, target - origin - offset)


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(vec) -> tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, lower_left, horizontal, vertical, right, up,
        forward (3-tuples) and lens_radius (float).
    """
    return {
        "origin": _as_tuple(_camera_origin[None]),
        "lower_left": _as_tuple(_lower_left_corner[None]),
        "horizontal": _as_tuple(_viewport_horizontal[None]),
        "vertical": _as_tuple(_viewport_vertical[None]),
        "right": _as_tuple(_camera_right[None]),
        "up": _as_tuple(_camera_up[None]),
        "forward": _as_tuple(_camera_forward[None]),
        "lens_radius": float(_lens_radius[None]),
    }
