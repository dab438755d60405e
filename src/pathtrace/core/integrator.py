"""Path tracing integrator for Monte Carlo light transport.

This module turns the scene and camera into a frame of packed pixels. For
every pixel it fires samples_per_pixel jittered primary rays, follows each
through the scene by material scattering, averages the radiance and packs
the gamma-corrected result into a 32-bit RGBA value.

Radiance along a path is evaluated iteratively with a throughput product.
The result matches the recursive definition

    ray_color(ray, 0)      = black
    ray_color(ray, depth)  = sky(ray)                               on a miss
                           = black                                  if absorbed
                           = attenuation * ray_color(scattered, depth - 1)

Key features:
    - Material dispatch on the closed MaterialType set
    - Sky gradient from white to (0.5, 0.7, 1.0) for escaped rays
    - t_min of 0.001 to keep bounced rays from re-hitting their own surface
    - One parallel kernel per frame; each Taichi thread draws from its own
      random stream

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.config import CameraSettings, RenderSettings
    >>> from pathtrace.core.integrator import render
    >>> from pathtrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera_settings = create_default_scene()
    >>> pixels = render(320, 180, RenderSettings(samples_per_pixel=8), camera_settings)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtrace.camera.thin_lens import get_ray, is_camera_ready, setup_camera
from pathtrace.config import CameraSettings, RenderSettings
from pathtrace.core.color import pack_color
from pathtrace.core.ray import Ray, make_ray, normalize
from pathtrace.materials.dielectric import scatter_dielectric_by_id
from pathtrace.materials.lambertian import scatter_lambertian_by_id
from pathtrace.materials.metal import scatter_metal_by_id
from pathtrace.scene.manager import MaterialType, get_material_type, get_material_type_index
from pathtrace.scene.world import hit_world

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection
T_MIN = 0.001
T_MAX = math.inf

SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background gradient for rays that escape the scene.

    Blends white at t = 0 to sky blue at t = 1, where
    t = 0.5 * (normalize(direction).y + 1).
    """
    t = 0.5 * (normalize(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON + t * SKY_ZENITH


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scatter function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal, facing the incoming ray.
        front_face: 1 if the ray hit the outside of the surface, else 0.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(initial_ray: Ray, bounce_limit: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        initial_ray: The ray to follow.
        bounce_limit: Maximum number of intersections along the path.
            0 or less returns black.

    Returns:
        The estimated radiance (RGB).
    """
    ray = initial_ray
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Taichi has no break out of a ti.func loop; paths end by clearing active
    active = 1

    for _ in range(bounce_limit):
        if active == 1:
            rec = hit_world(ray, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * sky_color(ray.direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray.direction, rec.normal, rec.front_face
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray = make_ray(rec.point, scattered_direction)

    # A path still active here ran out of bounces and contributes black
    return radiance


@ti.func
def sample_pixel(
    i: ti.i32,
    j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    bounce_limit: ti.i32,
) -> vec3:
    """Sum samples_per_pixel radiance samples for pixel (i, j).

    Row j = 0 is the top of the image, so v is flipped. u and v divide by
    width and height (not width - 1) so 1-pixel buffers stay well defined.
    """
    color_sum = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        u = (ti.cast(i, ti.f32) + ti.random(ti.f32)) / ti.cast(width, ti.f32)
        v = 1.0 - (ti.cast(j, ti.f32) + ti.random(ti.f32)) / ti.cast(height, ti.f32)
        color_sum += ray_color(get_ray(u, v), bounce_limit)
    return color_sum


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(
    pixels: ti.types.ndarray(dtype=ti.u32, ndim=2),
    samples_per_pixel: ti.i32,
    bounce_limit: ti.i32,
    gamma: ti.f32,
):
    height = pixels.shape[0]
    width = pixels.shape[1]
    for j, i in ti.ndrange(height, width):
        color_sum = sample_pixel(i, j, width, height, samples_per_pixel, bounce_limit)
        pixels[j, i] = pack_color(color_sum, samples_per_pixel, gamma)


_traced_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, bounce_limit: ti.i32):
    # Top-level loops run in parallel, so the bounce loop is nested one level down
    for _ in range(1):
        _traced_color[None] = ray_color(make_ray(origin, direction), bounce_limit)


# =============================================================================
# Public Rendering API
# =============================================================================


def allocate_buffer(width: int, height: int) -> npt.NDArray[np.uint32]:
    """Allocate a zeroed (height, width) pixel buffer."""
    return np.zeros((height, width), dtype=np.uint32)


def render_frame(pixels: npt.NDArray[np.uint32], settings: RenderSettings) -> None:
    """Render one complete frame into an existing buffer.

    The call returns once every pixel has been written. A buffer with zero
    width or height is left untouched.

    Args:
        pixels: Row-major (height, width) uint32 buffer, written in place.
        settings: Sampling and tone-mapping settings.

    Raises:
        ValueError: If the buffer is not a 2D uint32 array.
        RuntimeError: If no camera has been set up.
    """
    if pixels.dtype != np.uint32 or pixels.ndim != 2:
        raise ValueError(f"Expected a 2D uint32 buffer, got {pixels.ndim}D {pixels.dtype}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        return
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    _render_frame(pixels, settings.samples_per_pixel, settings.bounce_limit, settings.gamma)


def render(
    width: int,
    height: int,
    settings: RenderSettings,
    camera_settings: CameraSettings,
) -> npt.NDArray[np.uint32]:
    """Set up the camera for width x height and render a new buffer.

    Returns:
        The packed (height, width) pixel buffer.
    """
    pixels = allocate_buffer(width, height)
    if width > 0 and height > 0:
        setup_camera(camera_settings.build(width / height))
        render_frame(pixels, settings)
    return pixels


def trace_ray_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    bounce_limit: int,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray from Python.

    Useful for tests and for probing a scene without setting up a camera.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    _trace_single_ray(vec3(*origin), vec3(*direction), bounce_limit)
    color = _traced_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))
