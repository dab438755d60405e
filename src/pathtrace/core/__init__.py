"""Core rendering module.

Components:
    ray: Ray data structure, vector and random sampling utilities
    color: Gamma-correcting 32-bit pixel packing
    integrator: ray_color and the frame kernel
    render_loop: Idle/playing render scheduling over a resizable buffer
"""

from .color import MAX_INTENSITY, pack_color, pack_pixel, unpack_pixel, unpack_rgba
from .ray import (
    Ray,
    cross,
    dot,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# integrator and render_loop are not imported here to avoid circular imports.
# Import them directly from pathtrace.core.integrator / pathtrace.core.render_loop.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_float",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "MAX_INTENSITY",
    "pack_color",
    "pack_pixel",
    "unpack_pixel",
    "unpack_rgba",
]
