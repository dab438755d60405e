"""Dielectric (glass/water) material implementation.

This module implements clear transparent materials that both reflect and
refract light.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when refraction_ratio * sin(theta) > 1

For every hit the material picks reflection or refraction. It reflects when
refraction is impossible or when the Schlick reflectance exceeds a uniform
random draw, and refracts otherwise. Glass is colorless, so the attenuation
is always white and the ray is never absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import normalize, reflect, refract, schlick_reflectance

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices across the surface.

    Entering the material (front_face=1) gives 1 / ior, leaving it gives ior.
    """
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def _cos_theta(unit_direction: vec3, normal: vec3) -> ti.f32:
    return tm.min(tm.dot(-unit_direction, normal), 1.0)


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, else 0.

    Returns:
        1 if refraction_ratio * sin(theta) > 1, 0 otherwise.
    """
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = _cos_theta(normalize(incident_direction), normal)
    sin_theta = tm.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))
    return 1 if ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance for a ray hitting the surface.

    Returns:
        The Fresnel reflectance coefficient in [0, 1].
    """
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = _cos_theta(normalize(incident_direction), normal)
    return schlick_reflectance(cos_theta, ratio)


@ti.func
def scatter_dielectric_with_sample(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    xi: ti.f32,
):
    """Scatter off a dielectric using a caller-supplied uniform sample.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, else 0.
        xi: Uniform sample in [0, 1) compared against the reflectance.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    ratio = refraction_ratio_for(ior, front_face)
    unit_direction = normalize(incident_direction)

    cos_theta = _cos_theta(unit_direction, normal)
    sin_theta = tm.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))
    total_internal = ratio * sin_theta > 1.0
    reflectance = schlick_reflectance(cos_theta, ratio)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if total_internal or reflectance > xi:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, vec3(1.0, 1.0, 1.0), 1


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        attenuation is white and did_scatter is always 1.
    """
    return scatter_dielectric_with_sample(
        ior, incident_direction, normal, front_face, ti.random(ti.f32)
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass). Values
            below 1 are accepted and model a material optically thinner than
            its surroundings.

    Returns:
        The index of the added material within the dielectric registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter off a dielectric material looked up by registry index.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, normal, front_face)
