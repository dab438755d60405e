"""Metal (specular reflective) material implementation.

Metals reflect the incoming ray about the surface normal. A fuzz parameter
perturbs the reflected direction by a random point in the unit sphere, which
blurs the reflection:

    scattered = reflect(normalize(d), n) + fuzz * random_in_unit_sphere()

When the perturbed direction points below the surface the ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import normalize, random_in_unit_sphere, reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, incident_direction: vec3, normal: vec3):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The reflection blur in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The perturbed reflection, or zero if absorbed.
        - attenuation: The albedo.
        - did_scatter: 1 if the ray left above the surface, 0 if absorbed.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0
        scattered_direction = vec3(0.0, 0.0, 0.0)

    return scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple, components in [0, 1].
        fuzz: Reflection blur in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material within the metal registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component or the fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Albedo component {i} = {component} is outside [0, 1]")

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum blur)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, incident_direction: vec3, normal: vec3):
    """Scatter off a metal material looked up by registry index.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, normal)
