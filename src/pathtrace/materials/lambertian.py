"""Lambertian (diffuse) material implementation.

The scattered direction is the mirror reflection of the incoming ray plus a
random unit vector:

    scattered = reflect(normalize(d), n) + normalize(random_vec3(-1, 1))

This mixes a specular lobe with an isotropic perturbation instead of the
textbook ``n + random_unit_vector()`` diffuse lobe. The result is kept as the
defined look of the renderer. A scatter that lands on a near-zero vector
falls back to the surface normal. Lambertian surfaces always scatter and
attenuate by their albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(
    >>> #     albedo, incident_direction, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import near_zero, normalize, random_vec3, reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, incident_direction: vec3, normal: vec3):
    """Compute the scattered direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal at the hit point, facing the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is always 1 and attenuation equals albedo.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + normalize(random_vec3(-1.0, 1.0))

    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing entries are overwritten as
    new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The index of the added material within the Lambertian registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Albedo component {i} = {component} is outside [0, 1]")

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, incident_direction: vec3, normal: vec3):
    """Scatter off a Lambertian material looked up by registry index.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, incident_direction, normal)
