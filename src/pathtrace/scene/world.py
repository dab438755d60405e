"""World: the ordered collection of spheres in the scene.

Spheres are stored in insertion order in Taichi fields and tested with a
linear scan. The closest hit wins regardless of insertion order: each
sphere is tested against the shrinking interval (t_min, closest_so_far],
so a later sphere can only replace an accepted hit with a strictly
usable closer one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.scene.world import add_sphere, clear_world, hit_world
    >>> clear_world()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use hit_world within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray
from pathtrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the world
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove every sphere from the world.

    Resets the sphere count to zero. Field data is overwritten as new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Append a sphere to the world.

    Args:
        center: The center point of the sphere.
        radius: The signed radius. Negative values give an inward-facing
            (hollow) sphere.
        material_id: The unified material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the world."""
    return int(num_spheres[None])


@ti.func
def get_sphere(idx: ti.i32) -> Sphere:
    return Sphere(
        center=sphere_centers[idx],
        radius=sphere_radii[idx],
        material_id=sphere_material_ids[idx],
    )


@ti.func
def hit_world(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the closest sphere hit along a ray.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound of the accepted interval.
        t_max: Inclusive upper bound of the accepted interval.

    Returns:
        The HitRecord of the nearest sphere, or a miss record.
    """
    closest_so_far = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
