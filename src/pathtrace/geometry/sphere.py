"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the world to find the closest hit.

Spheres carry a signed radius. Dividing (point - center) by a negative
radius flips the outward normal, which turns the sphere into a hollow,
inward-facing surface. Nesting a negative-radius sphere inside a regular
one sharing the same dielectric material models a thin glass shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.geometry.sphere import Sphere, hit_sphere, vec3
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, signed radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values invert the normal.
        material_id: Unified material ID shared with the scene registry.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    A fresh record is produced by every intersection test. All fields other
    than hit are only meaningful when hit == 1.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter of the intersection.
        point: The intersection point, ray.origin + t * ray.direction.
        normal: The surface normal, always opposing the incoming ray.
        front_face: 1 if the ray arrived against the outward normal, 0 otherwise.
        material_id: The material ID of the primitive that was hit.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient a normal against the incoming ray.

    Args:
        ray: The incoming ray.
        outward_normal: The geometric outward normal at the hit point.

    Returns:
        Tuple of (normal, front_face) where front_face is 1 when
        dot(ray.direction, outward_normal) < 0.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray.direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return normal, front_face


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |origin + t * direction - center|^2 = radius^2, written as

        a*t^2 + 2*half_b*t + c = 0

    with a = dot(d, d), half_b = dot(oc, d), c = dot(oc, oc) - radius^2 and
    oc = origin - center. The nearer root is tried first; the farther one
    is used only when the nearer falls outside the accepted interval.

    Only roots with t_min < t <= t_max are accepted.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound of the accepted interval.
        t_max: Inclusive upper bound of the accepted interval.

    Returns:
        A HitRecord for the accepted root, or a miss record.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = t_min < root <= t_max

        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = t_min < root <= t_max

        if valid:
            point = ray_at(ray, root)
            # Sign follows the signed radius
            outward_normal = (point - sphere.center) / sphere.radius
            normal, front_face = set_face_normal(ray, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result
