"""Geometry module. Spheres are the only primitive."""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "set_face_normal",
]
