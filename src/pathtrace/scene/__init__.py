"""Scene module: world storage, material registry and the default scene.

Components:
    world: Insertion-ordered sphere storage and closest-hit queries
    manager: Unified material IDs over the per-type registries
    default_scene: The demo scene with a ground, diffuse, glass and metal sphere
"""

from .default_scene import create_default_scene
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    clear_materials,
    get_material_type,
    get_material_type_index,
)
from .world import MAX_SPHERES, add_sphere, clear_world, get_sphere_count, hit_world

__all__ = [
    # World
    "MAX_SPHERES",
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "hit_world",
    # Manager
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "clear_materials",
    "get_material_type",
    "get_material_type_index",
    # Default scene
    "create_default_scene",
]
