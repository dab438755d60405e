"""Scene manager coordinating spheres and shared materials.

Materials are stored per type (Lambertian, Metal, Dielectric) in their own
registries. The SceneManager hands out a single unified material_id space on
top of those registries and records, in Taichi fields, which type and
type-local index each ID maps to. The integrator dispatches on that pair.

Many spheres may reference the same material_id. Materials are never freed
individually, so a material always outlives every sphere that uses it; the
whole scene is reset at once with clear().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> glass = scene.add_dielectric_material(ior=1.5)
    >>> scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    >>> scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)  # hollow shell
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from pathtrace.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from pathtrace.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from pathtrace.materials.metal import add_metal_material, clear_metal_materials
from pathtrace.scene.world import add_sphere, clear_world, get_sphere_count

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Closed set of material variants dispatched by the integrator."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# 256 per type * 3 types
MAX_MATERIALS = 768

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a material ID, or -1 if it is unknown."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local registry index for a material ID, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def clear_materials() -> None:
    """Empty every material registry and the unified ID table."""
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    num_materials[None] = 0


@dataclass
class MaterialInfo:
    """Python-side record of a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The variant of the material.
        type_index: The index within the type-specific registry.
        params: The parameters the material was created with.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data description of a scene.

    Attributes:
        materials: Material dicts with a "type" key plus its parameters.
        spheres: Sphere dicts with "center", "radius" and "material_id".
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3(values, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds a scene of spheres with shared materials.

    Creating a SceneManager clears the world and every material registry;
    only one scene is live at a time.

    Attributes:
        materials: MaterialInfo for every registered material, by ID.
        spheres: SphereInfo for every sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        >>> scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2))
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material, in Taichi fields and locally."""
        clear_world()
        clear_materials()
        self.materials.clear()
        self.spheres.clear()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian material and return its unified ID.

        Raises:
            RuntimeError: If the Lambertian registry is full.
            ValueError: If any albedo component is outside [0, 1].
        """
        albedo = _as_vec3(albedo, "albedo")
        type_index = add_lambertian_material(albedo)
        return self._register_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal material and return its unified ID.

        Raises:
            RuntimeError: If the metal registry is full.
            ValueError: If any albedo component or the fuzz is outside [0, 1].
        """
        albedo = _as_vec3(albedo, "albedo")
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": float(fuzz)}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a dielectric material and return its unified ID.

        Raises:
            RuntimeError: If the dielectric registry is full.
            ValueError: If ior is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": float(ior)})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Look up the MaterialType of an ID outside of Taichi kernels."""
        info = self.get_material_info(material_id)
        return info.material_type if info is not None else None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere that references an existing material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed radius. Negative values give a hollow sphere.
            material_id: A unified ID returned by an add_*_material() call.

        Returns:
            The index of the sphere in the world.

        Raises:
            RuntimeError: If the world is full.
            ValueError: If material_id is unknown or radius is zero.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")

        center = _as_vec3(center, "center")
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the world."""
        return get_sphere_count()

    # =========================================================================
    # Scene Description
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a SceneConfig."""
        config = SceneConfig()
        for mat in self.materials:
            entry: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                entry[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(entry)
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the contents of a SceneConfig.

        Materials are created in order, so their IDs match the positions
        used by the sphere entries.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(mat_config.get("albedo", [0.5, 0.5, 0.5]))
            elif mat_type == "metal":
                self.add_metal_material(
                    mat_config.get("albedo", [0.8, 0.8, 0.8]),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(mat_config.get("ior", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type!r}")

        for sphere_config in config.spheres:
            self.add_sphere(
                sphere_config.get("center", [0.0, 0.0, 0.0]),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        logger.info(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a plain dict with "materials" and "spheres"."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the current scene with the contents of a to_dict() result."""
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )
