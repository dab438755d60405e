"""Materials module for light scattering.

Components:
    lambertian: Diffuse reflection (mirror lobe plus random unit vector)
    metal: Specular reflection with optional fuzz
    dielectric: Clear glass-like materials with Schlick-weighted refraction

Each material type keeps its own registry in Taichi fields and exposes:
    - scatter_*(): Compute (scattered_direction, attenuation, did_scatter)
    - scatter_*_by_id(): Same, looking parameters up by registry index
    - add_*_material() / clear_*_materials() / get_*_material_count()
"""

from .dielectric import (
    add_dielectric_material,
    cannot_refract,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    scatter_dielectric_with_sample,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_with_sample",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "cannot_refract",
]
