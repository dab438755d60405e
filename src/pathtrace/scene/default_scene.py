"""The default demo scene.

Four objects over a large ground sphere:
- Ground: yellow-green diffuse sphere of radius 100
- Center: blue diffuse sphere
- Left: hollow glass shell, an outer sphere and a slightly smaller
  negative-radius sphere sharing one dielectric material
- Right: polished gold metal sphere

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.scene.default_scene import create_default_scene
    >>> scene, camera_settings = create_default_scene()
"""

from pathtrace.config import CameraSettings
from pathtrace.scene.manager import SceneManager

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
GOLD_ALBEDO = (0.8, 0.6, 0.2)
GLASS_IOR = 1.5


def create_default_scene(scene: SceneManager | None = None) -> tuple[SceneManager, CameraSettings]:
    """Populate a scene with the default objects.

    Args:
        scene: Manager to fill. It is cleared first. A new one is created
            when omitted.

    Returns:
        Tuple of (scene, camera_settings) with the default camera placement.
    """
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    ground = scene.add_lambertian_material(GROUND_ALBEDO)
    center = scene.add_lambertian_material(CENTER_ALBEDO)
    glass = scene.add_dielectric_material(GLASS_IOR)
    gold = scene.add_metal_material(GOLD_ALBEDO, fuzz=0.0)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    return scene, CameraSettings()
