"""Monte Carlo path tracer built on Taichi.

Renders scenes of spheres with diffuse, metallic and dielectric materials
into packed 32-bit RGBA pixel buffers.

Subpackages:
    core: Ray utilities, color packing, the integrator and the render loop
    camera: Thin-lens camera with depth of field
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: World storage, material registry and the default scene
    preview: Display sinks (PNG export, Matplotlib, Taichi GGUI)

Taichi must be initialized (see pathtrace.backend.init_taichi) before
importing the subpackages, since they declare Taichi fields at import time.
"""

__version__ = "0.1.0"
