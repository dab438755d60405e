"""Ray data structure and vector utilities for Monte Carlo path tracing.

This module provides the fundamental Ray dataclass together with the vector
and random sampling helpers shared by the camera, the sphere primitive and
the materials. All helpers are Taichi functions, callable from kernels only.

Random numbers come from ``ti.random``, which gives every Taichi thread its
own generator. The streams are seeded once by ``ti.init(random_seed=...)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.ray import Ray, ray_at, vec3
    >>>
    >>> @ti.kernel
    ... def probe() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; intersection and shading normalize where needed.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    No range check is made. Negative t lies behind the origin and callers
    restrict the usable interval themselves.

    Args:
        ray: The ray to evaluate.
        t: The parameter value.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero-length input yields NaN components, as in ``tm.normalize``.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        incident - 2 * dot(incident, normal) * normal.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal facing the incident ray (normalized).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction, or a zero vector on total internal reflection.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        result = eta * incident + (eta * cos_i - cos_t) * normal
    return result


@ti.func
def schlick_reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Schlick's polynomial approximation of the Fresnel reflectance.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        refraction_ratio: Ratio of refractive indices across the surface.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = ((1.0 - refraction_ratio) / (1.0 + refraction_ratio)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is within 1e-8 of zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_float(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Uniform random float in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f32)


@ti.func
def random_vec3(lo: ti.f32, hi: ti.f32) -> vec3:
    """Random vector with each component uniform in [lo, hi)."""
    return vec3(random_float(lo, hi), random_float(lo, hi), random_float(lo, hi))


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling to generate uniformly distributed points
    within the unit sphere.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = random_vec3(-1.0, 1.0)
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector, uniformly distributed on the sphere."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used to jitter primary ray origins across the camera lens.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(100):
        if not found:
            p = vec3(random_float(-1.0, 1.0), random_float(-1.0, 1.0), 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
