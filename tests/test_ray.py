"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utilities (reflect, refract, schlick_reflectance, near_zero)
- Random sampling helpers
"""

import math

import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """ray_at(0) is the origin."""
        from pathtrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_scales_unnormalized_direction(self):
        """The direction is used as given, without normalization."""
        from pathtrace.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(2.0, 0.0, 0.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1]) < 1e-6

    def test_ray_at_negative_t(self):
        """Negative t lies behind the origin and is not rejected."""
        from pathtrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, -3.0)

        test_kernel()
        assert abs(result[None][2] - 3.0) < 1e-6


class TestVectorUtilities:
    """Tests for reflection, refraction and helpers."""

    def test_reflect(self):
        """Reflecting (1, -1, 0) about +Y gives (1, 1, 0)."""
        from pathtrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_refract_normal_incidence_passes_straight(self):
        """A ray along the normal is not bent, whatever the ratio."""
        from pathtrace.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1] + 1.0) < 1e-6

    def test_refract_obeys_snell(self):
        """sin(theta_t) = eta * sin(theta_i) for a 45 degree ray into glass."""
        from pathtrace.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        eta = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            s = 1.0 / ti.sqrt(2.0)
            result[None] = refract(vec3(s, -s, 0.0), vec3(0.0, 1.0, 0.0), eta)

        test_kernel()
        r = result[None]
        length = math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2)
        assert abs(length - 1.0) < 1e-5
        assert abs(r[0] / length - eta * math.sqrt(0.5)) < 1e-5
        assert r[1] < 0.0

    def test_refract_total_internal_reflection_returns_zero(self):
        """Leaving glass at a grazing angle cannot refract."""
        from pathtrace.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(vec3(1.0, -0.2, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6 and abs(r[1]) < 1e-6 and abs(r[2]) < 1e-6

    def test_schlick_reflectance(self):
        """Schlick gives r0 at normal incidence and 1 at grazing incidence."""
        from pathtrace.core.ray import schlick_reflectance

        normal_result = ti.field(dtype=ti.f32, shape=())
        grazing_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal_result[None] = schlick_reflectance(1.0, 1.5)
            grazing_result[None] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        r0 = ((1.0 - 1.5) / (1.0 + 1.5)) ** 2
        assert abs(normal_result[None] - r0) < 1e-6
        assert abs(grazing_result[None] - 1.0) < 1e-6

    def test_near_zero(self):
        """near_zero only accepts vectors within 1e-8 on every axis."""
        from pathtrace.core.ray import near_zero, vec3

        tiny = ti.field(dtype=ti.i32, shape=())
        small = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            tiny[None] = near_zero(vec3(1e-9, -1e-9, 0.0))
            small[None] = near_zero(vec3(1e-9, 1e-6, 0.0))

        test_kernel()
        assert tiny[None] == 1
        assert small[None] == 0


class TestRandomSampling:
    """Tests for the random sampling helpers."""

    def test_random_vec3_range(self):
        """random_vec3(lo, hi) components stay in [lo, hi)."""
        from pathtrace.core.ray import random_vec3

        n = 1000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_vec3(-1.0, 1.0)

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= -1.0
        assert values.max() < 1.0
        # Both signs appear on every axis
        assert (values < 0.0).any(axis=0).all()
        assert (values > 0.0).any(axis=0).all()

    def test_random_in_unit_sphere_bounds(self):
        from pathtrace.core.ray import random_in_unit_sphere

        n = 1000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        lengths_sq = (samples.to_numpy() ** 2).sum(axis=1)
        assert (lengths_sq < 1.0).all()

    def test_random_unit_vector_length(self):
        from pathtrace.core.ray import random_unit_vector

        n = 1000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_unit_vector()

        test_kernel()
        lengths = (samples.to_numpy() ** 2).sum(axis=1) ** 0.5
        assert abs(lengths - 1.0).max() < 1e-4

    def test_random_in_unit_disk_bounds(self):
        """Disk samples lie in the xy-plane inside the unit circle."""
        from pathtrace.core.ray import random_in_unit_disk

        n = 1000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_disk()

        test_kernel()
        values = samples.to_numpy()
        assert (values[:, 2] == 0.0).all()
        assert ((values[:, 0] ** 2 + values[:, 1] ** 2) < 1.0).all()
