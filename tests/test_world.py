"""Unit tests for the sphere world.

Tests cover:
- Adding and clearing spheres
- Closest-hit selection independent of insertion order
- Empty world
"""

import pytest
import taichi as ti


def _trace_world(origin, direction):
    """Run hit_world for one ray and return (hit, t, material_id)."""
    from pathtrace.core.ray import make_ray, vec3
    from pathtrace.scene.world import hit_world

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(ray_origin: vec3, ray_direction: vec3):
        # hit_world loops over spheres; keep that loop serial
        for _ in range(1):
            ray = make_ray(ray_origin, ray_direction)
            record = hit_world(ray, 0.001, 1e10)
            hit[None] = record.hit
            t_val[None] = record.t
            material_id[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction))
    return hit[None], t_val[None], material_id[None]


class TestWorldStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_sequential_indices(self):
        from pathtrace.scene.world import add_sphere, get_sphere_count

        assert add_sphere((0.0, 0.0, 0.0), 1.0) == 0
        assert add_sphere((1.0, 0.0, 0.0), 0.5, material_id=3) == 1
        assert get_sphere_count() == 2

    def test_clear_world(self):
        from pathtrace.scene.world import add_sphere, clear_world, get_sphere_count

        add_sphere((0.0, 0.0, 0.0), 1.0)
        clear_world()
        assert get_sphere_count() == 0

    def test_overflow_raises(self):
        from pathtrace.scene import world

        world.num_spheres[None] = world.MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            world.add_sphere((0.0, 0.0, 0.0), 1.0)


class TestHitWorld:
    """Tests for closest-hit queries."""

    def test_empty_world_misses(self):
        hit, _, _ = _trace_world((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_nearest_sphere_wins_when_added_first(self):
        from pathtrace.scene.world import add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5, material_id=1)
        add_sphere((0.0, 0.0, -5.0), 0.5, material_id=2)

        hit, t, mat = _trace_world((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert mat == 1

    def test_nearest_sphere_wins_when_added_last(self):
        from pathtrace.scene.world import add_sphere

        add_sphere((0.0, 0.0, -5.0), 0.5, material_id=2)
        add_sphere((0.0, 0.0, -2.0), 0.5, material_id=1)

        hit, t, mat = _trace_world((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert mat == 1

    def test_overlapping_spheres(self):
        """The outer glass shell of a hollow sphere is hit before the inner one."""
        from pathtrace.scene.world import add_sphere

        add_sphere((0.0, 0.0, -1.0), -0.45, material_id=4)
        add_sphere((0.0, 0.0, -1.0), 0.5, material_id=3)

        hit, t, mat = _trace_world((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert mat == 3

    def test_ray_misses_all(self):
        from pathtrace.scene.world import add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5, material_id=1)
        add_sphere((3.0, 0.0, -2.0), 0.5, material_id=2)

        hit, _, _ = _trace_world((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 0
