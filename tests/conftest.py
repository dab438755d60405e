"""Pytest configuration for path tracer tests.

Taichi is initialized once per session, before any test imports a module
that declares fields. Tests therefore import pathtrace modules inside the
test functions rather than at module level.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Repeated ti.init() calls invalidate fields declared by modules that
    were already imported, so this runs exactly once.
    """
    from pathtrace.backend import init_taichi

    init_taichi(arch="cpu", random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset the world, the material registries and the camera around each test."""
    from pathtrace.camera.thin_lens import reset_camera
    from pathtrace.scene.manager import clear_materials
    from pathtrace.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_materials()
        reset_camera()

    _clear_all()
    yield
    _clear_all()
