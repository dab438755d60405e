"""Interactive preview window using Taichi GGUI.

The window is a display sink for a RenderLoop. Each UI frame it:
1. Reads the Settings panel (samples, bounces, gamma and camera sliders)
2. Resizes the loop to the window and ticks it
3. Uploads the latest packed frame to the canvas

The loop starts idle. The Render button requests a single frame; the
Play/Pause button switches to rendering every frame and back.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.preview.interactive import InteractivePreview
    >>> from pathtrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera_settings = create_default_scene()
    >>> preview = InteractivePreview(960, 540, scene=scene, camera_settings=camera_settings)
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from pathtrace.config import CameraSettings, RenderSettings
from pathtrace.core.render_loop import RenderLoop
from pathtrace.preview.display import buffer_to_float_rgb

if TYPE_CHECKING:
    import numpy.typing as npt
    from taichi._snode.snode_tree import SNodeTree

    from pathtrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Slider ranges for the Settings panel
MAX_SAMPLES_SLIDER = 512
MAX_BOUNCE_SLIDER = 50
MAX_GAMMA_SLIDER = 3.0
ORIGIN_SLIDER_RANGE = 10.0
MIN_FOV_SLIDER = 1.0
MAX_FOV_SLIDER = 179.0
MAX_APERTURE_SLIDER = 2.0


class InteractivePreview:
    """Taichi GGUI window presenting frames from a RenderLoop.

    Attributes:
        width: Initial window width in pixels.
        height: Initial window height in pixels.
        loop: The RenderLoop driven by the window.
        scene: Optional scene, used for the "Scene size" readout.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        scene: SceneManager | None = None,
        render_settings: RenderSettings | None = None,
        camera_settings: CameraSettings | None = None,
        title: str = "Path Tracer",
    ) -> None:
        """Create the preview. The window itself opens on run().

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            scene: Scene being rendered, for display of its size.
            render_settings: Initial render settings.
            camera_settings: Initial camera settings.
            title: Window title.
        """
        self.width = width
        self.height = height
        self.scene = scene
        self._title = title

        self.loop = RenderLoop(
            render_settings=render_settings,
            camera_settings=camera_settings,
            present=self.present,
        )

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._display_image: ti.MatrixField | None = None
        self._display_shape: tuple[int, int] = (0, 0)
        self._display_tree: SNodeTree | None = None

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    # =========================================================================
    # Display sink
    # =========================================================================

    def _allocate_display_image(self, width: int, height: int) -> None:
        """Place a (width, height) RGB field in its own SNode tree.

        The previous tree is destroyed so resizing the window does not leak
        device memory.
        """
        if self._display_tree is not None:
            self._display_tree.destroy()

        builder = ti.FieldsBuilder()
        image = ti.Vector.field(3, dtype=ti.f32)
        builder.dense(ti.ij, (width, height)).place(image)
        self._display_tree = builder.finalize()
        self._display_image = image
        self._display_shape = (width, height)

    def present(self, pixels: npt.NDArray[np.uint32], width: int, height: int) -> None:
        """Upload a finished frame to the display field.

        Taichi fields are indexed (x, y) from the bottom-left, so the
        row-major image is flipped and transposed on the way in.
        """
        if self._display_image is None or self._display_shape != (width, height):
            self._allocate_display_image(width, height)

        image = buffer_to_float_rgb(pixels)
        self._display_image.from_numpy(np.ascontiguousarray(np.transpose(np.flipud(image), (1, 0, 2))))

    # =========================================================================
    # Settings panel
    # =========================================================================

    def _scene_size(self) -> int:
        return self.scene.get_sphere_count() if self.scene is not None else 0

    def _draw_gui_panel(self) -> None:
        loop = self.loop
        render = loop.render_settings
        camera = loop.camera_settings

        with self.window.GUI.sub_window("Settings", 0.02, 0.02, 0.32, 0.62) as gui:
            gui.text(f"Time: {loop.last_frame_ms:.1f} ms")
            gui.text(f"FPS: {loop.fps:.1f}")
            gui.text(f"Scene size: {self._scene_size()}")

            samples = gui.slider_int(
                "Samples", render.samples_per_pixel, minimum=1, maximum=MAX_SAMPLES_SLIDER
            )
            bounce = gui.slider_int("Bounce", render.bounce_limit, minimum=0, maximum=MAX_BOUNCE_SLIDER)
            gamma = gui.slider_float("Gamma", render.gamma, minimum=0.0, maximum=MAX_GAMMA_SLIDER)

            ox = gui.slider_float(
                "Origin X", camera.origin[0], minimum=-ORIGIN_SLIDER_RANGE, maximum=ORIGIN_SLIDER_RANGE
            )
            oy = gui.slider_float(
                "Origin Y", camera.origin[1], minimum=-ORIGIN_SLIDER_RANGE, maximum=ORIGIN_SLIDER_RANGE
            )
            oz = gui.slider_float(
                "Origin Z", camera.origin[2], minimum=-ORIGIN_SLIDER_RANGE, maximum=ORIGIN_SLIDER_RANGE
            )
            fov = gui.slider_float("Field of view", camera.vfov, minimum=MIN_FOV_SLIDER, maximum=MAX_FOV_SLIDER)
            aperture = gui.slider_float(
                "Aperture", camera.aperture, minimum=0.0, maximum=MAX_APERTURE_SLIDER
            )

            if gui.button("Render"):
                loop.request_render()
            if gui.button("Pause" if loop.playing else "Play"):
                loop.toggle_play()
            if gui.button("Export PNG"):
                self._export_png()

        # Gamma sliders reach 0, which the renderer cannot use
        loop.render_settings = RenderSettings.clamped(samples, bounce, gamma)

        new_origin = (ox, oy, oz)
        if new_origin != tuple(camera.origin) or fov != camera.vfov or aperture != camera.aperture:
            try:
                loop.camera_settings = camera.with_changes(
                    origin=new_origin, vfov=fov, aperture=max(0.0, aperture)
                )
            except ValueError as exc:
                logger.warning("Ignoring camera change: %s", exc)

    def _export_png(self) -> None:
        """Export the last frame to a timestamped PNG file."""
        from pathtrace.preview.export import save_png

        if self.loop.frame_count == 0:
            print("Nothing to export yet: render a frame first")
            return

        filename = f"render_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
        save_png(self.loop, filename)
        print(f"Exported: {filename} ({self.loop.render_settings.samples_per_pixel} SPP)")

    # =========================================================================
    # Event loop
    # =========================================================================

    def is_running(self) -> bool:
        return self.window.running

    def step(self) -> None:
        """Run one UI frame: settings, resize, tick and present."""
        width, height = self.window.get_window_shape()
        self.loop.resize(width, height)

        self._draw_gui_panel()
        self.loop.tick()

        if self._display_image is not None:
            self.canvas.set_image(self._display_image)
        self.window.show()

    def run(self) -> None:
        """Run the window event loop until it is closed.

        A first frame is requested so the window does not open blank.
        """
        self._initialize_window()
        self.loop.request_render()
        while self.is_running():
            self.step()

    def close(self) -> None:
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        if os.uname().sysname == "Darwin":
            # SSH sessions without X forwarding have no display
            return not (os.environ.get("SSH_CONNECTION") and not display)

        return bool(display or wayland)
