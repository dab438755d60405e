"""Render loop driving frames into a resizable pixel buffer.

The RenderLoop owns the packed pixel buffer and decides when to render:

- idle: a frame is rendered only after request_render(), once
- playing: a frame is rendered on every tick()

Both modes call the same render() operation. The caller (usually a window
event loop) reports the target size with resize() and calls tick() once per
UI frame. The buffer is reallocated only when the size actually changes,
and a zero width or height turns rendering into a no-op.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.render_loop import RenderLoop
    >>> from pathtrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera_settings = create_default_scene()
    >>> loop = RenderLoop(camera_settings=camera_settings)
    >>> loop.resize(320, 180)
    >>> loop.request_render()
    >>> loop.tick()
    True
"""

import logging
import time
from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from pathtrace.camera.thin_lens import setup_camera
from pathtrace.config import CameraSettings, RenderSettings
from pathtrace.core.color import unpack_rgba
from pathtrace.core.integrator import allocate_buffer, render_frame

logger = logging.getLogger(__name__)

# Receives (pixels, width, height) after every finished frame
PresentCallback = Callable[[npt.NDArray[np.uint32], int, int], None]


class RenderLoop:
    """Owns the pixel buffer and schedules frame renders.

    Attributes:
        render_settings: Sampling and tone-mapping settings for new frames.
        camera_settings: Camera placement for new frames.
        frame_count: Number of frames rendered so far.
        last_frame_ms: Wall time of the most recent render, in milliseconds.
    """

    def __init__(
        self,
        render_settings: RenderSettings | None = None,
        camera_settings: CameraSettings | None = None,
        present: PresentCallback | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Create an idle loop with an empty 0 x 0 buffer.

        Args:
            render_settings: Initial render settings. Defaults are used if None.
            camera_settings: Initial camera settings. Defaults are used if None.
            present: Optional display sink called with each finished frame.
            clock: Monotonic clock in seconds, used to time frames.
        """
        self.render_settings = render_settings or RenderSettings()
        self.camera_settings = camera_settings or CameraSettings()
        self._present = present
        self._clock = clock

        self._pixels = allocate_buffer(0, 0)
        self._playing = False
        self._render_requested = False

        self.frame_count = 0
        self.last_frame_ms = 0.0

    # =========================================================================
    # Buffer
    # =========================================================================

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> npt.NDArray[np.uint32]:
        """The packed (height, width) buffer of the last rendered frame."""
        return self._pixels

    def resize(self, width: int, height: int) -> bool:
        """Match the buffer to a requested size.

        Args:
            width: Requested width in pixels (>= 0).
            height: Requested height in pixels (>= 0).

        Returns:
            True if a new buffer was allocated, False if the size was unchanged.

        Raises:
            ValueError: If either dimension is negative.
        """
        if width < 0 or height < 0:
            raise ValueError(f"Buffer size must be non-negative, got {width}x{height}")
        if width == self.width and height == self.height:
            return False

        logger.debug("Resizing pixel buffer %dx%d -> %dx%d", self.width, self.height, width, height)
        self._pixels = allocate_buffer(width, height)
        return True

    def get_rgba(self) -> npt.NDArray[np.uint8]:
        """Get the current frame as an (H, W, 4) RGBA byte array."""
        return unpack_rgba(self._pixels)

    # =========================================================================
    # Mode
    # =========================================================================

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def render_requested(self) -> bool:
        return self._render_requested

    def play(self) -> None:
        """Render on every tick."""
        self._playing = True

    def pause(self) -> None:
        """Return to idle: render only on request."""
        self._playing = False

    def toggle_play(self) -> bool:
        """Switch between playing and idle.

        Returns:
            True if the loop is now playing.
        """
        self._playing = not self._playing
        return self._playing

    def request_render(self) -> None:
        """Ask for a single frame on the next tick."""
        self._render_requested = True

    @property
    def fps(self) -> float:
        """Frames per second implied by the last frame time, or 0."""
        if self.last_frame_ms <= 0.0:
            return 0.0
        return 1000.0 / self.last_frame_ms

    # =========================================================================
    # Rendering
    # =========================================================================

    def tick(self) -> bool:
        """Advance the loop by one UI frame.

        Renders when playing or when a one-shot render was requested.

        Returns:
            True if a frame was rendered.
        """
        if not (self._playing or self._render_requested):
            return False
        self._render_requested = False
        return self.render()

    def render(self) -> bool:
        """Render one frame into the buffer now.

        The camera is rebuilt for the current aspect ratio, the frame is
        rendered to completion, timed and handed to the present callback.

        Returns:
            True if a frame was rendered, False if the buffer is empty.
        """
        width, height = self.width, self.height
        if width == 0 or height == 0:
            logger.debug("Skipping render of empty %dx%d buffer", width, height)
            return False

        setup_camera(self.camera_settings.build(width / height))

        start = self._clock()
        render_frame(self._pixels, self.render_settings)
        self.last_frame_ms = (self._clock() - start) * 1000.0
        self.frame_count += 1

        logger.debug(
            "Frame %d: %dx%d, %d spp, %d bounces in %.1f ms",
            self.frame_count,
            width,
            height,
            self.render_settings.samples_per_pixel,
            self.render_settings.bounce_limit,
            self.last_frame_ms,
        )

        if self._present is not None:
            self._present(self._pixels, width, height)
        return True

    def __repr__(self) -> str:
        mode = "playing" if self._playing else "idle"
        return (
            f"RenderLoop(width={self.width}, height={self.height}, "
            f"mode={mode}, frames={self.frame_count})"
        )
