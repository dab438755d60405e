"""Image export for packed frames.

Packed pixels already carry gamma-corrected RGBA bytes, so export is a
matter of unpacking and handing the array to Pillow.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from pathtrace.core.render_loop import RenderLoop
    >>> from pathtrace.preview.export import save_png
    >>>
    >>> loop = RenderLoop()
    >>> loop.resize(320, 180)
    >>> loop.render()
    >>> save_png(loop, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtrace.core.color import unpack_rgba

if TYPE_CHECKING:
    from pathtrace.core.render_loop import RenderLoop

logger = logging.getLogger(__name__)


def buffer_to_image(buffer: npt.NDArray[np.uint32]) -> PILImage.Image:
    """Convert a packed (H, W) buffer to a Pillow RGBA image.

    Raises:
        ValueError: If the buffer is not a non-empty 2D uint32 array.
    """
    rgba = unpack_rgba(buffer)
    if rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise ValueError("Cannot convert an empty buffer to an image")
    return PILImage.fromarray(rgba, mode="RGBA")


def save_png_from_buffer(buffer: npt.NDArray[np.uint32], filepath: str | Path) -> None:
    """Save a packed buffer as an RGBA PNG file.

    Args:
        buffer: Row-major (H, W) packed pixel buffer.
        filepath: Output file path (should end in .png).
    """
    image = buffer_to_image(buffer)
    image.save(filepath, format="PNG")
    logger.info("Saved %dx%d PNG to %s", image.width, image.height, filepath)


def save_png(source: RenderLoop | npt.NDArray[np.uint32], filepath: str | Path) -> None:
    """Save the last frame of a render loop, or a packed buffer, as PNG.

    Args:
        source: A RenderLoop or a packed (H, W) uint32 buffer.
        filepath: Output file path (should end in .png).
    """
    buffer = source if isinstance(source, np.ndarray) else source.pixels
    save_png_from_buffer(buffer, filepath)
