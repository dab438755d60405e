"""Matplotlib-based preview display for packed frames.

The render loop produces gamma-corrected, packed 32-bit pixels, so no tone
mapping happens here: the bytes are unpacked and shown as they are.

Example:
    >>> from pathtrace.core.render_loop import RenderLoop
    >>> from pathtrace.preview.display import show_preview
    >>>
    >>> loop = RenderLoop()
    >>> loop.resize(320, 180)
    >>> loop.render()
    >>> show_preview(loop)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from pathtrace.core.color import unpack_rgba

if TYPE_CHECKING:
    from pathtrace.core.render_loop import RenderLoop

__all__ = ["buffer_to_float_rgb", "show_buffer", "show_preview", "unpack_rgba"]


def buffer_to_float_rgb(buffer: npt.NDArray[np.uint32]) -> npt.NDArray[np.float32]:
    """Convert a packed buffer to an (H, W, 3) float image in [0, 1].

    Alpha is dropped. Each channel byte is divided by 255.

    Args:
        buffer: Row-major (H, W) packed pixel buffer.

    Returns:
        Float32 image suitable for ``imshow``.
    """
    rgba = unpack_rgba(buffer)
    return (rgba[..., :3].astype(np.float32) / 255.0).astype(np.float32)


def show_buffer(
    buffer: npt.NDArray[np.uint32],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a packed buffer as a Matplotlib figure.

    Args:
        buffer: Row-major (H, W) packed pixel buffer.
        title: Figure title. Defaults to the buffer dimensions.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    height, width = buffer.shape
    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # Row 0 is the top of the image, which matches imshow's default origin
    ax.imshow(buffer_to_float_rgb(buffer))
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)


def show_preview(
    loop: RenderLoop,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display the last frame of a render loop.

    The default title shows the samples per pixel and the frame time.

    Raises:
        ValueError: If the loop has an empty buffer.
    """
    if loop.width == 0 or loop.height == 0:
        raise ValueError("Render loop has an empty buffer; call resize() and render() first")

    if title is None:
        spp = loop.render_settings.samples_per_pixel
        title = f"Render Preview - {spp} SPP, {loop.last_frame_ms:.1f} ms"

    show_buffer(loop.pixels, title=title, figsize=figsize, block=block)
