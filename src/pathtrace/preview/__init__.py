"""Preview module: display sinks for packed frames.

Components:
    display: Matplotlib-based static preview
    export: RGBA PNG export via Pillow
    interactive: Taichi GGUI window driving a RenderLoop

Example:
    >>> from pathtrace.preview import save_png, show_preview
    >>> from pathtrace.core.render_loop import RenderLoop
    >>>
    >>> loop = RenderLoop()
    >>> loop.resize(320, 180)
    >>> loop.render()
    >>> show_preview(loop)
    >>> save_png(loop, "output.png")
"""

from pathtrace.preview.display import buffer_to_float_rgb, show_buffer, show_preview, unpack_rgba
from pathtrace.preview.export import buffer_to_image, save_png, save_png_from_buffer
from pathtrace.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_preview",
    "show_buffer",
    "buffer_to_float_rgb",
    "unpack_rgba",
    # Export functions
    "save_png",
    "save_png_from_buffer",
    "buffer_to_image",
]
