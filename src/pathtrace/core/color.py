"""Gamma-correcting color packing for the pixel buffer.

A pixel is a 32-bit unsigned integer laid out as::

    (alpha << 24) | (blue << 16) | (green << 8) | red

so that on a little-endian host the bytes read R, G, B, A in memory. That
layout and row-major ordering are the only things a display sink relies on.

Packing a sample sum:
    1. scale by 1 / samples_per_pixel
    2. clamp to [0, 0.999]
    3. gamma-correct with pow(x, 1 / gamma)
    4. multiply by 256 and truncate

The 0.999 clamp keeps every channel at or below 255 so a bright component
can never carry into its neighbour.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Upper clamp applied before gamma correction
MAX_INTENSITY = 0.999

# Alpha written for every path-traced pixel
OPAQUE_ALPHA = 255


@ti.func
def _encode_channel(value: ti.f32, gamma: ti.f32) -> ti.u32:
    clamped = tm.clamp(value, 0.0, MAX_INTENSITY)
    return ti.cast(tm.pow(clamped, 1.0 / gamma) * 256.0, ti.u32)


@ti.func
def pack_color(color_sum: vec3, samples_per_pixel: ti.i32, gamma: ti.f32) -> ti.u32:
    """Average, clamp, gamma-correct and pack a color into 32 bits.

    Args:
        color_sum: Sum of the radiance samples for one pixel.
        samples_per_pixel: Number of samples in color_sum (>= 1).
        gamma: Display gamma (> 0).

    Returns:
        The packed pixel with alpha fixed at 255.
    """
    scale = 1.0 / ti.cast(samples_per_pixel, ti.f32)
    r = _encode_channel(scale * color_sum.x, gamma)
    g = _encode_channel(scale * color_sum.y, gamma)
    b = _encode_channel(scale * color_sum.z, gamma)
    alpha = ti.cast(OPAQUE_ALPHA, ti.u32)
    return (alpha << 24) | (b << 16) | (g << 8) | r


@ti.kernel
def _pack_single(
    r: ti.f32, g: ti.f32, b: ti.f32, samples_per_pixel: ti.i32, gamma: ti.f32
) -> ti.u32:
    return pack_color(vec3(r, g, b), samples_per_pixel, gamma)


def pack_pixel(
    color_sum: tuple[float, float, float],
    samples_per_pixel: int = 1,
    gamma: float = 1.0,
) -> int:
    """Pack a single color sum from Python.

    Runs the same code path as the frame kernel. Mostly useful for tests and
    for sinks that want to paint overlay pixels in the same format.

    Args:
        color_sum: Linear RGB sum of samples.
        samples_per_pixel: Number of samples contained in color_sum.
        gamma: Display gamma.

    Returns:
        The packed 32-bit pixel value.
    """
    return int(_pack_single(color_sum[0], color_sum[1], color_sum[2], samples_per_pixel, gamma))


def unpack_pixel(pixel: int) -> tuple[int, int, int, int]:
    """Split a packed pixel into its (red, green, blue, alpha) bytes."""
    return (
        pixel & 0xFF,
        (pixel >> 8) & 0xFF,
        (pixel >> 16) & 0xFF,
        (pixel >> 24) & 0xFF,
    )


def unpack_rgba(buffer: npt.NDArray[np.uint32]) -> npt.NDArray[np.uint8]:
    """Convert a packed (H, W) buffer into an (H, W, 4) RGBA byte array.

    Args:
        buffer: Row-major packed pixel buffer with dtype uint32.

    Returns:
        A new uint8 array with channels in R, G, B, A order.
    """
    if buffer.dtype != np.uint32 or buffer.ndim != 2:
        raise ValueError(
            f"Expected a 2D uint32 buffer, got {buffer.ndim}D {buffer.dtype}"
        )
    shifts = np.array([0, 8, 16, 24], dtype=np.uint32)
    channels = (buffer[..., np.newaxis] >> shifts) & np.uint32(0xFF)
    return channels.astype(np.uint8)
