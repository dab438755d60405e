#!/usr/bin/env python3
"""Render the default scene to a PNG file.

Builds the default scene (ground, diffuse, glass shell and gold spheres),
renders one frame with the thin-lens camera and writes an RGBA PNG.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH          Image width in pixels (default: 640)
    --height HEIGHT        Image height in pixels (default: 360)
    --samples SAMPLES      Samples per pixel (default: 64)
    --bounces BOUNCES      Maximum bounces per path (default: 10)
    --gamma GAMMA          Display gamma (default: 1.05)
    --fov DEGREES          Vertical field of view (default: 90)
    --aperture APERTURE    Lens diameter, 0 for a pinhole (default: 0.1)
    --origin X Y Z         Camera position (default: 0 4 5)
    --seed SEED            Random seed (default: 42)
    --threads N            Cap on CPU threads; 1 renders single-threaded
    --arch ARCH            Taichi backend: auto, cpu, gpu, ... (default: auto)
    --output OUTPUT        Output file path (default: render.png)
    --preview              Also show the frame with Matplotlib
    --quiet                Suppress progress output
    --verbose              Enable debug logging

Example:
    python -m examples.render_scene --width 320 --height 180 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the src/ directory is importable for direct execution
_src_dir = Path(__file__).resolve().parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from pathtrace.config import (  # noqa: E402
    DEFAULT_BOUNCE_LIMIT,
    DEFAULT_GAMMA,
    DEFAULT_SAMPLES_PER_PIXEL,
    CameraSettings,
    RenderSettings,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = CameraSettings()
    parser = argparse.ArgumentParser(
        description="Render the default path-traced scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height in pixels (default: 360)")
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help=f"Samples per pixel (default: {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--bounces",
        type=int,
        default=DEFAULT_BOUNCE_LIMIT,
        help=f"Maximum bounces per path (default: {DEFAULT_BOUNCE_LIMIT})",
    )
    parser.add_argument(
        "--gamma", type=float, default=DEFAULT_GAMMA, help=f"Display gamma (default: {DEFAULT_GAMMA})"
    )
    parser.add_argument(
        "--fov", type=float, default=defaults.vfov, help=f"Vertical field of view (default: {defaults.vfov})"
    )
    parser.add_argument(
        "--aperture",
        type=float,
        default=defaults.aperture,
        help=f"Lens diameter, 0 for a pinhole (default: {defaults.aperture})",
    )
    parser.add_argument(
        "--origin",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=list(defaults.origin),
        help="Camera position (default: 0 4 5)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--threads", type=int, default=None, help="Cap on CPU threads")
    parser.add_argument("--arch", type=str, default="auto", help="Taichi backend (default: auto)")
    parser.add_argument("--output", type=str, default="render.png", help="Output file path (default: render.png)")
    parser.add_argument("--preview", action="store_true", help="Also show the frame with Matplotlib")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render_scene(
    width: int,
    height: int,
    render_settings: RenderSettings,
    camera_settings: CameraSettings,
    output_path: str = "render.png",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the default scene and save it as PNG.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized before fields are declared
    from pathtrace.core.render_loop import RenderLoop
    from pathtrace.preview.export import save_png
    from pathtrace.scene.default_scene import create_default_scene

    scene, _ = create_default_scene()
    if not quiet:
        print(f"Scene: {scene.get_sphere_count()} spheres, {scene.get_material_count()} materials")
        print(
            f"Rendering {width}x{height} at {render_settings.samples_per_pixel} spp, "
            f"{render_settings.bounce_limit} bounces..."
        )

    loop = RenderLoop(render_settings=render_settings, camera_settings=camera_settings)
    loop.resize(width, height)
    if not loop.render():
        raise ValueError(f"Nothing to render for a {width}x{height} image")

    output_file = Path(output_path)
    save_png(loop, output_file)

    if not quiet:
        print(f"Frame time: {loop.last_frame_ms / 1000.0:.2f}s")
        print(f"Saved to: {output_file.absolute()}")

    if preview:
        from pathtrace.preview.display import show_preview

        show_preview(loop)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        render_settings = RenderSettings(
            samples_per_pixel=args.samples,
            bounce_limit=args.bounces,
            gamma=args.gamma,
        )
        camera_settings = CameraSettings(
            origin=tuple(args.origin),
            vfov=args.fov,
            aperture=args.aperture,
        )

        from pathtrace.backend import init_taichi

        backend = init_taichi(arch=args.arch, random_seed=args.seed, max_threads=args.threads)
        if not args.quiet:
            print(f"Taichi backend: {backend}")

        render_scene(
            width=args.width,
            height=args.height,
            render_settings=render_settings,
            camera_settings=camera_settings,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
