#!/usr/bin/env python3
"""Interactive path tracer with a Settings panel.

Opens a Taichi GGUI window on the default scene. The loop starts idle.

Usage:
    python -m examples.interactive_scene [--width W] [--height H] [--arch ARCH]

Controls:
    - Samples / Bounce / Gamma: sampling and tone-mapping settings
    - Origin X/Y/Z, Field of view, Aperture: camera placement and lens
    - Render: render a single frame with the current settings
    - Play / Pause: render continuously, or stop
    - Export PNG: save the last frame with a timestamp

The panel shows the last frame time, the implied FPS and the scene size.
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


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive path tracer preview.")
    parser.add_argument("--width", type=int, default=960, help="Window width (default: 960)")
    parser.add_argument("--height", type=int, default=540, help="Window height (default: 540)")
    parser.add_argument("--arch", type=str, default="auto", help="Taichi backend (default: auto)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the interactive renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from pathtrace.backend import init_taichi

    # Initialize Taichi first (before importing modules that declare fields)
    backend = init_taichi(arch=args.arch, random_seed=args.seed)
    print(f"Taichi backend: {backend}")

    from pathtrace.preview.interactive import InteractivePreview
    from pathtrace.scene.default_scene import create_default_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    scene, camera_settings = create_default_scene()

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(
        args.width,
        args.height,
        scene=scene,
        camera_settings=camera_settings,
    )

    print("  - Click 'Render' for a single frame, 'Play' to render continuously")
    print("  - Click 'Export PNG' to save the last frame")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
