#!/usr/bin/env python3
"""
Render a crossfade tour of the density globe.

Loads the two base density grids, derives the excess datasets, builds the
morphing globe and renders one frame per tick while crossfading through the
requested datasets.

Usage:
    python examples/render_globe.py --backend preview -o examples/output/preview
    python examples/render_globe.py --men data/male.asc --women data/female.asc --sequence women "men"
    blender -b -P examples/render_globe.py -- --backend blender --texture data/world.jpg
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import DATA_DIR, DEFAULT_LOG_LEVEL, RENDER_DIR
from src.globe.app import GlobeApp, run_until_idle
from src.globe.data_loading import DatasetDescriptor, default_base_descriptors
from src.globe.pipeline import GlobePipeline
from src.utils.helpers import setup_logging

logger = logging.getLogger("render_globe")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Render a crossfade tour of the density globe",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Quick offline preview with matplotlib
  python examples/render_globe.py --backend preview

  # Blender render of every dataset
  blender -b -P examples/render_globe.py -- --backend blender
        """,
    )
    parser.add_argument("--men", default=None, help="Path or URL of the male density grid")
    parser.add_argument("--women", default=None, help="Path or URL of the female density grid")
    parser.add_argument(
        "--data-dir", type=Path, default=DATA_DIR, help="Directory with the default grids"
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=RENDER_DIR, help="Output directory for frames"
    )
    parser.add_argument(
        "--backend",
        choices=["preview", "blender"],
        default="preview",
        help="Renderer backend (default: preview)",
    )
    parser.add_argument(
        "--sequence",
        nargs="+",
        default=None,
        help="Dataset names to crossfade through (default: all datasets)",
    )
    parser.add_argument("--fps", type=float, default=60.0, help="Ticks per time unit")
    parser.add_argument("--resolution", default="1280x720", help="WIDTHxHEIGHT")
    parser.add_argument("--texture", type=Path, default=None, help="Earth texture (blender only)")
    parser.add_argument("--samples", type=int, default=16, help="Render samples (blender only)")
    parser.add_argument("--log-file", default=None, help="Also write DEBUG logs to this file")
    parser.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Console log level")

    # Blender passes its own arguments before "--"
    if argv is None:
        argv = sys.argv[sys.argv.index("--") + 1:] if "--" in sys.argv else sys.argv[1:]
    return parser.parse_args(argv)


def make_blender_collaborators(model, args, width, height):
    from src.globe.blender_integration import create_globe_object
    from src.globe.rendering import BlenderRenderer, setup_render_settings
    from src.globe.scene_setup import (
        BlenderOrbitCamera,
        add_earth_sphere,
        clear_scene,
        setup_world_background,
    )

    clear_scene()
    setup_world_background()
    add_earth_sphere(texture_path=args.texture)
    globe = create_globe_object(model.mesh, logger=logger)
    setup_render_settings(width=width, height=height, samples=args.samples)
    return BlenderRenderer(globe, args.output), BlenderOrbitCamera()


def make_preview_collaborators(args, width, height):
    from src.globe.preview import MatplotlibRenderer, PreviewCamera

    return MatplotlibRenderer(args.output, width=width, height=height), PreviewCamera()


def main(argv=None):
    args = parse_args(argv)
    setup_logging("src", log_file=args.log_file, level=args.log_level)
    setup_logging("render_globe", level=args.log_level)

    try:
        width, height = map(int, args.resolution.lower().split("x"))
    except ValueError:
        print(f"Error: Invalid resolution format: {args.resolution}")
        print("  Use WIDTHxHEIGHT format, e.g., 1920x1080")
        sys.exit(1)

    bases = default_base_descriptors(args.data_dir)
    if args.men:
        bases[0] = DatasetDescriptor(bases[0].name, bases[0].hue_range, args.men)
    if args.women:
        bases[1] = DatasetDescriptor(bases[1].name, bases[1].hue_range, args.women)

    pipeline = GlobePipeline(bases)
    logger.info("Execution plan:\n" + pipeline.explain())
    model = pipeline.build()

    sequence = args.sequence or model.names[1:] + model.names[:1]
    unknown = [name for name in sequence if name not in model.names]
    if unknown:
        print(f"Error: Unknown dataset name(s): {', '.join(unknown)}")
        print(f"  Choose from: {', '.join(model.names)}")
        sys.exit(1)

    if args.backend == "blender":
        renderer, camera = make_blender_collaborators(model, args, width, height)
    else:
        renderer, camera = make_preview_collaborators(args, width, height)

    app = GlobeApp(model, renderer, camera)
    dt = 1.0 / args.fps
    run_until_idle(app, dt)

    for name in sequence:
        app.select(name)
        frames = run_until_idle(app, dt)
        logger.info(f"Crossfade to '{name}': {frames} frames")

    print(f"\nRendered {len(renderer.frames)} frames to {args.output}")


if __name__ == "__main__":
    main()
