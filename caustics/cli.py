"""
cli.py - Command line entry point

    caustics-viewer <lens.obj> <distance>

lens.obj   OBJ file containing the lens geometry (vertices and normals)
distance   Initial distance between the lens and the receiver plane
           (the wall is parallel to the x-y plane at z = distance)

Project: Caustics Visualizer
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pygame

from .mesh import GeometryFileError, GeometryParseError, InvalidGeometryError, load_lens
from .rays import LENS_ETA, normalize_rows, refract, tir_mask
from .viewer import WINDOW_SIZE, CausticScene, run_viewer

logger = logging.getLogger(__name__)


EXIT_OK = 0
EXIT_GEOMETRY = 1
EXIT_DISPLAY = 3


def _distance(value: str) -> float:
    try:
        distance = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"could not parse distance {value!r}")
    if not np.isfinite(distance):
        raise argparse.ArgumentTypeError(f"distance must be finite, got {value!r}")
    return distance


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caustics-viewer",
        description="Interactive viewer for the caustic cast by a refracting lens surface",
        epilog="Keys: w/s move the receiver plane, q prints the distance, Esc quits.",
    )
    parser.add_argument("obj", type=Path, help="Path to an OBJ file containing lens geometry")
    parser.add_argument(
        "distance",
        type=_distance,
        help="Initial distance between the lens and the receiver plane "
             "(wall is parallel to the x-y plane at z=<distance>)",
    )
    parser.add_argument(
        "--eta",
        type=float,
        default=LENS_ETA,
        help=f"Refractive-index ratio of lens to air (default: {LENS_ETA})",
    )
    parser.add_argument(
        "--step",
        type=float,
        default=CausticScene.DEPTH_STEP,
        help=f"Distance change per key press (default: {CausticScene.DEPTH_STEP})",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=WINDOW_SIZE,
        help="Initial window size in pixels (default: 256 256)",
    )
    parser.add_argument(
        "--normalize-normals",
        action="store_true",
        help="Normalize mesh normals before refracting instead of trusting the file",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on non-numeric vertex or normal records instead of skipping them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    try:
        lens = load_lens(args.obj, strict=args.strict)
    except (GeometryFileError, GeometryParseError, InvalidGeometryError) as e:
        logger.error(f"Error: {e}")
        return EXIT_GEOMETRY

    normals = normalize_rows(lens.normals) if args.normalize_normals else lens.normals
    refracted = refract(normals, args.eta)
    reflected = int(tir_mask(normals, args.eta).sum())
    logger.info(
        f"Refracted {lens.num_normals} rays from {args.obj} "
        f"(eta={args.eta}, {reflected} totally internally reflected)"
    )

    scene = CausticScene(lens.vertices, refracted, args.distance, step=args.step)
    try:
        run_viewer(scene, window_size=tuple(args.window_size))
    except pygame.error as e:
        logger.error(f"Display initialization failed: {e}")
        return EXIT_DISPLAY
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
