#!/usr/bin/env python3
"""
Mesh Clipping - Complete Example

Clips a small height-field mesh against a polygon window and writes debug
images of the result:
1. The input mesh, the clip window and the clipped faces
2. The node graph of one traced face with its boundary loop highlighted

Usage:
    python examples/mesh_clip_example.py
    python examples/mesh_clip_example.py --method traced --size 12 --debug
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

try:
    import cv2  # noqa: F401
except ImportError:
    raise SystemExit(
        "This script requires opencv-python.\n"
        "Install with: pip install -e '.[visualization]'"
    )

from clippoly import ClipConfig, clip_detailed, clip_mesh, setup_debug_logging
from clippoly.visualize import draw_mesh_clip, draw_node_graph, save_image

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

SCRIPT_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = SCRIPT_DIR / "output"


def build_height_field(size: int) -> tuple[NDArray[np.float64], NDArray[np.int64]]:
    """Regular grid of size x size quads, two triangles each, z = a gentle bump."""
    gx, gy = np.meshgrid(np.arange(size + 1, dtype=np.float64), np.arange(size + 1, dtype=np.float64))
    center = size / 2.0
    z = np.exp(-((gx - center) ** 2 + (gy - center) ** 2) / (size * 2.0))
    vertices = np.column_stack([gx.ravel(), gy.ravel(), z.ravel()])

    faces = []
    for row in range(size):
        for col in range(size):
            i = row * (size + 1) + col
            faces.append([i, i + 1, i + size + 2])
            faces.append([i, i + size + 2, i + size + 1])
    return vertices, np.array(faces, dtype=np.int64)


def build_window(size: int) -> NDArray[np.float64]:
    """A tilted quadrilateral covering the middle of the grid."""
    s = float(size)
    return np.array([
        [0.23 * s, 0.31 * s, 0.0],
        [0.71 * s, 0.17 * s, 0.0],
        [0.83 * s, 0.64 * s, 0.0],
        [0.37 * s, 0.79 * s, 0.0],
    ])


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Clip a height-field mesh against a polygon and render the result"
    )
    parser.add_argument(
        "--size",
        type=int,
        default=8,
        help="Grid size in quads per side (default: 8)"
    )
    parser.add_argument(
        "--method",
        choices=["traced", "refined"],
        default="refined",
        help="Boundary tracing method (default: refined)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used to clip faces (default: 1)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every tracer state transition"
    )
    args = parser.parse_args()

    if args.debug:
        setup_debug_logging(logging.DEBUG)

    config = ClipConfig(method=args.method, workers=args.workers)
    vertices, faces = build_height_field(args.size)
    window = build_window(args.size)

    result = clip_mesh(vertices, faces, window, config)
    logger.info(
        "%d of %d faces kept as %d triangles, area %.3f, skipped %s",
        len(faces) - len(result.skipped_faces),
        len(faces),
        result.num_faces,
        result.total_area,
        result.skipped_faces or "none",
    )

    path = save_image(OUTPUT_DIR / f"mesh_clip_{args.method}.png",
                      draw_mesh_clip(vertices, faces, window, result))
    logger.info("Saved %s", path)

    # Render the graph of the first face whose boundaries actually cross
    for index, face in enumerate(faces):
        report = clip_detailed(vertices[face], window, config)
        if not report.loop_ids:
            continue
        loop = report.loop_ids
        image = draw_node_graph(report.graph, highlight=list(zip(loop, loop[1:] + loop[:1])))
        path = save_image(OUTPUT_DIR / f"face_{index}_graph.png", image)
        logger.info("Saved node graph of face %d to %s", index, path)
        break


if __name__ == "__main__":
    main()
