#!/usr/bin/env python3
"""
Profile script for clippoly to identify performance bottlenecks.
"""

import cProfile
import pstats
import io
import numpy as np
from numpy.typing import NDArray
import time
from typing import Tuple
from clippoly import ClipConfig, ClipError, clip, clip_mesh


def generate_random_polygon(
    center: NDArray[np.float64],
    radius: float,
    n_vertices: int = 5
) -> NDArray[np.float64]:
    """Generate a random star-shaped polygon roughly centered at center, z = 0."""
    angles = np.sort(np.random.uniform(0, 2 * np.pi, n_vertices))
    radii = np.random.uniform(0.5 * radius, 1.5 * radius, n_vertices)
    x = center[0] + radii * np.cos(angles)
    y = center[1] + radii * np.sin(angles)
    return np.column_stack([x, y, np.zeros(n_vertices)])


def generate_grid_mesh(
    n: int = 20,
    jitter: float = 0.2
) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
    """
    Generate an n x n grid of quads split into triangles.
    Vertices are jittered in xy and carry a smooth height field in z.
    """
    gx, gy = np.meshgrid(np.arange(n + 1, dtype=np.float64), np.arange(n + 1, dtype=np.float64))
    gx += np.random.uniform(-jitter, jitter, gx.shape)
    gy += np.random.uniform(-jitter, jitter, gy.shape)
    z = np.sin(gx / 3.0) * np.cos(gy / 3.0)
    vertices = np.column_stack([gx.ravel(), gy.ravel(), z.ravel()])

    faces = []
    for row in range(n):
        for col in range(n):
            i = row * (n + 1) + col
            faces.append([i, i + 1, i + n + 2])
            faces.append([i, i + n + 2, i + n + 1])
    return vertices, np.array(faces, dtype=np.int64)


def run_polygon_workload(n_iterations: int = 500) -> None:
    """Clip random polygon pairs."""
    np.random.seed(42)  # For reproducibility

    failures = 0
    for _ in range(n_iterations):
        target = generate_random_polygon(np.array([0.0, 0.0]), 10.0, 3)
        window = generate_random_polygon(np.random.uniform(-5, 5, 2), 8.0, 4)
        try:
            clip(target, window)
        except ClipError:
            failures += 1
    print(f"  {failures} of {n_iterations} clips failed")


def run_mesh_workload(n_iterations: int = 5, method: str = "refined", workers: int = 1) -> None:
    """Clip a jittered grid mesh against a random polygon."""
    np.random.seed(42)
    config = ClipConfig(method=method, workers=workers)

    for _ in range(n_iterations):
        vertices, faces = generate_grid_mesh(20)
        window = generate_random_polygon(np.array([10.0, 10.0]), 6.0, 6)
        result = clip_mesh(vertices, faces, window, config)
        print(
            f"  {result.num_faces} faces, {len(result.skipped_faces)} skipped, "
            f"area={result.total_area:.2f}"
        )


def profile_function(func, description: str) -> None:
    """Profile a function and print statistics."""
    print(f"\n{'=' * 60}")
    print(f"Profiling: {description}")
    print('=' * 60)

    # Time the execution
    start = time.perf_counter()

    profiler = cProfile.Profile()
    profiler.enable()
    func()
    profiler.disable()

    elapsed = time.perf_counter() - start

    # Get stats
    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
    ps.print_stats(30)
    print(s.getvalue())

    print(f"\nTotal time: {elapsed:.3f}s")


if __name__ == "__main__":
    print("clippoly Performance Profiling")
    print("=" * 60)

    profile_function(
        lambda: run_polygon_workload(500),
        "Random polygon pairs (triangle x quad, 500 iterations)"
    )

    profile_function(
        lambda: run_mesh_workload(5, "traced"),
        "Grid mesh (800 faces, traced, 5 iterations)"
    )

    profile_function(
        lambda: run_mesh_workload(5, "refined"),
        "Grid mesh (800 faces, refined, 5 iterations)"
    )
