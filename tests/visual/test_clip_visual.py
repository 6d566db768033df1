"""
Visual validation tests for polygon clipping.

These tests create matplotlib figures showing:
- Target and clip polygons
- The fan triangles of the overlap
- The traced boundary loop with crossing nodes

Run with: pytest tests/visual/test_clip_visual.py -v

Output figures are saved to: tests/visual/output/
"""

import pytest
import numpy as np
from pathlib import Path

# Try to import matplotlib, skip tests if not available
try:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import matplotlib.patches as mpatches
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from clippoly import ClipConfig, clip_detailed, clip_mesh
from clippoly.geometry import total_area


# Output directory for visual test results
OUTPUT_DIR = Path(__file__).parent / "output"

SQUARE = np.array([[0, 0, 0], [4, 0, 0], [4, 4, 0], [0, 4, 0]], dtype=np.float64)
WINDOW = np.array([[2, -1, 0], [5, -1, 0], [5, 3, 0], [2, 3, 0]], dtype=np.float64)


@pytest.fixture(scope="module", autouse=True)
def setup_output_dir():
    """Create output directory if it doesn't exist."""
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


def save_figure(fig, name: str):
    """Save figure to output directory."""
    filepath = OUTPUT_DIR / f"{name}.png"
    fig.savefig(filepath, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"Saved: {filepath}")
    return filepath


@pytest.mark.skipif(not HAS_MATPLOTLIB, reason="matplotlib not installed")
class TestClipVisual:
    """Visual validation tests for clip results."""

    def _draw_polygon(self, ax, polygon, color='blue', alpha=0.2, label=None):
        """Draw a polygon outline with a light fill."""
        patch = mpatches.Polygon(polygon[:, :2], closed=True,
                                 facecolor=color, alpha=alpha,
                                 edgecolor=color, linewidth=2, label=label)
        ax.add_patch(patch)

    def _draw_triangles(self, ax, triangles, color='orange'):
        for tri in triangles:
            patch = mpatches.Polygon(tri[:, :2], closed=True, facecolor=color,
                                     alpha=0.6, edgecolor='black', linewidth=1)
            ax.add_patch(patch)

    def _draw_loop(self, ax, loop):
        closed = np.vstack([loop, loop[:1]])
        ax.plot(closed[:, 0], closed[:, 1], 'r--', linewidth=1)
        for i, (x, y, z) in enumerate(loop):
            ax.annotate(f"{i}: z={z:.2f}", (x, y), fontsize=7,
                        xytext=(4, 4), textcoords='offset points')

    def _setup_axes(self, ax, title, xlim=(-1.5, 6), ylim=(-1.5, 5)):
        """Setup axes with grid and labels."""
        ax.set_xlim(xlim)
        ax.set_ylim(ylim)
        ax.set_aspect('equal')
        ax.grid(True, alpha=0.3)
        ax.set_title(title)

    @pytest.mark.parametrize("method", ["traced", "refined"])
    def test_visual_square_halves(self, method):
        """Both halves of a square clipped by an offset window."""
        fig, axes = plt.subplots(1, 2, figsize=(10, 5))
        config = ClipConfig(method=method)

        for ax, indices, expected in zip(axes, ([0, 1, 2], [0, 2, 3]), (5.5, 0.5)):
            target = SQUARE[indices]
            report = clip_detailed(target, WINDOW, config)

            self._draw_polygon(ax, target, color='blue', label='target')
            self._draw_polygon(ax, WINDOW, color='green', label='clip')
            self._draw_triangles(ax, report.triangles)
            self._draw_loop(ax, report.loop)
            self._setup_axes(ax, f"{method}: area={report.area:.2f}")
            ax.legend(loc='upper left', fontsize=7)

            assert report.area == pytest.approx(expected)

        path = save_figure(fig, f"square_halves_{method}")
        assert path.exists()

    def test_visual_cheap_paths(self):
        """Containment, half-plane and disjoint cases side by side."""
        diamond = np.array([[1, 0, 0], [2, 1, 0], [1, 2, 0], [0, 1, 0]], dtype=np.float64)
        cases = [
            ("target-contained", SQUARE * 0.25 + [1, 1, 0], SQUARE),
            ("halfplane", diamond, SQUARE * 0.5 + [1, 0, 0]),
            ("disjoint", SQUARE, SQUARE + [5, 0, 0]),
        ]

        fig, axes = plt.subplots(1, 3, figsize=(15, 5))
        for ax, (expected, target, clip_poly) in zip(axes, cases):
            report = clip_detailed(target, clip_poly)
            self._draw_polygon(ax, target, color='blue')
            self._draw_polygon(ax, clip_poly, color='green')
            self._draw_triangles(ax, report.triangles)
            self._setup_axes(ax, report.strategy, xlim=(-1, 10), ylim=(-1, 5))

            assert report.strategy == expected

        save_figure(fig, "cheap_paths")

    def test_visual_mesh_clip(self):
        """Clipped ramp mesh shown as a wireframe coloured by z."""
        vertices = np.array([[0, 0, 0], [4, 0, 4], [4, 4, 4], [0, 4, 0]], dtype=np.float64)
        faces = np.array([[0, 1, 2], [0, 2, 3]])
        result = clip_mesh(vertices, faces, WINDOW)

        fig, ax = plt.subplots(figsize=(6, 6))
        self._draw_polygon(ax, WINDOW, color='green')
        ax.triplot(vertices[:, 0], vertices[:, 1], faces, color='gray', linewidth=1)
        ax.tripcolor(result.vertices[:, 0], result.vertices[:, 1], result.faces,
                     result.vertices[:, 2], cmap='viridis', alpha=0.8)
        self._setup_axes(ax, f"mesh: {result.num_faces} faces, area={result.total_area:.2f}")

        save_figure(fig, "mesh_clip")
        assert total_area(result.vertices[result.faces]) == pytest.approx(6.0)
