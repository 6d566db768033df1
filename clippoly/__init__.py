"""
clippoly
========

Planar clipping of two polygons with interpolated z, returning the overlap
as triangles, and clipping of whole triangle meshes against one polygon.
"""

from clippoly.api import clip, clip_detailed, ClipReport
from clippoly.config import ClipConfig, EPSILON, DEFAULT_MAX_ITERATIONS
from clippoly.debug import (
    log_clipping_stage,
    log_loop,
    log_mesh_summary,
    format_point,
    format_polygon,
    setup_debug_logging,
    disable_debug_logging,
)
from clippoly.errors import (
    ClipError,
    InvalidInputError,
    TraceError,
    TraceFailureError,
    IterationLimitExceededError,
    TriangulationInputTooSmallError,
)
from clippoly.graph import IdGenerator, Node, NodeGraph, Origin
from clippoly.mesh import clip_mesh, MeshClipResult
from clippoly.tracing import TraceState, trace_loop, trace_loop_refined
from clippoly.triangulate import fan_triangulate

__all__ = [
    # Main API
    'clip',
    'clip_detailed',
    'ClipReport',
    'clip_mesh',
    'MeshClipResult',
    'ClipConfig',
    'EPSILON',
    'DEFAULT_MAX_ITERATIONS',
    # Errors
    'ClipError',
    'InvalidInputError',
    'TraceError',
    'TraceFailureError',
    'IterationLimitExceededError',
    'TriangulationInputTooSmallError',
    # Graph and tracing
    'IdGenerator',
    'Node',
    'NodeGraph',
    'Origin',
    'TraceState',
    'trace_loop',
    'trace_loop_refined',
    'fan_triangulate',
    # Debug utilities
    'log_clipping_stage',
    'log_loop',
    'log_mesh_summary',
    'format_point',
    'format_polygon',
    'setup_debug_logging',
    'disable_debug_logging',
]
__version__ = '0.1.0'
