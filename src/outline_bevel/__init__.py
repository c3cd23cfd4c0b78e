"""Public API for turning 2D outlines into wall + bevel triangle meshes."""

import logging

from outline_bevel.errors import BevelError, BevelIntersectionError
from outline_bevel.geometry import Rect, Triangle3D, Vec2, Vec3, segments_intersect
from outline_bevel.path import Path
from outline_bevel.pipeline import ExtrudeConfig, build_mesh, build_triangles, triangles_to_mesh
from outline_bevel.segments import Curve, Line, Segment
from outline_bevel.subpath import RingMesh, SubPath
from outline_bevel.triangulate import Triangulator, constrained_triangulate, lift_triangles

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BevelError",
    "BevelIntersectionError",
    "Curve",
    "ExtrudeConfig",
    "Line",
    "Path",
    "Rect",
    "RingMesh",
    "Segment",
    "SubPath",
    "Triangle3D",
    "Triangulator",
    "Vec2",
    "Vec3",
    "build_mesh",
    "build_triangles",
    "constrained_triangulate",
    "lift_triangles",
    "segments_intersect",
    "triangles_to_mesh",
]
