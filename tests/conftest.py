"""
Shared fixtures for outline wall/bevel tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest
from shapely.geometry import MultiPolygon, Polygon

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from outline_bevel import Curve, Line, SubPath, constrained_triangulate


def square_points(x0, y0, size):
    """Counter-clockwise square corners starting at (x0, y0)."""
    return [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)]


def holed_squares():
    """Two disjoint 10x10 squares, each with a centred 2x2 hole."""
    return MultiPolygon([
        Polygon(square_points(x0, 0, 10), holes=[square_points(x0 + 4, 4, 2)])
        for x0 in (0, 20)
    ])


def triangles_area(triangles_2d):
    """Total unsigned area of a 2D triangle list."""
    if not triangles_2d:
        return 0.0
    tris = np.asarray(triangles_2d, dtype=float)
    ab = tris[:, 1] - tris[:, 0]
    ac = tris[:, 2] - tris[:, 0]
    cross = ab[:, 0] * ac[:, 1] - ab[:, 1] * ac[:, 0]
    return float(np.sum(np.abs(cross)) * 0.5)


class RecordingTriangulator:
    """Triangulator that remembers every (outer, holes) call."""

    def __init__(self):
        self.calls = []

    def __call__(self, outer, holes):
        self.calls.append((list(outer), [list(h) for h in holes]))
        return constrained_triangulate(outer, holes)


@pytest.fixture
def arch_curve():
    """Cubic Bezier arch from (0,0) to (2,0) peaking at (1, 0.75)."""
    return Curve((0, 0), (0, 1), (2, 1), (2, 0))


@pytest.fixture
def diagonal_line():
    return Line((0, 1), (2, -1))


@pytest.fixture
def unit_line():
    return Line((0, 0), (1, 0))


@pytest.fixture
def ccw_square():
    """10x10 counter-clockwise square ring (left normals point inside)."""
    return SubPath.from_points(square_points(0, 0, 10))


@pytest.fixture
def cw_square():
    """10x10 clockwise square ring (left normals point outside)."""
    return SubPath.from_points(list(reversed(square_points(0, 0, 10))))


@pytest.fixture
def recorder():
    return RecordingTriangulator()
