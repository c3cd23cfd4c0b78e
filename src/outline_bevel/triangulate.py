"""
Cap triangulation: 2D contour (+ holes) -> triangles, then lifted to a Z plane.

The default triangulator runs GEOS' constrained Delaunay triangulation
through shapely, so no Steiner points are added and every cap vertex is one
of the contour points handed in.
"""
import logging
from typing import Callable, List, Sequence, Tuple

import shapely
from shapely.geometry import MultiPolygon, Polygon

from outline_bevel.geometry import Triangle3D, Vec2, to_vec3

logger = logging.getLogger(__name__)

Triangle2D = Tuple[Vec2, Vec2, Vec2]

# (outer contour, hole contours) -> 2D triangles
Triangulator = Callable[[Sequence[Vec2], Sequence[Sequence[Vec2]]], List[Triangle2D]]


def _clean_polygon(polygon: Polygon) -> List[Polygon]:
    if polygon.is_valid:
        return [polygon]
    logger.warning("Cap contour is not a simple polygon, repairing with buffer(0)")
    clean = polygon.buffer(0)
    if isinstance(clean, MultiPolygon):
        return [g for g in clean.geoms if g.area > 0]
    if isinstance(clean, Polygon) and not clean.is_empty:
        return [clean]
    return []


def constrained_triangulate(
    outer: Sequence[Vec2],
    holes: Sequence[Sequence[Vec2]] = (),
) -> List[Triangle2D]:
    """Triangulate a simple polygon with holes nested inside it.

    Args:
        outer: Outer contour, open or closed, either orientation.
        holes: Hole contours strictly inside ``outer``.

    Returns:
        List of 2D triangles covering the outer contour minus the holes.
    """
    if len(outer) < 3:
        logger.warning("Skipping cap contour with %d points", len(outer))
        return []
    kept_holes = [list(h) for h in holes if len(h) >= 3]
    if len(kept_holes) != len(holes):
        logger.warning("Dropped %d degenerate hole contour(s)", len(holes) - len(kept_holes))

    triangles: List[Triangle2D] = []
    for polygon in _clean_polygon(Polygon(shell=list(outer), holes=kept_holes)):
        for tri in shapely.constrained_delaunay_triangles(polygon).geoms:
            if tri.is_empty or tri.area <= 0:
                continue
            a, b, c = list(tri.exterior.coords)[:3]
            triangles.append((
                (float(a[0]), float(a[1])),
                (float(b[0]), float(b[1])),
                (float(c[0]), float(c[1])),
            ))
    return triangles


def lift_triangles(
    triangles_2d: Sequence[Triangle2D],
    z: float,
    facing_up: bool,
) -> List[Triangle3D]:
    """Place 2D triangles on the plane at *z*.

    Each triangle is wound so its normal points to +Z when ``facing_up`` is
    set (top caps) and to -Z otherwise (floors).
    """
    lifted: List[Triangle3D] = []
    for a, b, c in triangles_2d:
        cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
        if (cross > 0) != facing_up:
            b, c = c, b
        lifted.append((to_vec3(a, z), to_vec3(b, z), to_vec3(c, z)))
    return lifted

