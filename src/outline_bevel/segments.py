"""
Parametric 2D segments (straight lines and cubic Bezier curves).

Each segment can be evaluated at a parameter t in [0, 1] and turned into
two kinds of 3D triangle strips:

- ``wall``: a vertical extrusion from z=0 up to ``height``.
- ``bevel``: an angled skirt starting at ``height`` that moves ``offset``
  sideways along the segment normal while rising
  ``offset * tan(degrees)``. Its ends are mitred against the normals of the
  neighbouring segments.

Both strips return the 2D contour points of their top edge so the owning
ring can triangulate a flat cap.
"""
import logging
import math
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

import numpy as np

from outline_bevel.errors import BevelIntersectionError
from outline_bevel.geometry import (
    Rect,
    Triangle3D,
    Vec2,
    angle_between,
    as_vec2,
    lerp,
    normalize,
    rotate90_left,
    segments_intersect,
    to_vec2,
    to_vec3,
)

logger = logging.getLogger(__name__)

# Subdivision stops splitting an interval once it is narrower than this.
MIN_PARAM_INTERVAL = 1e-2


class Segment(ABC):
    """A 2D parametric segment with t in [0, 1].

    Only ``Line`` and ``Curve`` implement this interface.
    """

    @abstractmethod
    def bbox(self) -> Rect:
        """Bounding box of the segment, computed at construction."""

    @abstractmethod
    def at(self, t: float) -> np.ndarray:
        """Point on the segment at parameter t."""

    @abstractmethod
    def tangent(self, t: float) -> np.ndarray:
        """Un-normalized derivative at parameter t."""

    @abstractmethod
    def parameters(self, max_degrees: float) -> List[float]:
        """Increasing parameter values used to slice the segment."""

    @abstractmethod
    def is_line(self) -> bool:
        ...

    def normalized_tangent(self, t: float) -> np.ndarray:
        return normalize(self.tangent(t))

    def normal(self, t: float) -> np.ndarray:
        """Tangent rotated 90 degrees to the left."""
        return rotate90_left(self.tangent(t))

    def normalized_normal(self, t: float) -> np.ndarray:
        return normalize(self.normal(t))

    def wall(
        self,
        height: float,
        max_degrees: float,
        flip_normals: bool = False,
    ) -> Tuple[List[Triangle3D], List[Vec2]]:
        """Vertical extrusion of the segment from z=0 to z=height.

        Returns the triangles and the floor contour points (the end point of
        every slice).
        """
        return _wall_slices(self, self.parameters(max_degrees), height, flip_normals)

    def bevel(
        self,
        height: float,
        offset: float,
        degrees: float,
        max_degrees: float,
        flip_normals: bool,
        prev_normal: Sequence[float],
        next_normal: Sequence[float],
    ) -> Tuple[List[Triangle3D], List[Vec2]]:
        """Angled extrusion of the segment starting at z=height.

        Args:
            height: Z of the bottom edge of the bevel.
            offset: Horizontal distance of the top edge from the segment.
            degrees: Bevel angle, 0 is horizontally flat.
            max_degrees: Maximum turning angle between slices.
            flip_normals: Offset against the left normal instead of along it.
            prev_normal: Previous segment's normalized normal at t=1,
                already flipped by the caller if needed.
            next_normal: Next segment's normalized normal at t=0, already
                flipped by the caller if needed.

        Returns:
            (triangles, bevel contour points)

        Raises:
            BevelIntersectionError: offsets cross at an interior slice.
        """
        return _bevel_slices(
            self,
            self.parameters(max_degrees),
            height,
            offset,
            degrees,
            flip_normals,
            as_vec2(prev_normal),
            as_vec2(next_normal),
        )


class Line(Segment):
    """A straight segment from p0 to p1."""

    def __init__(self, p0: Sequence[float], p1: Sequence[float]):
        self.p0 = as_vec2(p0)
        self.p1 = as_vec2(p1)
        self._bbox = Rect.from_points([self.p0, self.p1])

    def __repr__(self) -> str:
        return f"Line({to_vec2(self.p0)}, {to_vec2(self.p1)})"

    def bbox(self) -> Rect:
        return Rect(min=self._bbox.min.copy(), max=self._bbox.max.copy())

    def at(self, t: float) -> np.ndarray:
        return lerp(self.p0, self.p1, t)

    def tangent(self, t: float) -> np.ndarray:
        return self.p1 - self.p0

    def parameters(self, max_degrees: float) -> List[float]:
        # A line never turns, so one slice is enough.
        return [0.0, 1.0]

    def is_line(self) -> bool:
        return True


class Curve(Segment):
    """A cubic Bezier curve with control points p0..p3."""

    def __init__(
        self,
        p0: Sequence[float],
        p1: Sequence[float],
        p2: Sequence[float],
        p3: Sequence[float],
    ):
        self.p0 = as_vec2(p0)
        self.p1 = as_vec2(p1)
        self.p2 = as_vec2(p2)
        self.p3 = as_vec2(p3)
        # Coincident handles give a zero tangent at the end point.
        if np.array_equal(self.p0, self.p1):
            logger.warning(
                "Cubic bezier p0 == p1 == %s, using p2 %s as p1",
                to_vec2(self.p0), to_vec2(self.p2),
            )
            self.p1 = self.p2.copy()
        if np.array_equal(self.p2, self.p3):
            logger.warning(
                "Cubic bezier p2 == p3 == %s, using p1 %s as p2",
                to_vec2(self.p3), to_vec2(self.p1),
            )
            self.p2 = self.p1.copy()

        # Endpoints plus three samples: a cheap bound, not the exact hull.
        samples = [self.p0, self.p3] + [self.at(t) for t in (0.25, 0.5, 0.75)]
        self._bbox = Rect.from_points(samples)

    def __repr__(self) -> str:
        pts = ", ".join(str(to_vec2(p)) for p in (self.p0, self.p1, self.p2, self.p3))
        return f"Curve({pts})"

    def bbox(self) -> Rect:
        return Rect(min=self._bbox.min.copy(), max=self._bbox.max.copy())

    def at(self, t: float) -> np.ndarray:
        s = 1.0 - t
        return (
            self.p0 * (s * s * s)
            + self.p1 * (3.0 * s * s * t)
            + self.p2 * (3.0 * s * t * t)
            + self.p3 * (t * t * t)
        )

    def tangent(self, t: float) -> np.ndarray:
        s = 1.0 - t
        return (
            (self.p1 - self.p0) * (3.0 * s * s)
            + (self.p2 - self.p1) * (6.0 * s * t)
            + (self.p3 - self.p2) * (3.0 * t * t)
        )

    def subdivide(self, max_degrees: float) -> List[float]:
        """Parameter values such that adjacent tangents differ by at most
        ``max_degrees``.

        Starts from [0, 0.5, 1] and bisects every interval whose end
        tangents turn too far. Intervals narrower than MIN_PARAM_INTERVAL
        are accepted as they are.
        """
        ts = [0.0, 0.5, 1.0]
        tangents = [self.normalized_tangent(t) for t in ts]
        max_radians = abs(math.radians(max_degrees))

        i = 0
        while i < len(ts) - 1:
            if ts[i + 1] - ts[i] < MIN_PARAM_INTERVAL:
                logger.warning(
                    "Stopping subdivision between t=%s and t=%s", ts[i], ts[i + 1]
                )
                i += 1
                continue
            if angle_between(tangents[i], tangents[i + 1]) > max_radians:
                m = 0.5 * (ts[i] + ts[i + 1])
                ts.insert(i + 1, m)
                tangents.insert(i + 1, self.normalized_tangent(m))
            else:
                i += 1
        return ts

    def parameters(self, max_degrees: float) -> List[float]:
        return self.subdivide(max_degrees)

    def is_line(self) -> bool:
        return False


# ─── Slice builders ──────────────────────────────────────────────────────────

def _oriented(tri: List, flip_normals: bool) -> Triangle3D:
    if flip_normals:
        tri[1], tri[2] = tri[2], tri[1]
    return (tri[0], tri[1], tri[2])


def _wall_slices(
    segment: Segment,
    ts: List[float],
    height: float,
    flip_normals: bool,
) -> Tuple[List[Triangle3D], List[Vec2]]:
    triangles: List[Triangle3D] = []
    floor_pts: List[Vec2] = []
    for t0, t1 in zip(ts[:-1], ts[1:]):
        p0 = segment.at(t0)
        p1 = segment.at(t1)
        triangles.append(_oriented(
            [to_vec3(p0, 0.0), to_vec3(p1, height), to_vec3(p0, height)],
            flip_normals,
        ))
        triangles.append(_oriented(
            [to_vec3(p0, 0.0), to_vec3(p1, 0.0), to_vec3(p1, height)],
            flip_normals,
        ))
        floor_pts.append(to_vec2(p1))
    return triangles, floor_pts


def _miter(
    normal: np.ndarray,
    neighbour: np.ndarray,
    offset: float,
) -> Tuple[np.ndarray, float]:
    """Direction and length of a mitred offset between two unit normals."""
    if np.array_equal(normal, neighbour):
        return normal, offset
    bisector = normal + neighbour
    if not np.any(bisector):
        logger.warning(
            "Opposed normals %s and %s, skipping miter", to_vec2(normal), to_vec2(neighbour)
        )
        return normal, offset
    angle = angle_between(neighbour, normal)
    return normalize(bisector), offset / math.cos(0.5 * angle)


def _bevel_slices(
    segment: Segment,
    ts: List[float],
    height: float,
    offset: float,
    degrees: float,
    flip_normals: bool,
    prev_normal: np.ndarray,
    next_normal: np.ndarray,
) -> Tuple[List[Triangle3D], List[Vec2]]:
    rise = offset * math.tan(math.radians(degrees))
    top = height + rise
    last = len(ts) - 2

    triangles: List[Triangle3D] = []
    bevel_pts: List[Vec2] = []
    for i, (t0, t1) in enumerate(zip(ts[:-1], ts[1:])):
        p0 = segment.at(t0)
        p1 = segment.at(t1)
        n0 = segment.normalized_normal(t0)
        n1 = segment.normalized_normal(t1)
        if flip_normals:
            n0, n1 = -n0, -n1

        len0 = len1 = offset
        if i == 0:
            n0, len0 = _miter(n0, prev_normal, offset)
        if i == last:
            n1, len1 = _miter(n1, next_normal, offset)

        p2 = p0 + n0 * len0
        p3 = p1 + n1 * len1

        if segments_intersect(p0, p2, p1, p3) is not None:
            if i == 0:
                # p2 already closes the previous segment's bevel contour.
                logger.warning("Bevel offsets cross at start of %r, patching", segment)
                triangles.append(_oriented(
                    [to_vec3(p0, height), to_vec3(p1, height), to_vec3(p2, top)],
                    flip_normals,
                ))
            elif i == last:
                logger.warning("Bevel offsets cross at end of %r, patching", segment)
                triangles.append(_oriented(
                    [to_vec3(p0, height), to_vec3(p1, height), to_vec3(p3, top)],
                    flip_normals,
                ))
                bevel_pts.append(to_vec2(p3))
            else:
                raise BevelIntersectionError(slice_index=i)
            continue

        triangles.append(_oriented(
            [to_vec3(p0, height), to_vec3(p3, top), to_vec3(p2, top)],
            flip_normals,
        ))
        triangles.append(_oriented(
            [to_vec3(p0, height), to_vec3(p1, height), to_vec3(p3, top)],
            flip_normals,
        ))
        bevel_pts.append(to_vec2(p3))

    logger.debug(
        "Bevel of %r: %d slices, %d triangles", segment, len(ts) - 1, len(triangles)
    )
    return triangles, bevel_pts
