"""
A closed ring of segments: wall/bevel generation and normal orientation.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from outline_bevel.errors import BevelIntersectionError
from outline_bevel.geometry import Rect, Triangle3D, Vec2, as_vec2
from outline_bevel.segments import Line, Segment

logger = logging.getLogger(__name__)


@dataclass
class RingMesh:
    """Triangles generated for one ring plus the contour of its cap."""
    triangles: List[Triangle3D] = field(default_factory=list)
    contour: List[Vec2] = field(default_factory=list)  # cap outline, ring order
    z: float = 0.0                                     # height of the cap plane


class SubPath:
    """An ordered, closed ring of segments.

    The caller is responsible for closing the ring: the last segment must end
    where the first one starts.

    ``flip_normals`` reverses the side the bevel is offset to (and the wall
    winding). ``floor_points``/``floor_z`` and ``bevel_points``/``bevel_z``
    hold the cap contour of the most recent ``wall``/``bevel`` call.
    """

    def __init__(
        self,
        segments: Sequence[Segment],
        flip_normals: bool = False,
        is_outer: bool = False,
    ):
        self.segments: List[Segment] = list(segments)
        self.flip_normals = flip_normals
        self.is_outer = is_outer
        self.floor_points: List[Vec2] = []
        self.floor_z = 0.0
        self.bevel_points: List[Vec2] = []
        self.bevel_z = 0.0

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]], **kwargs) -> "SubPath":
        """Closed polygon of Line segments through *points*.

        A closing segment is added unless the last point repeats the first.
        Consecutive duplicate points are dropped.
        """
        pts: List[np.ndarray] = []
        for p in points:
            v = as_vec2(p)
            if pts and np.array_equal(pts[-1], v):
                continue
            pts.append(v)
        if len(pts) > 1 and np.array_equal(pts[0], pts[-1]):
            pts.pop()
        if len(pts) < 3:
            raise ValueError(f"A ring needs at least 3 distinct points, got {len(pts)}")
        segments = [Line(pts[i], pts[(i + 1) % len(pts)]) for i in range(len(pts))]
        return cls(segments, **kwargs)

    def __repr__(self) -> str:
        return (
            f"SubPath({len(self.segments)} segments, "
            f"flip_normals={self.flip_normals}, is_outer={self.is_outer})"
        )

    def bbox(self) -> Rect:
        """Union of all segment boxes (empty Rect for an empty ring)."""
        if not self.segments:
            return Rect()
        box = self.segments[0].bbox()
        for seg in self.segments[1:]:
            box = box.join(seg.bbox())
        return box

    def wall(self, height: float, max_degrees: float) -> RingMesh:
        """Vertical wall from z=0 to *height* around the whole ring."""
        result = RingMesh(z=0.0)
        for seg in self.segments:
            tris, pts = seg.wall(height, max_degrees, self.flip_normals)
            result.triangles.extend(tris)
            result.contour.extend(pts)
        self.floor_points = list(result.contour)
        self.floor_z = result.z
        return result

    def bevel(
        self,
        height: float,
        offset: float,
        degrees: float,
        max_degrees: float,
    ) -> RingMesh:
        """Bevel skirt around the whole ring, mitred at every joint.

        Raises:
            BevelIntersectionError: with ``segment_index`` set.
        """
        result = RingMesh(z=height + offset * math.tan(math.radians(degrees)))
        count = len(self.segments)
        for i, seg in enumerate(self.segments):
            prev_normal = self.segments[(i + count - 1) % count].normalized_normal(1.0)
            next_normal = self.segments[(i + 1) % count].normalized_normal(0.0)
            if self.flip_normals:
                prev_normal, next_normal = -prev_normal, -next_normal
            try:
                tris, pts = seg.bevel(
                    height, offset, degrees, max_degrees,
                    self.flip_normals, prev_normal, next_normal,
                )
            except BevelIntersectionError as exc:
                raise exc.with_context(segment_index=i) from exc
            result.triangles.extend(tris)
            result.contour.extend(pts)

        logger.debug(
            "Ring bevel: %d segments, %d triangles, %d contour points",
            count, len(result.triangles), len(result.contour),
        )
        self.bevel_points = list(result.contour)
        self.bevel_z = result.z
        return result

    def auto_flip_normals(self) -> None:
        """Set ``flip_normals`` when the left normals point out of the ring.

        Every segment end point is moved one unit along its normalized left
        normal. If those points stay inside the ring's box, the normals face
        into the ring and nothing changes; otherwise the ring is flipped.
        The flag is only ever set, so calling this twice is harmless.
        """
        box = self.bbox()
        moved = box
        for seg in self.segments:
            ends = [
                seg.at(0.0) + seg.normalized_normal(0.0),
                seg.at(1.0) + seg.normalized_normal(1.0),
            ]
            moved = moved.join(Rect.from_points(ends))
        if box.contains(moved):
            return
        logger.debug("Flipping normals of %r", self)
        self.flip_normals = True
