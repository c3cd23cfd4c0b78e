"""
A path is a set of rings: outer boundaries plus the holes inside them.

Walls and bevels are generated ring by ring. Caps (the floor under the wall
and the flat top of the bevel) are triangulated in sessions: a session is
opened by one ring and collects as holes the following rings whose boxes
fit inside the first ring's box. A ring that does not fit closes the session
and opens a new one, because the triangulator takes a single outer contour
per call.

Hole detection is a bounding-box heuristic. Rings whose boxes nest without
the rings themselves nesting are misclassified.
"""
import logging
from typing import Callable, List, Optional, Sequence, Union

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.polygon import orient

from outline_bevel.errors import BevelIntersectionError
from outline_bevel.geometry import Rect, Triangle3D, Vec2
from outline_bevel.subpath import RingMesh, SubPath
from outline_bevel.triangulate import Triangulator, constrained_triangulate, lift_triangles

logger = logging.getLogger(__name__)


class _CapSession:
    """One outer contour and the hole contours registered against it."""

    def __init__(self, outer: List[Vec2]):
        self.outer = outer
        self.holes: List[List[Vec2]] = []

    def add_hole(self, contour: List[Vec2]) -> None:
        self.holes.append(contour)

    def finalize(
        self,
        triangulator: Triangulator,
        z: float,
        facing_up: bool,
    ) -> List[Triangle3D]:
        logger.debug(
            "Triangulating cap: %d outer points, %d holes", len(self.outer), len(self.holes)
        )
        return lift_triangles(triangulator(self.outer, self.holes), z, facing_up)


class Path:
    """An ordered collection of SubPath rings."""

    def __init__(
        self,
        subpaths: Optional[Sequence[SubPath]] = None,
        triangulator: Optional[Triangulator] = None,
    ):
        self.subpaths: List[SubPath] = list(subpaths or [])
        self.triangulator: Triangulator = triangulator or constrained_triangulate

    @classmethod
    def from_polygon(
        cls,
        polygon: Union[Polygon, MultiPolygon],
        triangulator: Optional[Triangulator] = None,
    ) -> "Path":
        """Rings of Line segments from a shapely (Multi)Polygon.

        Exteriors are wound counter-clockwise and interiors clockwise, so the
        left normals of every ring point into the solid.

        Cap sessions only match holes against the largest ring, so a
        MultiPolygon with several members is accepted only when none of them
        has holes. Use :meth:`from_multipolygon` for the general case.

        Raises:
            ValueError: for a multi-member MultiPolygon with interiors.
        """
        polygons = list(polygon.geoms) if isinstance(polygon, MultiPolygon) else [polygon]
        polygons = [p for p in polygons if not p.is_empty]
        if len(polygons) > 1 and any(p.interiors for p in polygons):
            raise ValueError(
                f"MultiPolygon with {len(polygons)} members has holes; "
                "use Path.from_multipolygon to get one Path per member"
            )
        subpaths: List[SubPath] = []
        for poly in polygons:
            poly = orient(poly, sign=1.0)
            subpaths.append(SubPath.from_points(poly.exterior.coords))
            for interior in poly.interiors:
                subpaths.append(SubPath.from_points(interior.coords))
        return cls(subpaths, triangulator=triangulator)

    @classmethod
    def from_multipolygon(
        cls,
        polygon: Union[Polygon, MultiPolygon],
        triangulator: Optional[Triangulator] = None,
    ) -> List["Path"]:
        """One Path per non-empty member polygon."""
        polygons = list(polygon.geoms) if isinstance(polygon, MultiPolygon) else [polygon]
        return [cls.from_polygon(p, triangulator) for p in polygons if not p.is_empty]

    def __repr__(self) -> str:
        return f"Path({len(self.subpaths)} subpaths)"

    def bbox(self) -> Rect:
        """Union of all ring boxes (empty Rect for an empty path)."""
        if not self.subpaths:
            return Rect()
        box = self.subpaths[0].bbox()
        for sp in self.subpaths[1:]:
            box = box.join(sp.bbox())
        return box

    def auto_flip_normals(self) -> None:
        """Sort rings by box area (largest first) and orient them.

        The largest ring becomes the outer ring. If it needs flipping, every
        other ring is flipped as well, since holes wind opposite to it.
        """
        if not self.subpaths:
            return
        self.subpaths.sort(key=lambda sp: sp.bbox().area(), reverse=True)
        outer = self.subpaths[0]
        outer.is_outer = True
        outer.auto_flip_normals()
        if outer.flip_normals:
            for sp in self.subpaths[1:]:
                sp.flip_normals = True

    def wall(self, height: float, max_degrees: float) -> List[Triangle3D]:
        """Walls of every ring plus the floor caps at z=0."""
        return self._generate(
            lambda sp: sp.wall(height, max_degrees),
            facing_up=False,
        )

    def bevel(
        self,
        height: float,
        offset: float,
        degrees: float,
        max_degrees: float,
    ) -> List[Triangle3D]:
        """Bevels of every ring plus the top caps at the bevel height.

        Raises:
            BevelIntersectionError: with ``ring_index`` and ``segment_index``
                set.
        """
        return self._generate(
            lambda sp: sp.bevel(height, offset, degrees, max_degrees),
            facing_up=True,
        )

    def _generate(
        self,
        build: Callable[[SubPath], RingMesh],
        facing_up: bool,
    ) -> List[Triangle3D]:
        if not self.subpaths:
            return []

        first_box = self.subpaths[0].bbox()
        result: List[Triangle3D] = []
        cap_z = 0.0
        session: Optional[_CapSession] = None

        for i, sp in enumerate(self.subpaths):
            try:
                ring = build(sp)
            except BevelIntersectionError as exc:
                raise exc.with_context(ring_index=i) from exc
            result.extend(ring.triangles)

            if session is None:
                cap_z = ring.z
                session = _CapSession(ring.contour)
            elif first_box.contains(sp.bbox()):
                logger.debug("Ring %d is a hole of the current cap", i)
                session.add_hole(ring.contour)
            else:
                logger.debug("Ring %d is outside the first ring, starting a new cap", i)
                result.extend(session.finalize(self.triangulator, cap_z, facing_up))
                session = _CapSession(ring.contour)

        result.extend(session.finalize(self.triangulator, cap_z, facing_up))
        return result
