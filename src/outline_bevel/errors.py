"""Exceptions raised while generating wall and bevel meshes."""
from typing import Optional


class BevelError(Exception):
    """Base exception for mesh generation errors."""
    pass


class BevelIntersectionError(BevelError):
    """Bevel offsets cross at an interior slice of a segment.

    There is no local repair for this case. Callers can catch it and retry
    with a smaller offset or a tighter ``max_angle_deg``.
    """

    def __init__(
        self,
        slice_index: int,
        segment_index: Optional[int] = None,
        ring_index: Optional[int] = None,
    ):
        self.slice_index = slice_index
        self.segment_index = segment_index
        self.ring_index = ring_index
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = []
        if self.ring_index is not None:
            where.append(f"ring {self.ring_index}")
        if self.segment_index is not None:
            where.append(f"segment {self.segment_index}")
        where.append(f"slice {self.slice_index}")
        return "Bevel offsets self-intersect at " + ", ".join(where)

    def with_context(
        self,
        segment_index: Optional[int] = None,
        ring_index: Optional[int] = None,
    ) -> "BevelIntersectionError":
        """Copy of this error with the enclosing segment/ring filled in."""
        return BevelIntersectionError(
            self.slice_index,
            segment_index=self.segment_index if segment_index is None else segment_index,
            ring_index=self.ring_index if ring_index is None else ring_index,
        )
