"""
Vector-math helpers shared by segments, sub-paths and paths.

Parametric evaluations work on numpy (2,) arrays; anything that leaves the
package (mesh triangles, contour points handed to the triangulator) is
converted to plain float tuples.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]
Triangle3D = Tuple[Vec3, Vec3, Vec3]


def _zero2() -> np.ndarray:
    return np.zeros(2, dtype=float)


@dataclass
class Rect:
    """Axis-aligned 2D bounding box."""
    min: np.ndarray = field(default_factory=_zero2)  # (2,) lower-left
    max: np.ndarray = field(default_factory=_zero2)  # (2,) upper-right

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> "Rect":
        """Smallest box covering all points."""
        arr = np.asarray(list(points), dtype=float).reshape(-1, 2)
        if len(arr) == 0:
            return cls()
        return cls(min=arr.min(axis=0), max=arr.max(axis=0))

    def join(self, other: "Rect") -> "Rect":
        """Union of this box and *other*."""
        return Rect(
            min=np.minimum(self.min, other.min),
            max=np.maximum(self.max, other.max),
        )

    def contains(self, other: "Rect") -> bool:
        """True when *other* lies inside this box (edges inclusive)."""
        return bool(
            np.all(self.min <= other.min) and np.all(other.max <= self.max)
        )

    def area(self) -> float:
        size = self.max - self.min
        return float(size[0] * size[1])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rect):
            return NotImplemented
        return bool(
            np.array_equal(self.min, other.min)
            and np.array_equal(self.max, other.max)
        )


def as_vec2(p: Sequence[float]) -> np.ndarray:
    return np.asarray(p, dtype=float).reshape(2)


def lerp(p0: np.ndarray, p1: np.ndarray, t: float) -> np.ndarray:
    """Linear interpolation; exact at t=0 and t=1."""
    return p0 * (1.0 - t) + p1 * t


def rotate90_left(v: np.ndarray) -> np.ndarray:
    return np.array([-v[1], v[0]], dtype=float)


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along *v*; a zero vector is returned unchanged."""
    length = float(np.hypot(v[0], v[1]))
    if length == 0.0:
        return np.array(v, dtype=float)
    return v / length


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Unsigned angle in radians between two non-zero vectors."""
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    cos_theta = float(np.dot(a, b)) / denom
    return float(np.arccos(np.clip(cos_theta, -1.0, 1.0)))


def to_vec2(p: np.ndarray) -> Vec2:
    return (float(p[0]), float(p[1]))


def to_vec3(p: Sequence[float], z: float) -> Vec3:
    return (float(p[0]), float(p[1]), float(z))


def segments_intersect(
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    d: np.ndarray,
) -> Optional[np.ndarray]:
    """Intersection point of the bounded segments a-b and c-d, or None.

    The supporting lines are solved with Cramer's rule and the result is
    accepted only if it lies inside the bounding extent of both segments
    (inclusive). Parallel or coincident segments never intersect.
    """
    div = (a[0] - b[0]) * (c[1] - d[1]) - (a[1] - b[1]) * (c[0] - d[0])
    if div == 0:
        return None

    ab = a[0] * b[1] - a[1] * b[0]
    cd = c[0] * d[1] - c[1] * d[0]
    x = (ab * (c[0] - d[0]) - (a[0] - b[0]) * cd) / div
    y = (ab * (c[1] - d[1]) - (a[1] - b[1]) * cd) / div

    for p, q in ((a, b), (c, d)):
        if not min(p[0], q[0]) <= x <= max(p[0], q[0]):
            return None
        if not min(p[1], q[1]) <= y <= max(p[1], q[1]):
            return None
    return np.array([x, y], dtype=float)
