"""Outline -> wall + bevel solid: configuration and mesh assembly."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np
import trimesh

from outline_bevel.geometry import Triangle3D
from outline_bevel.path import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtrudeConfig:
    """Parameters for turning a 2D outline into a bevelled solid."""

    wall_height: float = 4.0
    bevel_offset: float = 1.0
    bevel_angle_deg: float = 45.0  # 0 is a flat ledge
    max_angle_deg: float = 5.0  # max tangent turn between curve slices
    auto_flip: bool = True
    include_wall: bool = True
    include_bevel: bool = True

    @property
    def bevel_height(self) -> float:
        return self.bevel_offset * math.tan(math.radians(self.bevel_angle_deg))

    @property
    def top_z(self) -> float:
        if not self.include_bevel:
            return self.wall_height
        return self.wall_height + self.bevel_height

    def validate(self) -> List[str]:
        """Check for unusable parameters.

        Returns list of issue strings (empty = ok).
        """
        issues = []
        if self.wall_height < 0:
            issues.append(f"wall_height must be >= 0, got {self.wall_height}")
        if self.bevel_offset < 0:
            issues.append(f"bevel_offset must be >= 0, got {self.bevel_offset}")
        if not 0.0 <= self.bevel_angle_deg < 90.0:
            issues.append(
                f"bevel_angle_deg must be in [0, 90), got {self.bevel_angle_deg}"
            )
        if self.max_angle_deg <= 0:
            issues.append(f"max_angle_deg must be > 0, got {self.max_angle_deg}")
        if not (self.include_wall or self.include_bevel):
            issues.append("Nothing to build: include_wall and include_bevel are both off")
        return issues


def build_triangles(
    path: Path,
    config: Optional[ExtrudeConfig] = None,
) -> List[Triangle3D]:
    """Wall (with floor) and bevel (with top cap) triangles for *path*.

    Raises:
        ValueError: if the config is invalid.
        BevelIntersectionError: if a bevel folds onto itself inside a
            segment.
    """
    if config is None:
        config = ExtrudeConfig()
    issues = config.validate()
    if issues:
        raise ValueError("Invalid ExtrudeConfig: " + "; ".join(issues))

    if config.auto_flip:
        path.auto_flip_normals()

    triangles: List[Triangle3D] = []
    if config.include_wall:
        triangles.extend(path.wall(config.wall_height, config.max_angle_deg))
    if config.include_bevel:
        triangles.extend(path.bevel(
            config.wall_height,
            config.bevel_offset,
            config.bevel_angle_deg,
            config.max_angle_deg,
        ))

    logger.info(
        "Built %d triangles for %d ring(s), top at z=%.3f",
        len(triangles), len(path.subpaths), config.top_z,
    )
    return triangles


def triangles_to_mesh(triangles: Sequence[Triangle3D]) -> trimesh.Trimesh:
    """Indexed trimesh from a flat triangle list (shared vertices merged)."""
    if not triangles:
        return trimesh.Trimesh(
            vertices=np.zeros((0, 3), dtype=float),
            faces=np.zeros((0, 3), dtype=int),
        )
    vertices = np.asarray(triangles, dtype=float).reshape(-1, 3)
    faces = np.arange(len(vertices), dtype=int).reshape(-1, 3)
    mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    mesh.merge_vertices()
    return mesh


def build_mesh(
    path: Union[Path, Sequence[Path]],
    config: Optional[ExtrudeConfig] = None,
) -> trimesh.Trimesh:
    """trimesh of :func:`build_triangles`.

    A sequence of paths (e.g. from ``Path.from_multipolygon``) is built
    path by path and merged into one mesh.
    """
    paths = [path] if isinstance(path, Path) else list(path)
    triangles: List[Triangle3D] = []
    for p in paths:
        triangles.extend(build_triangles(p, config))
    return triangles_to_mesh(triangles)
