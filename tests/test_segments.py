"""Tests for Line and Curve evaluation, subdivision and wall extrusion."""
import logging
import math

import numpy as np
import pytest

from outline_bevel import Curve, Line, Segment


class TestLine:
    def test_is_segment(self, diagonal_line):
        assert isinstance(diagonal_line, Segment)
        assert diagonal_line.is_line()

    def test_bbox(self, diagonal_line):
        box = diagonal_line.bbox()
        assert np.array_equal(box.min, [0, -1])
        assert np.array_equal(box.max, [2, 1])

    def test_at(self, diagonal_line):
        assert np.array_equal(diagonal_line.at(0.5), [1, 0])

    def test_end_points_exact(self, diagonal_line):
        assert np.array_equal(diagonal_line.at(0.0), [0, 1])
        assert np.array_equal(diagonal_line.at(1.0), [2, -1])

    def test_tangent(self, diagonal_line):
        assert np.array_equal(diagonal_line.tangent(0.5), [2, -2])

    def test_normalized_tangent(self, diagonal_line):
        half = 0.5 * math.sqrt(2)
        assert diagonal_line.normalized_tangent(0.5) == pytest.approx([half, -half], abs=1e-15)

    def test_normal(self, diagonal_line):
        assert np.array_equal(diagonal_line.normal(0.5), [2, 2])

    def test_normalized_normal(self, diagonal_line):
        half = 0.5 * math.sqrt(2)
        assert diagonal_line.normalized_normal(0.5) == pytest.approx([half, half], abs=1e-15)

    def test_bbox_is_a_copy(self, diagonal_line):
        box = diagonal_line.bbox()
        box.min[0] = -100
        assert diagonal_line.bbox().min[0] == 0


class TestCurve:
    def test_is_segment(self, arch_curve):
        assert isinstance(arch_curve, Segment)
        assert not arch_curve.is_line()

    def test_bbox(self, arch_curve):
        box = arch_curve.bbox()
        assert box.min == pytest.approx([0, 0])
        assert box.max == pytest.approx([2, 0.75])

    def test_at(self, arch_curve):
        assert arch_curve.at(0.5) == pytest.approx([1, 0.75])

    def test_end_points_exact(self, arch_curve):
        assert np.array_equal(arch_curve.at(0.0), [0, 0])
        assert np.array_equal(arch_curve.at(1.0), [2, 0])

    def test_tangent(self, arch_curve):
        assert arch_curve.tangent(0.5) == pytest.approx([3, 0])

    def test_normalized_tangent(self, arch_curve):
        assert arch_curve.normalized_tangent(0.5) == pytest.approx([1, 0], abs=1e-15)

    def test_normal(self, arch_curve):
        assert arch_curve.normal(0.5) == pytest.approx([0, 3])

    def test_normalized_normal(self, arch_curve):
        assert arch_curve.normalized_normal(0.5) == pytest.approx([0, 1], abs=1e-15)

    def test_unit_length_everywhere(self, arch_curve):
        for t in np.linspace(0.0, 1.0, 41):
            assert np.linalg.norm(arch_curve.normalized_tangent(t)) == pytest.approx(1.0, abs=1e-12)
            assert np.linalg.norm(arch_curve.normalized_normal(t)) == pytest.approx(1.0, abs=1e-12)

    def test_degenerate_start_handle_is_repaired(self, caplog):
        with caplog.at_level(logging.WARNING, logger="outline_bevel.segments"):
            curve = Curve((0, 0), (0, 0), (2, 1), (2, 0))
        assert np.array_equal(curve.p1, [2, 1])
        assert np.linalg.norm(curve.tangent(0.0)) > 0
        assert "p0 == p1" in caplog.text

    def test_degenerate_end_handle_is_repaired(self, caplog):
        with caplog.at_level(logging.WARNING, logger="outline_bevel.segments"):
            curve = Curve((0, 0), (0, 1), (2, 0), (2, 0))
        assert np.array_equal(curve.p2, [0, 1])
        assert np.linalg.norm(curve.tangent(1.0)) > 0
        assert "p2 == p3" in caplog.text


class TestSubdivide:
    def test_arch_at_45_degrees(self, arch_curve):
        assert arch_curve.subdivide(45) == [0, 0.125, 0.25, 0.5, 0.75, 0.875, 1]

    def test_straight_curve_is_not_split(self):
        curve = Curve((0, 0), (1, 0), (2, 0), (3, 0))
        assert curve.subdivide(1) == [0, 0.5, 1]

    @pytest.mark.parametrize("max_degrees", [90, 45, 10, 1])
    def test_strictly_increasing(self, arch_curve, max_degrees):
        ts = arch_curve.subdivide(max_degrees)
        assert ts[0] == 0 and ts[-1] == 1
        assert all(b > a for a, b in zip(ts, ts[1:]))

    def test_tighter_tolerance_gives_more_slices(self, arch_curve):
        assert len(arch_curve.subdivide(5)) > len(arch_curve.subdivide(45))

    def test_adjacent_tangents_within_tolerance(self, arch_curve):
        ts = arch_curve.subdivide(10)
        for a, b in zip(ts, ts[1:]):
            ta = arch_curve.normalized_tangent(a)
            tb = arch_curve.normalized_tangent(b)
            angle = math.degrees(math.acos(min(1.0, float(np.dot(ta, tb)))))
            assert angle <= 10 + 1e-9

    def test_forced_stop_on_tiny_tolerance(self, arch_curve, caplog):
        with caplog.at_level(logging.WARNING, logger="outline_bevel.segments"):
            ts = arch_curve.subdivide(1e-4)
        assert "Stopping subdivision" in caplog.text
        assert len(ts) <= 129
        assert min(b - a for a, b in zip(ts, ts[1:])) >= 1.0 / 128

    def test_line_parameters_ignore_tolerance(self, unit_line):
        assert unit_line.parameters(0.01) == [0.0, 1.0]


class TestWall:
    def test_line_wall(self, unit_line):
        triangles, floor = unit_line.wall(4, 1, False)
        assert triangles == [
            ((0, 0, 0), (1, 0, 4), (0, 0, 4)),
            ((0, 0, 0), (1, 0, 0), (1, 0, 4)),
        ]
        assert floor == [(1, 0)]

    def test_line_wall_flipped(self, unit_line):
        triangles, _ = unit_line.wall(4, 1, True)
        assert triangles == [
            ((0, 0, 0), (0, 0, 4), (1, 0, 4)),
            ((0, 0, 0), (1, 0, 4), (1, 0, 0)),
        ]

    def test_wall_faces_right_of_travel(self, unit_line):
        triangles, _ = unit_line.wall(4, 1, False)
        for tri in triangles:
            a, b, c = (np.array(v) for v in tri)
            normal = np.cross(b - a, c - a)
            assert normal[1] < 0

    def test_curve_wall(self, arch_curve):
        ts = arch_curve.subdivide(45)
        triangles, floor = arch_curve.wall(3, 45, False)
        assert len(triangles) == 2 * (len(ts) - 1)
        assert len(floor) == len(ts) - 1
        assert floor[-1] == (2, 0)
        for t, pt in zip(ts[1:], floor):
            assert pt == pytest.approx(tuple(arch_curve.at(t)))
        zs = {v[2] for tri in triangles for v in tri}
        assert zs == {0, 3}
