from __future__ import annotations

import random

from analysis.motion.hull import Point, convex_hull, cross


def _rotations(seq):
    return [seq[i:] + seq[:i] for i in range(len(seq))]


def _signed_area2(poly) -> int:
    return sum(a.x * b.y - b.x * a.y for a, b in zip(poly, poly[1:] + poly[:1]))


def test_cross_sign():
    o = Point(0, 0)
    assert cross(o, Point(1, 0), Point(0, 1)) > 0  # counter-clockwise
    assert cross(o, Point(0, 1), Point(1, 0)) < 0  # clockwise
    assert cross(o, Point(1, 1), Point(2, 2)) == 0  # collinear


def test_degenerate_inputs_returned_unchanged():
    assert convex_hull([]) == []
    assert convex_hull([Point(3, 4)]) == [Point(3, 4)]
    # Two points keep their original order, no sorting.
    assert convex_hull([Point(5, 1), Point(0, 0)]) == [Point(5, 1), Point(0, 0)]


def test_collinear_points_reduce_to_endpoints():
    pts = [Point(2, 2), Point(0, 0), Point(3, 3), Point(1, 1)]
    assert convex_hull(pts) == [Point(0, 0), Point(3, 3)]

    horizontal = [Point(x, 7) for x in (4, 1, 9, 6)]
    assert convex_hull(horizontal) == [Point(1, 7), Point(9, 7)]


def test_square_with_center_is_ccw_corners():
    pts = [Point(1, 1), Point(2, 2), Point(0, 0), Point(0, 2), Point(2, 0)]
    hull = convex_hull(pts)
    assert hull == [Point(0, 0), Point(2, 0), Point(2, 2), Point(0, 2)]
    assert _signed_area2(hull) > 0


def test_input_not_mutated_and_tuples_accepted():
    pts = [(2, 0), (0, 0), (1, 3)]
    before = list(pts)
    hull = convex_hull(pts)
    assert pts == before
    assert hull == [Point(0, 0), Point(2, 0), Point(1, 3)]


def test_duplicates_and_edge_points_dropped():
    pts = [
        Point(0, 0), Point(0, 0), Point(4, 0), Point(2, 0),
        Point(4, 4), Point(0, 4), Point(4, 4),
    ]
    assert convex_hull(pts) == [Point(0, 0), Point(4, 0), Point(4, 4), Point(0, 4)]


def test_hull_is_idempotent_on_random_sets():
    rng = random.Random(1234)
    for _ in range(50):
        pts = [Point(rng.randrange(64), rng.randrange(48)) for _ in range(rng.randrange(3, 200))]
        hull = convex_hull(pts)
        again = convex_hull(hull)
        assert set(again) == set(hull)
        if len(hull) >= 3:
            assert again in _rotations(hull)
            assert _signed_area2(hull) > 0


def test_hull_vertices_come_from_input():
    rng = random.Random(7)
    pts = [Point(rng.randrange(64), rng.randrange(48)) for _ in range(300)]
    hull = convex_hull(pts)
    assert set(hull) <= set(pts)
    # Every input point is on or inside each CCW edge.
    for a, b in zip(hull, hull[1:] + hull[:1]):
        assert all(cross(a, b, p) >= 0 for p in pts)
