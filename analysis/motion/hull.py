"""Convex hull of the changed-pixel grid points.

Monotone chain (Andrew's algorithm). Integer input stays on Python ints so the
orientation test is exact.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Sequence, Tuple, Union


class Point(NamedTuple):
    x: int
    y: int


PointLike = Union[Point, Tuple[int, int]]


def cross(o: Point, a: Point, b: Point) -> int:
    """Z component of (a - o) x (b - o).

    Positive for a counter-clockwise turn o -> a -> b, negative for clockwise,
    zero when the three points are collinear.
    """
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def _as_points(points: Iterable[PointLike]) -> List[Point]:
    return [Point(int(p[0]), int(p[1])) for p in points]


def _half_chain(points: Sequence[Point]) -> List[Point]:
    chain: List[Point] = []
    for p in points:
        # Pop anything that does not make a strict left turn (collinear included).
        while len(chain) >= 2 and cross(chain[-2], chain[-1], p) <= 0:
            chain.pop()
        chain.append(p)
    return chain


def convex_hull(points: Iterable[PointLike]) -> List[Point]:
    """Return the convex hull of ``points`` in counter-clockwise order.

    The polygon is implicitly closed: the last vertex connects back to the
    first. Inputs of 0, 1 or 2 points are returned unchanged (same order).
    All-collinear inputs collapse to the two extreme endpoints.

    The input is not mutated.
    """
    pts = _as_points(points)
    if len(pts) <= 2:
        return pts

    # x ascending, ties by y ascending; fully determined by the key.
    pts.sort(key=lambda p: (p.x, p.y))

    lower = _half_chain(pts)
    upper = _half_chain(pts[::-1])

    # Each chain ends where the other begins.
    return lower[:-1] + upper[:-1]
