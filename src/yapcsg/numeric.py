"""Numeric robustness helpers for yapCSG.

Every classification in the engine compares a signed plane distance
against an epsilon.  A fixed epsilon is wrong for both millimetre and
kilometre scale models, so :func:`adaptive_epsilon` scales the base
tolerance by the characteristic length of the geometry.  One epsilon is
computed per boolean operation and passed explicitly to every
classify/split call; nothing here holds global state.
"""

from __future__ import annotations

import math
from typing import Iterable, Iterator, List, Optional, Sequence

from yapcsg.geom import Vec3, clamp, cross, dist, mag, sub

BASE_EPSILON = 1e-5
REFERENCE_SCALE = 1.0
MIN_SCALE = 1e-3
MAX_SCALE = 1e3
MAX_EDGE_RATIO = 1e6


def _positions(item) -> Iterator[Sequence[float]]:
    """Yield vertex positions of a polygon, triangle or point triple."""

    verts = getattr(item, 'vertices', item)
    for v in verts:
        yield getattr(v, 'pos', v)


def bbox(points: Iterable[Sequence[float]]) -> Optional[List[Vec3]]:
    """Return ``[(xmin, ymin, zmin), (xmax, ymax, zmax)]`` or ``None``
    for an empty point set."""

    mins = [math.inf, math.inf, math.inf]
    maxs = [-math.inf, -math.inf, -math.inf]
    empty = True
    for p in points:
        empty = False
        for i in range(3):
            c = p[i]
            if c < mins[i]:
                mins[i] = c
            if c > maxs[i]:
                maxs[i] = c
    if empty:
        return None
    return [(mins[0], mins[1], mins[2]), (maxs[0], maxs[1], maxs[2])]


def shapes_bbox(shapes: Iterable) -> Optional[List[Vec3]]:
    """Bounding box over all vertices of polygons or triangles."""

    return bbox(p for shape in shapes for p in _positions(shape))


def bbox_extent(box: Optional[Sequence[Vec3]]) -> float:
    """Largest side of a bounding box, 0 for ``None``."""

    if box is None:
        return 0.0
    return max(box[1][0] - box[0][0],
               box[1][1] - box[0][1],
               box[1][2] - box[0][2])


def bbox_overlap(box_a, box_b, tol: float = 0.0) -> bool:
    """Do two bounding boxes overlap (touching counts) within ``tol``?"""

    if box_a is None or box_b is None:
        return False
    return not (
        box_a[1][0] < box_b[0][0] - tol or
        box_a[0][0] > box_b[1][0] + tol or
        box_a[1][1] < box_b[0][1] - tol or
        box_a[0][1] > box_b[1][1] + tol or
        box_a[1][2] < box_b[0][2] - tol or
        box_a[0][2] > box_b[1][2] + tol
    )


def epsilon_for_extent(extent: float,
                       base: float = BASE_EPSILON,
                       reference: float = REFERENCE_SCALE,
                       min_scale: float = MIN_SCALE,
                       max_scale: float = MAX_SCALE) -> float:
    """Scale ``base`` by ``clamp(extent / reference, min_scale, max_scale)``."""

    if not math.isfinite(extent):
        return base
    return base * clamp(max(extent, 0.0) / reference, min_scale, max_scale)


def adaptive_epsilon(polygons: Iterable,
                     base: float = BASE_EPSILON,
                     reference: float = REFERENCE_SCALE,
                     min_scale: float = MIN_SCALE,
                     max_scale: float = MAX_SCALE) -> float:
    """Classification tolerance for a set of polygons.

    The characteristic length is the largest extent of the set's
    bounding box.  ``polygons`` may hold :class:`~yapcsg.polygon.Polygon`
    objects, :class:`~yapcsg.mesh.Triangle` objects or raw point triples.
    An empty set yields ``base``.
    """

    box = shapes_bbox(polygons)
    if box is None:
        return base
    return epsilon_for_extent(bbox_extent(box), base, reference, min_scale, max_scale)


def robust_equal(a: float, b: float, epsilon: float = BASE_EPSILON) -> bool:
    """Hybrid relative/absolute float comparison.

    ``|a - b| <= epsilon * max(1, |a|, |b|)``.  Exact equality short
    circuits; NaN or infinite input compares unequal instead of raising.
    """

    if not (math.isfinite(a) and math.isfinite(b)):
        return False
    if a == b:
        return True
    return abs(a - b) <= epsilon * max(1.0, abs(a), abs(b))


def points_equal(p: Sequence[float], q: Sequence[float], epsilon: float = BASE_EPSILON) -> bool:
    """Coordinate-wise :func:`robust_equal` on two points."""

    return (robust_equal(p[0], q[0], epsilon) and
            robust_equal(p[1], q[1], epsilon) and
            robust_equal(p[2], q[2], epsilon))


def classify_distance(distance: float, epsilon: float) -> int:
    """Signed plane distance to side: 1 front, -1 back, 0 on plane."""

    if distance > epsilon:
        return 1
    if distance < -epsilon:
        return -1
    return 0


def is_degenerate(triangle, epsilon: float = BASE_EPSILON,
                  max_edge_ratio: float = MAX_EDGE_RATIO) -> bool:
    """Should ``triangle`` be kept out of the BSP tree?

    A triangle is degenerate when

    * a coordinate is NaN or infinite,
    * two of its vertices coincide (:func:`points_equal`),
    * its area is effectively zero: the cross product of two edges is no
      larger than ``epsilon * longest_edge**2``, which flags collinear
      vertices independently of the model's scale,
    * its normal cannot be derived (zero, NaN or infinite), or
    * the longest/shortest edge ratio exceeds ``max_edge_ratio``.

    ``triangle`` is anything yielding three points, including
    :class:`~yapcsg.mesh.Triangle` and :class:`~yapcsg.polygon.Polygon`
    instances with three vertices.
    """

    pts = list(_positions(triangle))
    if len(pts) != 3:
        return True
    a, b, c = pts
    for p in pts:
        if len(p) < 3:
            return True
        if not (math.isfinite(p[0]) and math.isfinite(p[1]) and math.isfinite(p[2])):
            return True

    if points_equal(a, b, epsilon) or points_equal(b, c, epsilon) or points_equal(a, c, epsilon):
        return True

    edges = (dist(a, b), dist(b, c), dist(c, a))
    longest = max(edges)
    shortest = min(edges)
    if not shortest > 0.0 or not math.isfinite(longest):
        return True

    n = cross(sub(b, a), sub(c, a))
    m = mag(n)
    if not math.isfinite(m) or m == 0.0:
        return True
    if m <= epsilon * longest * longest:
        return True

    return longest / shortest > max_edge_ratio


def filter_degenerate(triangles: Iterable, epsilon: float = BASE_EPSILON,
                      max_edge_ratio: float = MAX_EDGE_RATIO) -> list:
    """Drop degenerate triangles, keeping the order of the rest."""

    return [t for t in triangles if not is_degenerate(t, epsilon, max_edge_ratio)]


__all__ = [
    'BASE_EPSILON', 'REFERENCE_SCALE', 'MIN_SCALE', 'MAX_SCALE', 'MAX_EDGE_RATIO',
    'bbox', 'shapes_bbox', 'bbox_extent', 'bbox_overlap',
    'epsilon_for_extent', 'adaptive_epsilon',
    'robust_equal', 'points_equal', 'classify_distance',
    'is_degenerate', 'filter_degenerate',
]
