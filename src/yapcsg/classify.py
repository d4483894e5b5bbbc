"""Polygon classification and splitting against a plane.

This is the numerically delicate heart of the engine.  Two rules keep
boundary surface from being lost or counted twice:

* a vertex within ``epsilon`` of the plane is COPLANAR and is copied
  verbatim into both fragments, never interpolated;
* an edge crossing from FRONT to BACK (or back) is cut at
  ``t = clamp((w - n.v1) / (n.(v2 - v1)), 0, 1)``, and the cut vertex is
  emitted into both fragments.

Classification and splitting must see the same ``epsilon`` within one
operation; the BSP tree only ever calls :func:`partition_polygon`, which
does both.
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from yapcsg.geom import clamp
from yapcsg.polygon import Plane, Polygon, Vertex


class Side(IntEnum):
    """Position relative to a plane.  Polygon sides are the bitwise union
    of their vertex sides, so FRONT | BACK == SPANNING."""

    COPLANAR = 0
    FRONT = 1
    BACK = 2
    SPANNING = 3


def _vertex_side(plane: Plane, pos: Sequence[float], epsilon: float) -> Side:
    n = plane.normal
    t = n[0] * pos[0] + n[1] * pos[1] + n[2] * pos[2] - plane.w
    if t < -epsilon:
        return Side.BACK
    if t > epsilon:
        return Side.FRONT
    return Side.COPLANAR


def classify_vertex(vertex, plane: Plane, epsilon: float) -> Side:
    """FRONT, BACK or COPLANAR by the sign of ``n.v - w`` against
    ``+-epsilon``.  ``vertex`` is a :class:`Vertex` or a point."""

    return _vertex_side(plane, getattr(vertex, 'pos', vertex), epsilon)


def _vertex_sides(polygon: Polygon, plane: Plane, epsilon: float) -> Tuple[Side, List[Side]]:
    polygon_side = 0
    sides = []
    for v in polygon.vertices:
        side = _vertex_side(plane, v.pos, epsilon)
        polygon_side |= side
        sides.append(side)
    return Side(polygon_side), sides


def classify_polygon(polygon: Polygon, plane: Plane, epsilon: float) -> Side:
    """COPLANAR only if every vertex is; SPANNING if both a FRONT and a
    BACK vertex occur; otherwise FRONT or BACK."""

    side, _ = _vertex_sides(polygon, plane, epsilon)
    return side


def _split(plane: Plane, polygon: Polygon, sides: List[Side]
           ) -> Tuple[Optional[Polygon], Optional[Polygon]]:
    front: List[Vertex] = []
    back: List[Vertex] = []
    n = plane.normal
    verts = polygon.vertices
    count = len(verts)
    for i in range(count):
        j = (i + 1) % count
        si = sides[i]
        sj = sides[j]
        vi = verts[i]
        if si != Side.BACK:
            front.append(vi)
        if si != Side.FRONT:
            back.append(vi)
        if (si | sj) == Side.SPANNING:
            vj = verts[j]
            p, q = vi.pos, vj.pos
            denom = n[0] * (q[0] - p[0]) + n[1] * (q[1] - p[1]) + n[2] * (q[2] - p[2])
            t = (plane.w - (n[0] * p[0] + n[1] * p[1] + n[2] * p[2])) / denom
            cut = vi.interpolate(vj, clamp(t, 0.0, 1.0))
            front.append(cut)
            back.append(cut)

    # fragments keep the source polygon's plane, not the splitting plane
    front_poly = Polygon(tuple(front), polygon.plane) if len(front) >= 3 else None
    back_poly = Polygon(tuple(back), polygon.plane) if len(back) >= 3 else None
    return front_poly, back_poly


def split_polygon(plane: Plane, polygon: Polygon, epsilon: float
                  ) -> Tuple[Optional[Polygon], Optional[Polygon]]:
    """Split ``polygon`` by ``plane`` into ``(front, back)`` fragments.

    Either fragment is ``None`` when that side would get fewer than three
    vertices.  A polygon entirely on one side comes back unchanged on
    that side; a coplanar polygon is returned on the side its normal
    faces.
    """

    side, sides = _vertex_sides(polygon, plane, epsilon)
    if side == Side.SPANNING:
        return _split(plane, polygon, sides)
    if side == Side.FRONT:
        return polygon, None
    if side == Side.BACK:
        return None, polygon
    if _faces_same_way(plane, polygon):
        return polygon, None
    return None, polygon


def _faces_same_way(plane: Plane, polygon: Polygon) -> bool:
    a = plane.normal
    b = polygon.plane.normal
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2] > 0.0


def partition_polygon(plane: Plane, polygon: Polygon, epsilon: float,
                      coplanar_front: list, coplanar_back: list,
                      front: list, back: list) -> Side:
    """Route ``polygon`` (or its fragments) into the matching list.

    Coplanar polygons go to ``coplanar_front`` when their normal points
    the same way as the plane's, else to ``coplanar_back``; passing the
    same list for several arguments merges those routes.  Returns the
    polygon's classification.
    """

    side, sides = _vertex_sides(polygon, plane, epsilon)
    if side == Side.COPLANAR:
        if _faces_same_way(plane, polygon):
            coplanar_front.append(polygon)
        else:
            coplanar_back.append(polygon)
    elif side == Side.FRONT:
        front.append(polygon)
    elif side == Side.BACK:
        back.append(polygon)
    else:
        f, b = _split(plane, polygon, sides)
        if f is not None:
            front.append(f)
        if b is not None:
            back.append(b)
    return side


__all__ = [
    'Side',
    'classify_vertex',
    'classify_polygon',
    'split_polygon',
    'partition_polygon',
]
