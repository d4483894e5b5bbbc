"""
==========================================
planes and convex polygons for yapCSG
==========================================

A ``Plane`` is stored in Hessian normal form: a unit normal ``n`` and
an offset ``w`` such that a point ``p`` lies on the plane iff
``n . p == w``.  See https://mathworld.wolfram.com/HessianNormalForm.html

A ``Polygon`` is an ordered, convex loop of at least three ``Vertex``
objects that share one ``Plane``.  The winding is counter-clockwise when
viewed from the side the normal points to (right-hand rule).  Polygons
with more than three vertices only ever arise from splitting; they are
fan-triangulated by :func:`triangulate` before leaving the engine.

All three types are frozen: splitting creates new fragments and
inverting creates flipped copies, so a polygon can safely be shared by
several BSP trees.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from yapcsg.errors import DegeneratePlaneError
from yapcsg.geom import Vec3, cross, dot, lerp, mag, neg, sub, to_vec3
from yapcsg.numeric import BASE_EPSILON

# below this cross-product magnitude three points do not define a plane
PLANE_EPSILON = 1e-12


@dataclass(frozen=True)
class Vertex:
    """Immutable vertex position with an optional normal."""

    pos: Vec3
    normal: Optional[Vec3] = None

    def flipped(self) -> 'Vertex':
        if self.normal is None:
            return self
        return Vertex(self.pos, neg(self.normal))

    def interpolate(self, other: 'Vertex', t: float) -> 'Vertex':
        """New vertex at parameter ``t`` between ``self`` and ``other``."""
        normal = None
        if self.normal is not None and other.normal is not None:
            normal = lerp(self.normal, other.normal, t)
        return Vertex(lerp(self.pos, other.pos, t), normal)


@dataclass(frozen=True)
class Plane:
    """Oriented plane ``n . p = w`` with unit normal ``n``."""

    normal: Vec3
    w: float

    @classmethod
    def from_points(cls, a: Sequence[float], b: Sequence[float], c: Sequence[float]) -> 'Plane':
        """Plane through three points, oriented by the right-hand rule.

        Raises :class:`~yapcsg.errors.DegeneratePlaneError` if the points
        are collinear or coincident.
        """
        a = to_vec3(a)
        n = cross(sub(to_vec3(b), a), sub(to_vec3(c), a))
        m = mag(n)
        if not math.isfinite(m) or m < PLANE_EPSILON:
            raise DegeneratePlaneError('cannot build a plane from collinear or coincident points')
        normal = (n[0] / m, n[1] / m, n[2] / m)
        return cls(normal, dot(normal, a))

    def flipped(self) -> 'Plane':
        return Plane(neg(self.normal), -self.w)

    def signed_distance(self, p: Sequence[float]) -> float:
        n = self.normal
        return n[0] * p[0] + n[1] * p[1] + n[2] * p[2] - self.w


@dataclass(frozen=True)
class Polygon:
    """Convex planar loop of vertices sharing ``plane``."""

    vertices: Tuple[Vertex, ...]
    plane: Plane

    def __post_init__(self):
        if len(self.vertices) < 3:
            raise ValueError(f'polygon requires at least 3 vertices, got {len(self.vertices)}')

    @classmethod
    def from_vertices(cls, vertices: Sequence[Vertex], epsilon: float = BASE_EPSILON) -> 'Polygon':
        """Polygon whose plane is derived from the first three vertices.

        Every further vertex must lie on that plane within ``epsilon``.
        """
        vertices = tuple(vertices)
        if len(vertices) < 3:
            raise ValueError(f'polygon requires at least 3 vertices, got {len(vertices)}')
        plane = Plane.from_points(vertices[0].pos, vertices[1].pos, vertices[2].pos)
        for v in vertices[3:]:
            if abs(plane.signed_distance(v.pos)) > epsilon:
                raise ValueError('polygon vertices are not coplanar')
        return cls(vertices, plane)

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]], epsilon: float = BASE_EPSILON,
                    with_normals: bool = True) -> 'Polygon':
        """Polygon from a loop of point-like sequences.

        With ``with_normals`` every vertex carries the face normal.
        """
        poly = cls.from_vertices([Vertex(to_vec3(p)) for p in points], epsilon)
        if not with_normals:
            return poly
        n = poly.plane.normal
        return cls(tuple(Vertex(v.pos, n) for v in poly.vertices), poly.plane)

    def flipped(self) -> 'Polygon':
        """Reverse the winding and flip the plane and vertex normals."""
        return Polygon(tuple(v.flipped() for v in reversed(self.vertices)),
                       self.plane.flipped())

    def positions(self) -> List[Vec3]:
        return [v.pos for v in self.vertices]

    def area(self) -> float:
        total = 0.0
        p0 = self.vertices[0].pos
        for i in range(1, len(self.vertices) - 1):
            e1 = sub(self.vertices[i].pos, p0)
            e2 = sub(self.vertices[i + 1].pos, p0)
            total += 0.5 * mag(cross(e1, e2))
        return total

    def volume_contribution(self) -> float:
        """Signed share of the enclosed volume (divergence theorem)."""
        total = 0.0
        p0 = self.vertices[0].pos
        for i in range(1, len(self.vertices) - 1):
            e1 = sub(self.vertices[i].pos, p0)
            e2 = sub(self.vertices[i + 1].pos, p0)
            total += dot(p0, cross(e1, e2)) / 6.0
        return total


def triangulate(polygon: Polygon) -> List[Tuple[Vec3, Vec3, Vec3]]:
    """Fan-triangulate ``polygon`` from vertex 0.

    Valid because every polygon produced by the engine is convex; each
    output triangle keeps the polygon's winding.
    """
    verts = polygon.vertices
    anchor = verts[0].pos
    return [(anchor, verts[i].pos, verts[i + 1].pos)
            for i in range(1, len(verts) - 1)]


__all__ = ['PLANE_EPSILON', 'Vertex', 'Plane', 'Polygon', 'triangulate']
