"""Triangle meshes at the boundary of the yapCSG engine.

A mesh is a plain list of :class:`Triangle` values.  The adapter turns
meshes into polygon lists for the BSP trees and back, validates operand
meshes before any tree is built, and provides the measures used by the
volume sanity checks and the tests.

Inputs are accepted in several shapes: ``Triangle`` instances, triples
of point-like sequences (tuples, lists, yapCAD ``[x, y, z, w]`` points)
or a numpy array of shape ``(n, 3, 3)``.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from yapcsg.errors import DegeneratePlaneError, InvalidInputError
from yapcsg.geom import Vec3, add, cross, dot, isfinitevec, mag, sub, to_vec3
from yapcsg.logging_setup import get_logger
from yapcsg.numeric import BASE_EPSILON, MAX_EDGE_RATIO, bbox, is_degenerate
from yapcsg.polygon import Plane, Polygon, Vertex, triangulate

log = get_logger(__name__)


@dataclass(frozen=True)
class Triangle:
    """Immutable triangle in XYZ space, outward by right-hand winding."""

    v0: Vec3
    v1: Vec3
    v2: Vec3

    def __iter__(self) -> Iterator[Vec3]:
        return iter((self.v0, self.v1, self.v2))

    def __len__(self) -> int:
        return 3

    def __getitem__(self, idx: int) -> Vec3:
        return (self.v0, self.v1, self.v2)[idx]

    @property
    def vertices(self) -> Tuple[Vec3, Vec3, Vec3]:
        return (self.v0, self.v1, self.v2)

    @property
    def normal(self) -> Optional[Vec3]:
        """Unit normal, or ``None`` for a degenerate triangle."""
        n = cross(sub(self.v1, self.v0), sub(self.v2, self.v0))
        length = mag(n)
        if not (length > 0.0 and math.isfinite(length)):
            return None
        return (n[0] / length, n[1] / length, n[2] / length)

    @property
    def area(self) -> float:
        return 0.5 * mag(cross(sub(self.v1, self.v0), sub(self.v2, self.v0)))

    @property
    def centroid(self) -> Vec3:
        return ((self.v0[0] + self.v1[0] + self.v2[0]) / 3.0,
                (self.v0[1] + self.v1[1] + self.v2[1]) / 3.0,
                (self.v0[2] + self.v1[2] + self.v2[2]) / 3.0)

    def flipped(self) -> 'Triangle':
        return Triangle(self.v0, self.v2, self.v1)


@dataclass
class MeshValidationReport:
    """Summary of a mesh's fitness as a boolean operand."""

    total_triangles: int = 0
    valid_triangles: int = 0
    degenerate_triangles: List[int] = field(default_factory=list)
    boundary_edges: int = 0

    @property
    def is_valid(self) -> bool:
        return self.total_triangles > 0 and not self.degenerate_triangles

    @property
    def is_closed(self) -> bool:
        return self.boundary_edges == 0

    @property
    def degenerate_ratio(self) -> float:
        if self.total_triangles == 0:
            return 0.0
        return len(self.degenerate_triangles) / self.total_triangles


## coercion and validation
## -----------------------

def as_triangle(obj) -> Triangle:
    """Coerce a triangle-like object into a :class:`Triangle`."""

    if isinstance(obj, Triangle):
        return obj
    if len(obj) != 3:
        raise ValueError(f'triangle must have exactly 3 vertices, got {len(obj)}')
    return Triangle(to_vec3(obj[0]), to_vec3(obj[1]), to_vec3(obj[2]))


def as_mesh(triangles: Iterable) -> List[Triangle]:
    """Coerce an iterable of triangle-likes (or an ``(n, 3, 3)`` array)."""

    if isinstance(triangles, np.ndarray):
        return from_array(triangles)
    return [as_triangle(t) for t in triangles]


def check_mesh(triangles: Iterable, label: str = 'mesh') -> List[Triangle]:
    """Validate a boolean operand at the system boundary.

    Returns the mesh as a list of :class:`Triangle`.  Raises
    :class:`~yapcsg.errors.InvalidInputError` for an empty mesh, a
    malformed triangle or a NaN/infinite coordinate.
    """

    if triangles is None:
        raise InvalidInputError('mesh is None', operand=label)
    try:
        mesh = as_mesh(triangles)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f'malformed triangle: {exc}', operand=label) from exc
    if not mesh:
        raise InvalidInputError('mesh is empty', operand=label)
    for idx, tri in enumerate(mesh):
        if not (isfinitevec(tri.v0) and isfinitevec(tri.v1) and isfinitevec(tri.v2)):
            raise InvalidInputError(f'triangle {idx} has a NaN or infinite coordinate',
                                    operand=label)
    return mesh


def _edge_key(p: Vec3, q: Vec3, digits: int = 9):
    a = (round(p[0], digits), round(p[1], digits), round(p[2], digits))
    b = (round(q[0], digits), round(q[1], digits), round(q[2], digits))
    return (a, b) if a <= b else (b, a)


def boundary_edge_count(triangles: Iterable) -> int:
    """Number of edges not shared by exactly two triangles."""

    counts: Counter = Counter()
    for tri in triangles:
        a, b, c = as_triangle(tri).vertices
        counts[_edge_key(a, b)] += 1
        counts[_edge_key(b, c)] += 1
        counts[_edge_key(c, a)] += 1
    return sum(1 for n in counts.values() if n != 2)


def mesh_edges_closed(triangles: Iterable) -> bool:
    """True when every edge is shared by exactly two triangles."""

    return boundary_edge_count(triangles) == 0


def validate_mesh(triangles: Iterable, epsilon: float = BASE_EPSILON,
                  max_edge_ratio: float = MAX_EDGE_RATIO) -> MeshValidationReport:
    """Report degenerate triangles and open edges without raising."""

    mesh = as_mesh(triangles)
    report = MeshValidationReport(total_triangles=len(mesh))
    for idx, tri in enumerate(mesh):
        if is_degenerate(tri, epsilon, max_edge_ratio):
            report.degenerate_triangles.append(idx)
    report.valid_triangles = report.total_triangles - len(report.degenerate_triangles)
    skip = set(report.degenerate_triangles)
    report.boundary_edges = boundary_edge_count(
        t for i, t in enumerate(mesh) if i not in skip)
    return report


## conversion
## ----------

def mesh_to_polygons(triangles: Iterable, epsilon: float = BASE_EPSILON,
                     max_edge_ratio: float = MAX_EDGE_RATIO) -> List[Polygon]:
    """One polygon per non-degenerate triangle, in input order.

    Vertices carry the face normal.  Triangles that fail the degenerate
    filter, or whose plane cannot be formed, are dropped.
    """

    polygons = []
    dropped = 0
    for tri in as_mesh(triangles):
        if is_degenerate(tri, epsilon, max_edge_ratio):
            dropped += 1
            continue
        try:
            plane = Plane.from_points(tri.v0, tri.v1, tri.v2)
        except DegeneratePlaneError:
            dropped += 1
            continue
        n = plane.normal
        polygons.append(Polygon((Vertex(tri.v0, n), Vertex(tri.v1, n), Vertex(tri.v2, n)),
                                plane))
    log.debug('mesh_converted', polygons=len(polygons), dropped=dropped, epsilon=epsilon)
    return polygons


def polygons_to_mesh(polygons: Iterable[Polygon], epsilon: float = BASE_EPSILON,
                     max_edge_ratio: float = MAX_EDGE_RATIO) -> List[Triangle]:
    """Fan-triangulate polygons into a fresh mesh.

    Degenerate fan triangles (e.g. from collinear vertices left on a
    split line) carry no area and are dropped.
    """

    triangles = []
    for poly in polygons:
        for a, b, c in triangulate(poly):
            tri = Triangle(a, b, c)
            if not is_degenerate(tri, epsilon, max_edge_ratio):
                triangles.append(tri)
    return triangles


def to_array(triangles: Iterable) -> np.ndarray:
    """Mesh as a float64 array of shape ``(n, 3, 3)``."""

    mesh = as_mesh(triangles)
    if not mesh:
        return np.zeros((0, 3, 3), dtype=float)
    return np.asarray([t.vertices for t in mesh], dtype=float)


def from_array(array) -> List[Triangle]:
    """Mesh from an array-like of shape ``(n, 3, 3)``."""

    arr = np.asarray(array, dtype=float)
    if arr.size == 0:
        return []
    if arr.ndim != 3 or arr.shape[1:] != (3, 3):
        raise ValueError(f'expected an array of shape (n, 3, 3), got {arr.shape}')
    return [Triangle(tuple(map(float, t[0])), tuple(map(float, t[1])), tuple(map(float, t[2])))
            for t in arr]


## measures and transforms
## -----------------------

def volumeof(triangles: Iterable, signed: bool = False) -> float:
    """Volume enclosed by a closed mesh, by the divergence theorem.

    Each face contributes ``(1/6) * dot(p0, cross(p1 - p0, p2 - p0))``.
    With ``signed`` the orientation is kept, so an inside-out mesh gives
    a negative volume.  An empty mesh has volume 0.
    """

    total = 0.0
    for tri in triangles:
        p0, p1, p2 = as_triangle(tri).vertices
        total += dot(p0, cross(sub(p1, p0), sub(p2, p0))) / 6.0
    return total if signed else abs(total)


def surfacearea(triangles: Iterable) -> float:
    return sum(as_triangle(t).area for t in triangles)


def meshbbox(triangles: Iterable):
    """Bounding box ``[(xmin, ymin, zmin), (xmax, ymax, zmax)]`` or ``None``."""

    return bbox(p for t in triangles for p in as_triangle(t).vertices)


def translate_mesh(triangles: Iterable, delta: Sequence[float]) -> List[Triangle]:
    d = to_vec3(delta)
    return [Triangle(add(t.v0, d), add(t.v1, d), add(t.v2, d)) for t in as_mesh(triangles)]


def reverse_mesh(triangles: Iterable) -> List[Triangle]:
    """Flip the winding of every triangle (turns a solid inside out)."""

    return [t.flipped() for t in as_mesh(triangles)]


__all__ = [
    'Triangle',
    'MeshValidationReport',
    'as_triangle',
    'as_mesh',
    'check_mesh',
    'boundary_edge_count',
    'mesh_edges_closed',
    'validate_mesh',
    'mesh_to_polygons',
    'polygons_to_mesh',
    'to_array',
    'from_array',
    'volumeof',
    'surfacearea',
    'meshbbox',
    'translate_mesh',
    'reverse_mesh',
]
