## primitives, closed triangle-mesh solids for yapCSG
## adapted from the yapCAD geom3d_util parametric solids

"""
==========================================
Primitive solids as closed triangle meshes
==========================================

Every function here returns a watertight, outward-wound
``list[Triangle]`` ready to be used as a boolean operand.

"""

import math

from yapcsg.geom import add, cross, dot, mag, scale3, sub, to_vec3
from yapcsg.mesh import Triangle

pi2 = 2.0 * math.pi


def _quad(a, b, c, d):
    return [Triangle(a, b, c), Triangle(a, c, d)]


def prism(length, width, height, center=(0, 0, 0)):
    """Axis-aligned rectangular prism of 12 triangles centred on
    ``center``."""

    if length <= 0 or width <= 0 or height <= 0:
        raise ValueError('prism dimensions must be positive')
    cx, cy, cz = to_vec3(center)
    l2 = length / 2.0
    w2 = width / 2.0
    h2 = height / 2.0

    # corner i has +x when bit 0 is set, +y for bit 1, +z for bit 2
    p = [(cx + (l2 if i & 1 else -l2),
          cy + (w2 if i & 2 else -w2),
          cz + (h2 if i & 4 else -h2)) for i in range(8)]

    faces = [(0, 2, 3, 1),   # -z
             (4, 5, 7, 6),   # +z
             (0, 1, 5, 4),   # -y
             (2, 6, 7, 3),   # +y
             (0, 4, 6, 2),   # -x
             (1, 3, 7, 5)]   # +x
    tris = []
    for a, b, c, d in faces:
        tris += _quad(p[a], p[b], p[c], p[d])
    return tris


def cube(size=1.0, center=(0, 0, 0)):
    return prism(size, size, size, center)


def sphere2cartesian(lat, lon, rad):
    """Spherical (degrees) to cartesian coordinates about the origin."""

    if lat == 90:
        return (0.0, 0.0, float(rad))
    if lat == -90:
        return (0.0, 0.0, -float(rad))
    latr = lat * pi2 / 360.0
    lonr = (lon % 360) * pi2 / 360.0
    smallrad = math.cos(latr) * rad
    return (math.cos(lonr) * smallrad,
            math.sin(lonr) * smallrad,
            math.sin(latr) * rad)


def makeIcoPoints(radius):
    """The twelve vertices of an icosahedron about the origin."""

    points = [sphere2cartesian(90, 0, radius)]
    for i in range(10):
        sgn = -1 if i % 2 == 0 else 1
        lat = math.atan(0.5) * 360.0 * sgn / pi2
        points.append(sphere2cartesian(lat, i * 36.0, radius))
    points.append(sphere2cartesian(-90, 0, radius))
    return points


# face indices for icosahedron
icaIndices = [[1, 11, 3], [3, 11, 5], [5, 11, 7], [7, 11, 9], [9, 11, 1],
              [2, 1, 3], [2, 3, 4], [4, 3, 5], [4, 5, 6], [6, 5, 7], [6, 7, 8],
              [8, 7, 9], [8, 9, 10], [10, 9, 1], [10, 1, 2],
              [0, 2, 4], [0, 4, 6], [0, 6, 8], [0, 8, 10], [0, 10, 2]]


def _midpoint(i, j, verts, cache, rad):
    key = (i, j) if i < j else (j, i)
    idx = cache.get(key)
    if idx is None:
        m = add(verts[i], verts[j])
        verts.append(scale3(m, rad / mag(m)))
        idx = len(verts) - 1
        cache[key] = idx
    return idx


def subdivide(faces, verts, rad):
    """Split every face into four, projecting new vertices onto the
    sphere.  Shared edges share their midpoint so the mesh stays
    closed."""

    cache = {}
    out = []
    for i1, i2, i3 in faces:
        a = _midpoint(i1, i2, verts, cache, rad)
        b = _midpoint(i2, i3, verts, cache, rad)
        c = _midpoint(i3, i1, verts, cache, rad)
        out += [[i1, a, c], [a, i2, b], [b, i3, c], [a, b, c]]
    return out


def sphere(diameter, center=(0, 0, 0), depth=2):
    """Icosphere: an icosahedron subdivided ``depth`` times.

    Has ``20 * 4**depth`` triangles and no degenerate poles.
    """

    if diameter <= 0:
        raise ValueError('sphere diameter must be positive')
    if depth < 0:
        raise ValueError('sphere depth must be non-negative')
    rad = diameter / 2.0
    c = to_vec3(center)
    verts = makeIcoPoints(rad)
    faces = icaIndices
    for _ in range(depth):
        faces = subdivide(faces, verts, rad)

    tris = []
    for i, j, k in faces:
        a, b, d = verts[i], verts[j], verts[k]
        # subdivision happens about the origin, so the vertex itself is
        # the outward direction
        if dot(cross(sub(b, a), sub(d, a)), a) < 0:
            b, d = d, b
        tris.append(Triangle(add(a, c), add(b, c), add(d, c)))
    return tris


def conic(baser, topr, height, center=(0, 0, 0), segments=36):
    """Conic frustum with its base circle centred on ``center`` and its
    axis along +z.  Makes a cylinder when ``topr == baser`` and a cone
    when ``topr == 0``.
    """

    if baser <= 0:
        raise ValueError('bad base radius for conic')
    if topr < 0:
        raise ValueError('bad top radius for conic')
    if height <= 0:
        raise ValueError('bad height in conic')
    if segments < 3:
        raise ValueError('conic needs at least 3 segments')

    c = to_vec3(center)
    top_c = add(c, (0.0, 0.0, float(height)))

    def ring(r, z):
        return [add(c, (math.cos(i * pi2 / segments) * r,
                        math.sin(i * pi2 / segments) * r,
                        z)) for i in range(segments)]

    base = ring(baser, 0.0)
    tris = []
    for i in range(segments):
        j = (i + 1) % segments
        tris.append(Triangle(c, base[j], base[i]))          # base faces -z

    if topr == 0:
        for i in range(segments):
            j = (i + 1) % segments
            tris.append(Triangle(base[i], base[j], top_c))
        return tris

    top = ring(topr, float(height))
    for i in range(segments):
        j = (i + 1) % segments
        tris += _quad(base[i], base[j], top[j], top[i])
        tris.append(Triangle(top_c, top[i], top[j]))        # top faces +z
    return tris


__all__ = ['prism', 'cube', 'sphere', 'conic']
