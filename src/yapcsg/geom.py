## vector primitives for the yapCSG boolean engine
## Born on 29 July, 2020, reworked for CSG meshes
## Copyright (c) 2020 Richard DeVaul

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""vector primitives for **yapCSG**

====================
OVERVIEW
====================

Points and direction vectors in **yapCSG** are immutable Python
tuples of three floats, ``(x, y, z)``.  Tuples (rather than the
four-element homogeneous lists used by the yapCAD ``geom`` module)
let vertices, planes and triangles be hashable, frozen values that
can be shared freely between BSP trees without defensive copying.

Anything with at least three numeric components can be turned into
a point with ``to_vec3()``, including yapCAD ``[x, y, z, w]`` points
(the ``w`` coordinate is assumed to be 1 and ignored) and rows of a
numpy array.

The function names follow yapCAD: ``add``, ``sub``, ``scale3``,
``dot``, ``cross``, ``mag``, ``dist``.

"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

Vec3 = Tuple[float, float, float]

## constants
epsilon = 1e-12
ORIGIN: Vec3 = (0.0, 0.0, 0.0)


## operations on scalars
## -----------------------

def isgoodnum(n) -> bool:
    """ determine if an argument is a finite scalar number, and not boolean
    """
    if isinstance(n, bool):
        return False
    try:
        return math.isfinite(n)
    except TypeError:
        return False


def clamp(x: float, lo: float, hi: float) -> float:
    """ clamp scalar ``x`` to the closed interval ``[lo, hi]``"""
    return max(lo, min(hi, x))


## conversion
## ----------

def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return the XYZ components of a point-like sequence as a tuple."""

    if len(point_like) < 3:
        raise ValueError("value must have at least three components")
    return float(point_like[0]), float(point_like[1]), float(point_like[2])


def isfinitevec(a: Sequence[float]) -> bool:
    """ True if all three components of ``a`` are finite numbers"""
    return math.isfinite(a[0]) and math.isfinite(a[1]) and math.isfinite(a[2])


## R^3 -> R^3 functions
## --------------------

def add(a: Vec3, b: Vec3) -> Vec3:
    """ 3 vector, `a + b`"""
    return (a[0]+b[0], a[1]+b[1], a[2]+b[2])

def sub(a: Vec3, b: Vec3) -> Vec3:
    """ 3 vector, `a - b`"""
    return (a[0]-b[0], a[1]-b[1], a[2]-b[2])

def scale3(a: Vec3, c: float) -> Vec3:
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return (a[0]*c, a[1]*c, a[2]*c)

def neg(a: Vec3) -> Vec3:
    """ 3 vector, `-a`"""
    return (-a[0], -a[1], -a[2])

def cross(a: Vec3, b: Vec3) -> Vec3:
    """Compute the cross product of a x b"""

    return (a[1]*b[2] - a[2]*b[1],
            a[2]*b[0] - a[0]*b[2],
            a[0]*b[1] - a[1]*b[0])

def lerp(a: Vec3, b: Vec3, t: float) -> Vec3:
    """ point at parameter ``t`` along the segment from ``a`` to ``b``"""
    return (a[0] + (b[0]-a[0])*t,
            a[1] + (b[1]-a[1])*t,
            a[2] + (b[2]-a[2])*t)

def unit(a: Vec3) -> Vec3:
    """ return ``a`` scaled to unit length, raise ``ValueError`` on a
    zero-length or non-finite vector"""
    m = mag(a)
    if not (m > epsilon and math.isfinite(m)):
        raise ValueError('cannot normalize zero-length vector')
    return (a[0]/m, a[1]/m, a[2]/m)


## R^3 -> R functions
## ------------------

def dot(a: Vec3, b: Vec3) -> float:
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a: Vec3) -> float:
    """ compute the magnitude of 3 vector ``a``"""
    return math.sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def dist(a: Vec3, b: Vec3) -> float:  # compute distance between two points a & b
    """ compute the euclidean distance between two points ``a`` and ``b``"""
    return mag(sub(a, b))


def centroid(points: Sequence[Vec3]) -> Vec3:
    """ arithmetic mean of a non-empty sequence of points"""
    n = len(points)
    if n == 0:
        raise ValueError('centroid of empty point list')
    return (sum(p[0] for p in points) / n,
            sum(p[1] for p in points) / n,
            sum(p[2] for p in points) / n)


__all__ = [
    'Vec3', 'epsilon', 'ORIGIN',
    'isgoodnum', 'clamp', 'to_vec3', 'isfinitevec',
    'add', 'sub', 'scale3', 'neg', 'cross', 'lerp', 'unit',
    'dot', 'mag', 'dist', 'centroid',
]
