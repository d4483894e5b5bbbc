"""Exceptions and warnings raised by the yapCSG boolean engine.

All hard errors derive from ``ValueError`` so callers written against the
yapCAD convention (``except ValueError``) keep working.
"""

from __future__ import annotations


class CSGError(Exception):
    """Base class for yapCSG errors."""


class DegeneratePlaneError(CSGError, ValueError):
    """A plane was requested from collinear or coincident points.

    Internal only: the mesh adapter drops the offending triangle.
    """


class InvalidInputError(CSGError, ValueError):
    """An operand cannot be used for a boolean operation.

    Raised for empty meshes, malformed triangles and NaN or infinite
    coordinates, before any BSP tree is built.
    """

    def __init__(self, message: str, *, operand: str | None = None):
        if operand:
            message = f"{operand}: {message}"
        super().__init__(message)
        self.operand = operand


class NumericInstabilityWarning(UserWarning):
    """A post-operation sanity check failed.

    The result is still returned (best effort); the warning signals a
    robustness defect worth diagnosing, e.g. with a larger epsilon.
    """


__all__ = [
    'CSGError',
    'DegeneratePlaneError',
    'InvalidInputError',
    'NumericInstabilityWarning',
]
