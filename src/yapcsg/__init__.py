# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("yapCSG")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from yapcsg.boolean import solid_boolean
from yapcsg.boolean.native import (
    BooleanResult,
    boolean_operation,
    intersect,
    subtract,
    union,
    xor,
)
from yapcsg.config import CSGSettings
from yapcsg.errors import (
    CSGError,
    DegeneratePlaneError,
    InvalidInputError,
    NumericInstabilityWarning,
)
from yapcsg.mesh import Triangle, mesh_to_polygons, polygons_to_mesh, volumeof

__all__ = [
    '__version__',
    'BooleanResult',
    'CSGError',
    'CSGSettings',
    'DegeneratePlaneError',
    'InvalidInputError',
    'NumericInstabilityWarning',
    'Triangle',
    'boolean_operation',
    'intersect',
    'mesh_to_polygons',
    'polygons_to_mesh',
    'solid_boolean',
    'subtract',
    'union',
    'volumeof',
    'xor',
]
