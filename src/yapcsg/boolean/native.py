"""Native BSP boolean engine for yapCSG.

The tree-level functions are the classic csg.js composition sequences:
each works on clones of its operands, never mutates them, and takes the
classification epsilon explicitly.  :func:`boolean_operation` wraps them
for triangle meshes: it validates both operands, fixes one adaptive
epsilon for the whole operation, and runs volume sanity checks on the
result.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from yapcsg.bsp import BSPNode
from yapcsg.config import CSGSettings, default_settings
from yapcsg.errors import InvalidInputError, NumericInstabilityWarning
from yapcsg.logging_setup import get_logger
from yapcsg.mesh import (
    Triangle,
    check_mesh,
    mesh_to_polygons,
    polygons_to_mesh,
    volumeof,
)
from yapcsg.numeric import adaptive_epsilon

log = get_logger(__name__)

ENGINE_NAME = 'native'

OPERATIONS = {
    'union': 'union',
    'intersection': 'intersection',
    'intersect': 'intersection',
    'difference': 'difference',
    'subtract': 'difference',
    'xor': 'xor',
}


## tree level
## ----------

def union_trees(a: BSPNode, b: BSPNode, epsilon: float) -> BSPNode:
    """Tree bounding the union of the solids ``a`` and ``b``."""

    a = a.clone()
    b = b.clone()
    a.clip_to(b, epsilon)
    b.clip_to(a, epsilon)
    b.invert()
    b.clip_to(a, epsilon)
    b.invert()
    a.build(b.all_polygons(), epsilon)
    return a


def subtract_trees(a: BSPNode, b: BSPNode, epsilon: float) -> BSPNode:
    """Tree bounding ``a`` minus ``b``."""

    a = a.clone()
    b = b.clone()
    a.invert()
    a.clip_to(b, epsilon)
    b.clip_to(a, epsilon)
    b.invert()
    b.clip_to(a, epsilon)
    b.invert()
    a.build(b.all_polygons(), epsilon)
    a.invert()
    return a


def intersect_trees(a: BSPNode, b: BSPNode, epsilon: float) -> BSPNode:
    """Tree bounding the common volume of ``a`` and ``b``."""

    a = a.clone()
    b = b.clone()
    a.invert()
    b.clip_to(a, epsilon)
    b.invert()
    a.clip_to(b, epsilon)
    b.clip_to(a, epsilon)
    a.build(b.all_polygons(), epsilon)
    a.invert()
    return a


def xor_trees(a: BSPNode, b: BSPNode, epsilon: float) -> BSPNode:
    """Symmetric difference, ``(a | b) - (a & b)``.

    Built as ``a - b`` plus ``b - a``.  The two pieces share no boundary
    surface, so their polygons are concatenated into a fresh tree without
    another clipping pass; the boundary is the same as subtracting the
    intersection from the union.
    """

    polygons = subtract_trees(a, b, epsilon).all_polygons()
    polygons.extend(subtract_trees(b, a, epsilon).all_polygons())
    return BSPNode(polygons, epsilon)


TREE_OPERATIONS: Dict[str, Callable[[BSPNode, BSPNode, float], BSPNode]] = {
    'union': union_trees,
    'intersection': intersect_trees,
    'difference': subtract_trees,
    'xor': xor_trees,
}


## mesh level
## ----------

@dataclass(frozen=True)
class BooleanResult:
    """Outcome of one mesh boolean.

    ``warnings`` holds the message of every failed sanity check; the
    same messages are emitted as :class:`NumericInstabilityWarning`.
    """

    operation: str
    triangles: List[Triangle]
    epsilon: float
    volume: float
    warnings: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.triangles


def normalize_operation(operation: str) -> str:
    """Canonical operation name; raises InvalidInputError if unknown."""

    key = operation.lower() if isinstance(operation, str) else operation
    try:
        return OPERATIONS[key]
    except (KeyError, TypeError):
        raise InvalidInputError(
            f'unsupported boolean operation {operation!r}; '
            f'expected one of {sorted(OPERATIONS)}') from None


def _operand_tree(mesh, label, epsilon, settings):
    # degeneracy is judged relative to coordinate size, so the unscaled
    # base tolerance is used here
    polygons = mesh_to_polygons(mesh, settings.base_epsilon, settings.max_edge_ratio)
    if not polygons:
        raise InvalidInputError('mesh has no non-degenerate triangles', operand=label)
    tree = BSPNode(polygons, epsilon)
    log.debug('bsp_built', operand=label, polygons=len(polygons),
              nodes=tree.node_count(), depth=tree.depth())
    return tree


def _any_vertex(mesh, predicate) -> bool:
    return any(predicate(p) for tri in mesh for p in tri.vertices)


def _volume_checks(operation, volume, triangles, mesh_a, mesh_b, tree_a, tree_b,
                   epsilon, settings) -> List[str]:
    vol_a = volumeof(mesh_a)
    vol_b = volumeof(mesh_b)
    delta = settings.volume_tolerance * max(vol_a, vol_b)
    messages = []

    if operation == 'union':
        if not triangles:
            messages.append('union of non-empty operands is empty')
        elif volume < max(vol_a, vol_b) - delta:
            messages.append(f'union volume {volume:.6g} is smaller than the larger '
                            f'operand volume {max(vol_a, vol_b):.6g}')
    elif operation == 'intersection':
        if volume > min(vol_a, vol_b) + delta:
            messages.append(f'intersection volume {volume:.6g} exceeds the smaller '
                            f'operand volume {min(vol_a, vol_b):.6g}')
        elif not triangles and (
                _any_vertex(mesh_a, lambda p: tree_b.contains_point(p, epsilon, strict=True)) or
                _any_vertex(mesh_b, lambda p: tree_a.contains_point(p, epsilon, strict=True))):
            messages.append('intersection is empty although the operands overlap')
    elif operation == 'difference':
        if volume > vol_a + delta:
            messages.append(f'difference volume {volume:.6g} exceeds the minuend '
                            f'volume {vol_a:.6g}')
        elif not triangles and _any_vertex(
                mesh_a, lambda p: not tree_b.contains_point(p, epsilon)):
            messages.append('difference is empty although the minuend extends '
                            'outside the subtrahend')

    if volume < -delta:
        messages.append(f'{operation} result is inside out (volume {volume:.6g})')
    return messages


def boolean_operation(a, b, operation: str, *,
                      settings: Optional[CSGSettings] = None,
                      stacklevel: int = 2) -> BooleanResult:
    """Combine two closed triangle meshes.

    ``operation`` is one of ``union``, ``intersection`` (``intersect``),
    ``difference`` (``subtract``) or ``xor``.  Raises
    :class:`~yapcsg.errors.InvalidInputError` before any tree is built
    if an operand is unusable.  Failed volume sanity checks do not
    raise: they warn and are recorded in the result.  ``stacklevel`` is
    handed to :func:`warnings.warn`; wrappers raise it so the warning
    points at their caller.
    """

    op = normalize_operation(operation)
    settings = settings or default_settings()
    mesh_a = check_mesh(a, 'a')
    mesh_b = check_mesh(b, 'b')

    epsilon = adaptive_epsilon(mesh_a + mesh_b, settings.base_epsilon,
                               settings.reference_scale, settings.min_scale,
                               settings.max_scale)
    tree_a = _operand_tree(mesh_a, 'a', epsilon, settings)
    tree_b = _operand_tree(mesh_b, 'b', epsilon, settings)

    result = TREE_OPERATIONS[op](tree_a, tree_b, epsilon)
    triangles = polygons_to_mesh(result.all_polygons(), settings.base_epsilon,
                                 settings.max_edge_ratio)
    volume = volumeof(triangles, signed=True)

    messages = []
    if settings.check_volumes:
        messages = _volume_checks(op, volume, triangles, mesh_a, mesh_b,
                                  tree_a, tree_b, epsilon, settings)
    for message in messages:
        log.warning('numeric_instability', operation=op, epsilon=epsilon, detail=message)
        warnings.warn(message, NumericInstabilityWarning, stacklevel=stacklevel)

    log.info('boolean_complete', operation=op, epsilon=epsilon,
             triangles=len(triangles), volume=volume)
    return BooleanResult(op, triangles, epsilon, volume, messages)


def union(a, b, *, settings: Optional[CSGSettings] = None) -> List[Triangle]:
    return boolean_operation(a, b, 'union', settings=settings, stacklevel=3).triangles


def intersect(a, b, *, settings: Optional[CSGSettings] = None) -> List[Triangle]:
    return boolean_operation(a, b, 'intersection', settings=settings, stacklevel=3).triangles


def subtract(a, b, *, settings: Optional[CSGSettings] = None) -> List[Triangle]:
    return boolean_operation(a, b, 'difference', settings=settings, stacklevel=3).triangles


def xor(a, b, *, settings: Optional[CSGSettings] = None) -> List[Triangle]:
    return boolean_operation(a, b, 'xor', settings=settings, stacklevel=3).triangles


def solid_boolean(a, b, operation: str, *,
                  settings: Optional[CSGSettings] = None,
                  stacklevel: int = 2) -> List[Triangle]:
    """Engine entry point shared with the trimesh engine."""

    return boolean_operation(a, b, operation, settings=settings,
                             stacklevel=stacklevel + 1).triangles


__all__ = [
    'ENGINE_NAME',
    'OPERATIONS',
    'BooleanResult',
    'union_trees',
    'subtract_trees',
    'intersect_trees',
    'xor_trees',
    'normalize_operation',
    'boolean_operation',
    'union',
    'intersect',
    'subtract',
    'xor',
    'solid_boolean',
]
