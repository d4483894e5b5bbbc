"""Trimesh-backed reference boolean engine for yapCSG meshes.

This engine is optional.  It converts triangle meshes to
``trimesh.Trimesh`` instances, dispatches boolean operations via
:mod:`trimesh.boolean`, and converts the result back into a triangle
list.  It is mainly useful for cross-checking the native engine.

Availability depends on both the ``trimesh`` package and at least one
boolean backend supported by ``trimesh`` (e.g. manifold3d, Blender).
"""

from __future__ import annotations

import os
from typing import List, Optional

import numpy as np

try:
    import trimesh
except ImportError:  # pragma: no cover - optional dependency
    trimesh = None  # type: ignore[assignment]

from yapcsg.config import CSGSettings
from yapcsg.logging_setup import get_logger
from yapcsg.mesh import Triangle, check_mesh, from_array

from . import native as _native

log = get_logger(__name__)

ENGINE_NAME = "trimesh"

_TRIMESH_OPERATIONS = {
    'union': 'union',
    'intersection': 'intersection',
    'difference': 'difference',
}


def engines_available() -> set[str]:
    """Return the set of trimesh boolean backends that are operational."""

    if trimesh is None:  # pragma: no cover - optional dependency
        return set()
    return set(trimesh.boolean.engines_available)


def is_available(backend: str | None = None) -> bool:
    """Check whether the engine can run (trimesh + backend present)."""

    available = engines_available()
    if not available:
        return False
    if backend is None:
        return True
    return backend in available


def mesh_to_trimesh(triangles) -> "trimesh.Trimesh":
    """Indexed ``trimesh.Trimesh`` with coincident vertices merged."""

    if trimesh is None:  # pragma: no cover - optional dependency
        raise RuntimeError("trimesh is not installed")

    vertex_map: dict[tuple[float, float, float], int] = {}
    verts = []
    faces = []
    for tri in triangles:
        face_inds = []
        for pt in tri:
            key = (round(pt[0], 9), round(pt[1], 9), round(pt[2], 9))
            idx = vertex_map.get(key)
            if idx is None:
                idx = len(verts)
                vertex_map[key] = idx
                verts.append([pt[0], pt[1], pt[2]])
            face_inds.append(idx)
        faces.append(face_inds)

    if not faces:
        return trimesh.Trimesh(vertices=np.zeros((0, 3)),
                               faces=np.zeros((0, 3), dtype=np.int64), process=False)
    mesh = trimesh.Trimesh(vertices=np.asarray(verts, dtype=float),
                           faces=np.asarray(faces, dtype=np.int64), process=False)
    mesh.remove_unreferenced_vertices()
    return mesh


def trimesh_to_mesh(mesh: "trimesh.Trimesh") -> List[Triangle]:
    if mesh is None or mesh.faces.size == 0:
        return []
    return from_array(np.asarray(mesh.triangles))


def _run(mesh_a, mesh_b, op: str, backend: Optional[str]):
    func = getattr(trimesh.boolean, op)
    return func([mesh_a, mesh_b], engine=backend, check_volume=False)


def solid_boolean(a, b, operation: str, *, settings: CSGSettings | None = None,
                  backend: str | None = None) -> List[Triangle]:
    """Perform a boolean between meshes ``a`` and ``b`` using trimesh.

    ``xor`` is evaluated as the difference between the union and the
    intersection.  ``settings`` is accepted for signature compatibility
    with the native engine.
    """

    if trimesh is None:  # pragma: no cover - optional dependency
        raise RuntimeError("trimesh is not installed; install trimesh to enable this engine")

    available = engines_available()
    if backend is not None and backend not in available:
        raise RuntimeError(
            f"trimesh backend '{backend}' is not available (available: {available})"
        )
    if backend is None and not available:
        raise RuntimeError(
            "no trimesh boolean backends are available; install manifold3d, Blender, "
            "or another supported engine"
        )

    op = _native.normalize_operation(operation)
    mesh_a = mesh_to_trimesh(check_mesh(a, 'a'))
    mesh_b = mesh_to_trimesh(check_mesh(b, 'b'))

    backup_cache = None
    if backend == 'blender':
        backup_cache = os.environ.get('ARCH_CACHE_LINE_SIZE')
        os.environ['ARCH_CACHE_LINE_SIZE'] = '64'

    try:
        if op == 'xor':
            both = _run(mesh_a, mesh_b, 'union', backend)
            common = _run(mesh_a, mesh_b, 'intersection', backend)
            if common is None or common.faces.size == 0:
                result = both
            else:
                result = _run(both, common, 'difference', backend)
        else:
            result = _run(mesh_a, mesh_b, _TRIMESH_OPERATIONS[op], backend)
    except Exception as exc:  # pragma: no cover - depends on external binaries
        raise RuntimeError(f"trimesh boolean operation failed: {exc}") from exc
    finally:
        if backend == 'blender':
            if backup_cache is None:
                os.environ.pop('ARCH_CACHE_LINE_SIZE', None)
            else:
                os.environ['ARCH_CACHE_LINE_SIZE'] = backup_cache

    triangles = trimesh_to_mesh(result)
    log.info('boolean_complete', engine=ENGINE_NAME, backend=backend,
             operation=op, triangles=len(triangles))
    return triangles


__all__ = [
    'ENGINE_NAME',
    'is_available',
    'engines_available',
    'mesh_to_trimesh',
    'trimesh_to_mesh',
    'solid_boolean',
]
