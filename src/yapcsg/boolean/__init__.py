"""Boolean engines for yapCSG meshes.

``native`` is the BSP engine and is always present.  ``trimesh`` is a
reference engine registered only when the trimesh package imports.
"""

from typing import List, Optional

from yapcsg.config import CSGSettings, default_settings

from . import native as native
from . import trimesh_engine

__all__ = ['native']

if trimesh_engine.trimesh is not None:
    trimesh = trimesh_engine
    __all__.append('trimesh')
else:  # optional dependency
    trimesh = None

ENGINE_REGISTRY = {'native': native}
if trimesh is not None:
    ENGINE_REGISTRY['trimesh'] = trimesh


def get_engine(name: str):
    return ENGINE_REGISTRY.get(name)


def parse_engine(selector: str):
    """Split an ``engine[:backend]`` selector into its two parts."""

    if selector and ':' in selector:
        engine, backend = selector.split(':', 1)
        return engine, backend or None
    return selector, None


def solid_boolean(a, b, operation: str, *, settings: Optional[CSGSettings] = None,
                  engine: Optional[str] = None) -> list:
    """Run ``operation`` on meshes ``a`` and ``b`` with the selected engine.

    ``engine`` overrides ``settings.engine`` (itself read from
    ``YAPCSG_BOOLEAN_ENGINE``); ``trimesh:manifold`` selects the trimesh
    engine with a specific backend, otherwise ``YAPCSG_TRIMESH_BACKEND``
    names it.
    """

    settings = settings or default_settings()
    selected_raw = engine or settings.engine
    selected, backend = parse_engine(selected_raw)
    if selected == 'native':
        return native.solid_boolean(a, b, operation, settings=settings, stacklevel=3)
    if selected == 'trimesh' and trimesh is not None:
        backend = backend or settings.trimesh_backend
        return trimesh.solid_boolean(a, b, operation, settings=settings, backend=backend)
    raise ValueError(f'unknown boolean engine {selected_raw!r}')


__all__.extend(['ENGINE_REGISTRY', 'get_engine', 'parse_engine', 'solid_boolean'])
