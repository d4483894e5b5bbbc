"""Runtime settings for the yapCSG boolean engine.

Settings are immutable; every public operation accepts a ``settings``
override and otherwise reads ``CSGSettings.from_env()``.  Engine selection
follows the yapCAD ``YAPCAD_BOOLEAN_ENGINE`` convention under the
``YAPCSG_`` prefix.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_PREFIX = 'YAPCSG_'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


@dataclass(frozen=True)
class CSGSettings:
    """Numeric and dispatch settings for one boolean operation."""

    base_epsilon: float = 1e-5
    reference_scale: float = 1.0
    min_scale: float = 1e-3
    max_scale: float = 1e3
    max_edge_ratio: float = 1e6
    volume_tolerance: float = 1e-3
    check_volumes: bool = True
    engine: str = 'native'
    trimesh_backend: Optional[str] = None

    def __post_init__(self):
        if not self.base_epsilon > 0:
            raise ValueError('base_epsilon must be positive')
        if not self.reference_scale > 0:
            raise ValueError('reference_scale must be positive')
        if not 0 < self.min_scale <= self.max_scale:
            raise ValueError('scale bounds must satisfy 0 < min_scale <= max_scale')
        if not self.max_edge_ratio > 1:
            raise ValueError('max_edge_ratio must be greater than 1')
        if self.volume_tolerance < 0:
            raise ValueError('volume_tolerance must be non-negative')

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'CSGSettings':
        """Build settings from ``YAPCSG_*`` environment variables."""

        env = os.environ if environ is None else environ
        values = {}
        for field_name, var in (
            ('base_epsilon', 'EPSILON'),
            ('reference_scale', 'REFERENCE_SCALE'),
            ('max_edge_ratio', 'MAX_EDGE_RATIO'),
            ('volume_tolerance', 'VOLUME_TOLERANCE'),
        ):
            raw = env.get(ENV_PREFIX + var)
            if raw is None or raw.strip() == '':
                continue
            try:
                values[field_name] = float(raw)
            except ValueError as exc:
                raise ValueError(f'{ENV_PREFIX}{var} must be a number, got {raw!r}') from exc

        raw = env.get(ENV_PREFIX + 'CHECK_VOLUMES')
        if raw is not None and raw.strip() != '':
            flag = raw.strip().lower()
            if flag in _TRUE_VALUES:
                values['check_volumes'] = True
            elif flag in _FALSE_VALUES:
                values['check_volumes'] = False
            else:
                raise ValueError(f'{ENV_PREFIX}CHECK_VOLUMES must be a boolean, got {raw!r}')

        engine = env.get(ENV_PREFIX + 'BOOLEAN_ENGINE')
        if engine:
            values['engine'] = engine.strip()
        backend = env.get(ENV_PREFIX + 'TRIMESH_BACKEND')
        if backend and backend.strip():
            values['trimesh_backend'] = backend.strip()
        return cls(**values)

    def with_overrides(self, **changes) -> 'CSGSettings':
        return replace(self, **changes)


def default_settings() -> CSGSettings:
    """Settings for the current process environment."""
    return CSGSettings.from_env()


__all__ = ['CSGSettings', 'ENV_PREFIX', 'default_settings']
