import dataclasses

import pytest

from yapcsg.config import CSGSettings, default_settings


def test_defaults():
    s = CSGSettings()
    assert s.base_epsilon == 1e-5
    assert s.reference_scale == 1.0
    assert (s.min_scale, s.max_scale) == (1e-3, 1e3)
    assert s.max_edge_ratio == 1e6
    assert s.volume_tolerance == 1e-3
    assert s.check_volumes is True
    assert s.engine == 'native'


def test_from_empty_environment():
    assert CSGSettings.from_env({}) == CSGSettings()


def test_from_environment():
    env = {
        'YAPCSG_EPSILON': '1e-6',
        'YAPCSG_REFERENCE_SCALE': '10',
        'YAPCSG_MAX_EDGE_RATIO': '1e4',
        'YAPCSG_VOLUME_TOLERANCE': '0.01',
        'YAPCSG_CHECK_VOLUMES': 'off',
        'YAPCSG_BOOLEAN_ENGINE': ' trimesh:manifold ',
    }
    s = CSGSettings.from_env(env)
    assert s.base_epsilon == 1e-6
    assert s.reference_scale == 10.0
    assert s.max_edge_ratio == 1e4
    assert s.volume_tolerance == 0.01
    assert s.check_volumes is False
    assert s.engine == 'trimesh:manifold'


@pytest.mark.parametrize('raw,expected', [('1', True), ('YES', True), ('true', True),
                                          ('0', False), ('No', False)])
def test_boolean_parsing(raw, expected):
    assert CSGSettings.from_env({'YAPCSG_CHECK_VOLUMES': raw}).check_volumes is expected


def test_blank_values_are_ignored():
    assert CSGSettings.from_env({'YAPCSG_EPSILON': '  '}).base_epsilon == 1e-5


@pytest.mark.parametrize('env', [
    {'YAPCSG_EPSILON': 'tiny'},
    {'YAPCSG_CHECK_VOLUMES': 'maybe'},
    {'YAPCSG_EPSILON': '-1'},
])
def test_bad_environment(env):
    with pytest.raises(ValueError):
        CSGSettings.from_env(env)


@pytest.mark.parametrize('kwargs', [
    {'base_epsilon': 0},
    {'reference_scale': -1},
    {'min_scale': 10, 'max_scale': 1},
    {'max_edge_ratio': 1},
    {'volume_tolerance': -0.1},
])
def test_validation(kwargs):
    with pytest.raises(ValueError):
        CSGSettings(**kwargs)


def test_frozen_and_overrides():
    s = CSGSettings()
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.base_epsilon = 1.0
    t = s.with_overrides(base_epsilon=1e-4)
    assert t.base_epsilon == 1e-4
    assert s.base_epsilon == 1e-5


def test_default_settings_reads_process_environment(monkeypatch):
    monkeypatch.setenv('YAPCSG_VOLUME_TOLERANCE', '0.5')
    assert default_settings().volume_tolerance == 0.5


def test_trimesh_backend_setting():
    assert CSGSettings().trimesh_backend is None
    env = {'YAPCSG_TRIMESH_BACKEND': ' manifold '}
    assert CSGSettings.from_env(env).trimesh_backend == 'manifold'
    assert CSGSettings.from_env({'YAPCSG_TRIMESH_BACKEND': ''}).trimesh_backend is None
