import pytest

from yapcsg import NumericInstabilityWarning, boolean
from yapcsg.boolean import ENGINE_REGISTRY, get_engine, native, parse_engine, solid_boolean
from yapcsg.boolean import trimesh_engine
from yapcsg.config import CSGSettings
from yapcsg.mesh import volumeof
from yapcsg.primitives import cube


TRIMESH_AVAILABLE = trimesh_engine.trimesh is not None
BACKEND_AVAILABLE = trimesh_engine.is_available()


def _pair():
    return cube(1.0, (0.5, 0.5, 0.5)), cube(1.0, (1.0, 0.5, 0.5))


def test_registry_contains_native():
    assert ENGINE_REGISTRY['native'] is native
    assert get_engine('native') is native
    assert get_engine('missing') is None
    assert 'native' in boolean.__all__


@pytest.mark.parametrize('selector,expected', [
    ('native', ('native', None)),
    ('trimesh', ('trimesh', None)),
    ('trimesh:manifold', ('trimesh', 'manifold')),
    ('trimesh:', ('trimesh', None)),
])
def test_parse_engine(selector, expected):
    assert parse_engine(selector) == expected


def test_dispatch_native_by_default(monkeypatch):
    monkeypatch.delenv('YAPCSG_BOOLEAN_ENGINE', raising=False)
    a, b = _pair()
    result = solid_boolean(a, b, 'intersection')
    assert volumeof(result) == pytest.approx(0.5, abs=1e-3)


def test_dispatch_from_environment(monkeypatch):
    monkeypatch.setenv('YAPCSG_BOOLEAN_ENGINE', 'bogus')
    a, b = _pair()
    with pytest.raises(ValueError, match='bogus'):
        solid_boolean(a, b, 'union')


def test_explicit_engine_overrides_settings():
    a, b = _pair()
    settings = CSGSettings(engine='bogus')
    result = solid_boolean(a, b, 'union', settings=settings, engine='native')
    assert volumeof(result) == pytest.approx(1.5, abs=1e-3)


def test_native_engine_entry_point():
    a, b = _pair()
    assert native.solid_boolean(a, b, 'difference') == native.subtract(a, b)


@pytest.mark.skipif(not TRIMESH_AVAILABLE, reason='trimesh not installed')
def test_trimesh_engine_unavailable_backend():
    a, b = _pair()
    with pytest.raises(RuntimeError):
        trimesh_engine.solid_boolean(a, b, 'union', backend='no-such-backend')


@pytest.mark.skipif(not TRIMESH_AVAILABLE, reason='trimesh not installed')
def test_mesh_to_trimesh_is_watertight():
    mesh = trimesh_engine.mesh_to_trimesh(cube(2.0))
    assert len(mesh.vertices) == 8
    assert mesh.is_watertight
    assert mesh.volume == pytest.approx(8.0)
    assert volumeof(trimesh_engine.trimesh_to_mesh(mesh)) == pytest.approx(8.0)


@pytest.mark.skipif(not BACKEND_AVAILABLE, reason='no trimesh boolean backend installed')
@pytest.mark.parametrize('operation,expected', [
    ('union', 1.5),
    ('intersection', 0.5),
    ('difference', 0.5),
    ('xor', 1.0),
])
def test_native_agrees_with_trimesh(operation, expected):
    a, b = _pair()
    reference = volumeof(trimesh_engine.solid_boolean(a, b, operation))
    ours = volumeof(native.solid_boolean(a, b, operation))
    assert reference == pytest.approx(expected, abs=1e-3)
    assert ours == pytest.approx(reference, abs=1e-3)


def test_registry_follows_trimesh_import():
    assert ('trimesh' in ENGINE_REGISTRY) is TRIMESH_AVAILABLE
    assert ('trimesh' in boolean.__all__) is TRIMESH_AVAILABLE
    assert (get_engine('trimesh') is trimesh_engine) is TRIMESH_AVAILABLE


@pytest.mark.skipif(TRIMESH_AVAILABLE, reason='trimesh installed')
def test_trimesh_selector_without_trimesh():
    assert 'trimesh' not in ENGINE_REGISTRY
    assert get_engine('trimesh') is None
    a, b = _pair()
    with pytest.raises(ValueError, match='trimesh'):
        solid_boolean(a, b, 'union', engine='trimesh')


class _RecordingEngine:

    def __init__(self):
        self.backends = []

    def solid_boolean(self, a, b, operation, *, settings=None, backend=None):
        self.backends.append(backend)
        return []


@pytest.mark.parametrize('selector,env_backend,expected', [
    ('trimesh', None, None),
    ('trimesh', 'manifold', 'manifold'),
    ('trimesh:blender', 'manifold', 'blender'),
])
def test_trimesh_backend_from_environment(monkeypatch, selector, env_backend, expected):
    recorder = _RecordingEngine()
    monkeypatch.setattr(boolean, 'trimesh', recorder)
    if env_backend is None:
        monkeypatch.delenv('YAPCSG_TRIMESH_BACKEND', raising=False)
    else:
        monkeypatch.setenv('YAPCSG_TRIMESH_BACKEND', env_backend)
    a, b = _pair()
    assert solid_boolean(a, b, 'union', engine=selector) == []
    assert recorder.backends == [expected]


def test_dispatched_warning_points_at_caller(monkeypatch):
    def inside_out(tree_a, tree_b, epsilon):
        tree = tree_a.clone()
        tree.invert()
        return tree

    monkeypatch.setitem(native.TREE_OPERATIONS, 'xor', inside_out)
    a, b = cube(1.0), cube(1.0, (3.0, 0.0, 0.0))
    with pytest.warns(NumericInstabilityWarning) as record:
        solid_boolean(a, b, 'xor', engine='native')
    assert record[0].filename == __file__
