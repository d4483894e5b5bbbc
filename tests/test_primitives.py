import math

import pytest

from yapcsg.geom import dot, sub
from yapcsg.mesh import mesh_edges_closed, meshbbox, validate_mesh, volumeof
from yapcsg.primitives import conic, cube, prism, sphere


def _outward(mesh, center):
    """Every face normal points away from ``center``."""
    return all(dot(t.normal, sub(t.centroid, center)) > 0 for t in mesh)


class TestPrism:

    def test_prism(self):
        mesh = prism(2, 3, 4, center=(1, 1, 1))
        assert len(mesh) == 12
        assert volumeof(mesh, signed=True) == pytest.approx(24.0)
        assert meshbbox(mesh) == [(0.0, -0.5, -1.0), (2.0, 2.5, 3.0)]
        assert mesh_edges_closed(mesh)
        assert _outward(mesh, (1, 1, 1))

    def test_cube_default(self):
        mesh = cube()
        assert volumeof(mesh) == pytest.approx(1.0)
        assert meshbbox(mesh) == [(-0.5, -0.5, -0.5), (0.5, 0.5, 0.5)]

    @pytest.mark.parametrize('dims', [(0, 1, 1), (1, -1, 1), (1, 1, 0)])
    def test_bad_dimensions(self, dims):
        with pytest.raises(ValueError):
            prism(*dims)


class TestSphere:

    @pytest.mark.parametrize('depth', [0, 1, 2])
    def test_face_count_and_closed(self, depth):
        mesh = sphere(2.0, depth=depth)
        assert len(mesh) == 20 * 4 ** depth
        assert mesh_edges_closed(mesh)
        assert validate_mesh(mesh).is_valid

    def test_outward_and_volume(self):
        mesh = sphere(1.0, center=(0.5, 0.5, 0.5), depth=2)
        assert _outward(mesh, (0.5, 0.5, 0.5))
        v = volumeof(mesh, signed=True)
        assert 0.9 * math.pi / 6 < v < math.pi / 6

    def test_vertices_on_sphere(self):
        mesh = sphere(4.0, center=(1, 2, 3), depth=1)
        for tri in mesh:
            for p in tri:
                assert math.dist(p, (1, 2, 3)) == pytest.approx(2.0)

    def test_bad_arguments(self):
        with pytest.raises(ValueError):
            sphere(0)
        with pytest.raises(ValueError):
            sphere(1.0, depth=-1)


class TestConic:

    def test_cylinder(self):
        n = 64
        mesh = conic(1.0, 1.0, 2.0, segments=n)
        expected = n / 2 * math.sin(2 * math.pi / n) * 2.0
        assert volumeof(mesh, signed=True) == pytest.approx(expected)
        assert mesh_edges_closed(mesh)
        assert meshbbox(mesh)[0][2] == 0.0
        assert meshbbox(mesh)[1][2] == 2.0

    def test_cone(self):
        n = 32
        mesh = conic(1.0, 0.0, 3.0, center=(1, 1, 1), segments=n)
        expected = n / 2 * math.sin(2 * math.pi / n) * 3.0 / 3.0
        assert volumeof(mesh, signed=True) == pytest.approx(expected)
        assert mesh_edges_closed(mesh)
        assert len(mesh) == 2 * n

    def test_frustum_is_closed_and_outward(self):
        mesh = conic(2.0, 1.0, 1.0, segments=24)
        assert mesh_edges_closed(mesh)
        assert volumeof(mesh, signed=True) > 0
        assert validate_mesh(mesh).is_valid

    @pytest.mark.parametrize('args', [(0, 1, 1), (1, -1, 1), (1, 1, 0)])
    def test_bad_arguments(self, args):
        with pytest.raises(ValueError):
            conic(*args)

    def test_too_few_segments(self):
        with pytest.raises(ValueError):
            conic(1, 1, 1, segments=2)
