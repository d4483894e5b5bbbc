import math

import numpy as np
import pytest

from yapcsg.errors import InvalidInputError
from yapcsg.mesh import (
    MeshValidationReport,
    Triangle,
    as_mesh,
    as_triangle,
    boundary_edge_count,
    check_mesh,
    from_array,
    mesh_edges_closed,
    mesh_to_polygons,
    meshbbox,
    polygons_to_mesh,
    reverse_mesh,
    surfacearea,
    to_array,
    translate_mesh,
    validate_mesh,
    volumeof,
)
from yapcsg.polygon import Plane, Polygon, Vertex
from yapcsg.primitives import cube


class TestTriangle:

    def test_normal_area_centroid(self):
        tri = Triangle((0.0, 0.0, 0.0), (3.0, 0.0, 0.0), (0.0, 3.0, 0.0))
        assert tri.normal == (0.0, 0.0, 1.0)
        assert tri.area == pytest.approx(4.5)
        assert tri.centroid == pytest.approx((1.0, 1.0, 0.0))

    def test_degenerate_normal_is_none(self):
        tri = Triangle((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (2.0, 2.0, 2.0))
        assert tri.normal is None

    def test_iteration_and_flip(self):
        tri = Triangle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        v0, v1, v2 = tri
        assert len(tri) == 3
        assert tri[2] == v2
        assert tri.flipped() == Triangle(v0, v2, v1)
        assert tri.flipped().normal == (0.0, 0.0, -1.0)


def test_as_triangle_accepts_yapcad_points():
    tri = as_triangle([[0, 0, 0, 1], [1, 0, 0, 1], [0, 1, 0, 1]])
    assert tri == Triangle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))


def test_as_mesh_accepts_arrays():
    arr = np.array([[[0, 0, 0], [1, 0, 0], [0, 1, 0]]], dtype=float)
    mesh = as_mesh(arr)
    assert len(mesh) == 1
    assert isinstance(mesh[0], Triangle)


class TestCheckMesh:

    def test_valid_mesh_passes(self):
        mesh = check_mesh(cube(1.0))
        assert len(mesh) == 12

    def test_empty(self):
        with pytest.raises(InvalidInputError, match='empty'):
            check_mesh([], 'a')

    def test_none(self):
        with pytest.raises(InvalidInputError):
            check_mesh(None)

    def test_nan_coordinate(self):
        mesh = cube(1.0) + [[(0, 0, 0), (math.nan, 0, 0), (0, 1, 0)]]
        with pytest.raises(InvalidInputError) as info:
            check_mesh(mesh, 'b')
        assert info.value.operand == 'b'
        assert 'b:' in str(info.value)

    def test_infinite_coordinate(self):
        with pytest.raises(InvalidInputError):
            check_mesh([[(0, 0, 0), (math.inf, 0, 0), (0, 1, 0)]])

    def test_malformed_triangle(self):
        with pytest.raises(InvalidInputError):
            check_mesh([[(0, 0, 0), (1, 0, 0)]])
        with pytest.raises(InvalidInputError):
            check_mesh([[(0, 0), (1, 0), (0, 1)]])

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            check_mesh([])


class TestConversion:

    def test_one_polygon_per_triangle(self):
        mesh = cube(1.0)
        polys = mesh_to_polygons(mesh)
        assert len(polys) == 12
        for tri, poly in zip(mesh, polys):
            assert poly.positions() == list(tri.vertices)
            assert poly.plane.normal == pytest.approx(tri.normal)
            assert all(v.normal == poly.plane.normal for v in poly.vertices)

    def test_degenerate_triangles_dropped(self):
        mesh = cube(1.0) + [Triangle((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0)),
                            Triangle((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (2.0, 2.0, 2.0))]
        assert len(mesh_to_polygons(mesh)) == 12

    def test_polygons_to_mesh_fans(self):
        sq = Polygon.from_points([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)])
        tris = polygons_to_mesh([sq])
        assert len(tris) == 2
        assert all(t.normal == pytest.approx((0.0, 0.0, 1.0)) for t in tris)

    def test_polygons_to_mesh_drops_collinear_fans(self):
        plane = Plane((0.0, 0.0, 1.0), 0.0)
        poly = Polygon(tuple(Vertex(p) for p in [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0),
                                                  (2.0, 0.0, 0.0), (2.0, 1.0, 0.0)]),
                       plane)
        tris = polygons_to_mesh([poly])
        assert tris == [Triangle((0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (2.0, 1.0, 0.0))]

    def test_mesh_polygon_mesh(self):
        mesh = cube(2.0, (1, 2, 3))
        assert polygons_to_mesh(mesh_to_polygons(mesh)) == mesh

    def test_array_views(self):
        mesh = cube(1.0)
        arr = to_array(mesh)
        assert arr.shape == (12, 3, 3)
        assert from_array(arr) == mesh
        assert to_array([]).shape == (0, 3, 3)
        assert from_array(np.zeros((0, 3, 3))) == []

    def test_from_array_bad_shape(self):
        with pytest.raises(ValueError):
            from_array(np.zeros((4, 3)))


class TestMeasures:

    def test_cube_volume_and_area(self):
        mesh = cube(2.0, (5, 5, 5))
        assert volumeof(mesh) == pytest.approx(8.0)
        assert volumeof(mesh, signed=True) == pytest.approx(8.0)
        assert surfacearea(mesh) == pytest.approx(24.0)

    def test_reversed_mesh_is_negative(self):
        mesh = reverse_mesh(cube(1.0))
        assert volumeof(mesh, signed=True) == pytest.approx(-1.0)
        assert volumeof(mesh) == pytest.approx(1.0)

    def test_empty_volume(self):
        assert volumeof([]) == 0.0
        assert meshbbox([]) is None

    def test_bbox_and_translate(self):
        mesh = translate_mesh(cube(1.0), (1, 2, 3))
        assert meshbbox(mesh) == [(0.5, 1.5, 2.5), (1.5, 2.5, 3.5)]
        assert volumeof(mesh) == pytest.approx(1.0)


class TestValidation:

    def test_closed_cube(self):
        report = validate_mesh(cube(1.0))
        assert isinstance(report, MeshValidationReport)
        assert report.total_triangles == 12
        assert report.valid_triangles == 12
        assert report.is_valid
        assert report.is_closed
        assert report.degenerate_ratio == 0.0
        assert mesh_edges_closed(cube(1.0))

    def test_open_mesh(self):
        mesh = cube(1.0)[:-1]
        assert boundary_edge_count(mesh) == 3
        report = validate_mesh(mesh)
        assert not report.is_closed
        assert report.is_valid

    def test_degenerate_reported(self):
        mesh = cube(1.0) + [Triangle((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0))]
        report = validate_mesh(mesh)
        assert report.degenerate_triangles == [12]
        assert not report.is_valid
        assert report.is_closed
        assert report.degenerate_ratio == pytest.approx(1.0 / 13.0)

    def test_empty_report(self):
        report = validate_mesh([])
        assert not report.is_valid
        assert report.degenerate_ratio == 0.0
