import math

import numpy as np
import pytest

from tingrid.config import DerivativeDirection, Region, Registration
from tingrid.exceptions import GridError, RasterizationError
from tingrid.geometry.grid import OutputGrid
from tingrid.geometry.points import PointStore
from tingrid.mesh.triangulation import DelaunayEngine
from tingrid.raster.rasterize import TriangleRasterizer
from tingrid.raster.uncertainty import UncertaintyModel

from conftest import plane_z


def test_unit_triangle_on_exact_region(unit_triangle):
    grid = OutputGrid(Region(0, 1, 0, 1), (0.5, 0.5), registration=Registration.PIXEL)
    written = TriangleRasterizer(unit_triangle, grid).rasterize([[0, 1, 2]])

    assert written == 1
    assert grid.cell_value(0.25, 0.25) == pytest.approx(0.75)
    # Cell centers on the hypotenuse count as inside
    assert grid.cell_value(0.75, 0.25) == pytest.approx(1.25)
    assert grid.cell_value(0.25, 0.75) == pytest.approx(1.75)
    assert math.isnan(grid.cell_value(0.75, 0.75))


def test_far_nodes_keep_fill_value(unit_triangle):
    grid = OutputGrid(Region(0, 12, 0, 12), (0.5, 0.5), fill_value=-9999.0)
    TriangleRasterizer(unit_triangle, grid).rasterize([[0, 1, 2]])

    assert grid.cell_value(0.5, 0.0) == pytest.approx(0.5)
    assert grid.cell_value(0.5, 0.5) == pytest.approx(1.5)
    assert grid.cell_value(10.0, 10.0) == -9999.0
    assert grid.covered().sum() == 6


@pytest.mark.parametrize(
    "direction, expected",
    [(DerivativeDirection.X, 1.0), (DerivativeDirection.Y, 2.0)],
)
def test_derivative_output(unit_triangle, direction, expected):
    grid = OutputGrid(Region(0, 1, 0, 1), (0.25, 0.25))
    TriangleRasterizer(unit_triangle, grid, derivative=direction).rasterize([[0, 1, 2]])

    covered = grid.covered()
    assert covered.sum() == 15
    np.testing.assert_allclose(grid.data[covered], expected)


def test_triangle_outside_grid_contributes_nothing(unit_triangle):
    grid = OutputGrid(Region(5, 6, 5, 6), (0.5, 0.5))
    written = TriangleRasterizer(unit_triangle, grid).rasterize([[0, 1, 2]])
    assert written == 0
    assert not grid.covered().any()


def test_partially_covering_triangle_is_clamped():
    points = PointStore(x=[-1.0, 3.0, -1.0], y=[-1.0, -1.0, 3.0], z=[0.0, 4.0, 8.0])
    grid = OutputGrid(Region(0, 1, 0, 1), (0.5, 0.5))
    TriangleRasterizer(points, grid).rasterize([[0, 1, 2]])

    assert grid.covered().all()
    xx, yy = np.meshgrid(grid.x_coords, grid.y_coords)
    # Plane through the vertices is z = (x + 1) + 2 (y + 1)
    np.testing.assert_allclose(grid.data, (xx + 1) + 2 * (yy + 1), rtol=1e-6)


def test_covered_nodes_lie_in_bounding_box():
    rng = np.random.default_rng(3)
    for _ in range(20):
        coords = rng.uniform(0, 10, size=(3, 2))
        points = PointStore(x=coords[:, 0], y=coords[:, 1], z=rng.uniform(0, 1, 3))
        grid = OutputGrid(Region(0, 10, 0, 10), (0.5, 0.5))
        TriangleRasterizer(points, grid).rasterize([[0, 1, 2]])

        rows, cols = np.nonzero(grid.covered())
        xs = grid.x_coords[cols]
        ys = grid.y_coords[rows]
        assert np.all(xs >= coords[:, 0].min()) and np.all(xs <= coords[:, 0].max())
        assert np.all(ys >= coords[:, 1].min()) and np.all(ys <= coords[:, 1].max())


def test_mesh_reproduces_plane(plane_points):
    triangles = DelaunayEngine().triangulate(plane_points.x, plane_points.y)
    grid = OutputGrid(Region(0, 4, 0, 4), (0.5, 0.5))
    TriangleRasterizer(plane_points, grid).rasterize(triangles)

    assert grid.covered().all()
    xx, yy = np.meshgrid(grid.x_coords, grid.y_coords)
    np.testing.assert_allclose(grid.data, plane_z(xx, yy), rtol=1e-5)


def test_parallel_matches_sequential():
    rng = np.random.default_rng(11)
    x, y = rng.uniform(0, 20, size=(2, 200))
    points = PointStore(x=x, y=y, z=np.sin(x) + np.cos(y))
    triangles = DelaunayEngine().triangulate(x, y)

    sequential = OutputGrid(Region(0, 20, 0, 20), (0.25, 0.25))
    TriangleRasterizer(points, sequential).rasterize(triangles)
    parallel = OutputGrid(Region(0, 20, 0, 20), (0.25, 0.25))
    TriangleRasterizer(points, parallel, workers=4).rasterize(triangles)

    np.testing.assert_array_equal(sequential.data, parallel.data)


def test_last_write_wins():
    # Two triangles with the same footprint and different planes
    points = PointStore(
        x=[0.0, 2.0, 0.0, 0.0, 2.0, 0.0],
        y=[0.0, 0.0, 2.0, 0.0, 0.0, 2.0],
        z=[0.0, 0.0, 0.0, 5.0, 5.0, 5.0],
    )
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    TriangleRasterizer(points, grid).rasterize([[0, 1, 2], [3, 4, 5]])
    assert grid.cell_value(0.0, 0.0) == pytest.approx(5.0)
    assert grid.cell_value(1.0, 1.0) == pytest.approx(5.0)


def test_degenerate_triangle_is_skipped():
    points = PointStore(x=[0.0, 1.0, 2.0], y=[0.0, 1.0, 2.0], z=[0.0, 1.0, 2.0])
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    assert TriangleRasterizer(points, grid).rasterize([[0, 1, 2]]) == 0
    assert not grid.covered().any()


def uncertain_points() -> PointStore:
    return PointStore(
        x=[0.0, 2.0, 0.0],
        y=[0.0, 0.0, 2.0],
        z=[1.0, 1.0, 1.0],
        h=[0.5, 0.2, 0.1],
        v=[0.1, 0.2, 0.3],
    )


def test_uncertainty_output():
    points = uncertain_points()
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    slopes = np.full(grid.shape, 0.2)
    model = UncertaintyModel(delta_min=grid.dx)
    TriangleRasterizer(points, grid, uncertainty=model, slopes=slopes).rasterize([[0, 1, 2]])

    expected_at_j = math.sqrt(model.vertex_variance(0.0, 0.5, 0.1, 0.2))
    assert grid.cell_value(0.0, 0.0) == pytest.approx(expected_at_j, rel=1e-6)

    expected = model.sigma(1.0, 0.0, 0.2, points.x, points.y, points.h, points.v)
    assert grid.cell_value(1.0, 0.0) == pytest.approx(expected, rel=1e-6)
    assert math.isnan(grid.cell_value(2.0, 2.0))


def test_derivative_takes_precedence_over_uncertainty():
    points = uncertain_points()
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    model = UncertaintyModel(delta_min=grid.dx)
    TriangleRasterizer(
        points, grid, derivative=DerivativeDirection.X, uncertainty=model
    ).rasterize([[0, 1, 2]])
    assert grid.cell_value(0.0, 0.0) == pytest.approx(0.0)


def test_uncertainty_requires_slopes():
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    model = UncertaintyModel(delta_min=1.0)
    with pytest.raises(RasterizationError):
        TriangleRasterizer(uncertain_points(), grid, uncertainty=model)


def test_uncertainty_requires_aligned_slopes():
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    model = UncertaintyModel(delta_min=1.0)
    with pytest.raises(GridError):
        TriangleRasterizer(uncertain_points(), grid, uncertainty=model, slopes=np.zeros((2, 2)))


def test_uncertainty_requires_h_v(unit_triangle):
    grid = OutputGrid(Region(0, 2, 0, 2), (1.0, 1.0))
    model = UncertaintyModel(delta_min=1.0)
    with pytest.raises(RasterizationError):
        TriangleRasterizer(unit_triangle, grid, uncertainty=model, slopes=np.zeros(grid.shape))


def test_values_require_elevation():
    points = PointStore(x=[0.0, 1.0, 0.0], y=[0.0, 0.0, 1.0])
    grid = OutputGrid(Region(0, 1, 0, 1), (0.5, 0.5))
    with pytest.raises(RasterizationError):
        TriangleRasterizer(points, grid)
