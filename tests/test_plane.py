import numpy as np
import pytest

from tingrid.exceptions import DegenerateTriangleError
from tingrid.geometry.plane import (
    INSIDE,
    ON_BOUNDARY,
    OUTSIDE,
    close_loop,
    fit_plane,
    non_zero_winding,
)


def test_fit_plane_unit_triangle():
    plane = fit_plane([0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [0.0, 1.0, 2.0])
    assert plane.a == pytest.approx(1.0)
    assert plane.b == pytest.approx(2.0)
    assert plane.c == pytest.approx(0.0)
    assert plane.evaluate(0.25, 0.25) == pytest.approx(0.75)


def test_fit_plane_passes_through_vertices():
    rng = np.random.default_rng(7)
    for _ in range(50):
        vx, vy, vz = rng.uniform(-100, 100, size=(3, 3))
        plane = fit_plane(vx, vy, vz)
        for i in range(3):
            assert plane.evaluate(vx[i], vy[i]) == pytest.approx(vz[i], abs=1e-8)


def test_fit_plane_degenerate_raises():
    with pytest.raises(DegenerateTriangleError):
        fit_plane([0.0, 1.0, 2.0], [0.0, 1.0, 2.0], [0.0, 5.0, 1.0])


def test_winding_inside_outside_boundary():
    vx = [0.0, 1.0, 0.0]
    vy = [0.0, 0.0, 1.0]
    assert non_zero_winding(0.25, 0.25, vx, vy) == INSIDE
    assert non_zero_winding(0.75, 0.75, vx, vy) == OUTSIDE
    assert non_zero_winding(0.5, 0.5, vx, vy) == ON_BOUNDARY
    assert non_zero_winding(0.5, 0.0, vx, vy) == ON_BOUNDARY
    assert non_zero_winding(0.0, 0.0, vx, vy) == ON_BOUNDARY
    assert non_zero_winding(-0.1, 0.5, vx, vy) == OUTSIDE


def test_winding_independent_of_orientation():
    # Steps of 1/8 keep every boundary test exact
    xs, ys = np.meshgrid(np.linspace(-0.5, 1.5, 17), np.linspace(-0.5, 1.5, 17))
    ccw = non_zero_winding(xs, ys, [0.0, 1.0, 0.0], [0.0, 0.0, 1.0])
    cw = non_zero_winding(xs, ys, [0.0, 0.0, 1.0], [0.0, 1.0, 0.0])
    np.testing.assert_array_equal(ccw, cw)


def test_winding_closed_loop_matches_open_loop():
    xs = np.array([0.2, 0.9, 0.5, 2.0])
    ys = np.array([0.2, 0.05, 0.5, 2.0])
    vx, vy = close_loop([0.0, 1.0, 0.0], [0.0, 0.0, 1.0])
    assert len(vx) == 4
    np.testing.assert_array_equal(
        non_zero_winding(xs, ys, vx, vy),
        non_zero_winding(xs, ys, [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]),
    )


def test_winding_array_shape_preserved():
    xs, ys = np.meshgrid(np.arange(4.0), np.arange(3.0))
    result = non_zero_winding(xs, ys, [0.0, 3.0, 0.0], [0.0, 0.0, 3.0])
    assert result.shape == (3, 4)
    assert result[0, 0] == ON_BOUNDARY
    assert result[2, 3] == OUTSIDE


def test_winding_degenerate_polygon_is_outside():
    assert non_zero_winding(0.0, 0.0, [0.0], [0.0]) == OUTSIDE
