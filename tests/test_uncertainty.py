import itertools
import math

import numpy as np
import pytest

from tingrid.raster.uncertainty import UncertaintyModel

VX = [0.0, 4.0, 0.0]
VY = [0.0, 0.0, 3.0]
H = [0.5, 1.0, 0.2]
V = [0.1, 0.3, 0.2]


def manual_sigma(xp, yp, slope, vx, vy, h, v, delta_min, alpha=2.0, s_h=1.0):
    terms = []
    dists = []
    for i in range(3):
        d = math.hypot(xp - vx[i], yp - vy[i])
        dists.append(d)
        terms.append(
            v[i] ** 2 * (1 + ((d + s_h * h[i]) / delta_min) ** alpha)
            + (math.tan(slope) * h[i]) ** 2
        )
    num = sum(t / d for t, d in zip(terms, dists))
    den = sum(1 / d for d in dists)
    return math.sqrt(num / den)


def test_sigma_matches_weighted_blend():
    model = UncertaintyModel(delta_min=0.5)
    sigma = model.sigma(1.0, 1.0, 0.3, VX, VY, H, V)
    assert sigma == pytest.approx(manual_sigma(1.0, 1.0, 0.3, VX, VY, H, V, 0.5))


def test_sigma_at_vertex_j_uses_its_term_only():
    model = UncertaintyModel(delta_min=0.5)
    expected = math.sqrt(model.vertex_variance(0.0, H[0], V[0], 0.3))

    sigma = model.sigma(VX[0], VY[0], 0.3, VX, VY, H, V)
    assert sigma == pytest.approx(expected, rel=1e-15)

    # Moving k and l does not change the result
    sigma_moved = model.sigma(VX[0], VY[0], 0.3, [0.0, 40.0, 7.0], [0.0, 9.0, 30.0], H, [0.1, 9.0, 9.0])
    assert sigma_moved == pytest.approx(expected, rel=1e-15)


def test_sigma_first_coincident_vertex_wins():
    model = UncertaintyModel(delta_min=1.0)
    # j and k share a location; j comes first
    vx = [2.0, 2.0, 0.0]
    vy = [2.0, 2.0, 0.0]
    h = [0.1, 5.0, 0.1]
    v = [0.2, 5.0, 0.2]
    sigma = model.sigma(2.0, 2.0, 0.0, vx, vy, h, v)
    assert sigma == pytest.approx(math.sqrt(model.vertex_variance(0.0, 0.1, 0.2, 0.0)))


def test_sigma_invariant_under_relabeling():
    model = UncertaintyModel(delta_min=0.25)
    reference = model.sigma(1.2, 0.7, 0.4, VX, VY, H, V)
    for order in itertools.permutations(range(3)):
        sigma = model.sigma(
            1.2,
            0.7,
            0.4,
            [VX[i] for i in order],
            [VY[i] for i in order],
            [H[i] for i in order],
            [V[i] for i in order],
        )
        assert sigma == pytest.approx(reference, rel=1e-12)


def test_sigma_vectorized_matches_scalar():
    model = UncertaintyModel(delta_min=0.5)
    xs = np.array([0.0, 1.0, 2.0, 0.5])
    ys = np.array([0.0, 1.0, 0.5, 2.0])
    slopes = np.array([0.0, 0.1, 0.2, 0.3])
    sigma = model.sigma(xs, ys, slopes, VX, VY, H, V)
    assert sigma.shape == (4,)
    for i in range(4):
        assert sigma[i] == pytest.approx(model.sigma(xs[i], ys[i], slopes[i], VX, VY, H, V))


def test_flat_terrain_without_horizontal_error():
    model = UncertaintyModel(delta_min=1.0)
    # With h = 0 and zero slope each term is v**2 * (1 + d**2)
    h = [0.0, 0.0, 0.0]
    v = [1.0, 1.0, 1.0]
    vx = [-1.0, 1.0, 0.0]
    vy = [0.0, 0.0, 1.0]
    sigma = model.sigma(0.0, 0.0, 0.0, vx, vy, h, v)
    assert sigma == pytest.approx(math.sqrt(2.0))


def test_delta_min_must_be_positive():
    with pytest.raises(ValueError):
        UncertaintyModel(delta_min=0.0)
