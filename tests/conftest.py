# tests/conftest.py

import logging
from pathlib import Path

import numpy as np
import pytest

from tingrid.geometry.points import PointStore


def plane_z(x, y):
    return 1.0 + 2.0 * x + 3.0 * y


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to streams captured by a previous test."""
    yield
    logging.getLogger("tingrid").handlers.clear()


@pytest.fixture
def unit_triangle() -> PointStore:
    """Triangle (0,0,0)-(1,0,1)-(0,1,2): plane z = x + 2y."""
    return PointStore(x=[0.0, 1.0, 0.0], y=[0.0, 0.0, 1.0], z=[0.0, 1.0, 2.0])


@pytest.fixture
def plane_points() -> PointStore:
    """5x5 lattice on [0, 4]^2 sampled from z = 1 + 2x + 3y."""
    xs, ys = np.meshgrid(np.arange(5.0), np.arange(5.0))
    x, y = xs.ravel(), ys.ravel()
    return PointStore(x=x, y=y, z=plane_z(x, y))


@pytest.fixture
def write_table(tmp_path):
    """Write rows to a whitespace-separated table and return its path."""

    def _write(rows, name="points.txt") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            for row in rows:
                f.write(" ".join(str(v) for v in row) + "\n")
        return path

    return _write
