"""
Tests for gastable.process
"""

import numpy as np
import pytest
from scipy import integrate

from gastable import grid
from gastable.process import Process, padinterp, int_linexp0


@pytest.mark.parametrize("g", [0.5, -0.3, 2.0])
def test_int_linexp0(g):
    a, b, u0, u1, x0 = 1.0, 2.0, 1.0, 3.0, 1.5

    def integrand(x):
        u = u0 + (u1 - u0) * (x - a) / (b - a)
        return u * np.exp(g * (x0 - x)) * x

    expected, _ = integrate.quad(integrand, a, b)
    r = int_linexp0(np.array([a]), np.array([b]), np.array([u0]),
                    np.array([u1]), np.array([g]), np.array([x0]))
    assert r[0] == pytest.approx(expected, rel=1e-8)


def test_padinterp():
    interp = padinterp(np.array([[1., 2.], [3., 4.]]))
    assert interp(0.) == pytest.approx(2.)
    assert interp(2.) == pytest.approx(3.)
    assert interp(100.) == pytest.approx(4.)


def test_negative_cross_section():
    with pytest.raises(ValueError):
        Process(target='Ar', kind='ELASTIC', data=[[0, 1e-20], [1, -1e-20]])


def test_negative_energy():
    with pytest.raises(ValueError):
        Process(target='Ar', kind='ELASTIC', data=[[-1, 1e-20], [1, 1e-20]])


def test_bad_shape():
    with pytest.raises(ValueError):
        Process(target='Ar', kind='ELASTIC', data=[1e-20, 1e-20])


def test_str():
    p = Process(target='Ar', kind='IONIZATION', product='Ar^+',
                threshold=15.8, data=[[15.8, 0], [100, 3e-20]])
    assert str(p) == "{IONIZATION: Ar -> Ar^+}"


def test_elastic_cache_maps_cells_onto_themselves():
    p = Process(target='Ar', kind='ELASTIC', mass_ratio=1e-5,
                data=[[0, 1e-20], [5, 1e-20], [20, 1e-20]])
    p.set_grid_cache(grid.LinearGrid(0, 10., 10))

    assert len(p.j) == 10
    assert np.all(p.i == p.j)


def test_inelastic_cache_shifts_by_threshold():
    p = Process(target='Ar', kind='EXCITATION', threshold=2.0,
                data=[[2, 0], [20, 1e-20]])
    gr = grid.LinearGrid(0, 10., 10)
    p.set_grid_cache(gr)

    assert len(p.j) == 8
    assert np.all(p.j - p.i == 2)

    # Cached per grid
    j = p.j
    p.set_grid_cache(gr)
    assert p.j is j
