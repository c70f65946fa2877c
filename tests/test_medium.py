"""
Tests for gastable.medium
"""

import io

import numpy as np
import pytest

from gastable.medium import (GasMedium, GasTable, LOG_FLOOR,
                             log_coefficient, einstein_factor)
from gastable.solver import ConvergenceError
from gastable.transport import from_medium

from .test_parser import CROSS_SECTIONS


@pytest.fixture(scope='module')
def argon():
    gas = GasMedium()
    gas.set_composition('Ar', 100.)
    gas.pressure = 750.
    gas.temperature = 293.15
    gas.set_field_grid(5000., 40000., 3)
    gas.generate_gas_table()
    return gas


def test_defaults():
    gas = GasMedium()
    assert gas.composition == {'Ar': 1.0}
    assert gas.pressure == 760.
    assert gas.temperature == 293.15
    assert np.allclose(gas.get_field_grid(), np.geomspace(100., 1e5, 20))


def test_number_density():
    gas = GasMedium()
    gas.temperature = 273.15
    # Loschmidt constant
    assert gas.number_density == pytest.approx(2.6868e25, rel=1e-4)


def test_composition_normalized():
    gas = GasMedium()
    gas.set_composition('Ar', 50.)
    assert gas.composition == {'Ar': 1.0}


@pytest.mark.parametrize("args", [
    (),
    ('Ar',),
    ('Ar', -1.),
    ('Ar', 0.),
    ('Xe', 100.),
    ('Ar', 50., 'Ar', 50.),
])
def test_invalid_composition(args):
    with pytest.raises(ValueError):
        GasMedium().set_composition(*args)


def test_custom_cross_sections():
    gas = GasMedium()
    gas.load_cross_sections(io.StringIO(CROSS_SECTIONS))
    assert gas.available_gases() == ['Ar', 'N2', 'O2']

    gas.set_composition('Ar', 80., 'O2', 20.)
    assert gas.composition == pytest.approx({'Ar': 0.8, 'O2': 0.2})


def test_attaching_mixture():
    gas = GasMedium()
    gas.load_cross_sections(io.StringIO(CROSS_SECTIONS))
    gas.set_composition('Ar', 80., 'O2', 20.)
    gas.set_field_grid(5000., 20000., 2)
    table = gas.generate_gas_table()

    assert np.all(np.isfinite(table.attachment))
    assert np.all(table.attachment > LOG_FLOOR)
    assert gas.get_electron_attachment(0) == table.attachment[0]

    params = from_medium(gas)
    assert np.all(params.attachment > np.exp(LOG_FLOOR))


def test_empty_cross_sections():
    with pytest.raises(ValueError):
        GasMedium().load_cross_sections(io.StringIO("empty\n"))


@pytest.mark.parametrize("attr", ['pressure', 'temperature'])
def test_non_positive_state(attr):
    gas = GasMedium()
    with pytest.raises(ValueError):
        setattr(gas, attr, 0.)
    with pytest.raises(ValueError):
        setattr(gas, attr, -10.)


def test_field_grid():
    gas = GasMedium()
    gas.set_field_grid(100., 1000., 10)
    assert np.allclose(gas.get_field_grid(), np.linspace(100., 1000., 10))

    gas.set_field_grid(100., 1000., 10, log_scale=True)
    assert np.allclose(gas.get_field_grid(), np.geomspace(100., 1000., 10))

    gas.set_field_grid(250., 250., 1)
    assert np.allclose(gas.get_field_grid(), [250.])


@pytest.mark.parametrize("args", [
    (100., 1000., 0),
    (0., 1000., 10),
    (1000., 100., 10),
    (100., 100., 5),
])
def test_invalid_field_grid(args):
    with pytest.raises(ValueError):
        GasMedium().set_field_grid(*args)


def test_no_table():
    gas = GasMedium()
    with pytest.raises(RuntimeError):
        gas.get_electron_velocity(0)


def test_table(argon):
    table = argon.table
    assert len(table) == 3
    assert np.allclose(table.efield, [5000., 22500., 40000.])
    assert np.allclose(table.reduced_field,
                       table.efield * 100. / argon.number_density / 1e-21)

    assert np.all(table.velocity > 0)
    assert np.all(np.diff(table.velocity) > 0)
    assert np.all(table.mean_energy > 0)

    assert np.all(table.transverse_diffusion > 0)
    assert np.all(np.isfinite(table.longitudinal_diffusion))
    assert np.all(table.longitudinal_diffusion >= 0)

    # Pure argon does not attach electrons.
    assert np.all(table.attachment == LOG_FLOOR)
    assert table.townsend[-1] > LOG_FLOOR
    assert table.townsend[-1] > table.townsend[0]


def test_getters(argon):
    table = argon.table
    assert argon.get_electron_velocity(1) == table.velocity[1]
    assert argon.get_electron_townsend(2) == table.townsend[2]
    assert argon.get_electron_attachment(0) == LOG_FLOOR
    assert (argon.get_electron_longitudinal_diffusion(0)
            == table.longitudinal_diffusion[0])
    assert (argon.get_electron_transverse_diffusion(2)
            == table.transverse_diffusion[2])

    with pytest.raises(IndexError):
        argon.get_electron_velocity(3)
    with pytest.raises(IndexError):
        argon.get_electron_velocity(-1)


def test_save_and_load(argon, tmp_path):
    path = str(tmp_path / "argon.npz")
    argon.table.save(path)

    gas = GasMedium()
    table = gas.load_gas_table(path)

    assert gas.composition == {'Ar': 1.0}
    assert gas.pressure == 750.
    assert gas.temperature == pytest.approx(293.15)
    assert np.allclose(gas.get_field_grid(), argon.get_field_grid())
    for name in GasTable.COLUMNS:
        assert np.array_equal(getattr(table, name),
                              getattr(argon.table, name))


def test_changing_state_drops_table(argon, tmp_path):
    path = str(tmp_path / "argon.npz")
    argon.table.save(path)

    gas = GasMedium()
    gas.load_gas_table(path)
    gas.pressure = 100.
    assert gas.table is None


def failing_solve(self, *args, **kwargs):
    raise ConvergenceError("no convergence")


def test_strict_failure(monkeypatch):
    monkeypatch.setattr(GasMedium, '_solve', failing_solve)
    gas = GasMedium()
    gas.set_field_grid(1000., 2000., 2)
    with pytest.raises(ConvergenceError):
        gas.generate_gas_table(strict=True)


def test_failed_points_are_nan(monkeypatch, caplog):
    monkeypatch.setattr(GasMedium, '_solve', failing_solve)
    gas = GasMedium()
    gas.set_field_grid(1000., 2000., 2)
    table = gas.generate_gas_table()

    assert len(table) == 2
    assert np.all(np.isnan(table.velocity))
    assert np.all(np.isnan(table.townsend))
    assert "did not converge" in caplog.text


def test_log_coefficient():
    out = log_coefficient([0., 1., np.e, np.nan])
    assert out[0] == LOG_FLOOR
    assert np.allclose(out[1:3], [0., 1.])
    assert np.isnan(out[3])


@pytest.mark.parametrize("power, factor", [
    (1., 1.),
    (0.5, 0.5),
    (0., 0.),
    (-1., 0.),
])
def test_einstein_factor(power, factor):
    efield = np.geomspace(100., 10000., 7)
    assert np.allclose(einstein_factor(efield, efield**power), factor)


def test_einstein_factor_single_point():
    assert np.allclose(einstein_factor([100.], [5.]), [1.])


def test_einstein_factor_missing_point():
    efield = np.linspace(100., 1000., 6)
    velocity = efield.copy()
    velocity[2] = np.nan
    factor = einstein_factor(efield, velocity)

    assert np.isnan(factor[2])
    assert np.allclose(np.delete(factor, 2), 1.)


def test_einstein_factor_one_valid_point():
    factor = einstein_factor([100., 200.], [np.nan, 5.])
    assert np.isnan(factor[0])
    assert factor[1] == 1.
