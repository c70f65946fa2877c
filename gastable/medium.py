""" A gas mixture and its table of electron transport parameters.

:class:`GasMedium` describes the gas (composition, pressure, temperature)
and a grid of electric fields.  :func:`GasMedium.generate_gas_table` solves
the Boltzmann equation at every field point and stores the results in a
:class:`GasTable`, which can be queried point by point, saved and loaded.

Values are stored in the units customary for gas tables: fields in V/cm,
drift velocity in cm/ns, diffusion coefficients as the spread per unit drift
length in sqrt(cm), and the natural logarithm of the Townsend and attachment
coefficients in 1/cm.
"""

import logging

import numpy as np
import scipy.constants as co

from . import gases, grid, parser
from .solver import (BoltzmannSolver, ConvergenceError, TOWNSEND, KB,
                     ELECTRONVOLT)

# log() stored for a vanishing Townsend or attachment coefficient
LOG_FLOOR = -30.


class GasTable(object):
    """ Transport parameters over a grid of electric fields.

    Attributes
    ----------
    efield : array
       Electric field (V/cm).
    reduced_field : array
       E/N (Td).
    velocity : array
       Drift velocity (cm/ns).
    longitudinal_diffusion, transverse_diffusion : arrays
       Diffusion coefficients (sqrt(cm)).
    townsend, attachment : arrays
       log(alpha) and log(eta), with alpha and eta in 1/cm.
    mean_energy : array
       Mean electron energy (eV).
    """

    COLUMNS = ('efield', 'reduced_field', 'velocity',
               'longitudinal_diffusion', 'transverse_diffusion',
               'townsend', 'attachment', 'mean_energy')

    def __init__(self, composition, pressure, temperature, **columns):
        self.composition = dict(composition)
        self.pressure = pressure
        self.temperature = temperature

        missing = set(self.COLUMNS) - set(columns)
        if missing:
            raise ValueError("Missing gas table columns: %s"
                             % ", ".join(sorted(missing)))

        n = len(columns['efield'])
        for name in self.COLUMNS:
            values = np.asarray(columns[name], dtype=float)
            if values.shape != (n,):
                raise ValueError("Gas table column '%s' has %d values, "
                                 "expected %d" % (name, values.size, n))
            setattr(self, name, values)

    def __len__(self):
        return len(self.efield)

    def save(self, path):
        """ Writes the table to a NumPy `.npz` archive.  NumPy appends the
        `.npz` extension if `path` lacks it. """
        names = list(self.composition)
        np.savez(path,
                 gas_names=np.array(names),
                 gas_fractions=np.array([self.composition[k] for k in names]),
                 pressure=self.pressure,
                 temperature=self.temperature,
                 **{name: getattr(self, name) for name in self.COLUMNS})

        logging.info("Gas table with %d points saved to %s", len(self), path)

    @classmethod
    def load(cls, path):
        with np.load(path) as data:
            composition = zip(data['gas_names'].tolist(),
                              data['gas_fractions'].tolist())
            table = cls(composition,
                        float(data['pressure']),
                        float(data['temperature']),
                        **{name: data[name] for name in cls.COLUMNS})

        logging.info("Gas table with %d points loaded from %s",
                     len(table), path)
        return table


class GasMedium(object):
    """ A gas mixture at a given pressure and temperature.

    By default the medium is pure argon at 760 Torr and 293.15 K with 20
    logarithmically spaced fields between 100 V/cm and 100 kV/cm.

    Examples
    --------
    >>> gas = GasMedium()
    >>> gas.set_composition('Ar', 100.)
    >>> gas.pressure = 750.
    >>> gas.temperature = 293.15
    >>> gas.set_field_grid(100., 100000., 100)
    >>> gas.generate_gas_table()
    >>> velocity = gas.get_electron_velocity(0)
    """

    # Energy grid (kind, lowest, highest in eV, cells) of the first pass.
    energy_grid = ('linear', 0., 80., 400)

    # The refined grid extends to this multiple of the mean energy.
    refine_factor = 15.
    refine_cells = 200

    def __init__(self):
        self.composition = {'Ar': 1.0}
        self._pressure = 760.
        self._temperature = 293.15
        self._processes = None
        self.table = None

        self.set_field_grid(100., 100000., 20, log_scale=True)

    @property
    def pressure(self):
        """ Gas pressure in Torr. """
        return self._pressure

    @pressure.setter
    def pressure(self, value):
        if not value > 0:
            raise ValueError("Pressure must be positive (got %r)" % value)
        self._pressure = float(value)
        self.table = None

    @property
    def temperature(self):
        """ Gas temperature in K. """
        return self._temperature

    @temperature.setter
    def temperature(self, value):
        if not value > 0:
            raise ValueError("Temperature must be positive (got %r)" % value)
        self._temperature = float(value)
        self.table = None

    @property
    def number_density(self):
        """ Gas number density (1/m^3) from the ideal gas law. """
        return self._pressure * co.torr / (co.k * self._temperature)

    def available_gases(self):
        if self._processes is None:
            return gases.available()

        return sorted(set(p['target'] for p in self._processes))

    def load_cross_sections(self, fp):
        """ Uses the cross-sections of a BOLSIG+ file instead of the
        built-in sets. """
        self._processes = parser.parse(fp)
        if not self._processes:
            raise ValueError("No cross sections found in %s"
                             % getattr(fp, 'name', 'input'))
        self.table = None

    def set_composition(self, *args):
        """ Sets the gas mixture as name, fraction pairs, e.g.
        ``set_composition('Ar', 90., 'CO2', 10.)``.  Fractions are
        normalized to add up to one. """
        if not args or len(args) % 2:
            raise ValueError("Composition must be given as name, fraction "
                             "pairs")

        names = [str(name) for name in args[::2]]
        fractions = [float(f) for f in args[1::2]]

        if len(set(names)) != len(names):
            raise ValueError("Repeated gas in composition %s" % names)

        if any(f < 0 for f in fractions) or sum(fractions) <= 0:
            raise ValueError("Fractions must be non-negative with a "
                             "positive sum")

        available = self.available_gases()
        unknown = [name for name in names if name not in available]
        if unknown:
            raise ValueError("No cross sections for %s (available: %s)"
                             % (", ".join(unknown), ", ".join(available)))

        total = sum(fractions)
        self.composition = {name: f / total
                            for name, f in zip(names, fractions)}
        self.table = None

        logging.info("Gas composition: %s", self.describe())

    def describe(self):
        return ", ".join("%s %.4g%%" % (name, 100 * f)
                         for name, f in self.composition.items())

    def set_field_grid(self, emin, emax, ne, log_scale=False):
        """ Sets ne electric fields (V/cm) from emin to emax, both included,
        spaced linearly or logarithmically. """
        if ne < 1:
            raise ValueError("Number of field points must be at least 1")
        if emin <= 0:
            raise ValueError("Lowest field must be positive")
        if emax < emin or (emax == emin and ne > 1):
            raise ValueError("Invalid field range [%g, %g]" % (emin, emax))

        if ne == 1:
            self.efields = np.array([float(emin)])
        elif log_scale:
            self.efields = np.geomspace(emin, emax, ne)
        else:
            self.efields = np.linspace(emin, emax, ne)

        self.table = None

    def get_field_grid(self):
        return self.efields.copy()

    def _build_solver(self):
        processes = self._processes
        if processes is None:
            processes = []
            for name in self.composition:
                processes.extend(gases.cross_sections(name))

        bsolver = BoltzmannSolver(grid.mkgrid(*self.energy_grid))
        bsolver.load_collisions(processes)

        for name, fraction in self.composition.items():
            try:
                bsolver.set_density(name, fraction)
            except KeyError:
                raise ValueError("No cross sections for gas '%s'" % name)

        return bsolver

    def _solve(self, bsolver, coarse, f0, maxn, rtol):
        """ Two-pass solution at the solver's current E/N: first on the
        coarse linear grid, then on a quadratic grid fitted to the mean
        energy.  Returns both EEDFs. """
        bsolver.grid = coarse
        bsolver.init()

        f1 = bsolver.converge(f0, maxn=maxn, rtol=max(rtol, 1e-4))

        mean_energy = bsolver.mean_energy(f1)
        fine = grid.QuadraticGrid(0, self.refine_factor * mean_energy,
                                  self.refine_cells)
        bsolver.grid = fine
        bsolver.init()

        f2 = bsolver.converge(fine.interpolate(f1, coarse),
                              maxn=maxn, rtol=rtol)

        return f1, f2

    def generate_gas_table(self, maxn=200, rtol=1e-5, strict=False):
        """ Computes the transport parameters at every field point.

        Parameters
        ----------
        maxn : int
           Maximum number of iterations of the solver per pass.
        rtol : float
           Convergence tolerance of the EEDF.
        strict : bool
           If true, a field point that does not converge aborts the
           calculation; otherwise it is logged and filled with NaN.

        Returns
        -------
        table : :class:`GasTable`
        """
        bsolver = self._build_solver()
        coarse = bsolver.grid

        n = self.number_density
        bsolver.kT = self._temperature * KB / ELECTRONVOLT

        ne = len(self.efields)
        velocity, dt, alpha, eta, mean_energy = (np.full(ne, np.nan)
                                                 for _ in range(5))
        reduced_field = self.efields * 100. / n

        logging.info("Generating gas table for %s at %g Torr, %g K "
                     "(%d field points)", self.describe(), self._pressure,
                     self._temperature, ne)

        f0 = bsolver.maxwell(2.0)
        for i, en in enumerate(reduced_field):
            bsolver.EN = en
            try:
                f1, f = self._solve(bsolver, coarse, f0, maxn, rtol)
            except ConvergenceError:
                if strict:
                    raise
                logging.warning("No convergence at E = %g V/cm; point "
                                "left empty", self.efields[i])
                bsolver.grid = coarse
                f0 = bsolver.maxwell(2.0)
                continue

            # The next field starts from this solution.
            f0 = f1

            velocity[i] = bsolver.drift_velocity(f)
            dt[i] = bsolver.diffusion(f) / n
            alpha[i] = bsolver.reduced_townsend(f) * n
            eta[i] = bsolver.reduced_attachment(f) * n
            mean_energy[i] = bsolver.mean_energy(f)

            logging.debug("E = %g V/cm (%g Td): v = %g m/s, "
                          "mean energy = %g eV", self.efields[i],
                          en / TOWNSEND, velocity[i], mean_energy[i])

        dl = dt * einstein_factor(self.efields, velocity)

        # m/s -> cm/ns and sqrt(m) -> sqrt(cm)
        self.table = GasTable(
            self.composition, self._pressure, self._temperature,
            efield=self.efields,
            reduced_field=reduced_field / TOWNSEND,
            velocity=velocity * 1e-7,
            longitudinal_diffusion=np.sqrt(2 * dl / velocity) * 10.,
            transverse_diffusion=np.sqrt(2 * dt / velocity) * 10.,
            townsend=log_coefficient(alpha * 1e-2),
            attachment=log_coefficient(eta * 1e-2),
            mean_energy=mean_energy)

        failed = np.count_nonzero(np.isnan(velocity))
        if failed:
            logging.warning("%d of %d field points did not converge",
                            failed, ne)

        return self.table

    def load_gas_table(self, path):
        """ Restores a table written by :func:`GasTable.save`, together with
        the gas description stored in it. """
        table = GasTable.load(path)

        self.composition = dict(table.composition)
        self._pressure = table.pressure
        self._temperature = table.temperature
        self.efields = table.efield.copy()
        self.table = table

        return table

    def _entry(self, column, i):
        if self.table is None:
            raise RuntimeError("No gas table available; call "
                               "generate_gas_table() first")
        if not 0 <= i < len(self.table):
            raise IndexError("Field index %d out of range [0, %d)"
                             % (i, len(self.table)))

        return float(getattr(self.table, column)[i])

    def get_electron_velocity(self, i):
        """ Drift velocity (cm/ns) at field point i. """
        return self._entry('velocity', i)

    def get_electron_longitudinal_diffusion(self, i):
        """ Longitudinal diffusion (sqrt(cm)) at field point i. """
        return self._entry('longitudinal_diffusion', i)

    def get_electron_transverse_diffusion(self, i):
        """ Transverse diffusion (sqrt(cm)) at field point i. """
        return self._entry('transverse_diffusion', i)

    def get_electron_townsend(self, i):
        """ log(alpha), with alpha in 1/cm, at field point i. """
        return self._entry('townsend', i)

    def get_electron_attachment(self, i):
        """ log(eta), with eta in 1/cm, at field point i. """
        return self._entry('attachment', i)


def log_coefficient(values):
    """ Natural log of a Townsend or attachment coefficient; zero maps to
    :data:`LOG_FLOOR` and NaN stays NaN. """
    values = np.asarray(values, dtype=float)
    out = np.full(values.shape, LOG_FLOOR)
    positive = values > 0
    out[positive] = np.log(values[positive])
    out[np.isnan(values)] = np.nan

    return out


def einstein_factor(efield, velocity):
    """ Ratio D_L / D_T from the generalized Einstein relation,
    1 + d ln(mu) / d ln(E), with mu = v / E.  It is clipped at zero and is 1
    when fewer than two valid fields are available.

    Points with a missing or non-positive velocity get NaN and are left out
    of the derivative, so they do not spoil their neighbours. """
    efield = np.asarray(efield, dtype=float)
    velocity = np.asarray(velocity, dtype=float)

    factor = np.full(velocity.shape, np.nan)
    ok = np.isfinite(velocity) & (velocity > 0)
    if np.count_nonzero(ok) < 2:
        factor[ok] = 1.
        return factor

    lnmu = np.log(velocity[ok] / efield[ok])
    factor[ok] = np.maximum(1 + np.gradient(lnmu, np.log(efield[ok])), 0.)

    return factor
