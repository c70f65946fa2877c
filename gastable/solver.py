""" Two-term Boltzmann solver for the electron energy distribution function
(EEDF) in a gas.

The calculations are encapsulated in :class:`BoltzmannSolver`, built on a
:class:`grid.Grid` of energies.  Load the cross-sections with
:func:`BoltzmannSolver.load_collisions` (or one by one with
:func:`BoltzmannSolver.add_process`), set the molar fraction of each
species, the gas temperature `kT` (eV) and the reduced field `EN`
(V m^2), call :func:`BoltzmannSolver.init` and improve an initial guess
such as :func:`BoltzmannSolver.maxwell` with
:func:`BoltzmannSolver.converge`.  Rates and swarm parameters follow from
the converged EEDF.

Units are SI except energies, which are in eV.
"""

__docformat__ = "restructuredtext en"

import logging

from math import sqrt
import numpy as np

import scipy.constants as co
from scipy import integrate
from scipy import sparse
from scipy.sparse.linalg import spsolve

from .process import Process
from .target import Target

GAMMA = sqrt(2 * co.elementary_charge / co.electron_mass)
TOWNSEND = 1e-21
KB = co.k
ELECTRONVOLT = co.eV

NO_GROWTH = 0
TEMPORAL_GROWTH = 1


class ConvergenceError(Exception):
    pass


class BoltzmannSolver(object):
    """ Solver of the stationary two-term Boltzmann equation.

    Parameters
    ----------
    grid : :class:`grid.Grid`
       The energy grid where the EEDF is evaluated.

    Attributes
    ----------
    benergy : array of floats
       Cell boundaries of the energy grid.  Equivalent to `grid.b`.
    cenergy : array of floats
       Cell centers of the energy grid.  Equivalent to `grid.c`.
    denergy : array of floats
       Cell lengths of the energy grid.  Equivalent to `grid.d`.
    n : int
       Number of cells.
    kT : float
       Gas temperature in eV.
    EN : float
       Reduced electric field in V m^2 (1 Td is :data:`TOWNSEND`).
    target : dict
       Targets by name.  Set the molar fraction of each component through
       `target[name].density` or :func:`set_density`.
    growth_model : int
       :data:`NO_GROWTH` or :data:`TEMPORAL_GROWTH` (default) of the
       electron density due to ionization and attachment.

    Examples
    --------
    >>> from gastable import solver, grid, gases
    >>> bsolver = solver.BoltzmannSolver(grid.LinearGrid(0, 80., 400))
    >>> bsolver.load_collisions(gases.cross_sections('Ar'))
    >>> bsolver.set_density('Ar', 1.0)
    >>> bsolver.kT = 293.15 * solver.KB / solver.ELECTRONVOLT
    >>> bsolver.EN = 100.0 * solver.TOWNSEND
    >>> bsolver.init()
    >>> f = bsolver.converge(bsolver.maxwell(2.0), maxn=200, rtol=1e-5)
    >>> mun = bsolver.mobility(f)
    """

    def __init__(self, grid):
        self.EN = None
        self.kT = None

        self.grid = grid

        self.target = {}

        self.growth_model = TEMPORAL_GROWTH

    def _get_grid(self):
        return self._grid

    def _set_grid(self, grid):
        self._grid = grid

        # Boundaries at i - 1/2
        self.benergy = grid.b
        self.cenergy = grid.c
        self.denergy = grid.d

        # Used in the temporal growth term.
        self.denergy32 = self.benergy[1:]**1.5 - self.benergy[:-1]**1.5

        self.n = grid.n

    grid = property(_get_grid, _set_grid)

    def set_density(self, species, density):
        """ Sets the molar fraction of a species.

        Raises
        ------
        KeyError
           If no process has been loaded for `species`.
        """
        self.target[species].density = density

    def load_collisions(self, dict_processes):
        """ Loads a list of processes in dictionary form, such as the output
        of :func:`parser.parse` or :func:`gases.cross_sections`.

        Returns
        -------
        processes : list
           The added :class:`process.Process` instances.
        """
        plist = [self.add_process(**p) for p in dict_processes]

        for target in self.target.values():
            target.ensure_elastic()

        return plist

    def add_process(self, **kwargs):
        """ Adds a process built from the keyword arguments accepted by
        :class:`process.Process` and attaches it to its target, creating
        the target if needed. """
        proc = Process(**kwargs)
        try:
            target = self.target[proc.target_name]
        except KeyError:
            target = Target(proc.target_name)
            self.target[proc.target_name] = target

        target.add_process(proc)

        return proc

    def search(self, signature, product=None, first=True):
        """ Searches for processes by signature.

        Parameters
        ----------
        signature : str
           Either "TARGET -> PRODUCT" or, when `product` is given, just the
           target name.
        product : str
           The product of the reaction.
        first : bool
           If true returns only the first match, else the list of matches.

        Examples
        --------
        >>> ionization = bsolver.search("Ar -> Ar^+")
        >>> ionization = bsolver.search("Ar", "Ar^+")
        """
        if product is not None:
            found = self.target[signature].by_product[product]
            if not found:
                raise KeyError("Process %s -> %s not found"
                               % (signature, product))

            return found[0] if first else found

        if '->' not in signature:
            raise KeyError("Malformed process signature '%s'" % signature)

        t, p = [x.strip() for x in signature.split('->')]
        return self.search(t, p, first=first)

    def iter_elastic(self):
        """ Iterates over (target, process) for elastic processes of the
        species present in the gas. """
        for target in self.target.values():
            if target.density > 0:
                for process in target.elastic:
                    yield target, process

    def iter_inelastic(self):
        """ Iterates over (target, process) for inelastic processes. """
        for target in self.target.values():
            if target.density > 0:
                for process in target.inelastic:
                    yield target, process

    def iter_ionization(self):
        for target in self.target.values():
            if target.density > 0:
                for process in target.ionization:
                    yield target, process

    def iter_attachment(self):
        for target in self.target.values():
            if target.density > 0:
                for process in target.attachment:
                    yield target, process

    def iter_growth(self):
        """ Processes that change the number of electrons. """
        for t, k in self.iter_ionization():
            yield t, k

        for t, k in self.iter_attachment():
            yield t, k

    def iter_all(self):
        for t, k in self.iter_elastic():
            yield t, k

        for t, k in self.iter_inelastic():
            yield t, k

    def init(self):
        """ Prepares the solver for the current densities, temperature and
        field.  Call it again whenever any of them, or the grid, changes.

        The overlap tables of each process are cached per grid, so the
        first call after a grid change is much slower than the rest.
        """
        if self.EN is None or self.kT is None:
            raise ValueError("Set EN and kT before initializing the solver")

        self.sigma_eps = np.zeros_like(self.benergy)
        self.sigma_m = np.zeros_like(self.benergy)
        for target, process in self.iter_elastic():
            s = target.density * process.interp(self.benergy)
            self.sigma_eps += 2 * target.mass_ratio * s
            self.sigma_m += s
            process.set_grid_cache(self.grid)

        for target, process in self.iter_inelastic():
            self.sigma_m += target.density * process.interp(self.benergy)
            process.set_grid_cache(self.grid)

        self.W = -GAMMA * self.benergy**2 * self.sigma_eps

        # Coefficient of 1 / sigma_tilde in the field term
        self.DA = GAMMA / 3. * self.EN**2 * self.benergy

        # Heating by the thermal motion of the gas
        self.DB = GAMMA * self.kT * self.benergy**2 * self.sigma_eps

        logging.debug("Solver initialized at E/N = %g Td",
                      self.EN / TOWNSEND)

    def maxwell(self, kT):
        """ A normalized Maxwell-Boltzmann EEDF with temperature kT (eV),
        usually the starting guess of :func:`converge`. """
        return (2 * np.sqrt(1 / np.pi)
                * kT**(-3./2.) * np.exp(-self.cenergy / kT))

    def iterate(self, f0, delta=1e14):
        """ One implicit iteration of the EEDF with iteration parameter
        `delta`. """
        A, Q = self._linsystem(f0)

        f1 = spsolve(sparse.eye(self.n, format='csc')
                     + delta * (A - Q).tocsc(), f0)

        return self._normalized(f1)

    def converge(self, f0, maxn=100, rtol=1e-5, delta0=1e14, m=4.0,
                 full=False):
        """ Iterates an EEDF until it converges.

        Parameters
        ----------
        f0 : array of floats
           Initial EEDF.
        maxn : int
           Maximum number of iterations.
        rtol : float
           Stop when two successive EEDFs differ less than rtol in L1 norm.
        delta0 : float
           Initial iteration parameter; it is then adapted with a
           Richardson extrapolation that attempts to reduce the error by a
           factor `m` in each iteration.
        full : bool
           If true returns also the number of iterations and the final
           error.

        Raises
        ------
        ConvergenceError
           If the tolerance is not reached after `maxn` iterations.
        """
        err0 = err1 = 0
        delta = delta0

        for i in range(maxn):
            if 0 < err1 < err0:
                delta = delta * np.log(m) / (np.log(err0) - np.log(err1))

            f1 = self.iterate(f0, delta=delta)
            err0 = err1
            err1 = self._norm(abs(f0 - f1))

            logging.debug("After iteration %3d, err = %g (target: %g)",
                          i + 1, err1, rtol)
            if err1 < rtol:
                logging.debug("Convergence achieved after %d iterations. "
                              "err = %g", i + 1, err1)
                if full:
                    return f1, i + 1, err1

                return f1
            f0 = f1

        logging.error("Convergence failed at E/N = %g Td after %d iterations "
                      "(err = %g)", self.EN / TOWNSEND, maxn, err1)

        raise ConvergenceError("EEDF did not converge at E/N = %g Td"
                               % (self.EN / TOWNSEND))

    def _linsystem(self, F):
        Q = self._PQ(F)

        if self.growth_model == NO_GROWTH:
            A = self._scharf_gummel(self.sigma_m)

        elif self.growth_model == TEMPORAL_GROWTH:
            nu = np.sum(Q.dot(F))
            with np.errstate(divide='ignore'):
                sigma_tilde = (self.sigma_m
                               + nu / np.sqrt(self.benergy) / GAMMA)

            G = 2 * self.denergy32 * nu / 3

            A = self._scharf_gummel(sigma_tilde, G)

        else:
            raise ValueError("Unknown growth model %r" % self.growth_model)

        return A, Q

    def _norm(self, f):
        return integrate.simpson(f * np.sqrt(self.cenergy), x=self.cenergy)

    def _normalized(self, f):
        return f / self._norm(f)

    def _scharf_gummel(self, sigma_tilde, G=0):
        D = self.DA / sigma_tilde + self.DB

        # With zero-flux boundaries z[0] and z[-1] are never used; nan
        # makes sure they do not leak into the result.
        with np.errstate(divide='ignore', invalid='ignore'):
            z = self.W * np.r_[np.nan, np.diff(self.cenergy), np.nan] / D
            a0 = self.W / (1 - np.exp(-z))
            a1 = self.W / (1 - np.exp(z))

        diags = np.zeros((3, self.n))

        # No flux at zero energy
        diags[0, 0] = a0[1]

        diags[0, 1:] = a0[2:] - a1[1:-1]
        diags[1, :] = a1[:-1]
        diags[2, :] = -a0[1:]

        # No flux at the highest energy
        diags[2, -2] = -a0[-2]
        diags[0, -1] = -a1[-2]

        diags[0, :] += G

        return sparse.dia_matrix((diags, [0, 1, -1]), shape=(self.n, self.n))

    def _g(self, F0):
        Fp = np.r_[F0[0], F0, F0[-1]]
        cenergyp = np.r_[self.cenergy[0], self.cenergy, self.cenergy[-1]]
        with np.errstate(divide='ignore', invalid='ignore'):
            g = np.log(Fp[2:] / Fp[:-2]) / (cenergyp[2:] - cenergyp[:-2])

        return g

    def _PQ(self, F0, reactions=None):
        """ Matrix of in- and out-scattering by inelastic collisions. """
        g = self._g(F0)
        if reactions is None:
            reactions = self.iter_inelastic()

        data = []
        rows = []
        cols = []
        for t, k in reactions:
            with np.errstate(over='ignore', invalid='ignore'):
                r = t.density * GAMMA * k.scatterings(g, self.cenergy)

            data.extend([k.in_factor * r, -r])
            rows.extend([k.i, k.j])
            cols.extend([k.j, k.j])

        if not data:
            return sparse.coo_matrix((self.n, self.n))

        data, rows, cols = (np.hstack(x) for x in (data, rows, cols))

        return sparse.coo_matrix((data, (rows, cols)),
                                 shape=(self.n, self.n))

    def _growth_frequency(self, F0):
        """ Net production of electrons per unit density, divided by
        GAMMA. """
        Q = self._PQ(F0, reactions=self.iter_growth())
        return np.sum(Q.dot(F0)) / GAMMA

    ##
    # Rates and swarm parameters from a (converged) EEDF.
    def rate(self, F0, k, weighted=False):
        """ Rate coefficient (m^3/s) of a process.

        Parameters
        ----------
        F0 : array of floats
           The EEDF.
        k : :class:`process.Process` or str
           The process, or a signature passed to :func:`search`.
        weighted : bool
           If true, multiply by the molar fraction of the target.

        Examples
        --------
        >>> k_ionization = bsolver.rate(F0, "Ar -> Ar^+")
        """
        g = self._g(F0)

        if isinstance(k, str):
            k = self.search(k)

        k.set_grid_cache(self.grid)

        with np.errstate(over='ignore', invalid='ignore'):
            r = k.scatterings(g, self.cenergy)

        P = sparse.coo_matrix((GAMMA * r, (k.j, np.zeros(r.shape))),
                              shape=(self.n, 1)).toarray()

        rate = F0.dot(np.squeeze(P))
        if weighted:
            rate *= k.target.density

        return rate

    def mobility(self, F0):
        """ Reduced mobility mu * N (1 / m / V / s). """
        DF0 = np.r_[0.0, np.diff(F0) / np.diff(self.cenergy), 0.0]

        nu = self._growth_frequency(F0)
        with np.errstate(divide='ignore', invalid='ignore'):
            sigma_tilde = self.sigma_m + nu / np.sqrt(self.benergy)
            y = DF0 * self.benergy / sigma_tilde
        y[0] = 0

        return -(GAMMA / 3) * integrate.simpson(y, x=self.benergy)

    def diffusion(self, F0):
        """ Reduced (transverse) diffusion coefficient D * N (1 / m / s). """
        nu = self._growth_frequency(F0)

        sigma_m = np.zeros_like(self.cenergy)
        for target, process in self.iter_all():
            sigma_m += target.density * process.interp(self.cenergy)

        sigma_tilde = sigma_m + nu / np.sqrt(self.cenergy)

        y = F0 * self.cenergy / sigma_tilde

        return (GAMMA / 3) * integrate.simpson(y, x=self.cenergy)

    def mean_energy(self, F0):
        """ Mean electron energy (eV). """
        de52 = np.diff(self.benergy**2.5)
        return np.sum(0.4 * F0 * de52)

    def drift_velocity(self, F0):
        """ Drift velocity (m/s), v = mu N * E/N. """
        return self.mobility(F0) * self.EN

    def reduced_townsend(self, F0):
        """ First Townsend coefficient over gas density, alpha / N (m^2). """
        k = sum(self.rate(F0, p, weighted=True)
                for t, p in self.iter_ionization())
        return k / self.drift_velocity(F0)

    def reduced_attachment(self, F0):
        """ Attachment coefficient over gas density, eta / N (m^2). """
        k = sum(self.rate(F0, p, weighted=True)
                for t, p in self.iter_attachment())
        return k / self.drift_velocity(F0)
