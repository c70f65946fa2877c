""" Electron-neutral collision processes and their cross-sections. """

import logging

import numpy as np
from scipy.interpolate import interp1d


class Process(object):
    """ A collision process defined by a tabulated cross-section.

    Parameters
    ----------
    target : str
       Name of the target species (e.g. 'Ar').
    kind : str
       One of 'ELASTIC', 'MOMENTUM', 'EFFECTIVE', 'EXCITATION',
       'IONIZATION' or 'ATTACHMENT'.
    data : array-like
       Two columns: energy in eV and cross-section in m^2.
    comment : str
       Free text describing the source of the data.
    mass_ratio : float
       Electron to target mass ratio (elastic processes only).
    product : str
       Product of the reaction, if known.
    threshold : float
       Energy threshold in eV.
    weight_ratio : float
       Statistical weight ratio of reversible processes.
    """

    # Number of electrons that re-enter the distribution after a collision.
    IN_FACTOR = {'EXCITATION': 1,
                 'IONIZATION': 2,
                 'ATTACHMENT': 0,
                 'ELASTIC': 1,
                 'MOMENTUM': 1,
                 'EFFECTIVE': 1}

    # Ionization shares the remaining energy equally between two electrons.
    SHIFT_FACTOR = {'EXCITATION': 1,
                    'IONIZATION': 2,
                    'ATTACHMENT': 1,
                    'ELASTIC': 1,
                    'MOMENTUM': 1,
                    'EFFECTIVE': 1}

    def __init__(self, target=None, kind=None, data=None,
                 comment='', mass_ratio=None,
                 product=None, threshold=0, weight_ratio=None):
        self.target_name = target

        # Linked when the process is added to a Target.
        self.target = None

        self.kind = kind
        self.comment = comment
        self.mass_ratio = mass_ratio
        self.product = product
        self.threshold = threshold or 0.0
        self.weight_ratio = weight_ratio

        self.data = np.array(data, dtype=float)

        if self.data.ndim != 2 or self.data.shape[1] != 2:
            raise ValueError("Cross section for %s must have two columns"
                             % str(self))

        self.x = self.data[:, 0]
        self.y = self.data[:, 1]

        self.in_factor = self.IN_FACTOR.get(self.kind, None)
        self.shift_factor = self.SHIFT_FACTOR.get(self.kind, None)

        if np.amin(self.x) < 0:
            raise ValueError("Negative energy in the cross section %s"
                             % str(self))

        if np.amin(self.y) < 0:
            raise ValueError("Negative cross section for %s" % str(self))

        self.interp = padinterp(self.data)
        self.cached_grid = None

        logging.debug("Created process %s with %d points",
                      str(self), len(self.x))

    def scatterings(self, g, eps):
        """ Integrals of sigma * eps * exp(g_j (eps_j - eps)) over each
        overlap between a grid cell j and a shifted cell i.  Requires a
        previous call to :func:`set_grid_cache`. """
        if len(self.j) == 0:
            # Thresholds beyond the grid: nothing to scatter.
            return np.array([], dtype='f')

        return int_linexp0(self.eps[:, 0], self.eps[:, 1],
                           self.sigma[:, 0], self.sigma[:, 1],
                           g[self.j], eps[self.j])

    def set_grid_cache(self, grid):
        """ Computes the overlaps between each grid cell j and each cell i
        shifted by the energy lost in the collision.

        Each row of the cache holds the indices i and j, the energy
        interval of the overlap and the cross-section at its ends.  An
        interval is split where a tabulated point of the cross-section falls
        inside it.
        """
        if self.cached_grid is grid:
            return

        self.cached_grid = grid

        eps1 = self.shift_factor * grid.b + self.threshold
        eps1[:] = np.clip(eps1, grid.b[0] + 1e-9, grid.b[-1] - 1e-9)

        fltb = np.logical_and(grid.b >= eps1[0], grid.b <= eps1[-1])
        fltx = np.logical_and(self.x >= eps1[0], self.x <= eps1[-1])
        nodes = np.unique(np.r_[eps1, grid.b[fltb], self.x[fltx]])

        sigma0 = self.interp(nodes)

        self.j = np.searchsorted(grid.b, nodes[1:]) - 1
        self.i = np.searchsorted(eps1, nodes[1:]) - 1
        self.sigma = np.c_[sigma0[:-1], sigma0[1:]]
        self.eps = np.c_[nodes[:-1], nodes[1:]]

    def __str__(self):
        return "{%s: %s %s}" % (self.kind, self.target_name,
                                "-> " + self.product if self.product else "")


def padinterp(data):
    """ Linear interpolation of a cross-section table.  The first value is
    extended down to 0 eV and the last one up to 1e8 eV. """
    x, y = data[:, 0], data[:, 1]
    if x[0] > 0:
        x = np.r_[0.0, x]
        y = np.r_[y[0], y]

    return interp1d(np.r_[x, 1e8], np.r_[y, y[-1]], kind='linear')


def int_linexp0(a, b, u0, u1, g, x0):
    """ Integral in [a, b] of u(x) * exp(g * (x0 - x)) * x, with u linear
    and u(a) = u0, u(b) = u1. """

    # With u(x) = c0 + c1 * x the integrand splits into terms of degree 1
    # and 2 in x.  For small g the plain exponentials round to 1 and lose
    # the terms that cancel the 1/g**2 and 1/g**3 factors, so everything is
    # written with expm1.
    expm1a = np.expm1(g * (-a + x0))
    expm1b = np.expm1(g * (-b + x0))

    ag = a * g
    bg = b * g

    ag1 = ag + 1
    bg1 = bg + 1

    g2 = g * g
    g3 = g2 * g

    A1 = (expm1a * ag1 + ag
          - expm1b * bg1 - bg) / g2

    A2 = (expm1a * (2 * ag1 + ag * ag) + ag * (ag + 2)
          - expm1b * (2 * bg1 + bg * bg) - bg * (bg + 2)) / g3

    c0 = (a * u1 - b * u0) / (a - b)
    c1 = (u0 - u1) / (a - b)

    r = c0 * A1 + c1 * A2

    # g = 0 or an empty distribution give 0/0
    return np.where(np.isnan(r), 0.0, r)
