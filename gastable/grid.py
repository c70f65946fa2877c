""" Energy grids on which the electron distribution function is discretized.
"""
import numpy as np
from scipy.interpolate import interp1d


class Grid(object):
    """ An energy grid between x0 and x1 (in eV) with n cells.

    Subclasses define a mapping `f` (and its inverse `finv`) from energy to
    a variable that is divided uniformly.

    Attributes
    ----------
    b : array
       Cell boundaries (n + 1 values).
    c : array
       Cell centers.
    d : array
       Cell lengths.
    """
    def __init__(self, x0, x1, n):
        if n < 2:
            raise ValueError("An energy grid needs at least 2 cells")
        if x1 <= x0:
            raise ValueError("Invalid energy interval [%g, %g]" % (x0, x1))

        self.x0 = x0
        self.x1 = x1
        self.n = n

        self.fx0 = self.f(x0)
        self.fx1 = self.f(x1)

        fx = np.linspace(self.fx0, self.fx1, self.n + 1)
        self.b = self.finv(fx)
        self.c = 0.5 * (self.b[1:] + self.b[:-1])
        self.d = np.diff(self.b)

    def interpolate(self, f, other):
        """ Interpolates into this grid an EEDF defined on another grid.

        Parameters
        ----------
        f : array
           The EEDF at the cell centers of `other`.
        other : :class:`Grid`
           The grid where `f` is defined.

        Returns
        -------
        fnew : array
           The EEDF at our cell centers.  Energies beyond `other` get 0.
        """
        interp = interp1d(np.r_[other.x0, other.c, other.x1],
                          np.r_[f[0], f, f[-1]],
                          bounds_error=False, fill_value=0)

        return interp(self.c)


class LinearGrid(Grid):
    """ A grid with constant cell length. """
    def f(self, x):
        return x

    def finv(self, w):
        return w


class QuadraticGrid(Grid):
    """ A grid whose cell length grows linearly with energy: fine resolution
    at low energies, where the EEDF changes fastest. """
    def f(self, x):
        return np.sqrt(x - self.x0)

    def finv(self, w):
        return w**2 + self.x0


GRID_CLASSES = {'linear': LinearGrid,
                'lin': LinearGrid,
                'quadratic': QuadraticGrid,
                'quad': QuadraticGrid}


def mkgrid(kind, *args, **kwargs):
    """ Builds a grid by name: 'linear' ('lin') or 'quadratic' ('quad'). """
    try:
        klass = GRID_CLASSES[kind]
    except KeyError:
        raise ValueError("Unknown grid kind '%s'" % kind)

    return klass(*args, **kwargs)
