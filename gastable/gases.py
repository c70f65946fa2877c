""" Built-in cross-section sets.

Each set is returned as a list of dictionaries with the same layout produced
by :func:`parser.parse`, so it can be loaded with
:func:`solver.BoltzmannSolver.load_collisions`.
"""

import numpy as np
import scipy.constants as co

# Energies where the analytic fits are tabulated (eV above threshold).
ENERGIES = np.logspace(-3, 4, 281)

AR_MASS = 39.948 * co.atomic_mass
AR_EXCITATION_THRESHOLD = 11.5
AR_IONIZATION_THRESHOLD = 15.8


def argon_elastic(en):
    """ Elastic momentum-transfer cross-section of argon (m^2).
    A. V. Phelps and Z. Lj. Petrovic, Plasma Sources Sci. Technol. 8, R21
    (1999). """
    q = (np.abs(6.0 / (1.0 + en / 0.1 + (en / 0.6)**2)**3.3
                - 1.1 * en**1.4 / (1.0 + (en / 15.0)**1.2)
                / np.sqrt(1.0 + (en / 5.5)**2.5 + (en / 60.0)**4.1))
         + 0.05 / (1.0 + en / 10.0)**2
         + 0.01 * en**3 / (1.0 + (en / 12.0)**6))

    return q * 1e-20


def argon_excitation(en):
    """ Lumped electronic excitation of argon (m^2). """
    x = np.maximum(en - AR_EXCITATION_THRESHOLD, 0.0)
    q = (0.034 * x**1.1 * (1.0 + (en / 15.0)**2.8)
         / (1.0 + (en / 23.0)**5.5)
         + 0.023 * x / (1.0 + en / 80.0)**1.9)

    return q * 1e-20


def argon_ionization(en):
    """ Ionization of argon (m^2). """
    x = np.maximum(en - AR_IONIZATION_THRESHOLD, 0.0)
    q = 970.0 * x / (70.0 + en)**2 + 0.06 * x**2 * np.exp(-en / 9.0)

    return q * 1e-20


def _table(func, threshold=0.0):
    en = np.r_[threshold, threshold + ENERGIES] if threshold else ENERGIES
    return np.c_[en, func(en)].tolist()


def argon():
    source = "Phelps & Petrovic, PSST 8, R21 (1999), analytic fit"
    return [dict(kind='ELASTIC', target='Ar',
                 mass_ratio=co.electron_mass / AR_MASS,
                 comment=source,
                 data=_table(argon_elastic)),
            dict(kind='EXCITATION', target='Ar', product='Ar*',
                 threshold=AR_EXCITATION_THRESHOLD,
                 comment=source,
                 data=_table(argon_excitation, AR_EXCITATION_THRESHOLD)),
            dict(kind='IONIZATION', target='Ar', product='Ar^+',
                 threshold=AR_IONIZATION_THRESHOLD,
                 comment=source,
                 data=_table(argon_ionization, AR_IONIZATION_THRESHOLD))]


GASES = {'Ar': argon}


def cross_sections(name):
    """ The built-in cross-sections of gas `name` as a list of process
    dictionaries.

    Raises
    ------
    KeyError
       If there is no built-in set for `name`.
    """
    try:
        builder = GASES[name]
    except KeyError:
        raise KeyError("No built-in cross sections for gas '%s' (available: "
                       "%s)" % (name, ", ".join(sorted(GASES))))

    return builder()


def available():
    return sorted(GASES)
