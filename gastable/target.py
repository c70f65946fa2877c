from collections import defaultdict
import logging

import numpy as np

from .process import Process


class Target(object):
    """ A target species together with its collision processes.

    The `density` attribute holds the molar fraction of the species in the
    gas mixture; targets with zero density are ignored by the solver.
    """

    def __init__(self, name):
        self.name = name
        self.mass_ratio = None
        self.density = 0.0

        self.elastic = []
        self.effective = []
        self.attachment = []
        self.ionization = []
        self.excitation = []

        self.kind = {'ELASTIC': self.elastic,
                     'EFFECTIVE': self.effective,
                     'MOMENTUM': self.effective,
                     'ATTACHMENT': self.attachment,
                     'IONIZATION': self.ionization,
                     'EXCITATION': self.excitation}

        self.by_product = defaultdict(list)

        logging.debug("Target %s created.", str(self))

    def add_process(self, process):
        try:
            self.kind[process.kind].append(process)
        except KeyError:
            raise ValueError("Unknown process kind '%s' for target '%s'"
                             % (process.kind, self.name))

        if process.mass_ratio is not None:
            if (self.mass_ratio is not None
                    and self.mass_ratio != process.mass_ratio):
                raise ValueError("More than one mass ratio for target '%s'"
                                 % self.name)

            self.mass_ratio = process.mass_ratio
            logging.debug("Mass ratio (=%g) for %s",
                          process.mass_ratio, str(self))

        process.target = self
        self.by_product[process.product].append(process)

        logging.debug("Process %s added to target %s", str(process), str(self))

    def ensure_elastic(self):
        """ Replaces an EFFECTIVE (or MOMENTUM) cross-section by the
        equivalent ELASTIC one, subtracting all inelastic cross-sections. """
        if self.elastic and self.effective:
            raise ValueError("In target '%s': EFFECTIVE/MOMENTUM and ELASTIC "
                             "cross-sections are incompatible." % self)

        if self.elastic:
            return

        if len(self.effective) > 1:
            raise ValueError("In target '%s': Can't handle more than one "
                             "EFFECTIVE/MOMENTUM cross-section" % self)

        if not self.effective:
            logging.warning("Target %s has no ELASTIC or EFFECTIVE "
                            "cross sections", str(self))
            return

        effective = self.effective[0]
        newdata = effective.data.copy()
        for p in self.inelastic:
            newdata[:, 1] -= p.interp(newdata[:, 0])

        if np.amin(newdata[:, 1]) < 0:
            logging.warning("After subtracting INELASTIC from EFFECTIVE, "
                            "target %s has negative cross-section; "
                            "setting it to max(0, ...)", self.name)
            newdata[:, 1] = np.maximum(newdata[:, 1], 0)

        newelastic = Process(target=self.name, kind='ELASTIC',
                             data=newdata,
                             mass_ratio=effective.mass_ratio,
                             comment="Calculated from EFFECTIVE cross sections")

        logging.debug("EFFECTIVE -> ELASTIC for target %s", str(self))

        # The effective process is still listed by product; drop it there too.
        self.by_product[effective.product].remove(effective)
        del self.effective[:]
        self.add_process(newelastic)

    @property
    def inelastic(self):
        return self.attachment + self.ionization + self.excitation

    def __repr__(self):
        return "Target(%s)" % repr(self.name)

    def __str__(self):
        return self.name
