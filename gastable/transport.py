""" Transport parameters in reporting units, extracted from a gas table. """

import numpy as np


class TransportParameters(object):
    """ Electron transport parameters as a function of the electric field.

    Attributes
    ----------
    efield : array
       Electric field (V/cm).
    drift_velocity : array
       Drift velocity (cm/us).
    townsend : array
       First Townsend coefficient alpha (1/cm).
    attachment : array
       Attachment coefficient eta (1/cm).
    longitudinal_diffusion, transverse_diffusion : arrays
       Diffusion coefficients (sqrt(cm)).
    """

    COLUMNS = ('efield', 'drift_velocity', 'townsend', 'attachment',
               'longitudinal_diffusion', 'transverse_diffusion')

    def __init__(self, efield, drift_velocity, townsend, attachment,
                 longitudinal_diffusion, transverse_diffusion):
        self.efield = np.asarray(efield, dtype=float)
        self.drift_velocity = np.asarray(drift_velocity, dtype=float)
        self.townsend = np.asarray(townsend, dtype=float)
        self.attachment = np.asarray(attachment, dtype=float)
        self.longitudinal_diffusion = np.asarray(longitudinal_diffusion,
                                                 dtype=float)
        self.transverse_diffusion = np.asarray(transverse_diffusion,
                                               dtype=float)

        if len(set(len(getattr(self, c)) for c in self.COLUMNS)) != 1:
            raise ValueError("All transport parameters need one value per "
                             "field point")

    def __len__(self):
        return len(self.efield)

    def columns(self):
        """ The parameters as a (fields, 6) array, in :data:`COLUMNS` order.
        """
        return np.column_stack([getattr(self, c) for c in self.COLUMNS])


def from_medium(medium):
    """ Reads the transport parameters at every field point of a medium
    with a generated gas table.

    The drift velocity is converted from cm/ns to cm/us and the
    Townsend and attachment coefficients, stored as logarithms, are
    exponentiated.
    """
    efields = medium.get_field_grid()

    rows = []
    for i in range(len(efields)):
        ve = medium.get_electron_velocity(i) * 1e3
        alpha = np.exp(medium.get_electron_townsend(i))
        eta = np.exp(medium.get_electron_attachment(i))
        dl = medium.get_electron_longitudinal_diffusion(i)
        dt = medium.get_electron_transverse_diffusion(i)
        rows.append((ve, alpha, eta, dl, dt))

    ve, alpha, eta, dl, dt = np.array(rows, dtype=float).reshape(-1, 5).T

    return TransportParameters(efields, ve, alpha, eta, dl, dt)


def format_point(params, i):
    """ One line summary of the parameters at field point i. """
    return ("E_Field: %g V/cm, Drift_Velocity: %g cm/μs, "
            "Townsend_Coeff: %g 1/cm, Attachment_Coeff: %g 1/cm, "
            "Longitudinal_Diffusion: %g √cm, "
            "Transverse_Diffusion: %g √cm"
            % (params.efield[i], params.drift_velocity[i],
               params.townsend[i], params.attachment[i],
               params.longitudinal_diffusion[i],
               params.transverse_diffusion[i]))
