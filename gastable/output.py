""" CSV and PNG output of transport parameters. """

import os
import logging

import numpy as np
from matplotlib import pyplot as plt

CSV_HEADER = ("E_Field[V/cm],Drift_Velocity[cm/us],Townsend_Coeff[1/cm],"
              "Attachment_Coeff[1/cm],Longitudinal_Diffusion[√cm],"
              "Transverse_Diffusion[√cm]")

# (file name, title, y label, attribute, color)
PLOTS = [("DriftVelocity.png", "Drift Velocity",
          "Velocity [cm/us]", 'drift_velocity', 'red'),
         ("TownsendCoefficient.png", "Townsend Coefficient",
          "Coefficient [1/cm]", 'townsend', 'blue'),
         ("AttachmentCoefficient.png", "Attachment Coefficient",
          "Coefficient [1/cm]", 'attachment', 'green'),
         ("LongitudinalDiffusion.png", "Longitudinal Diffusion",
          "Diffusion [√cm]", 'longitudinal_diffusion', 'magenta'),
         ("TransverseDiffusion.png", "Transverse Diffusion",
          "Diffusion [√cm]", 'transverse_diffusion', 'orange')]


def write_csv(params, path):
    """ Writes one row per field point with the columns of
    :data:`CSV_HEADER`. """
    np.savetxt(path, params.columns(), fmt='%g', delimiter=',',
               header=CSV_HEADER, comments='', encoding='utf-8')

    logging.info("Transport parameters written to %s", path)


def plot_parameters(params, directory='.', show=False):
    """ Draws each transport parameter against the electric field, one
    800x600 PNG per parameter in `directory`.

    Returns
    -------
    paths : list of str
       The files written.
    """
    paths = []
    for fname, title, ylabel, attr, color in PLOTS:
        fig = plt.figure(figsize=(8, 6), dpi=100)
        plt.plot(params.efield, getattr(params, attr), lw=2.0, c=color)
        plt.title(title)
        plt.xlabel("Electric Field [V/cm]")
        plt.ylabel(ylabel)
        plt.grid()

        path = os.path.join(directory, fname)
        fig.savefig(path, dpi=100)
        paths.append(path)
        logging.info("%s plotted in %s", title, path)

        if not show:
            plt.close(fig)

    if show:
        plt.show()

    return paths
