""" Electron transport parameters of gas mixtures from a two-term Boltzmann
solver. """

__version__ = "0.1.0"
__author__ = "gastable developers"
