import jax.numpy as numpy
from jax import jit

from . operator import Operator, Scalar

from jax_vmc.errors import ConfigurationError
from jax_vmc.spatial.spatial_manipulation import generate_pairs, pair_distances, point_distances


@jit
def ionic_potential_energy(x, ion_positions, ion_charges):
    """
    Attraction of every electron to every fixed ion:

        PE = - sum_ion sum_e Z_ion / |r_e - R_ion|
    """
    r = point_distances(x, ion_positions)
    return - numpy.sum(ion_charges / r)

@jit
def electronic_potential_energy(x):
    """
    Repulsion between every pair of electrons:

        PE = sum_{i<j} 1 / |r_i - r_j|
    """
    # The particle count is static under jit, so the pairs are a constant:
    pairs = generate_pairs(x.shape[0])
    if pairs.shape[0] == 0:
        return numpy.zeros((), dtype=x.dtype)
    return numpy.sum(1. / pair_distances(x, pairs))


class IonicPotential(Operator):

    def __init__(self, ion_positions, ion_charges):
        ion_positions = numpy.asarray(ion_positions, dtype=float).reshape((-1, 3))
        ion_charges   = numpy.asarray(ion_charges, dtype=float).reshape((-1,))
        if ion_positions.shape[0] != ion_charges.shape[0]:
            raise ConfigurationError(
                f"Got {ion_positions.shape[0]} ion positions but {ion_charges.shape[0]} charges")
        self.ion_positions = ion_positions
        self.ion_charges   = ion_charges

    def potential(self, cfg):
        return ionic_potential_energy(cfg, self.ion_positions, self.ion_charges)

    def act_on(self, wf, cfg):
        return Scalar(self.potential(cfg) * wf.value(cfg))


class ElectronicPotential(Operator):

    def potential(self, cfg):
        return electronic_potential_energy(cfg)

    def act_on(self, wf, cfg):
        return Scalar(self.potential(cfg) * wf.value(cfg))
