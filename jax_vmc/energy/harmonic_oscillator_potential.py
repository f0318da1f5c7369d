import jax.numpy as numpy
from jax import jit

from dataclasses import dataclass

from . operator    import Operator, Scalar
from . hamiltonian import KineticEnergy


@dataclass(frozen=True)
class h_params_template:
    mass:   float
    omega:  float


@jit
def potential_energy(x, M, omega):
    """Return potential energy for the harmonic oscillator

    Arguments:
        x {} -- Tensor of shape [npart, dimension]
        M {} -- Mass, floating point
        omega {} -- HO Omega term, floating point
    Returns:
        DeviceArray - potential energy, a scalar
    """
    # < x | 1/2 M w^2 x**2 | psi > / < x | psi >  = 1/2 M w^2 * x**2
    # x Squared needs to contract over particles and spatial dimensions:
    x_squared = numpy.sum(x**2)
    return (0.5 * M * omega**2) * x_squared


class HarmonicOscillator(Operator):

    def __init__(self, frequency, mass=1.0):
        self.h_params = h_params_template(mass=float(mass), omega=float(frequency))

    def act_on(self, wf, cfg):
        pe = potential_energy(cfg, self.h_params.mass, self.h_params.omega)
        return Scalar(pe * wf.value(cfg))


class HarmonicHamiltonian(Operator):

    def __init__(self, frequency):
        self.t = KineticEnergy()
        self.v = HarmonicOscillator(frequency)

    def act_on(self, wf, cfg):
        return self.t.act_on(wf, cfg) + self.v.act_on(wf, cfg)
