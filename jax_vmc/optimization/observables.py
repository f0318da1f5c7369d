import jax.numpy as numpy
from jax import jit

from jax_vmc.errors import DataAccessError
from jax_vmc.energy.operator import Operator, Scalar, Vector

# Stream names the optimizers read:
ENERGY             = "Energy"
PARAMETER_GRADIENT = "Parameter gradient"
WAVEFUNCTION_VALUE = "Wavefunction value"


class ParameterGradient(Operator):
    """
    d psi / d theta.  Divided by psi in the sampler, the sampled local value
    is d ln psi / d theta.
    """

    def act_on(self, wf, cfg):
        return Vector(wf.parameter_gradient(cfg))


class WavefunctionValue(Operator):

    def act_on(self, wf, cfg):
        return Scalar(wf.value(cfg))


def stream(raw_data, name):
    """All samples of one observable as an array with a leading samples axis."""
    if name not in raw_data:
        raise DataAccessError(name)
    values = raw_data[name]
    if len(values) == 0:
        raise DataAccessError(name)
    if values[0].is_scalar:
        return numpy.asarray([ v.value for v in values ])
    return numpy.stack([ v.value for v in values ])


def average(averages, name):
    if name not in averages:
        raise DataAccessError(name)
    return averages[name]


@jit
def compute_O_observables(jacobian, energy):

    # dspi_i is the mean of the log derivatives over all samples,
    # the measurement of <O^i>:
    dpsi_i = numpy.mean(jacobian, axis=0)

    # Computing <O^i E_L>:
    dpsi_i_EL = numpy.matmul(energy, jacobian) / energy.shape[0]

    return dpsi_i, dpsi_i_EL
