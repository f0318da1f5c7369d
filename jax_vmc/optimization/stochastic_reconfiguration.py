import jax.numpy as numpy
from jax import jit

import logging
logger = logging.getLogger()

from time import perf_counter
from contextlib import contextmanager

from . gradients   import compute_energy_gradient, regularize_S_ij, cholesky_solve
from . observables import PARAMETER_GRADIENT, WAVEFUNCTION_VALUE, stream
from . optimizers  import Optimizer


@contextmanager
def catchtime() -> float:
    start = perf_counter()
    yield lambda: perf_counter() - start


@jit
def normalize_jacobian(original_jacobian, dpsi_i):
    # we compute Õ^i = O^i - <O^i>
    return original_jacobian - dpsi_i.reshape((1,-1))


@jit
def construct_sr_matrix(jacobian):
    """
    S_ij = <O^i O^j> - <O^i><O^j>, symmetric by construction.
    """
    n_samples = jacobian.shape[0]
    dpsi_i = numpy.mean(jacobian, axis=0)
    centered = normalize_jacobian(jacobian, dpsi_i)
    S_ij = numpy.matmul(centered.T, centered) / n_samples
    # Clean up any asymmetry from rounding:
    return 0.5 * (S_ij + S_ij.T)


class StochasticReconfiguration(Optimizer):
    """
    Natural gradient step: dp = eta * S^-1 (-g / 2), with the diagonal of S
    scaled by (1 + epsilon) before the solve.
    """

    def __init__(self, step_size, epsilon=1e-2):
        Optimizer.__init__(self, step_size)
        self.epsilon = epsilon

    def _update(self, parameters, averages, raw_data, learning_rate):

        with catchtime() as t:
            jacobian = stream(raw_data, PARAMETER_GRADIENT)
            psi      = stream(raw_data, WAVEFUNCTION_VALUE)
            jacobian = jacobian / psi.reshape((-1, 1))

            S_ij = construct_sr_matrix(jacobian)
            f_i  = - 0.5 * compute_energy_gradient(raw_data)

            S_ij = regularize_S_ij(S_ij, self.epsilon)
            dp_i, residual = cholesky_solve(S_ij, f_i)

        logger.debug(f"SR solve took {t():.4f} s, residual {float(numpy.linalg.norm(residual)):.3e}")

        return learning_rate * dp_i
