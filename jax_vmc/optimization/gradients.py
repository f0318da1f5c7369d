import jax.numpy as numpy
from jax import jit

from jax import scipy

from jax_vmc.errors import LinearAlgebraError

from . observables import ENERGY, PARAMETER_GRADIENT
from . observables import stream, compute_O_observables


@jit
def natural_gradients(dpsi_i, energy, dpsi_i_EL):
    return 2*(dpsi_i_EL - dpsi_i * energy)


def compute_energy_gradient(raw_data):
    """
    dE/dtheta = 2 <O (E_L - <E>)>, with O = d ln psi / d theta sampled in the
    "Parameter gradient" stream.  All three averages run over the same raw
    samples, including a trailing partial block.
    """
    energy   = stream(raw_data, ENERGY)
    jacobian = stream(raw_data, PARAMETER_GRADIENT)
    mean_energy = numpy.mean(energy)

    dpsi_i, dpsi_i_EL = compute_O_observables(jacobian, energy)

    return natural_gradients(dpsi_i, mean_energy, dpsi_i_EL)


@jit
def regularize_S_ij(S_ij, epsilon):
    # Scale up the diagonal by (1 + epsilon):
    return S_ij + numpy.diag(epsilon * numpy.diag(S_ij))


@jit
def _cholesky_solve(S_ij, f_i):

    # S_ij needs to be positive definite here.
    U_and_lower = scipy.linalg.cho_factor(S_ij)

    dp_i = scipy.linalg.cho_solve(U_and_lower, f_i)

    residual = numpy.matmul(S_ij, dp_i) - f_i

    return dp_i, residual


def cholesky_solve(S_ij, f_i):
    """Solve S dp = f for a symmetric positive definite S.

    Args:
        S_ij: symmetric (n_params, n_params) matrix
        f_i: right hand side, (n_params,)

    Returns:
        dp_i and the residual S dp - f

    Raises:
        LinearAlgebraError: the factorization or solve produced non-finite values
    """
    dp_i, residual = _cholesky_solve(S_ij, f_i)
    if not bool(numpy.isfinite(dp_i).all()):
        raise LinearAlgebraError("Cholesky solve failed, matrix is not positive definite")
    return dp_i, residual
