import jax.numpy as numpy
from jax import jit
import flax

from jax_vmc.errors import ConfigurationError

# Electron-electron cusp for parallel / antiparallel spins:
PARALLEL_CUSP     = 0.25
ANTIPARALLEL_CUSP = 0.5


@flax.struct.dataclass
class JastrowTerms:
    log_value:              numpy.ndarray
    gradient:               numpy.ndarray
    laplacian:              numpy.ndarray
    log_parameter_gradient: numpy.ndarray


@jit
def jastrow_terms(b, x, cusp, scale):
    """
    Pair Jastrow factor J = exp(U), U = sum_{i<j} u(r~_ij), with

        r~ = (1 - exp(-scale r)) / scale
        u  = a r~ / (1 + b_1 r~) + sum_{k>=2} b_k r~^k

    Returns U, grad_i U (n, 3), lap_i U (n,) and dU / db.
    """
    n = x.shape[0]

    diff = x[:, None, :] - x[None, :, :]
    off_diagonal = ~numpy.eye(n, dtype=bool)

    # Keep the diagonal away from r = 0, it is masked below anyway:
    r2 = numpy.where(off_diagonal, numpy.sum(diff**2, axis=-1), 1.)
    r  = numpy.sqrt(r2)

    decay = numpy.exp(- scale * r)
    rt    = (1. - decay) / scale

    b1     = b[0]
    poly   = b[1:]
    powers = numpy.arange(2, b.shape[0] + 1)
    denom  = 1. + b1 * rt

    rt_k = rt[..., None]
    u      = cusp * rt / denom + numpy.sum(poly * rt_k**powers, axis=-1)
    du_drt = cusp / denom**2 + numpy.sum(poly * powers * rt_k**(powers - 1), axis=-1)
    d2u_drt2 = - 2. * cusp * b1 / denom**3 \
        + numpy.sum(poly * powers * (powers - 1) * rt_k**(powers - 2), axis=-1)

    # Chain rule back to r:
    du_dr   = du_drt * decay
    d2u_dr2 = d2u_drt2 * decay**2 - scale * du_drt * decay

    u       = numpy.where(off_diagonal, u, 0.)
    du_dr   = numpy.where(off_diagonal, du_dr, 0.)
    d2u_dr2 = numpy.where(off_diagonal, d2u_dr2, 0.)

    # Every pair is counted twice in the full matrix:
    log_value = 0.5 * numpy.sum(u)
    gradient  = numpy.sum((du_dr / r)[..., None] * diff, axis=1)
    laplacian = numpy.sum(d2u_dr2 + 2. * du_dr / r, axis=1)

    d_b1 = numpy.where(off_diagonal, - cusp * rt**2 / denom**2, 0.)
    d_bk = numpy.where(off_diagonal[..., None], rt_k**powers, 0.)
    log_parameter_gradient = 0.5 * numpy.concatenate([
        numpy.sum(d_b1).reshape((1,)),
        numpy.sum(d_bk, axis=(0, 1)),
    ])

    return JastrowTerms(log_value, gradient, laplacian, log_parameter_gradient)


def cusp_matrix(num_particles, num_up):
    spin_up = numpy.arange(num_particles) < num_up
    parallel = spin_up[:, None] == spin_up[None, :]
    return numpy.where(parallel, PARALLEL_CUSP, ANTIPARALLEL_CUSP)


class JastrowFactor:
    """
    Two-body Jastrow factor with a Pade first term and polynomial
    corrections in the scaled distance.  Particles 0..num_up-1 are spin up.
    """

    def __init__(self, parameters, num_particles, scale, num_up):
        parameters = numpy.asarray(parameters, dtype=float).reshape((-1,))
        if parameters.shape[0] == 0:
            raise ConfigurationError("The Jastrow factor needs at least one parameter")
        if scale <= 0:
            raise ConfigurationError(f"Jastrow scale must be positive, got {scale}")
        if not 0 <= num_up <= num_particles:
            raise ConfigurationError(
                f"num_up must be between 0 and {num_particles}, got {num_up}")

        self.parameters    = parameters
        self.num_particles = num_particles
        self.scale         = float(scale)
        self.num_up        = num_up
        self.cusp          = cusp_matrix(num_particles, num_up)

    def evaluate(self, cfg):
        return jastrow_terms(self.parameters, cfg, self.cusp, self.scale)

    def value(self, cfg):
        return numpy.exp(self.evaluate(cfg).log_value)

    def update_parameters(self, delta):
        self.parameters = self.parameters + delta
