import jax.numpy as numpy
from jax import jit, vmap

from functools import partial

from . base import Vgl
from jax_vmc.errors import ConfigurationError, FunctionEvaluationError


# Single basis functions.  Every one takes the position relative to its
# center (shape (3,)) and a width, and returns the value, gradient and
# laplacian together.

@jit
def gaussian(pos, width):
    """exp(-r^2 / (2 w^2))"""
    r2 = numpy.sum(pos**2)
    w2 = width**2

    value     = numpy.exp(- r2 / (2 * w2))
    gradient  = - pos / w2 * value
    laplacian = value * (r2 / w2**2 - 3. / w2)

    return Vgl(value, gradient, laplacian)

@jit
def hydrogen_1s(pos, width):
    """exp(-r / w)"""
    r = numpy.sqrt(numpy.sum(pos**2))

    value     = numpy.exp(- r / width)
    gradient  = - pos / (width * r) * value
    laplacian = value * (1. / width**2 - 2. / (width * r))

    return Vgl(value, gradient, laplacian)

@jit
def hydrogen_2s(pos, width):
    """(1 - r / 2w) exp(-r / 2w)"""
    r = numpy.sqrt(numpy.sum(pos**2))
    a = 0.5 / width

    exponential = numpy.exp(- a * r)
    value       = (1. - a * r) * exponential
    # Radial derivative, then the gradient points along pos:
    d_dr        = (a**2 * r - 2. * a) * exponential
    gradient    = d_dr * pos / r
    laplacian   = (5. * a**2 - a**3 * r - 4. * a / r) * exponential

    return Vgl(value, gradient, laplacian)


@partial(jit, static_argnums=(0,))
def evaluate_basis(function, pos, centers, widths):
    """
    Evaluate every (center, width) combination at one position.

    Returns a Vgl with value shape (n_centers, n_widths) and gradient shape
    (n_centers, n_widths, 3).
    """
    over_widths  = vmap(function, in_axes=(None, 0))
    over_centers = vmap(over_widths, in_axes=(0, None))
    return over_centers(pos - centers, widths)

@partial(jit, static_argnums=(0,))
def evaluate_basis_many(function, positions, centers, widths):
    """Same as evaluate_basis, with a leading axis over positions."""
    f = partial(evaluate_basis, function)
    return vmap(f, in_axes=(0, None, None))(positions, centers, widths)

@jit
def contract(vgl, coeffs):
    # Sum the trailing (n_centers, n_widths) axes against the coefficients,
    # works with or without a leading positions axis:
    return Vgl(
        value     = numpy.sum(vgl.value * coeffs, axis=(-2, -1)),
        gradient  = numpy.sum(vgl.gradient * coeffs[..., None], axis=(-3, -2)),
        laplacian = numpy.sum(vgl.laplacian * coeffs, axis=(-2, -1)),
    )

@partial(jit, static_argnums=(0,))
def linear_combination_many(function, positions, centers, widths, coeffs):
    return contract(evaluate_basis_many(function, positions, centers, widths), coeffs)


def check_finite(vgl, what="basis function"):
    finite = numpy.isfinite(vgl.value).all() \
        & numpy.isfinite(vgl.gradient).all() \
        & numpy.isfinite(vgl.laplacian).all()
    if not bool(finite):
        raise FunctionEvaluationError(f"Non-finite {what} evaluation")
    return vgl


class BasisSet:
    """
    A set of radial functions, one per (center, width) pair.

    Many orbitals usually share one basis set object.
    """
    function = None

    def __init__(self, centers, widths):
        centers = numpy.asarray(centers, dtype=float)
        widths  = numpy.asarray(widths,  dtype=float).reshape((-1,))

        if centers.ndim == 1:
            centers = centers.reshape((1, -1))
        if centers.ndim != 2 or centers.shape[-1] != 3:
            raise ConfigurationError(f"Basis centers must have shape (n_centers, 3), got {centers.shape}")
        if widths.shape[0] == 0 or centers.shape[0] == 0:
            raise ConfigurationError("A basis set needs at least one center and one width")
        if not bool((widths > 0).all()):
            raise ConfigurationError("Basis widths must be positive")

        self.centers = centers
        self.widths  = widths

    @property
    def shape(self):
        return (self.centers.shape[0], self.widths.shape[0])

    @property
    def size(self):
        return self.shape[0] * self.shape[1]

    def evaluate(self, pos):
        return evaluate_basis(self.function, pos, self.centers, self.widths)

    def evaluate_many(self, positions):
        return evaluate_basis_many(self.function, positions, self.centers, self.widths)

    def linear_combination(self, pos, coeffs):
        return contract(self.evaluate(pos), coeffs)

    def linear_combination_many(self, positions, coeffs):
        return linear_combination_many(self.function, positions, self.centers, self.widths, coeffs)

    def __repr__(self):
        return f"{type(self).__name__}(n_centers={self.shape[0]}, widths={self.widths.tolist()})"


class GaussianBasis(BasisSet):
    function = staticmethod(gaussian)


class Hydrogen1sBasis(BasisSet):
    function = staticmethod(hydrogen_1s)


class Hydrogen2sBasis(BasisSet):
    function = staticmethod(hydrogen_2s)
