import logging

import jax.numpy as numpy
from jax import jit
import flax

from . base  import Vgl, CachedWaveFunction, Optimize
from . basis import check_finite

from jax_vmc.errors import ConfigurationError, LinearAlgebraError
from jax_vmc.utils.tensor_ops import flatten_tree_into_tensor, unflatten_tensor_like_example

logger = logging.getLogger()


@flax.struct.dataclass
class SlaterState:
    """
    Everything needed to evaluate and update one Slater determinant.
    Row i is particle i, column j is orbital j.
    """
    values:      numpy.ndarray
    gradients:   numpy.ndarray
    laplacians:  numpy.ndarray
    inverse:     numpy.ndarray
    determinant: numpy.ndarray


@jit
def build_slater_state(values, gradients, laplacians):
    return SlaterState(
        values      = values,
        gradients   = gradients,
        laplacians  = laplacians,
        inverse     = numpy.linalg.inv(values),
        determinant = numpy.linalg.det(values),
    )

@jit
def sherman_morrison(state, index, row_values, row_gradients, row_laplacians):
    """
    Replace row `index` of the Slater matrix and update the inverse in O(N^2).

    With R = sum_j phi_j(r_i') inv[j, i], the new determinant is R * det and
    the new inverse is inv - inv[:, i] (u inv - e_i)^T / R.
    """
    inverse = state.inverse
    column  = inverse[:, index]
    ratio   = numpy.dot(row_values, column)

    e_i = numpy.zeros_like(row_values).at[index].set(1.)
    new_inverse = inverse - numpy.outer(column, numpy.matmul(row_values, inverse) - e_i) / ratio

    return SlaterState(
        values      = state.values.at[index].set(row_values),
        gradients   = state.gradients.at[index].set(row_gradients),
        laplacians  = state.laplacians.at[index].set(row_laplacians),
        inverse     = new_inverse,
        determinant = ratio * state.determinant,
    )

@jit
def is_invertible(state):
    return numpy.isfinite(state.determinant) \
        & (state.determinant != 0.) \
        & numpy.isfinite(state.inverse).all()

@jit
def local_derivatives(state):
    # grad_i D / D = sum_j grad phi_j(r_i) inv[j, i]
    gradient  = numpy.einsum("ijk,ji->ik", state.gradients, state.inverse)
    # lap_i D / D = sum_j lap phi_j(r_i) inv[j, i]
    laplacian = numpy.einsum("ij,ji->i", state.laplacians, state.inverse)
    return gradient, laplacian

@jit
def slater_vgl(state):
    gradient, laplacian = local_derivatives(state)
    d = state.determinant
    return Vgl(d, d * gradient, d * numpy.sum(laplacian))


class SlaterDeterminant:
    """
    Determinant of M[i, j] = phi_j(r_i) over a set of orbitals.

    This is a factor, not a complete wavefunction: it works on states so the
    owning wavefunction decides what is committed and what is a candidate.
    """

    def __init__(self, orbitals):
        if len(orbitals) == 0:
            raise ConfigurationError("A Slater determinant needs at least one orbital")
        self.orbitals = list(orbitals)

    @property
    def size(self):
        return len(self.orbitals)

    def tables(self, positions):
        vgls = [ check_finite(o.vgl_many(positions), "orbital") for o in self.orbitals ]
        values     = numpy.stack([v.value     for v in vgls], axis=1)
        gradients  = numpy.stack([v.gradient  for v in vgls], axis=1)
        laplacians = numpy.stack([v.laplacian for v in vgls], axis=1)
        return values, gradients, laplacians

    def evaluate(self, positions):
        if positions.shape != (self.size, 3):
            raise ConfigurationError(
                f"Expected positions of shape {(self.size, 3)}, got {positions.shape}")

        state = build_slater_state(*self.tables(positions))
        if not bool(is_invertible(state)):
            raise LinearAlgebraError("Singular Slater matrix")
        return state

    def propose(self, state, index, position):
        """Candidate state with particle `index` moved to `position`."""
        values, gradients, laplacians = self.tables(position.reshape((1, 3)))
        candidate = sherman_morrison(state, index, values[0], gradients[0], laplacians[0])
        if not bool(is_invertible(candidate)):
            raise LinearAlgebraError(f"Singular Slater matrix after moving particle {index}")
        return candidate

    @property
    def parameters(self):
        flat, _, _ = flatten_tree_into_tensor([ o.coeffs for o in self.orbitals ])
        return flat

    def log_parameter_gradient(self, state, positions):
        """d ln D / d c_jk = sum_i inv[j, i] xi_k(r_i), flattened orbital by orbital."""
        gradients = [
            numpy.matmul(state.inverse[j], o.basis_values(positions))
            for j, o in enumerate(self.orbitals)
        ]
        return numpy.concatenate(gradients, axis=0)

    def update_parameters(self, delta):
        deltas = unflatten_tensor_like_example(delta, [ o.coeffs for o in self.orbitals ])
        for o, d in zip(self.orbitals, deltas):
            o.coeffs = o.coeffs + d


class SingleDeterminant(CachedWaveFunction, Optimize):
    """
    A wavefunction made of one Slater determinant.  The variational
    parameters are all orbital coefficients.
    """

    def __init__(self, orbitals):
        CachedWaveFunction.__init__(self)
        self.determinant = SlaterDeterminant(orbitals)

    @property
    def num_particles(self):
        return self.determinant.size

    def _evaluate(self, cfg):
        return self.determinant.evaluate(cfg)

    def _propose(self, state, index, cfg):
        return self.determinant.propose(state, index, cfg[index])

    def _vgl(self, state):
        return slater_vgl(state)

    @property
    def parameters(self):
        return self.determinant.parameters

    def parameter_gradient(self, cfg):
        state = self._evaluate(cfg)
        return state.determinant * self.determinant.log_parameter_gradient(state, cfg)

    def update_parameters(self, delta):
        delta = numpy.asarray(delta)
        if delta.shape != (self.num_parameters,):
            raise ConfigurationError(
                f"Parameter update has shape {delta.shape}, expected {(self.num_parameters,)}")
        self.determinant.update_parameters(delta)
        logger.debug(f"Updated {self.num_parameters} orbital coefficients")
