# Complete wavefunctions built from the determinant and Jastrow factors,
# plus the builder that assembles one from the hydra configuration.

import logging

import jax.numpy as numpy
from jax import jit
from omegaconf import OmegaConf

from . base        import Vgl, CachedWaveFunction, Optimize
from . basis       import GaussianBasis, Hydrogen1sBasis, Hydrogen2sBasis
from . orbital     import Orbital
from . determinant import SlaterDeterminant, SingleDeterminant, local_derivatives
from . jastrow     import JastrowFactor

from jax_vmc.errors import ConfigurationError

logger = logging.getLogger()


@jit
def jastrow_slater_vgl(slater_states, terms):
    """
    psi = J * D_up * D_down.  Every particle belongs to exactly one
    determinant, so the per-particle determinant derivatives concatenate.
    """
    value = numpy.exp(terms.log_value)
    gradients  = []
    laplacians = []
    for state in slater_states:
        g, l = local_derivatives(state)
        gradients.append(g)
        laplacians.append(l)
        value = value * state.determinant

    grad_d = numpy.concatenate(gradients, axis=0)
    lap_d  = numpy.concatenate(laplacians, axis=0)
    grad_u = terms.gradient

    gradient_over_psi  = grad_d + grad_u
    laplacian_over_psi = numpy.sum(
        lap_d
        + terms.laplacian
        + numpy.sum(grad_u**2, axis=-1)
        + 2. * numpy.sum(grad_u * grad_d, axis=-1)
    )

    return Vgl(value, value * gradient_over_psi, value * laplacian_over_psi)


class JastrowSlater(CachedWaveFunction, Optimize):
    """
    Jastrow factor times a spin-up and a spin-down Slater determinant.

    The first `num_up` orbitals (and particles) form the spin-up
    determinant, the rest the spin-down one.  Only the Jastrow parameters
    are optimized.
    """

    def __init__(self, parameters, orbitals, scale, num_up):
        CachedWaveFunction.__init__(self)
        n = len(orbitals)
        if n == 0:
            raise ConfigurationError("JastrowSlater needs at least one orbital")

        self.jastrow = JastrowFactor(parameters, n, scale, num_up)

        # (particle slice, determinant) for each non-empty spin channel:
        self.determinants = []
        if num_up > 0:
            self.determinants.append((slice(0, num_up), SlaterDeterminant(orbitals[:num_up])))
        if num_up < n:
            self.determinants.append((slice(num_up, n), SlaterDeterminant(orbitals[num_up:])))

        self._num_particles = n

    @property
    def num_particles(self):
        return self._num_particles

    def _evaluate(self, cfg):
        if cfg.shape != (self.num_particles, 3):
            raise ConfigurationError(
                f"Expected a configuration of shape {(self.num_particles, 3)}, got {cfg.shape}")
        slater_states = tuple(det.evaluate(cfg[s]) for s, det in self.determinants)
        return slater_states, self.jastrow.evaluate(cfg)

    def _propose(self, state, index, cfg):
        slater_states, _ = state
        updated = []
        for (s, det), slater_state in zip(self.determinants, slater_states):
            if s.start <= index < s.stop:
                slater_state = det.propose(slater_state, index - s.start, cfg[index])
            updated.append(slater_state)
        return tuple(updated), self.jastrow.evaluate(cfg)

    def _vgl(self, state):
        slater_states, terms = state
        return jastrow_slater_vgl(slater_states, terms)

    @property
    def parameters(self):
        return self.jastrow.parameters

    def parameter_gradient(self, cfg):
        slater_states, terms = self._evaluate(cfg)
        psi = jastrow_slater_vgl(slater_states, terms).value
        return psi * terms.log_parameter_gradient

    def update_parameters(self, delta):
        delta = numpy.asarray(delta)
        if delta.shape != self.parameters.shape:
            raise ConfigurationError(
                f"Parameter update has shape {delta.shape}, expected {self.parameters.shape}")
        self.jastrow.update_parameters(delta)
        logger.debug(f"Jastrow parameters now {self.parameters}")


def as_list(node):
    # hydra hands us ListConfig objects, plain dataclasses hand us lists
    if OmegaConf.is_config(node):
        return OmegaConf.to_container(node)
    return node


def init_basis(basis_cfg):

    from .. config import BasisKind

    if basis_cfg.form == BasisKind.Gaussian:
        basis_class = GaussianBasis
    elif basis_cfg.form == BasisKind.Hydrogen1s:
        basis_class = Hydrogen1sBasis
    elif basis_cfg.form == BasisKind.Hydrogen2s:
        basis_class = Hydrogen2sBasis
    else:
        raise ConfigurationError(f"Can't identify the basis form {basis_cfg.form}")

    return basis_class(as_list(basis_cfg.centers), as_list(basis_cfg.widths))


def init_wavefunction(wavefunction_cfg, sampler_config):

    from .. config import WavefunctionKind

    # All orbitals share one basis set:
    basis = init_basis(wavefunction_cfg.basis)
    orbitals = [ Orbital(coeffs, basis) for coeffs in as_list(wavefunction_cfg.orbitals) ]

    if len(orbitals) != sampler_config.n_particles:
        raise ConfigurationError(
            f"Got {len(orbitals)} orbitals for {sampler_config.n_particles} particles")

    if wavefunction_cfg.form == WavefunctionKind.SingleDeterminant:
        wf = SingleDeterminant(orbitals)
    elif wavefunction_cfg.form == WavefunctionKind.JastrowSlater:
        wf = JastrowSlater(
            parameters = as_list(wavefunction_cfg.jastrow.parameters),
            orbitals   = orbitals,
            scale      = wavefunction_cfg.jastrow.scale,
            num_up     = sampler_config.n_spin_up,
        )
    else:
        raise ConfigurationError(f"Can't identify the wavefunction form {wavefunction_cfg.form}")

    logger.info(f"Built {type(wf).__name__} with {wf.num_parameters} parameters over {basis}")
    return wf
