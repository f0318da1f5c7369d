import logging

import jax.numpy as numpy

from jax_vmc.errors import ConfigurationError
from jax_vmc.energy.operator import Scalar
from jax_vmc.spatial import initialize_configuration
from jax_vmc.wavefunction.base import Function, Differentiate, Cache, WaveFunction

logger = logging.getLogger()


class CommittedState:
    """
    A cached wavefunction seen from the sampler.  At the configuration the
    cache was built on, value, gradient and laplacian read the committed
    state.  Anywhere else they are evaluated from scratch.  Every other
    attribute is the wavefunction's own.
    """

    def __init__(self, wave_function, configuration):
        self.wave_function = wave_function
        self.configuration = configuration

    def value(self, cfg):
        if cfg is self.configuration:
            return self.wave_function.current_value().value
        return self.wave_function.value(cfg)

    def gradient(self, cfg):
        if cfg is self.configuration:
            return self.wave_function.current_value().gradient
        return self.wave_function.gradient(cfg)

    def laplacian(self, cfg):
        if cfg is self.configuration:
            return self.wave_function.current_value().laplacian
        return self.wave_function.laplacian(cfg)

    def __getattr__(self, name):
        return getattr(self.wave_function, name)


class Sampler:
    """
    One Markov chain: a wavefunction, a Metropolis kernel, the current
    configuration and the named observables measured on it.

    The wavefunction cache always reflects `configuration` between sweeps.
    """

    def __init__(self, wave_function, metropolis, observables=None, configuration=None):
        for capability in (WaveFunction, Function, Differentiate, Cache):
            if not isinstance(wave_function, capability):
                raise ConfigurationError(
                    f"{type(wave_function).__name__} does not implement {capability.__name__}")

        self.wave_function = wave_function
        self.metropolis    = metropolis
        self.observables   = {}
        if observables is not None:
            for name, operator in dict(observables).items():
                self.add_observable(name, operator)

        n = wave_function.num_particles
        if configuration is None:
            configuration = initialize_configuration(metropolis.split_key(), n)
        else:
            configuration = numpy.asarray(configuration, dtype=float)
            if configuration.shape != (n, 3):
                raise ConfigurationError(
                    f"Configuration must have shape {(n, 3)}, got {configuration.shape}")

        self.configuration = configuration
        self.acceptance    = 0.
        self.n_sweeps      = 0

        self.wave_function.refresh(self.configuration)

    @property
    def num_particles(self):
        return self.wave_function.num_particles

    def add_observable(self, name, operator):
        self.observables[name] = operator

    @property
    def observable_names(self):
        return list(self.observables.keys())

    @property
    def num_observables(self):
        return len(self.observables)

    @property
    def acceptance_rate(self):
        if self.n_sweeps == 0:
            return 0.
        return self.acceptance / self.n_sweeps

    def reseed(self, seed):
        self.metropolis.reseed(seed)

    def refresh(self):
        """Recompute the wavefunction cache, e.g. after a parameter update."""
        self.wave_function.refresh(self.configuration)

    def move_state(self):
        """One sweep: attempt to move every particle once, in order."""
        wf = self.wave_function
        n  = self.num_particles

        for index in range(n):
            new_cfg = self.metropolis.move_state(wf, self.configuration, index)
            if new_cfg is not None:
                wf.push_update()
                self.configuration = new_cfg
                self.acceptance += 1. / n
            else:
                wf.flush_update()

        # Clear the rounding accumulated by the rank one updates:
        wf.refresh(self.configuration)
        self.n_sweeps += 1

    def sample(self):
        """Local value O psi / psi of every observable at the current configuration."""
        wf  = CommittedState(self.wave_function, self.configuration)
        psi = Scalar(wf.value(self.configuration))
        return {
            name : operator.act_on(wf, self.configuration) / psi
            for name, operator in self.observables.items()
        }

    def thermalize(self, n_sweeps):
        start_acceptance = self.acceptance
        for _ in range(n_sweeps):
            self.move_state()
        if n_sweeps > 0:
            acceptance = (self.acceptance - start_acceptance) / n_sweeps
            logger.info(f"Finished thermalization of {n_sweeps} sweeps with acceptance {acceptance:.4f}")
