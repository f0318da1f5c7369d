import logging
import time
from abc import ABC, abstractmethod

import jax.numpy as numpy
import jax.random as random

from jax import jit

from jax_vmc.errors import ConfigurationError

logger = logging.getLogger()

SEED_BYTES = 32


def seed_to_key(seed=None):
    """
    Turn a 32 byte seed (or a non-negative int, expanded to 32 bytes) into a
    PRNG key by folding it in four bytes at a time.  No seed means the
    current time, like the driver does for seed = -1.
    """
    if seed is None:
        seed = int(time.time())
    if isinstance(seed, int):
        if seed < 0:
            raise ConfigurationError(f"Integer seeds must be non-negative, got {seed}")
        try:
            seed = seed.to_bytes(SEED_BYTES, "little")
        except OverflowError as e:
            raise ConfigurationError(f"Seed does not fit in {SEED_BYTES} bytes") from e
    seed = bytes(seed)
    if len(seed) != SEED_BYTES:
        raise ConfigurationError(f"Seeds must be {SEED_BYTES} bytes long, got {len(seed)}")

    key = random.PRNGKey(0)
    for i in range(0, SEED_BYTES, 4):
        key = random.fold_in(key, int.from_bytes(seed[i:i+4], "little"))
    return key


@jit
def uniform_draw(key):
    key, subkey = random.split(key)
    return key, random.uniform(subkey, shape=())

@jit
def box_displacement(key, box_side):
    # Uniform in a cube of side box_side centered on zero:
    key, subkey = random.split(key)
    return key, box_side * (random.uniform(subkey, shape=(3,)) - 0.5)

@jit
def diffuse_displacement(key, drift, time_step):
    # Drift along grad psi / psi plus a gaussian with variance time_step:
    key, subkey = random.split(key)
    gauss = random.normal(subkey, shape=(3,)) * numpy.sqrt(time_step)
    return key, drift * time_step + gauss

@jit
def box_acceptance(old_value, new_value):
    return numpy.minimum((new_value / old_value)**2, 1.)

@jit
def diffuse_acceptance(old_value, old_drift, new_value, new_drift, displacement, time_step):
    """
    min(1, G(x'->x) psi(x')^2 / (G(x->x') psi(x)^2)) with the drift-diffusion
    Green's function G(x->x') = exp(-|x' - x - v(x) t|^2 / 2t) of the moved
    particle.  A move that changes the sign of psi is never accepted.
    """
    forward  = numpy.sum((displacement - old_drift * time_step)**2)
    backward = numpy.sum((displacement + new_drift * time_step)**2)
    ratio = (new_value / old_value)**2 * numpy.exp((forward - backward) / (2. * time_step))

    same_sign = numpy.sign(new_value) == numpy.sign(old_value)
    return numpy.where(same_sign, numpy.minimum(ratio, 1.), 0.)


class Metropolis(ABC):
    """
    Single-particle Metropolis kernel.  The kernel owns its random key.

    Both the current and proposed wavefunction values come from the
    wavefunction cache: the committed state for the current configuration
    and a pending candidate (left in place by `accept_move`) for the
    proposal.  The caller resolves it with push_update or flush_update.
    """

    def __init__(self, seed=None):
        self.reseed(seed)

    def reseed(self, seed):
        self.key = seed_to_key(seed)

    def split_key(self):
        self.key, subkey = random.split(self.key)
        return subkey

    @abstractmethod
    def propose_move(self, wf, cfg, index):
        pass

    @abstractmethod
    def acceptance_probability(self, wf, cfg, cfg_prop, index):
        pass

    def accept_move(self, wf, cfg, cfg_prop, index):
        probability = self.acceptance_probability(wf, cfg, cfg_prop, index)
        self.key, u = uniform_draw(self.key)
        return bool(probability > u)

    def move_state(self, wf, cfg, index):
        """The new configuration if the move of particle `index` is accepted, else None."""
        cfg_prop = self.propose_move(wf, cfg, index)
        if self.accept_move(wf, cfg, cfg_prop, index):
            return cfg_prop
        return None


class MetropolisBox(Metropolis):

    def __init__(self, box_side, seed=None):
        if box_side <= 0:
            raise ConfigurationError(f"box_side must be positive, got {box_side}")
        self.box_side = float(box_side)
        Metropolis.__init__(self, seed)

    def propose_move(self, wf, cfg, index):
        self.key, displacement = box_displacement(self.key, self.box_side)
        return cfg.at[index].add(displacement)

    def acceptance_probability(self, wf, cfg, cfg_prop, index):
        old = wf.current_value()
        new = wf.propose_update(index, cfg_prop)
        return box_acceptance(old.value, new.value)


class MetropolisDiffuse(Metropolis):

    def __init__(self, time_step, seed=None):
        if time_step <= 0:
            raise ConfigurationError(f"time_step must be positive, got {time_step}")
        self.time_step = float(time_step)
        Metropolis.__init__(self, seed)

    def propose_move(self, wf, cfg, index):
        old = wf.current_value()
        drift = old.gradient[index] / old.value
        self.key, displacement = diffuse_displacement(self.key, drift, self.time_step)
        return cfg.at[index].add(displacement)

    def acceptance_probability(self, wf, cfg, cfg_prop, index):
        old = wf.current_value()
        new = wf.propose_update(index, cfg_prop)
        return diffuse_acceptance(
            old.value, old.gradient[index] / old.value,
            new.value, new.gradient[index] / new.value,
            cfg_prop[index] - cfg[index],
            self.time_step,
        )


def init_metropolis(sampler_config, seed=None):

    from .. config import MoveKind

    if sampler_config.move == MoveKind.Box:
        kernel = MetropolisBox(sampler_config.box_side, seed)
    elif sampler_config.move == MoveKind.Diffuse:
        kernel = MetropolisDiffuse(sampler_config.time_step, seed)
    else:
        raise ConfigurationError(f"Can't identify the move kind {sampler_config.move}")

    logger.debug(f"Metropolis kernel: {type(kernel).__name__}")
    return kernel
