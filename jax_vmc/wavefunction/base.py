from abc import ABC, abstractmethod

import jax.numpy as numpy
import flax


@flax.struct.dataclass
class Vgl:
    """
    Value, gradient and laplacian of a function at one point.

    For a single-particle evaluator the gradient has shape (3,); for a
    many-body wavefunction it has shape (n_particles, 3).
    """
    value:     numpy.ndarray
    gradient:  numpy.ndarray
    laplacian: numpy.ndarray


class Function(ABC):

    @abstractmethod
    def value(self, cfg):
        """Wavefunction value for the (n_particles, 3) configuration cfg."""
        pass


class Differentiate(ABC):

    @abstractmethod
    def gradient(self, cfg):
        """Gradient of the wavefunction with respect to every particle, shape (n_particles, 3)."""
        pass

    @abstractmethod
    def laplacian(self, cfg):
        """Laplacian summed over all particles."""
        pass


class Cache(ABC):
    """
    Incremental evaluation of a wavefunction.

    The cache holds the committed state for the current configuration
    and at most one pending candidate for a single-particle move.
    """

    @abstractmethod
    def refresh(self, cfg):
        pass

    @abstractmethod
    def propose_update(self, index, cfg):
        """
        Compute the candidate state for cfg, which differs from the committed
        configuration only in row `index`.  Returns the candidate Vgl.
        """
        pass

    @abstractmethod
    def push_update(self):
        pass

    @abstractmethod
    def flush_update(self):
        pass

    @abstractmethod
    def current_value(self):
        pass


class Optimize(ABC):

    @property
    @abstractmethod
    def parameters(self):
        pass

    @property
    def num_parameters(self):
        return self.parameters.shape[0]

    @abstractmethod
    def parameter_gradient(self, cfg):
        """Derivative of the wavefunction value with respect to each parameter."""
        pass

    @abstractmethod
    def update_parameters(self, delta):
        pass


class WaveFunction(ABC):

    @property
    @abstractmethod
    def num_particles(self):
        pass


class CachedWaveFunction(WaveFunction, Function, Differentiate, Cache):
    """
    Implements the cache protocol on top of three hooks:

    - `_evaluate(cfg)` builds a state from scratch,
    - `_propose(state, index, cfg)` builds a candidate from a committed state,
    - `_vgl(state)` extracts the Vgl of a state.

    The pure methods (value/gradient/laplacian) go through `_evaluate` and
    never touch the committed state.
    """

    def __init__(self):
        self._state     = None
        self._vgl_state = None
        self._candidate = None

    @abstractmethod
    def _evaluate(self, cfg):
        pass

    @abstractmethod
    def _propose(self, state, index, cfg):
        pass

    @abstractmethod
    def _vgl(self, state):
        pass

    def vgl(self, cfg):
        return self._vgl(self._evaluate(cfg))

    def value(self, cfg):
        return self.vgl(cfg).value

    def gradient(self, cfg):
        return self.vgl(cfg).gradient

    def laplacian(self, cfg):
        return self.vgl(cfg).laplacian

    def refresh(self, cfg):
        state = self._evaluate(cfg)
        self._state     = state
        self._vgl_state = self._vgl(state)
        self._candidate = None

    def propose_update(self, index, cfg):
        if self._state is None:
            raise RuntimeError("refresh must be called before propose_update")
        state = self._propose(self._state, index, cfg)
        vgl = self._vgl(state)
        self._candidate = (state, vgl)
        return vgl

    def push_update(self):
        if self._candidate is None:
            return
        self._state, self._vgl_state = self._candidate
        self._candidate = None

    def flush_update(self):
        self._candidate = None

    def current_value(self):
        if self._vgl_state is None:
            raise RuntimeError("refresh must be called before current_value")
        return self._vgl_state
