import logging
from abc import ABC, abstractmethod
from collections import deque

import jax.numpy as numpy
import optax

from . gradients import compute_energy_gradient

from jax_vmc.errors import ConfigurationError

logger = logging.getLogger()


class Optimizer(ABC):
    """
    Turns the samples of one VMC iteration into a parameter update.

    `step_size` is a float or an optax schedule, evaluated at the
    optimizer's own iteration count.
    """

    def __init__(self, step_size):
        if callable(step_size):
            self.schedule = step_size
        else:
            self.schedule = optax.constant_schedule(step_size)
        self.iteration = 0

    def learning_rate(self):
        return float(self.schedule(self.iteration))

    def compute_parameter_update(self, parameters, averages, raw_data):
        learning_rate = self.learning_rate()
        delta = self._update(numpy.asarray(parameters), averages, raw_data, learning_rate)
        self.iteration += 1
        return delta

    @abstractmethod
    def _update(self, parameters, averages, raw_data, learning_rate):
        pass


class SteepestDescent(Optimizer):

    def _update(self, parameters, averages, raw_data, learning_rate):
        return - learning_rate * compute_energy_gradient(raw_data)


class _WithMomentum(Optimizer):

    def __init__(self, step_size, momentum, n_parameters):
        Optimizer.__init__(self, step_size)
        if not 0 <= momentum < 1:
            raise ConfigurationError(f"momentum must be in [0, 1), got {momentum}")
        self.momentum = momentum
        self.velocity = numpy.zeros((n_parameters,))

    def _gradient(self, raw_data):
        g = compute_energy_gradient(raw_data)
        if g.shape != self.velocity.shape:
            raise ConfigurationError(
                f"Optimizer built for {self.velocity.shape[0]} parameters, got a gradient of shape {g.shape}")
        return g


class MomentumDescent(_WithMomentum):
    """m <- mu m - eta g, dp = m"""

    def _update(self, parameters, averages, raw_data, learning_rate):
        g = self._gradient(raw_data)
        self.velocity = self.momentum * self.velocity - learning_rate * g
        return self.velocity


class NesterovMomentum(_WithMomentum):
    """
    Nesterov momentum without the look-ahead evaluation:

        m_prev <- m,  m <- mu m + eta g,  dp = mu m_prev - (1 + mu) m
    """

    def _update(self, parameters, averages, raw_data, learning_rate):
        g = self._gradient(raw_data)
        previous = self.velocity
        self.velocity = self.momentum * self.velocity + learning_rate * g
        return self.momentum * previous - (1. + self.momentum) * self.velocity


class OnlineLbfgs(Optimizer):
    """
    Limited memory BFGS on noisy gradients.

    Curvature pairs (s, y) = (theta - theta_prev, g - g_prev) are recorded
    from the second call on, and only when s.y > 0.  The search direction
    comes from the two-loop recursion; with no pairs yet the initial scaling
    is tiny, so the first step is a heavily damped steepest descent step.
    """

    EMPTY_SCALING = 1e-10

    def __init__(self, step_size, history, n_parameters):
        Optimizer.__init__(self, step_size)
        if history < 1:
            raise ConfigurationError(f"L-BFGS history must be at least 1, got {history}")
        self.n_parameters = n_parameters
        self.pairs    = deque(maxlen=history)
        self.previous = None

    def direction(self, g):
        q = - g
        alphas = []
        for s, y in reversed(self.pairs):
            rho = 1. / numpy.dot(y, s)
            a = rho * numpy.dot(s, q)
            q = q - a * y
            alphas.append(a)

        if len(self.pairs) == 0:
            scaling = self.EMPTY_SCALING
        else:
            scaling = numpy.mean(numpy.asarray(
                [ numpy.dot(s, y) / numpy.dot(y, y) for s, y in self.pairs ]))

        r = scaling * q
        for (s, y), a in zip(self.pairs, reversed(alphas)):
            rho = 1. / numpy.dot(y, s)
            b = rho * numpy.dot(y, r)
            r = r + s * (a - b)
        return r

    def _update(self, parameters, averages, raw_data, learning_rate):
        g = compute_energy_gradient(raw_data)
        if g.shape != (self.n_parameters,):
            raise ConfigurationError(
                f"Optimizer built for {self.n_parameters} parameters, got a gradient of shape {g.shape}")

        if self.previous is not None:
            previous_parameters, previous_g = self.previous
            s = parameters - previous_parameters
            y = g - previous_g
            if float(numpy.dot(s, y)) > 0:
                self.pairs.append((s, y))
            else:
                logger.debug("Skipping L-BFGS pair without positive curvature")

        self.previous = (parameters, g)

        return learning_rate * self.direction(g)


def build_optimizer(optimizer_cfg, n_parameters):

    from .. config import OptimizerKind
    from . import build_lr_schedule
    from . stochastic_reconfiguration import StochasticReconfiguration

    step_size = build_lr_schedule(optimizer_cfg.delta)

    if optimizer_cfg.form == OptimizerKind.SteepestDescent:
        return SteepestDescent(step_size)
    elif optimizer_cfg.form == OptimizerKind.Momentum:
        return MomentumDescent(step_size, optimizer_cfg.momentum, n_parameters)
    elif optimizer_cfg.form == OptimizerKind.Nesterov:
        return NesterovMomentum(step_size, optimizer_cfg.momentum, n_parameters)
    elif optimizer_cfg.form == OptimizerKind.Lbfgs:
        return OnlineLbfgs(step_size, optimizer_cfg.history, n_parameters)
    elif optimizer_cfg.form == OptimizerKind.StochasticReconfiguration:
        return StochasticReconfiguration(step_size, optimizer_cfg.epsilon)

    raise ConfigurationError(f"Can't identify the optimizer form {optimizer_cfg.form}")
