import logging
import time

import jax.numpy as numpy

from jax_vmc.errors import ConfigurationError
from jax_vmc.utils.summary import Log

logger = logging.getLogger()


def block_statistics(values, block_size):
    """
    Mean, variance and error of a stream of OperatorValues from the means of
    consecutive blocks of `block_size` samples.  A trailing partial block is
    dropped.  Vector and Matrix streams get elementwise statistics.

    The error is sqrt(var / (n_blocks - 1)), zero for a single block.
    """
    n_blocks = len(values) // block_size
    if n_blocks == 0:
        raise ConfigurationError(
            f"{len(values)} samples don't fill a single block of {block_size}")

    kind = type(values[0])
    used = values[:n_blocks * block_size]
    if values[0].is_scalar:
        samples = numpy.asarray([ v.value for v in used ])
    else:
        samples = numpy.stack([ v.value for v in used ])

    blocks = samples.reshape((n_blocks, block_size) + samples.shape[1:]).mean(axis=1)

    mean     = blocks.mean(axis=0)
    variance = blocks.var(axis=0)
    if n_blocks > 1:
        error = numpy.sqrt(variance / (n_blocks - 1))
    else:
        error = numpy.zeros_like(variance)

    return kind(mean), kind(variance), kind(error)


def report(reporter, data):
    if reporter is None:
        return
    if isinstance(reporter, Log):
        message = reporter.log(data)
    else:
        message = reporter(data)
    if message:
        logger.info(message)


class Runner:
    """
    Runs a sampler for a fixed number of sweeps, taking one sample of every
    observable after each sweep, and reduces the samples to block averages.
    """

    def __init__(self, sampler, reporter=None):
        self.sampler  = sampler
        self.reporter = reporter

        self._data       = { name : [] for name in sampler.observable_names }
        self._means      = {}
        self._variances  = {}
        self._errors     = {}
        self._acceptance = 0.

    def run(self, steps, block_size):
        if block_size < 1:
            raise ConfigurationError(f"block_size must be at least 1, got {block_size}")
        if steps < block_size:
            raise ConfigurationError(f"{steps} steps don't fill a single block of {block_size}")

        self._data = { name : [] for name in self.sampler.observable_names }
        start_acceptance = self.sampler.acceptance
        start = time.time()

        for _ in range(steps):
            self.sampler.move_state()
            for name, value in self.sampler.sample().items():
                self._data[name].append(value)
            report(self.reporter, self._data)

        self._acceptance = (self.sampler.acceptance - start_acceptance) / steps

        self._means, self._variances, self._errors = {}, {}, {}
        for name, values in self._data.items():
            mean, variance, error = block_statistics(values, block_size)
            self._means[name]     = mean
            self._variances[name] = variance
            self._errors[name]    = error

        logger.debug(f"Ran {steps} sweeps in {time.time() - start:.3f} s, acceptance {self._acceptance:.4f}")

    @property
    def acceptance(self):
        """Fraction of accepted single-particle moves during the last run."""
        return self._acceptance

    def data(self):
        return self._data

    def means(self):
        return self._means

    def variances(self):
        return self._variances

    def errors(self):
        return self._errors

    def into_sampler(self):
        return self.sampler
