import logging
import time

from jax_vmc.energy.operator import Scalar
from jax_vmc.montecarlo import Runner
from jax_vmc.montecarlo.runner import report

from . observables import ENERGY, average

logger = logging.getLogger()


class VmcRunner:
    """
    Variational Monte Carlo: alternate a sampling run with a parameter update.

    The sampler must measure the streams its optimizer reads ("Energy" and
    "Parameter gradient", plus "Wavefunction value" for stochastic
    reconfiguration).  The reporter gets the per-iteration history of
    energy, error and acceptance.
    """

    def __init__(self, sampler, optimizer, reporter=None):
        self.sampler   = sampler
        self.optimizer = optimizer
        self.reporter  = reporter

        self.history = {
            "energy/energy" : [],
            "energy/error"  : [],
            "metropolis/acceptance" : [],
        }

    def run_optimization(self, iterations, steps, block_size, n_thermalize=0):
        """
        Returns the optimized wavefunction and the energy and error of every
        iteration, measured before that iteration's parameter update.
        """
        wf = self.sampler.wave_function

        self.sampler.thermalize(n_thermalize)

        energies = []
        errors   = []

        for iteration in range(iterations):
            start = time.time()

            runner = Runner(self.sampler)
            runner.run(steps, block_size)

            means = runner.means()
            energy = average(means, ENERGY).get_scalar()
            error  = average(runner.errors(), ENERGY).get_scalar()
            energies.append(energy)
            errors.append(error)

            delta = self.optimizer.compute_parameter_update(wf.parameters, means, runner.data())
            wf.update_parameters(delta)
            # The cache was built with the old parameters:
            self.sampler.refresh()

            self.history["energy/energy"].append(Scalar(energy))
            self.history["energy/error"].append(Scalar(error))
            self.history["metropolis/acceptance"].append(Scalar(runner.acceptance))

            logger.info(f"step  = {iteration}, energy = {energy:.6f}, err = {error:.6f}, "
                        f"acc = {runner.acceptance:.3f}, time = {time.time() - start:.3f}")
            report(self.reporter, self.history)

        return wf, energies, errors
