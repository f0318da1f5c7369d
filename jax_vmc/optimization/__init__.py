from . observables import ParameterGradient, WavefunctionValue
from . observables import ENERGY, PARAMETER_GRADIENT, WAVEFUNCTION_VALUE

from . gradients import natural_gradients, compute_energy_gradient
from . gradients import cholesky_solve, regularize_S_ij

from . optimizers import Optimizer, SteepestDescent, MomentumDescent, NesterovMomentum
from . optimizers import OnlineLbfgs, build_optimizer
from . stochastic_reconfiguration import StochasticReconfiguration, construct_sr_matrix

from . vmc import VmcRunner

import optax

def build_lr_schedule(lr_cfg):

    schedules  = []
    boundaries = []
    running_total = 0

    for init_value, end_value, steps in zip(lr_cfg.init_values, lr_cfg.end_values, lr_cfg.steps):

        schedules.append(
            optax.linear_schedule(
                init_value = init_value,
                end_value  = end_value,
                transition_steps = steps,
                )
            )
        boundaries.append(steps + running_total)
        running_total += steps

    # join_schedules takes one boundary between each pair of schedules:
    return optax.join_schedules(schedules=schedules, boundaries = boundaries[:-1])
