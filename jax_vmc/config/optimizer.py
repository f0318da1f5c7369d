from enum import Enum

from dataclasses import dataclass, field
from hydra.core.config_store import ConfigStore
from omegaconf import MISSING
from typing import List


class OptimizerKind(Enum):
    SteepestDescent           = 0
    Momentum                  = 1
    Nesterov                  = 2
    Lbfgs                     = 3
    StochasticReconfiguration = 4


@dataclass
class LRSchedule:
    '''
    This is to configure a learning rate schedule with Optax
    Optax is fancy but this is not, only linear are supported

    A single segment with init_value == end_value is a constant step size.
    '''
    init_values: List[float] = field(default_factory = lambda : [1e-2])
    end_values:  List[float] = field(default_factory = lambda : [1e-2])
    steps:         List[int] = field(default_factory = lambda : [1000])


@dataclass
class OptimizerCfg:
    form: OptimizerKind = MISSING
    # delta is the learning rate
    delta:   LRSchedule = field(default_factory = lambda: LRSchedule())

@dataclass
class SteepestDescentCfg(OptimizerCfg):
    form: OptimizerKind = OptimizerKind.SteepestDescent

@dataclass
class MomentumCfg(OptimizerCfg):
    form: OptimizerKind = OptimizerKind.Momentum
    momentum:     float = 0.9

@dataclass
class NesterovCfg(OptimizerCfg):
    form: OptimizerKind = OptimizerKind.Nesterov
    momentum:     float = 0.9

@dataclass
class LbfgsCfg(OptimizerCfg):
    form: OptimizerKind = OptimizerKind.Lbfgs
    # Number of curvature pairs kept:
    history:        int = 5

@dataclass
class StochasticReconfigurationCfg(OptimizerCfg):
    form: OptimizerKind = OptimizerKind.StochasticReconfiguration
    # Epsilon scales up the diagonal of the SR matrix before the solve
    epsilon:      float = 1e-2


cs = ConfigStore.instance()
cs.store(group="optimizer", name="steepest_descent", node=SteepestDescentCfg)
cs.store(group="optimizer", name="momentum",         node=MomentumCfg)
cs.store(group="optimizer", name="nesterov",         node=NesterovCfg)
cs.store(group="optimizer", name="lbfgs",            node=LbfgsCfg)
cs.store(group="optimizer", name="sr",               node=StochasticReconfigurationCfg)
