from enum import Enum

from dataclasses import dataclass, field
from hydra.core.config_store import ConfigStore
from omegaconf import MISSING

from typing import List


class BasisKind(Enum):
    Gaussian   = 0
    Hydrogen1s = 1
    Hydrogen2s = 2

@dataclass
class BasisCfg():
    form:            BasisKind = BasisKind.Hydrogen1s
    centers: List[List[float]] = field(default_factory=lambda: [[0., 0., 0.]])
    widths:        List[float] = field(default_factory=lambda: [1.0])


@dataclass
class JastrowCfg():
    # b_1 is the Pade denominator, b_k (k >= 2) multiply r~^k
    parameters: List[float] = field(default_factory=lambda: [0.7, -0.01, -0.15])
    scale:            float = 0.001


class WavefunctionKind(Enum):
    SingleDeterminant = 0
    JastrowSlater     = 1

@dataclass
class WavefunctionCfg():
    form: WavefunctionKind = MISSING
    basis:        BasisCfg = field(default_factory=lambda: BasisCfg())
    # One coefficient table per orbital, indexed [center][width]:
    orbitals: List[List[List[float]]] = field(default_factory=lambda: [[[1.0]]])

@dataclass
class SingleDeterminantCfg(WavefunctionCfg):
    form: WavefunctionKind = WavefunctionKind.SingleDeterminant

@dataclass
class JastrowSlaterCfg(WavefunctionCfg):
    form: WavefunctionKind = WavefunctionKind.JastrowSlater
    jastrow:    JastrowCfg = field(default_factory=lambda: JastrowCfg())
    orbitals: List[List[List[float]]] = field(default_factory=lambda: [[[1.0]], [[1.0]]])


cs = ConfigStore.instance()
cs.store(group="wavefunction", name="single_determinant", node=SingleDeterminantCfg)
cs.store(group="wavefunction", name="jastrow_slater",     node=JastrowSlaterCfg)
