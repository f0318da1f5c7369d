from enum import Enum

from dataclasses import dataclass, field
from hydra.core.config_store import ConfigStore
from omegaconf import MISSING

from typing import List

from jax_vmc.errors import ConfigurationError


class Potential(Enum):
    AtomicPotential    = 0
    HarmonicOscillator = 1

@dataclass
class Hamiltonian:
    form: Potential = MISSING

@dataclass
class AtomicHamiltonian(Hamiltonian):
    """
    Electrons around fixed point charges.  Electron-electron repulsion is
    included; set `electronic = False` for independent electrons.
    """
    form:                   Potential = Potential.AtomicPotential
    ion_positions:  List[List[float]] = field(default_factory=lambda: [[0., 0., 0.]])
    ion_charges:          List[float] = field(default_factory=lambda: [1.0])
    electronic:                  bool = True

    def __post_init__(self):
        if len(self.ion_positions) != len(self.ion_charges):
            raise ConfigurationError("Need exactly one charge per ion position")


@dataclass
class HarmonicOscillatorHamiltonian(Hamiltonian):
    form:  Potential = Potential.HarmonicOscillator
    frequency: float = 1.0


cs = ConfigStore.instance()
cs.store(group="hamiltonian", name="atomic",   node=AtomicHamiltonian)
cs.store(group="hamiltonian", name="harmonic", node=HarmonicOscillatorHamiltonian)
