from enum import Enum

from dataclasses import dataclass, field
from hydra.core.config_store import ConfigStore
from typing import List, Any
from omegaconf import MISSING

from .wavefunction import WavefunctionCfg
from .hamiltonian  import Hamiltonian
from .optimizer    import OptimizerCfg

from jax_vmc.errors import ConfigurationError


class MoveKind(Enum):
    Box     = 0
    Diffuse = 1


@dataclass
class SamplerCfg:
    n_particles:               int = 1
    n_dim:                     int = 3
    # Particles 0..n_spin_up-1 are spin up (used by the Jastrow-Slater wavefunction)
    n_spin_up:                 int = 1
    move:                 MoveKind = MoveKind.Box
    box_side:                float = 1.0
    time_step:               float = 0.1
    n_thermalize:              int = 1000
    # Sweeps per optimization iteration, and how many go into one block:
    steps:                     int = 10000
    block_size:                int = 100

    def __post_init__(self):
        if self.n_dim != 3:
            raise ConfigurationError("Only three dimensional configurations are supported")
        if self.n_particles < 1:
            raise ConfigurationError("Need at least one particle")
        if not 0 <= self.n_spin_up <= self.n_particles:
            raise ConfigurationError("N spin up particles must be less than or equal to total particles")
        if self.block_size < 1 or self.steps < self.block_size:
            raise ConfigurationError("steps must fill at least one block of block_size samples")


cs = ConfigStore.instance()

cs.store(group="sampler", name="sampler", node=SamplerCfg)

cs.store(
    name="disable_hydra_logging",
    group="hydra/job_logging",
    node={"version": 1, "disable_existing_loggers": False, "root": {"handlers": []}},
)


defaults = [
    {"hamiltonian"  : "atomic"},
    {"optimizer"    : "sr"},
    {"wavefunction" : "single_determinant"},
    {"sampler"      : "sampler"},
]

@dataclass
class Config:
    defaults: List[Any] = field(default_factory=lambda: defaults)

    hamiltonian:     Hamiltonian = MISSING
    optimizer:      OptimizerCfg = MISSING
    wavefunction: WavefunctionCfg = MISSING
    sampler:          SamplerCfg = MISSING

    run_id:       str = MISSING
    iterations:   int = 50
    seed:         int = -1
    save_dir:     str = "output/"

cs.store(name="base_config", node=Config)
