from . sampler import Sampler, CommittedState
from . runner  import Runner, block_statistics

from jax_vmc.errors import ConfigurationError


def build_sampler(cfg, observables=None, seed=None):
    """Wavefunction, Metropolis kernel and sampler from the hydra configuration."""
    from .. spatial      import init_metropolis
    from .. wavefunction import init_wavefunction

    if cfg.sampler.n_dim != 3:
        raise ConfigurationError("Only three dimensional configurations are supported")

    wf = init_wavefunction(cfg.wavefunction, cfg.sampler)
    metropolis = init_metropolis(cfg.sampler, seed)

    return Sampler(wf, metropolis, observables=observables)
