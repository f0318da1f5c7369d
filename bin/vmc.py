import sys, os
import pathlib
import time

# For configuration:
from omegaconf import DictConfig, OmegaConf
import hydra

hydra.output_subdir = None

os.environ['XLA_PYTHON_CLIENT_PREALLOCATE'] = 'false'

import jax

import logging


# Add the local folder to the import path:
vmc_dir = os.path.dirname(os.path.abspath(__file__))
vmc_dir = os.path.dirname(vmc_dir)
sys.path.insert(0,vmc_dir)

import jax_vmc.config  # registers the structured configs
from jax_vmc.errors import VmcError

from jax_vmc.energy       import build_hamiltonian
from jax_vmc.montecarlo   import build_sampler
from jax_vmc.optimization import ParameterGradient, WavefunctionValue
from jax_vmc.optimization import ENERGY, PARAMETER_GRADIENT, WAVEFUNCTION_VALUE
from jax_vmc.optimization import build_optimizer, VmcRunner

from jax_vmc.utils import set_compute_parameters, configure_logger, SummaryLog

from tensorboardX import SummaryWriter


@hydra.main(version_base = None, config_path=None, config_name="base_config")
def main(cfg : OmegaConf) -> None:

    missing_keys: set[str] = OmegaConf.missing_keys(cfg)
    if missing_keys:
        raise RuntimeError(f"Got missing keys in config:\n{missing_keys}")

    # Extend the save path:
    cfg.save_dir = cfg.save_dir + f"/{cfg.hamiltonian.form.name}/"
    cfg.save_dir = cfg.save_dir + f"/{cfg.sampler.n_particles}particles/"
    cfg.save_dir = cfg.save_dir + f"/{cfg.wavefunction.form.name}-{cfg.optimizer.form.name}/"
    cfg.save_dir = cfg.save_dir + f"/{cfg.run_id}/"

    # Prepare directories:
    work_dir = pathlib.Path(cfg.save_dir)
    work_dir.mkdir(parents=True, exist_ok=True)
    log_dir = pathlib.Path(cfg.save_dir + "/log/")
    log_dir.mkdir(parents=True, exist_ok=True)

    configure_logger(log_dir)

    logger = logging.getLogger()
    logger.info("")
    logger.info("\n" + OmegaConf.to_yaml(cfg))

    target_device = set_compute_parameters()

    # Initialize the global random seed:
    if cfg.seed == -1:
        global_random_seed = int(time.time())
    else:
        global_random_seed = cfg.seed

    logger.info(f"Seed for this run is: {global_random_seed}.")

    # We also snapshot the configuration into the log dir:
    with open(cfg.save_dir / pathlib.Path('config.snapshot.yaml'), 'w') as f_cfg:
        OmegaConf.save(config=cfg, f=f_cfg)

    with jax.default_device(target_device):

        observables = {
            ENERGY             : build_hamiltonian(cfg),
            PARAMETER_GRADIENT : ParameterGradient(),
            WAVEFUNCTION_VALUE : WavefunctionValue(),
        }

        sampler = build_sampler(cfg, observables=observables, seed=global_random_seed)
        optimizer = build_optimizer(cfg.optimizer, sampler.wave_function.num_parameters)

        # Create a summary writer:
        writer = SummaryWriter(log_dir, flush_secs=20)
        metrics_file = log_dir / pathlib.Path("metrics.csv")

        with open(metrics_file, "a+") as f_metrics:
            # The VMC loop already logs each step, the reporter only writes metrics:
            reporter = SummaryLog(writer=writer, metric_file=f_metrics, every=None)
            vmc = VmcRunner(sampler, optimizer, reporter=reporter)

            # Before beginning the loop, manually flush the buffer:
            logger.handlers[0].flush()

            try:
                wf, energies, errors = vmc.run_optimization(
                    iterations   = cfg.iterations,
                    steps        = cfg.sampler.steps,
                    block_size   = cfg.sampler.block_size,
                    n_thermalize = cfg.sampler.n_thermalize,
                )
            except VmcError:
                logger.exception("VMC run terminated")
                raise
            finally:
                writer.close()

    if len(energies) > 0:
        logger.info(f"Final energy = {energies[-1]:.6f} +/- {errors[-1]:.6f}")
    logger.info(f"Final parameters = {wf.parameters}")


if __name__ == "__main__":
    import sys
    if "--help" not in sys.argv and "--hydra-help" not in sys.argv:
        sys.argv += [
            'hydra/job_logging=disabled',
            'hydra.output_subdir=null',
            'hydra.job.chdir=False',
            'hydra.run.dir=.',
            'hydra/hydra_logging=disabled',
        ]


    main()
