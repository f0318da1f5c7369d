import jax.numpy as numpy

from hydra import initialize, compose
from omegaconf import OmegaConf

import pytest

from jax_vmc.config       import Potential, OptimizerKind, MoveKind, AtomicHamiltonian
from jax_vmc.energy       import HarmonicHamiltonian, ElectronicHamiltonian, build_hamiltonian
from jax_vmc.errors       import DataAccessError
from jax_vmc.montecarlo   import Sampler, Runner, build_sampler
from jax_vmc.optimization import ParameterGradient, WavefunctionValue, VmcRunner
from jax_vmc.optimization import SteepestDescent, StochasticReconfiguration, OnlineLbfgs, build_optimizer
from jax_vmc.optimization import ENERGY, PARAMETER_GRADIENT, WAVEFUNCTION_VALUE
from jax_vmc.spatial      import MetropolisBox, MetropolisDiffuse
from jax_vmc.utils        import SummaryLog
from jax_vmc.wavefunction import Vgl, CachedWaveFunction, Optimize
from jax_vmc.wavefunction import GaussianBasis, Hydrogen1sBasis, Orbital, SingleDeterminant


class GaussianTrial(CachedWaveFunction, Optimize):
    """One particle in exp(-(r/a)^2), exact for the oscillator at a = sqrt(2)."""

    def __init__(self, a):
        CachedWaveFunction.__init__(self)
        self.a = a

    @property
    def num_particles(self):
        return 1

    def _evaluate(self, cfg):
        return cfg

    def _propose(self, state, index, cfg):
        return cfg

    def _vgl(self, state):
        a2 = self.a**2
        r2 = numpy.sum(state**2)
        psi = numpy.exp(- r2 / a2)
        return Vgl(psi, -2. * state / a2 * psi, (4. * r2 / a2**2 - 6. / a2) * psi)

    @property
    def parameters(self):
        return numpy.asarray([self.a])

    def parameter_gradient(self, cfg):
        r2 = numpy.sum(cfg**2)
        return numpy.asarray([2. * r2 / self.a**3 * numpy.exp(- r2 / self.a**2)])

    def update_parameters(self, delta):
        self.a = self.a + float(delta[0])


def single_orbital(basis_class, width):
    return SingleDeterminant([Orbital([1.0], basis_class([[0., 0., 0.]], [width]))])


@pytest.mark.parametrize("move", ["box", "diffuse"])
def test_harmonic_oscillator_exact(move, seed):

    if move == "box":
        metropolis = MetropolisBox(1.0, seed=int(seed))
    else:
        metropolis = MetropolisDiffuse(0.2, seed=int(seed))

    sampler = Sampler(single_orbital(GaussianBasis, 1.0), metropolis,
                      observables={ENERGY : HarmonicHamiltonian(1.0)})
    sampler.thermalize(10)

    runner = Runner(sampler)
    runner.run(steps=1000, block_size=1)

    # An eigenstate has the same local energy everywhere:
    assert numpy.allclose(runner.means()[ENERGY].get_scalar(), 1.5)
    assert numpy.sqrt(runner.variances()[ENERGY].get_scalar()) < 1e-15


def test_hydrogen_exact(seed):

    hamiltonian = ElectronicHamiltonian.from_ions([[0., 0., 0.]], [1.])
    sampler = Sampler(single_orbital(Hydrogen1sBasis, 1.0), MetropolisBox(1.0, seed=int(seed)),
                      observables={ENERGY : hamiltonian})

    runner = Runner(sampler)
    runner.run(steps=200, block_size=20)

    assert numpy.allclose(runner.means()[ENERGY].get_scalar(), -0.5)
    assert runner.errors()[ENERGY].get_scalar() < 1e-10


def test_hydrogen_trial(seed):

    # exp(-alpha r) with alpha = 0.8: E = alpha^2 / 2 - alpha = -0.48
    hamiltonian = ElectronicHamiltonian.from_ions([[0., 0., 0.]], [1.])
    sampler = Sampler(single_orbital(Hydrogen1sBasis, 1.25), MetropolisBox(1.0, seed=int(seed)),
                      observables={ENERGY : hamiltonian})
    sampler.thermalize(100)

    runner = Runner(sampler)
    runner.run(steps=2000, block_size=100)

    energy = runner.means()[ENERGY].get_scalar()
    assert abs(energy - (-0.48)) < 0.05
    assert 0.2 < runner.acceptance < 1.


@pytest.mark.slow
def test_hydrogen_long_run(seed):

    hamiltonian = ElectronicHamiltonian.from_ions([[0., 0., 0.]], [1.])
    sampler = Sampler(single_orbital(Hydrogen1sBasis, 1.0), MetropolisBox(1.0, seed=int(seed)),
                      observables={ENERGY : hamiltonian})

    runner = Runner(sampler)
    runner.run(steps=1000000, block_size=250)

    energy = runner.means()[ENERGY].get_scalar()
    error  = runner.errors()[ENERGY].get_scalar()
    # The reported error of an exact state is rounding only:
    assert abs(energy - (-0.5)) <= max(error, 1e-10)


def test_steepest_descent_lowers_energy(seed):

    sampler = Sampler(GaussianTrial(1.0), MetropolisBox(1.0, seed=int(seed)), observables={
        ENERGY             : HarmonicHamiltonian(1.0),
        PARAMETER_GRADIENT : ParameterGradient(),
    })

    reporter = SummaryLog(every=5)
    vmc = VmcRunner(sampler, SteepestDescent(0.1), reporter=reporter)
    wf, energies, errors = vmc.run_optimization(iterations=20, steps=300, block_size=30, n_thermalize=50)

    assert len(energies) == 20 and len(errors) == 20
    assert len(vmc.history["energy/energy"]) == 20
    assert reporter.step == 20

    # E(a) = 3 / 2a^2 + 3 a^2 / 8, minimal at a = sqrt(2):
    assert energies[-1] < energies[0]
    assert abs(wf.a - numpy.sqrt(2.)) < abs(1.0 - numpy.sqrt(2.))


def test_zero_iterations(seed):

    sampler = Sampler(GaussianTrial(1.0), MetropolisBox(1.0, seed=int(seed)), observables={
        ENERGY             : HarmonicHamiltonian(1.0),
        PARAMETER_GRADIENT : ParameterGradient(),
    })

    wf, energies, errors = VmcRunner(sampler, SteepestDescent(0.1)).run_optimization(
        iterations=0, steps=20, block_size=10)

    assert energies == [] and errors == []
    assert wf.a == 1.0


def test_optimization_needs_energy(seed):

    sampler = Sampler(GaussianTrial(1.0), MetropolisBox(1.0, seed=int(seed)), observables={
        PARAMETER_GRADIENT : ParameterGradient(),
    })

    vmc = VmcRunner(sampler, SteepestDescent(0.1))
    with pytest.raises(DataAccessError) as e:
        vmc.run_optimization(iterations=1, steps=20, block_size=10)
    assert e.value.name == ENERGY

    # Nothing was updated:
    assert sampler.wave_function.a == 1.0
    assert len(vmc.history["energy/energy"]) == 0


def test_jastrow_slater_helium(sampler_config, helium_wavefunction_config, seed):

    sampler_config.n_particles = 2
    sampler_config.n_spin_up   = 1

    cfg = OmegaConf.create({
        "sampler"      : OmegaConf.structured(sampler_config),
        "wavefunction" : OmegaConf.structured(helium_wavefunction_config),
        "hamiltonian"  : OmegaConf.structured(AtomicHamiltonian(ion_charges=[2.])),
    })

    observables = {
        ENERGY             : build_hamiltonian(cfg),
        PARAMETER_GRADIENT : ParameterGradient(),
        WAVEFUNCTION_VALUE : WavefunctionValue(),
    }
    sampler = build_sampler(cfg, observables=observables, seed=int(seed))
    wf = sampler.wave_function
    before = wf.parameters

    vmc = VmcRunner(sampler, StochasticReconfiguration(0.05))
    wf, energies, errors = vmc.run_optimization(iterations=2, steps=100, block_size=10, n_thermalize=10)

    assert all(numpy.isfinite(e) for e in energies)
    # Helium lies around -2.9, a crude trial is well below zero:
    assert energies[0] < -1.
    assert not numpy.allclose(wf.parameters, before)


def test_composed_config_runs(seed):

    with initialize(version_base=None, config_path=None):
        cfg = compose(config_name="base_config", overrides=[
            "run_id=test",
            "hamiltonian=harmonic",
            "optimizer=lbfgs",
            "wavefunction.basis.form=Gaussian",
            "sampler.steps=40",
            "sampler.block_size=10",
        ])

    assert OmegaConf.missing_keys(cfg) == set()
    assert cfg.hamiltonian.form == Potential.HarmonicOscillator
    assert cfg.optimizer.form == OptimizerKind.Lbfgs
    assert cfg.sampler.move == MoveKind.Box

    observables = {
        ENERGY             : build_hamiltonian(cfg),
        PARAMETER_GRADIENT : ParameterGradient(),
    }
    sampler = build_sampler(cfg, observables=observables, seed=int(seed))
    optimizer = build_optimizer(cfg.optimizer, sampler.wave_function.num_parameters)
    assert isinstance(optimizer, OnlineLbfgs)

    vmc = VmcRunner(sampler, optimizer)
    _, energies, _ = vmc.run_optimization(
        iterations = 2,
        steps      = cfg.sampler.steps,
        block_size = cfg.sampler.block_size,
    )
    # Default orbital is the oscillator ground state, scaling it changes nothing:
    assert numpy.allclose(energies, 1.5)
