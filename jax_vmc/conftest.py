import pytest

import jax
jax.config.update("jax_enable_x64", True)

from . config import SamplerCfg, SingleDeterminantCfg, JastrowSlaterCfg
from . config import AtomicHamiltonian, HarmonicOscillatorHamiltonian, BasisCfg, BasisKind


def simple_fixture(name, params):
    @pytest.fixture(name=name, params=params)
    def inner(request):
        return request.param
    return inner

pytest.simple_fixture = simple_fixture

seed        = pytest.simple_fixture("seed", params=(0,))
n_particles = pytest.simple_fixture("n_particles", params=(1, 2, 4))
n_orbitals  = pytest.simple_fixture("n_orbitals", params=(1, 2, 3))
basis_kind  = pytest.simple_fixture("basis_kind",
    params=(BasisKind.Gaussian, BasisKind.Hydrogen1s, BasisKind.Hydrogen2s))


def pytest_addoption(parser):
    parser.addoption("--runslow", action="store_true", default=False,
        help="run the long end-to-end Monte Carlo tests")

def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow", default=False):
        return
    skip_slow = pytest.mark.skip(reason="needs --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def sampler_config():
    s = SamplerCfg()

    s.n_particles  = 1
    s.n_spin_up    = 1
    s.box_side     = 1.0
    s.n_thermalize = 10
    s.steps        = 200
    s.block_size   = 20

    return s


@pytest.fixture
def hydrogen_wavefunction_config():
    # Exact hydrogen ground state, exp(-r)
    return SingleDeterminantCfg(
        basis = BasisCfg(form=BasisKind.Hydrogen1s, centers=[[0., 0., 0.]], widths=[1.0]),
        orbitals = [[[1.0]]],
    )


@pytest.fixture
def helium_wavefunction_config():
    # Two electrons of opposite spin in 1s-like orbitals with a Jastrow factor
    return JastrowSlaterCfg(
        basis = BasisCfg(form=BasisKind.Hydrogen1s, centers=[[0., 0., 0.]], widths=[0.5]),
        orbitals = [[[1.0]], [[1.0]]],
    )


@pytest.fixture
def atomic_hamiltonian_config():
    return AtomicHamiltonian(ion_positions=[[0., 0., 0.]], ion_charges=[1.0])


@pytest.fixture
def harmonic_hamiltonian_config():
    return HarmonicOscillatorHamiltonian(frequency=1.0)
