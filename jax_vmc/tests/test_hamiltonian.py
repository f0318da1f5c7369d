import jax.numpy as numpy
import jax.random as random

from omegaconf import OmegaConf

import pytest

from jax_vmc.config       import AtomicHamiltonian, HarmonicOscillatorHamiltonian
from jax_vmc.energy       import KineticEnergy, IonicPotential, ElectronicPotential
from jax_vmc.energy       import ElectronicHamiltonian, IonicHamiltonian, HarmonicHamiltonian
from jax_vmc.energy       import Scalar, build_hamiltonian
from jax_vmc.energy.atomic_potential import ionic_potential_energy, electronic_potential_energy
from jax_vmc.errors       import ConfigurationError
from jax_vmc.wavefunction import Hydrogen1sBasis, GaussianBasis, Orbital, SingleDeterminant
from jax_vmc.wavefunction.base  import WaveFunction, Function, Differentiate
from jax_vmc.wavefunction.basis import gaussian


class GaussianProduct(WaveFunction, Function, Differentiate):
    """
    prod_i exp(-r_i^2 / 2), no cache: the operators have to call the
    pure methods.
    """

    def __init__(self, n):
        self.n = n

    @property
    def num_particles(self):
        return self.n

    def value(self, cfg):
        return numpy.exp(-0.5 * numpy.sum(cfg**2))

    def gradient(self, cfg):
        return - cfg * self.value(cfg)

    def laplacian(self, cfg):
        return (numpy.sum(cfg**2) - 3. * self.n) * self.value(cfg)


def hydrogen_wavefunction(x):
    wf = SingleDeterminant([Orbital([1.0], Hydrogen1sBasis([[0., 0., 0.]], [1.0]))])
    wf.refresh(x)
    return wf


def test_ionic_potential():

    x = numpy.asarray([[1., 0., 0.], [0., 2., 0.]])
    ions = numpy.asarray([[0., 0., 0.]])
    charges = numpy.asarray([2.])

    # -2/1 - 2/2:
    assert numpy.allclose(ionic_potential_energy(x, ions, charges), -3.)

    ions = numpy.asarray([[0., 0., 0.], [1., 2., 0.]])
    charges = numpy.asarray([1., 1.])
    expected = - (1. + 1. / 2. + 1. / 2. + 1.)
    assert numpy.allclose(ionic_potential_energy(x, ions, charges), expected)


def test_electronic_potential():

    assert electronic_potential_energy(numpy.asarray([[1., 2., 3.]])) == 0.

    x = numpy.asarray([[0., 0., 0.], [2., 0., 0.], [0., 4., 0.]])
    expected = 1. / 2. + 1. / 4. + 1. / numpy.sqrt(20.)
    assert numpy.allclose(electronic_potential_energy(x), expected)


def test_ionic_potential_shapes():
    with pytest.raises(ConfigurationError):
        IonicPotential([[0., 0., 0.], [1., 0., 0.]], [1.])


@pytest.mark.parametrize("point", [[0.3, 0.2, -0.1], [1.5, 0., 0.], [-0.7, 2.1, 0.4]])
def test_hydrogen_local_energy(point):

    x = numpy.asarray([point])
    wf = hydrogen_wavefunction(x)
    psi = Scalar(wf.current_value().value)

    # exp(-r) is the exact ground state, E_L = -1/2 everywhere:
    for hamiltonian in (ElectronicHamiltonian.from_ions([[0., 0., 0.]], [1.]),
                        IonicHamiltonian.from_ions([[0., 0., 0.]], [1.])):
        local = hamiltonian.act_on(wf, x) / psi
        assert numpy.allclose(local.get_scalar(), -0.5)

    # The split into kinetic and potential:
    r = numpy.linalg.norm(x)
    t = KineticEnergy().act_on(wf, x) / psi
    assert numpy.allclose(t.get_scalar(), -0.5 + 1. / r)


def test_operators_follow_the_configuration():

    wf = SingleDeterminant([Orbital([1.0], GaussianBasis([[0., 0., 0.]], [1.0]))])
    wf.refresh(numpy.zeros((1, 3)))

    # The cache holds the origin, the operators act somewhere else:
    x = numpy.asarray([[1.0, 0.5, -0.3]])

    t = KineticEnergy().act_on(wf, x)
    assert numpy.allclose(t.get_scalar(), -0.5 * wf.laplacian(x))

    local = HarmonicHamiltonian(1.0).act_on(wf, x) / Scalar(wf.value(x))
    assert numpy.allclose(local.get_scalar(), 1.5)

    # The committed state is untouched:
    assert numpy.allclose(wf.current_value().value, wf.value(numpy.zeros((1, 3))))


def test_operators_without_cache(n_particles, seed):

    key = random.PRNGKey(int(seed))
    x = random.uniform(key, (n_particles, 3), minval=-2., maxval=2.)
    wf = GaussianProduct(n_particles)

    psi = Scalar(wf.value(x))
    local = HarmonicHamiltonian(1.0).act_on(wf, x) / psi

    # Exact ground state of the oscillator:
    assert numpy.allclose(local.get_scalar(), 1.5 * n_particles)


def test_harmonic_frequency():

    x = numpy.asarray([[1., 1., 0.]])
    wf = GaussianProduct(1)
    psi = Scalar(wf.value(x))

    # Not an eigenstate for omega = 2: E_L = 3/2 - r^2/2 + 2 r^2
    local = HarmonicHamiltonian(2.0).act_on(wf, x) / psi
    assert numpy.allclose(local.get_scalar(), 1.5 - 1. + 4.)


def test_electron_repulsion_operator():

    x = numpy.asarray([[0., 0., 0.], [0., 0., 1.]])
    wf = GaussianProduct(2)
    psi = Scalar(wf.value(x))

    assert numpy.allclose((ElectronicPotential().act_on(wf, x) / psi).get_scalar(), 1.)


def test_gaussian_basis_is_the_same_state():
    # The oscillator ground state from the basis functions:
    x = numpy.asarray([0.4, -0.3, 0.8])
    assert numpy.allclose(gaussian(x, 1.0).value, GaussianProduct(1).value(x.reshape((1, 3))))


def test_build_hamiltonian():

    cfg = OmegaConf.create({"hamiltonian" : OmegaConf.structured(
        AtomicHamiltonian(ion_positions=[[0., 0., 0.]], ion_charges=[2.]))})
    assert isinstance(build_hamiltonian(cfg), ElectronicHamiltonian)

    cfg.hamiltonian.electronic = False
    assert isinstance(build_hamiltonian(cfg), IonicHamiltonian)

    cfg = OmegaConf.create({"hamiltonian" : OmegaConf.structured(
        HarmonicOscillatorHamiltonian(frequency=2.0))})
    hamiltonian = build_hamiltonian(cfg)
    assert isinstance(hamiltonian, HarmonicHamiltonian)
    assert hamiltonian.v.h_params.omega == 2.0


def test_atomic_config_validation():
    with pytest.raises(ConfigurationError):
        AtomicHamiltonian(ion_positions=[[0., 0., 0.]], ion_charges=[1., 1.])
