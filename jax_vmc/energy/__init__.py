from . operator         import OperatorValue, Scalar, Vector, Matrix, Operator, sum_values
from . hamiltonian      import KineticEnergy, ElectronicHamiltonian, IonicHamiltonian
from . atomic_potential import IonicPotential, ElectronicPotential
from . harmonic_oscillator_potential import HarmonicOscillator, HarmonicHamiltonian

from jax_vmc.errors import ConfigurationError


def build_hamiltonian(cfg):

    # Load the hamiltonian function:
    from .. config import Potential
    from .. wavefunction.wavefunction import as_list

    if cfg.hamiltonian.form == Potential.AtomicPotential:
        positions = as_list(cfg.hamiltonian.ion_positions)
        charges   = as_list(cfg.hamiltonian.ion_charges)
        if cfg.hamiltonian.electronic:
            return ElectronicHamiltonian.from_ions(positions, charges)
        return IonicHamiltonian.from_ions(positions, charges)

    elif cfg.hamiltonian.form == Potential.HarmonicOscillator:
        return HarmonicHamiltonian(cfg.hamiltonian.frequency)

    raise ConfigurationError("Can't identify the right hamiltonian form.")
