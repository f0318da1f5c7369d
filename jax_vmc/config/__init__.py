from . hamiltonian  import Potential, Hamiltonian
from . hamiltonian  import AtomicHamiltonian, HarmonicOscillatorHamiltonian
from . optimizer    import OptimizerCfg, OptimizerKind, LRSchedule
from . optimizer    import SteepestDescentCfg, MomentumCfg, NesterovCfg, LbfgsCfg
from . optimizer    import StochasticReconfigurationCfg
from . wavefunction import WavefunctionCfg, WavefunctionKind, BasisCfg, BasisKind, JastrowCfg
from . wavefunction import SingleDeterminantCfg, JastrowSlaterCfg
from . config       import Config, SamplerCfg, MoveKind

import os
os.environ["XLA_PYTHON_CLIENT_PREALLOCATE"] = "false"
