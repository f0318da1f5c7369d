from . base         import Vgl, Function, Differentiate, Cache, Optimize, WaveFunction
from . base         import CachedWaveFunction
from . basis        import gaussian, hydrogen_1s, hydrogen_2s
from . basis        import BasisSet, GaussianBasis, Hydrogen1sBasis, Hydrogen2sBasis
from . orbital      import Orbital
from . determinant  import SlaterDeterminant, SlaterState, SingleDeterminant
from . jastrow      import JastrowFactor
from . wavefunction import JastrowSlater, init_wavefunction
