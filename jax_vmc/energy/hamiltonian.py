from . operator         import Operator, Scalar
from . atomic_potential import IonicPotential, ElectronicPotential


class KineticEnergy(Operator):
    """T psi = -1/2 laplacian(psi), in atomic units."""

    def act_on(self, wf, cfg):
        return Scalar(-0.5 * wf.laplacian(cfg))


class ElectronicHamiltonian(Operator):
    """Kinetic energy, electron-ion attraction and electron-electron repulsion."""

    def __init__(self, t, v_ion, v_ee):
        self.t     = t
        self.v_ion = v_ion
        self.v_ee  = v_ee

    @classmethod
    def from_ions(cls, ion_positions, ion_charges):
        return cls(
            KineticEnergy(),
            IonicPotential(ion_positions, ion_charges),
            ElectronicPotential(),
        )

    def act_on(self, wf, cfg):
        return self.t.act_on(wf, cfg) \
            + self.v_ion.act_on(wf, cfg) \
            + self.v_ee.act_on(wf, cfg)


class IonicHamiltonian(Operator):
    """Independent electrons in the field of fixed ions."""

    def __init__(self, t, v_ion):
        self.t     = t
        self.v_ion = v_ion

    @classmethod
    def from_ions(cls, ion_positions, ion_charges):
        return cls(KineticEnergy(), IonicPotential(ion_positions, ion_charges))

    def act_on(self, wf, cfg):
        return self.t.act_on(wf, cfg) + self.v_ion.act_on(wf, cfg)
