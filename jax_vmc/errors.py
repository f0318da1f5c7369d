class VmcError(Exception):
    """Base class for every error raised by jax_vmc."""
    pass


class FunctionEvaluationError(VmcError):
    """A basis function, orbital or wavefunction produced an invalid value."""
    pass


class LinearAlgebraError(VmcError):
    """A singular Slater matrix, or a symmetric solve that did not succeed."""
    pass


class DataAccessError(VmcError, KeyError):
    """An observable stream was requested that the sampler never produced."""

    def __init__(self, name):
        self.name = name
        super().__init__(name)

    def __str__(self):
        return f"Observable stream '{self.name}' was not recorded"


class UnsupportedOperatorCombination(VmcError, TypeError):
    """Arithmetic between two OperatorValue kinds that don't broadcast."""
    pass


class ConfigurationError(VmcError, ValueError):
    pass
