import operator as _op
from abc import ABC, abstractmethod

import jax.numpy as numpy

from jax_vmc.errors import UnsupportedOperatorCombination, ConfigurationError


class OperatorValue:
    """
    Result of an operator acting on a wavefunction: a Scalar, Vector or
    Matrix.  Arithmetic is defined between two scalars and between a scalar
    and a vector or matrix (broadcast, operand order kept).
    """
    kind = None

    def __init__(self, value):
        self.value = value

    @property
    def is_scalar(self):
        return False

    def get_scalar(self):
        raise UnsupportedOperatorCombination(f"{self.kind} value is not a Scalar")

    def get_vector(self):
        raise UnsupportedOperatorCombination(f"{self.kind} value is not a Vector")

    def get_matrix(self):
        raise UnsupportedOperatorCombination(f"{self.kind} value is not a Matrix")

    def _combine(self, other, fn, name, reflected=False):
        if not isinstance(other, OperatorValue):
            if isinstance(other, (int, float)) or numpy.ndim(other) == 0:
                other = Scalar(other)
            else:
                return NotImplemented

        left, right = (other, self) if reflected else (self, other)

        if isinstance(left, Scalar) and isinstance(right, Scalar):
            return Scalar(fn(left.value, right.value))
        if isinstance(left, Scalar):
            return type(right)(fn(left.value, right.value))
        if isinstance(right, Scalar):
            return type(left)(fn(left.value, right.value))

        raise UnsupportedOperatorCombination(
            f"Can't {name} {left.kind} and {right.kind} operator values")

    def __add__(self, other):
        return self._combine(other, _op.add, "add")

    def __radd__(self, other):
        return self._combine(other, _op.add, "add", reflected=True)

    def __sub__(self, other):
        return self._combine(other, _op.sub, "subtract")

    def __rsub__(self, other):
        return self._combine(other, _op.sub, "subtract", reflected=True)

    def __mul__(self, other):
        return self._combine(other, _op.mul, "multiply")

    def __rmul__(self, other):
        return self._combine(other, _op.mul, "multiply", reflected=True)

    def __truediv__(self, other):
        return self._combine(other, _op.truediv, "divide")

    def __rtruediv__(self, other):
        return self._combine(other, _op.truediv, "divide", reflected=True)

    def __neg__(self):
        return type(self)(- self.value)

    def __eq__(self, other):
        if not isinstance(other, OperatorValue) or other.kind != self.kind:
            return False
        return bool(numpy.array_equal(numpy.asarray(self.value), numpy.asarray(other.value)))

    __hash__ = None

    def __repr__(self):
        return f"{self.kind}({self})"


class Scalar(OperatorValue):
    kind = "Scalar"

    def __init__(self, value):
        # Scalars stay python floats, they are accumulated every sweep
        super().__init__(float(value))

    @property
    def is_scalar(self):
        return True

    def get_scalar(self):
        return self.value

    def __str__(self):
        return f"{self.value}"


class Vector(OperatorValue):
    kind = "Vector"

    def __init__(self, value):
        super().__init__(numpy.asarray(value).reshape((-1,)))

    def get_vector(self):
        return self.value

    def __str__(self):
        return " ".join(f"{v}" for v in self.value.tolist())


class Matrix(OperatorValue):
    kind = "Matrix"

    def __init__(self, value):
        value = numpy.asarray(value)
        if value.ndim != 2:
            raise ConfigurationError(f"Matrix operator values must be 2D, got shape {value.shape}")
        super().__init__(value)

    def get_matrix(self):
        return self.value

    def __str__(self):
        return "\n".join(" ".join(f"{v}" for v in row) for row in self.value.tolist())


def sum_values(values):
    """Fold a sequence of OperatorValues with +, starting from Scalar(0)."""
    total = Scalar(0.)
    for v in values:
        total = total + v
    return total


class Operator(ABC):
    """
    A quantum mechanical operator.  `act_on` returns O psi (not divided by
    psi) at the configuration cfg.
    """

    @abstractmethod
    def act_on(self, wf, cfg):
        pass
