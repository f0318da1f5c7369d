import jax.numpy as numpy

from jax_vmc.errors import ConfigurationError


class Orbital:
    """
    Single-particle orbital: a linear combination of the functions in a
    basis set, with coefficients indexed as coeffs[center, width].
    """

    def __init__(self, coeffs, basis):
        coeffs = numpy.asarray(coeffs, dtype=float)
        if coeffs.size != basis.size:
            raise ConfigurationError(
                f"Orbital has {coeffs.size} coefficients but the basis has {basis.size} functions")

        self.basis  = basis
        self.coeffs = coeffs.reshape(basis.shape)

    def vgl(self, pos):
        return self.basis.linear_combination(pos, self.coeffs)

    def vgl_many(self, positions):
        return self.basis.linear_combination_many(positions, self.coeffs)

    def value(self, pos):
        return self.vgl(pos).value

    def gradient(self, pos):
        return self.vgl(pos).gradient

    def laplacian(self, pos):
        return self.vgl(pos).laplacian

    def basis_values(self, positions):
        """Every basis function at every position, shape (n_positions, basis.size)."""
        values = self.basis.evaluate_many(positions).value
        return values.reshape((values.shape[0], -1))

    def __repr__(self):
        return f"Orbital(coeffs={self.coeffs.tolist()}, basis={self.basis})"
