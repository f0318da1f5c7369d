from jax import random


def initialize_configuration(key, n_particles, n_dim=3, dtype="float64"):
    """
    Random starting configuration, every coordinate uniform in [-1, 1).
    """
    size = (n_particles, n_dim)
    return random.uniform(key, shape=size, dtype=dtype, minval=-1., maxval=1.)
