import jax.numpy as numpy

from jax import jit, vmap


def generate_pairs(n_particles):
    """All index pairs (i, j) with i < j, as an int32 array of shape (n_pairs, 2)."""
    pair_i = []
    pair_j = []
    i = 0
    while i < n_particles:
        for j in range(i + 1, n_particles):
            pair_i.append(i)
            pair_j.append(j)
        i += 1

    pair_i = numpy.asarray(pair_i, dtype="int32")
    pair_j = numpy.asarray(pair_j, dtype="int32")

    pairs =  numpy.stack([pair_i, pair_j], axis=1)
    return pairs


@jit
def pair_distance(x, pair):
    # Difference vector between the two particles:
    x_ij = x[pair[0],:] - x[pair[1],:]
    # Take the magnitude of that difference across dimensions
    return numpy.sqrt(numpy.sum(x_ij**2))

# Vectorize over the pairs only:
pair_distances = jit(vmap(pair_distance, in_axes=(None, 0)))


@jit
def point_distances(x, points):
    """Distance from every particle (n, 3) to every point (m, 3), shape (n, m)."""
    diff = x[:, None, :] - points[None, :, :]
    return numpy.sqrt(numpy.sum(diff**2, axis=-1))
