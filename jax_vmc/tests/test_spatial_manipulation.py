import jax.numpy as numpy
from jax import random

import pytest

from jax_vmc.spatial import generate_pairs, pair_distances, point_distances
from jax_vmc.spatial import initialize_configuration


@pytest.mark.parametrize("n", [1, 2, 5])
def test_generate_pairs(n):

    pairs = generate_pairs(n)

    assert pairs.shape == (n * (n - 1) // 2, 2)
    assert pairs.dtype == numpy.int32
    # Every pair once, always ordered:
    assert (pairs[:, 0] < pairs[:, 1]).all()
    assert len(set(map(tuple, pairs.tolist()))) == pairs.shape[0]


def test_pair_distances(n_particles, seed):

    if n_particles < 2:
        pytest.skip("Need two particles for a pair")

    key = random.PRNGKey(int(seed))
    x = initialize_configuration(key, n_particles)

    pairs = generate_pairs(n_particles)
    r_ij = pair_distances(x, pairs)

    assert r_ij.shape == (pairs.shape[0],)
    for p, (i, j) in enumerate(pairs.tolist()):
        assert numpy.allclose(r_ij[p], numpy.linalg.norm(x[i] - x[j]))


def test_point_distances():

    x = numpy.asarray([[0., 0., 0.], [3., 4., 0.]])
    points = numpy.asarray([[0., 0., 0.], [0., 0., 1.]])

    r = point_distances(x, points)

    assert r.shape == (2, 2)
    assert numpy.allclose(r, numpy.asarray([[0., 1.], [5., numpy.sqrt(26.)]]))
