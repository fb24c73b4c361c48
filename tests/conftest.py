import itertools

import numpy as np
import pytest

from mmdp.generators import mdp_type_i
from mmdp.instance import Instance


def _pair_total(inst, members):
    return sum(inst.dist(i, j) for i, j in itertools.combinations(members, 2))


def _mean(inst, members):
    return _pair_total(inst, members) / len(members) if members else 0.0


def _best_subset(inst, sizes=None):
    """Brute-force best mean dispersion over all subsets (of the given sizes)."""
    if sizes is None:
        sizes = range(1, inst.n + 1)
    best, best_members = -np.inf, None
    for k in sizes:
        for comb in itertools.combinations(range(inst.n), k):
            value = _mean(inst, comb)
            if value > best:
                best, best_members = value, comb
    return best, best_members


@pytest.fixture
def pair_total():
    return _pair_total


@pytest.fixture
def mean_dispersion():
    return _mean


@pytest.fixture
def best_subset():
    return _best_subset


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def small_instance():
    return mdp_type_i(12, np.random.default_rng(7))


@pytest.fixture
def four_vertex_instance():
    # 0 and 3 are the farthest pair; 1 and 2 sit between them and close to each other
    d = np.array([
        [0.0, 4.0, 4.0, 10.0],
        [4.0, 0.0, 1.0, 4.0],
        [4.0, 1.0, 0.0, 4.0],
        [10.0, 4.0, 4.0, 0.0],
    ])
    return Instance(d)


@pytest.fixture
def star_instance():
    # only distances from vertex 0 are non-zero, so marginal costs w.r.t. {0} never change
    d = np.zeros((6, 6))
    d[0, :] = [0.0, 5.0, 3.0, 9.0, 1.0, 7.0]
    d[:, 0] = d[0, :]
    return Instance(d)
