import numpy as np
import pytest

from mmdp.decomposition import create_subinstance
from mmdp.generators import mdp_type_ii
from mmdp.instance import Instance
from mmdp.solution import Solution
from mmdp.tabu_search import TabuSearch, ts


@pytest.fixture
def flip_instance():
    # the only non-zero distance is d(0, 1)
    d = np.zeros((3, 3))
    d[0, 1] = d[1, 0] = 10.0
    return Instance(d)


@pytest.fixture
def repulsive_instance():
    d = -np.ones((3, 3))
    np.fill_diagonal(d, 0.0)
    return Instance(d)


def test_start_from_empty_uses_heaviest_edge(four_vertex_instance):
    search = TabuSearch(four_vertex_instance, 1, 5)
    s = Solution(four_vertex_instance)
    search.start(s)
    assert sorted(s.members) == [0, 3]
    assert s.objective() == pytest.approx(5.0)


def test_converges_to_best_average_subset(four_vertex_instance, best_subset):
    s = ts(four_vertex_instance, Solution(four_vertex_instance), 1, 5)
    best, best_members = best_subset(four_vertex_instance)
    assert best == pytest.approx(6.75)
    assert sorted(s.members) == list(best_members)
    assert s.objective() == pytest.approx(best)


def test_recently_moved_vertex_is_not_moved_back(flip_instance):
    search = TabuSearch(flip_instance, 1, 10)
    search.start(Solution(flip_instance, [0, 1]))
    assert search.step() == 2
    # removing 2 again would be the best move, but it is tabu for one iteration
    assert search.step() == 0


def test_without_tenure_the_move_is_undone(flip_instance):
    search = TabuSearch(flip_instance, 0, 10)
    search.start(Solution(flip_instance, [0, 1]))
    assert search.step() == 2
    assert search.step() == 2


def test_forced_vertex_stays_in():
    inst = mdp_type_ii(10, np.random.default_rng(2))
    s = ts(inst, Solution(inst, [1, 2]), 3, 5, force_in=7)
    assert 7 in s


def test_min_size_policy(repulsive_instance):
    s = ts(repulsive_instance, Solution(repulsive_instance, [0, 1]), 2, 3, min_size=1)
    assert s.size == 1
    assert s.objective() == 0.0

    s = ts(repulsive_instance, Solution(repulsive_instance, [0, 1]), 2, 3, min_size=2)
    assert s.size == 2
    assert s.objective() == pytest.approx(-0.5)

    s = ts(repulsive_instance, Solution(repulsive_instance, [2]), 2, 3, min_size=2)
    assert s.size == 2


def test_single_vertex_instance_terminates():
    inst = Instance(np.zeros((1, 1)))
    s = ts(inst, Solution(inst), 1, 1)
    assert s.members == [0]


def test_incumbent_state_is_consistent(small_instance, mean_dispersion):
    s = ts(small_instance, Solution(small_instance, [3]), 2, 20)
    assert s.objective() == pytest.approx(mean_dispersion(small_instance, s.members))
    assert s.objective() >= 0.0


def test_core_slot_is_never_moved(small_instance, mean_dispersion):
    s = Solution(small_instance, [0, 2, 4, 6, 8, 10])
    sub = create_subinstance(small_instance, s, 2, 3, 0.0)
    for i in sub.out_slots():
        t = Solution(sub.instance, [0, i])
        ts(sub.instance, t, 1, 5, force_in=i, core=(sub.core, sub.core_cost))
        assert 0 in t
        assert i in t
        original = sub.to_original(t.members)
        assert t.size == len(original)
        assert t.objective() == pytest.approx(mean_dispersion(small_instance, original))
