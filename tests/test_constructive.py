import numpy as np
import pytest

from mmdp.constructive import heaviest_edge, insertion_order, removal_order
from mmdp.solution import Solution
from mmdp.util import TabuList


def test_greedy_insertion_follows_marginal_costs(star_instance):
    s = Solution(star_instance, [0])
    assert insertion_order(star_instance, s, 5) == [3, 5, 1, 2, 4]


def test_insertion_is_capped_by_non_members(star_instance):
    s = Solution(star_instance, [0, 1, 2])
    assert insertion_order(star_instance, s, 10) == [3, 5, 4]
    full = Solution(star_instance, range(6))
    assert insertion_order(star_instance, full, 3) == []


def test_insertion_skips_tabu_vertices(star_instance):
    s = Solution(star_instance, [0])
    tabu = TabuList(star_instance.n, 5)
    tabu.add(3)
    assert insertion_order(star_instance, s, 5, tabu=tabu) == [5, 1, 2, 4]


def test_insertion_from_empty_starts_with_heaviest_edge(star_instance):
    assert heaviest_edge(star_instance) == (0, 3)
    assert insertion_order(star_instance, Solution(star_instance), 2) == [0, 3]
    assert insertion_order(star_instance, Solution(star_instance), 3) == [0, 3, 5]


def test_orders_do_not_modify_solution(small_instance):
    s = Solution(small_instance, [1, 4, 6, 9])
    members = list(s.members)
    cost = s.cost.copy()
    total = s.total_cost
    insertion_order(small_instance, s, 4, 0.5, None, np.random.default_rng(0))
    removal_order(small_instance, s, 3, 0.5, None, np.random.default_rng(0))
    assert s.members == members
    np.testing.assert_array_equal(s.cost, cost)
    assert s.total_cost == total


def test_greedy_removal_drops_weakest_member_first(star_instance):
    s = Solution(star_instance, [0, 1, 2, 3])
    # costs to remove: 0 -> 17, 1 -> 5, 2 -> 3, 3 -> 9; after dropping 2 and 1, 0 and 3 tie
    assert removal_order(star_instance, s, 3) == [2, 1, 0]


def test_removal_skips_tabu_members(star_instance):
    s = Solution(star_instance, [0, 1, 2, 3])
    tabu = TabuList(star_instance.n, 2)
    tabu.add(2)
    assert removal_order(star_instance, s, 4, tabu=tabu) == [1, 3, 0]


def test_randomized_pick_stays_in_window(star_instance):
    s = Solution(star_instance, [0])
    rng = np.random.default_rng(5)
    firsts = set()
    for _ in range(200):
        order = insertion_order(star_instance, s, 1, 0.5, None, rng)
        firsts.add(order[0])
    # within 50% of the best marginal cost 9: vertices with cost 9, 7 and 5
    assert firsts == {3, 5, 1}


def test_alpha_validation(star_instance):
    s = Solution(star_instance, [0])
    with pytest.raises(ValueError):
        insertion_order(star_instance, s, 2, 0.3)
    with pytest.raises(ValueError):
        removal_order(star_instance, s, 1, 1.5, None, np.random.default_rng(0))
