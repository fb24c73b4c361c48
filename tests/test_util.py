import numpy as np
import pytest

from mmdp.tolerance import EPS, eq, geq, gr, le, leq, neq
from mmdp.util import ReservoirSampler, TabuList, Timer, make_rng


def test_fresh_tabu_list_blocks_nothing():
    tl = TabuList(5, 3)
    assert not any(tl.is_tabu(u) for u in range(5))
    assert not tl.tabu_mask().any()


@pytest.mark.parametrize('tenure', [0, 1, 3, 7])
def test_touched_vertex_is_tabu_for_tenure_iterations(tenure):
    tl = TabuList(4, tenure)
    tl.advance_iter()
    tl.add(2)
    for k in range(tenure + 3):
        assert tl.is_tabu(2) == (k < tenure)
        assert tl.tabu_mask()[2] == (k < tenure)
        assert not tl.is_tabu(1)
        tl.advance_iter()


def test_tabu_reset_clears_every_stamp():
    tl = TabuList(3, 5)
    tl.add(0)
    tl.add(1)
    tl.advance_iter()
    assert tl.is_tabu(0) and tl.is_tabu(1)
    assert not tl.is_tabu(2)
    tl.reset()
    assert tl.iteration == 1
    assert not tl.tabu_mask().any()


def test_reservoir_is_uniform():
    rng = np.random.default_rng(1)
    k, trials = 4, 20000
    counts = np.zeros(k)
    for _ in range(trials):
        rs = ReservoirSampler(rng)
        chosen = -1
        for i in range(k):
            if rs.consider():
                chosen = i
        counts[chosen] += 1
    np.testing.assert_allclose(counts / trials, np.full(k, 1.0 / k), atol=0.02)


def test_reservoir_always_takes_first_candidate():
    rs = ReservoirSampler(np.random.default_rng(0))
    assert rs.consider()


def test_timer_limits():
    assert Timer(0).timed_out()
    assert Timer(-1.0).timed_out()
    unlimited = Timer(None)
    assert not unlimited.timed_out()
    assert unlimited.seconds_left() == float('inf')
    assert not Timer(3600).timed_out()


def test_make_rng_is_reproducible_for_non_zero_seed():
    assert make_rng(42).random() == make_rng(42).random()
    assert isinstance(make_rng(0), np.random.Generator)


def test_tolerant_comparisons():
    a = 1.0
    assert eq(a, a + EPS / 2)
    assert not neq(a, a + EPS / 2)
    assert not gr(a + EPS / 2, a)
    assert gr(a + 2 * EPS, a)
    assert le(a, a + 2 * EPS)
    assert not le(a, a + EPS / 2)
    assert leq(a, a + EPS / 2)
    assert geq(a + EPS / 2, a)
