from typing import List, Optional

import numpy as np
from numba import njit

from mmdp.instance import Instance
from mmdp.solution import Solution
from mmdp.tolerance import EPS
from mmdp.util import ReservoirSampler, TabuList


@njit(cache=True)
def _numba_heaviest_edge(d: np.ndarray, blocked: np.ndarray) -> tuple:
    """
    Returns the pair (i, j), i < j, of non-blocked vertices with the largest distance; ties keep
    the first pair found. Returns (-1, -1) when fewer than two vertices are available.
    """
    n = d.shape[0]
    bi = -1
    bj = -1
    best = -np.inf
    for i in range(n):
        if blocked[i]:
            continue
        for j in range(i + 1, n):
            if blocked[j]:
                continue
            if d[i, j] > best:
                best = d[i, j]
                bi = i
                bj = j
    return bi, bj


def heaviest_edge(inst: Instance, blocked: Optional[np.ndarray] = None) -> tuple:
    if blocked is None:
        blocked = np.zeros(inst.n, dtype=np.bool_)
    bi, bj = _numba_heaviest_edge(inst.d, blocked)
    return int(bi), int(bj)


def _within(gap: float, best: float, alpha: float) -> bool:
    """Whether a candidate ``gap`` away from the best value is inside the relative window."""
    if abs(best) <= EPS:
        return gap <= EPS
    return gap / abs(best) < alpha


def _check_alpha(alpha: float, rng) -> None:
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must be in [0, 1], got {alpha}.")
    if alpha > 0.0 and rng is None:
        raise ValueError("A random generator is required when alpha > 0.")


def insertion_order(inst: Instance, s: Solution, sz: int, alpha: float = 0.0,
                    tabu: Optional[TabuList] = None,
                    rng: Optional[np.random.Generator] = None) -> List[int]:
    """
    Semi-greedy order in which to add up to ``sz`` non-members of ``s``.

    At each step the vertex with the largest sum of distances to ``s`` plus the vertices already
    picked is taken; with ``alpha > 0`` the pick is uniform among the vertices whose marginal cost
    is within a relative ``alpha`` of that maximum. Tabu vertices are never picked. When ``s`` is
    empty the order starts with the endpoints of the heaviest edge. ``s`` is not modified.

    Args:
        inst: Problem instance.
        s: Current solution.
        sz: Number of vertices to pick.
        alpha: Randomization factor in [0, 1]; 0 is purely greedy.
        tabu: Optional tabu list marking ineligible vertices.
        rng: Random generator, required when ``alpha > 0``.

    Returns:
        The picked vertices, in pick order.
    """
    _check_alpha(alpha, rng)
    sz = min(inst.n, s.size + sz) - s.size
    if s.size >= inst.n or sz <= 0:
        return []

    picked = s.has.copy()
    if tabu is not None:
        picked |= tabu.tabu_mask()
    cost_to_add = s.cost.copy()
    ans: List[int] = []

    def add(v):
        picked[v] = True
        cost_to_add[:] += inst.d[v]
        ans.append(v)

    if s.size == 0:
        bi, bj = heaviest_edge(inst, picked)
        if bi < 0:
            free = np.flatnonzero(~picked)
            if free.size > 0:
                add(int(free[0]))
            return ans
        add(bi)
        if sz >= 2:
            add(bj)

    while len(ans) < sz:
        eligible = ~picked
        if not eligible.any():
            break
        masked = np.where(eligible, cost_to_add, -np.inf)
        best_cost = masked.max()
        j = int(np.argmax(masked >= best_cost - EPS))
        if alpha > 0.0:
            rs = ReservoirSampler(rng)
            for i in range(inst.n):
                if eligible[i] and _within(best_cost - cost_to_add[i], best_cost, alpha) and rs.consider():
                    j = int(i)
        add(j)
    return ans


def removal_order(inst: Instance, s: Solution, sz: int, alpha: float = 0.0,
                  tabu: Optional[TabuList] = None,
                  rng: Optional[np.random.Generator] = None) -> List[int]:
    """
    Same as ``insertion_order``, but for removal: ``sz`` is the number of members to drop, and
    the member contributing least to the remaining ones goes first.
    """
    _check_alpha(alpha, rng)
    sz = min(sz, s.size)
    if sz <= 0:
        return []

    members = np.array(s.members, dtype=np.int64)
    eligible = np.ones(members.size, dtype=np.bool_)
    if tabu is not None:
        eligible &= ~tabu.tabu_mask()[members]
    cost_to_remove = s.cost.copy()
    ans: List[int] = []

    while len(ans) < sz:
        if not eligible.any():
            break
        masked = np.where(eligible, cost_to_remove[members], np.inf)
        best_cost = masked.min()
        pos = int(np.argmax(masked <= best_cost + EPS))
        if alpha > 0.0:
            rs = ReservoirSampler(rng)
            for p in range(members.size):
                if eligible[p] and _within(cost_to_remove[members[p]] - best_cost, best_cost, alpha) and rs.consider():
                    pos = int(p)
        j = int(members[pos])
        eligible[pos] = False
        cost_to_remove -= inst.d[j]
        ans.append(j)
    return ans


__all__ = ['insertion_order', 'removal_order', 'heaviest_edge']
