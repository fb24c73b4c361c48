from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit

from mmdp.constructive import heaviest_edge, insertion_order
from mmdp.instance import Instance
from mmdp.solution import Solution
from mmdp.tolerance import EPS, gr
from mmdp.util import TabuList


# --- Numba JIT Compiled Functions ---

@njit(cache=True)
def _numba_best_move(has: np.ndarray, cost: np.ndarray, total_cost: float, size: int,
                     stamps: np.ndarray, tenure: int, iteration: int,
                     first: int, forced: int, min_size: int) -> tuple:
    """
    Scans every add/remove move and returns (vertex, objective after the move, tabu_blocked).

    Vertices below ``first`` and ``forced`` are never moved. A removal that would leave fewer
    than ``min_size`` units is illegal. Ties within EPS keep the lowest index. ``vertex`` is -1
    when no move is available; ``tabu_blocked`` counts the candidates skipped for being tabu.
    """
    n = has.shape[0]
    best_i = -1
    best_obj = -np.inf
    blocked = 0
    for i in range(first, n):
        if i == forced:
            continue
        if stamps[i] + tenure > iteration:
            blocked += 1
            continue
        if has[i]:
            if size - 1 < min_size:
                continue
            obj_i = (total_cost - cost[i]) / (size - 1)
        else:
            obj_i = (total_cost + cost[i]) / (size + 1)
        if obj_i > best_obj + EPS:
            best_obj = obj_i
            best_i = i
    return best_i, best_obj, blocked


class TabuSearch:
    def __init__(self, inst: Instance, tenure: int, max_iter_without_improvement: int,
                 force_in: Optional[int] = None,
                 core: Optional[Tuple[Sequence[int], float]] = None,
                 min_size: int = 1):
        """
        Best-move tabu search over single-vertex add/remove moves.

        Args:
            inst: Instance the search runs on (for a decomposition step, the sub-instance).
            tenure: Tabu tenure, in iterations.
            max_iter_without_improvement: Stop after this many consecutive iterations that do
                not improve the incumbent.
            force_in: Optional vertex that is added if absent and never removed.
            core: Optional (original core vertices, their internal pairwise cost). Slot 0 of
                ``inst`` then stands for the whole core: it must be in the starting solution,
                it is never moved, and it counts as ``len(core)`` vertices.
            min_size: Smallest number of units a removal may leave (1 or 2).
        """
        if force_in is not None and not 0 <= force_in < inst.n:
            raise IndexError(f"Forced vertex {force_in} out of range for {inst.n} vertices.")
        if min_size < 1:
            raise ValueError("min_size must be at least 1.")
        self.inst = inst
        self.tenure = tenure
        self.max_iter_without_improvement = max_iter_without_improvement
        self.force_in = force_in
        self.core = core
        self.min_size = min_size

        self.shadow: Optional[Solution] = None
        self.tabu = TabuList(inst.n, tenure)
        self.best: Optional[Solution] = None
        self.iterations = 0
        self._last_blocked = 0

    def start(self, s: Solution) -> None:
        """Builds the working (shadow) state from ``s`` and makes it the incumbent."""
        shadow = Solution(self.inst)
        if s.size == 0:
            if self.inst.n == 1:
                shadow.add(0)
            else:
                bi, bj = heaviest_edge(self.inst)
                shadow.add(bi)
                shadow.add(bj)
        else:
            for v in s.members:
                shadow.add(v)

        if self.force_in is not None and not shadow.has[self.force_in]:
            shadow.add(self.force_in)
        if shadow.size < self.min_size:
            for v in insertion_order(self.inst, shadow, self.min_size - shadow.size):
                shadow.add(v)

        if self.core is not None:
            core_vertices, core_cost = self.core
            shadow.aggregate(len(core_vertices), core_cost)

        self.shadow = shadow
        self.tabu.reset()
        self.iterations = 0
        self.best = s
        s.assign(shadow)

    def step(self) -> Optional[int]:
        """
        Applies the best non-tabu move, even a worsening one.

        Returns:
            The moved vertex, or None if no move could be applied.
        """
        shadow = self.shadow
        first = 1 if self.core is not None else 0
        forced = self.force_in if self.force_in is not None else -1
        best_i, _, blocked = _numba_best_move(
            shadow.has, shadow.cost, shadow.total_cost, shadow.size,
            self.tabu.stamps, self.tabu.tenure, self.tabu.iteration,
            first, forced, self.min_size
        )
        self._last_blocked = blocked
        self.tabu.advance_iter()
        self.iterations += 1
        if best_i < 0:
            return None

        best_i = int(best_i)
        if shadow.has[best_i]:
            shadow.remove(best_i)
        else:
            shadow.add(best_i)
        self.tabu.add(best_i)
        return best_i

    def run(self) -> Solution:
        iter_w = 0
        while True:
            moved = self.step()
            if moved is None:
                # Only tabu entries can unblock the search; they expire as iterations advance
                if self._last_blocked == 0:
                    break
                continue

            if gr(self.shadow.objective(), self.best.objective()):
                self.best.assign(self.shadow)
                iter_w = 0
            else:
                iter_w += 1
                if iter_w >= self.max_iter_without_improvement:
                    break
        return self.best

    def solve(self, s: Solution) -> Solution:
        """
        Runs the search from ``s`` and stores the best solution found back into ``s``.

        An empty ``s`` is seeded with the endpoints of the heaviest edge.
        """
        self.start(s)
        return self.run()


def ts(inst: Instance, s: Solution, tenure: int, max_iter_without_improvement: int,
       force_in: Optional[int] = None,
       core: Optional[Tuple[Sequence[int], float]] = None,
       min_size: int = 1) -> Solution:
    """Functional form of ``TabuSearch(...).solve(s)``."""
    search = TabuSearch(inst, tenure, max_iter_without_improvement,
                        force_in=force_in, core=core, min_size=min_size)
    return search.solve(s)


__all__ = ['TabuSearch', 'ts']
