from typing import Optional, Tuple

import numpy as np

from mmdp.constructive import insertion_order, removal_order
from mmdp.instance import Instance, SubInstance, pair_sum
from mmdp.solution import Solution
from mmdp.tabu_search import ts
from mmdp.tolerance import gr
from mmdp.util import TabuList


def create_subinstance(inst: Instance, s: Solution, szin: int, szout: int, alpha: float,
                       tabu: Optional[TabuList] = None,
                       rng: Optional[np.random.Generator] = None) -> SubInstance:
    """
    Compresses ``inst`` around ``s`` into a sub-instance with ``1 + |free|`` slots.

    ``szin`` members (``removal_order``) and ``szout`` non-members (``insertion_order``), both
    tabu-filtered, become free slots; every other member of ``s`` is frozen into the core, slot 0.
    The distance from slot 0 to a free slot is the sum of distances from that vertex to every core
    member, and the core's internal cost is kept as a single scalar.
    """
    if s.size == 0:
        raise ValueError("Cannot decompose around an empty solution.")
    # at least one member stays in the core
    szin = min(szin, s.size - 1)

    out_rlx = insertion_order(inst, s, szout, alpha, tabu, rng)
    in_rlx = removal_order(inst, s, szin, alpha, tabu, rng)
    free = in_rlx + out_rlx

    is_free = np.zeros(inst.n, dtype=np.bool_)
    is_free[free] = True
    core = [v for v in s.members if not is_free[v]]
    core_cost = pair_sum(inst.d, core)

    free_idx = np.array(free, dtype=np.int64)
    core_idx = np.array(core, dtype=np.int64)
    m = 1 + len(free)
    d = np.zeros((m, m), dtype=np.float64)
    d[1:, 1:] = inst.d[np.ix_(free_idx, free_idx)]
    links = inst.d[np.ix_(core_idx, free_idx)].sum(axis=0)
    d[0, 1:] = links
    d[1:, 0] = links

    mapping = np.concatenate([np.array([-1], dtype=np.int64), free_idx])
    return SubInstance(Instance(d), core, core_cost, mapping, len(in_rlx))


class NeighborhoodDecomposer:
    def __init__(self, inst: Instance, szin: int = 15, szout: int = 15, tries: int = 1,
                 alpha: float = 0.0, tenure: int = 1, max_iter_without_improvement: int = 1,
                 min_size: int = 1):
        """
        Large-neighborhood step: searches a bounded sub-instance for multi-vertex moves.

        Args:
            inst: Problem instance.
            szin: Members of the current solution freed in each sub-instance.
            szout: Non-members freed in each sub-instance.
            tries: Independent sub-instances drawn per call; stops early once one improves.
            alpha: Randomization of the free-set selection.
            tenure: Tabu tenure of the inner searches.
            max_iter_without_improvement: Budget of the inner searches.
            min_size: Smallest solution size the inner searches may produce.
        """
        self.inst = inst
        self.szin = szin
        self.szout = szout
        self.tries = tries
        self.alpha = alpha
        self.tenure = tenure
        self.max_iter_without_improvement = max_iter_without_improvement
        self.min_size = min_size

    def search(self, s: Solution, tabu: Optional[TabuList] = None,
               rng: Optional[np.random.Generator] = None) -> Tuple[Solution, int]:
        """
        Runs one decomposition iteration around ``s``.

        For every free non-member slot, a tabu search over the sub-instance starts from
        {core, candidate} with the candidate forced in. The best sub-solution over all candidates
        and tries is mapped back to the original instance.

        Returns:
            (new solution, index of the try that produced it). When no candidate exists, the new
            solution is a copy of ``s``.
        """
        best_sub: Optional[SubInstance] = None
        best_t: Optional[Solution] = None
        nb_imp = 0
        for tr in range(self.tries):
            sub = create_subinstance(self.inst, s, self.szin, self.szout, self.alpha, tabu, rng)
            for i in sub.out_slots():
                t = Solution(sub.instance, [0, i])
                ts(sub.instance, t, self.tenure, self.max_iter_without_improvement,
                   force_in=i, core=(sub.core, sub.core_cost), min_size=self.min_size)
                if best_t is None or gr(t.objective(), best_t.objective()):
                    best_sub = sub
                    best_t = t
                    nb_imp = tr
            if best_t is not None and gr(best_t.objective(), s.objective()):
                # improved s, don't draw another neighborhood
                break

        if best_t is None:
            return s.copy(), nb_imp

        new_s = Solution(self.inst)
        new_s.members = best_sub.to_original(best_t.members)
        new_s.recompute_from_members()
        return new_s, nb_imp


__all__ = ['create_subinstance', 'NeighborhoodDecomposer']
