
#
# Max-mean dispersion matheuristic: multistart + decomposition + shake
#

from typing import Optional

import numpy as np

from mmdp.constructive import insertion_order, removal_order
from mmdp.decomposition import NeighborhoodDecomposer
from mmdp.exact import ExactSolver, exact
from mmdp.instance import Instance
from mmdp.options import Options
from mmdp.reporting import ConsoleReporter, Progress, Reporter
from mmdp.solution import Solution
from mmdp.tabu_search import ts
from mmdp.util import TabuList, Timer, make_rng


def shake(inst: Instance, s: Solution, shake_size: int, alpha: float,
          rng: np.random.Generator) -> None:
    """Drops ``shake_size`` members and adds as many non-members, both picked alpha-greedily."""
    in_rlx = removal_order(inst, s, shake_size, alpha, None, rng)
    out_rlx = insertion_order(inst, s, shake_size, alpha, None, rng)
    dropped = set(in_rlx)
    s.members = [v for v in s.members if v not in dropped] + out_rlx
    s.recompute_from_members()


def assign_and_update_tabu(s: Solution, new_s: Solution, tabu: TabuList) -> None:
    """Assigns ``new_s`` to ``s`` and touches every vertex that left or joined."""
    changed = set(s.members) ^ set(new_s.members)
    for v in changed:
        tabu.add(v)
    s.assign(new_s)


def matheuristic(inst: Instance, options: Optional[Options] = None,
                 rng: Optional[np.random.Generator] = None,
                 reporter: Optional[Reporter] = None,
                 timer: Optional[Timer] = None,
                 exact_solver=None) -> Solution:
    """
    Runs the multistart decomposition matheuristic.

    Each round seeds a solution from an unused random vertex, then repeatedly applies the
    neighborhood decomposer, marking changed vertices tabu. When the round incumbent stagnates
    the working solution is reset to it and shaken. Small instances are solved exactly instead.

    Args:
        inst: Problem instance.
        options: Run configuration.
        rng: Random generator; by default one seeded from ``options.seed``.
        reporter: Progress sink; by default prints according to ``options.verbose``.
        timer: Global time budget; by default ``options.time_limit`` from now.
        exact_solver: Callable ``(instance, size) -> ExactResult`` for small instances.

    Returns:
        The best solution found.
    """
    if options is None:
        options = Options()
    if rng is None:
        rng = make_rng(options.seed)
    if reporter is None:
        reporter = ConsoleReporter(options.verbose)
    if timer is None:
        timer = Timer(options.time_limit)

    if inst.n <= options.decomposition_threshold:
        reporter.exact_started(inst.n)
        if exact_solver is None:
            exact_solver = ExactSolver(options.exact_time_limit)
        best = exact(inst, exact_solver, reporter)
        reporter.finished(best.objective(), best.size, timer.elapsed())
        return best

    decomposer = NeighborhoodDecomposer(
        inst,
        szin=options.sz_in,
        szout=options.sz_out,
        tries=options.decomposition_tries,
        alpha=options.decomposition_alpha,
        tenure=options.subproblem_tenure,
        max_iter_without_improvement=options.subproblem_max_iter,
        min_size=options.min_solution_size,
    )

    best: Optional[Solution] = None
    it_outer = 0
    for start in rng.permutation(inst.n):
        if it_outer >= options.max_rounds or timer.timed_out():
            break
        it_outer += 1
        start = int(start)

        s = Solution(inst, [start])
        ts(inst, s, 1, 1, min_size=options.min_solution_size)
        reporter.round_started(it_outer, start, s.size, s.objective(),
                               best.objective() if best is not None else 0.0)

        round_timer = Timer(options.round_time_limit)
        shake_size = int(s.size * options.shake_rate)
        shakes = 0
        iters_wo_impr = 0
        it_inner = 0
        inc = s.copy()  # best solution of this round
        tabu = TabuList(inst.n, options.tabu_tenure)
        if best is None or inc.better(best):
            best = inc.copy()
            reporter.new_best(best.objective(), best.size)

        while not timer.timed_out() and not round_timer.timed_out():
            it_inner += 1
            new_s, nb_imp = decomposer.search(s, tabu, rng)
            improved_last_s = new_s.better(s)

            assign_and_update_tabu(s, new_s, tabu)
            tabu.advance_iter()

            improved_inc = s.better(inc)
            reporter.iteration(Progress(
                round=it_outer, iteration=it_inner, size=s.size, objective=s.objective(),
                incumbent=inc.objective(), best=best.objective(),
                iters_without_improvement=iters_wo_impr, shakes=shakes,
                neighborhood=nb_imp, elapsed=timer.elapsed(),
            ))

            if not improved_inc:
                if options.stagnation == 'round' or not improved_last_s:
                    iters_wo_impr += 1
                if iters_wo_impr > options.max_iter_without_improvement:
                    shakes += 1
                    if shakes > options.max_shakes:
                        break
                    # restart from the round incumbent
                    s = inc.copy()
                    before = s.objective()
                    shake(inst, s, shake_size, options.shake_alpha, rng)
                    tabu.reset()
                    iters_wo_impr = 0
                    reporter.shaken(it_outer, shakes, before, s.objective())
            else:
                iters_wo_impr = 0

            if inc.consider_replace(s):
                if best.consider_replace(inc):
                    shakes = 0
                    reporter.new_best(best.objective(), best.size)

        reporter.round_finished(it_outer, inc.objective(), inc.size, it_inner)

    if best is None:
        best = Solution(inst)
    reporter.finished(best.objective(), best.size, timer.elapsed())
    return best


class MMDPSolver:
    def __init__(self, distance_matrix: np.ndarray, **options):
        """
        Initialize the max-mean dispersion solver.

        Args:
            distance_matrix: Numpy array of shape (n, n) containing symmetric pairwise distances.
            **options: Any field of ``Options`` (time_limit, seed, sz_in, ...).
        """
        self.distance_matrix = distance_matrix
        self.instance = Instance(distance_matrix)
        self.options = Options(**options)
        self.best: Optional[Solution] = None

    def solve(self, reporter: Optional[Reporter] = None) -> np.ndarray:
        """
        Solve the Max-Mean Dispersion Problem.

        Returns:
            A sorted numpy array with the indices of the selected vertices.
        """
        rng = make_rng(self.options.seed)
        self.best = matheuristic(self.instance, self.options, rng=rng, reporter=reporter)
        return self.best.sorted_members()


__all__ = ['matheuristic', 'shake', 'assign_and_update_tabu', 'MMDPSolver']
