from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

# You must install ortools first: pip install ortools
from ortools.linear_solver import pywraplp

from mmdp.instance import Instance
from mmdp.solution import Solution
from mmdp.tolerance import gr

STATUS_NAMES = {
    pywraplp.Solver.OPTIMAL: 'OPTIMAL',
    pywraplp.Solver.FEASIBLE: 'FEASIBLE',
    pywraplp.Solver.INFEASIBLE: 'INFEASIBLE',
    pywraplp.Solver.UNBOUNDED: 'UNBOUNDED',
    pywraplp.Solver.ABNORMAL: 'ABNORMAL',
    pywraplp.Solver.NOT_SOLVED: 'NOT_SOLVED',
    pywraplp.Solver.MODEL_INVALID: 'MODEL_INVALID',
}


@dataclass
class ExactResult:
    status: str
    objective: float  # mean dispersion, i.e. pair sum / size
    members: Optional[List[int]] = None

    @property
    def optimal(self) -> bool:
        return self.status == 'OPTIMAL'


class EDPModel:
    def __init__(self, inst: Instance, time_limit: float = 1800.0,
                 backends=('SCIP', 'CBC', 'CP-SAT')):
        """
        Fixed-size equitable dispersion MIP, built once and re-solved for each size.

        Variables: x_i (vertex i selected) and y_ij, i < j (both selected). Constraints:
            sum x = sz
            sum_{j != i} y_ij = (sz - 1) x_i     for every i
            2 y_ij <= x_i + x_j,  x_i + x_j - y_ij <= 1
        Objective: maximize sum d_ij y_ij.

        Args:
            inst: Problem instance.
            time_limit: Time limit of each solve, in seconds.
            backends: MIP backends to try, in order.
        """
        self.inst = inst
        self.n = inst.n

        solver = None
        for name in backends:
            solver = pywraplp.Solver.CreateSolver(name)
            if solver is not None:
                break
        if solver is None:
            raise RuntimeError(f"None of the MIP backends {backends} is available in OR-Tools.")
        solver.SetTimeLimit(int(time_limit * 1000))
        solver.SetNumThreads(1)
        self.solver = solver

        self._create_model()

    def _create_model(self) -> None:
        solver = self.solver
        n = self.n
        d = self.inst.d
        sz = 2  # dummy, updated by solve()

        self.x = [solver.BoolVar(f'x_{i}') for i in range(n)]
        self.y = {}
        for i in range(n):
            for j in range(i + 1, n):
                self.y[i, j] = solver.BoolVar(f'y_{i}_{j}')

        # size constraint
        self.size_ct = solver.Constraint(sz, sz, 'size')
        for x in self.x:
            self.size_ct.SetCoefficient(x, 1.0)

        # strength constraints
        self.strength_cts = []
        for i in range(n):
            ct = solver.Constraint(0.0, 0.0, f'strength_{i}')
            for j in range(n):
                if i != j:
                    ct.SetCoefficient(self.y[min(i, j), max(i, j)], 1.0)
            ct.SetCoefficient(self.x[i], 1.0 - sz)
            self.strength_cts.append(ct)

        # linking constraints
        inf = solver.infinity()
        for (i, j), y in self.y.items():
            ct = solver.Constraint(-inf, 0.0)
            ct.SetCoefficient(y, 2.0)
            ct.SetCoefficient(self.x[i], -1.0)
            ct.SetCoefficient(self.x[j], -1.0)

            ct = solver.Constraint(-inf, 1.0)
            ct.SetCoefficient(y, -1.0)
            ct.SetCoefficient(self.x[i], 1.0)
            ct.SetCoefficient(self.x[j], 1.0)

        objective = solver.Objective()
        for (i, j), y in self.y.items():
            objective.SetCoefficient(y, float(d[i, j]))
        objective.SetMaximization()

    def solve(self, sz: int) -> ExactResult:
        """Solves for exactly ``sz`` selected vertices."""
        if not 1 <= sz <= self.n:
            raise ValueError(f"Target size {sz} out of range [1, {self.n}].")
        self.size_ct.SetBounds(sz, sz)
        for i, ct in enumerate(self.strength_cts):
            ct.SetCoefficient(self.x[i], 1.0 - sz)

        status = self.solver.Solve()
        name = STATUS_NAMES.get(status, str(status))
        if status not in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
            return ExactResult(name, float('nan'))

        objective = self.solver.Objective().Value() / sz
        members = None
        if status == pywraplp.Solver.OPTIMAL:
            members = [i for i, x in enumerate(self.x) if x.solution_value() > 0.5]
        return ExactResult(name, objective, members)


class ExactSolver:
    def __init__(self, time_limit: float = 1800.0):
        """Callable ``(instance, target_size) -> ExactResult`` that reuses one model per instance."""
        self.time_limit = time_limit
        self._model: Optional[EDPModel] = None

    def __call__(self, inst: Instance, target_size: int) -> ExactResult:
        if self._model is None or self._model.inst is not inst:
            self._model = EDPModel(inst, self.time_limit)
        return self._model.solve(target_size)


def solve_exactly(inst: Instance, target_size: int, time_limit: float = 1800.0) -> ExactResult:
    return EDPModel(inst, time_limit).solve(target_size)


def exact(inst: Instance, exact_solver=None, reporter=None) -> Solution:
    """
    Solves every size from 2 to n exactly and keeps the best optimal mean dispersion.

    Sizes whose status is not OPTIMAL are skipped. Returns an empty solution if none was solved.
    """
    if exact_solver is None:
        exact_solver = ExactSolver()
    best: Optional[ExactResult] = None
    for sz in range(2, inst.n + 1):
        res = exact_solver(inst, sz)
        if reporter is not None:
            reporter.exact_size(sz, res.status, res.objective)
        if not res.optimal or res.members is None:
            continue
        if best is None or gr(res.objective, best.objective):
            best = res

    s = Solution(inst)
    if best is not None:
        s.members = list(best.members)
        s.recompute_from_members()
    return s


__all__ = ['EDPModel', 'ExactResult', 'ExactSolver', 'solve_exactly', 'exact']
