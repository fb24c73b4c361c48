from __future__ import annotations

import argparse
from dataclasses import dataclass, fields
from typing import List, Optional

STAGNATION_RULES = ('working', 'round')


@dataclass
class Options:
    """Run configuration of the matheuristic. Defaults are the tuned values of the method."""
    # budget and control
    time_limit: float = 1800.0
    max_rounds: int = 1_000_000
    round_time_limit: Optional[float] = None
    seed: int = 0  # 0: derived from pid and clock
    verbose: int = 0

    # outer tabu memory and stagnation
    tabu_tenure: int = 10
    max_iter_without_improvement: int = 200
    # 'working': count an iteration only if neither the round incumbent nor the working solution
    # improved; 'round': count it whenever the round incumbent did not improve
    stagnation: str = 'working'

    # decomposition
    sz_in: int = 15
    sz_out: int = 15
    decomposition_tries: int = 1
    decomposition_alpha: float = 0.0
    subproblem_tenure: int = 1
    subproblem_max_iter: int = 1

    # shake
    max_shakes: int = 5
    shake_rate: float = 0.15
    shake_alpha: float = 0.25

    # 1 allows singleton solutions (objective 0); 2 forbids shrinking a pair to a singleton
    min_solution_size: int = 1

    exact_time_limit: float = 1800.0

    def __post_init__(self):
        for name in ('max_rounds', 'tabu_tenure', 'max_iter_without_improvement', 'sz_in',
                     'sz_out', 'subproblem_tenure', 'subproblem_max_iter', 'max_shakes'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}.")
        if self.decomposition_tries < 1:
            raise ValueError("decomposition_tries must be at least 1.")
        for name in ('decomposition_alpha', 'shake_alpha', 'shake_rate'):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {getattr(self, name)}.")
        if self.stagnation not in STAGNATION_RULES:
            raise ValueError(f"stagnation must be one of {STAGNATION_RULES}, got {self.stagnation!r}.")
        if self.min_solution_size not in (1, 2):
            raise ValueError(f"min_solution_size must be 1 or 2, got {self.min_solution_size}.")

    @property
    def decomposition_threshold(self) -> int:
        """Instances with at most this many vertices are solved exactly."""
        return self.sz_in + self.sz_out + 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mmdp', description="A matheuristic for the Max-Mean Dispersion Problem")
    parser.add_argument('-i', '--instance', nargs='+', required=True,
                        help="Input instance(s); several files imply --evaluate")
    parser.add_argument('-v', dest='verbose', action='count', default=0,
                        help="Level of verbosity; can be used multiple times")
    parser.add_argument('-t', '--time-limit', type=float, default=1800.0, help="Time limit, in seconds")
    parser.add_argument('-s', '--seed', type=int, default=0,
                        help="Random seed; if 0, a random seed based on system time will be used")
    parser.add_argument('--max-iter', dest='max_rounds', type=int, default=1_000_000,
                        help="Maximum number of multistart rounds")
    parser.add_argument('--round-time-limit', type=float, default=None)
    parser.add_argument('--tabu-tenure', type=int, default=10)
    parser.add_argument('--max-iter-without-improvement', type=int, default=200)
    parser.add_argument('--stagnation', choices=STAGNATION_RULES, default='working')
    parser.add_argument('--szin', dest='sz_in', type=int, default=15,
                        help="Number of loose vertices of the neighborhood subproblem belonging to the solution")
    parser.add_argument('--szout', dest='sz_out', type=int, default=15,
                        help="Number of loose vertices of the neighborhood subproblem outside the solution")
    parser.add_argument('--decomposition-tries', type=int, default=1)
    parser.add_argument('--decomposition-alpha', type=float, default=0.0)
    parser.add_argument('--max-shakes', type=int, default=5)
    parser.add_argument('--shake-rate', type=float, default=0.15)
    parser.add_argument('--shake-alpha', type=float, default=0.25)
    parser.add_argument('--min-solution-size', type=int, choices=(1, 2), default=1)
    parser.add_argument('--exact-time-limit', type=float, default=1800.0)
    parser.add_argument('--evaluate', action='store_true', help="Batch mode: write one CSV row per instance")
    parser.add_argument('--output-csv', default='mmdp_results.csv')
    parser.add_argument('--plot', default=None, help="Save a convergence plot to this file")
    return parser


def options_from_namespace(args: argparse.Namespace) -> Options:
    names = {f.name for f in fields(Options)}
    return Options(**{k: v for k, v in vars(args).items() if k in names})


def parse_args(argv: Optional[List[str]] = None):
    """Returns (namespace, Options)."""
    args = build_parser().parse_args(argv)
    return args, options_from_namespace(args)


__all__ = ['Options', 'build_parser', 'parse_args', 'options_from_namespace']
