from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from mmdp.util import Timer


@dataclass
class Progress:
    round: int
    iteration: int
    size: int
    objective: float
    incumbent: float
    best: float
    iters_without_improvement: int
    shakes: int
    neighborhood: int = 0
    elapsed: float = 0.0


class Reporter:
    """Progress sink. Every hook is a no-op; nothing flows back into the search."""

    def exact_started(self, n: int) -> None:
        pass

    def exact_size(self, size: int, status: str, objective: float) -> None:
        pass

    def round_started(self, round: int, start: int, size: int, objective: float, best: float) -> None:
        pass

    def iteration(self, progress: Progress) -> None:
        pass

    def shaken(self, round: int, shakes: int, before: float, after: float) -> None:
        pass

    def new_best(self, objective: float, size: int) -> None:
        pass

    def round_finished(self, round: int, objective: float, size: int, iterations: int) -> None:
        pass

    def finished(self, objective: float, size: int, elapsed: float) -> None:
        pass


class ConsoleReporter(Reporter):
    def __init__(self, verbose: int = 0):
        """
        Prints progress to stdout.

        Args:
            verbose: 0 prints rounds, new bests and the final line; 1 adds shakes; 2 adds one
                line per inner iteration.
        """
        self.verbose = verbose

    def exact_started(self, n):
        print(f"Instance is small ({n} vertices); running exact algorithm")

    def exact_size(self, size, status, objective):
        print(f"sz {size}, status {status}, obj {objective:.2f}")

    def round_started(self, round, start, size, objective, best):
        print(f"#{round} heur {objective:.2f} sz {size} start {start} best {best:.2f}")

    def iteration(self, progress):
        if self.verbose >= 2:
            p = progress
            print(f"#{p.round}.{p.iteration} sz {p.size} obj {p.objective:.2f} nb {p.neighborhood} "
                  f"inc {p.incumbent:.2f} iterw {p.iters_without_improvement} shakes {p.shakes} "
                  f"time {p.elapsed * 1000:.0f}ms")

    def shaken(self, round, shakes, before, after):
        if self.verbose >= 1:
            print(f"#{round} shake {shakes} obj {before:.2f} -> {after:.2f}")

    def new_best(self, objective, size):
        print(f"(!!!) found new best: {objective:.2f} sz {size}")

    def round_finished(self, round, objective, size, iterations):
        print(f"#{round} ts   {objective:.2f} sz {size} iter {iterations}")
        print("")

    def finished(self, objective, size, elapsed):
        print(f"End; obj {objective:.2f} sz {size} time {elapsed:.2f}s")


class HistoryReporter(Reporter):
    def __init__(self, inner: Optional[Reporter] = None):
        """
        Records every event, optionally forwarding it to ``inner``.

        ``bests`` holds one (elapsed seconds, objective) pair per new global best, timed from the
        construction of the reporter.
        """
        self.inner = inner if inner is not None else Reporter()
        self.history: List[Progress] = []
        self.bests: List[tuple] = []
        self.timer = Timer(None)
        self.exact_results: List[tuple] = []
        self.shakes: List[tuple] = []
        self.rounds = 0

    def exact_started(self, n):
        self.inner.exact_started(n)

    def exact_size(self, size, status, objective):
        self.exact_results.append((size, status, objective))
        self.inner.exact_size(size, status, objective)

    def round_started(self, round, start, size, objective, best):
        self.rounds += 1
        self.inner.round_started(round, start, size, objective, best)

    def iteration(self, progress):
        self.history.append(progress)
        self.inner.iteration(progress)

    def shaken(self, round, shakes, before, after):
        self.shakes.append((round, shakes, before, after))
        self.inner.shaken(round, shakes, before, after)

    def new_best(self, objective, size):
        self.bests.append((self.timer.elapsed(), objective))
        self.inner.new_best(objective, size)

    def round_finished(self, round, objective, size, iterations):
        self.inner.round_finished(round, objective, size, iterations)

    def finished(self, objective, size, elapsed):
        self.inner.finished(objective, size, elapsed)


def plot_history(history: List[Progress], filename: str, title: str = "Max-mean dispersion") -> None:
    """Plots current, round-incumbent and best objective per inner iteration."""
    if not history:
        print("Cannot plot: empty history")
        return

    steps = range(len(history))
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(steps, [p.objective for p in history], label='current', linewidth=0.8, alpha=0.6)
    ax.plot(steps, [p.incumbent for p in history], label='round incumbent', linewidth=1.2)
    ax.plot(steps, [p.best for p in history], label='best', linewidth=1.6)
    ax.set_xlabel('Iteration')
    ax.set_ylabel('Objective')
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(filename)
    plt.close(fig)


__all__ = ['Progress', 'Reporter', 'ConsoleReporter', 'HistoryReporter', 'plot_history']
