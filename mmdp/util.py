import os
import time
from typing import Optional

import numpy as np


class TabuList:
    def __init__(self, size: int, tenure: int):
        """
        Per-vertex tabu memory.

        Vertex ``u`` is tabu while ``stamps[u] + tenure > iteration``. Stamps start at ``-tenure``
        and the counter at 1, so nothing is tabu in a fresh list.

        Args:
            size: Number of vertices.
            tenure: Number of iterations a touched vertex stays tabu.
        """
        self.size = size
        self.tenure = tenure
        self.iteration = 1
        self.stamps = np.full(size, -tenure, dtype=np.int64)

    def is_tabu(self, u: int) -> bool:
        return bool(self.stamps[u] + self.tenure > self.iteration)

    def add(self, u: int) -> None:
        """Touches ``u``: it becomes tabu from the current iteration on."""
        self.stamps[u] = self.iteration

    def advance_iter(self) -> None:
        self.iteration += 1

    def reset(self) -> None:
        self.iteration = 1
        self.stamps.fill(-self.tenure)

    def tabu_mask(self) -> np.ndarray:
        return self.stamps + self.tenure > self.iteration


class ReservoirSampler:
    def __init__(self, rng: np.random.Generator):
        """
        Size-one reservoir sampling over a stream of candidates.

        Calling ``consider()`` once per candidate and keeping the last candidate for which it
        returned True selects each of the k streamed candidates with probability 1/k.
        """
        self.rng = rng
        self.k = 0

    def consider(self) -> bool:
        self.k += 1
        return self.rng.random() * self.k < 1.0


class Timer:
    def __init__(self, time_limit: Optional[float]):
        """
        Wall-clock budget.

        Args:
            time_limit: Seconds. ``None`` means no limit; a zero or negative limit is already
                exhausted.
        """
        self.start = time.time()
        self.time_limit = time_limit

    def elapsed(self) -> float:
        return time.time() - self.start

    def seconds_left(self) -> float:
        if self.time_limit is None:
            return float('inf')
        return max(0.0, self.time_limit - self.elapsed())

    def timed_out(self) -> bool:
        return self.seconds_left() <= 0.0


def unique_random_seed() -> int:
    return (os.getpid() ^ int(time.time() * 1000)) & 0xFFFFFFFF


def make_rng(seed: int = 0) -> np.random.Generator:
    """A generator seeded with ``seed``, or with a pid/clock based seed when ``seed`` is 0."""
    if seed == 0:
        seed = unique_random_seed()
    return np.random.default_rng(seed)


__all__ = ['TabuList', 'ReservoirSampler', 'Timer', 'unique_random_seed', 'make_rng']
