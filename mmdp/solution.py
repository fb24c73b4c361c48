from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np

from mmdp.instance import Instance
from mmdp.tolerance import gr


class Solution:
    def __init__(self, inst: Instance, members: Optional[Iterable[int]] = None):
        """
        A vertex subset with incrementally maintained marginal costs.

        ``cost[v]`` is the sum of distances from ``v`` to every member: for a member it is what
        removing it subtracts from ``total_cost``, for a non-member what adding it contributes.
        ``add`` and ``remove`` are the only mutation paths and keep ``has``, ``cost``,
        ``total_cost`` and ``size`` consistent with ``members``.

        Args:
            inst: The instance the solution lives in.
            members: Optional initial vertices, added one by one.
        """
        self.inst = inst
        self.members: List[int] = []
        self.has = np.zeros(inst.n, dtype=np.bool_)
        self.cost = np.zeros(inst.n, dtype=np.float64)
        self.total_cost = 0.0
        self.size = 0
        # (units, internal cost) of an aggregated core sitting in slot 0, if any
        self.core: Optional[tuple] = None
        if members is not None:
            for v in members:
                self.add(v)

    # --- Accessors ---

    @property
    def n(self) -> int:
        return self.inst.n

    def objective(self) -> float:
        if self.size == 0:
            return 0.0
        return self.total_cost / self.size

    def __len__(self) -> int:
        return self.size

    def __contains__(self, v: int) -> bool:
        return 0 <= v < self.n and bool(self.has[v])

    def __repr__(self) -> str:
        return f"Solution(obj={self.objective():.4f}, size={self.size})"

    def sorted_members(self) -> np.ndarray:
        return np.array(sorted(self.members), dtype=np.int64)

    # --- Mutation primitives ---

    def _check_index(self, v: int) -> None:
        if not 0 <= v < self.n:
            raise IndexError(f"Vertex {v} out of range for an instance with {self.n} vertices.")

    def add(self, v: int) -> None:
        """Adds vertex ``v``, which must not be a member."""
        v = int(v)
        self._check_index(v)
        if self.has[v]:
            raise ValueError(f"Vertex {v} is already in the solution.")
        self.members.append(v)
        self.size += 1
        self.has[v] = True
        self.total_cost += float(self.cost[v])
        self.cost += self.inst.d[v]

    def remove(self, v: int) -> None:
        """Removes member ``v``."""
        v = int(v)
        self._check_index(v)
        if not self.has[v]:
            raise ValueError(f"Vertex {v} is not in the solution.")
        if self.core is not None and v == 0:
            raise ValueError("The aggregated core in slot 0 cannot be removed.")
        self.members.remove(v)
        self.size -= 1
        self.has[v] = False
        self.total_cost -= float(self.cost[v])
        self.cost -= self.inst.d[v]

    def aggregate(self, core_size: int, core_cost: float) -> None:
        """
        Declares slot 0 as an aggregate of ``core_size`` original vertices whose internal pairwise
        cost is ``core_cost``. Slot 0 must already be a member; it already counts as one unit.
        """
        if not self.has[0]:
            raise ValueError("Slot 0 must be in the solution before it is aggregated.")
        if self.core is not None:
            raise ValueError("The solution already carries an aggregated core.")
        self.core = (core_size, core_cost)
        self.size += core_size - 1
        self.total_cost += float(core_cost)

    def recompute_from_members(self) -> None:
        """Rebuilds ``has``, ``cost``, ``total_cost`` and ``size`` from ``members`` alone."""
        members = self.members
        core = self.core
        if len(set(members)) != len(members):
            raise ValueError("Solution members contain duplicates.")
        self.members = []
        self.has[:] = False
        self.cost[:] = 0.0
        self.total_cost = 0.0
        self.size = 0
        self.core = None
        for v in members:
            self.add(v)
        if core is not None:
            self.aggregate(*core)

    # --- Comparison and assignment ---

    def better(self, other: Solution) -> bool:
        return gr(self.objective(), other.objective())

    def assign(self, other: Solution) -> None:
        """Overwrites this solution's state with a copy of ``other``'s."""
        self.inst = other.inst
        self.members = list(other.members)
        self.has = other.has.copy()
        self.cost = other.cost.copy()
        self.total_cost = other.total_cost
        self.size = other.size
        self.core = other.core

    def consider_replace(self, candidate: Solution) -> bool:
        """Takes over ``candidate`` if it is (epsilon-)better; returns whether it did."""
        if candidate.better(self):
            self.assign(candidate)
            return True
        return False

    def copy(self) -> Solution:
        s = Solution.__new__(Solution)
        s.assign(self)
        return s


__all__ = ['Solution']
