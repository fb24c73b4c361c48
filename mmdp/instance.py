from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

import numpy as np


class Instance:
    def __init__(self, distance_matrix: np.ndarray):
        """
        Dense symmetric distance matrix of a max-mean dispersion instance.

        Args:
            distance_matrix: Numpy array of shape (n, n) with pairwise distances. It must be
                symmetric; the diagonal is expected to be zero. The matrix is copied and made
                read-only, since it is shared by every component for the whole run.
        """
        d = np.array(distance_matrix, dtype=np.float64, order='C')
        if d.ndim != 2 or d.shape[0] != d.shape[1]:
            raise ValueError(f"Distance matrix must be square, got shape {d.shape}.")
        if not np.allclose(d, d.T, rtol=0.0, atol=1e-9):
            raise ValueError("Distance matrix must be symmetric.")
        d.setflags(write=False)
        self.d = d
        self.n = d.shape[0]

    def size(self) -> int:
        return self.n

    def dist(self, i: int, j: int) -> float:
        return float(self.d[i, j])

    # alias
    distance = dist

    def __len__(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return f"Instance(n={self.n})"


@dataclass
class SubInstance:
    """
    Compressed instance built by the decomposer.

    Slot 0 aggregates the ``core`` vertices; slots ``1..n_in`` are free vertices that are members
    of the current solution and the remaining slots are free non-members. ``mapping[k]`` is the
    original index of slot ``k`` (``mapping[0]`` is -1, the core has no single original index).
    """
    instance: Instance
    core: List[int]
    core_cost: float
    mapping: np.ndarray
    n_in: int

    @property
    def n(self) -> int:
        return self.instance.n

    def out_slots(self) -> range:
        return range(1 + self.n_in, self.instance.n)

    def to_original(self, slots) -> List[int]:
        """Maps free slots back to original indices; slot 0 expands into the core."""
        members: List[int] = []
        for k in slots:
            if k == 0:
                members.extend(self.core)
            else:
                members.append(int(self.mapping[k]))
        return members


def read_instance(filename: str) -> Instance:
    """
    Reads an instance file with one ``i j d_ij`` entry per line (1-based indices).

    The number of vertices is the largest index found; pairs that are not listed are 0.
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(f"Instance file not found at: {filename}")

    entries = []
    n = 0
    with open(filename, 'r') as f:
        for line_no, line in enumerate(f):
            tokens = line.split()
            if not tokens:
                continue
            msg = f"Invalid input in line {line_no}: \"{line.rstrip()}\"; check the instance"
            if len(tokens) < 3:
                raise ValueError(msg)
            try:
                i, j, dij = int(tokens[0]), int(tokens[1]), float(tokens[2])
            except ValueError:
                raise ValueError(msg) from None
            if i < 1 or j < 1:
                raise ValueError(msg)
            n = max(n, i, j)
            entries.append((i, j, dij))

    d = np.zeros((n, n), dtype=np.float64)
    for i, j, dij in entries:
        d[i - 1, j - 1] = dij
        d[j - 1, i - 1] = dij
    return Instance(d)


def write_instance(instance: Instance, filename: str, decimals: int = 2) -> None:
    """Writes every pair i < j once, in the format read by ``read_instance``."""
    with open(filename, 'w') as f:
        for i in range(instance.n):
            for j in range(i + 1, instance.n):
                f.write(f"{i + 1}   {j + 1}   {instance.d[i, j]:.{decimals}f}\n")


def pair_sum(d: np.ndarray, vertices) -> float:
    """Sum of distances over unordered pairs of ``vertices``; the diagonal is ignored."""
    idx = np.asarray(vertices, dtype=np.int64)
    if idx.size < 2:
        return 0.0
    block = d[np.ix_(idx, idx)]
    return float(np.triu(block, k=1).sum())


__all__ = ['Instance', 'SubInstance', 'read_instance', 'write_instance', 'pair_sum']
