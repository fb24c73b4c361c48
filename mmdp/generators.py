"""
Random benchmark instances for the max-mean dispersion problem.

Type I (MDPI), type II and type IV follow the classic generators used in the literature;
``euclidean`` produces non-negative geometric instances.
"""

import argparse
import sys
from typing import List, Optional

import numpy as np

from mmdp.instance import Instance, write_instance
from mmdp.util import make_rng


def _symmetric(upper: np.ndarray) -> np.ndarray:
    d = np.triu(upper, k=1)
    return d + d.T


def _random_sign(n: int, rng: np.random.Generator) -> np.ndarray:
    return np.where(rng.random((n, n)) < 0.5, -1.0, 1.0)


def mdp_type_i(n: int, rng: np.random.Generator) -> Instance:
    """Distances uniform in [-10, 10]."""
    magnitude = rng.random((n, n)) * 10.0
    return Instance(_symmetric(_random_sign(n, rng) * magnitude))


def mdp_type_ii(n: int, rng: np.random.Generator) -> Instance:
    """Distances in [-10, -5] U [5, 10], sign chosen uniformly."""
    magnitude = rng.random((n, n)) * 5.0 + 5.0
    return Instance(_symmetric(_random_sign(n, rng) * magnitude))


def mdp_type_iv(n: int, rng: np.random.Generator) -> Instance:
    """Distances in {-10, 0, 10}."""
    values = (rng.integers(0, 3, size=(n, n)) - 1) * 10.0
    return Instance(_symmetric(values))


def euclidean(n: int, rng: np.random.Generator, dim: int = 2) -> Instance:
    """Euclidean distances between uniform random points in the unit hypercube."""
    coords = rng.random((n, dim))
    diff = coords[:, None, :] - coords[None, :, :]
    d = np.sqrt((diff ** 2).sum(axis=-1))
    np.fill_diagonal(d, 0.0)
    return Instance(_symmetric(d))


GENERATORS = {
    'I': mdp_type_i,
    'II': mdp_type_ii,
    'IV': mdp_type_iv,
    'EUC': euclidean,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='mmdp-generate', description="Generate a random max-mean dispersion instance")
    parser.add_argument('type', choices=sorted(GENERATORS), help="Instance family")
    parser.add_argument('n', type=int, help="Number of vertices")
    parser.add_argument('-o', '--output', required=True, help="Instance file to write")
    parser.add_argument('-s', '--seed', type=int, default=0,
                        help="Random seed; if 0, a random seed based on system time will be used")
    parser.add_argument('--decimals', type=int, default=2)
    args = parser.parse_args(argv)
    if args.n < 2:
        parser.error("n must be at least 2")

    inst = GENERATORS[args.type](args.n, make_rng(args.seed))
    write_instance(inst, args.output, decimals=args.decimals)
    print(f"Wrote type {args.type} instance with {inst.n} vertices to '{args.output}'")
    return 0


if __name__ == '__main__':
    sys.exit(main())
