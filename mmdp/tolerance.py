"""Epsilon-tolerant comparison of objective values.

Every objective or marginal-value comparison in the search goes through these
functions (or, inside numba kernels, through the same rule against ``EPS``),
so that floating-point drift in the incremental bookkeeping never produces
spurious improvements or add/remove cycling.
"""

EPS = 1e-5


def eq(a: float, b: float) -> bool:
    return abs(a - b) <= EPS


def neq(a: float, b: float) -> bool:
    return not eq(a, b)


def le(a: float, b: float) -> bool:
    """Strictly less than, by more than ``EPS``."""
    return a + EPS < b


def leq(a: float, b: float) -> bool:
    return le(a, b) or eq(a, b)


def gr(a: float, b: float) -> bool:
    """Strictly greater than, by more than ``EPS``."""
    return le(b, a)


def geq(a: float, b: float) -> bool:
    return gr(a, b) or eq(a, b)


__all__ = ['EPS', 'eq', 'neq', 'le', 'leq', 'gr', 'geq']
