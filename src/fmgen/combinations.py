"""
Combination enumerator.

Produces the k-element index subsets of {0..n-1} in lexicographic order.
Used by the or-group update to expand every subset of two or more children.
"""

import itertools
from typing import Iterator, List


def combinations(n: int, k: int) -> Iterator[List[int]]:
    """
    Lazily enumerate all C(n, k) index subsets of size k.

    Each subset is an increasing list of indices. Calling the function again
    restarts the enumeration. k = 0 yields exactly one empty list.

    Args:
        n: Size of the index range (n >= 0)
        k: Subset size (0 <= k <= n)

    Raises:
        ValueError: If n or k is out of range (raised on the call, not on iteration)
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if k < 0 or k > n:
        raise ValueError(f"k must be between 0 and {n}, got {k}")
    return (list(indices) for indices in itertools.combinations(range(n), k))
