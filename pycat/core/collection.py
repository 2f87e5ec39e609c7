"""
Ordered collections of distributions (ensembles or time series).
"""

from __future__ import annotations

from collections.abc import MutableSequence
from typing import Iterable, List, Optional, Sequence

import numpy as np

from pycat.core.distribution import Distribution
from pycat.core.moments import moments as _moments


class DistributionCollection(MutableSequence):
    """
    List of :class:`Distribution` objects with batch operations.

    Each member keeps its own pivots, so members of a time series may live
    on different grids.

    Example:
        >>> series = DistributionCollection([
        ...     Distribution(np.linspace(0, 2, 100), ('normal', 1.0, 0.1)),
        ...     Distribution(np.linspace(0, 3, 100), ('normal', 2.0, 0.5)),
        ... ])
        >>> series.moments(3, [1, 0])     # m_3 of member 1, then member 0
    """

    def __init__(self, distributions: Optional[Iterable[Distribution]] = None):
        self._items: List[Distribution] = []
        for d in distributions or ():
            self.append(d)

    # ── MutableSequence protocol ──────────────────────────────────────────────

    def __getitem__(self, index):
        if isinstance(index, slice):
            return DistributionCollection(self._items[index])
        return self._items[index]

    def __setitem__(self, index, value):
        if isinstance(index, slice):
            value = list(value)
            for d in value:
                self._check(d)
        else:
            self._check(value)
        self._items[index] = value

    def __delitem__(self, index):
        del self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def insert(self, index: int, value: Distribution) -> None:
        self._check(value)
        self._items.insert(index, value)

    def __repr__(self) -> str:
        return f"DistributionCollection({self._items!r})"

    @staticmethod
    def _check(value):
        if not isinstance(value, Distribution):
            raise TypeError(
                f"DistributionCollection holds Distribution objects, not {type(value).__name__}"
            )

    # ── Batch operations ──────────────────────────────────────────────────────

    def moments(self, order=None, indices: Optional[Sequence[int]] = None) -> np.ndarray:
        """
        Moment of the given order for the selected members.

        The output follows the order of *indices* (repeats allowed); an
        omitted order issues a ``MissingMomentOrderWarning`` and returns an
        empty array.
        """
        return _moments(self._items, order, indices)

    def instrument_response(self, kv) -> 'DistributionCollection':
        """Coulter-counter view of every member, as a new collection."""
        return DistributionCollection(d.to_instrument_response(kv) for d in self._items)

    def summary(self) -> List[str]:
        """Summary string of every member."""
        return [str(d) for d in self._items]
