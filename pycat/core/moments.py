"""
Moments of size distributions.

The j-th moment of a density F sampled at pivots y is the Riemann sum

    m_j = Σ_k F[k] · Δ[k] · y[k]^j

where Δ are the bin widths (``diff(boundaries)``, or ``diff([0, y])`` when the
distribution has no boundaries).  Conventions used across pyCAT:

    m_0          total number (count)
    m_1 / m_0    number-mean characteristic length, d_10
    m_3          proportional to total volume (via the shape factor kv)
"""

from __future__ import annotations

import logging
import warnings
from typing import Optional, Sequence

import numpy as np

from pycat.core.errors import MissingMomentOrderWarning
from pycat.core.grids import bin_widths

log = logging.getLogger(__name__)


def _order_missing(order) -> bool:
    if order is None:
        return True
    return np.size(order) == 0


def moment(
    y: np.ndarray,
    density: np.ndarray,
    boundaries: Optional[np.ndarray],
    order: float,
) -> float:
    """
    Single moment of a sampled density.

    Args:
        y:          Pivot coordinates.
        density:    Density values at the pivots.
        boundaries: Bin boundaries, or None to use ``diff([0, y])``.
        order:      Moment order j.

    Returns:
        The moment as a float.  An empty density gives 0.0; a density whose
        length does not match the number of bins gives nan.
    """
    density = np.asarray(density, dtype=float)
    if density.size == 0:
        return 0.0
    y = np.asarray(y, dtype=float)
    dy = bin_widths(y, boundaries)
    if not (len(density) == len(dy) == len(y)):
        log.debug(
            "Moment of order %s undefined: %d density values, %d bins, %d pivots",
            order, len(density), len(dy), len(y),
        )
        return float('nan')
    return float(np.sum(density * dy * y ** order))


def moments(
    distributions: Sequence,
    order=None,
    indices: Optional[Sequence[int]] = None,
) -> np.ndarray:
    """
    Moment of the given order for several distributions.

    Args:
        distributions: Sequence of ``Distribution`` objects.
        order:         Moment order.  If omitted, a
                       :class:`MissingMomentOrderWarning` is issued and an
                       empty array is returned.
        indices:       Which distributions to use, in the order wanted in
                       the output.  Repeats are allowed.  Default: all.

    Returns:
        1-D array with one moment per selected index, in the order given.
    """
    if _order_missing(order):
        warnings.warn('No moment order was given', MissingMomentOrderWarning, stacklevel=2)
        return np.array([], dtype=float)

    if indices is None:
        indices = range(len(distributions))

    out = np.zeros(len(indices), dtype=float)
    for n, i in enumerate(indices):
        d = distributions[i]
        out[n] = moment(d.y, d.get_density(), d.boundaries, order)
    return out


# ──────────────────────────────────────────────────────────────────────────────
# Normalised densities
# ──────────────────────────────────────────────────────────────────────────────

def number_density(distribution) -> np.ndarray:
    """Density divided by its zeroth moment: F / m_0."""
    F = distribution.get_density()
    with np.errstate(divide='ignore', invalid='ignore'):
        return F / distribution.moment(0)


def volume_density(distribution) -> np.ndarray:
    """Volume-weighted density normalised by the third moment: F·y³ / m_3."""
    F = distribution.get_density()
    with np.errstate(divide='ignore', invalid='ignore'):
        return F * distribution.y ** 3 / distribution.moment(3)
