"""
Instrument response of a volume-sensing particle counter.

A Coulter counter sizes each particle by its volume and reports the
equivalent spherical diameter, quantised into fixed channels.  To compare a
simulated distribution over a characteristic length with a measurement it is
mapped onto the same channels:

  1. Mass per source bin:      N[i] = F[i] · Δ[i]
  2. Equivalent diameter:      L[i] = (6/π · kv · y[i]³)^(1/3)
  3. Count per channel:        C[k] = Σ N[i]  for  b[k] < L[i] < b[k+1]
  4. Populated channels (C ≠ 0) are normalised to sum 1 and linearly
     interpolated over all channel centres; centres outside the populated
     range get 0.  This fills the empty channels left wherever source and
     channel grids do not line up.
  5. The result is divided by Σ C[k]·w[k] so it integrates to 1 over the
     channel grid.

Both comparisons in step 3 are strict: a source bin whose equivalent
diameter falls exactly on a channel boundary is not counted anywhere.

If no mass reaches any channel, step 5 would divide by zero; this raises
:class:`~pycat.core.errors.DegenerateRenormalizationError` instead of
producing nan values.
"""

from __future__ import annotations

import logging

import numpy as np

from pycat.core.channels import (
    COULTER_CHANNEL_BOUNDARIES,
    channel_pivots,
    channel_widths,
)
from pycat.core.distribution import Distribution
from pycat.core.errors import DegenerateRenormalizationError, DistributionError
from pycat.core.grids import bin_widths

log = logging.getLogger(__name__)


def shape_factor(kv) -> float:
    """
    Scalar volumetric shape factor.

    Accepts a number or any object with a ``kv`` attribute (for instance
    :class:`pycat.state.CatConfig`).
    """
    if hasattr(kv, 'kv'):
        kv = kv.kv
    try:
        kv = float(kv)
    except (TypeError, ValueError) as exc:
        raise DistributionError(f"Shape factor must be a number, got {kv!r}") from exc
    if not np.isfinite(kv) or kv <= 0:
        raise DistributionError(f"Shape factor must be finite and positive, got {kv}")
    return kv


def equivalent_diameter(y: np.ndarray, kv: float) -> np.ndarray:
    """Diameter of the sphere with the volume kv·y³."""
    y = np.asarray(y, dtype=float)
    return (6.0 / np.pi * kv * y ** 3) ** (1.0 / 3.0)


def remap_to_channels(
    y: np.ndarray,
    mass: np.ndarray,
    kv: float,
    channel_boundaries: np.ndarray = COULTER_CHANNEL_BOUNDARIES,
) -> np.ndarray:
    """
    Re-bin per-pivot mass onto a channel grid in equivalent-diameter space.

    Args:
        y:                  Pivots of the source distribution.
        mass:               Mass in each source bin (density × bin width).
        kv:                 Volumetric shape factor.
        channel_boundaries: Ascending channel boundaries.

    Returns:
        Density on the channel centres, normalised to integrate to 1.

    Raises:
        DegenerateRenormalizationError: if no mass reaches any channel.
    """
    y = np.asarray(y, dtype=float)
    mass = np.asarray(mass, dtype=float)
    bnd = np.asarray(channel_boundaries, dtype=float)
    if len(y) != len(mass):
        raise DistributionError(f"{len(mass)} mass values for {len(y)} pivots")

    n_channels = len(bnd) - 1
    L = equivalent_diameter(y, kv)

    # searchsorted(side='left') gives b[k] < L <= b[k+1]; drop L == b[k+1]
    k = np.searchsorted(bnd, L, side='left') - 1
    inside = (k >= 0) & (k < n_channels)
    inside[inside] &= L[inside] < bnd[k[inside] + 1]
    counts = np.bincount(k[inside], weights=mass[inside], minlength=n_channels)

    populated = counts != 0
    n_populated = int(populated.sum())
    log.debug("%d of %d source bins counted, %d channels populated",
              int(inside.sum()), len(y), n_populated)
    if n_populated == 0:
        raise DegenerateRenormalizationError(
            f"No mass falls inside the channel range {bnd[0]:g} to {bnd[-1]:g} "
            f"({int(inside.sum())} of {len(y)} source bins inside)"
        )

    count_sum = counts[populated].sum()
    if count_sum == 0:
        raise DegenerateRenormalizationError("Channel counts sum to zero")

    pivots = channel_pivots(bnd)
    values = np.interp(
        pivots,
        pivots[populated],
        counts[populated] / count_sum,
        left=np.nan,
        right=np.nan,
    )
    values[np.isnan(values)] = 0.0

    total = float(np.sum(values * channel_widths(bnd)))
    if total == 0 or not np.isfinite(total):
        raise DegenerateRenormalizationError(
            f"Interpolated channel density integrates to {total}"
        )
    return values / total


def instrument_response(distribution: Distribution, kv) -> Distribution:
    """
    Distribution as the Coulter counter would report it.

    Args:
        distribution: Source distribution over the characteristic length.
        kv:           Volumetric shape factor, or an object with a ``kv``
                      attribute.

    Returns:
        New Distribution on the 300 Coulter channels; *distribution* is not
        modified.

    Raises:
        DegenerateRenormalizationError: if the distribution has no density or
            none of its mass lands inside the channel range.
    """
    kv = shape_factor(kv)
    F = distribution.get_density()
    if F.size == 0:
        raise DegenerateRenormalizationError("Distribution has no density to remap")

    y = distribution.y
    dy = bin_widths(y, distribution.boundaries)
    if len(F) != len(dy):
        raise DistributionError(f"Density has {len(F)} values for {len(dy)} bins")

    values = remap_to_channels(y, F * dy, kv)
    return Distribution(
        channel_pivots(COULTER_CHANNEL_BOUNDARIES),
        values,
        COULTER_CHANNEL_BOUNDARIES,
    )
