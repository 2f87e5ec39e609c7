"""
Pivot and boundary grid helpers for size distributions.

A distribution is sampled at *pivots* ``y`` and, optionally, carries the bin
*boundaries* around them (``len(boundaries) == len(y) + 1``).  The helpers
here validate coordinate vectors and convert between the two descriptions:

    pivots_from_boundaries(b)  →  (b[:-1] + b[1:]) / 2
    implicit_boundaries(y)     →  [0, (y[:-1] + y[1:]) / 2, 1.5·y[-1] − 0.5·y[-2]]
    bin_widths(y, b)           →  diff(b)          if b is defined
                                  diff([0, y...])  otherwise
"""

from __future__ import annotations

from typing import Optional

import numpy as np


# ──────────────────────────────────────────────────────────────────────────────
# Validation
# ──────────────────────────────────────────────────────────────────────────────

def as_vector(values) -> Optional[np.ndarray]:
    """
    Coerce *values* to a 1-D float array, or return None if it is not a
    real numeric vector.

    Scalars become length-1 arrays; row and column arrays are flattened.
    Empty input, strings, booleans, complex numbers and object arrays are
    not numeric vectors.
    """
    if values is None or isinstance(values, (str, bytes)):
        return None
    try:
        arr = np.asarray(values)
    except (TypeError, ValueError):
        return None
    if arr.dtype.kind not in 'iuf' or arr.size == 0:
        return None
    # Only one non-singleton dimension is allowed
    if sum(1 for n in arr.shape if n > 1) > 1:
        return None
    return arr.astype(float).ravel()


def check_coordinates(values) -> tuple[Optional[np.ndarray], str]:
    """
    Validate a coordinate vector (pivots or boundaries).

    Constraints: numeric vector, real, finite, nonnegative, nondecreasing.

    Returns:
        ``(array, '')`` when valid, ``(None, reason)`` otherwise.
    """
    arr = as_vector(values)
    if arr is None:
        return None, 'must be a non-empty real numeric vector'
    if not np.all(np.isfinite(arr)):
        return None, 'must contain only finite values'
    if np.any(arr < 0):
        return None, 'must be nonnegative'
    if np.any(np.diff(arr) < 0):
        return None, 'must be nondecreasing'
    return arr, ''


# ──────────────────────────────────────────────────────────────────────────────
# Pivot / boundary conversion
# ──────────────────────────────────────────────────────────────────────────────

def pivots_from_boundaries(boundaries: np.ndarray) -> np.ndarray:
    """Arithmetic mean of each pair of adjacent boundaries."""
    b = np.asarray(boundaries, dtype=float)
    return (b[:-1] + b[1:]) / 2.0


def implicit_boundaries(y: np.ndarray) -> Optional[np.ndarray]:
    """
    Boundaries assumed for pivots that were given without any.

    The first boundary is 0, interior boundaries sit at the arithmetic mean
    of neighbouring pivots and the last one extrapolates the final spacing:

        b = [0, (y[0]+y[1])/2, ..., (y[-2]+y[-1])/2, 1.5·y[-1] − 0.5·y[-2]]

    A single pivot gets ``[0, 2·y[0]]`` so that it stays the bin centre.

    Args:
        y: Pivot coordinates, nondecreasing.

    Returns:
        Array of length ``len(y) + 1``, or None when *y* is empty.
    """
    y = np.asarray(y, dtype=float)
    n = len(y)
    if n == 0:
        return None
    if n == 1:
        return np.array([0.0, 2.0 * y[0]])
    last = 1.5 * y[-1] - 0.5 * y[-2]
    return np.concatenate(([0.0], (y[1:] + y[:-1]) / 2.0, [last]))


def bin_widths(y: np.ndarray, boundaries: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Width of the bin around each pivot.

    Uses ``diff(boundaries)`` when boundaries are defined; otherwise a
    synthetic boundary at 0 is prepended to the pivots and ``diff([0, y])``
    is used, i.e. each pivot is taken as the upper edge of its bin.

    Args:
        y:          Pivot coordinates.
        boundaries: Bin boundaries, or None.

    Returns:
        1-D array of bin widths.
    """
    if boundaries is not None and len(boundaries) > 0:
        return np.diff(np.asarray(boundaries, dtype=float))
    y = np.asarray(y, dtype=float)
    return np.diff(np.concatenate(([0.0], y)))
