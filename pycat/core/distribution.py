"""
Particle size distributions over a characteristic length.

A :class:`Distribution` holds pivots ``y``, optional bin ``boundaries`` and a
density that is either analytic (a callable or a named parametric family) or
numerical (a vector aligned with ``y``).  The density is always *returned* as
a vector evaluated at the current pivots.

Boundaries matter for moments: the density is integrated bin by bin.  If no
boundaries are given together with ``(y, density)`` they are assumed to be

    [0, (y1+y2)/2, ..., (y_{n-1}+y_n)/2, 1.5·y_n − 0.5·y_{n-1}]

Usage example
-------------
>>> import numpy as np
>>> from pycat import Distribution
>>> d = Distribution(np.linspace(0, 2, 50), ('normal', 1.0, 0.1))
>>> d.moment(0)                       # ≈ 1
>>> d2 = Distribution()
>>> d2.y = np.linspace(0, 3, 100)
>>> d2.density = lambda x: np.exp(-(x - 2.0) ** 2)
>>> print(d2)                         # Fnc; d_10 = ..., m_3 = ...

Invalid assignments do not raise by default: they issue a
:class:`~pycat.core.errors.ValidationWarning`, keep the previous value and
return a falsy :class:`SetResult`.  With ``strict=True`` they raise
:class:`~pycat.core.errors.ValidationRejected` instead.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from pycat.core.density import (
    DensityRepresentation,
    ExplicitDensity,
    ParametricDensity,
    RawDensity,
    resolve_density,
)
from pycat.core.errors import (
    SerializationError,
    SizeMismatchWarning,
    ValidationRejected,
    ValidationWarning,
)
from pycat.core.grids import (
    check_coordinates,
    implicit_boundaries,
    pivots_from_boundaries,
)
from pycat.core.moments import moment as _moment, moments as _moments
from pycat.core.serialization import to_reconstructable_string, to_summary_string

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetResult:
    """Outcome of a setter call.  Truthy when the value was accepted."""

    accepted: bool
    message: str = ''

    def __bool__(self) -> bool:
        return self.accepted


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, np.ndarray):
        return value.size == 0
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


class Distribution:
    """
    Size distribution as a function of a characteristic length.

    Parameters
    ----------
    y : array-like, optional
        Pivots.  Default ``linspace(0, 1, 11)``.
    density : callable, array-like or (kind, mu, sigma), optional
        Density definition, see :meth:`set_density`.
    boundaries : array-like, optional
        Bin boundaries, ``len(y) + 1`` values.  When omitted but a density
        is given, the implicit boundaries described in the module docstring
        are used.
    strict : bool
        If True, invalid assignments raise ``ValidationRejected`` instead of
        warning.

    Attributes
    ----------
    y : np.ndarray
        Pivots: real, finite, nonnegative, nondecreasing.
    boundaries : np.ndarray or None
        Bin boundaries with the same constraints, or None when undefined.
    density : np.ndarray
        Density evaluated at ``y`` (assigning to it calls ``set_density``).
    representation : DensityRepresentation or None
        How the density is stored.
    mu, sigma : float or None
        Parameters of a parametric density; None otherwise.
    """

    strict: bool

    def __init__(self, y=None, density=None, boundaries=None, *, strict: bool = False):
        self.strict = strict
        self._y = np.linspace(0.0, 1.0, 11)
        self._boundaries: Optional[np.ndarray] = None
        self._density: Optional[DensityRepresentation] = None

        if not _is_empty(y):
            self.set_y(y)

        if not _is_empty(density):
            self.set_density(density)

        if not _is_empty(boundaries):
            self.set_boundaries(boundaries)
        elif density is not None:
            implicit = implicit_boundaries(self._y)
            if implicit is not None:
                self.set_boundaries(implicit)

    # ── Pivots ────────────────────────────────────────────────────────────────

    @property
    def y(self) -> np.ndarray:
        return self._y.copy()

    @y.setter
    def y(self, values):
        self.set_y(values)

    def set_y(self, values) -> SetResult:
        """
        Set the pivots.

        Constraints: numeric vector; real, finite, nonnegative, nondecreasing.
        Stored as a 1-D float array.  If boundaries are defined and no longer
        match the new number of pivots, they are discarded.
        """
        arr, reason = check_coordinates(values)
        if arr is None:
            return self._reject('y', reason)

        if self._boundaries is not None and len(self._boundaries) != len(arr) + 1:
            log.debug(
                "Discarding %d boundaries inconsistent with %d new pivots",
                len(self._boundaries), len(arr),
            )
            self._boundaries = None

        self._y = arr
        return SetResult(True)

    # ── Boundaries ────────────────────────────────────────────────────────────

    @property
    def boundaries(self) -> Optional[np.ndarray]:
        if self._boundaries is None:
            return None
        return self._boundaries.copy()

    @boundaries.setter
    def boundaries(self, values):
        self.set_boundaries(values)

    def set_boundaries(self, values) -> SetResult:
        """
        Set the bin boundaries.

        Constraints: numeric vector with at least two elements; real, finite,
        nonnegative, nondecreasing (duplicates allowed).

        If ``len(values) - 1`` differs from the number of pivots, the pivots
        are reset to the arithmetic means of adjacent boundaries.
        """
        arr, reason = check_coordinates(values)
        if arr is None:
            return self._reject('boundaries', reason)
        if len(arr) < 2:
            return self._reject('boundaries', 'must be a vector with at least two elements')

        self._boundaries = arr
        if len(self._y) != len(arr) - 1:
            log.debug("Resetting y as arithmetic means of %d boundaries", len(arr))
            self._y = pivots_from_boundaries(arr)
        return SetResult(True)

    # ── Density ───────────────────────────────────────────────────────────────

    @property
    def density(self) -> np.ndarray:
        return self.get_density()

    @density.setter
    def density(self, value):
        self.set_density(value)

    @property
    def representation(self) -> Optional[DensityRepresentation]:
        return self._density

    @property
    def mu(self) -> Optional[float]:
        if isinstance(self._density, ParametricDensity):
            return self._density.mu
        return None

    @property
    def sigma(self) -> Optional[float]:
        if isinstance(self._density, ParametricDensity):
            return self._density.sigma
        return None

    def set_density(self, value) -> SetResult:
        """
        Set the density.

        Accepts a one-argument callable, a finite real vector, ``None`` or an
        empty sequence (clears the density), a ``(kind, mu, sigma)``
        descriptor with kind ``'normal'`` or ``'lognormal'``
        (case-insensitive), or a ``DensityRepresentation``.  Anything else is
        rejected and the previous density is kept.
        """
        accepted, rep, reason = resolve_density(value)
        if not accepted:
            return self._reject('density', reason)
        self._density = rep
        return SetResult(True)

    def get_density(self) -> np.ndarray:
        """
        Density values at the current pivots.

        Analytic densities are evaluated at ``y``; a stored vector is
        returned as is.  If the result does not have one value per pivot a
        ``SizeMismatchWarning`` is issued.  An empty density gives an empty
        array.
        """
        rep = self._density
        if rep is None:
            return np.array([], dtype=float)

        values = rep.evaluate(self._y)
        if len(values) != len(self._y):
            warnings.warn(
                f"Density has {len(values)} values but there are {len(self._y)} pivots",
                SizeMismatchWarning,
                stacklevel=2,
            )
        return values

    def get_pivot_function(self) -> Optional[Callable]:
        """The closed-form density function, or None for vector/empty densities."""
        rep = self._density
        if isinstance(rep, RawDensity):
            return rep.func
        if isinstance(rep, ParametricDensity):
            return rep
        return None

    @property
    def is_analytic(self) -> bool:
        return self._density is not None and self._density.is_analytic

    # ── Moments ───────────────────────────────────────────────────────────────

    def moments(self, order=None) -> np.ndarray:
        """Moment of the given order as a one-element array (empty if no order)."""
        return _moments([self], order)

    def moment(self, order: float) -> float:
        """j-th moment  Σ F·Δ·y^j  of this distribution."""
        return _moment(self._y, self.get_density(), self._boundaries, order)

    # ── Transforms ────────────────────────────────────────────────────────────

    def to_instrument_response(self, kv) -> 'Distribution':
        """Distribution as it would be measured by the Coulter counter."""
        from pycat.core.instrument import instrument_response
        return instrument_response(self, kv)

    def copy(self) -> 'Distribution':
        """Independent copy with the same pivots, boundaries, density and policy."""
        other = Distribution(strict=self.strict)
        other._y = self._y.copy()
        other._boundaries = None if self._boundaries is None else self._boundaries.copy()
        if isinstance(self._density, ExplicitDensity):
            other._density = ExplicitDensity(self._density.values)
        else:
            other._density = self._density
        return other

    # ── String forms ──────────────────────────────────────────────────────────

    @classmethod
    def from_string(cls, text: str) -> 'Distribution':
        """Rebuild a distribution from its reconstructable string."""
        from pycat.core.serialization import from_reconstructable_string
        return from_reconstructable_string(text)

    def __repr__(self) -> str:
        try:
            return to_reconstructable_string(self)
        except SerializationError:
            return f"<Distribution {to_summary_string(self)}>"

    def __str__(self) -> str:
        return to_summary_string(self)

    # ── Private helpers ───────────────────────────────────────────────────────

    def _reject(self, name: str, reason: str) -> SetResult:
        message = f"Property {name} {reason}; previous value retained"
        if self.strict:
            raise ValidationRejected(message)
        warnings.warn(message, ValidationWarning, stacklevel=3)
        return SetResult(False, message)
