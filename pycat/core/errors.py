"""
Exceptions and warnings raised by pyCAT.

Two kinds of signal are used:

  * Exceptions (``DistributionError`` and subclasses) for conditions that make
    a result impossible to compute, or for validation failures when a
    distribution runs in strict mode.
  * Warnings (``DistributionWarning`` and subclasses), issued through
    :func:`warnings.warn`, for advisory conditions.  The object that issued
    the warning keeps its last valid state and continues to work.
"""

from __future__ import annotations


class DistributionError(ValueError):
    """Base class for all pyCAT errors."""


class ValidationRejected(DistributionError):
    """A setter received invalid input while the distribution is strict."""


class DegenerateRenormalizationError(DistributionError):
    """No mass ended up on the channel grid, so the result cannot be normalised."""


class SerializationError(DistributionError):
    """A distribution string could not be produced or parsed."""


class DistributionWarning(UserWarning):
    """Base class for all pyCAT warnings."""


class ValidationWarning(DistributionWarning):
    """A setter rejected its input; the previous value was retained."""


class SizeMismatchWarning(DistributionWarning):
    """A stored density vector does not have one value per pivot."""


class MissingMomentOrderWarning(DistributionWarning):
    """A moment was requested without an order."""
