"""
pyCAT: particle size distributions for crystallisation analysis

This package models one-dimensional particle size distributions defined either
analytically (a closed-form density or a normal / log-normal family) or
numerically (a vector at the pivots), and provides:

Modules:
    core: Distribution objects, moments, string forms, instrument response
    state: JSON configuration (shape factor, validation policy)

Example:
    >>> import numpy as np
    >>> from pycat import Distribution
    >>> d = Distribution(np.linspace(0, 200, 400), ('normal', 100.0, 15.0))
    >>> print(d)
    Fnc; d_10 = 1e+02, m_3 = 1.1e+06
    >>> cc = d.to_instrument_response(np.pi / 6)   # as seen by a Coulter counter

Moments of several distributions:
    >>> from pycat import DistributionCollection
    >>> series = DistributionCollection([d, cc])
    >>> series.moments(0)
"""

__version__ = "0.1.0"

from pycat.core.distribution import Distribution, SetResult
from pycat.core.collection import DistributionCollection
from pycat.core.density import ExplicitDensity, ParametricDensity, RawDensity
from pycat.core.instrument import instrument_response, remap_to_channels
from pycat.core.serialization import (
    from_reconstructable_string,
    to_reconstructable_string,
    to_summary_string,
)
from pycat.core.errors import (
    DistributionError,
    ValidationRejected,
    DegenerateRenormalizationError,
    SerializationError,
    DistributionWarning,
    ValidationWarning,
    SizeMismatchWarning,
    MissingMomentOrderWarning,
)
from pycat.state import CatConfig

__all__ = [
    "Distribution",
    "SetResult",
    "DistributionCollection",
    "ExplicitDensity",
    "ParametricDensity",
    "RawDensity",
    "instrument_response",
    "remap_to_channels",
    "from_reconstructable_string",
    "to_reconstructable_string",
    "to_summary_string",
    "DistributionError",
    "ValidationRejected",
    "DegenerateRenormalizationError",
    "SerializationError",
    "DistributionWarning",
    "ValidationWarning",
    "SizeMismatchWarning",
    "MissingMomentOrderWarning",
    "CatConfig",
]
