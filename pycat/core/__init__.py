"""
Core modules for pyCAT.

This module contains:
- Distribution: pivots, boundaries and density with validated setters
- Density representations (vector, parametric family, raw function)
- Moments of single distributions and collections
- Reconstructable and summary string forms, with a whitelisted parser for
  density lambdas (no eval)
- Coulter counter instrument response

Classes:
    Distribution: Size distribution over a characteristic length
    DistributionCollection: Ordered ensemble / time series of distributions
"""

from pycat.core.distribution import Distribution, SetResult
from pycat.core.collection import DistributionCollection
from pycat.core.instrument import instrument_response, remap_to_channels

__all__ = [
    "Distribution",
    "SetResult",
    "DistributionCollection",
    "instrument_response",
    "remap_to_channels",
]
