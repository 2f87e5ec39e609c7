"""
Channel grid of the Coulter counter.

The Multisizer reports counts in 300 channels spanning 20 to 600 (same length
unit as the distribution pivots after conversion to equivalent spherical
diameter).  Each channel is about 1.13% wider than the previous one.  The
table is the instrument's published boundary list and is used verbatim:
remapped distributions are only comparable with measurements when exactly
these 301 boundaries are used.
"""

from __future__ import annotations

import numpy as np

from pycat.core.grids import pivots_from_boundaries

#: Bump when the boundary table changes.
CHANNEL_TABLE_VERSION = 'coulter_300/1'

#: 301 channel boundaries, ascending, 20 → 600.
COULTER_CHANNEL_BOUNDARIES: np.ndarray = np.array([
    20.0, 20.228, 20.4587, 20.6919, 20.9279, 21.1665,
    21.4078, 21.6519, 21.8988, 22.1485, 22.401, 22.6564,
    22.9147, 23.176, 23.4403, 23.7075, 23.9778, 24.2512,
    24.5277, 24.8074, 25.0902, 25.3763, 25.6656, 25.9583,
    26.2543, 26.5536, 26.8564, 27.1626, 27.4723, 27.7855,
    28.1023, 28.4227, 28.7468, 29.0746, 29.4061, 29.7414,
    30.0805, 30.4234, 30.7703, 31.1212, 31.476, 31.8349,
    32.1979, 32.565, 32.9363, 33.3118, 33.6916, 34.0758,
    34.4643, 34.8573, 35.2547, 35.6567, 36.0632, 36.4744,
    36.8903, 37.3109, 37.7363, 38.1666, 38.6017, 39.0419,
    39.487, 39.9372, 40.3926, 40.8531, 41.3189, 41.7901,
    42.2665, 42.7485, 43.2359, 43.7288, 44.2274, 44.7317,
    45.2417, 45.7576, 46.2793, 46.8069, 47.3406, 47.8804,
    48.4263, 48.9785, 49.5369, 50.1017, 50.673, 51.2507,
    51.8351, 52.4261, 53.0239, 53.6284, 54.2399, 54.8583,
    55.4838, 56.1164, 56.7563, 57.4034, 58.0579, 58.7199,
    59.3894, 60.0665, 60.7514, 61.4441, 62.1446, 62.8532,
    63.5699, 64.2947, 65.0277, 65.7692, 66.5191, 67.2775,
    68.0446, 68.8204, 69.6051, 70.3987, 71.2014, 72.0132,
    72.8343, 73.6648, 74.5047, 75.3542, 76.2133, 77.0823,
    77.9612, 78.8501, 79.7491, 80.6584, 81.5781, 82.5082,
    83.449, 84.4004, 85.3627, 86.336, 87.3204, 88.316,
    89.323, 90.3415, 91.3715, 92.4133, 93.467, 94.5327,
    95.6105, 96.7007, 97.8032, 98.9184, 100.046, 101.187,
    102.341, 103.508, 104.688, 105.881, 107.089, 108.31,
    109.545, 110.794, 112.057, 113.334, 114.627, 115.934,
    117.255, 118.592, 119.945, 121.312, 122.695, 124.094,
    125.509, 126.94, 128.388, 129.851, 131.332, 132.829,
    134.344, 135.876, 137.425, 138.992, 140.577, 142.179,
    143.8, 145.44, 147.098, 148.776, 150.472, 152.188,
    153.923, 155.678, 157.453, 159.248, 161.064, 162.9,
    164.757, 166.636, 168.536, 170.458, 172.401, 174.367,
    176.355, 178.366, 180.399, 182.456, 184.537, 186.641,
    188.769, 190.921, 193.098, 195.3, 197.526, 199.778,
    202.056, 204.36, 206.69, 209.047, 211.43, 213.841,
    216.279, 218.745, 221.239, 223.762, 226.313, 228.894,
    231.503, 234.143, 236.813, 239.513, 242.244, 245.006,
    247.799, 250.624, 253.482, 256.372, 259.295, 262.252,
    265.242, 268.266, 271.325, 274.418, 277.547, 280.712,
    283.913, 287.15, 290.424, 293.735, 297.084, 300.471,
    303.897, 307.362, 310.867, 314.411, 317.996, 321.622,
    325.289, 328.998, 332.749, 336.543, 340.38, 344.261,
    348.186, 352.156, 356.172, 360.233, 364.34, 368.494,
    372.696, 376.945, 381.243, 385.59, 389.986, 394.433,
    398.93, 403.479, 408.079, 412.732, 417.438, 422.197,
    427.011, 431.88, 436.804, 441.784, 446.822, 451.916,
    457.069, 462.28, 467.551, 472.882, 478.274, 483.727,
    489.242, 494.821, 500.462, 506.169, 511.94, 517.777,
    523.68, 529.651, 535.69, 541.798, 547.976, 554.224,
    560.543, 566.934, 573.398, 579.936, 586.548, 593.236,
    600.0,
])
COULTER_CHANNEL_BOUNDARIES.setflags(write=False)


def channel_pivots(boundaries: np.ndarray = COULTER_CHANNEL_BOUNDARIES) -> np.ndarray:
    """Channel centres: arithmetic mean of adjacent boundaries."""
    return pivots_from_boundaries(boundaries)


def channel_widths(boundaries: np.ndarray = COULTER_CHANNEL_BOUNDARIES) -> np.ndarray:
    return np.diff(np.asarray(boundaries, dtype=float))
