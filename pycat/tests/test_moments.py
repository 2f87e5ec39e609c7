"""
Unit tests for moments, normalised densities and collections.
"""

import numpy as np
import pytest

from pycat.core.collection import DistributionCollection
from pycat.core.distribution import Distribution
from pycat.core.errors import MissingMomentOrderWarning
from pycat.core.grids import bin_widths
from pycat.core.moments import moment, moments, number_density, volume_density


def _spike():
    """Unit mass in the bin [1.5, 2.5] around pivot 2."""
    return Distribution([1.0, 2.0, 3.0], [0.0, 1.0, 0.0], [0.0, 1.5, 2.5, 4.5])


# ──────────────────────────────────────────────────────────────────────────────
# Single moments
# ──────────────────────────────────────────────────────────────────────────────

class TestMoment:
    def test_spike(self):
        d = _spike()
        assert d.moment(0) == pytest.approx(1.0)
        assert d.moment(1) == pytest.approx(2.0)
        assert d.moment(3) == pytest.approx(8.0)

    def test_uses_bin_widths(self):
        d = Distribution([1.0, 2.0, 3.0], [1.0, 1.0, 1.0], [0.0, 1.5, 2.5, 4.5])
        # widths 1.5, 1, 2
        assert d.moment(0) == pytest.approx(4.5)
        assert d.moment(1) == pytest.approx(1.5 + 2.0 + 6.0)

    def test_no_boundaries_uses_pivots_as_upper_edges(self):
        d = Distribution([1.0, 3.0, 4.0])
        d.density = [1.0, 1.0, 1.0]
        assert d.boundaries is None
        np.testing.assert_allclose(bin_widths(d.y), [1.0, 2.0, 1.0])
        assert d.moment(0) == pytest.approx(4.0)

    def test_normal_distribution(self):
        d = Distribution(np.linspace(0, 2, 201), ('normal', 1.0, 0.1))
        assert d.moment(0) == pytest.approx(1.0, rel=1e-4)
        assert d.moment(1) / d.moment(0) == pytest.approx(1.0, rel=1e-4)

    def test_empty_density_is_zero(self):
        assert Distribution([1.0, 2.0]).moment(2) == 0.0

    def test_mismatch_is_nan(self):
        y = np.array([1.0, 2.0, 3.0])
        assert np.isnan(moment(y, [1.0, 1.0], None, 0))

    def test_fractional_order(self):
        d = _spike()
        assert d.moment(0.5) == pytest.approx(np.sqrt(2.0))


# ──────────────────────────────────────────────────────────────────────────────
# Batches
# ──────────────────────────────────────────────────────────────────────────────

class TestMoments:
    def _three(self):
        return [
            Distribution([1.0, 2.0, 3.0], [0.0, 1.0, 0.0], [0.0, 1.5, 2.5, 4.5]),
            Distribution([1.0, 2.0, 3.0], [0.0, 2.0, 0.0], [0.0, 1.5, 2.5, 4.5]),
            Distribution([1.0, 2.0, 3.0], [0.0, 3.0, 0.0], [0.0, 1.5, 2.5, 4.5]),
        ]

    def test_all(self):
        np.testing.assert_allclose(moments(self._three(), 0), [1.0, 2.0, 3.0])

    def test_indices_order_and_repeats(self):
        out = moments(self._three(), 1, [2, 0, 2])
        np.testing.assert_allclose(out, [6.0, 2.0, 6.0])

    def test_missing_order_warns(self):
        with pytest.warns(MissingMomentOrderWarning):
            out = moments(self._three())
        assert out.size == 0

    def test_empty_order_warns(self):
        with pytest.warns(MissingMomentOrderWarning):
            out = moments(self._three(), [])
        assert out.size == 0

    def test_single_distribution(self):
        out = _spike().moments(1)
        assert out.shape == (1,)
        assert out[0] == pytest.approx(2.0)

    def test_single_distribution_missing_order(self):
        with pytest.warns(MissingMomentOrderWarning):
            assert _spike().moments().size == 0


# ──────────────────────────────────────────────────────────────────────────────
# Normalised densities
# ──────────────────────────────────────────────────────────────────────────────

class TestNormalised:
    def test_number_density_integrates_to_one(self):
        d = Distribution([1.0, 2.0, 3.0], [1.0, 2.0, 1.0])
        n = number_density(d)
        assert np.sum(n * bin_widths(d.y, d.boundaries)) == pytest.approx(1.0)

    def test_volume_density_integrates_to_one(self):
        d = Distribution([1.0, 2.0, 3.0], [1.0, 2.0, 1.0])
        v = volume_density(d)
        assert np.sum(v * bin_widths(d.y, d.boundaries)) == pytest.approx(1.0)

    def test_volume_weighting_shifts_mass_up(self):
        d = Distribution([1.0, 2.0, 3.0], [1.0, 1.0, 1.0])
        n = number_density(d)
        v = volume_density(d)
        assert v[-1] / v[0] > n[-1] / n[0]


# ──────────────────────────────────────────────────────────────────────────────
# Collections
# ──────────────────────────────────────────────────────────────────────────────

class TestCollection:
    def test_moments(self):
        series = DistributionCollection([
            Distribution(np.linspace(0, 2, 201), ('normal', 1.0, 0.1)),
            _spike(),
        ])
        out = series.moments(1, [1, 0])
        assert out[0] == pytest.approx(2.0)
        assert out[1] == pytest.approx(1.0, rel=1e-4)

    def test_members_on_different_grids(self):
        series = DistributionCollection([
            Distribution([1.0, 2.0], [1.0, 1.0]),
            Distribution([1.0, 2.0, 3.0, 4.0], [1.0, 1.0, 1.0, 1.0]),
        ])
        np.testing.assert_allclose(series.moments(0), [2.5, 4.5])

    def test_missing_order_warns(self):
        series = DistributionCollection([_spike()])
        with pytest.warns(MissingMomentOrderWarning):
            assert series.moments().size == 0

    def test_rejects_non_distribution(self):
        series = DistributionCollection()
        with pytest.raises(TypeError):
            series.append([1.0, 2.0])
        with pytest.raises(TypeError):
            DistributionCollection([_spike(), 'x'])

    def test_slice_is_collection(self):
        series = DistributionCollection([_spike(), _spike(), _spike()])
        part = series[1:]
        assert isinstance(part, DistributionCollection)
        assert len(part) == 2

    def test_summary(self):
        series = DistributionCollection([_spike(), Distribution()])
        assert series.summary() == ['Vec; d_10 = 2, m_3 = 8', 'Empty']
