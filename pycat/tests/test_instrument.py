"""
Unit tests for the Coulter counter channel table and instrument response.
"""

import numpy as np
import pytest

from pycat.core.channels import (
    COULTER_CHANNEL_BOUNDARIES,
    channel_pivots,
    channel_widths,
)
from pycat.core.collection import DistributionCollection
from pycat.core.distribution import Distribution
from pycat.core.errors import DegenerateRenormalizationError, DistributionError
from pycat.core.instrument import (
    equivalent_diameter,
    instrument_response,
    remap_to_channels,
    shape_factor,
)
from pycat.state import CatConfig

KV_SPHERE = np.pi / 6


def _crystals():
    return Distribution(np.linspace(50, 150, 200), ('normal', 100.0, 10.0))


# ──────────────────────────────────────────────────────────────────────────────
# Channel table
# ──────────────────────────────────────────────────────────────────────────────

class TestChannels:
    def test_table(self):
        b = COULTER_CHANNEL_BOUNDARIES
        assert len(b) == 301
        assert b[0] == 20.0
        assert b[1] == 20.228
        assert b[-2] == 593.236
        assert b[-1] == 600.0
        assert np.all(np.diff(b) > 0)

    def test_read_only(self):
        with pytest.raises(ValueError):
            COULTER_CHANNEL_BOUNDARIES[0] = 1.0

    def test_pivots_and_widths(self):
        p = channel_pivots()
        w = channel_widths()
        assert p.shape == (300,)
        assert w.shape == (300,)
        assert p[0] == pytest.approx(20.114)
        assert np.sum(w) == pytest.approx(580.0)


# ──────────────────────────────────────────────────────────────────────────────
# Shape factor
# ──────────────────────────────────────────────────────────────────────────────

class TestShapeFactor:
    def test_sphere_keeps_length(self):
        y = np.array([20.0, 100.0, 400.0])
        np.testing.assert_allclose(equivalent_diameter(y, KV_SPHERE), y)

    def test_config_object(self, tmp_path):
        config = CatConfig(tmp_path / 'config.json')
        config.kv = 0.4
        assert shape_factor(config) == 0.4

    @pytest.mark.parametrize('bad', [0.0, -1.0, np.nan, np.inf, 'abc', None])
    def test_invalid(self, bad):
        with pytest.raises(DistributionError):
            shape_factor(bad)


# ──────────────────────────────────────────────────────────────────────────────
# Remapping
# ──────────────────────────────────────────────────────────────────────────────

class TestRemap:
    def test_boundary_tie_is_not_counted(self):
        y = np.array([1.0, 2.0, 3.0])
        L = equivalent_diameter(y, 1.0)
        channels = np.array([L[0] - 0.1, L[1], L[2] + 1.0])
        values = remap_to_channels(y, [1.0, 5.0, 1.0], 1.0, channels)
        # the heavy middle bin sits exactly on a boundary and is dropped
        assert values[0] == pytest.approx(values[1])

    def test_lower_edge_is_not_counted(self):
        y = np.array([1.0, 2.0])
        L = equivalent_diameter(y, 1.0)
        channels = np.array([L[0], L[1] - 0.01, L[1] + 0.01])
        values = remap_to_channels(y, [100.0, 1.0], 1.0, channels)
        assert values[0] == 0.0
        assert values[1] > 0.0

    def test_gaps_are_interpolated(self):
        channels = np.arange(0.0, 7.0)
        # populated channels 1 and 5 only; equivalent diameter = y for kv = π/6
        y = np.array([1.5, 5.5])
        values = remap_to_channels(y, [1.0, 3.0], KV_SPHERE, channels)
        assert values[0] == 0.0
        np.testing.assert_allclose(values[1:6] / values[1], [1.0, 1.5, 2.0, 2.5, 3.0])
        assert np.sum(values * np.diff(channels)) == pytest.approx(1.0)

    def test_nothing_in_range(self):
        with pytest.raises(DegenerateRenormalizationError):
            remap_to_channels([1.0, 2.0, 3.0], [1.0, 1.0, 1.0], KV_SPHERE)

    def test_zero_mass(self):
        with pytest.raises(DegenerateRenormalizationError):
            remap_to_channels([50.0, 60.0], [0.0, 0.0], KV_SPHERE)

    def test_length_mismatch(self):
        with pytest.raises(DistributionError):
            remap_to_channels([50.0, 60.0], [1.0], KV_SPHERE)


# ──────────────────────────────────────────────────────────────────────────────
# Instrument response
# ──────────────────────────────────────────────────────────────────────────────

class TestInstrumentResponse:
    def test_on_channel_grid(self):
        cc = instrument_response(_crystals(), KV_SPHERE)
        np.testing.assert_array_equal(cc.boundaries, COULTER_CHANNEL_BOUNDARIES)
        np.testing.assert_allclose(cc.y, channel_pivots())
        assert len(cc.density) == 300

    def test_normalised(self):
        cc = _crystals().to_instrument_response(KV_SPHERE)
        assert cc.moment(0) == pytest.approx(1.0)
        assert np.all(cc.density >= 0)

    def test_mean_stays_near_source_for_spheres(self):
        cc = _crystals().to_instrument_response(KV_SPHERE)
        assert cc.moment(1) / cc.moment(0) == pytest.approx(100.0, abs=5.0)

    def test_larger_shape_factor_shifts_up(self):
        small = _crystals().to_instrument_response(KV_SPHERE)
        large = _crystals().to_instrument_response(1.0)
        assert large.moment(1) > small.moment(1)

    def test_source_not_modified(self):
        d = Distribution(np.linspace(50, 150, 20), np.linspace(1.0, 2.0, 20))
        y, dens, b = d.y, d.density, d.boundaries
        d.to_instrument_response(KV_SPHERE)
        np.testing.assert_array_equal(d.y, y)
        np.testing.assert_array_equal(d.density, dens)
        np.testing.assert_array_equal(d.boundaries, b)

    def test_config_as_shape_factor(self, tmp_path):
        config = CatConfig(tmp_path / 'config.json')
        from_config = _crystals().to_instrument_response(config)
        direct = _crystals().to_instrument_response(config.kv)
        np.testing.assert_array_equal(from_config.density, direct.density)

    def test_empty_density(self):
        with pytest.raises(DegenerateRenormalizationError):
            instrument_response(Distribution([50.0, 60.0]), KV_SPHERE)

    def test_out_of_range(self):
        small = Distribution([1.0, 2.0, 3.0], [1.0, 1.0, 1.0])
        with pytest.raises(DegenerateRenormalizationError):
            small.to_instrument_response(KV_SPHERE)

    def test_collection(self):
        series = DistributionCollection([
            _crystals(),
            Distribution(np.linspace(100, 300, 100), ('lognormal', np.log(200.0), 0.2)),
        ])
        responses = series.instrument_response(KV_SPHERE)
        assert isinstance(responses, DistributionCollection)
        assert len(responses) == 2
        np.testing.assert_allclose(responses.moments(0), [1.0, 1.0])
