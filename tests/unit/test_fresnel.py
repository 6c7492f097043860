"""
Unit Tests for the Fresnel Zone Engine
"""

import math

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from rfpath.common.exceptions import InvalidInputError, DegenerateGeometryError
from rfpath.propagation.fresnel import (
    wavelength,
    fresnel_radius,
    compute_fresnel_zone,
    clearance_status,
)


class TestWavelength:
    """Test wavelength conversion"""

    def test_one_meter(self):
        assert wavelength(299.792458) == pytest.approx(1.0)

    def test_two_meter_band(self):
        assert 2.0 < wavelength(146.0) < 2.1

    @pytest.mark.parametrize("f", [0.0, -10.0, float('inf'), float('nan')])
    def test_invalid_frequency(self, f):
        with pytest.raises(InvalidInputError):
            wavelength(f)


class TestFresnelRadius:
    """Test first Fresnel zone radius"""

    def test_midpoint_radius(self):
        lam = 299.792458 / 145.5
        expected = math.sqrt(lam * 5000.0 * 5000.0 / 10000.0)
        assert fresnel_radius(5.0, 5.0, 145.5) == pytest.approx(expected)

    def test_zero_at_antenna(self):
        assert fresnel_radius(0.0, 10.0, 145.5) == 0.0

    def test_symmetric(self):
        assert fresnel_radius(2.0, 8.0, 440.0) == pytest.approx(fresnel_radius(8.0, 2.0, 440.0))

    def test_higher_zone_larger(self):
        assert fresnel_radius(5.0, 5.0, 145.5, zone=2) == pytest.approx(
            math.sqrt(2) * fresnel_radius(5.0, 5.0, 145.5)
        )

    def test_higher_frequency_narrower(self):
        assert fresnel_radius(5.0, 5.0, 5800.0) < fresnel_radius(5.0, 5.0, 145.5)

    def test_zero_length_path(self):
        with pytest.raises(DegenerateGeometryError):
            fresnel_radius(0.0, 0.0, 145.5)

    def test_zero_frequency(self):
        with pytest.raises(InvalidInputError):
            fresnel_radius(5.0, 5.0, 0.0)


class TestComputeFresnelZone:
    """Test zone envelope and clearance metrics"""

    def setup_method(self):
        self.distances = np.linspace(0.0, 10.0, 11)
        self.los = np.full(11, 50.0)
        self.frequency = 145.5

    def test_envelope_shape(self):
        zone = compute_fresnel_zone(self.distances, np.zeros(11), self.los, self.frequency)

        mid_radius = fresnel_radius(5.0, 5.0, self.frequency)
        assert zone.radius == pytest.approx(mid_radius)
        assert zone.upper[5] == pytest.approx(50.0 + mid_radius)
        assert zone.lower[5] == pytest.approx(50.0 - mid_radius)
        assert zone.upper[0] == pytest.approx(50.0)
        assert zone.lower[-1] == pytest.approx(50.0)

    def test_endpoint_percentages_infinite(self):
        zone = compute_fresnel_zone(self.distances, np.zeros(11), self.los, self.frequency)
        assert len(zone.clearance_percentages) == 11
        assert math.isinf(zone.clearance_percentages[0])
        assert math.isinf(zone.clearance_percentages[-1])

    def test_minimum_at_widest_point(self):
        """Flat terrain: tightest clearance where the zone is widest"""
        zone = compute_fresnel_zone(self.distances, np.zeros(11), self.los, self.frequency)
        expected = 100.0 * 50.0 / fresnel_radius(5.0, 5.0, self.frequency)
        assert zone.min_clearance == pytest.approx(expected)
        assert zone.min_clearance_distance == 5.0
        assert zone.min_clearance_meters == pytest.approx(50.0)

    def test_clear_sightline_poor_fresnel(self):
        """Terrain below the sightline can still intrude on the zone"""
        elevations = np.zeros(11)
        elevations[5] = 40.0
        zone = compute_fresnel_zone(self.distances, elevations, self.los, self.frequency)

        assert zone.min_clearance > 0
        assert not zone.is_clear
        assert zone.status == 'poor'
        assert zone.min_clearance_distance == 5.0
        assert zone.min_clearance_meters == pytest.approx(10.0)

    def test_obstructed(self):
        elevations = np.zeros(11)
        elevations[3] = 80.0
        zone = compute_fresnel_zone(self.distances, elevations, self.los, self.frequency)
        assert zone.min_clearance < 0
        assert zone.status == 'obstructed'
        assert zone.min_clearance_distance == 3.0

    def test_custom_threshold(self):
        zone = compute_fresnel_zone(
            self.distances, np.zeros(11), self.los, self.frequency, clearance_threshold=1000.0
        )
        assert not zone.is_clear

    def test_two_sample_path(self):
        zone = compute_fresnel_zone([0.0, 10.0], [0.0, 0.0], [50.0, 50.0], self.frequency)
        assert math.isinf(zone.min_clearance)
        assert zone.min_clearance_distance == 0.0
        assert zone.is_clear

    def test_zero_length_path(self):
        with pytest.raises(DegenerateGeometryError):
            compute_fresnel_zone([0.0, 0.0], [0.0, 0.0], [10.0, 10.0], self.frequency)

    def test_sightline_length_mismatch(self):
        with pytest.raises(InvalidInputError):
            compute_fresnel_zone(self.distances, np.zeros(11), self.los[:5], self.frequency)

    def test_to_dict(self):
        zone = compute_fresnel_zone(self.distances, np.zeros(11), self.los, self.frequency)
        data = zone.to_dict()
        assert data['is_clear'] is True
        assert data['status'] == zone.status
        assert len(data['upper']) == 11


class TestClearanceStatus:
    """Test qualitative ratings"""

    @pytest.mark.parametrize("percent,expected", [
        (150.0, 'excellent'),
        (100.0, 'excellent'),
        (60.0, 'good'),
        (59.9, 'marginal'),
        (20.0, 'marginal'),
        (0.0, 'poor'),
        (-0.1, 'obstructed'),
    ])
    def test_ratings(self, percent, expected):
        assert clearance_status(percent) == expected
