"""
Unit Tests for the Knife-Edge Diffraction Engine

Tests cover:
- Fresnel-Kirchhoff parameter
- ITU-R P.526 loss approximation
- Obstacle detection margins
- Multiple obstacle combination
"""

import math

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from rfpath.common.exceptions import DegenerateGeometryError, InvalidInputError
from rfpath.propagation.diffraction import (
    Obstacle,
    fresnel_parameter,
    diffraction_loss,
    detect_obstacles,
    find_main_obstacle,
    multiple_obstacle_loss,
    clearance_angle,
    analyze_diffraction,
)

# 1 m wavelength
ONE_METER_MHZ = 299.792458

FIVE_SAMPLES = [0.0, 2.5, 5.0, 7.5, 10.0]
FLAT_LOS = [50.0] * 5


def make_obstacle(v, loss, index=1):
    return Obstacle(
        index=index,
        distance=float(index),
        height=0.0,
        terrain_height=0.0,
        los_height=0.0,
        diffraction_loss=loss,
        fresnel_parameter=v,
    )


class TestFresnelParameter:
    """Test diffraction parameter v"""

    def test_known_value(self):
        v = fresnel_parameter(10.0, 5.0, 5.0, 1.0)
        assert v == pytest.approx(10.0 * math.sqrt(0.0008))

    def test_zero_height(self):
        assert fresnel_parameter(0.0, 3.0, 7.0, 2.0) == 0.0

    def test_sign_follows_height(self):
        assert fresnel_parameter(-10.0, 5.0, 5.0, 1.0) == pytest.approx(-fresnel_parameter(10.0, 5.0, 5.0, 1.0))

    @pytest.mark.parametrize("d1,d2", [(0.0, 5.0), (5.0, 0.0), (-1.0, 5.0)])
    def test_obstacle_at_endpoint(self, d1, d2):
        with pytest.raises(DegenerateGeometryError):
            fresnel_parameter(10.0, d1, d2, 1.0)

    def test_invalid_wavelength(self):
        with pytest.raises(InvalidInputError):
            fresnel_parameter(10.0, 5.0, 5.0, 0.0)


class TestDiffractionLoss:
    """Test loss approximation"""

    def test_cutoff(self):
        assert diffraction_loss(-0.78) == 0.0
        assert diffraction_loss(-5.0) == 0.0

    def test_grazing_incidence(self):
        """v = 0 gives roughly 6 dB"""
        assert diffraction_loss(0.0) == pytest.approx(6.0, abs=0.1)

    def test_never_negative(self):
        for v in np.linspace(-10.0, 10.0, 2001):
            assert diffraction_loss(float(v)) >= 0.0

    def test_monotonic_above_cutoff(self):
        losses = [diffraction_loss(float(v)) for v in np.linspace(-0.7, 5.0, 100)]
        assert all(b >= a for a, b in zip(losses, losses[1:]))

    def test_deep_shadow(self):
        """v = 2.4 is about 20 dB"""
        assert 19.0 < diffraction_loss(2.4) < 21.0


class TestDetectObstacles:
    """Test obstacle detection"""

    def test_terrain_above_sightline(self):
        obstacles = detect_obstacles(FIVE_SAMPLES, [0.0, 0.0, 60.0, 0.0, 0.0], FLAT_LOS, ONE_METER_MHZ)

        assert len(obstacles) == 1
        obstacle = obstacles[0]
        assert obstacle.index == 2
        assert obstacle.distance == 5.0
        assert obstacle.height == pytest.approx(10.0)
        assert obstacle.fresnel_parameter == pytest.approx(10.0 * math.sqrt(0.0008))
        assert obstacle.diffraction_loss == pytest.approx(diffraction_loss(obstacle.fresnel_parameter))

    def test_near_grazing_candidate_kept(self):
        """4 m below the sightline is still a candidate, and v > -0.78"""
        obstacles = detect_obstacles(FIVE_SAMPLES, [0.0, 0.0, 46.0, 0.0, 0.0], FLAT_LOS, ONE_METER_MHZ)
        assert len(obstacles) == 1
        assert obstacles[0].height == pytest.approx(-4.0)
        assert obstacles[0].fresnel_parameter < 0

    def test_outside_candidate_margin_skipped(self):
        """6 m below the sightline is never examined"""
        obstacles = detect_obstacles(FIVE_SAMPLES, [0.0, 0.0, 44.0, 0.0, 0.0], FLAT_LOS, ONE_METER_MHZ)
        assert obstacles == []

    def test_candidate_below_v_cutoff_dropped(self):
        """Inside the 5 m margin but v <= -0.78 at high frequency"""
        obstacles = detect_obstacles(FIVE_SAMPLES, [0.0, 0.0, 45.1, 0.0, 0.0], FLAT_LOS, 10000.0)
        assert obstacles == []

    def test_endpoints_ignored(self):
        obstacles = detect_obstacles(FIVE_SAMPLES, [500.0, 0.0, 0.0, 0.0, 500.0], FLAT_LOS, ONE_METER_MHZ)
        assert obstacles == []

    def test_path_order(self):
        obstacles = detect_obstacles(FIVE_SAMPLES, [0.0, 70.0, 0.0, 55.0, 0.0], FLAT_LOS, ONE_METER_MHZ)
        assert [o.index for o in obstacles] == [1, 3]


class TestCombination:
    """Test main obstacle and combined loss"""

    def test_main_obstacle(self):
        obstacles = [make_obstacle(0.5, 8.0, 1), make_obstacle(1.0, 10.0, 2), make_obstacle(0.0, 6.0, 3)]
        assert find_main_obstacle(obstacles).index == 2

    def test_main_obstacle_empty(self):
        assert find_main_obstacle([]) is None

    def test_combined_loss(self):
        """Largest v counts fully, then halving weights in descending v"""
        obstacles = [make_obstacle(0.0, 6.0, 1), make_obstacle(1.0, 10.0, 2), make_obstacle(0.5, 8.0, 3)]
        assert multiple_obstacle_loss(obstacles) == pytest.approx(10.0 + 8.0 * 0.5 + 6.0 * 0.25)

    def test_single_obstacle_loss(self):
        assert multiple_obstacle_loss([make_obstacle(1.0, 13.5)]) == 13.5

    def test_no_obstacles(self):
        assert multiple_obstacle_loss([]) == 0.0

    def test_analyze_diffraction(self):
        result = analyze_diffraction(FIVE_SAMPLES, [0.0, 70.0, 0.0, 55.0, 0.0], FLAT_LOS, ONE_METER_MHZ)
        assert len(result.obstacles) == 2
        assert result.main_obstacle.index == 1
        assert result.total_loss == pytest.approx(multiple_obstacle_loss(result.obstacles))
        assert result.to_dict()['main_obstacle']['index'] == 1

    def test_analyze_clear_path(self):
        result = analyze_diffraction(FIVE_SAMPLES, [0.0] * 5, FLAT_LOS, ONE_METER_MHZ)
        assert result.obstacles == ()
        assert result.main_obstacle is None
        assert result.total_loss == 0.0


class TestClearanceAngle:
    """Test obstacle angle"""

    def test_angle(self):
        assert clearance_angle(100.0, 1.0) == pytest.approx(math.degrees(math.atan(0.1)))

    def test_below_sightline(self):
        assert clearance_angle(-50.0, 2.0) < 0

    def test_zero_distance(self):
        with pytest.raises(DegenerateGeometryError):
            clearance_angle(10.0, 0.0)
