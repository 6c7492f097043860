"""
Unit Tests for K-factor presets
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from rfpath.common.constants import EARTH_RADIUS_KM, STANDARD_K_FACTOR
from rfpath.common.exceptions import InvalidInputError
from rfpath.propagation.atmosphere import (
    Climate,
    Condition,
    validate_k_factor,
    effective_earth_radius_km,
    recommended_k_factor,
    k_factor_description,
)


class TestKFactor:
    """Test K-factor handling"""

    def test_effective_radius(self):
        assert effective_earth_radius_km(STANDARD_K_FACTOR) == pytest.approx(EARTH_RADIUS_KM * 4.0 / 3.0)

    @pytest.mark.parametrize("k", [0.0, 0.99, 5.01])
    def test_out_of_range(self, k):
        with pytest.raises(InvalidInputError):
            validate_k_factor(k)

    def test_in_range(self):
        assert validate_k_factor(1.0) == 1.0
        assert validate_k_factor(5.0) == 5.0


class TestRecommendations:
    """Test climate and condition presets"""

    @pytest.mark.parametrize("climate", list(Climate))
    def test_normal_conditions_standard(self, climate):
        assert recommended_k_factor(climate, Condition.NORMAL) == pytest.approx(STANDARD_K_FACTOR)
        assert recommended_k_factor(climate, Condition.CLEAR) == pytest.approx(STANDARD_K_FACTOR)

    def test_inversion_hot_climate(self):
        assert recommended_k_factor(Climate.DESERT, Condition.INVERSION) == 1.5
        assert recommended_k_factor(Climate.TROPICAL, Condition.INVERSION) == 1.5

    def test_inversion_temperate(self):
        assert recommended_k_factor(Climate.TEMPERATE, Condition.INVERSION) == 1.4

    def test_ducting(self):
        assert recommended_k_factor(Climate.ARCTIC, Condition.DUCTING) == 5.0

    @pytest.mark.parametrize("climate", list(Climate))
    @pytest.mark.parametrize("condition", list(Condition))
    def test_recommendations_valid(self, climate, condition):
        validate_k_factor(recommended_k_factor(climate, condition))


class TestDescription:
    """Test refraction regime text"""

    @pytest.mark.parametrize("k,prefix", [
        (1.0, "Subrefractive"),
        (STANDARD_K_FACTOR, "Standard"),
        (1.5, "Superrefractive"),
        (5.0, "Ducting"),
    ])
    def test_regimes(self, k, prefix):
        assert k_factor_description(k).startswith(prefix)
