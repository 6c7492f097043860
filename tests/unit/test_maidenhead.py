"""
Unit Tests for the Maidenhead Grid Locator Codec

Tests cover:
- Encoding at 4/6/8 character precision
- Decoding to cell centers
- Validation alphabets and lengths
- Canonical case formatting
- Round trips through decode/encode
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from rfpath.common.exceptions import InvalidInputError
from rfpath.common.geodesy import GeoPoint
from rfpath.locator.maidenhead import encode, decode, validate, canonicalize, cell_bounds


class TestEncode:
    """Test coordinate to locator conversion"""

    def test_origin(self):
        """(0, 0) sits on the corner of field JJ"""
        assert encode(GeoPoint(0.0, 0.0), 8) == "JJ00aa00"

    def test_london(self):
        """Central London is IO91wm"""
        assert encode(GeoPoint(51.5, -0.12), 6) == "IO91wm"

    @pytest.mark.parametrize("precision", [4, 6, 8])
    def test_precision_length(self, precision):
        assert len(encode(GeoPoint(47.6, -122.3), precision)) == precision

    def test_precision_prefixes(self):
        """Shorter locators are prefixes of longer ones"""
        point = GeoPoint(-33.8688, 151.2093)
        full = encode(point, 8)
        assert encode(point, 6) == full[:6]
        assert encode(point, 4) == full[:4]

    def test_default_precision(self):
        assert len(encode(GeoPoint(10.0, 10.0))) == 6

    def test_north_pole_and_antimeridian(self):
        """Upper edges fold into the last cell"""
        assert encode(GeoPoint(90.0, 180.0), 4) == "RR99"

    def test_south_west_corner(self):
        assert encode(GeoPoint(-90.0, -180.0), 8) == "AA00aa00"

    @pytest.mark.parametrize("precision", [2, 3, 5, 10])
    def test_invalid_precision(self, precision):
        with pytest.raises(InvalidInputError):
            encode(GeoPoint(0.0, 0.0), precision)

    def test_out_of_range_point(self):
        with pytest.raises(InvalidInputError):
            encode(GeoPoint(95.0, 0.0), 6)


class TestDecode:
    """Test locator to coordinate conversion"""

    def test_field_center(self):
        point = decode("JJ")
        assert point.latitude == pytest.approx(5.0)
        assert point.longitude == pytest.approx(10.0)

    def test_square_center(self):
        point = decode("JJ00")
        assert point.latitude == pytest.approx(0.5)
        assert point.longitude == pytest.approx(1.0)

    def test_subsquare_center(self):
        point = decode("JJ00aa")
        assert point.latitude == pytest.approx(1.0 / 48)
        assert point.longitude == pytest.approx(1.0 / 24)

    def test_case_insensitive(self):
        assert decode("io91WM") == decode("IO91wm")

    @pytest.mark.parametrize("locator", ["", "K", "KN41X", "ZZ99", "KN4", "KN41zz", "KN41aa0a", 42])
    def test_malformed(self, locator):
        with pytest.raises(InvalidInputError):
            decode(locator)

    def test_cell_bounds(self):
        south, west, north, east = cell_bounds("JN58")
        assert (south, west, north, east) == pytest.approx((48.0, 10.0, 49.0, 12.0))


class TestValidate:
    """Test validation rules"""

    @pytest.mark.parametrize("locator", ["KN", "KN41", "kn41", "AA00aa00", "RR99xx99", "IO91wm", " FN31pr "])
    def test_valid(self, locator):
        assert validate(locator) is True

    @pytest.mark.parametrize("locator", ["KN41X", "ZZ99zz99", "SA00", "AA0A", "AA00yy", "AA00aa0", "AA00aa00aa", ""])
    def test_invalid(self, locator):
        assert validate(locator) is False

    def test_non_string(self):
        assert validate(None) is False


class TestCanonicalize:
    """Test case normalization"""

    def test_mixed_case(self):
        assert canonicalize("io91WM") == "IO91wm"

    def test_extended(self):
        assert canonicalize("kn41BO34") == "KN41bo34"

    def test_field_only(self):
        assert canonicalize("fn") == "FN"

    def test_invalid_returns_none(self):
        assert canonicalize("KN41X") is None


class TestRoundTrip:
    """Test decode/encode consistency"""

    @pytest.mark.parametrize("locator", ["KN41bo34", "AA00aa00", "RR99xx99", "JJ00aa00", "FN31pr54", "QF56od12"])
    def test_eight_character_round_trip(self, locator):
        assert encode(decode(locator), 8) == locator

    @pytest.mark.parametrize("locator", ["io91wm", "FN31", "cn87UO"])
    def test_round_trip_canonical(self, locator):
        assert encode(decode(locator), len(locator.strip())) == canonicalize(locator)

    @pytest.mark.parametrize("point", [
        GeoPoint(47.6062, -122.3321),
        GeoPoint(-33.8688, 151.2093),
        GeoPoint(0.0001, -0.0001),
        GeoPoint(64.1466, -21.9426),
    ])
    def test_point_stays_in_its_cell(self, point):
        """decode(encode(p)) lands in the 8-character cell containing p"""
        locator = encode(point, 8)
        south, west, north, east = cell_bounds(locator)
        assert south <= point.latitude < north
        assert west <= point.longitude < east

        center = decode(locator)
        assert south < center.latitude < north
        assert west < center.longitude < east
