"""Tests for unit and direction conversion."""
import math

import pytest

from noaa_weather.units import (
    camel_case,
    convert_direction,
    convert_units,
    fahrenheit_to_kelvin,
    parse_wind_speed,
)


@pytest.mark.parametrize(
    "unit_code, raw, expected, units",
    [
        ("unit:percent", 45, 0.45, "ratio"),
        ("unit:degC", 0, 273.15, "K"),
        ("unit:km_h-1", 36, 10.0, "m/s"),
        ("unit:degree_(angle)", 180, math.pi, "rad"),
        ("unit:Pa", 101325, 101325, "Pa"),
        ("unit:m", 16090, 16090, "m"),
    ],
)
def test_convert_units_table(unit_code, raw, expected, units):
    """Test every supported unit code"""
    value, label = convert_units(unit_code, raw)
    assert value == pytest.approx(expected)
    assert label == units


def test_convert_units_accepts_wmo_prefix():
    assert convert_units("wmoUnit:degC", 20) == (pytest.approx(293.15), "K")
    assert convert_units("wmoUnit:percent", 65) == (pytest.approx(0.65), "ratio")


def test_convert_units_unrecognized_passes_through():
    """Test unknown units are returned unconverted with no label"""
    assert convert_units("wmoUnit:degF", 68) == (68, None)
    assert convert_units(None, 3.5) == (3.5, None)


def test_convert_direction():
    assert convert_direction("NE") == pytest.approx(math.pi / 4)
    assert convert_direction("SW") == pytest.approx(5 * math.pi / 4)
    assert convert_direction("W") == pytest.approx(3 * math.pi / 2)


def test_convert_direction_north_is_zero():
    """N is a valid direction, not a missing one"""
    assert convert_direction("N") == 0.0


@pytest.mark.parametrize("direction", ["NNE", "north", "", None])
def test_convert_direction_unrecognized(direction):
    assert convert_direction(direction) is None


def test_fahrenheit_to_kelvin():
    assert fahrenheit_to_kelvin(68) == pytest.approx(293.15)
    assert fahrenheit_to_kelvin(32) == pytest.approx(273.15)


def test_parse_wind_speed():
    assert parse_wind_speed("10 mph") == pytest.approx(4.47, abs=0.01)
    assert parse_wind_speed("10 to 15 mph") == pytest.approx(10 / 2.237)
    assert parse_wind_speed("0 mph") == 0.0


@pytest.mark.parametrize("wind_speed", [None, "", "calm"])
def test_parse_wind_speed_missing(wind_speed):
    assert parse_wind_speed(wind_speed) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Tonight", "tonight"),
        ("This Afternoon", "thisAfternoon"),
        ("Monday Night", "mondayNight"),
        ("Washington's Birthday", "washingtonsBirthday"),
        ("New Year's Day Night", "newYearsDayNight"),
    ],
)
def test_camel_case(name, expected):
    assert camel_case(name) == expected
