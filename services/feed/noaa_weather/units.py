"""
Unit and direction conversion

Maps api.weather.gov unit codes onto SI values and the unit labels
published with them. Unrecognised codes pass through untouched.
"""
import math
import re
from typing import Any, Optional, Tuple

# Compass points in degrees
DIRECTION_MAP = {
    "N": 0,
    "NE": 45,
    "E": 90,
    "SE": 135,
    "S": 180,
    "SW": 225,
    "W": 270,
    "NW": 315,
}

# Forecast wind speeds are given in mph
MPH_PER_MS = 2.237

_UNIT_PREFIXES = ("wmoUnit:", "unit:")


def _strip_prefix(unit_code: Optional[str]) -> Optional[str]:
    if not unit_code:
        return None
    for prefix in _UNIT_PREFIXES:
        if unit_code.startswith(prefix):
            return unit_code[len(prefix):]
    return unit_code


def convert_units(unit_code: Optional[str], value: Any) -> Tuple[Any, Optional[str]]:
    """
    Convert an observation value to SI.

    Args:
        unit_code: Unit code from the API, e.g. 'wmoUnit:degC' or 'unit:degC'
        value: Raw value

    Returns:
        Tuple of (converted value, unit label). The label is None for
        unrecognised codes, in which case the value is returned as-is.
    """
    unit = _strip_prefix(unit_code)

    if unit == "percent":
        return value / 100, "ratio"
    if unit == "degC":
        return value + 273.15, "K"
    if unit == "km_h-1":
        return value / 3.6, "m/s"
    if unit == "degree_(angle)":
        return value * (math.pi / 180.0), "rad"
    if unit == "Pa":
        return value, "Pa"
    if unit == "m":
        return value, "m"
    return value, None


def convert_direction(direction: Optional[str]) -> Optional[float]:
    """Compass abbreviation to radians, None if unknown."""
    degrees = DIRECTION_MAP.get(direction) if direction else None
    if degrees is None:
        return None
    return degrees * (math.pi / 180.0)


def fahrenheit_to_kelvin(value: float) -> float:
    return (value - 32) * (5 / 9) + 273.15


def celsius_to_kelvin(value: float) -> float:
    return value + 273.15


def parse_wind_speed(wind_speed: Optional[str]) -> Optional[float]:
    """
    Parse a forecast wind speed string into m/s.

    Ranges such as '10 to 15 mph' use the lower bound.
    """
    if not wind_speed:
        return None
    token = wind_speed.split(" ")[0]
    try:
        return float(token) / MPH_PER_MS
    except ValueError:
        return None


def camel_case(text: str) -> str:
    """Turn a forecast period name into a path segment ('Monday Night' -> 'mondayNight')."""
    words = [w for w in re.split(r"[^0-9A-Za-z]+", text.replace("'", "")) if w]
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in tail)
