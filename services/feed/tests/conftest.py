"""Test configuration and fixtures."""
from unittest.mock import Mock

import pytest

from noaa_weather.databus import InMemoryDataBus, MetaTracker
from noaa_weather.nws_client import NWSClient
from noaa_weather.stations import POSITION_PATH

LATITUDE = 38.97841
LONGITUDE = -76.49223


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires network access)"
    )


@pytest.fixture
def bus():
    """In-memory host with no position set."""
    return InMemoryDataBus()


@pytest.fixture
def positioned_bus(bus):
    """In-memory host with a position near Annapolis, MD."""
    bus.set_self_path(POSITION_PATH, {"latitude": LATITUDE, "longitude": LONGITUDE})
    return bus


@pytest.fixture
def client():
    """NWS client double; every method must be given a return value by the test."""
    return Mock(spec=NWSClient)


@pytest.fixture
def meta():
    return MetaTracker()


@pytest.fixture
def station_document():
    return {
        "id": "https://api.weather.gov/stations/KNAK",
        "properties": {
            "stationIdentifier": "KNAK",
            "name": "Annapolis, United States Naval Academy",
            "forecast": "https://api.weather.gov/zones/forecast/MDZ014",
        },
    }


@pytest.fixture
def nearby_stations():
    return [
        {"properties": {"stationIdentifier": "KNAK", "name": "Annapolis, United States Naval Academy"}},
        {"properties": {"stationIdentifier": "KBWI", "name": "Baltimore-Washington International Airport"}},
    ]


@pytest.fixture
def observation_document():
    """Trimmed /observations/latest response."""
    return {
        "properties": {
            "@id": "https://api.weather.gov/stations/KNAK/observations/2020-06-01T18:54:00+00:00",
            "station": "https://api.weather.gov/stations/KNAK",
            "timestamp": "2020-06-01T18:54:00+00:00",
            "textDescription": "Mostly Cloudy",
            "temperature": {"value": 20.0, "unitCode": "wmoUnit:degC", "qualityControl": "V"},
            "relativeHumidity": {"value": 65.0, "unitCode": "wmoUnit:percent", "qualityControl": "V"},
            "windDirection": {"value": 90, "unitCode": "wmoUnit:degree_(angle)", "qualityControl": "V"},
            "windSpeed": {"value": 36.0, "unitCode": "wmoUnit:km_h-1", "qualityControl": "V"},
            "windGust": {"value": None, "unitCode": "wmoUnit:km_h-1", "qualityControl": "Z"},
            "barometricPressure": {"value": 101325, "unitCode": "wmoUnit:Pa", "qualityControl": "V"},
            "visibility": {"value": 16090, "unitCode": "wmoUnit:m", "qualityControl": "C"},
            "precipitationLastHour": {"value": 0, "unitCode": "wmoUnit:m", "qualityControl": "C"},
            "cloudLayers": [{"base": {"value": 1220, "unitCode": "wmoUnit:m"}, "amount": "BKN"}],
            "maxTemperatureLast24Hours": {"value": 5, "unitCode": "wmoUnit:furlongs"},
        }
    }


@pytest.fixture
def point_document():
    return {
        "properties": {
            "gridId": "LWX",
            "forecast": "https://api.weather.gov/gridpoints/LWX/117,79/forecast",
            "forecastHourly": "https://api.weather.gov/gridpoints/LWX/117,79/forecast/hourly",
        }
    }


@pytest.fixture
def forecast_document():
    """Two periods of a /gridpoints/.../forecast response."""
    return {
        "properties": {
            "periods": [
                {
                    "number": 1,
                    "name": "Tonight",
                    "startTime": "2020-06-01T18:00:00-04:00",
                    "endTime": "2020-06-02T06:00:00-04:00",
                    "isDaytime": False,
                    "temperature": 68,
                    "temperatureUnit": "F",
                    "temperatureTrend": None,
                    "windSpeed": "10 mph",
                    "windDirection": "SW",
                    "shortForecast": "Partly Cloudy",
                    "detailedForecast": "Partly cloudy, with a low around 68.",
                },
                {
                    "number": 2,
                    "name": "Tuesday Night",
                    "startTime": "2020-06-02T18:00:00-04:00",
                    "endTime": "2020-06-03T06:00:00-04:00",
                    "isDaytime": False,
                    "temperature": 59,
                    "temperatureUnit": "F",
                    "temperatureTrend": "rising",
                    "windSpeed": "5 to 10 mph",
                    "windDirection": "N",
                    "shortForecast": "Chance Showers",
                    "detailedForecast": "A chance of showers after 2am.",
                },
            ]
        }
    }


def alert_feature(alert_id, message_type="Alert", headline=None, area_desc="Anne Arundel", **extra):
    """Build an active-alert GeoJSON feature."""
    properties = {
        "id": alert_id,
        "messageType": message_type,
        "headline": headline or f"Small Craft Advisory {alert_id}",
        "areaDesc": area_desc,
        "event": "Small Craft Advisory",
        "category": "Met",
        "severity": "Minor",
        "certainty": "Likely",
        "urgency": "Expected",
        "description": "Winds 15 to 20 kt with gusts up to 25 kt.",
        "sent": "2020-06-01T15:00:00-04:00",
        "effective": "2020-06-01T15:00:00-04:00",
        "onset": "2020-06-01T18:00:00-04:00",
        "expires": "2020-06-02T06:00:00-04:00",
        "ends": "2020-06-02T06:00:00-04:00",
    }
    properties.update(extra)
    return {"id": f"https://api.weather.gov/alerts/{alert_id}", "properties": properties}


@pytest.fixture
def make_alert():
    return alert_feature
