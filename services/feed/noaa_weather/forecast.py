"""
Forecast publisher

Fetches the multi-period forecast for the configured forecast station or
the current position and publishes each period under
environment.forecast.<periodName>.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .databus import DataBus, MetaTracker, SelfDataSource, meta_delta, values_delta
from .exceptions import NoForecastPeriodsError, NoPositionError, UpstreamError
from .nws_client import NWSClient
from .stations import current_position
from .units import (
    camel_case,
    celsius_to_kelvin,
    convert_direction,
    fahrenheit_to_kelvin,
    parse_wind_speed,
)

logger = logging.getLogger(__name__)

FORECAST_PREFIX = "environment.forecast"

# Units of the converted period fields, published once per period
PERIOD_UNITS = {
    "temperature": "K",
    "windSpeed": "m/s",
    "windDirection": "rad",
}


def to_utc_iso(timestamp: Optional[str]) -> Optional[str]:
    """Normalize an ISO-8601 timestamp to UTC with millisecond precision."""
    if not timestamp:
        return None
    parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    utc = parsed.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ForecastPeriod:
    """A single forecast period, in source units."""
    name: str
    temperature: Optional[float] = None
    temperature_unit: str = "F"
    temperature_trend: Optional[str] = None
    wind_speed: Optional[str] = None
    wind_direction: Optional[str] = None
    short_forecast: Optional[str] = None
    detailed_forecast: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @classmethod
    def from_api(cls, period: Dict[str, Any]) -> "ForecastPeriod":
        return cls(
            name=period.get("name") or "",
            temperature=period.get("temperature"),
            temperature_unit=period.get("temperatureUnit") or "F",
            temperature_trend=period.get("temperatureTrend"),
            wind_speed=period.get("windSpeed"),
            wind_direction=period.get("windDirection"),
            short_forecast=period.get("shortForecast"),
            detailed_forecast=period.get("detailedForecast"),
            start_time=period.get("startTime"),
            end_time=period.get("endTime"),
        )

    @property
    def key(self) -> str:
        return f"{FORECAST_PREFIX}.{camel_case(self.name)}"

    @property
    def temperature_kelvin(self) -> Optional[float]:
        if self.temperature is None:
            return None
        if self.temperature_unit == "C":
            return celsius_to_kelvin(self.temperature)
        return fahrenheit_to_kelvin(self.temperature)

    def values(self) -> List[Dict[str, Any]]:
        """Value entries for this period, converted to SI."""
        key = self.key
        fields = [
            ("name", self.name),
            ("temperature", self.temperature_kelvin),
            ("temperatureTrend", self.temperature_trend),
            ("windSpeed", parse_wind_speed(self.wind_speed)),
            ("windDirection", convert_direction(self.wind_direction)),
            ("shortForecast", self.short_forecast),
            ("detailedForecast", self.detailed_forecast),
            ("startTime", to_utc_iso(self.start_time)),
            ("endTime", to_utc_iso(self.end_time)),
        ]
        return [{"path": f"{key}.{field}", "value": value} for field, value in fields]


class ForecastPublisher:
    """Publishes forecast periods."""

    def __init__(
        self,
        plugin_id: str,
        client: NWSClient,
        bus: DataBus,
        source: SelfDataSource,
        meta: MetaTracker,
        forecast_station: Optional[str] = None,
    ):
        self.plugin_id = plugin_id
        self.client = client
        self.bus = bus
        self.source = source
        self.meta = meta
        self.forecast_station = forecast_station

    async def forecast_url(self) -> str:
        """Look up the forecast document URL for the station or position."""
        if self.forecast_station:
            document = await asyncio.to_thread(self.client.get_station, self.forecast_station)
        else:
            position = current_position(self.source)
            if position is None:
                raise NoPositionError()
            document = await asyncio.to_thread(self.client.get_point, *position)

        url = (document.get("properties") or {}).get("forecast")
        if not url:
            raise UpstreamError("no forecast url available")
        return url

    async def fetch(self) -> None:
        """Run one forecast cycle, raising on failure."""
        url = await self.forecast_url()
        logger.debug(f"Fetching forecast via {url}")
        forecast = await asyncio.to_thread(self.client.get_forecast, url)

        periods = (forecast.get("properties") or {}).get("periods")
        if not periods:
            logger.debug(f"Forecast properties: {forecast.get('properties')}")
            raise NoForecastPeriodsError()

        values, metas = self.build_updates([ForecastPeriod.from_api(p) for p in periods])
        if metas:
            self.bus.handle_message(self.plugin_id, meta_delta(metas))
        self.bus.handle_message(self.plugin_id, values_delta(values))
        logger.debug(f"Published {len(periods)} forecast periods")

    def build_updates(
        self, periods: List[ForecastPeriod]
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        values = [entry for period in periods for entry in period.values()]
        metas = []
        for period in periods:
            if self.meta.first_time(period.key):
                metas.extend(
                    {"path": f"{period.key}.{field}", "value": {"units": units}}
                    for field, units in PERIOD_UNITS.items()
                )
        return values, metas

    async def run(self) -> None:
        """One scheduled cycle; failures are reported, never raised."""
        try:
            await self.fetch()
        except Exception as e:
            logger.error(f"Forecast fetch failed: {e}")
            logger.debug("Forecast fetch traceback", exc_info=True)
            self.bus.set_plugin_error(str(e))
