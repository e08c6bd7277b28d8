"""Station resolution by configured name or current position."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .databus import SelfDataSource
from .exceptions import NoPositionError, NoStationsError, UpstreamError
from .nws_client import NWSClient

logger = logging.getLogger(__name__)

POSITION_PATH = "navigation.position"


@dataclass(frozen=True)
class Station:
    """An observation station."""
    id: str
    name: Optional[str] = None


def current_position(source: SelfDataSource) -> Optional[Tuple[float, float]]:
    """(latitude, longitude) from the live tree, or None."""
    position = source.get_self_path(POSITION_PATH)
    if not position:
        return None
    latitude = position.get("latitude")
    longitude = position.get("longitude")
    if latitude is None or longitude is None:
        return None
    return latitude, longitude


class StationResolver:
    """Resolves the station to observe.

    A configured station's display name is looked up once and then served
    from the name cache. Without a configured station the closest
    one to the current position is used, looked up fresh on every call.
    """

    def __init__(
        self,
        client: NWSClient,
        source: SelfDataSource,
        station: Optional[str] = None,
        names: Optional[Dict[str, Optional[str]]] = None,
    ):
        """
        Args:
            client: NWS API client
            source: Live tree holding navigation.position
            station: Configured station id, if any
            names: Shared cache of resolved display names
        """
        self.client = client
        self.source = source
        self.station = station
        self._names = names if names is not None else {}

    async def resolve(self) -> Station:
        """
        Returns:
            The resolved station

        Raises:
            NoPositionError: No configured station and no position
            NoStationsError: No station near the position
            UpstreamError: Lookup failed
        """
        if self.station:
            return await self._resolve_configured(self.station)
        return await self._resolve_nearest()

    async def _resolve_configured(self, station_id: str) -> Station:
        if station_id in self._names:
            return Station(id=station_id, name=self._names[station_id])

        data = await asyncio.to_thread(self.client.get_station, station_id)
        properties = data.get("properties")
        if not isinstance(properties, dict):
            raise UpstreamError(f"malformed station document for {station_id}")

        name = properties.get("name")
        self._names[station_id] = name
        logger.info(f"Using configured station {station_id} ({name})")
        return Station(id=station_id, name=name)

    async def _resolve_nearest(self) -> Station:
        position = current_position(self.source)
        if position is None:
            raise NoPositionError()

        features = await asyncio.to_thread(self.client.get_stations_near, *position)
        if not features:
            raise NoStationsError()

        properties = (features[0] or {}).get("properties") or {}
        station_id = properties.get("stationIdentifier")
        if not station_id:
            raise UpstreamError("station lookup returned a feature without an identifier")
        return Station(id=station_id, name=properties.get("name"))
