"""Latest observation publisher."""
import asyncio
import logging
from typing import Any, Dict, List, Tuple

from .databus import DataBus, MetaTracker, meta_delta, values_delta
from .exceptions import UpstreamError
from .nws_client import NWSClient
from .stations import Station, StationResolver
from .units import convert_units

logger = logging.getLogger(__name__)

OBSERVATIONS_PREFIX = "environment.observations"


class ObservationPublisher:
    """Publishes the latest observation of the resolved station."""

    def __init__(
        self,
        plugin_id: str,
        client: NWSClient,
        bus: DataBus,
        resolver: StationResolver,
        meta: MetaTracker,
    ):
        self.plugin_id = plugin_id
        self.client = client
        self.bus = bus
        self.resolver = resolver
        self.meta = meta

    async def fetch(self) -> None:
        """Run one observation cycle, raising on failure."""
        station = await self.resolver.resolve()
        observation = await asyncio.to_thread(self.client.get_latest_observation, station.id)

        properties = observation.get("properties")
        if not isinstance(properties, dict):
            raise UpstreamError(f"malformed observation for station {station.id}")

        values, metas = self.build_updates(station, properties)
        if metas:
            self.bus.handle_message(self.plugin_id, meta_delta(metas))
        self.bus.handle_message(self.plugin_id, values_delta(values))
        logger.debug(f"Published {len(values)} observation values for {station.id}")

    def build_updates(
        self, station: Station, properties: Dict[str, Any]
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """Convert observation properties into value and first-seen meta entries."""
        values = []
        metas = []

        if station.name:
            values.append({"path": f"{OBSERVATIONS_PREFIX}.stationName", "value": station.name})
        values.append({"path": f"{OBSERVATIONS_PREFIX}.stationId", "value": station.id})

        for key, data in properties.items():
            if not isinstance(data, dict):
                continue
            raw = data.get("value")
            if raw is None or isinstance(raw, bool) or not isinstance(raw, (int, float)):
                continue

            value, units = convert_units(data.get("unitCode"), raw)
            path = f"{OBSERVATIONS_PREFIX}.{key}"
            values.append({"path": path, "value": value})
            if units and self.meta.first_time(path):
                metas.append({"path": path, "value": {"units": units}})

        return values, metas

    async def run(self) -> None:
        """One scheduled cycle; failures are reported, never raised."""
        try:
            await self.fetch()
        except Exception as e:
            logger.error(f"Observation fetch failed: {e}")
            logger.debug("Observation fetch traceback", exc_info=True)
            self.bus.set_plugin_error(str(e))
