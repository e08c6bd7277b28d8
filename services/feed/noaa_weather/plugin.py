"""Plugin lifecycle: wires the publishers to the scheduler."""
import logging
from typing import Any, Dict, Optional

from .alerts import AlertNotifier
from .config import NWSConfig, PluginSettings
from .databus import DataBus, MetaTracker, SelfDataSource
from .forecast import ForecastPublisher
from .nws_client import NWSClient
from .observations import ObservationPublisher
from .scheduler import Scheduler
from .stations import StationResolver

logger = logging.getLogger(__name__)


class NOAAWeatherPlugin:
    """Current weather, forecast and alerts from NOAA."""

    id = "noaa-weather"
    name = "NOAA Weather"
    description = "Plugin to get current weather, forecast and alerts from NOAA"

    def __init__(
        self,
        bus: DataBus,
        source: SelfDataSource,
        nws_config: Optional[NWSConfig] = None,
        client: Optional[NWSClient] = None,
    ):
        """Initialize plugin.

        Args:
            bus: Host data bus deltas are published to
            source: Read-only view of the host's live tree
            nws_config: Transport configuration, used when no client is given
            client: Pre-built NWS client
        """
        self.bus = bus
        self.source = source
        self.client = client or NWSClient(nws_config or NWSConfig())

        # Process-lifetime state, kept across restarts
        self.meta = MetaTracker()
        self.station_names: Dict[str, Optional[str]] = {}

        self.scheduler: Optional[Scheduler] = None
        self.observations: Optional[ObservationPublisher] = None
        self.forecast: Optional[ForecastPublisher] = None
        self.alerts: Optional[AlertNotifier] = None

    @staticmethod
    def schema() -> Dict[str, Any]:
        """JSON schema of the plugin settings."""
        return PluginSettings.model_json_schema()

    def build(self, settings: PluginSettings) -> Scheduler:
        """Create the publishers and a scheduler for them, without starting it."""
        resolver = StationResolver(
            self.client, self.source, station=settings.station, names=self.station_names
        )
        self.observations = ObservationPublisher(self.id, self.client, self.bus, resolver, self.meta)
        self.forecast = ForecastPublisher(
            self.id,
            self.client,
            self.bus,
            self.source,
            self.meta,
            forecast_station=settings.forecast_station,
        )

        scheduler = Scheduler(initial_delay=settings.initial_delay)
        scheduler.add_job("observations", settings.observations_interval, self.observations.run)
        scheduler.add_job("forecast", settings.forecast_interval, self.forecast.run)

        if settings.notifications_enabled:
            self.alerts = AlertNotifier(
                self.id,
                self.client,
                self.bus,
                self.source,
                regions=settings.regions,
                default_method=settings.default_method,
                active_state=settings.notification_state,
            )
            scheduler.add_job("notifications", settings.notifications_interval, self.alerts.run)
        else:
            self.alerts = None
            logger.info("Alert notifications disabled")

        return scheduler

    def start(self, settings: PluginSettings) -> None:
        """Start polling. Must be called from a running event loop."""
        if self.scheduler is not None:
            self.stop()
        self.scheduler = self.build(settings)
        self.scheduler.start()
        self.bus.set_plugin_status("Started")
        logger.info(f"{self.name} started")

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
            self.scheduler = None
            logger.info(f"{self.name} stopped")

    async def run_once(self, settings: PluginSettings) -> None:
        """Run each publisher a single time."""
        await self.build(settings).run_once()

    def close(self) -> None:
        """Stop and release the HTTP session."""
        self.stop()
        self.client.close()
