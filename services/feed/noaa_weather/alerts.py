"""
Alert notifications

Turns the active-alert feed of each configured region into notifications
under notifications.noaa.<id>.

The feed only lists what is currently in force, so a notification is
cleared in one of two ways:

- explicitly, when a "Cancel" message for its id arrives;
- by absence, when its region's feed no longer lists it.

Absence only clears notifications raised by the region being reconciled.
Notifications are never removed, only set back to "normal".
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .databus import DataBus, SelfDataSource, values_delta
from .exceptions import UpstreamError
from .nws_client import NWSClient

logger = logging.getLogger(__name__)

NOTIFICATIONS_PREFIX = "notifications.noaa"
NORMAL = "normal"

MESSAGE_ALERT = "Alert"
MESSAGE_CANCEL = "Cancel"


def sanitize_id(alert_id: str) -> str:
    """Alert ids contain dots, which would split the path."""
    return alert_id.replace(".", "_")


def notification_path(notification_id: str) -> str:
    return f"{NOTIFICATIONS_PREFIX}.{notification_id}"


@dataclass
class Alert:
    """Properties of an active alert feature."""
    id: str
    message_type: Optional[str] = None
    headline: Optional[str] = None
    area_desc: Optional[str] = None
    event: Optional[str] = None
    category: Optional[str] = None
    severity: Optional[str] = None
    certainty: Optional[str] = None
    urgency: Optional[str] = None
    description: Optional[str] = None
    sent: Optional[str] = None
    effective: Optional[str] = None
    onset: Optional[str] = None
    expires: Optional[str] = None
    ends: Optional[str] = None

    @classmethod
    def from_api(cls, properties: Dict[str, Any]) -> "Alert":
        return cls(
            id=properties.get("id") or "",
            message_type=properties.get("messageType"),
            headline=properties.get("headline"),
            area_desc=properties.get("areaDesc"),
            event=properties.get("event"),
            category=properties.get("category"),
            severity=properties.get("severity"),
            certainty=properties.get("certainty"),
            urgency=properties.get("urgency"),
            description=properties.get("description"),
            sent=properties.get("sent"),
            effective=properties.get("effective"),
            onset=properties.get("onset"),
            expires=properties.get("expires"),
            ends=properties.get("ends"),
        )

    @property
    def notification_id(self) -> str:
        return sanitize_id(self.id)

    @property
    def message(self) -> Optional[str]:
        if self.area_desc:
            return f"{self.headline} for {self.area_desc}"
        return self.headline


@dataclass
class Notification:
    """Notification value as stored in the live tree."""
    id: str
    message: Optional[str]
    state: str
    method: List[str]
    source_region: str
    event: Optional[str] = None
    category: Optional[str] = None
    severity: Optional[str] = None
    certainty: Optional[str] = None
    urgency: Optional[str] = None
    description: Optional[str] = None
    sent: Optional[str] = None
    effective: Optional[str] = None
    onset: Optional[str] = None
    expires: Optional[str] = None
    ends: Optional[str] = None

    @classmethod
    def from_alert(cls, alert: Alert, region: str, state: str, method: List[str]) -> "Notification":
        return cls(
            id=alert.notification_id,
            message=alert.message,
            state=state,
            method=list(method),
            source_region=region,
            event=alert.event,
            category=alert.category,
            severity=alert.severity,
            certainty=alert.certainty,
            urgency=alert.urgency,
            description=alert.description,
            sent=alert.sent,
            effective=alert.effective,
            onset=alert.onset,
            expires=alert.expires,
            ends=alert.ends,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "state": self.state,
            "method": self.method,
            "sourceRegion": self.source_region,
            "event": self.event,
            "category": self.category,
            "severity": self.severity,
            "certainty": self.certainty,
            "urgency": self.urgency,
            "description": self.description,
            "sent": self.sent,
            "effective": self.effective,
            "onset": self.onset,
            "expires": self.expires,
            "ends": self.ends,
        }


@dataclass
class ReconcileResult:
    """What one region's reconciliation did."""
    region: str
    raised: List[str] = field(default_factory=list)
    refreshed: List[str] = field(default_factory=list)
    cancelled: List[str] = field(default_factory=list)
    cleared: List[str] = field(default_factory=list)


class AlertNotifier:
    """Reconciles active alerts against published notifications."""

    def __init__(
        self,
        plugin_id: str,
        client: NWSClient,
        bus: DataBus,
        source: SelfDataSource,
        regions: Iterable[str],
        default_method: Iterable[str],
        active_state: str = "alert",
    ):
        """
        Args:
            plugin_id: Id deltas are published under
            client: NWS API client
            bus: Host data bus
            source: Read-only view of the live tree holding the notifications
            regions: Alert area codes, e.g. ['MD', 'VA']
            default_method: Delivery method of newly raised notifications
            active_state: State label of a raised notification
        """
        self.plugin_id = plugin_id
        self.client = client
        self.bus = bus
        self.source = source
        self.regions = list(regions)
        self.default_method = list(default_method)
        self.active_state = active_state

    def _existing(self, notification_id: str) -> Optional[Dict[str, Any]]:
        existing = self.source.get_self_path(notification_path(notification_id))
        return existing if isinstance(existing, dict) else None

    def _publish(self, notification_id: str, value: Dict[str, Any]) -> None:
        self.bus.handle_message(
            self.plugin_id,
            values_delta([{"path": notification_path(notification_id), "value": value}]),
        )

    def _cancel(self, alert: Alert, result: ReconcileResult) -> None:
        notification_id = alert.notification_id
        existing = self._existing(notification_id)
        if existing is None:
            return
        logger.info(f"Canceling {notification_id}: {existing.get('message')}")
        self._publish(notification_id, {**existing, "state": NORMAL})
        result.cancelled.append(notification_id)

    def _raise(self, region: str, alert: Alert, result: ReconcileResult) -> None:
        notification_id = alert.notification_id
        existing = self._existing(notification_id)
        active = existing is not None and existing.get("state") != NORMAL

        # An ongoing notification keeps its method so acknowledgements stick
        method = existing.get("method", self.default_method) if active else self.default_method
        notification = Notification.from_alert(alert, region, self.active_state, method)

        if active:
            logger.debug(f"Refreshing {notification_id}: {notification.message}")
            result.refreshed.append(notification_id)
        else:
            logger.info(f"Sending {notification_id}: {notification.message}")
            result.raised.append(notification_id)
        self._publish(notification_id, notification.to_dict())

    def _sweep(self, region: str, seen: Set[str], result: ReconcileResult) -> None:
        cancelled = set(result.cancelled)
        for notification_id, value in self.source.get_self_children(NOTIFICATIONS_PREFIX).items():
            if not isinstance(value, dict):
                continue
            if value.get("sourceRegion") != region:
                continue
            if notification_id in seen or notification_id in cancelled:
                continue
            if value.get("state") == NORMAL:
                continue
            logger.info(f"Clearing {notification_id}: {value.get('message')}")
            self._publish(notification_id, {**value, "state": NORMAL})
            result.cleared.append(notification_id)

    def reconcile(self, region: str, features: List[Dict[str, Any]]) -> ReconcileResult:
        """
        Apply one fetch of a region's active alerts.

        Cancels are applied as they are met. Alerts are (re)published and
        marked as seen. Once the feed is processed, notifications of this
        region that were not seen and are not already normal are cleared.

        Args:
            region: Region the features were fetched for
            features: GeoJSON features of the active-alert feed

        Returns:
            Summary of the transitions made
        """
        result = ReconcileResult(region=region)
        seen: Set[str] = set()

        for feature in features:
            properties = (feature or {}).get("properties") or {}
            alert = Alert.from_api(properties)
            if not alert.id:
                continue

            if alert.message_type == MESSAGE_CANCEL:
                self._cancel(alert, result)
            elif alert.message_type == MESSAGE_ALERT:
                self._raise(region, alert, result)
                seen.add(alert.notification_id)

        self._sweep(region, seen, result)
        return result

    async def fetch_region(self, region: str) -> ReconcileResult:
        """Fetch and reconcile a single region, raising on failure.

        A feed without a features list raises before any sweep runs.
        """
        logger.debug(f"Getting alerts for {region}")
        data = await asyncio.to_thread(self.client.get_active_alerts, region)
        features = data.get("features")
        if not isinstance(features, list):
            raise UpstreamError(f"alert feed for {region} has no features")
        return self.reconcile(region, features)

    async def run_region(self, region: str) -> Optional[ReconcileResult]:
        try:
            return await self.fetch_region(region)
        except Exception as e:
            logger.error(f"Alert fetch for {region} failed: {e}")
            logger.debug("Alert fetch traceback", exc_info=True)
            self.bus.set_plugin_error(str(e))
            return None

    async def run(self) -> None:
        """One scheduled cycle over every region; regions fail independently."""
        await asyncio.gather(*(self.run_region(region) for region in self.regions))
