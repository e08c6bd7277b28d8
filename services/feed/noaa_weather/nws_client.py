"""api.weather.gov client for stations, observations, forecasts and alerts."""
import logging
import threading
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import NWSConfig
from .exceptions import UpstreamError

logger = logging.getLogger(__name__)


class NWSClient:
    """Client for the NOAA/NWS weather API.

    All methods block; callers on the event loop run them in a worker thread.
    requests does not guarantee a Session is thread-safe, so each thread
    gets its own session, created on first use.
    """

    def __init__(self, config: NWSConfig):
        """Initialize NWS client.

        Args:
            config: NWS configuration
        """
        self.config = config
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """HTTP session of the calling thread."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._create_session()
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def _create_session(self) -> requests.Session:
        """Create requests session with the configured retry policy."""
        session = requests.Session()
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "HEAD"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({
            "User-Agent": self.config.user_agent,
            "Accept": "application/geo+json, application/json",
        })
        return session

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    @staticmethod
    def _point(latitude: float, longitude: float) -> str:
        return f"{latitude:.4f},{longitude:.4f}"

    def _get_response(self, url: str, params: Optional[Dict[str, str]] = None) -> requests.Response:
        logger.debug(f"GET {url} {params or ''}")
        try:
            return self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise UpstreamError(str(e), url=url) from e

    @staticmethod
    def _decode(response: requests.Response, url: str) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"invalid JSON from {url}: {e}", url=url) from e
        if not isinstance(data, dict):
            raise UpstreamError(f"unexpected response from {url}", url=url)
        return data

    def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """GET a JSON document.

        Args:
            url: Absolute URL
            params: Optional query parameters

        Returns:
            Decoded JSON object

        Raises:
            UpstreamError: On transport failure, HTTP error status or bad JSON
        """
        response = self._get_response(url, params)
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise UpstreamError(str(e), url=url) from e
        return self._decode(response, url)

    def get_station(self, station_id: str) -> Dict[str, Any]:
        """Fetch a station document (`/stations/{id}`)."""
        return self.get_json(self._url(f"/stations/{station_id}"))

    def get_stations_near(self, latitude: float, longitude: float) -> List[Dict[str, Any]]:
        """Fetch observation stations nearest to a point, closest first.

        Returns:
            Raw GeoJSON features (possibly empty)
        """
        data = self.get_json(self._url(f"/points/{self._point(latitude, longitude)}/stations"))
        features = data.get("features") or []
        return features if isinstance(features, list) else []

    def get_latest_observation(self, station_id: str) -> Dict[str, Any]:
        """Fetch the latest observation for a station.

        Raises:
            UpstreamError: If the station has no observations
        """
        url = self._url(f"/stations/{station_id}/observations/latest")
        response = self._get_response(url)
        if not response.ok:
            raise UpstreamError(f"no observations for station {station_id}", url=url)
        return self._decode(response, url)

    def get_point(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Fetch the `/points` metadata document for a position."""
        return self.get_json(self._url(f"/points/{self._point(latitude, longitude)}"))

    def get_forecast(self, forecast_url: str) -> Dict[str, Any]:
        """Fetch a forecast document by its absolute URL."""
        return self.get_json(forecast_url)

    def get_active_alerts(self, area: str) -> Dict[str, Any]:
        """Fetch actual active alerts for an area (state or marine zone code)."""
        return self.get_json(
            self._url("/alerts/active"),
            params={"area": area, "status": "actual"},
        )

    def close(self):
        """Close the HTTP sessions of every thread."""
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()
