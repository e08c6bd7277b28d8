"""
NOAA Weather Feed

Polls api.weather.gov for observations, forecasts and active alerts,
normalizes units and republishes them as deltas on a host data bus.
"""

__version__ = "1.0.0"
