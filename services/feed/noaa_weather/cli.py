"""
Command line runner.

Runs the plugin against an in-memory host for a fixed position and prints
every delta it publishes as one JSON line on stdout.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config import NWSConfig, PluginSettings
from .databus import Delta, InMemoryDataBus
from .plugin import NOAAWeatherPlugin
from .stations import POSITION_PATH

logger = logging.getLogger(__name__)


def print_delta(plugin_id: str, delta: Delta) -> None:
    print(json.dumps(delta), flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="noaa_weather",
        description="NOAA weather observations, forecast and alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Poll for a position near Annapolis, MD
  python -m noaa_weather --lat 38.9784 --lon -76.4922

  # Fetch everything once with settings from a file
  python -m noaa_weather --lat 38.9784 --lon -76.4922 --config noaa.yaml --once

  # Print the settings schema
  python -m noaa_weather --schema
        """,
    )
    parser.add_argument("--lat", type=float, help="Latitude of the current position")
    parser.add_argument("--lon", type=float, help="Longitude of the current position")
    parser.add_argument("--config", help="YAML file with plugin settings")
    parser.add_argument("--once", action="store_true", help="Run each publisher once and exit")
    parser.add_argument("--schema", action="store_true", help="Print the settings JSON schema and exit")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


async def run(plugin: NOAAWeatherPlugin, settings: PluginSettings, once: bool) -> None:
    if once:
        await plugin.run_once(settings)
        return

    plugin.start(settings)
    try:
        await asyncio.Event().wait()
    finally:
        plugin.stop()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.schema:
        print(json.dumps(NOAAWeatherPlugin.schema(), indent=2))
        return 0

    settings = PluginSettings.from_yaml(args.config) if args.config else PluginSettings()

    bus = InMemoryDataBus(listener=print_delta)
    if args.lat is not None and args.lon is not None:
        bus.set_self_path(POSITION_PATH, {"latitude": args.lat, "longitude": args.lon})
    elif not settings.station:
        logger.warning("No position given; observations need a configured station")

    plugin = NOAAWeatherPlugin(bus, bus, nws_config=NWSConfig.from_env())
    try:
        asyncio.run(run(plugin, settings, args.once))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.error(f"Weather feed failed: {e}", exc_info=True)
        return 1
    finally:
        plugin.close()

    return 1 if args.once and bus.errors else 0
