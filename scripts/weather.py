"""Look up current weather from the command line.

Usage:
    python -m scripts.weather Berlin London        # On-demand lookups
    python -m scripts.weather Berlin --poll 30     # Poll for 30s, printing every TTL
"""

import argparse
import logging
import sys
import time

from groundhog.client import WeatherClient
from groundhog.errors import WeatherError
from groundhog.services.freshness import ClientMode

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("cities", nargs="+")
    parser.add_argument(
        "--poll",
        type=float,
        metavar="SECONDS",
        help="switch to polling mode and keep the client alive this long",
    )
    args = parser.parse_args(argv)

    failed = 0
    with WeatherClient.from_settings() as client:
        if args.poll:
            client.set_mode(ClientMode.POLLING)
        for city in args.cities:
            try:
                print(client.get_weather_for(city).to_json())
            except WeatherError as e:
                print(f"ERROR: {e}", file=sys.stderr)
                failed += 1

        if args.poll:
            deadline = time.monotonic() + args.poll
            while time.monotonic() < deadline:
                time.sleep(min(client.ttl, max(deadline - time.monotonic(), 0)))
                for city in args.cities:
                    try:
                        print(client.get_weather_for(city).to_json())
                    except WeatherError as e:
                        print(f"ERROR: {e}", file=sys.stderr)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
