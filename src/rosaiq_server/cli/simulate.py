"""Device simulator: posts telemetry, fetches config and asks for OTA like a sensor would."""

from __future__ import annotations

import argparse
import logging
import random
import time
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import requests

from rosaiq_server.cli._helpers import add_common_args, configure_logging

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


def build_sample(rng: random.Random, boot: int = 0) -> Dict[str, object]:
    """One plausible indoor reading in the device's wire format."""
    pm02 = round(rng.uniform(2.0, 35.0), 1)
    atmp = round(rng.uniform(18.0, 27.0), 2)
    rhum = round(rng.uniform(30.0, 60.0), 1)
    return {
        "wifi": rng.randint(-80, -40),
        "rco2": rng.randint(420, 1400),
        "pm01": round(pm02 * 0.7, 1),
        "pm02": pm02,
        "pm10": round(pm02 * 1.3, 1),
        "pm003Count": rng.randint(200, 2000),
        "atmp": atmp,
        "atmpCompensated": round(atmp - 0.5, 2),
        "rhum": rhum,
        "rhumCompensated": round(rhum + 1.0, 1),
        "tvocIndex": rng.randint(50, 250),
        "noxIndex": rng.randint(1, 20),
        "boot": boot,
    }


@dataclass
class DeviceSimulator:
    base_url: str
    device_id: str
    firmware_version: str = "1.0.0"
    model: str = "I-9PSL"
    api_key: Optional[str] = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    session: Optional[requests.Session] = None

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if self.session is None:
            self.session = requests.Session()
        if self.api_key:
            self.session.headers["X-API-Key"] = self.api_key

    def _url(self, suffix: str) -> str:
        return f"{self.base_url}/sensors/{self.device_id}/{suffix}"

    def fetch_config(self) -> Dict[str, object]:
        response = self.session.get(self._url("one/config"), timeout=self.timeout_s)
        response.raise_for_status()
        return response.json()

    def post_sample(self, sample: Dict[str, object]) -> Dict[str, object]:
        payload = dict(sample, model=self.model, firmware=self.firmware_version)
        response = self.session.post(self._url("measures"), json=payload, timeout=self.timeout_s)
        response.raise_for_status()
        return response.json()

    def check_firmware(self) -> int:
        """Ask for an update; returns the status code and drains any image."""
        response = self.session.get(
            self._url("generic/os/firmware.bin"),
            params={"current_firmware": self.firmware_version},
            timeout=self.timeout_s,
        )
        if response.status_code == 200:
            LOGGER.info(
                "Update offered: %s (%d bytes)",
                response.headers.get("X-Firmware-Status", "?"),
                len(response.content),
            )
        else:
            LOGGER.info(
                "No update (%d %s)",
                response.status_code,
                response.headers.get("X-Firmware-Status", ""),
            )
        return response.status_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rosaiq-simulate",
        description="Simulate one sensor talking to the sync server.",
    )
    add_common_args(parser)
    parser.add_argument("--server", default="http://localhost:3000", help="Server base URL")
    parser.add_argument("--device-id", default="airgradient:sim0001", help="Wire-level device identifier")
    parser.add_argument("--firmware", default="1.0.0", help="Firmware version to report")
    parser.add_argument("--api-key", default=None, help="X-API-Key value when device auth is enabled")
    parser.add_argument("--count", type=int, default=10, help="Samples to send (0 = run forever)")
    parser.add_argument("--interval", type=float, default=5.0, help="Seconds between samples")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible readings")
    parser.add_argument("--check-ota", action="store_true", help="Ask for a firmware update after config fetch")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    simulator = DeviceSimulator(
        base_url=args.server,
        device_id=args.device_id,
        firmware_version=args.firmware,
        api_key=args.api_key,
    )
    rng = random.Random(args.seed)
    try:
        config = simulator.fetch_config()
        LOGGER.info("Config for %s: %s", args.device_id, config)
        if args.check_ota:
            simulator.check_firmware()

        sent = 0
        while args.count == 0 or sent < args.count:
            ack = simulator.post_sample(build_sample(rng, boot=sent))
            sent += 1
            LOGGER.info("Sample %d acknowledged at %s", sent, ack.get("timestamp"))
            if args.count == 0 or sent < args.count:
                time.sleep(args.interval)
    except requests.RequestException as exc:
        LOGGER.error("Simulator stopped: %s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Interrupted")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry
    raise SystemExit(main())
