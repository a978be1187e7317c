from __future__ import annotations

import random

from rosaiq_server.cli.simulate import DeviceSimulator, build_parser, build_sample
from rosaiq_server.schemas.measurement import MeasurementPayload


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", headers=None):
        self.status_code = status_code
        self._payload = payload or {}
        self.content = content
        self.headers = headers or {}

    def json(self):
        return self._payload

    def raise_for_status(self):
        pass


class _FakeSession:
    def __init__(self):
        self.headers = {}
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        if url.endswith("firmware.bin"):
            return _FakeResponse(304, headers={"X-Firmware-Status": "current"})
        return _FakeResponse(payload={"ledBarMode": "pm"})

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return _FakeResponse(payload={"success": True, "timestamp": "2026-01-01T00:00:00Z"})


def test_samples_are_reproducible_and_parse_as_payloads():
    first = build_sample(random.Random(7), boot=3)
    second = build_sample(random.Random(7), boot=3)

    assert first == second
    payload = MeasurementPayload.model_validate(first)
    assert payload.wifi_rssi == first["wifi"]
    assert payload.boot == 3


def test_simulator_talks_to_device_endpoints():
    session = _FakeSession()
    simulator = DeviceSimulator(
        base_url="http://server.test/",
        device_id="airgradient:sim01",
        firmware_version="3.0.0",
        api_key="k",
        session=session,
    )

    assert simulator.fetch_config() == {"ledBarMode": "pm"}
    assert simulator.post_sample({"rco2": 500})["success"] is True
    assert simulator.check_firmware() == 304

    urls = [call[1] for call in session.calls]
    assert urls == [
        "http://server.test/sensors/airgradient:sim01/one/config",
        "http://server.test/sensors/airgradient:sim01/measures",
        "http://server.test/sensors/airgradient:sim01/generic/os/firmware.bin",
    ]
    assert session.calls[1][2]["json"]["firmware"] == "3.0.0"
    assert session.calls[2][2]["params"] == {"current_firmware": "3.0.0"}
    assert session.headers["X-API-Key"] == "k"


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.count == 10
    assert args.device_id == "airgradient:sim0001"
    assert args.check_ota is False
