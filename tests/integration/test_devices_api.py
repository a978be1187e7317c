"""
Integration tests for dashboard device endpoints.

Tests verify:
- Admin / owner visibility and 403 for other users
- Device detail stats and metadata updates
- Measurement queries with bounds and limits
- Configuration merge through the dashboard
- Claim / assign / unassign flows
"""
from __future__ import annotations

from datetime import timedelta

import pytest

from rosaiq_server.clock import isoformat_z, utc_now
from rosaiq_server.models.event import EVENT_CONFIG_UPDATED, Event

DEVICE = "airgradient:dev0001"
SERIAL = "dev0001"


@pytest.fixture
def device(client):
    """A device that has posted two samples."""
    client.post(f"/sensors/{DEVICE}/measures", json={"rco2": 500, "pm02": 5.0, "atmp": 20.0, "rhum": 40.0})
    client.post(f"/sensors/{DEVICE}/measures", json={"rco2": 700, "pm02": 15.0, "atmp": 22.0, "rhum": 50.0})
    return DEVICE


@pytest.fixture
def owned_device(client, device, user_headers):
    response = client.post("/api/devices/claim", json={"serial_number": SERIAL}, headers=user_headers)
    assert response.status_code == 200
    return device


def test_requires_authentication(client, device):
    response = client.get("/api/devices")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["error"] == "unauthorized"


def test_invalid_token_rejected(client, device):
    response = client.get("/api/devices", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401


def test_admin_sees_all_devices_with_status(client, device, admin_headers):
    response = client.get("/api/devices", headers=admin_headers)

    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["device_id"] == DEVICE
    assert rows[0]["serial_number"] == SERIAL
    assert rows[0]["is_online"] is True
    assert rows[0]["latest_measurement"]["rco2"] == 700


def test_standard_user_sees_only_owned_devices(client, device, user_headers):
    assert client.get("/api/devices", headers=user_headers).json() == []

    client.post("/api/devices/claim", json={"serial_number": SERIAL}, headers=user_headers)

    rows = client.get("/api/devices", headers=user_headers).json()
    assert [row["device_id"] for row in rows] == [DEVICE]


def test_non_owner_is_forbidden_everywhere(client, owned_device, other_headers):
    paths = [
        ("get", f"/api/devices/{DEVICE}"),
        ("get", f"/api/devices/{DEVICE}/measurements"),
        ("get", f"/api/devices/{DEVICE}/events"),
        ("get", f"/api/devices/{DEVICE}/config"),
    ]
    for method, path in paths:
        response = getattr(client, method)(path, headers=other_headers)
        assert response.status_code == 403, path
        assert response.json()["error"] == "forbidden"

    response = client.put(f"/api/devices/{DEVICE}/config", json={"ledBarMode": "off"}, headers=other_headers)
    assert response.status_code == 403


def test_unknown_device_is_404(client, admin_headers):
    response = client.get("/api/devices/airgradient:nope", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_detail_includes_stats(client, owned_device, user_headers):
    response = client.get(f"/api/devices/{DEVICE}", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["total_measurements"] == 2
    assert body["stats"]["avg_co2"] == 600.0
    assert body["stats"]["avg_humidity"] == 45.0
    assert body["display_name"] == SERIAL


def test_update_metadata_and_custom_name(client, owned_device, user_headers):
    response = client.put(
        f"/api/devices/{DEVICE}",
        json={"name": "Office", "location": "2nd floor"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["location"] == "2nd floor"

    response = client.put(f"/api/devices/{DEVICE}", json={"notes": "by the window"}, headers=user_headers)
    body = response.json()
    assert body["name"] == "Office"
    assert body["notes"] == "by the window"

    response = client.put(
        f"/api/devices/{DEVICE}/custom-name",
        json={"custom_name": "My sensor"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["display_name"] == "My sensor"


def test_measurements_newest_first_with_limit(client, owned_device, user_headers):
    response = client.get(f"/api/devices/{DEVICE}/measurements", params={"limit": 1}, headers=user_headers)

    assert response.status_code == 200
    assert [row["rco2"] for row in response.json()] == [700]


def test_measurements_time_window(client, owned_device, user_headers):
    future = isoformat_z(utc_now() + timedelta(hours=1))
    past = isoformat_z(utc_now() - timedelta(hours=1))

    empty = client.get(f"/api/devices/{DEVICE}/measurements", params={"start": future}, headers=user_headers)
    both = client.get(
        f"/api/devices/{DEVICE}/measurements",
        params={"start": past, "end": future},
        headers=user_headers,
    )

    assert empty.json() == []
    assert len(both.json()) == 2


def test_measurements_reversed_window_is_400(client, owned_device, user_headers):
    response = client.get(
        f"/api/devices/{DEVICE}/measurements",
        params={"start": "2026-02-01T00:00:00Z", "end": "2026-01-01T00:00:00Z"},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_config_put_merges_and_records_event(client, owned_device, user_headers, db_session):
    client.put(f"/api/devices/{DEVICE}/config", json={"ledBarMode": "co2", "abcDays": 3}, headers=user_headers)
    response = client.put(
        f"/api/devices/{DEVICE}/config",
        json={"postDataToAirGradient": False, "displayBrightness": 0},
        headers=user_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["deviceId"] == DEVICE
    assert body["ledBarMode"] == "co2"
    assert body["abcDays"] == 3
    assert body["displayBrightness"] == 0
    assert body["postDataToAirGradient"] is False

    events = db_session.query(Event).filter(Event.event_type == EVENT_CONFIG_UPDATED).order_by(Event.id).all()
    assert [event.event_data["changes"] for event in events] == [
        {"led_bar_mode": "co2", "abc_days": 3},
        {"post_data_to_airgradient": False, "display_brightness": 0},
    ]

    device_view = client.get(f"/sensors/{DEVICE}/one/config").json()
    assert device_view["ledBarMode"] == "co2"
    assert device_view["displayBrightness"] == 0


def test_config_put_rejects_null_and_out_of_range(client, owned_device, user_headers):
    null = client.put(f"/api/devices/{DEVICE}/config", json={"ledBarMode": None}, headers=user_headers)
    too_bright = client.put(f"/api/devices/{DEVICE}/config", json={"ledBarBrightness": 150}, headers=user_headers)

    assert null.status_code == 422
    assert too_bright.status_code == 422


def test_events_are_listed_newest_first(client, owned_device, user_headers):
    response = client.get(f"/api/devices/{DEVICE}/events", headers=user_headers)

    types = [event["event_type"] for event in response.json()]
    assert types[0] == "device_claimed"
    assert types.count("measurement_received") == 2


def test_claim_conflict_and_unknown_serial(client, owned_device, other_headers):
    taken = client.post("/api/devices/claim", json={"serial_number": SERIAL}, headers=other_headers)
    unknown = client.post("/api/devices/claim", json={"serial_number": "zzz"}, headers=other_headers)
    blank = client.post("/api/devices/claim", json={}, headers=other_headers)

    assert taken.status_code == 409
    assert taken.json()["error"] == "already_owned"
    assert unknown.status_code == 404
    assert blank.status_code == 400


def test_admin_assign_and_unassign(client, owned_device, admin_headers, other_user, other_headers):
    response = client.post(
        f"/api/devices/{DEVICE}/assign",
        json={"user_id": other_user.id},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["owner_id"] == other_user.id
    assert client.get(f"/api/devices/{DEVICE}", headers=other_headers).status_code == 200

    response = client.post(f"/api/devices/{DEVICE}/unassign", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["owner_id"] is None


def test_owner_cannot_assign(client, owned_device, user_headers, other_user):
    response = client.post(
        f"/api/devices/{DEVICE}/assign",
        json={"user_id": other_user.id},
        headers=user_headers,
    )

    assert response.status_code == 403
