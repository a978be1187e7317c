from __future__ import annotations

import pytest
from pydantic import ValidationError

from rosaiq_server.config import DeviceDefaults
from rosaiq_server.errors import NotFoundError
from rosaiq_server.models.device_config import CONFIG_FIELDS, DeviceConfig
from rosaiq_server.schemas.device_config import DeviceConfigDocument, DeviceConfigPatch
from rosaiq_server.services.config_store import ConfigStore

DEFAULTS = DeviceDefaults(
    country="US",
    pm_standard="ugm3",
    led_bar_mode="pm",
    abc_days=8,
    tvoc_learning_offset=12,
    nox_learning_offset=12,
    mqtt_broker_url="",
    temperature_unit="c",
    configuration_control="local",
    post_data_to_airgradient=False,
    led_bar_brightness=100,
    display_brightness=100,
)


@pytest.fixture
def store(db_session) -> ConfigStore:
    return ConfigStore(db_session, DEFAULTS)


@pytest.fixture
def device_id(registry) -> str:
    return registry.register_contact("airgradient:cfg01").device_id


def _values(config: DeviceConfig) -> dict:
    return {name: getattr(config, name) for name in CONFIG_FIELDS}


def test_first_read_materializes_defaults(store: ConfigStore, device_id: str, db_session):
    config = store.get(device_id)

    assert _values(config) == DEFAULTS.as_columns()
    assert db_session.query(DeviceConfig).count() == 1


def test_repeated_reads_do_not_duplicate(store: ConfigStore, device_id: str, db_session):
    store.get(device_id)
    store.get(device_id)

    assert db_session.query(DeviceConfig).count() == 1


def test_patch_applies_only_supplied_keys(store: ConfigStore, device_id: str):
    store.set(device_id, DeviceConfigPatch(ledBarMode="co2", abcDays=7))
    config = store.set(device_id, DeviceConfigPatch(country="DE"))

    assert config.led_bar_mode == "co2"
    assert config.abc_days == 7
    assert config.country == "DE"
    assert config.temperature_unit == "c"


def test_false_and_zero_are_applied_not_skipped(store: ConfigStore, device_id: str):
    store.set(device_id, DeviceConfigPatch(postDataToAirGradient=True, ledBarBrightness=80))
    config = store.set(device_id, DeviceConfigPatch(postDataToAirGradient=False, ledBarBrightness=0))

    assert config.post_data_to_airgradient is False
    assert config.led_bar_brightness == 0


def test_set_before_get_merges_onto_defaults(store: ConfigStore, device_id: str):
    config = store.set(device_id, DeviceConfigPatch(displayBrightness=10))

    expected = dict(DEFAULTS.as_columns(), display_brightness=10)
    assert _values(config) == expected


def test_empty_patch_changes_nothing(store: ConfigStore, device_id: str):
    before = store.get(device_id).updated_at
    config = store.set(device_id, DeviceConfigPatch())

    assert config.updated_at == before
    assert _values(config) == DEFAULTS.as_columns()


def test_unknown_device_is_not_found(store: ConfigStore):
    with pytest.raises(NotFoundError):
        store.get("airgradient:ghost")


def test_patch_accepts_snake_case_keys():
    patch = DeviceConfigPatch.model_validate({"led_bar_mode": "off", "temperature_unit": "f"})

    assert patch.changes() == {"led_bar_mode": "off", "temperature_unit": "f"}


def test_patch_rejects_explicit_null_and_bad_values():
    with pytest.raises(ValidationError):
        DeviceConfigPatch.model_validate({"ledBarMode": None})
    with pytest.raises(ValidationError):
        DeviceConfigPatch.model_validate({"ledBarMode": "rainbow"})
    with pytest.raises(ValidationError):
        DeviceConfigPatch.model_validate({"displayBrightness": 101})


def test_document_uses_device_keys(store: ConfigStore, device_id: str):
    document = DeviceConfigDocument.model_validate(store.get(device_id)).model_dump(by_alias=True)

    assert set(document) == {
        "country",
        "pmStandard",
        "ledBarMode",
        "abcDays",
        "tvocLearningOffset",
        "noxLearningOffset",
        "mqttBrokerUrl",
        "temperatureUnit",
        "configurationControl",
        "postDataToAirGradient",
        "ledBarBrightness",
        "displayBrightness",
    }
