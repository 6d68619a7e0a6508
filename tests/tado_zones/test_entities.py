"""Entity tests for Tado Zones."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from homeassistant.components.binary_sensor import BinarySensorDeviceClass
from homeassistant.components.climate import HVACAction, HVACMode

from custom_components.tado_zones.binary_sensor import (
    TadoZoneBatterySensor,
    TadoZoneWindowSensor,
)
from custom_components.tado_zones.climate import TadoZoneClimate
from custom_components.tado_zones.sensor import TadoZoneHumiditySensor
from custom_components.tado_zones.switch import TadoZoneSensorSwitch

HOME_ID = 12345


@pytest.mark.asyncio
async def test_climate_reflects_thermostat(tado_env: SimpleNamespace) -> None:
    tado_env.client.states[1] = tado_env.zone_state(
        overlay="MANUAL", heating_power=40.0, target=22.0, inside=19.5
    )
    controller = await tado_env.build_controller()
    entity = TadoZoneClimate(controller, "entry-1")

    assert entity.unique_id == "entry-1_1_climate"
    assert entity.hvac_mode == HVACMode.HEAT
    assert entity.hvac_action == HVACAction.HEATING
    assert entity.current_temperature == 19.5
    assert entity.target_temperature == 22.0
    assert entity.min_temp == 5.0
    assert entity.max_temp == 25.0
    assert entity.extra_state_attributes["overlay_type"] == "MANUAL"
    assert entity.extra_state_attributes["termination"] == "manual"

    device = entity.device_info
    assert device["manufacturer"] == "Tado"
    assert device["model"] == "RU02"
    assert device["identifiers"] == {("tado_zones", controller.accessory.stable_id)}


@pytest.mark.asyncio
async def test_climate_actions_write_characteristics(tado_env: SimpleNamespace) -> None:
    controller = await tado_env.build_controller()
    entity = TadoZoneClimate(controller, "entry-1")
    tado_env.client.calls.clear()

    await entity.async_set_hvac_mode(HVACMode.OFF)
    assert tado_env.client.calls_named("set_zone_overlay") == [
        (HOME_ID, 1, "off", 21.0, "manual")
    ]

    await entity.async_set_hvac_mode(HVACMode.COOL)
    assert len(tado_env.client.calls_named("set_zone_overlay")) == 1

    await entity.async_set_temperature(temperature=20.0)
    assert tado_env.timers.active_later_calls()[0]["delay"] == 0.25

    await entity.async_set_hvac_mode(HVACMode.AUTO)
    assert tado_env.timers.active_later_calls() == []
    assert tado_env.client.calls_named("clear_zone_overlay") == [(HOME_ID, 1)]


@pytest.mark.asyncio
async def test_idle_and_off_actions(tado_env: SimpleNamespace) -> None:
    controller = await tado_env.build_controller()
    entity = TadoZoneClimate(controller, "entry-1")
    assert entity.hvac_mode == HVACMode.AUTO
    assert entity.hvac_action == HVACAction.IDLE

    tado_env.client.states[1] = tado_env.zone_state(power="OFF", overlay="MANUAL")
    await controller.async_refresh()
    assert entity.hvac_mode == HVACMode.OFF
    assert entity.hvac_action == HVACAction.OFF


@pytest.mark.asyncio
async def test_sensor_entities(tado_env: SimpleNamespace) -> None:
    zone = tado_env.api_zone(devices=[{"serialNo": "A", "batteryState": "LOW"}])
    tado_env.client.states[1] = tado_env.zone_state(humidity=55.0, open_window=True)
    controller = await tado_env.build_controller(zone=zone)

    humidity = TadoZoneHumiditySensor(controller, "entry-1")
    window = TadoZoneWindowSensor(controller, "entry-1")
    battery = TadoZoneBatterySensor(controller, "entry-1")

    assert humidity.native_value == 55.0
    assert window.is_on is True
    assert window.device_class == BinarySensorDeviceClass.WINDOW
    assert battery.is_on is True
    assert {humidity.unique_id, window.unique_id, battery.unique_id} == {
        "entry-1_1_humidity",
        "entry-1_1_window",
        "entry-1_1_battery",
    }


@pytest.mark.asyncio
async def test_sensor_switch_turns_zone_off(tado_env: SimpleNamespace) -> None:
    controller = await tado_env.build_controller(zone_config={"sensors": [{"name": "Door"}]})
    entity = TadoZoneSensorSwitch(controller, "entry-1", controller.sensors[0])
    tado_env.client.calls.clear()

    assert entity.is_on is False

    await entity.async_turn_on()
    assert entity.is_on is True
    assert tado_env.client.calls_named("set_zone_overlay") == [
        (HOME_ID, 1, "off", 21.0, "manual")
    ]

    await entity.async_turn_off()
    assert tado_env.client.calls_named("clear_zone_overlay") == [(HOME_ID, 1)]


@pytest.mark.asyncio
async def test_window_sensor_requires_contact_service(tado_env: SimpleNamespace) -> None:
    controller = await tado_env.build_controller(
        zone=tado_env.api_zone(window_supported=False)
    )
    assert controller.contact_service is None

    with pytest.raises(RuntimeError, match="no window contact"):
        TadoZoneWindowSensor(controller, "entry-1")
