"""Tado Zones humidity sensors."""

from __future__ import annotations

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import ENTRY_RUNTIME
from .const import CHAR_CURRENT_HUMIDITY, DOMAIN
from .entity import TadoZoneEntity
from .runtime import TadoZonesRuntime
from .zone import ZoneController


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up one humidity sensor per heating zone."""
    runtime: TadoZonesRuntime = hass.data[DOMAIN][entry.entry_id][ENTRY_RUNTIME]
    async_add_entities(
        TadoZoneHumiditySensor(controller, entry.entry_id)
        for controller in runtime.zones.values()
        if controller.humidity_service is not None
    )


class TadoZoneHumiditySensor(TadoZoneEntity, SensorEntity):
    """Relative humidity reported by the zone."""

    _attr_name = "Humidity"
    _attr_device_class = SensorDeviceClass.HUMIDITY
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE

    def __init__(self, controller: ZoneController, entry_id: str) -> None:
        super().__init__(controller, entry_id, controller.humidity, "humidity")

    def _watched_names(self) -> tuple[str, ...]:
        return (CHAR_CURRENT_HUMIDITY,)

    @property
    def native_value(self) -> float | None:
        return self._service.value(CHAR_CURRENT_HUMIDITY)
