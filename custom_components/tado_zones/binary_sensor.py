"""Tado Zones binary sensor entities."""

from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import EntityCategory
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import ENTRY_RUNTIME
from .const import CHAR_CONTACT_STATE, CHAR_STATUS_LOW_BATTERY, DOMAIN
from .entity import TadoZoneEntity
from .runtime import TadoZonesRuntime
from .zone import ZoneController


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up window contact and low battery sensors from a config entry."""
    runtime: TadoZonesRuntime = hass.data[DOMAIN][entry.entry_id][ENTRY_RUNTIME]
    entities: list[BinarySensorEntity] = []
    for controller in runtime.zones.values():
        entities.append(TadoZoneBatterySensor(controller, entry.entry_id))
        if controller.contact_service is not None:
            entities.append(TadoZoneWindowSensor(controller, entry.entry_id))
    async_add_entities(entities)


class TadoZoneWindowSensor(TadoZoneEntity, BinarySensorEntity):
    """Open window detected by the remote service."""

    _attr_name = "Window"
    _attr_device_class = BinarySensorDeviceClass.WINDOW

    def __init__(self, controller: ZoneController, entry_id: str) -> None:
        super().__init__(controller, entry_id, controller.contact, "window")

    def _watched_names(self) -> tuple[str, ...]:
        return (CHAR_CONTACT_STATE,)

    @property
    def is_on(self) -> bool:
        return bool(self._service.value(CHAR_CONTACT_STATE))


class TadoZoneBatterySensor(TadoZoneEntity, BinarySensorEntity):
    """Any device of the zone reports a low battery."""

    _attr_name = "Battery"
    _attr_device_class = BinarySensorDeviceClass.BATTERY
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(self, controller: ZoneController, entry_id: str) -> None:
        super().__init__(controller, entry_id, controller.thermostat, "battery")

    def _watched_names(self) -> tuple[str, ...]:
        return (CHAR_STATUS_LOW_BATTERY,)

    @property
    def is_on(self) -> bool:
        return bool(self._service.value(CHAR_STATUS_LOW_BATTERY))
