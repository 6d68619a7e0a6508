"""Tado Zones door/window sensor switches."""

from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import ENTRY_RUNTIME
from .accessory import ZoneService
from .const import CHAR_ON, DOMAIN
from .entity import TadoZoneEntity
from .runtime import TadoZonesRuntime
from .zone import ZoneController


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up one switch per configured sensor of each zone."""
    runtime: TadoZonesRuntime = hass.data[DOMAIN][entry.entry_id][ENTRY_RUNTIME]
    async_add_entities(
        TadoZoneSensorSwitch(controller, entry.entry_id, switch)
        for controller in runtime.zones.values()
        for switch in controller.sensors
    )


class TadoZoneSensorSwitch(TadoZoneEntity, SwitchEntity):
    """Open/closed input for a door or window; any open switch turns the zone off."""

    _attr_icon = "mdi:window-open-variant"

    def __init__(self, controller: ZoneController, entry_id: str, switch: ZoneService) -> None:
        super().__init__(controller, entry_id, switch, f"switch_{switch.subtype}")
        self._attr_name = switch.name

    def _watched_names(self) -> tuple[str, ...]:
        return (CHAR_ON,)

    @property
    def is_on(self) -> bool:
        return bool(self._service.value(CHAR_ON))

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._service.get_characteristic(CHAR_ON).async_set_value(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._service.get_characteristic(CHAR_ON).async_set_value(False)
