"""Base entity for Tado Zones accessories."""

from __future__ import annotations

from typing import Any

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from .accessory import Characteristic, ZoneService
from .const import (
    CHAR_FIRMWARE_REVISION,
    CHAR_MODEL,
    CHAR_SERIAL_NUMBER,
    DOMAIN,
    MANUFACTURER,
    SERVICE_INFORMATION,
)
from .zone import ZoneController


class TadoZoneEntity(Entity):
    """Entity that mirrors characteristics of one zone service."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(
        self,
        controller: ZoneController,
        entry_id: str,
        service: ZoneService,
        key: str,
    ) -> None:
        self._controller = controller
        self._service = service
        self._attr_unique_id = f"{entry_id}_{controller.id}_{key}"

    def _watched(self) -> list[Characteristic]:
        return [self._service.get_characteristic(name) for name in self._watched_names()]

    def _watched_names(self) -> tuple[str, ...]:
        return ()

    @property
    def device_info(self) -> DeviceInfo:
        accessory = self._controller.accessory
        info = accessory.get_service(SERVICE_INFORMATION) if accessory else None
        return DeviceInfo(
            identifiers={(DOMAIN, accessory.stable_id if accessory else str(self._controller.id))},
            name=self._controller.name,
            manufacturer=MANUFACTURER,
            model=_text(info, CHAR_MODEL),
            serial_number=_text(info, CHAR_SERIAL_NUMBER),
            sw_version=_text(info, CHAR_FIRMWARE_REVISION),
        )

    async def async_added_to_hass(self) -> None:
        for characteristic in self._watched():
            self.async_on_remove(characteristic.add_listener(self._handle_characteristic_change))

    @callback
    def _handle_characteristic_change(self) -> None:
        self.async_write_ha_state()


def _text(service: ZoneService | None, name: str) -> str | None:
    if service is None:
        return None
    value: Any = service.value(name)
    return str(value) if value else None
