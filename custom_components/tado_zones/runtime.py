"""Home Assistant runtime adapter for Tado Zones."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from homeassistant.core import HomeAssistant, callback

from .accessory import AccessoryStore
from .const import (
    CONF_HOME_ID,
    CONF_ZONE_ID,
    CONF_ZONES,
    ZONE_TYPE_HEATING,
    normalize_entry_data,
)
from .coordinator import TadoZonesCoordinator
from .zone import RemoteClient, ZoneController

_LOGGER = logging.getLogger(__name__)


def _zone_key(zone_id: Any) -> str:
    return str(zone_id).strip()


class TadoZonesRuntime:
    """Build one ZoneController per remote heating zone of a config entry."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry_id: str,
        config: dict[str, Any],
        client: RemoteClient,
        coordinator: TadoZonesCoordinator,
    ) -> None:
        self.hass = hass
        self.entry_id = entry_id
        self._config = normalize_entry_data(config)
        self._client = client
        self._coordinator = coordinator
        self._store = AccessoryStore(hass, entry_id)
        self._zones: dict[Any, ZoneController] = {}
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def zones(self) -> dict[Any, ZoneController]:
        return self._zones

    @property
    def store(self) -> AccessoryStore:
        return self._store

    def _zone_config(self, zone_id: Any) -> dict[str, Any]:
        for item in self._config[CONF_ZONES]:
            if isinstance(item, dict) and _zone_key(item.get(CONF_ZONE_ID)) == _zone_key(zone_id):
                return item
        return {}

    async def async_setup(self) -> None:
        """Load accessories, build zone controllers and subscribe to zone updates."""
        await self._store.async_load()
        await self._coordinator.async_config_entry_first_refresh()

        api_zones = self._coordinator.data or {}
        for zone_id, api_zone in api_zones.items():
            if api_zone.get("type") != ZONE_TYPE_HEATING:
                _LOGGER.debug("Skipping zone %s of type %s", zone_id, api_zone.get("type"))
                continue
            controller = ZoneController(
                self.hass,
                home_id=self._config[CONF_HOME_ID],
                api_zone=api_zone,
                config=self._config,
                zone_config=self._zone_config(zone_id),
                client=self._client,
                store=self._store,
            )
            await controller.async_setup()
            self._zones[zone_id] = controller

        vanished = [
            accessory
            for accessory in self._store.accessories
            if accessory.zone_id not in self._zones
        ]
        self._store.unregister(vanished)
        await self._store.async_save()

        self._unsubscribers.append(
            self._coordinator.async_add_listener(self._async_handle_zones_update)
        )

    async def async_unload(self) -> None:
        """Tear down zone controllers and listeners."""
        while self._unsubscribers:
            unsub = self._unsubscribers.pop()
            unsub()
        for controller in self._zones.values():
            await controller.async_unload()
        await self._store.async_save()
        self._zones = {}

    @callback
    def _async_handle_zones_update(self) -> None:
        api_zones = self._coordinator.data or {}
        for zone_id, controller in self._zones.items():
            api_zone = api_zones.get(zone_id)
            if api_zone is None:
                _LOGGER.debug("%s - Zone missing from zone list", zone_id)
                continue
            controller.update_zone(api_zone)

    async def async_refresh(self, zone_id: Any | None = None) -> None:
        """Refresh one zone, or every zone when zone_id is not given."""
        if zone_id is None:
            targets = list(self._zones.values())
        else:
            targets = [
                controller
                for key, controller in self._zones.items()
                if _zone_key(key) == _zone_key(zone_id)
            ]
            if not targets:
                _LOGGER.warning("Unknown zone %s for entry %s", zone_id, self.entry_id)
        for controller in targets:
            await controller.async_refresh()
