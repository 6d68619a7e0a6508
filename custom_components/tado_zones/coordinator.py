"""Coordinator for the Tado home's zone list."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .client import TadoApiError, TadoClient
from .const import DOMAIN

_LOGGER = logging.getLogger(__name__)


class TadoZonesCoordinator(DataUpdateCoordinator[dict[Any, dict[str, Any]]]):
    """Poll zones with their devices, keyed by zone id."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry | None,
        client: TadoClient,
        home_id: Any,
        update_interval: int,
    ) -> None:
        super().__init__(
            hass,
            logger=_LOGGER,
            name=DOMAIN,
            config_entry=entry,
            update_interval=timedelta(seconds=update_interval),
        )
        self._client = client
        self.home_id = home_id

    async def _async_update_data(self) -> dict[Any, dict[str, Any]]:
        try:
            zones = await self._client.get_zones(self.home_id)
        except TadoApiError as err:
            raise UpdateFailed(f"Error fetching zones for home {self.home_id}: {err}") from err
        return {zone["id"]: zone for zone in zones if isinstance(zone, dict) and "id" in zone}
