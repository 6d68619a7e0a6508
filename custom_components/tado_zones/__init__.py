"""Tado Zones custom integration."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.config_entries import SOURCE_IMPORT, ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .client import TadoClient
from .const import (
    ATTR_ENTRY_ID,
    ATTR_ZONE_ID,
    CONF_ACCESS_TOKEN,
    CONF_ALTERNATIVE_STATE_LOGIC,
    CONF_HIDE_WINDOW_SENSORS,
    CONF_HOME_ID,
    CONF_SENSOR_NAME,
    CONF_SENSORS,
    CONF_STATE_UPDATE_INTERVAL,
    CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK,
    CONF_TERMINATION_OPTION,
    CONF_ZONE_ID,
    CONF_ZONE_UPDATE_INTERVAL,
    CONF_ZONES,
    DEFAULT_STATE_UPDATE_INTERVAL,
    DEFAULT_ZONE_UPDATE_INTERVAL,
    DOMAIN,
    PLATFORMS,
    SERVICE_REFRESH,
    normalize_entry_data,
)
from .coordinator import TadoZonesCoordinator
from .engine import as_int
from .runtime import TadoZonesRuntime

ENTRY_RUNTIME = "runtime"
ENTRY_COORDINATOR = "coordinator"
ENTRY_UNSUB_RELOAD = "unsub_reload"

SENSOR_SCHEMA = vol.Schema({vol.Optional(CONF_SENSOR_NAME): cv.string})

ZONE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_ZONE_ID): vol.Coerce(int),
        vol.Optional(CONF_TERMINATION_OPTION): vol.Any(cv.positive_int, cv.string),
        vol.Optional(CONF_SENSORS, default=[]): vol.All(cv.ensure_list, [SENSOR_SCHEMA]),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Required(CONF_HOME_ID): vol.Coerce(int),
                vol.Required(CONF_ACCESS_TOKEN): cv.string,
                vol.Optional(
                    CONF_STATE_UPDATE_INTERVAL, default=DEFAULT_STATE_UPDATE_INTERVAL
                ): cv.positive_int,
                vol.Optional(
                    CONF_ZONE_UPDATE_INTERVAL, default=DEFAULT_ZONE_UPDATE_INTERVAL
                ): cv.positive_int,
                vol.Optional(CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK, default=False): cv.boolean,
                vol.Optional(CONF_ALTERNATIVE_STATE_LOGIC, default=False): cv.boolean,
                vol.Optional(CONF_HIDE_WINDOW_SENSORS, default=False): cv.boolean,
                vol.Optional(CONF_ZONES, default=[]): vol.All(cv.ensure_list, [ZONE_SCHEMA]),
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)

SERVICE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): str,
        vol.Optional(ATTR_ZONE_ID): vol.Coerce(int),
    }
)


async def async_setup(hass: HomeAssistant, config: dict[str, Any]) -> bool:
    """Set up the Tado Zones domain, importing any YAML configuration."""
    hass.data.setdefault(DOMAIN, {})
    if DOMAIN in config:
        hass.async_create_task(
            hass.config_entries.flow.async_init(
                DOMAIN,
                context={"source": SOURCE_IMPORT},
                data=dict(config[DOMAIN]),
            )
        )
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Tado Zones from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    config = normalize_entry_data({**entry.data, **entry.options})
    client = TadoClient(async_get_clientsession(hass), config[CONF_ACCESS_TOKEN])
    coordinator = TadoZonesCoordinator(
        hass,
        entry,
        client,
        config[CONF_HOME_ID],
        as_int(config.get(CONF_ZONE_UPDATE_INTERVAL), DEFAULT_ZONE_UPDATE_INTERVAL),
    )
    runtime = TadoZonesRuntime(hass, entry.entry_id, config, client, coordinator)
    await runtime.async_setup()

    unsub_reload = entry.add_update_listener(async_reload_entry)

    hass.data[DOMAIN][entry.entry_id] = {
        ENTRY_RUNTIME: runtime,
        ENTRY_COORDINATOR: coordinator,
        ENTRY_UNSUB_RELOAD: unsub_reload,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    await _async_register_services(hass)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a Tado Zones entry."""
    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if not entry_data:
        return True

    runtime: TadoZonesRuntime = entry_data[ENTRY_RUNTIME]
    unsub_reload = entry_data[ENTRY_UNSUB_RELOAD]
    await runtime.async_unload()
    unsub_reload()
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        return False

    if not hass.data.get(DOMAIN):
        await _async_unregister_services(hass)

    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload an entry when options change."""
    await async_unload_entry(hass, entry)
    await async_setup_entry(hass, entry)


async def _async_register_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_REFRESH):
        return

    async def _handle_refresh(call: ServiceCall) -> None:
        targets = _resolve_runtimes(hass, call.data.get(ATTR_ENTRY_ID))
        for runtime in targets:
            await runtime.async_refresh(call.data.get(ATTR_ZONE_ID))

    hass.services.async_register(
        DOMAIN,
        SERVICE_REFRESH,
        _handle_refresh,
        schema=SERVICE_SCHEMA,
    )


async def _async_unregister_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_REFRESH):
        hass.services.async_remove(DOMAIN, SERVICE_REFRESH)


def _resolve_runtimes(
    hass: HomeAssistant, entry_id: str | None
) -> list[TadoZonesRuntime]:
    runtimes: list[TadoZonesRuntime] = []
    domain_data = hass.data.get(DOMAIN, {})
    if entry_id:
        entry_data = domain_data.get(entry_id)
        if entry_data:
            runtimes.append(entry_data[ENTRY_RUNTIME])
        return runtimes

    for entry_data in domain_data.values():
        runtimes.append(entry_data[ENTRY_RUNTIME])
    return runtimes
