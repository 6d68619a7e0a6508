"""Config flow for Tado Zones."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
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
    DEFAULTS,
    DOMAIN,
)
from .validation import validate_config_values


def _cfg_value(data: dict[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    return DEFAULTS.get(key, "")


def _bounded_int(min_value: int, max_value: int) -> Any:
    return vol.All(vol.Coerce(int), vol.Range(min=min_value, max=max_value))


def _options_fields(current: dict[str, Any]) -> dict[Any, Any]:
    return {
        vol.Required(
            CONF_STATE_UPDATE_INTERVAL,
            default=_cfg_value(current, CONF_STATE_UPDATE_INTERVAL),
        ): _bounded_int(1, 86_400),
        vol.Required(
            CONF_ZONE_UPDATE_INTERVAL,
            default=_cfg_value(current, CONF_ZONE_UPDATE_INTERVAL),
        ): _bounded_int(1, 86_400),
        vol.Required(
            CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK,
            default=_cfg_value(current, CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK),
        ): bool,
        vol.Required(
            CONF_ALTERNATIVE_STATE_LOGIC,
            default=_cfg_value(current, CONF_ALTERNATIVE_STATE_LOGIC),
        ): bool,
        vol.Required(
            CONF_HIDE_WINDOW_SENSORS,
            default=_cfg_value(current, CONF_HIDE_WINDOW_SENSORS),
        ): bool,
    }


def _user_schema(current: dict[str, Any]) -> vol.Schema:
    fields: dict[Any, Any] = {
        vol.Required(
            CONF_HOME_ID, default=current.get(CONF_HOME_ID, vol.UNDEFINED)
        ): vol.Coerce(int),
        vol.Required(CONF_ACCESS_TOKEN): str,
    }
    fields.update(_options_fields(current))
    return vol.Schema(fields)


def _init_schema(current: dict[str, Any]) -> vol.Schema:
    fields = _options_fields(current)
    fields[vol.Optional(CONF_ZONE_ID)] = vol.Coerce(int)
    return vol.Schema(fields)


def _zone_schema(zone: dict[str, Any]) -> vol.Schema:
    return vol.Schema(
        {
            vol.Optional(
                CONF_TERMINATION_OPTION,
                default=str(zone.get(CONF_TERMINATION_OPTION) or ""),
            ): str,
            vol.Optional(
                CONF_SENSORS,
                default=format_sensor_names(zone.get(CONF_SENSORS)),
            ): str,
        }
    )


def format_sensor_names(sensors: list[dict[str, Any]] | None) -> str:
    return ", ".join(str(item.get(CONF_SENSOR_NAME) or "") for item in sensors or [])


def parse_sensor_names(value: str | None) -> list[dict[str, Any]]:
    """Split a comma separated sensor list into sensor entries."""
    if not value or not value.strip():
        return []
    return [{CONF_SENSOR_NAME: name.strip()} for name in value.split(",")]


def upsert_zone(
    zones: list[dict[str, Any]], zone_id: int, termination: str, sensors: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Return zones with the entry for zone_id replaced or appended."""
    zone: dict[str, Any] = {CONF_ZONE_ID: zone_id, CONF_SENSORS: sensors}
    if termination.strip():
        zone[CONF_TERMINATION_OPTION] = termination.strip()

    updated: list[dict[str, Any]] = []
    replaced = False
    for item in zones:
        if str(item.get(CONF_ZONE_ID)) == str(zone_id):
            updated.append(zone)
            replaced = True
        else:
            updated.append(item)
    if not replaced:
        updated.append(zone)
    return updated


class TadoZonesConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):  # type: ignore[call-arg]
    """Tado Zones config flow."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        errors: dict[str, str] = {}

        if user_input is not None:
            data = {**DEFAULTS, **user_input}
            validation_error = validate_config_values(data)
            if validation_error:
                errors["base"] = validation_error
            else:
                await self.async_set_unique_id(str(data[CONF_HOME_ID]))
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=f"Tado home {data[CONF_HOME_ID]}", data=data
                )

        return self.async_show_form(
            step_id="user",
            data_schema=_user_schema({**DEFAULTS, **(user_input or {})}),
            errors=errors,
        )

    async def async_step_import(self, import_data: dict[str, Any]) -> dict[str, Any]:
        data = {**DEFAULTS, **import_data}
        if validate_config_values(data):
            return self.async_abort(reason="invalid_import")

        await self.async_set_unique_id(str(data[CONF_HOME_ID]))
        self._abort_if_unique_id_configured(updates=data)
        return self.async_create_entry(title=f"Tado home {data[CONF_HOME_ID]}", data=data)

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> TadoZonesOptionsFlow:
        return TadoZonesOptionsFlow(config_entry)


class TadoZonesOptionsFlow(config_entries.OptionsFlow):
    """Options flow for Tado Zones."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        self._config_entry = config_entry
        self._options: dict[str, Any] = {}
        self._zone_id: int | None = None

    def _current(self) -> dict[str, Any]:
        return {
            **DEFAULTS,
            **self._config_entry.data,
            **self._config_entry.options,
            **self._options,
        }

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        current = self._current()
        errors: dict[str, str] = {}

        if user_input is not None:
            zone_id = user_input.pop(CONF_ZONE_ID, None)
            options = {**current, **user_input}
            validation_error = validate_config_values(options)
            if validation_error:
                errors["base"] = validation_error
            else:
                self._options = options
                if zone_id is not None:
                    self._zone_id = zone_id
                    return await self.async_step_zone()
                return self.async_create_entry(title="", data=_options_only(options))

        return self.async_show_form(
            step_id="init",
            data_schema=_init_schema(current),
            errors=errors,
        )

    async def async_step_zone(
        self, user_input: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        current = self._current()
        zones: list[dict[str, Any]] = list(current.get(CONF_ZONES) or [])
        zone = next(
            (item for item in zones if str(item.get(CONF_ZONE_ID)) == str(self._zone_id)),
            {},
        )
        errors: dict[str, str] = {}

        if user_input is not None and self._zone_id is not None:
            options = {
                **current,
                CONF_ZONES: upsert_zone(
                    zones,
                    self._zone_id,
                    str(user_input.get(CONF_TERMINATION_OPTION) or ""),
                    parse_sensor_names(user_input.get(CONF_SENSORS)),
                ),
            }
            validation_error = validate_config_values(options)
            if validation_error:
                errors["base"] = validation_error
            else:
                return self.async_create_entry(title="", data=_options_only(options))

        return self.async_show_form(
            step_id="zone",
            data_schema=_zone_schema(zone),
            errors=errors,
            description_placeholders={"zone_id": str(self._zone_id)},
        )


def _options_only(values: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value
        for key, value in values.items()
        if key not in (CONF_HOME_ID, CONF_ACCESS_TOKEN)
    }
