"""Tado Zones thermostat entities."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import ENTRY_RUNTIME
from .const import (
    CHAR_CURRENT_HEATING_STATE,
    CHAR_CURRENT_TEMPERATURE,
    CHAR_STATUS_LOW_BATTERY,
    CHAR_TARGET_HEATING_STATE,
    CHAR_TARGET_TEMPERATURE,
    DOMAIN,
    MODE_AUTO,
    MODE_HEAT,
    MODE_OFF,
    TARGET_TEMPERATURE_MAX_C,
    TARGET_TEMPERATURE_MIN_C,
    TARGET_TEMPERATURE_STEP_C,
)
from .entity import TadoZoneEntity
from .runtime import TadoZonesRuntime
from .zone import ZoneController

_LOGGER = logging.getLogger(__name__)

MODE_TO_HVAC: dict[int, HVACMode] = {
    MODE_OFF: HVACMode.OFF,
    MODE_HEAT: HVACMode.HEAT,
    MODE_AUTO: HVACMode.AUTO,
}
HVAC_TO_MODE: dict[HVACMode, int] = {hvac: mode for mode, hvac in MODE_TO_HVAC.items()}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up one thermostat per heating zone."""
    runtime: TadoZonesRuntime = hass.data[DOMAIN][entry.entry_id][ENTRY_RUNTIME]
    async_add_entities(
        TadoZoneClimate(controller, entry.entry_id) for controller in runtime.zones.values()
    )


class TadoZoneClimate(TadoZoneEntity, ClimateEntity):
    """Thermostat of a Tado heating zone."""

    _attr_name = None
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.HEAT, HVACMode.AUTO]
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_min_temp = TARGET_TEMPERATURE_MIN_C
    _attr_max_temp = TARGET_TEMPERATURE_MAX_C
    _attr_target_temperature_step = TARGET_TEMPERATURE_STEP_C

    def __init__(self, controller: ZoneController, entry_id: str) -> None:
        super().__init__(controller, entry_id, controller.thermostat, "climate")

    def _watched_names(self) -> tuple[str, ...]:
        return (
            CHAR_CURRENT_HEATING_STATE,
            CHAR_TARGET_HEATING_STATE,
            CHAR_CURRENT_TEMPERATURE,
            CHAR_TARGET_TEMPERATURE,
            CHAR_STATUS_LOW_BATTERY,
        )

    @property
    def hvac_mode(self) -> HVACMode | None:
        return MODE_TO_HVAC.get(self._service.value(CHAR_TARGET_HEATING_STATE))

    @property
    def hvac_action(self) -> HVACAction | None:
        if self._service.value(CHAR_CURRENT_HEATING_STATE) == MODE_HEAT:
            return HVACAction.HEATING
        if self.hvac_mode == HVACMode.OFF:
            return HVACAction.OFF
        return HVACAction.IDLE

    @property
    def current_temperature(self) -> float | None:
        return self._service.value(CHAR_CURRENT_TEMPERATURE)

    @property
    def target_temperature(self) -> float | None:
        return self._service.value(CHAR_TARGET_TEMPERATURE)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        state = self._controller.last_state
        return {
            "zone_id": self._controller.id,
            "low_battery": bool(self._service.value(CHAR_STATUS_LOW_BATTERY)),
            "overlay_type": state.overlay_type if state else None,
            "termination": self._controller.termination,
        }

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        mode = HVAC_TO_MODE.get(hvac_mode)
        if mode is None:
            _LOGGER.warning("%s - Unsupported HVAC mode: %s", self._controller.id, hvac_mode)
            return
        await self._service.get_characteristic(CHAR_TARGET_HEATING_STATE).async_set_value(mode)

    async def async_set_temperature(self, **kwargs: Any) -> None:
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        await self._service.get_characteristic(CHAR_TARGET_TEMPERATURE).async_set_value(
            float(temperature)
        )
