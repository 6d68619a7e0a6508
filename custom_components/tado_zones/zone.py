"""Zone state reconciliation and control for Tado Zones."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Protocol

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import event as event_helper

from .accessory import AccessoryStore, ZoneAccessory, ZoneService
from .client import TadoApiError
from .const import (
    CHAR_CONTACT_STATE,
    CHAR_CURRENT_HEATING_STATE,
    CHAR_CURRENT_HUMIDITY,
    CHAR_CURRENT_TEMPERATURE,
    CHAR_FIRMWARE_REVISION,
    CHAR_MANUFACTURER,
    CHAR_MODEL,
    CHAR_NAME,
    CHAR_ON,
    CHAR_SERIAL_NUMBER,
    CHAR_STATUS_LOW_BATTERY,
    CHAR_TARGET_HEATING_STATE,
    CHAR_TARGET_TEMPERATURE,
    CONF_ALTERNATIVE_STATE_LOGIC,
    CONF_HIDE_WINDOW_SENSORS,
    CONF_SENSORS,
    CONF_STATE_UPDATE_INTERVAL,
    CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK,
    CONF_TERMINATION_OPTION,
    CURRENT_MODE_VALUES,
    DEFAULT_STATE_UPDATE_INTERVAL,
    EVENT_ZONE_STATE_UPDATED,
    KIND_THERMOSTAT,
    MANUFACTURER,
    SERVICE_CONTACT,
    SERVICE_HUMIDITY,
    SERVICE_INFORMATION,
    SERVICE_SWITCH,
    SERVICE_THERMOSTAT,
    TARGET_MODE_VALUES,
    TARGET_TEMPERATURE_MAX_C,
    TARGET_TEMPERATURE_MIN_C,
    TARGET_TEMPERATURE_STEP_C,
    TEMPERATURE_DEBOUNCE_SECONDS,
)
from .engine import (
    RemoteZoneState,
    TerminationDirective,
    as_bool,
    as_int,
    find_zone_leader,
    has_low_battery,
    reconcile_sensors,
    resolve_termination,
    sensor_entries,
    target_mode_for_open_sensors,
    to_local_mode,
    to_remote_command,
    window_detection_active,
)

_LOGGER = logging.getLogger(__name__)


class RemoteClient(Protocol):
    async def get_zone_state(self, home_id: Any, zone_id: Any) -> dict[str, Any]: ...

    async def set_zone_overlay(
        self,
        home_id: Any,
        zone_id: Any,
        power: str,
        temperature: float | None,
        termination: TerminationDirective,
    ) -> None: ...

    async def clear_zone_overlay(self, home_id: Any, zone_id: Any) -> None: ...


class DebounceTimer:
    """At most one pending delayed action, carrying the latest payload."""

    def __init__(
        self,
        hass: HomeAssistant,
        delay: float,
        action: Callable[[Any], Awaitable[None]],
    ) -> None:
        self.hass = hass
        self._delay = delay
        self._action = action
        self._unsub: Callable[[], None] | None = None
        self._payload: Any = None

    @property
    def pending(self) -> bool:
        return self._unsub is not None

    @property
    def payload(self) -> Any:
        return self._payload

    def schedule(self, payload: Any) -> None:
        """Start the timer, replacing any pending one and its payload."""
        self.cancel()
        self._payload = payload
        self._unsub = event_helper.async_call_later(
            self.hass,
            self._delay,
            self._async_fire,
        )

    def cancel(self) -> bool:
        """Drop the pending timer without running it; True if one was pending."""
        if self._unsub is None:
            return False
        self._unsub()
        self._unsub = None
        self._payload = None
        return True

    @callback
    def _async_fire(self, _: datetime) -> None:
        payload = self._payload
        self._unsub = None
        self._payload = None
        self.hass.async_create_task(self._action(payload))


class ZoneController:
    """Keep one Tado heating zone and its accessory in sync.

    Remote state flows in through periodic refreshes; local intent flows out
    through the write handlers registered on the thermostat and sensor
    switch characteristics.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        *,
        home_id: Any,
        api_zone: dict[str, Any],
        config: dict[str, Any],
        zone_config: dict[str, Any] | None,
        client: RemoteClient,
        store: AccessoryStore,
    ) -> None:
        self.hass = hass
        self.id = api_zone["id"]
        self.name = str(api_zone.get("name") or f"Zone {self.id}")
        self._home_id = home_id
        self._api_zone = api_zone
        self._config = config
        self._zone_config = zone_config or {}
        self._client = client
        self._store = store
        self._use_alternative_logic = as_bool(config.get(CONF_ALTERNATIVE_STATE_LOGIC))
        self._termination = resolve_termination(
            self._zone_config.get(CONF_TERMINATION_OPTION),
            as_bool(config.get(CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK)),
        )
        self._temperature_timer = DebounceTimer(
            hass,
            TEMPERATURE_DEBOUNCE_SECONDS,
            self._async_apply_target_temperature,
        )
        self._lock = asyncio.Lock()
        self._unsubscribers: list[Callable[[], None]] = []

        self.accessory: ZoneAccessory | None = None
        self.thermostat_service: ZoneService | None = None
        self.humidity_service: ZoneService | None = None
        self.contact_service: ZoneService | None = None
        self.sensors: list[ZoneService] = []
        self.last_state: RemoteZoneState | None = None

    @property
    def termination(self) -> TerminationDirective:
        return self._termination

    @property
    def temperature_timer(self) -> DebounceTimer:
        return self._temperature_timer

    async def async_setup(self) -> None:
        """Materialize the zone's accessory, subscribe and run a first refresh."""
        self._setup_accessory()
        self._setup_information()
        self._setup_sensors()
        self._setup_thermostat()
        self._setup_humidity()
        self._setup_contact()
        self.update_zone(self._api_zone)

        interval = as_int(
            self._config.get(CONF_STATE_UPDATE_INTERVAL), DEFAULT_STATE_UPDATE_INTERVAL
        )
        self._unsubscribers.append(
            event_helper.async_track_time_interval(
                self.hass,
                self._async_handle_periodic,
                timedelta(seconds=interval),
            )
        )

        await self.async_refresh()

    async def async_unload(self) -> None:
        """Tear down timers and write subscriptions."""
        self._temperature_timer.cancel()
        while self._unsubscribers:
            unsub = self._unsubscribers.pop()
            unsub()

    def _setup_accessory(self) -> None:
        accessory = self._store.find_existing(self.id, KIND_THERMOSTAT)
        if accessory is None:
            _LOGGER.info(
                "Adding new accessory with zone ID %s and kind %s",
                self.id,
                KIND_THERMOSTAT,
            )
            accessory = self._store.create(self.name, self.id, KIND_THERMOSTAT)
            self._store.register([accessory])

        unused = [
            item
            for item in self._store.accessories_for_zone(self.id)
            if item is not accessory
        ]
        self._store.unregister(unused)
        self.accessory = accessory

    def _setup_information(self) -> None:
        leader = find_zone_leader(self._api_zone.get("devices")) or {}
        info = self._host.get_or_create(SERVICE_INFORMATION)
        info.update_characteristic(CHAR_MANUFACTURER, MANUFACTURER)
        info.update_characteristic(CHAR_MODEL, leader.get("deviceType", ""))
        info.update_characteristic(CHAR_SERIAL_NUMBER, leader.get("serialNo", ""))
        info.update_characteristic(
            CHAR_FIRMWARE_REVISION, leader.get("currentFwVersion", "")
        )

    def _setup_sensors(self) -> None:
        accessory = self._host
        existing = accessory.services(SERVICE_SWITCH)
        _LOGGER.debug("%s - Found sensor switches: %s", self.id, len(existing))

        result = reconcile_sensors(
            sensor_entries(self._zone_config.get(CONF_SENSORS)), existing
        )

        _LOGGER.debug("%s - Removing outdated sensors %s", self.id, len(result.to_remove))
        for switch in result.to_remove:
            accessory.remove(switch)

        materialized: list[tuple[int, ZoneService]] = []
        for entry, switch in result.to_keep:
            _LOGGER.debug(
                "%s - Sensor switch %s already exists, updating", self.id, switch.subtype
            )
            switch.name = entry.name
            switch.subtype = entry.subtype
            materialized.append((entry.position, switch))

        _LOGGER.debug("%s - Adding new sensors %s", self.id, len(result.to_create))
        for entry in result.to_create:
            _LOGGER.info("%s - New sensor switch for %s", self.id, entry.name)
            switch = accessory.add_service(
                ZoneService(SERVICE_SWITCH, entry.subtype, entry.name)
            )
            materialized.append((entry.position, switch))

        self.sensors = [switch for _, switch in sorted(materialized, key=lambda item: item[0])]
        for switch in self.sensors:
            switch.update_characteristic(CHAR_NAME, switch.name)
            self._unsubscribers.append(
                switch.get_characteristic(CHAR_ON).on_write(
                    partial(self.async_check_sensor_state, switch)
                )
            )

    def _setup_thermostat(self) -> None:
        service = self._host.get_or_create(SERVICE_THERMOSTAT)
        service.primary = True

        # No cooling.
        service.get_characteristic(CHAR_CURRENT_HEATING_STATE).set_props(
            minimum=min(CURRENT_MODE_VALUES),
            maximum=max(CURRENT_MODE_VALUES),
            valid_values=CURRENT_MODE_VALUES,
        )
        target_state = service.get_characteristic(CHAR_TARGET_HEATING_STATE).set_props(
            minimum=min(TARGET_MODE_VALUES),
            maximum=max(TARGET_MODE_VALUES),
            valid_values=TARGET_MODE_VALUES,
        )
        target_temperature = service.get_characteristic(CHAR_TARGET_TEMPERATURE).set_props(
            minimum=TARGET_TEMPERATURE_MIN_C,
            maximum=TARGET_TEMPERATURE_MAX_C,
            step=TARGET_TEMPERATURE_STEP_C,
        )

        self._unsubscribers.append(target_state.on_write(self._async_handle_target_state))
        self._unsubscribers.append(
            target_temperature.on_write(self._async_handle_target_temperature)
        )
        self.thermostat_service = service

    def _setup_humidity(self) -> None:
        self.humidity_service = self._host.get_or_create(SERVICE_HUMIDITY)

    def _setup_contact(self) -> None:
        accessory = self._host
        contact = accessory.get_service(SERVICE_CONTACT)
        hidden = as_bool(self._config.get(CONF_HIDE_WINDOW_SENSORS))
        if window_detection_active(self._api_zone, hidden):
            if contact is None:
                contact = accessory.get_or_create(SERVICE_CONTACT)
        elif contact is not None:
            accessory.remove(contact)
            contact = None
        self.contact_service = contact

    @property
    def _host(self) -> ZoneAccessory:
        if self.accessory is None:
            raise RuntimeError(f"zone {self.id} accessory is not set up")
        return self.accessory

    @property
    def thermostat(self) -> ZoneService:
        if self.thermostat_service is None:
            raise RuntimeError(f"zone {self.id} thermostat is not set up")
        return self.thermostat_service

    @property
    def humidity(self) -> ZoneService:
        if self.humidity_service is None:
            raise RuntimeError(f"zone {self.id} humidity sensor is not set up")
        return self.humidity_service

    @property
    def contact(self) -> ZoneService:
        if self.contact_service is None:
            raise RuntimeError(f"zone {self.id} has no window contact")
        return self.contact_service

    def update_zone(self, api_zone: dict[str, Any]) -> None:
        """Apply zone-list data (devices and their battery state)."""
        self._api_zone = api_zone
        self.thermostat.update_characteristic(
            CHAR_STATUS_LOW_BATTERY, has_low_battery(api_zone.get("devices"))
        )

    async def async_refresh(self) -> RemoteZoneState | None:
        """Fetch the remote zone state and push it onto the characteristics."""
        async with self._lock:
            try:
                data = await self._client.get_zone_state(self._home_id, self.id)
            except TadoApiError as err:
                _LOGGER.warning("%s - Error getting state from API: %s", self.id, err)
                return None

            state = RemoteZoneState.from_api(data)
            mode = to_local_mode(state, self._use_alternative_logic)
            thermostat = self.thermostat
            thermostat.update_characteristic(CHAR_CURRENT_HEATING_STATE, mode.current)
            thermostat.update_characteristic(CHAR_TARGET_HEATING_STATE, mode.target)
            if state.inside_temperature is not None:
                thermostat.update_characteristic(
                    CHAR_CURRENT_TEMPERATURE, state.inside_temperature
                )
            if state.target_temperature is not None:
                thermostat.update_characteristic(
                    CHAR_TARGET_TEMPERATURE, state.target_temperature
                )
            if state.humidity is not None and self.humidity_service is not None:
                self.humidity_service.update_characteristic(
                    CHAR_CURRENT_HUMIDITY, state.humidity
                )
            if self.contact_service is not None:
                self.contact_service.update_characteristic(
                    CHAR_CONTACT_STATE, state.open_window
                )

            self.last_state = state
            _LOGGER.debug("%s - Updated state: %s", self.id, data)
            self.hass.bus.async_fire(
                EVENT_ZONE_STATE_UPDATED,
                {
                    "zone_id": self.id,
                    "current_mode": mode.current,
                    "target_mode": mode.target,
                    "overlay_type": state.overlay_type,
                    "current_temperature": state.inside_temperature,
                    "target_temperature": state.target_temperature,
                    "humidity": state.humidity,
                    "open_window": state.open_window,
                },
            )
            return state

    @callback
    def _async_handle_periodic(self, _: datetime) -> None:
        self.hass.async_create_task(self.async_refresh())

    async def _async_handle_target_state(self, value: int) -> None:
        command = to_remote_command(value)

        if command.clear_overlay:
            if self._temperature_timer.cancel():
                _LOGGER.debug(
                    "%s - Switch target state to AUTO: setting target temperature cancelled",
                    self.id,
                )
            _LOGGER.debug("%s - Switch target state to AUTO", self.id)
            await self._async_call_remote(
                self._client.clear_zone_overlay(self._home_id, self.id),
                "switch target state to AUTO",
            )
            return

        label = "HEATING" if command.power == "on" else "OFF"
        _LOGGER.debug("%s - Switch target state to %s", self.id, label)
        await self._async_call_remote(
            self._client.set_zone_overlay(
                self._home_id,
                self.id,
                command.power,
                self.thermostat.value(CHAR_TARGET_TEMPERATURE),
                self._termination,
            ),
            f"switch target state to {label}",
        )

    async def _async_handle_target_temperature(self, value: float) -> None:
        _LOGGER.debug("%s - Set target temperature to %s with delay", self.id, value)
        self._temperature_timer.schedule(value)

    async def _async_apply_target_temperature(self, value: float) -> None:
        _LOGGER.debug("%s - Set target temperature to %s", self.id, value)
        await self._async_call_remote(
            self._client.set_zone_overlay(
                self._home_id, self.id, "on", value, self._termination
            ),
            f"set target temperature to {value}",
        )

    async def async_check_sensor_state(self, switch: ZoneService, value: Any) -> None:
        """Record a door/window sensor and force the zone OFF while any is open."""
        switch.is_open = bool(value)
        open_count = sum(1 for sensor in self.sensors if sensor.is_open)
        _LOGGER.debug("%s - Open door or window detected? = %s", self.id, open_count)
        await self.thermostat.get_characteristic(
            CHAR_TARGET_HEATING_STATE
        ).async_set_value(target_mode_for_open_sensors(open_count))

    async def _async_call_remote(self, call: Awaitable[None], action: str) -> bool:
        try:
            await call
        except TadoApiError as err:
            _LOGGER.warning("%s - Failed to %s: %s", self.id, action, err)
            return False
        await self.async_refresh()
        return True
