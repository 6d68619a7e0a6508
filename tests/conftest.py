from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

import pytest
from homeassistant.helpers import event as event_helper
from homeassistant.helpers import storage

from custom_components.tado_zones.client import TadoApiError


@dataclass
class FakeServiceCall:
    data: dict[str, Any]


class FakeServices:
    def __init__(self) -> None:
        self._handlers: dict[tuple[str, str], Any] = {}
        self.register_calls: list[tuple[str, str]] = []
        self.remove_calls: list[tuple[str, str]] = []
        self.available: set[tuple[str, str]] = set()

    def has_service(self, domain: str, service: str) -> bool:
        return (domain, service) in self.available

    def async_register(
        self,
        domain: str,
        service: str,
        handler: Any,
        *,
        schema: Any = None,
    ) -> None:
        self._handlers[(domain, service)] = handler
        self.available.add((domain, service))
        self.register_calls.append((domain, service))

    def async_remove(self, domain: str, service: str) -> None:
        self._handlers.pop((domain, service), None)
        self.available.discard((domain, service))
        self.remove_calls.append((domain, service))

    async def async_call(self, domain: str, service: str, payload: dict[str, Any]) -> None:
        await self._handlers[(domain, service)](FakeServiceCall(data=dict(payload)))


class FakeBus:
    def __init__(self) -> None:
        self.fired: list[dict[str, Any]] = []

    def async_fire(
        self, event_type: str, event_data: dict[str, Any] | None = None
    ) -> None:
        self.fired.append({"event_type": event_type, "event_data": event_data or {}})


class FakeConfigEntriesManager:
    def __init__(self) -> None:
        self.forward_calls: list[tuple[str, tuple[str, ...]]] = []
        self.unload_calls: list[tuple[str, tuple[str, ...]]] = []

    async def async_forward_entry_setups(
        self, entry: Any, platforms: list[str]
    ) -> None:
        self.forward_calls.append((entry.entry_id, tuple(platforms)))

    async def async_unload_platforms(self, entry: Any, platforms: list[str]) -> bool:
        self.unload_calls.append((entry.entry_id, tuple(platforms)))
        return True


class FakeHass:
    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.services = FakeServices()
        self.bus = FakeBus()
        self.config_entries = FakeConfigEntriesManager()
        self.created_tasks: list[asyncio.Task[Any]] = []

    def async_create_task(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self.created_tasks.append(task)
        return task

    async def async_drain(self) -> None:
        while self.created_tasks:
            await self.created_tasks.pop(0)


class FakeConfigEntry:
    def __init__(
        self,
        entry_id: str,
        *,
        data: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> None:
        self.entry_id = entry_id
        self.data = {} if data is None else dict(data)
        self.options = {} if options is None else dict(options)
        self.listener_unsubscribed = False

    def add_update_listener(self, listener: Any) -> Any:
        self.listener = listener

        def _unsub() -> None:
            self.listener_unsubscribed = True

        return _unsub


class FakeStore:
    """Stands in for storage.Store, keeping saved data in a shared dict."""

    saved: dict[str, Any] = {}

    def __init__(self, hass: Any, version: int, key: str) -> None:
        self.hass = hass
        self.version = version
        self.key = key

    async def async_load(self) -> Any:
        return copy.deepcopy(FakeStore.saved.get(self.key))

    async def async_save(self, data: Any) -> None:
        FakeStore.saved[self.key] = copy.deepcopy(data)


class FakeTimers:
    def __init__(self) -> None:
        self.later_calls: list[dict[str, Any]] = []
        self.interval_trackers: list[dict[str, Any]] = []

    def async_call_later(self, hass: Any, delay: float, action: Any) -> Any:
        entry = {"delay": delay, "action": action, "active": True}
        self.later_calls.append(entry)

        def _unsub() -> None:
            entry["active"] = False

        return _unsub

    def async_track_time_interval(self, hass: Any, action: Any, interval: Any) -> Any:
        entry = {"interval": interval, "action": action, "active": True}
        self.interval_trackers.append(entry)

        def _unsub() -> None:
            entry["active"] = False

        return _unsub

    def active_later_calls(self) -> list[dict[str, Any]]:
        return [item for item in self.later_calls if item["active"]]

    def fire_later(self) -> None:
        pending = self.active_later_calls()
        assert len(pending) == 1
        pending[0]["action"](datetime.now(UTC))


def zone_state(
    *,
    power: str = "ON",
    overlay: str | None = None,
    target: float | None = 21.0,
    inside: float | None = 20.5,
    humidity: float | None = 45.0,
    heating_power: float | None = 0.0,
    open_window: bool = False,
) -> dict[str, Any]:
    setting: dict[str, Any] = {"type": "HEATING", "power": power}
    if target is not None:
        setting["temperature"] = {"celsius": target}
    data: dict[str, Any] = {
        "setting": setting,
        "overlayType": overlay,
        "sensorDataPoints": {},
        "activityDataPoints": {},
        "openWindowDetected": open_window,
    }
    if inside is not None:
        data["sensorDataPoints"]["insideTemperature"] = {"celsius": inside}
    if humidity is not None:
        data["sensorDataPoints"]["humidity"] = {"percentage": humidity}
    if heating_power is not None:
        data["activityDataPoints"]["heatingPower"] = {"percentage": heating_power}
    return data


def api_zone(
    zone_id: int = 1,
    *,
    name: str = "Living room",
    devices: list[dict[str, Any]] | None = None,
    window_supported: bool = True,
    window_enabled: bool = True,
    zone_type: str = "HEATING",
) -> dict[str, Any]:
    if devices is None:
        devices = [
            {
                "deviceType": "VA02",
                "serialNo": "VA1111",
                "currentFwVersion": "57.1",
                "batteryState": "NORMAL",
                "duties": ["ZONE_UI"],
            },
            {
                "deviceType": "RU02",
                "serialNo": "RU2222",
                "currentFwVersion": "67.2",
                "batteryState": "NORMAL",
                "duties": ["ZONE_LEADER", "ZONE_DRIVER"],
            },
        ]
    return {
        "id": zone_id,
        "name": name,
        "type": zone_type,
        "devices": devices,
        "openWindowDetection": {
            "supported": window_supported,
            "enabled": window_enabled,
            "timeoutInSeconds": 900,
        },
    }


class FakeTadoClient:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail: set[str] = set()
        self.states: dict[Any, dict[str, Any]] = {}
        self.zones: list[dict[str, Any]] = [api_zone()]

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise TadoApiError(f"{name} failed")

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    async def get_zones(self, home_id: Any) -> list[dict[str, Any]]:
        self._record("get_zones", home_id)
        return copy.deepcopy(self.zones)

    async def get_zone_state(self, home_id: Any, zone_id: Any) -> dict[str, Any]:
        self._record("get_zone_state", home_id, zone_id)
        return copy.deepcopy(self.states.get(zone_id) or zone_state())

    async def set_zone_overlay(
        self,
        home_id: Any,
        zone_id: Any,
        power: str,
        temperature: float | None,
        termination: Any,
    ) -> None:
        self._record("set_zone_overlay", home_id, zone_id, power, temperature, termination)

    async def clear_zone_overlay(self, home_id: Any, zone_id: Any) -> None:
        self._record("clear_zone_overlay", home_id, zone_id)


@pytest.fixture
def fake_hass() -> FakeHass:
    return FakeHass()


@pytest.fixture
def fake_client() -> FakeTadoClient:
    return FakeTadoClient()


@pytest.fixture
def fake_timers(monkeypatch: pytest.MonkeyPatch) -> FakeTimers:
    timers = FakeTimers()
    monkeypatch.setattr(event_helper, "async_call_later", timers.async_call_later)
    monkeypatch.setattr(
        event_helper, "async_track_time_interval", timers.async_track_time_interval
    )
    return timers


@pytest.fixture
def storage_data(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    saved: dict[str, Any] = {}
    monkeypatch.setattr(FakeStore, "saved", saved)
    monkeypatch.setattr(storage, "Store", FakeStore)
    return saved


@pytest.fixture
def build_config() -> Any:
    def _build(**overrides: Any) -> dict[str, Any]:
        config: dict[str, Any] = {
            "home_id": 12345,
            "access_token": "token",
            "state_update_interval": 60,
            "zone_update_interval": 300,
            "switch_to_auto_in_next_time_block": False,
            "alternative_state_logic": False,
            "hide_window_sensors": False,
            "zones": [],
        }
        config.update(overrides)
        return config

    return _build


@pytest.fixture
def tado_env(
    fake_hass: FakeHass,
    fake_client: FakeTadoClient,
    fake_timers: FakeTimers,
    storage_data: dict[str, Any],
    build_config: Any,
) -> SimpleNamespace:
    from custom_components.tado_zones.accessory import AccessoryStore
    from custom_components.tado_zones.zone import ZoneController

    store = AccessoryStore(fake_hass, "entry-1")

    async def build_controller(
        *,
        zone: dict[str, Any] | None = None,
        zone_config: dict[str, Any] | None = None,
        accessory_store: AccessoryStore | None = None,
        **config_overrides: Any,
    ) -> ZoneController:
        controller = ZoneController(
            fake_hass,
            home_id=12345,
            api_zone=zone or api_zone(),
            config=build_config(**config_overrides),
            zone_config=zone_config,
            client=fake_client,
            store=accessory_store or store,
        )
        await controller.async_setup()
        return controller

    return SimpleNamespace(
        hass=fake_hass,
        client=fake_client,
        timers=fake_timers,
        storage_data=storage_data,
        store=store,
        build_controller=build_controller,
        FakeConfigEntry=FakeConfigEntry,
        api_zone=api_zone,
        zone_state=zone_state,
    )
