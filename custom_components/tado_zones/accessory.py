"""Accessory, sub-service and characteristic model for Tado Zones."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers import storage

from .const import DOMAIN, STORAGE_KEY_PREFIX, STORAGE_VERSION

_LOGGER = logging.getLogger(__name__)

WriteHandler = Callable[[Any], Awaitable[None]]
Listener = Callable[[], None]

_ACCESSORY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, f"https://{DOMAIN}.invalid")


def stable_accessory_id(zone_id: Any, kind: str) -> str:
    """Derive the accessory id so re-runs recognize accessories they created."""
    return str(uuid.uuid5(_ACCESSORY_NAMESPACE, f"{zone_id}{kind}"))


def _unsubscribe(items: list[Any], item: Any) -> Callable[[], None]:
    def _inner() -> None:
        if item in items:
            items.remove(item)

    return _inner


class Characteristic:
    """A single exposed value with constraints, write handlers and listeners.

    ``update_value`` records a value that came from the remote side and only
    notifies listeners. ``async_set_value`` is a local write: it is validated
    and then dispatched to every write handler.
    """

    def __init__(self, name: str, value: Any = None) -> None:
        self.name = name
        self.value = value
        self.minimum: float | None = None
        self.maximum: float | None = None
        self.step: float | None = None
        self.valid_values: tuple[Any, ...] | None = None
        self._write_handlers: list[WriteHandler] = []
        self._listeners: list[Listener] = []

    def set_props(
        self,
        *,
        minimum: float | None = None,
        maximum: float | None = None,
        step: float | None = None,
        valid_values: Iterable[Any] | None = None,
    ) -> Characteristic:
        self.minimum = minimum
        self.maximum = maximum
        self.step = step
        self.valid_values = tuple(valid_values) if valid_values is not None else None
        return self

    def validate(self, value: Any) -> None:
        if self.valid_values is not None and value not in self.valid_values:
            raise ValueError(
                f"{self.name}: {value!r} not in valid values {self.valid_values}"
            )
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if self.minimum is not None and value < self.minimum:
                raise ValueError(f"{self.name}: {value!r} below minimum {self.minimum}")
            if self.maximum is not None and value > self.maximum:
                raise ValueError(f"{self.name}: {value!r} above maximum {self.maximum}")

    def update_value(self, value: Any) -> None:
        if value == self.value:
            return
        self.value = value
        self._notify()

    async def async_set_value(self, value: Any) -> None:
        self.validate(value)
        self.value = value
        self._notify()
        for handler in list(self._write_handlers):
            await handler(value)

    def on_write(self, handler: WriteHandler) -> Callable[[], None]:
        self._write_handlers.append(handler)
        return _unsubscribe(self._write_handlers, handler)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return _unsubscribe(self._listeners, listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


class ZoneService:
    """A sub-service of an accessory, identified by kind and optional subtype."""

    def __init__(self, kind: str, subtype: str | None = None, name: str | None = None) -> None:
        self.kind = kind
        self.subtype = subtype
        self.name = name or ""
        self.is_open = False
        self.primary = False
        self._characteristics: dict[str, Characteristic] = {}

    def get_characteristic(self, name: str) -> Characteristic:
        characteristic = self._characteristics.get(name)
        if characteristic is None:
            characteristic = Characteristic(name)
            self._characteristics[name] = characteristic
        return characteristic

    def update_characteristic(self, name: str, value: Any) -> None:
        self.get_characteristic(name).update_value(value)

    def value(self, name: str) -> Any:
        characteristic = self._characteristics.get(name)
        return None if characteristic is None else characteristic.value

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "subtype": self.subtype, "name": self.name}

    def __repr__(self) -> str:
        return f"ZoneService(kind={self.kind!r}, subtype={self.subtype!r}, name={self.name!r})"


class ZoneAccessory:
    """One materialized accessory and the sub-services it hosts."""

    def __init__(
        self,
        name: str,
        stable_id: str,
        zone_id: Any,
        kind: str,
        services: Iterable[ZoneService] | None = None,
    ) -> None:
        self.name = name
        self.stable_id = stable_id
        self.zone_id = zone_id
        self.kind = kind
        self._services: list[ZoneService] = list(services or [])

    def get_service(self, kind: str, subtype: str | None = None) -> ZoneService | None:
        for service in self._services:
            if service.kind == kind and service.subtype == subtype:
                return service
        return None

    def get_or_create(
        self, kind: str, subtype: str | None = None, name: str | None = None
    ) -> ZoneService:
        service = self.get_service(kind, subtype)
        if service is None:
            service = ZoneService(kind, subtype, name or self.name)
            self._services.append(service)
        return service

    def add_service(self, service: ZoneService) -> ZoneService:
        if service not in self._services:
            self._services.append(service)
        return service

    def remove(self, service: ZoneService) -> None:
        if service in self._services:
            self._services.remove(service)

    def services(self, kind: str | None = None) -> list[ZoneService]:
        if kind is None:
            return list(self._services)
        return [service for service in self._services if service.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "stable_id": self.stable_id,
            "zone_id": self.zone_id,
            "kind": self.kind,
            "services": [service.to_dict() for service in self._services],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ZoneAccessory:
        services = [
            ZoneService(item.get("kind", ""), item.get("subtype"), item.get("name"))
            for item in data.get("services", [])
            if isinstance(item, dict)
        ]
        return cls(
            name=str(data.get("name", "")),
            stable_id=str(data["stable_id"]),
            zone_id=data.get("zone_id"),
            kind=str(data.get("kind", "")),
            services=services,
        )


class AccessoryStore:
    """Registry of materialized accessories, persisted across restarts."""

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        self._store: storage.Store[dict[str, Any]] = storage.Store(
            hass,
            STORAGE_VERSION,
            f"{STORAGE_KEY_PREFIX}.{entry_id}",
        )
        self._accessories: dict[str, ZoneAccessory] = {}

    async def async_load(self) -> None:
        data = await self._store.async_load()
        self._accessories = {}
        if not isinstance(data, dict):
            return
        for item in data.get("accessories", []):
            if not isinstance(item, dict) or "stable_id" not in item:
                continue
            accessory = ZoneAccessory.from_dict(item)
            self._accessories[accessory.stable_id] = accessory

    async def async_save(self) -> None:
        await self._store.async_save(
            {"accessories": [item.to_dict() for item in self._accessories.values()]}
        )

    @property
    def accessories(self) -> list[ZoneAccessory]:
        return list(self._accessories.values())

    def accessories_for_zone(self, zone_id: Any) -> list[ZoneAccessory]:
        return [item for item in self._accessories.values() if item.zone_id == zone_id]

    def find_existing(self, zone_id: Any, kind: str) -> ZoneAccessory | None:
        return next(
            (
                item
                for item in self._accessories.values()
                if item.zone_id == zone_id and item.kind == kind
            ),
            None,
        )

    def create(self, name: str, zone_id: Any, kind: str) -> ZoneAccessory:
        return ZoneAccessory(name, stable_accessory_id(zone_id, kind), zone_id, kind)

    def register(self, accessories: Iterable[ZoneAccessory]) -> None:
        for accessory in accessories:
            self._accessories[accessory.stable_id] = accessory

    def unregister(self, accessories: Iterable[ZoneAccessory]) -> None:
        for accessory in accessories:
            _LOGGER.info(
                "Removing unused accessory with zone ID %s and kind %s",
                accessory.zone_id,
                accessory.kind,
            )
            self._accessories.pop(accessory.stable_id, None)
