"""Pure computation engine for Tado Zones."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from .const import (
    BATTERY_STATE_NORMAL,
    DUTY_ZONE_LEADER,
    MODE_AUTO,
    MODE_HEAT,
    MODE_OFF,
    SENSOR_SUBTYPE_PREFIX,
    TERMINATION_AUTO,
    TERMINATION_MANUAL,
)

POWER_ON = "ON"

TerminationDirective = int | str


def as_float(value: Any, default: float | None = None) -> float | None:
    """Convert a value to float or return default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str) and value.strip() == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_int(value: Any, default: int = 0) -> int:
    """Convert a value to int or return default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str) and value.strip() == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def as_bool(value: Any, default: bool = False) -> bool:
    """Convert a config value to bool or return default."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value)


def parse_minutes(value: Any) -> int | None:
    """Return value as whole minutes, or None when it is not an integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _nested(data: Mapping[str, Any] | None, *path: str) -> Any:
    value: Any = data
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value


# Sensor switch reconciliation


class NamedSubtype(Protocol):
    name: str
    subtype: str | None


SwitchT = TypeVar("SwitchT", bound=NamedSubtype)


@dataclass(frozen=True, slots=True)
class SensorConfigEntry:
    name: str
    position: int

    @property
    def subtype(self) -> str:
        return f"{SENSOR_SUBTYPE_PREFIX}{self.position}"


@dataclass(slots=True)
class SensorReconciliation(Generic[SwitchT]):
    to_keep: list[tuple[SensorConfigEntry, SwitchT]]
    to_create: list[SensorConfigEntry]
    to_remove: list[SwitchT]


def sensor_entries(sensors: Sequence[Mapping[str, Any]] | None) -> list[SensorConfigEntry]:
    """Build ordered sensor entries from configuration, defaulting blank names."""
    entries: list[SensorConfigEntry] = []
    for position, sensor in enumerate(sensors or []):
        name = str((sensor or {}).get("name") or "").strip()
        entries.append(
            SensorConfigEntry(name=name or f"Switch #{position + 1}", position=position)
        )
    return entries


def reconcile_sensors(
    configured: Sequence[SensorConfigEntry],
    existing: Iterable[SwitchT],
) -> SensorReconciliation[SwitchT]:
    """Match configured sensors against materialized switches.

    A switch is claimed by exact name first and by positional subtype second,
    so a switch renamed in configuration keeps its identity. Switches left
    unclaimed are returned for removal.
    """
    pool = list(existing)
    to_keep: list[tuple[SensorConfigEntry, SwitchT]] = []
    to_create: list[SensorConfigEntry] = []

    for entry in configured:
        index = next(
            (i for i, switch in enumerate(pool) if switch.name == entry.name), None
        )
        if index is None:
            index = next(
                (i for i, switch in enumerate(pool) if switch.subtype == entry.subtype),
                None,
            )
        if index is None:
            to_create.append(entry)
        else:
            to_keep.append((entry, pool.pop(index)))

    return SensorReconciliation(to_keep=to_keep, to_create=to_create, to_remove=pool)


def target_mode_for_open_sensors(open_count: int) -> int:
    """Any open door/window sensor forces the zone off; none returns it to AUTO."""
    return MODE_AUTO if open_count == 0 else MODE_OFF


# Termination policy


def resolve_termination(
    option: Any, switch_to_auto_default: bool
) -> TerminationDirective:
    """Resolve a zone's termination option into an overlay termination."""
    if _is_blank(option):
        return TERMINATION_AUTO if switch_to_auto_default else TERMINATION_MANUAL

    minutes = parse_minutes(option)
    if minutes is not None:
        if minutes <= 0:
            raise ValueError(f"termination minutes must be positive, got {option!r}")
        return minutes * 60

    return option


# Overlay translation


@dataclass(frozen=True, slots=True)
class RemoteZoneState:
    power: str | None
    overlay_type: str | None
    target_temperature: float | None
    inside_temperature: float | None
    humidity: float | None
    heating_power: float | None
    open_window: bool

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> RemoteZoneState:
        return cls(
            power=_nested(data, "setting", "power"),
            overlay_type=data.get("overlayType") or None,
            target_temperature=as_float(
                _nested(data, "setting", "temperature", "celsius")
            ),
            inside_temperature=as_float(
                _nested(data, "sensorDataPoints", "insideTemperature", "celsius")
            ),
            humidity=as_float(
                _nested(data, "sensorDataPoints", "humidity", "percentage")
            ),
            heating_power=as_float(
                _nested(data, "activityDataPoints", "heatingPower", "percentage")
            ),
            open_window=bool(data.get("openWindow")) or bool(
                data.get("openWindowDetected")
            ),
        )

    @property
    def is_on(self) -> bool:
        return self.power == POWER_ON


@dataclass(frozen=True, slots=True)
class LocalMode:
    current: int
    target: int


@dataclass(frozen=True, slots=True)
class RemoteCommand:
    power: str | None
    clear_overlay: bool


def to_local_mode(state: RemoteZoneState, use_alternative_logic: bool) -> LocalMode:
    """Map a remote zone state onto the local current/target heating mode."""
    heating = state.is_on and (state.heating_power or 0.0) > 0
    current = MODE_HEAT if heating else MODE_OFF

    if use_alternative_logic:
        if not state.is_on:
            target = MODE_OFF
        else:
            target = MODE_AUTO if not state.overlay_type else MODE_HEAT
    elif not state.overlay_type:
        target = MODE_AUTO
    else:
        target = MODE_HEAT if state.is_on else MODE_OFF

    return LocalMode(current=current, target=target)


def to_remote_command(target_mode: int) -> RemoteCommand:
    """Map a local target mode onto the overlay command to send."""
    if target_mode == MODE_AUTO:
        return RemoteCommand(power=None, clear_overlay=True)
    if target_mode == MODE_HEAT:
        return RemoteCommand(power="on", clear_overlay=False)
    if target_mode == MODE_OFF:
        return RemoteCommand(power="off", clear_overlay=False)
    raise ValueError(f"unsupported target mode: {target_mode!r}")


# Zone metadata


def find_zone_leader(devices: Sequence[Mapping[str, Any]] | None) -> Mapping[str, Any] | None:
    """Return the zone leader device, falling back to the first device."""
    if not devices:
        return None
    for device in devices:
        if DUTY_ZONE_LEADER in (device.get("duties") or []):
            return device
    return devices[0]


def has_low_battery(devices: Sequence[Mapping[str, Any]] | None) -> bool:
    """Return True when any battery-powered device reports a non-normal state."""
    return any(
        device.get("batteryState") not in (None, BATTERY_STATE_NORMAL)
        for device in devices or []
    )


def window_detection_active(api_zone: Mapping[str, Any], hidden: bool) -> bool:
    """Return True when the zone should expose a window contact sensor."""
    detection = api_zone.get("openWindowDetection") or {}
    return bool(detection.get("supported")) and bool(detection.get("enabled")) and not hidden
