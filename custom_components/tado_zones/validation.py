"""Validation helpers for Tado Zones configuration."""

from __future__ import annotations

from typing import Any

from .const import (
    CONF_STATE_UPDATE_INTERVAL,
    CONF_TERMINATION_OPTION,
    CONF_ZONE_ID,
    CONF_ZONE_UPDATE_INTERVAL,
    CONF_ZONES,
    TERMINATION_AUTO,
    TERMINATION_MANUAL,
    TERMINATION_NEXT_TIME_BLOCK,
)
from .engine import as_int, parse_minutes

_POSITIVE_INT_KEYS: tuple[str, ...] = (
    CONF_STATE_UPDATE_INTERVAL,
    CONF_ZONE_UPDATE_INTERVAL,
)

_KNOWN_TERMINATIONS: frozenset[str] = frozenset(
    {TERMINATION_MANUAL, TERMINATION_AUTO, TERMINATION_NEXT_TIME_BLOCK}
)


def validate_termination_option(value: Any) -> str | None:
    """Return an error key when a zone termination option is not usable."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    minutes = parse_minutes(value)
    if minutes is not None:
        return None if minutes > 0 else "invalid_termination"
    if isinstance(value, str) and value.strip().lower() in _KNOWN_TERMINATIONS:
        return None
    return "invalid_termination"


def validate_config_values(values: dict[str, Any]) -> str | None:
    """Return an error key when configuration values are invalid."""
    for key in _POSITIVE_INT_KEYS:
        if key in values and as_int(values.get(key), 0) <= 0:
            return "invalid_interval"

    seen: set[str] = set()
    for zone in values.get(CONF_ZONES) or []:
        if not isinstance(zone, dict):
            return "invalid_zone"
        zone_id = str(zone.get(CONF_ZONE_ID, "")).strip()
        if not zone_id:
            return "invalid_zone"
        if zone_id in seen:
            return "duplicate_zone"
        seen.add(zone_id)
        error = validate_termination_option(zone.get(CONF_TERMINATION_OPTION))
        if error:
            return error

    return None
