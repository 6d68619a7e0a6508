"""Thin async client for the Tado v2 REST API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from .const import (
    API_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
    TERMINATION_AUTO,
    TERMINATION_MANUAL,
    TERMINATION_NEXT_TIME_BLOCK,
    ZONE_TYPE_HEATING,
)
from .engine import TerminationDirective

_LOGGER = logging.getLogger(__name__)

_TERMINATION_TYPES: dict[str, str] = {
    TERMINATION_MANUAL: "MANUAL",
    TERMINATION_AUTO: "TADO_MODE",
    TERMINATION_NEXT_TIME_BLOCK: "NEXT_TIME_BLOCK",
}


class TadoApiError(Exception):
    """Base exception for Tado API errors."""


class TadoAuthError(TadoApiError):
    """Authentication error."""


class TadoConnectionError(TadoApiError):
    """Connection error."""


def build_termination(termination: TerminationDirective) -> dict[str, Any]:
    """Translate a termination directive into the overlay termination payload."""
    if isinstance(termination, str):
        literal = termination.strip()
        known = _TERMINATION_TYPES.get(literal.lower())
        return {"typeSkillBasedApp": known or literal.upper()}
    return {"typeSkillBasedApp": "TIMER", "durationInSeconds": int(termination)}


def build_overlay(
    power: str, temperature: float | None, termination: TerminationDirective
) -> dict[str, Any]:
    """Build the PUT body of a heating overlay."""
    setting: dict[str, Any] = {"type": ZONE_TYPE_HEATING, "power": power.upper()}
    if power.lower() == "on" and temperature is not None:
        setting["temperature"] = {"celsius": temperature}
    return {"setting": setting, "termination": build_termination(termination)}


class TadoClient:
    """Async API client for one Tado account."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        access_token: str,
        base_url: str = API_BASE_URL,
    ) -> None:
        self._session = session
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")

    async def get_zones(self, home_id: Any) -> list[dict[str, Any]]:
        """Get all zones, with their devices, for the home."""
        result = await self._request("GET", f"homes/{home_id}/zones")
        return result if isinstance(result, list) else []

    async def get_zone_state(self, home_id: Any, zone_id: Any) -> dict[str, Any]:
        """Get the current state of a single zone (raw JSON)."""
        return await self._request("GET", f"homes/{home_id}/zones/{zone_id}/state")

    async def set_zone_overlay(
        self,
        home_id: Any,
        zone_id: Any,
        power: str,
        temperature: float | None,
        termination: TerminationDirective,
    ) -> None:
        """Set a manual overlay on the zone."""
        await self._request(
            "PUT",
            f"homes/{home_id}/zones/{zone_id}/overlay",
            json_data=build_overlay(power, temperature, termination),
        )

    async def clear_zone_overlay(self, home_id: Any, zone_id: Any) -> None:
        """Delete the zone overlay so the schedule resumes."""
        await self._request("DELETE", f"homes/{home_id}/zones/{zone_id}/overlay")

    async def _request(
        self,
        method: str,
        path: str,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}/{path}"
        headers = {"Authorization": f"Bearer {self._access_token}"}
        _LOGGER.debug("%s %s %s", method, url, json_data or "")

        try:
            async with self._session.request(
                method,
                url,
                headers=headers,
                json=json_data,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS),
            ) as resp:
                if resp.status == 401:
                    raise TadoAuthError("Access token rejected")
                if resp.status == 204:
                    return {}
                if resp.status >= 400:
                    text = await resp.text()
                    raise TadoApiError(f"API request failed ({resp.status}): {text}")
                try:
                    return await resp.json()
                except ValueError as err:
                    raise TadoApiError(f"Invalid response: {err}") from err
        except (aiohttp.ClientError, TimeoutError) as err:
            raise TadoConnectionError(f"Connection error: {err}") from err
