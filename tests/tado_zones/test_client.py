"""Tests for the Tado API client payloads and error mapping."""

from __future__ import annotations

import json
from typing import Any

import aiohttp
import pytest

from custom_components.tado_zones.client import (
    TadoApiError,
    TadoAuthError,
    TadoClient,
    TadoConnectionError,
    build_overlay,
    build_termination,
)


class _FakeResponse:
    def __init__(
        self,
        status: int,
        payload: Any = None,
        text: str = "",
        json_error: Exception | None = None,
    ) -> None:
        self.status = status
        self._payload = payload
        self._text = text
        self._json_error = json_error

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def json(self) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def text(self) -> str:
        return self._text


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.requests: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def test_termination_payloads() -> None:
    assert build_termination("manual") == {"typeSkillBasedApp": "MANUAL"}
    assert build_termination("auto") == {"typeSkillBasedApp": "TADO_MODE"}
    assert build_termination("next_time_block") == {"typeSkillBasedApp": "NEXT_TIME_BLOCK"}
    assert build_termination(1800) == {"typeSkillBasedApp": "TIMER", "durationInSeconds": 1800}
    assert build_termination(" Manual ") == {"typeSkillBasedApp": "MANUAL"}


def test_overlay_payload_includes_temperature_only_when_on() -> None:
    assert build_overlay("on", 21.5, "manual") == {
        "setting": {"type": "HEATING", "power": "ON", "temperature": {"celsius": 21.5}},
        "termination": {"typeSkillBasedApp": "MANUAL"},
    }
    assert build_overlay("off", 21.5, 600) == {
        "setting": {"type": "HEATING", "power": "OFF"},
        "termination": {"typeSkillBasedApp": "TIMER", "durationInSeconds": 600},
    }


@pytest.mark.asyncio
async def test_set_overlay_sends_put_with_bearer_token() -> None:
    session = _FakeSession(_FakeResponse(200, {"type": "MANUAL"}))
    client = TadoClient(session, "secret")  # type: ignore[arg-type]

    await client.set_zone_overlay(1, 5, "on", 20.0, "auto")

    request = session.requests[0]
    assert request["method"] == "PUT"
    assert request["url"] == "https://my.tado.com/api/v2/homes/1/zones/5/overlay"
    assert request["headers"] == {"Authorization": "Bearer secret"}
    assert request["json"]["termination"] == {"typeSkillBasedApp": "TADO_MODE"}


@pytest.mark.asyncio
async def test_clear_overlay_accepts_no_content() -> None:
    session = _FakeSession(_FakeResponse(204))
    client = TadoClient(session, "secret")  # type: ignore[arg-type]

    await client.clear_zone_overlay(1, 5)

    assert session.requests[0]["method"] == "DELETE"


@pytest.mark.asyncio
async def test_get_zones_returns_list() -> None:
    session = _FakeSession(_FakeResponse(200, [{"id": 1}, {"id": 2}]))
    client = TadoClient(session, "secret", base_url="https://example.invalid/api/")  # type: ignore[arg-type]

    assert await client.get_zones(7) == [{"id": 1}, {"id": 2}]
    assert session.requests[0]["url"] == "https://example.invalid/api/homes/7/zones"


@pytest.mark.asyncio
async def test_error_statuses_are_mapped() -> None:
    client = TadoClient(_FakeSession(_FakeResponse(401)), "bad")  # type: ignore[arg-type]
    with pytest.raises(TadoAuthError):
        await client.get_zone_state(1, 1)

    client = TadoClient(_FakeSession(_FakeResponse(500, text="boom")), "secret")  # type: ignore[arg-type]
    with pytest.raises(TadoApiError, match="500"):
        await client.get_zone_state(1, 1)


@pytest.mark.asyncio
async def test_connection_errors_are_wrapped() -> None:
    session = _FakeSession(error=aiohttp.ClientConnectionError("down"))
    client = TadoClient(session, "secret")  # type: ignore[arg-type]

    with pytest.raises(TadoConnectionError):
        await client.get_zone_state(1, 1)


@pytest.mark.asyncio
async def test_undecodable_body_is_an_api_error() -> None:
    response = _FakeResponse(
        200, json_error=json.JSONDecodeError("Expecting value", "<html>", 0)
    )
    client = TadoClient(_FakeSession(response), "secret")  # type: ignore[arg-type]

    with pytest.raises(TadoApiError, match="Invalid response"):
        await client.get_zone_state(1, 1)
