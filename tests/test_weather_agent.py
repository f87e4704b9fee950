"""
Tests for WeatherAgent with the Open-Meteo HTTP calls faked out.
"""

from unittest.mock import MagicMock

import pytest
import requests

from orchestra.agents import weather
from orchestra.agents.weather import WeatherAgent
from orchestra.core.agent import AgentError, AgentOptions
from orchestra.core.types import ParticipantRole

PLACES = {
    "New York": {"name": "New York", "latitude": 40.71, "longitude": -74.01},
    "London": {"name": "London", "latitude": 51.51, "longitude": -0.13},
}


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def http_calls(monkeypatch):
    """Fake Open-Meteo: geocoding knows PLACES, forecast echoes the units."""
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, dict(params or {})))
        if url == weather.GEOCODING_URL:
            place = PLACES.get(params["name"])
            return _response({"results": [place]} if place else {})
        imperial = params.get("temperature_unit") == "fahrenheit"
        return _response(
            {"current": {"temperature_2m": 70.1 if imperial else 21.2, "wind_speed_10m": 9.5}}
        )

    monkeypatch.setattr(weather.requests, "get", fake_get)
    return calls


@pytest.fixture
def weather_agent(callbacks):
    return WeatherAgent(
        AgentOptions(
            name="weather-agent",
            description="Answers weather queries",
            callbacks=callbacks,
        )
    )


@pytest.mark.asyncio
async def test_reports_requested_location(weather_agent, http_calls, callbacks):
    result = await weather_agent.process_request(
        "What's the weather?", "u1", "s1", [], {"location": "New York", "units": "metric"}
    )

    assert result.role == ParticipantRole.ASSISTANT
    assert "New York" in result.content
    assert "21.2°C" in result.content
    assert "km/h" in result.content
    assert callbacks.completed == [result]
    forecast_params = http_calls[1][1]
    assert forecast_params["latitude"] == 40.71
    assert forecast_params["temperature_unit"] == "celsius"


@pytest.mark.asyncio
async def test_defaults_when_params_omitted(weather_agent, http_calls):
    result = await weather_agent.process_request("What's the weather?", "u1", "s1", [])

    assert "London" in result.content
    assert "°C" in result.content
    assert http_calls[0][1]["name"] == weather.DEFAULT_LOCATION


@pytest.mark.asyncio
async def test_empty_params_use_defaults(weather_agent, http_calls):
    result = await weather_agent.process_request("weather?", "u1", "s1", [], {})

    assert "London" in result.content


@pytest.mark.asyncio
async def test_imperial_units(weather_agent, http_calls):
    result = await weather_agent.process_request(
        "weather?", "u1", "s1", [], {"location": "New York", "units": "Imperial"}
    )

    assert "70.1°F" in result.content
    assert "mph" in result.content


@pytest.mark.asyncio
async def test_unknown_units_rejected(weather_agent, http_calls, callbacks):
    with pytest.raises(AgentError):
        await weather_agent.process_request("weather?", "u1", "s1", [], {"units": "kelvin"})

    assert http_calls == []
    assert len(callbacks.errors) == 1
    assert callbacks.completed == []


@pytest.mark.asyncio
async def test_malformed_geocoding_result(weather_agent, monkeypatch, callbacks):
    def partial_get(url, params=None, timeout=None):
        return _response({"results": [{"name": "Nowhere", "longitude": 1.0}]})

    monkeypatch.setattr(weather.requests, "get", partial_get)

    with pytest.raises(AgentError, match="Malformed geocoding result"):
        await weather_agent.process_request("weather?", "u1", "s1", [], {"location": "Nowhere"})

    assert len(callbacks.errors) == 1


@pytest.mark.asyncio
async def test_invalid_json_reported(weather_agent, monkeypatch, callbacks):
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.side_effect = ValueError("Expecting value")
    monkeypatch.setattr(weather.requests, "get", lambda url, params=None, timeout=None: resp)

    with pytest.raises(AgentError, match="invalid JSON"):
        await weather_agent.process_request("weather?", "u1", "s1", [], {})

    assert len(callbacks.errors) == 1


@pytest.mark.asyncio
async def test_unknown_location(weather_agent, http_calls, callbacks):
    with pytest.raises(AgentError, match="Atlantis"):
        await weather_agent.process_request("weather?", "u1", "s1", [], {"location": "Atlantis"})

    assert len(callbacks.errors) == 1


@pytest.mark.asyncio
async def test_service_unavailable(weather_agent, monkeypatch):
    def failing_get(url, params=None, timeout=None):
        raise requests.ConnectionError("no route to host")

    monkeypatch.setattr(weather.requests, "get", failing_get)

    with pytest.raises(AgentError) as excinfo:
        await weather_agent.process_request("weather?", "u1", "s1", [], {})

    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@pytest.mark.asyncio
async def test_configured_defaults(http_calls):
    agent = WeatherAgent(
        AgentOptions(name="weather-agent", description="Answers weather queries"),
        default_location="New York",
        default_units="imperial",
    )

    result = await agent.process_request("weather?", "u1", "s1", [])

    assert "New York" in result.content
    assert "°F" in result.content
