"""
Weather agent.

Answers weather questions from the Open-Meteo geocoding and forecast
APIs, which need no API key. The HTTP calls use `requests` and run in
a worker thread so the event loop stays free.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from orchestra.core.agent import Agent, AgentError, AgentOptions, AgentOutput
from orchestra.core.types import ConversationMessage, ParticipantRole

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

DEFAULT_LOCATION = "London"
DEFAULT_UNITS = "metric"

# units -> (temperature_unit, wind_speed_unit, temperature suffix, wind suffix)
UNIT_SYSTEMS = {
    "metric": ("celsius", "kmh", "°C", "km/h"),
    "imperial": ("fahrenheit", "mph", "°F", "mph"),
}


class WeatherAgent(Agent):
    """
    Reports current conditions for a location.

    `additional_params` understood per request:

    - `location`: place name, defaults to "London".
    - `units`: "metric" (default) or "imperial".
    """

    def __init__(
        self,
        options: AgentOptions,
        default_location: str = DEFAULT_LOCATION,
        default_units: str = DEFAULT_UNITS,
        timeout: int = 10,
    ) -> None:
        super().__init__(options)
        self.default_location = default_location
        self.default_units = default_units
        self.timeout = timeout

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise AgentError(self.id, f"Weather service unavailable: {exc}") from exc
        except ValueError as exc:
            raise AgentError(self.id, f"Weather service returned invalid JSON: {exc}") from exc

    def _geocode(self, location: str) -> Tuple[str, float, float]:
        data = self._get_json(GEOCODING_URL, {"name": location, "count": 1})
        results = data.get("results") or []
        if not results:
            raise AgentError(self.id, f"Unknown location '{location}'.")
        place = results[0]
        try:
            return place.get("name", location), float(place["latitude"]), float(place["longitude"])
        except (KeyError, TypeError, ValueError) as exc:
            raise AgentError(self.id, f"Malformed geocoding result for '{location}'.") from exc

    def fetch_report(self, location: str, units: str) -> str:
        """Blocking lookup; returns the text of the reply."""
        temperature_unit, wind_unit, temp_suffix, wind_suffix = UNIT_SYSTEMS[units]
        name, latitude, longitude = self._geocode(location)
        data = self._get_json(
            FORECAST_URL,
            {
                "latitude": latitude,
                "longitude": longitude,
                "current": "temperature_2m,wind_speed_10m",
                "temperature_unit": temperature_unit,
                "wind_speed_unit": wind_unit,
            },
        )
        current = data.get("current") or {}
        if "temperature_2m" not in current:
            raise AgentError(self.id, f"No current conditions returned for '{name}'.")
        report = f"Current weather in {name}: {current['temperature_2m']}{temp_suffix}"
        if current.get("wind_speed_10m") is not None:
            report += f", wind {current['wind_speed_10m']} {wind_suffix}"
        return report + "."

    async def process_request(
        self,
        input_text: str,
        user_id: str,
        session_id: str,
        chat_history: List[ConversationMessage],
        additional_params: Optional[Dict[str, Any]] = None,
    ) -> AgentOutput:
        params = additional_params or {}
        location = str(params.get("location") or self.default_location).strip()
        units = str(params.get("units") or self.default_units).strip().lower()
        try:
            if units not in UNIT_SYSTEMS:
                raise AgentError(
                    self.id,
                    f"Unsupported units '{units}', expected one of {sorted(UNIT_SYSTEMS)}.",
                )
            logger.debug("[%s] looking up weather for %s (%s)", self.id, location, units)
            report = await asyncio.to_thread(self.fetch_report, location, units)
        except AgentError as exc:
            await self.callbacks.on_error(exc)
            raise

        message = ConversationMessage(role=ParticipantRole.ASSISTANT, content=report)
        await self.callbacks.on_complete(message)
        return message
