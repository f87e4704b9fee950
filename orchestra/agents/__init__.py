"""
Concrete agents.

`LLMAgent` answers through a chat model; `WeatherAgent` answers from a
public weather API. New agents subclass `orchestra.core.agent.Agent`
and are listed in `AGENT_TYPES` so the config loader can build them.
"""

from orchestra.agents.llm_agent import LLMAgent
from orchestra.agents.weather import WeatherAgent

AGENT_TYPES = {
    "llm": LLMAgent,
    "weather": WeatherAgent,
}

__all__ = [
    "llm_agent",
    "weather",
    "LLMAgent",
    "WeatherAgent",
    "AGENT_TYPES",
]
