"""
Configuration loader for the orchestration system.

The configuration is stored in a YAML file. This module loads that
file into a Python dictionary and builds the runtime objects it
describes: the model registry, the agents, the classifier and the
orchestrator. Sensitive values like API keys are not stored in the
YAML file; instead, they are retrieved from environment variables as
needed by the providers.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from orchestra.agents import AGENT_TYPES, LLMAgent, WeatherAgent
from orchestra.core.agent import Agent, AgentCallbacks, AgentConfigError, AgentOptions
from orchestra.core.classifier import LLMClassifier
from orchestra.core.orchestrator import Orchestrator
from orchestra.core.prompts import PromptManager
from orchestra.core.router import ModelRouter
from orchestra.core.storage import InMemoryChatStorage
from orchestra.models import PROVIDER_CLASSES
from orchestra.models.base import ModelRegistry

logger = logging.getLogger(__name__)


def load_app_config(path: str) -> Dict[str, Any]:
    """
    Load the application configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A dictionary representing the configuration.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the top-level configuration is not a mapping.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("Top-level configuration must be a mapping/dictionary.")

    return data


def build_model_registry(cfg: Dict[str, Any]) -> ModelRegistry:
    """
    Build and register all enabled model providers and their models.

    Each provider entry names its class by key (`openai`, `perplexity`,
    `anthropic`) or through an explicit `type:` field.
    """
    registry = ModelRegistry()
    for provider_name, provider_cfg in (cfg.get("providers") or {}).items():
        if not provider_cfg.get("enabled", False):
            continue
        provider_type = provider_cfg.get("type", provider_name)
        provider_cls = PROVIDER_CLASSES.get(provider_type)
        if provider_cls is None:
            raise ValueError(f"Unknown provider type '{provider_type}' for '{provider_name}'.")
        registry.register_provider(provider_cls.from_config(provider_name, provider_cfg))
        logger.debug("Registered provider %s (%s)", provider_name, provider_type)
    return registry


def build_agent(
    agent_cfg: Dict[str, Any],
    router: ModelRouter,
    prompts: PromptManager,
    callbacks: Optional[AgentCallbacks] = None,
) -> Agent:
    """Build one agent from an entry of the `agents:` list."""
    agent_type = agent_cfg.get("type", "llm")
    if agent_type not in AGENT_TYPES:
        raise AgentConfigError(f"Unknown agent type '{agent_type}'.")

    options = AgentOptions(
        name=agent_cfg.get("name", ""),
        description=agent_cfg.get("description", ""),
        model_id=agent_cfg.get("model_id"),
        region=agent_cfg.get("region"),
        save_chat=bool(agent_cfg.get("save_chat", True)),
        callbacks=callbacks,
    )

    if agent_type == "weather":
        return WeatherAgent(
            options,
            default_location=agent_cfg.get("default_location", "London"),
            default_units=agent_cfg.get("default_units", "metric"),
        )

    return LLMAgent(
        options,
        router=router,
        prompts=prompts,
        streaming=bool(agent_cfg.get("streaming", False)),
        system_prompt=agent_cfg.get("system_prompt"),
        temperature=float(agent_cfg.get("temperature", 0.7)),
        max_tokens=int(agent_cfg.get("max_tokens", 1024)),
    )


def build_agents(
    cfg: Dict[str, Any],
    router: ModelRouter,
    prompts: PromptManager,
    callbacks: Optional[AgentCallbacks] = None,
) -> List[Agent]:
    return [
        build_agent(agent_cfg, router, prompts, callbacks)
        for agent_cfg in cfg.get("agents") or []
    ]


def build_orchestrator(
    cfg: Dict[str, Any], callbacks: Optional[AgentCallbacks] = None
) -> Orchestrator:
    """
    Build the orchestrator with its classifier, storage and agents.

    The `orchestrator:` section accepts `classifier_model_id` (required),
    `default_agent` (an agent id) and `max_message_pairs_per_agent`.
    """
    orch_cfg = cfg.get("orchestrator") or {}
    router = ModelRouter(build_model_registry(cfg))
    prompts = PromptManager(cfg.get("prompts") or {})

    classifier_model_id = orch_cfg.get("classifier_model_id")
    if not classifier_model_id:
        raise ValueError("orchestrator.classifier_model_id must be set.")
    classifier = LLMClassifier(router=router, model_id=classifier_model_id, prompts=prompts)

    orchestrator = Orchestrator(
        classifier=classifier,
        storage=InMemoryChatStorage(),
        max_message_pairs_per_agent=int(orch_cfg.get("max_message_pairs_per_agent", 100)),
    )
    for agent in build_agents(cfg, router, prompts, callbacks):
        orchestrator.add_agent(agent)

    default_id = orch_cfg.get("default_agent")
    if default_id:
        default_agent = orchestrator.get_agent(default_id)
        if default_agent is None:
            raise ValueError(f"Default agent '{default_id}' is not configured.")
        orchestrator.set_default_agent(default_agent)

    return orchestrator
