"""
Prompt management.

This module provides a simple PromptManager class that reads prompt
configurations from the loaded YAML configuration and exposes them
to the agents and the classifier. It supplies default values if
prompts are not specified.
"""

from typing import Dict, Optional


DEFAULT_AGENT_SYSTEM = (
    "You are {name}. {description}\n"
    "Answer the user's request clearly and concisely, using the conversation "
    "so far as context. Do not claim to execute actions you cannot perform."
)

DEFAULT_CLASSIFIER_SYSTEM = (
    "You route user requests to the single best agent.\n\n"
    "Available agents (id: description):\n"
    "{agent_descriptions}\n\n"
    "Respond in JSON ONLY, with this form:\n"
    "{{\n"
    '  "selected_agent": "<agent id, or null if none fits>",\n'
    '  "confidence": <number between 0 and 1>\n'
    "}}\n\n"
    "Prefer the agent that already handled the recent conversation when the "
    "request is a follow-up. Never include any non-JSON text in your response."
)


class PromptManager:
    """
    Store and access system prompts used by agents and the classifier.

    Prompts can be configured in the YAML file under the `prompts` key.
    """

    def __init__(self, prompts_cfg: Optional[Dict] = None) -> None:
        self.prompts_cfg = prompts_cfg or {}

    def get_agent_system_prompt(self, name: str, description: str) -> str:
        """
        Retrieve the system prompt for a model-backed agent.

        The template may reference `{name}` and `{description}`.
        """
        template = self.prompts_cfg.get("agent_system", DEFAULT_AGENT_SYSTEM)
        return template.format(name=name, description=description)

    def get_classifier_system_prompt(self, agent_descriptions: str) -> str:
        """
        Retrieve the classifier system prompt with the agent list filled in.

        The template must reference `{agent_descriptions}`.
        """
        template = self.prompts_cfg.get("classifier_system", DEFAULT_CLASSIFIER_SYSTEM)
        return template.format(agent_descriptions=agent_descriptions)
