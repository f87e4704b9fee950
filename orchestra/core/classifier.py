"""
Request classifiers.

A classifier picks the agent that should handle a request by matching
it against each agent's description. `LLMClassifier` delegates the
decision to a model and expects a small JSON answer back.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from orchestra.core.agent import Agent
from orchestra.core.prompts import PromptManager
from orchestra.core.router import ModelRouter
from orchestra.core.types import ConversationMessage
from orchestra.models.base import ProviderError

logger = logging.getLogger(__name__)


class ClassificationError(Exception):
    """Raised when the classifier backend fails."""


@dataclass
class ClassifierResult:
    selected_agent: Optional[Agent]
    confidence: float = 0.0


class Classifier(ABC):
    """
    Abstract classifier. The orchestrator calls `set_agents` whenever
    its registry changes.
    """

    def __init__(self) -> None:
        self.agents: Dict[str, Agent] = {}

    def set_agents(self, agents: Mapping[str, Agent]) -> None:
        self.agents = dict(agents)

    @abstractmethod
    async def classify(
        self, input_text: str, chat_history: List[ConversationMessage]
    ) -> ClassifierResult:
        """Select an agent for `input_text`, or return no agent."""


def strip_code_fences(raw: str) -> str:
    """Remove a Markdown code fence wrapped around a model reply."""
    text = raw.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()
    # Drop first line if it's ``` or ```json
    if lines and lines[0].lstrip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


class LLMClassifier(Classifier):
    """
    Classifier that asks a model to choose among the registered agents.

    The model sees every agent as an `id: description` line plus the
    recent conversation, and must answer with
    `{"selected_agent": "<id>", "confidence": <0..1>}`.
    """

    def __init__(
        self,
        router: ModelRouter,
        model_id: str,
        prompts: Optional[PromptManager] = None,
        max_history_messages: int = 10,
    ) -> None:
        super().__init__()
        self.router = router
        self.model_id = model_id
        self.prompts = prompts or PromptManager()
        self.max_history_messages = max_history_messages

    def _build_agent_descriptions(self) -> str:
        return "\n".join(
            f"- {agent_id}: {agent.description}" for agent_id, agent in self.agents.items()
        )

    def _build_messages(
        self, input_text: str, chat_history: List[ConversationMessage]
    ) -> List[Dict[str, Any]]:
        system_prompt = self.prompts.get_classifier_system_prompt(
            self._build_agent_descriptions()
        )
        recent = chat_history[-self.max_history_messages:] if self.max_history_messages else []
        history_text = "\n".join(f"{m.role.value}: {m.content}" for m in recent)
        user_content = input_text
        if history_text:
            user_content = (
                f"Conversation so far:\n{history_text}\n\nNew request:\n{input_text}"
            )
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]

    def parse_response(self, raw: str) -> ClassifierResult:
        """Turn the model's reply into a `ClassifierResult`."""
        try:
            parsed = json.loads(strip_code_fences(raw))
        except json.JSONDecodeError:
            logger.warning("Classifier returned non-JSON: %s", raw[:200])
            return ClassifierResult(selected_agent=None, confidence=0.0)

        if not isinstance(parsed, dict):
            return ClassifierResult(selected_agent=None, confidence=0.0)

        agent_id = parsed.get("selected_agent")
        agent = self.agents.get(str(agent_id)) if agent_id else None
        if agent is None:
            if agent_id:
                logger.warning("Classifier selected unknown agent '%s'", agent_id)
            return ClassifierResult(selected_agent=None, confidence=0.0)

        try:
            confidence = float(parsed.get("confidence", 0.0))
        except (TypeError, ValueError):
            confidence = 0.0
        return ClassifierResult(
            selected_agent=agent, confidence=min(max(confidence, 0.0), 1.0)
        )

    async def classify(
        self, input_text: str, chat_history: List[ConversationMessage]
    ) -> ClassifierResult:
        if not self.agents:
            return ClassifierResult(selected_agent=None, confidence=0.0)
        messages = self._build_messages(input_text, chat_history)
        try:
            response = await self.router.chat(
                model_id=self.model_id,
                messages=messages,
                max_tokens=100,
                temperature=0.0,
            )
        except ProviderError as exc:
            raise ClassificationError(f"Classifier model failed: {exc}") from exc
        return self.parse_response(response.text)
