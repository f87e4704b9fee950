"""
Request orchestration.

The orchestrator owns the agent registry. For each request it asks the
classifier for an agent, hands the request to that agent together with
the agent's own history for the session, and records the turn in chat
storage when the agent asks for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from orchestra.core.agent import Agent, AgentOutput
from orchestra.core.classifier import Classifier
from orchestra.core.storage import ChatStorage, InMemoryChatStorage
from orchestra.core.types import ConversationMessage, ParticipantRole

logger = logging.getLogger(__name__)


class RoutingError(Exception):
    """Base class for routing failures."""


class NoAgentSelectedError(RoutingError):
    """Raised when no agent matches a request and there is no default agent."""


@dataclass
class AgentProcessingResult:
    user_input: str
    agent_id: str
    agent_name: str
    user_id: str
    session_id: str
    additional_params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AgentResponse:
    """
    Result of `Orchestrator.route_request`.

    `output` is a `ConversationMessage`, or an async generator of text
    fragments when `streaming` is true.
    """

    metadata: AgentProcessingResult
    output: AgentOutput
    streaming: bool


class Orchestrator:
    """
    Routes requests to registered agents.

    Args:
        classifier: Picks an agent for each request.
        storage: Chat history store; in-memory when omitted.
        default_agent: Used when the classifier selects nothing.
        max_message_pairs_per_agent: History kept per agent and session,
            counted in user/agent message pairs.
    """

    def __init__(
        self,
        classifier: Classifier,
        storage: Optional[ChatStorage] = None,
        default_agent: Optional[Agent] = None,
        max_message_pairs_per_agent: int = 100,
    ) -> None:
        self.classifier = classifier
        self.storage = storage or InMemoryChatStorage()
        self.max_message_pairs_per_agent = max_message_pairs_per_agent
        self.agents: Dict[str, Agent] = {}
        self.default_agent: Optional[Agent] = None
        if default_agent is not None:
            self.set_default_agent(default_agent)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def add_agent(self, agent: Agent) -> None:
        if agent.id in self.agents:
            raise ValueError(f"An agent with id '{agent.id}' is already registered.")
        self.agents[agent.id] = agent
        self.classifier.set_agents(self.agents)
        logger.debug("Registered agent %s", agent.id)

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        return self.agents.get(agent_id)

    def get_all_agents(self) -> Dict[str, Dict[str, str]]:
        return {
            agent_id: {"name": agent.name, "description": agent.description}
            for agent_id, agent in self.agents.items()
        }

    def set_default_agent(self, agent: Agent) -> None:
        self.default_agent = agent

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    @property
    def _max_history_size(self) -> int:
        return self.max_message_pairs_per_agent * 2

    async def _select_agent(
        self, input_text: str, user_id: str, session_id: str
    ) -> Agent:
        session_history = await self.storage.fetch_all_chats(user_id, session_id)
        result = await self.classifier.classify(input_text, session_history)
        if result.selected_agent is not None:
            logger.info(
                "Routed request to %s (confidence %.2f)",
                result.selected_agent.id,
                result.confidence,
            )
            return result.selected_agent
        if self.default_agent is not None:
            logger.info(
                "No agent selected, falling back to default agent %s",
                self.default_agent.id,
            )
            return self.default_agent
        raise NoAgentSelectedError(
            "No agent matched the request and no default agent is configured."
        )

    async def _save_turn(
        self,
        agent: Agent,
        user_id: str,
        session_id: str,
        input_text: str,
        output_text: str,
    ) -> None:
        await self.storage.save_chat_messages(
            user_id,
            session_id,
            agent.id,
            [
                ConversationMessage(role=ParticipantRole.USER, content=input_text),
                ConversationMessage(role=ParticipantRole.ASSISTANT, content=output_text),
            ],
            max_history_size=self._max_history_size,
        )

    async def _relay_stream(
        self,
        agent: Agent,
        stream: AsyncIterator[str],
        user_id: str,
        session_id: str,
        input_text: str,
    ) -> AsyncIterator[str]:
        """
        Pass fragments through unchanged and save the turn once the
        agent's stream is exhausted. Abandoned or failed streams are
        not saved.
        """
        fragments: List[str] = []
        try:
            async for fragment in stream:
                fragments.append(fragment)
                yield fragment
        except Exception:
            logger.exception("Agent %s failed while streaming", agent.id)
            raise
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        if agent.save_chat:
            await self._save_turn(agent, user_id, session_id, input_text, "".join(fragments))

    async def route_request(
        self,
        input_text: str,
        user_id: str,
        session_id: str,
        additional_params: Optional[Dict[str, Any]] = None,
    ) -> AgentResponse:
        """
        Classify a request, dispatch it to the selected agent and return
        the agent's response.

        Raises:
            NoAgentSelectedError: If no agent can handle the request.
            ClassificationError: If the classifier backend fails.
            AgentError: Propagated unchanged from the agent.
        """
        params = dict(additional_params or {})
        agent = await self._select_agent(input_text, user_id, session_id)
        chat_history = await self.storage.fetch_chat(
            user_id, session_id, agent.id, max_history_size=self._max_history_size
        )
        metadata = AgentProcessingResult(
            user_input=input_text,
            agent_id=agent.id,
            agent_name=agent.name,
            user_id=user_id,
            session_id=session_id,
            additional_params=params,
        )

        try:
            output = await agent.process_request(
                input_text, user_id, session_id, chat_history, dict(params)
            )
        except Exception:
            logger.exception("Agent %s failed to process request", agent.id)
            raise

        if isinstance(output, ConversationMessage):
            if agent.save_chat:
                await self._save_turn(agent, user_id, session_id, input_text, output.content)
            return AgentResponse(metadata=metadata, output=output, streaming=False)

        relayed = self._relay_stream(agent, output, user_id, session_id, input_text)
        return AgentResponse(metadata=metadata, output=relayed, streaming=True)
