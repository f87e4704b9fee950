"""
Agent contract.

Defines:
- AgentOptions: validated, immutable construction options.
- AgentCallbacks: async hooks fired while a request is processed.
- Agent: the abstract capability every concrete agent implements.

An agent turns one conversational request into either a single
`ConversationMessage` or an async generator of text fragments. Agents
keep only their construction-time configuration; everything scoped to
a request (session, history, parameters) is passed in explicitly, so
one instance can serve many concurrent requests.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from orchestra.core.types import ConversationMessage

AgentOutput = Union[ConversationMessage, AsyncIterator[str]]

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class AgentConfigError(ValueError):
    """Raised when agent options are invalid."""


class AgentError(Exception):
    """Raised when an agent fails to process a request."""

    def __init__(self, agent_id: str, message: str) -> None:
        super().__init__(f"[{agent_id}] {message}")
        self.agent_id = agent_id


def slugify(name: str) -> str:
    """
    Derive an agent id from its name.

    Lowercases the name and collapses each run of characters outside
    `[a-z0-9]` into a single hyphen, e.g. "Weather Agent" -> "weather-agent".
    """
    return _NON_ALNUM.sub("-", name.strip().lower()).strip("-")


class AgentCallbacks:
    """
    Hooks invoked during request processing. Subclass and override the
    events you need; every hook defaults to a no-op.
    """

    async def on_llm_new_token(self, token: str) -> None:
        """Called once per streamed fragment, in production order."""

    async def on_complete(self, message: ConversationMessage) -> None:
        """Called once when a response has been fully produced."""

    async def on_error(self, error: BaseException) -> None:
        """Called once when processing a request fails."""


@dataclass(frozen=True)
class AgentOptions:
    """
    Construction options for an agent.

    `name` and `description` are required; the description is what the
    classifier reads, so it should set the agent apart from its siblings.
    `model_id` selects a backend (`"provider/model_key"`) and `region` a
    deployment locality, for agents that talk to a model.
    """

    name: str
    description: str
    model_id: Optional[str] = None
    region: Optional[str] = None
    save_chat: bool = True
    callbacks: Optional[AgentCallbacks] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise AgentConfigError("Agent name must not be empty.")
        if not self.description or not self.description.strip():
            raise AgentConfigError(
                f"Agent '{self.name}' requires a non-empty description."
            )
        if not slugify(self.name):
            raise AgentConfigError(
                f"Agent name '{self.name}' does not contain any letters or digits."
            )


class Agent(ABC):
    """
    Abstract base class for all agents.

    Subclasses implement `process_request`. Configuration is read from
    `AgentOptions` once, at construction.
    """

    def __init__(self, options: AgentOptions) -> None:
        self._options = options
        self._id = slugify(options.name)
        self.callbacks = options.callbacks or AgentCallbacks()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def description(self) -> str:
        return self._options.description

    @property
    def save_chat(self) -> bool:
        return self._options.save_chat

    @property
    def options(self) -> AgentOptions:
        return self._options

    def is_streaming_enabled(self) -> bool:
        return False

    @abstractmethod
    async def process_request(
        self,
        input_text: str,
        user_id: str,
        session_id: str,
        chat_history: List[ConversationMessage],
        additional_params: Optional[Dict[str, Any]] = None,
    ) -> AgentOutput:
        """
        Handle one conversational turn.

        Args:
            input_text: The user's message.
            user_id: Opaque caller identifier.
            session_id: Opaque conversation identifier.
            chat_history: Prior messages of this session, oldest first.
                Must not be mutated.
            additional_params: Optional per-request parameters. Missing
                keys fall back to the agent's documented defaults.

        Returns:
            A complete `ConversationMessage`, or an async generator of
            text fragments when the agent streams.

        Raises:
            AgentError: If the request cannot be handled.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
