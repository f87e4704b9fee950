"""
Test fixtures for the orchestration test suite.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from orchestra.core.agent import Agent, AgentCallbacks, AgentOptions  # noqa: E402
from orchestra.core.classifier import Classifier, ClassifierResult  # noqa: E402
from orchestra.core.router import ModelRouter  # noqa: E402
from orchestra.core.types import ConversationMessage, ParticipantRole  # noqa: E402
from orchestra.models.base import (  # noqa: E402
    BaseProvider,
    ChatResponse,
    ModelInfo,
    ModelRegistry,
    ProviderError,
)


class FakeProvider(BaseProvider):
    """Provider that replays canned replies and records every call."""

    def __init__(
        self,
        name: str = "fake",
        reply: str = "hello",
        fragments: Optional[List[str]] = None,
        fail_after: Optional[int] = None,
    ) -> None:
        super().__init__(name=name)
        self.models = {"small": ModelInfo(name="fake-small")}
        self.reply = reply
        self.fragments = fragments if fragments is not None else ["hel", "lo"]
        self.fail_after = fail_after
        self.calls: List[Dict[str, Any]] = []
        self.stream_closed = False

    async def chat(self, model, messages, max_tokens=1024, temperature=0.7, region=None):
        self.calls.append(
            {
                "model": model,
                "messages": messages,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "region": region,
            }
        )
        if self.fail_after == 0:
            raise ProviderError("backend unavailable")
        return ChatResponse(text=self.reply, raw=None)

    async def stream(self, model, messages, max_tokens=1024, temperature=0.7, region=None):
        self.calls.append({"model": model, "messages": messages, "stream": True})
        try:
            for index, fragment in enumerate(self.fragments):
                if self.fail_after is not None and index >= self.fail_after:
                    raise ProviderError("connection reset")
                await asyncio.sleep(0)
                yield fragment
        finally:
            self.stream_closed = True


class StaticClassifier(Classifier):
    """Classifier that always selects the agent with a fixed id."""

    def __init__(self, agent_id: Optional[str]) -> None:
        super().__init__()
        self.agent_id = agent_id
        self.seen_history: List[List[ConversationMessage]] = []

    async def classify(self, input_text, chat_history):
        self.seen_history.append(list(chat_history))
        agent = self.agents.get(self.agent_id) if self.agent_id else None
        return ClassifierResult(selected_agent=agent, confidence=1.0 if agent else 0.0)


class EchoAgent(Agent):
    """Replies with the session id, the input and the history it was given."""

    def __init__(self, options: AgentOptions, delay: float = 0.0) -> None:
        super().__init__(options)
        self.delay = delay
        self.received: List[Dict[str, Any]] = []

    async def process_request(
        self, input_text, user_id, session_id, chat_history, additional_params=None
    ):
        self.received.append(
            {
                "session_id": session_id,
                "history": list(chat_history),
                "params": additional_params,
            }
        )
        await asyncio.sleep(self.delay)
        contents = "|".join(m.content for m in chat_history)
        return ConversationMessage(
            role=ParticipantRole.ASSISTANT,
            content=f"{session_id}:{input_text}[{contents}]",
        )


class RecordingCallbacks(AgentCallbacks):
    def __init__(self) -> None:
        self.tokens: List[str] = []
        self.completed: List[ConversationMessage] = []
        self.errors: List[BaseException] = []

    async def on_llm_new_token(self, token):
        self.tokens.append(token)

    async def on_complete(self, message):
        self.completed.append(message)

    async def on_error(self, error):
        self.errors.append(error)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def model_router(fake_provider):
    registry = ModelRegistry()
    registry.register_provider(fake_provider)
    return ModelRouter(registry)


@pytest.fixture
def callbacks():
    return RecordingCallbacks()


@pytest.fixture
def echo_agent():
    return EchoAgent(AgentOptions(name="Echo Agent", description="Repeats what it is told."))


@pytest.fixture
def make_classifier():
    return StaticClassifier


@pytest.fixture
def make_echo_agent():
    return EchoAgent


@pytest.fixture
def make_provider():
    return FakeProvider
