"""
Chat history storage.

`ChatStorage` is the interface the orchestrator persists conversation
turns through. `InMemoryChatStorage` keeps them in process memory,
keyed by user, session and agent; other backends subclass `ChatStorage`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from orchestra.core.types import ConversationMessage

logger = logging.getLogger(__name__)

ChatKey = Tuple[str, str, str]


class ChatStorage(ABC):
    """Abstract store for per-agent chat history."""

    @abstractmethod
    async def save_chat_messages(
        self,
        user_id: str,
        session_id: str,
        agent_id: str,
        messages: Sequence[ConversationMessage],
        max_history_size: Optional[int] = None,
    ) -> List[ConversationMessage]:
        """Append messages and return the stored history."""

    @abstractmethod
    async def fetch_chat(
        self,
        user_id: str,
        session_id: str,
        agent_id: str,
        max_history_size: Optional[int] = None,
    ) -> List[ConversationMessage]:
        """Return one agent's history for a session, oldest first."""

    @abstractmethod
    async def fetch_all_chats(
        self, user_id: str, session_id: str
    ) -> List[ConversationMessage]:
        """Return every agent's messages for a session."""


def trim_history(
    messages: List[ConversationMessage], max_history_size: Optional[int]
) -> List[ConversationMessage]:
    """Keep the newest `max_history_size` messages."""
    if max_history_size is None or max_history_size < 0:
        return list(messages)
    if max_history_size == 0:
        return []
    return list(messages[-max_history_size:])


class InMemoryChatStorage(ChatStorage):
    """
    Process-local storage. Every fetch returns a new list, so callers
    can never alter stored history through a returned value.
    """

    def __init__(self) -> None:
        self._chats: Dict[ChatKey, List[ConversationMessage]] = {}
        # (agent_id, message) in save order across agents, used by fetch_all_chats.
        self._session_log: Dict[Tuple[str, str], List[Tuple[str, ConversationMessage]]] = {}

    async def save_chat_messages(
        self,
        user_id: str,
        session_id: str,
        agent_id: str,
        messages: Sequence[ConversationMessage],
        max_history_size: Optional[int] = None,
    ) -> List[ConversationMessage]:
        key = (user_id, session_id, agent_id)
        stored = self._chats.get(key, []) + list(messages)
        stored = trim_history(stored, max_history_size)
        self._chats[key] = stored

        # Drop log entries the agent's trimmed history no longer holds.
        kept = {id(m) for m in stored}
        log = self._session_log.get((user_id, session_id), [])
        log = [(a, m) for a, m in log if a != agent_id or id(m) in kept]
        log.extend((agent_id, m) for m in messages if id(m) in kept)
        self._session_log[(user_id, session_id)] = log
        logger.debug(
            "Saved %d message(s) for %s/%s/%s", len(messages), user_id, session_id, agent_id
        )
        return list(stored)

    async def fetch_chat(
        self,
        user_id: str,
        session_id: str,
        agent_id: str,
        max_history_size: Optional[int] = None,
    ) -> List[ConversationMessage]:
        stored = self._chats.get((user_id, session_id, agent_id), [])
        return trim_history(stored, max_history_size)

    async def fetch_all_chats(
        self, user_id: str, session_id: str
    ) -> List[ConversationMessage]:
        return [m for _, m in self._session_log.get((user_id, session_id), [])]
