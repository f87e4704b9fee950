"""
Conversation types shared by agents, storage and the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ParticipantRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationMessage:
    """
    One turn of a conversation.

    Messages are immutable; a chat history is an ordered list of them
    and agents receive a fresh list on every call.
    """

    role: ParticipantRole
    content: str

    def to_chat_dict(self) -> Dict[str, str]:
        """Return the message in OpenAI chat format."""
        return {"role": self.role.value, "content": self.content}
