"""
Model-backed agent.

`LLMAgent` answers a request by sending its system prompt, the session
history and the new input to a model through the `ModelRouter`. It can
return the whole reply at once or stream it fragment by fragment.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from orchestra.core.agent import (
    Agent,
    AgentConfigError,
    AgentError,
    AgentOptions,
    AgentOutput,
)
from orchestra.core.prompts import PromptManager
from orchestra.core.router import ModelRouter
from orchestra.core.types import ConversationMessage, ParticipantRole
from orchestra.models.base import ChatResponse, ProviderError

logger = logging.getLogger(__name__)


class LLMAgent(Agent):
    """
    Agent that delegates each turn to a chat model.

    `additional_params` understood per request:

    - `temperature`: sampling temperature, defaults to the agent's
      `temperature` (0.7).
    - `max_tokens`: reply length limit, defaults to the agent's
      `max_tokens` (1024).

    Values may be strings; anything that does not parse raises
    `AgentError`.
    """

    def __init__(
        self,
        options: AgentOptions,
        router: ModelRouter,
        prompts: Optional[PromptManager] = None,
        streaming: bool = False,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> None:
        super().__init__(options)
        if not options.model_id:
            raise AgentConfigError(f"Agent '{options.name}' requires a model_id.")
        self.router = router
        self.streaming = streaming
        self.temperature = temperature
        self.max_tokens = max_tokens
        prompts = prompts or PromptManager()
        self.system_prompt = system_prompt or prompts.get_agent_system_prompt(
            options.name, options.description
        )

    def is_streaming_enabled(self) -> bool:
        return self.streaming

    def _inference_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            temperature = float(params.get("temperature", self.temperature))
            max_tokens = int(params.get("max_tokens", self.max_tokens))
        except (TypeError, ValueError) as exc:
            raise AgentError(self.id, f"Invalid inference parameter: {exc}") from exc
        if max_tokens <= 0:
            raise AgentError(self.id, "max_tokens must be positive.")
        return {"temperature": temperature, "max_tokens": max_tokens}

    def _build_messages(
        self, input_text: str, chat_history: List[ConversationMessage]
    ) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = [{"role": "system", "content": self.system_prompt}]
        messages.extend(m.to_chat_dict() for m in chat_history)
        messages.append({"role": "user", "content": input_text})
        return messages

    def _open_stream(
        self, messages: List[Dict[str, Any]], inference: Dict[str, Any]
    ) -> AsyncIterator[str]:
        try:
            return self.router.stream(
                model_id=self.options.model_id,
                messages=messages,
                region=self.options.region,
                **inference,
            )
        except ProviderError as exc:
            raise AgentError(self.id, str(exc)) from exc

    async def _complete(
        self, messages: List[Dict[str, Any]], inference: Dict[str, Any]
    ) -> ChatResponse:
        try:
            return await self.router.chat(
                model_id=self.options.model_id,
                messages=messages,
                region=self.options.region,
                **inference,
            )
        except ProviderError as exc:
            raise AgentError(self.id, str(exc)) from exc

    async def process_request(
        self,
        input_text: str,
        user_id: str,
        session_id: str,
        chat_history: List[ConversationMessage],
        additional_params: Optional[Dict[str, Any]] = None,
    ) -> AgentOutput:
        try:
            inference = self._inference_params(additional_params or {})
            messages = self._build_messages(input_text, chat_history)
            if self.streaming:
                return self._stream_fragments(self._open_stream(messages, inference))
            response = await self._complete(messages, inference)
        except AgentError as exc:
            await self.callbacks.on_error(exc)
            raise

        message = ConversationMessage(role=ParticipantRole.ASSISTANT, content=response.text)
        await self.callbacks.on_complete(message)
        return message

    async def _stream_fragments(self, stream: AsyncIterator[str]) -> AsyncIterator[str]:
        fragments: List[str] = []
        try:
            async for fragment in stream:
                fragments.append(fragment)
                await self.callbacks.on_llm_new_token(fragment)
                yield fragment
        except ProviderError as exc:
            logger.error("[%s] stream failed after %d fragment(s)", self.id, len(fragments))
            await self.callbacks.on_error(exc)
            raise AgentError(self.id, f"Stream interrupted: {exc}") from exc
        finally:
            await stream.aclose()
        await self.callbacks.on_complete(
            ConversationMessage(role=ParticipantRole.ASSISTANT, content="".join(fragments))
        )
