# vacancy_rag/llm/chat.py
"""
OpenAI chat client with tool-call support.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from openai import OpenAI

from vacancy_rag.llm.credentials import resolve_api_key
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import CHAT

logger = get_logger(__name__)


@dataclass
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: str


@dataclass
class ChatResponse:
    """Assistant turn: text content and any requested tool calls."""

    content: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)

    def to_message(self) -> Dict[str, Any]:
        """Render as an assistant message for the next request."""
        message: Dict[str, Any] = {"role": "assistant", "content": self.content or None}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        return message


@runtime_checkable
class ChatClient(Protocol):
    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatResponse: ...


class OpenAIChatClient:
    """
    Chat client for the OpenAI API.

    Required:
        - OPENAI_API_KEY environment variable OR api_key parameter

    Config example:
        chat:
          model: gpt-4o-mini
          temperature: 0.1
          max_tokens: 1000
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
    ) -> None:
        key = resolve_api_key(provider="openai", api_key=api_key)

        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        client_kwargs: dict[str, Any] = {"api_key": key, "timeout": timeout}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)

    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatResponse:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'
            tools: Optional function tool definitions

        Returns:
            ChatResponse with the assistant text and tool calls
        """
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens
        if tools:
            kwargs["tools"] = tools

        response = self._client.chat.completions.create(**kwargs)

        choice = response.choices[0] if response.choices else None
        if choice is None or choice.message is None:
            logger.warning(f"{CHAT} Empty completion from {self.model}")
            return ChatResponse()

        message = choice.message
        tool_calls = [
            ToolCall(id=call.id, name=call.function.name, arguments=call.function.arguments or "{}")
            for call in (message.tool_calls or [])
        ]
        return ChatResponse(content=message.content or "", tool_calls=tool_calls)


__all__ = ["ChatClient", "ChatResponse", "OpenAIChatClient", "ToolCall"]
