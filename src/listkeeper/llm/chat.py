"""Conversation service wrapping the tool-calling chat model.

Keeps each user's message history, sends it to the model with the system
prompt, and records the model's replies and the tool results fed back to
it. A provider failure raises ConversationServiceError and leaves the
user's history exactly as it was before the call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_core.runnables import Runnable

from listkeeper.core.config import Config, load_config
from listkeeper.core.errors import ConversationServiceError
from listkeeper.llm.history import ConversationStore
from listkeeper.llm.tools import TOOL_SCHEMAS

DEFAULT_SYSTEM_PROMPT = """You are a friendly personal assistant that manages a grocery shopping list over chat.

Keep replies short and conversational. Confirm actions briefly ("Added milk!").
When users mention several items, add them all in one call. If a search
returns numbered options, show them and wait for the user to pick one; "the
second one" means select_item with 2.
"""


@dataclass
class ToolCall:
    """One tool invocation requested by the model."""

    id: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMReply:
    text: Optional[str] = None
    tool_calls: list[ToolCall] = field(default_factory=list)


def _message_text(message: AIMessage) -> Optional[str]:
    content = message.content
    if isinstance(content, str):
        return content.strip() or None

    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    text = "".join(parts).strip()
    return text or None


def _to_reply(message: AIMessage) -> LLMReply:
    calls = [
        ToolCall(id=call.get("id") or f"call_{i}", name=call["name"], args=call.get("args") or {})
        for i, call in enumerate(message.tool_calls or [])
    ]
    return LLMReply(text=_message_text(message), tool_calls=calls)


def load_system_prompt(config: Config | None = None) -> str:
    """Read prompts/chat_system.md, falling back to the built-in prompt."""
    config = config or load_config()
    try:
        return config.load_prompt("chat_system")
    except FileNotFoundError:
        print("[Chat] System prompt file not found, using built-in prompt")
        return DEFAULT_SYSTEM_PROMPT


def create_chat_model(config: Config | None = None) -> Runnable:
    """Create the chat model with the grocery tools bound.

    Reads OPENAI_API_KEY from the environment.
    """
    from langchain_openai import ChatOpenAI

    config = config or load_config()
    llm: BaseChatModel = ChatOpenAI(
        model=config.llm.chat_model,
        temperature=config.llm.chat_temperature,
    )
    return llm.bind_tools(TOOL_SCHEMAS)


class ChatService:
    """Per-user chat sessions against one tool-calling model.

    Usage:
        service = ChatService(create_chat_model(), ConversationStore())
        reply = await service.chat("user-1", "add milk")
        for call in reply.tool_calls:
            service.add_tool_result("user-1", call, "Added milk")
        reply = await service.continue_with_tool_results("user-1")
    """

    def __init__(self, llm: Runnable, history: ConversationStore | None = None, system_prompt: str | None = None):
        self.llm = llm
        self.history = history or ConversationStore()
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT

    async def _invoke(self, messages: list[BaseMessage]) -> AIMessage:
        try:
            response = await self.llm.ainvoke([SystemMessage(content=self.system_prompt), *messages])
        except Exception as e:
            print(f"[Chat] Model call failed: {e}")
            raise ConversationServiceError(str(e)) from e

        if not isinstance(response, AIMessage):
            raise ConversationServiceError(f"Unexpected model response: {type(response).__name__}")
        return response

    async def chat(self, user_id: str, text: str) -> LLMReply:
        """Send a new user message."""
        history = self.history.trimmed(user_id)
        user_message = HumanMessage(content=text)

        response = await self._invoke([*history, user_message])

        self.history.set(user_id, [*history, user_message, response])
        reply = _to_reply(response)
        print(f"[Chat] Reply for {user_id}: text={reply.text is not None}, tool_calls={len(reply.tool_calls)}")
        return reply

    def add_tool_result(self, user_id: str, call: ToolCall, result: str) -> None:
        self.history.append(user_id, ToolMessage(content=result, tool_call_id=call.id, name=call.name))

    async def continue_with_tool_results(self, user_id: str) -> LLMReply:
        """Ask the model to respond to the tool results just added."""
        history = self.history.get(user_id)

        response = await self._invoke(history)

        self.history.append(user_id, response)
        reply = _to_reply(response)
        print(f"[Chat] Continued for {user_id}: text={reply.text is not None}, tool_calls={len(reply.tool_calls)}")
        return reply

    def snapshot(self, user_id: str) -> list[BaseMessage]:
        return self.history.snapshot(user_id)

    def restore(self, user_id: str, messages: list[BaseMessage]) -> None:
        self.history.restore(user_id, messages)

    def clear_history(self, user_id: str) -> None:
        self.history.clear(user_id)
        print(f"[Chat] Cleared conversation history for {user_id}")
