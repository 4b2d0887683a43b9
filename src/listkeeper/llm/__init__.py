"""LLM conversation layer.

Main components:
- tools: tool declarations and their argument models
- history: per-user capped message history
- chat: ChatService around the tool-calling chat model
- agent: ConversationAgent, the bounded tool-calling loop
"""

from listkeeper.llm.agent import ConversationAgent
from listkeeper.llm.chat import ChatService, LLMReply, ToolCall, create_chat_model, load_system_prompt
from listkeeper.llm.history import ConversationStore, trim_history
from listkeeper.llm.tools import TOOL_DEFINITIONS, TOOL_SCHEMAS, ToolSpec

__all__ = [
    # Agent
    "ConversationAgent",
    # Chat
    "ChatService",
    "LLMReply",
    "ToolCall",
    "create_chat_model",
    "load_system_prompt",
    # History
    "ConversationStore",
    "trim_history",
    # Tools
    "TOOL_DEFINITIONS",
    "TOOL_SCHEMAS",
    "ToolSpec",
]
