"""Per-user conversation history held in memory."""

from langchain_core.messages import BaseMessage, HumanMessage

DEFAULT_HISTORY_LIMIT = 40


def trim_history(messages: list[BaseMessage], limit: int) -> list[BaseMessage]:
    """Keep the newest ``limit`` messages, starting on a HumanMessage.

    Dropping stops at a user turn so a ToolMessage is never left without
    the AIMessage that requested it.
    """
    if len(messages) <= limit:
        return list(messages)

    trimmed = list(messages[-limit:])
    while trimmed and not isinstance(trimmed[0], HumanMessage):
        trimmed.pop(0)
    return trimmed


class ConversationStore:
    """Ordered message history per user, capped at ``limit`` entries."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        self.limit = limit
        self._histories: dict[str, list[BaseMessage]] = {}

    def get(self, user_id: str) -> list[BaseMessage]:
        """A copy of the user's history."""
        return list(self._histories.get(user_id, []))

    def trimmed(self, user_id: str) -> list[BaseMessage]:
        return trim_history(self._histories.get(user_id, []), self.limit)

    def append(self, user_id: str, *messages: BaseMessage) -> None:
        self._histories.setdefault(user_id, []).extend(messages)

    def set(self, user_id: str, messages: list[BaseMessage]) -> None:
        if messages:
            self._histories[user_id] = list(messages)
        else:
            self._histories.pop(user_id, None)

    def snapshot(self, user_id: str) -> list[BaseMessage]:
        return self.get(user_id)

    def restore(self, user_id: str, messages: list[BaseMessage]) -> None:
        self.set(user_id, messages)

    def clear(self, user_id: str) -> None:
        self._histories.pop(user_id, None)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._histories
