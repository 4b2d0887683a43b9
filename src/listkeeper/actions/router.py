"""Direct command routing without the LLM."""

from __future__ import annotations

from typing import TYPE_CHECKING

from listkeeper.actions.base import ActionResult
from listkeeper.actions.commands import is_small_talk, parse_command

if TYPE_CHECKING:
    from listkeeper.actions.shopping_list import ShoppingListAction

SMALL_TALK_REPLY = 'Hi! Send "help" to see what I can do.'


class CommandRouter:
    """Routes a raw message to help, a small-talk reply, or the shopping list action."""

    def __init__(self, action: "ShoppingListAction"):
        self.action = action

    async def route(self, session_key: str, text: str) -> ActionResult:
        command = parse_command(text)
        print(f"[Action] Routing {text.strip()!r} -> {command.operation if command else 'none'}")

        if command is not None and command.operation == "help":
            return ActionResult(success=True, message=self.action.help_message())

        if command is None and is_small_talk(text):
            return ActionResult(success=True, message=SMALL_TALK_REPLY)

        return await self.action.execute(session_key, text)
