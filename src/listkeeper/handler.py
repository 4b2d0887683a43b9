"""Inbound message handling for the single authorized owner.

This is the outermost layer: whatever happens below, each accepted message
gets exactly one reply.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from listkeeper.actions.commands import HELP_TEXT

if TYPE_CHECKING:
    from listkeeper.actions.router import CommandRouter
    from listkeeper.llm.agent import ConversationAgent
    from listkeeper.storage import GroceryStore

RESET_REPLY = "Context cleared! Let's start fresh."
ERROR_REPLY = "Sorry, something went wrong. Please try again."
GROUP_MARKER = "@g.us"


class MessageHandler:
    """Filters inbound messages and produces the reply for each accepted one.

    Args:
        agent: Conversation agent for natural-language handling
        store: Local store the exchange is logged to
        owner_id: The only sender whose messages are processed
        router: When set, messages bypass the LLM and go to the command router
    """

    def __init__(
        self,
        agent: Optional["ConversationAgent"],
        store: "GroceryStore",
        owner_id: str,
        router: Optional["CommandRouter"] = None,
    ):
        if agent is None and router is None:
            raise ValueError("MessageHandler needs an agent or a router")
        self.agent = agent
        self.store = store
        self.owner_id = owner_id
        self.router = router

    def accepts(self, sender: str, body: str | None) -> bool:
        if sender != self.owner_id:
            print(f"[Handler] Ignoring message from non-owner {sender}")
            return False
        if GROUP_MARKER in sender:
            print("[Handler] Ignoring group message")
            return False
        if not body or not body.strip():
            print("[Handler] Ignoring empty message")
            return False
        return True

    async def handle(self, sender: str, body: str | None) -> Optional[str]:
        """Return the reply for ``body``, or None if the message is ignored."""
        if not self.accepts(sender, body):
            return None

        text = body.strip()
        print(f"[Handler] Received from owner: {text[:100]}")

        try:
            reply = await self._respond(sender, text)
        except Exception as e:
            print(f"[Handler] Error processing message: {e}")
            reply = ERROR_REPLY

        try:
            self.store.log_interaction(sender, text, reply)
        except Exception as e:
            print(f"[Handler] Failed to log interaction: {e}")

        print(f"[Handler] Replying ({len(reply)} chars)")
        return reply

    async def _respond(self, sender: str, text: str) -> str:
        command = text.lower()
        if command == "/reset":
            if self.agent is not None:
                self.agent.clear_context(sender)
            return RESET_REPLY
        if command == "/help":
            return HELP_TEXT

        if self.router is not None:
            result = await self.router.route(sender, text)
            return result.message

        return await self.agent.handle_message(sender, text)
