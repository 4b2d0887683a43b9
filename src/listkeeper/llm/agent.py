"""Conversation agent: runs the bounded tool-calling loop for each message.

The model may chain tool calls (e.g. search, then select) but the loop
stops after ``max_iterations`` rounds of tool results, whatever the model
asks for next.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from listkeeper.core.errors import ConversationServiceError
from listkeeper.llm.chat import ChatService, LLMReply, ToolCall
from listkeeper.llm.tools import (
    TOOLS_BY_NAME,
    AddToGroceryListArgs,
    RemoveFromGroceryListArgs,
    SearchGroceryItemArgs,
    SelectItemArgs,
)

if TYPE_CHECKING:
    from listkeeper.actions.shopping_list import ShoppingListAction

DEFAULT_MAX_ITERATIONS = 5

FALLBACK_REPLY = "Sorry, something went wrong. Please try again."
API_KEY_REPLY = "I'm having trouble connecting to my brain. Please check the OpenAI API key."
DONE_REPLY = "Done!"
SKIPPED_RESULT = "Skipped: too many tool calls in one turn."

ToolHandler = Callable[[str, BaseModel], Awaitable[str]]


class ConversationAgent:
    """Turns one inbound message into one reply.

    Usage:
        agent = ConversationAgent(chat_service, shopping_list_action)
        reply = await agent.handle_message("user-1", "add eggs and milk")
    """

    def __init__(
        self,
        chat: ChatService,
        action: "ShoppingListAction",
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.chat = chat
        self.action = action
        self.max_iterations = max_iterations
        self._handlers: dict[str, ToolHandler] = {
            "add_to_grocery_list": self._add_to_grocery_list,
            "search_grocery_item": self._search_grocery_item,
            "remove_from_grocery_list": self._remove_from_grocery_list,
            "show_grocery_list": self._show_grocery_list,
            "clear_grocery_list": self._clear_grocery_list,
            "select_item": self._select_item,
        }

    async def handle_message(self, user_id: str, text: str) -> str:
        print(f"[Agent] Handling message from {user_id}: {text[:100]}")
        before = self.chat.snapshot(user_id)

        try:
            reply = await self.chat.chat(user_id, text)

            iterations = 0
            while reply.tool_calls and iterations < self.max_iterations:
                iterations += 1
                print(f"[Agent] Iteration {iterations}: {len(reply.tool_calls)} tool call(s)")

                for call in reply.tool_calls:
                    result = await self.execute_tool(user_id, call)
                    self.chat.add_tool_result(user_id, call, result)

                reply = await self.chat.continue_with_tool_results(user_id)

            if reply.tool_calls:
                print(f"[Agent] Stopped after {iterations} iterations with tool calls pending")
                self._skip_pending(user_id, reply)

        except ConversationServiceError as e:
            print(f"[Agent] Conversation service error: {e}")
            self.chat.restore(user_id, before)
            if "api key" in str(e).lower() or "api_key" in str(e).lower():
                return API_KEY_REPLY
            return FALLBACK_REPLY

        return reply.text or DONE_REPLY

    def _skip_pending(self, user_id: str, reply: LLMReply) -> None:
        for call in reply.tool_calls:
            self.chat.add_tool_result(user_id, call, SKIPPED_RESULT)

    async def execute_tool(self, user_id: str, call: ToolCall) -> str:
        """Run one tool call and return its textual result.

        Unknown tools and invalid arguments come back as text for the model.
        """
        print(f"[Agent] Executing {call.name} {call.args}")

        spec = TOOLS_BY_NAME.get(call.name)
        handler = self._handlers.get(call.name)
        if spec is None or handler is None:
            return f"Unknown function: {call.name}"

        try:
            args = spec.args_model.model_validate(call.args)
        except ValidationError as e:
            return f"Invalid arguments for {call.name}: {e.errors()[0]['msg']}"

        try:
            return await handler(user_id, args)
        except Exception as e:
            print(f"[Agent] {call.name} failed: {e}")
            return f"Error executing {call.name}: {e}"

    # -------------------------------------------------------------------------
    # Dispatch table
    # -------------------------------------------------------------------------

    async def _add_to_grocery_list(self, user_id: str, args: AddToGroceryListArgs) -> str:
        lines = []
        for item in args.items:
            result = await self.action.add(user_id, item)
            lines.append(f"{item}: {result.message}")
        return "\n".join(lines)

    async def _search_grocery_item(self, user_id: str, args: SearchGroceryItemArgs) -> str:
        return (await self.action.search(user_id, args.query)).message

    async def _remove_from_grocery_list(self, user_id: str, args: RemoveFromGroceryListArgs) -> str:
        return (await self.action.remove(user_id, args.item)).message

    async def _show_grocery_list(self, user_id: str, args: BaseModel) -> str:
        return (await self.action.show_list(user_id)).message

    async def _clear_grocery_list(self, user_id: str, args: BaseModel) -> str:
        return (await self.action.clear(user_id)).message

    async def _select_item(self, user_id: str, args: SelectItemArgs) -> str:
        return (await self.action.pick(user_id, args.selection)).message

    def clear_context(self, user_id: str) -> None:
        self.chat.clear_history(user_id)
