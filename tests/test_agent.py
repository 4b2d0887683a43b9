"""Tests for the conversation agent's bounded tool loop."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, ToolMessage

from listkeeper.actions.base import ActionResult
from listkeeper.llm.agent import API_KEY_REPLY, FALLBACK_REPLY, SKIPPED_RESULT, ConversationAgent
from listkeeper.llm.chat import ChatService, ToolCall
from listkeeper.llm.history import ConversationStore

from conftest import ScriptedLLM, tool_call_message


def make_action() -> MagicMock:
    action = MagicMock()
    action.add = AsyncMock(side_effect=lambda key, item: ActionResult(True, f'Added "{item}"'))
    action.search = AsyncMock(return_value=ActionResult(True, "Found 2 items"))
    action.remove = AsyncMock(return_value=ActionResult(True, "Removed"))
    action.show_list = AsyncMock(return_value=ActionResult(True, "Your shopping list is empty"))
    action.clear = AsyncMock(return_value=ActionResult(True, "Cleared"))
    action.pick = AsyncMock(return_value=ActionResult(True, "Added pick"))
    return action


def make_agent(llm, action=None, max_iterations=5):
    chat = ChatService(llm, ConversationStore())
    return ConversationAgent(chat, action or make_action(), max_iterations=max_iterations)


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_plain_reply(self):
        agent = make_agent(ScriptedLLM(AIMessage(content="Hey! What do you need?")))

        assert await agent.handle_message("user-1", "hi") == "Hey! What do you need?"

    @pytest.mark.asyncio
    async def test_add_runs_once_per_item(self):
        action = make_action()
        llm = ScriptedLLM(
            tool_call_message("add_to_grocery_list", {"items": ["eggs", "milk"]}),
            AIMessage(content="Added eggs and milk!"),
        )
        agent = make_agent(llm, action)

        reply = await agent.handle_message("user-1", "add eggs and milk")

        assert reply == "Added eggs and milk!"
        assert [c.args for c in action.add.await_args_list] == [("user-1", "eggs"), ("user-1", "milk")]
        tool_message = llm.calls[1][-1]
        assert isinstance(tool_message, ToolMessage)
        assert tool_message.content == 'eggs: Added "eggs"\nmilk: Added "milk"'

    @pytest.mark.asyncio
    async def test_done_when_model_has_no_text(self):
        llm = ScriptedLLM(tool_call_message("clear_grocery_list"), AIMessage(content=""))
        agent = make_agent(llm)

        assert await agent.handle_message("user-1", "clear it") == "Done!"

    @pytest.mark.asyncio
    async def test_adversarial_model_is_capped_at_five_continuations(self):
        action = make_action()
        llm = ScriptedLLM(tool_call_message("show_grocery_list"))
        agent = make_agent(llm, action)

        reply = await agent.handle_message("user-1", "list forever")

        # One initial chat plus five continuations
        assert len(llm.calls) == 6
        assert action.show_list.await_count == 5
        assert reply == "Done!"
        last = agent.chat.history.get("user-1")[-1]
        assert isinstance(last, ToolMessage)
        assert last.content == SKIPPED_RESULT

    @pytest.mark.asyncio
    async def test_chained_calls(self):
        action = make_action()
        llm = ScriptedLLM(
            tool_call_message("search_grocery_item", {"query": "oat milk"}, call_id="1"),
            tool_call_message("select_item", {"selection": 2}, call_id="2"),
            AIMessage(content="Added the second one!"),
        )
        agent = make_agent(llm, action)

        reply = await agent.handle_message("user-1", "find oat milk and add the second")

        assert reply == "Added the second one!"
        action.search.assert_awaited_once_with("user-1", "oat milk")
        action.pick.assert_awaited_once_with("user-1", 2)

    @pytest.mark.asyncio
    async def test_service_failure_restores_history(self):
        llm = ScriptedLLM(AIMessage(content="Hi!"), RuntimeError("upstream 500"))
        agent = make_agent(llm)
        await agent.handle_message("user-1", "hi")
        before = agent.chat.history.get("user-1")

        reply = await agent.handle_message("user-1", "add milk")

        assert reply == FALLBACK_REPLY
        assert agent.chat.history.get("user-1") == before

    @pytest.mark.asyncio
    async def test_failure_mid_loop_restores_history(self):
        llm = ScriptedLLM(tool_call_message("show_grocery_list"), RuntimeError("timeout"))
        agent = make_agent(llm)

        reply = await agent.handle_message("user-1", "show my list")

        assert reply == FALLBACK_REPLY
        assert agent.chat.history.get("user-1") == []

    @pytest.mark.asyncio
    async def test_api_key_error_gets_specific_reply(self):
        agent = make_agent(ScriptedLLM(RuntimeError("Incorrect API key provided")))

        assert await agent.handle_message("user-1", "hi") == API_KEY_REPLY

    def test_clear_context(self):
        agent = make_agent(ScriptedLLM(AIMessage(content="ok")))
        agent.chat.history.append("user-1", AIMessage(content="old"))

        agent.clear_context("user-1")

        assert agent.chat.history.get("user-1") == []


class TestExecuteTool:
    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        agent = make_agent(ScriptedLLM(AIMessage(content="ok")))

        result = await agent.execute_tool("user-1", ToolCall(id="1", name="order_pizza"))

        assert result == "Unknown function: order_pizza"

    @pytest.mark.asyncio
    async def test_invalid_arguments_are_reported(self):
        action = make_action()
        agent = make_agent(ScriptedLLM(AIMessage(content="ok")), action)

        result = await agent.execute_tool("user-1", ToolCall(id="1", name="select_item", args={"selection": "second"}))

        assert result.startswith("Invalid arguments for select_item")
        action.pick.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_action_exception_becomes_text(self):
        action = make_action()
        action.remove.side_effect = RuntimeError("boom")
        agent = make_agent(ScriptedLLM(AIMessage(content="ok")), action)

        result = await agent.execute_tool("user-1", ToolCall(id="1", name="remove_from_grocery_list", args={"item": "eggs"}))

        assert result == "Error executing remove_from_grocery_list: boom"

    @pytest.mark.asyncio
    async def test_dispatch_table(self):
        action = make_action()
        agent = make_agent(ScriptedLLM(AIMessage(content="ok")), action)

        assert await agent.execute_tool("user-1", ToolCall(id="1", name="show_grocery_list")) == "Your shopping list is empty"
        assert await agent.execute_tool("user-1", ToolCall(id="2", name="clear_grocery_list")) == "Cleared"
        assert await agent.execute_tool("user-1", ToolCall(id="3", name="remove_from_grocery_list", args={"item": "eggs"})) == "Removed"
        action.remove.assert_awaited_once_with("user-1", "eggs")
