"""Tests for inbound message handling and direct command routing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from listkeeper.actions.router import SMALL_TALK_REPLY, CommandRouter
from listkeeper.handler import ERROR_REPLY, RESET_REPLY, MessageHandler
from listkeeper.site.models import SearchResult

OWNER = "15551234567@c.us"


@pytest.fixture
def agent():
    agent = MagicMock()
    agent.handle_message = AsyncMock(return_value="Added milk!")
    return agent


@pytest.fixture
def handler(agent, store):
    return MessageHandler(agent, store, OWNER)


class TestMessageHandler:
    @pytest.mark.asyncio
    async def test_owner_message_goes_to_agent(self, handler, agent):
        reply = await handler.handle(OWNER, "  add milk ")

        assert reply == "Added milk!"
        agent.handle_message.assert_awaited_once_with(OWNER, "add milk")

    @pytest.mark.asyncio
    async def test_non_owner_ignored(self, handler, agent, store):
        assert await handler.handle("15559999999@c.us", "add milk") is None
        agent.handle_message.assert_not_awaited()
        assert store.recent_interactions() == []

    @pytest.mark.asyncio
    async def test_group_message_ignored(self, agent, store):
        group_owner = "12345-67890@g.us"
        handler = MessageHandler(agent, store, group_owner)

        assert await handler.handle(group_owner, "add milk") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["", "   ", None])
    async def test_empty_body_ignored(self, handler, agent, body):
        assert await handler.handle(OWNER, body) is None
        agent.handle_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset_clears_context(self, handler, agent):
        reply = await handler.handle(OWNER, "/RESET")

        assert reply == RESET_REPLY
        agent.clear_context.assert_called_once_with(OWNER)
        agent.handle_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_help(self, handler):
        reply = await handler.handle(OWNER, "/help")

        assert "Available commands" in reply

    @pytest.mark.asyncio
    async def test_unexpected_error_gets_fallback_reply(self, handler, agent):
        agent.handle_message.side_effect = RuntimeError("kaboom")

        assert await handler.handle(OWNER, "add milk") == ERROR_REPLY

    @pytest.mark.asyncio
    async def test_exchange_is_logged(self, handler, store):
        await handler.handle(OWNER, "add milk")

        [entry] = store.recent_interactions()
        assert entry.sender == OWNER
        assert entry.body == "add milk"
        assert entry.response == "Added milk!"

    def test_requires_agent_or_router(self, store):
        with pytest.raises(ValueError):
            MessageHandler(None, store, OWNER)


class TestDirectMode:
    @pytest.mark.asyncio
    async def test_router_handles_commands(self, action, client, store):
        client.search_catalog.return_value = [SearchResult(name="Oat Milk", index=0)]
        handler = MessageHandler(None, store, OWNER, router=CommandRouter(action))

        reply = await handler.handle(OWNER, "search oat milk")

        assert reply == 'Added "Oat Milk" to your list'

    @pytest.mark.asyncio
    async def test_reset_without_agent(self, action, store):
        handler = MessageHandler(None, store, OWNER, router=CommandRouter(action))

        assert await handler.handle(OWNER, "/reset") == RESET_REPLY


class TestCommandRouter:
    @pytest.mark.asyncio
    async def test_help(self, action):
        result = await CommandRouter(action).route("user-1", "help")

        assert result.success
        assert "pick <number>" in result.message

    @pytest.mark.asyncio
    async def test_small_talk(self, action, client):
        result = await CommandRouter(action).route("user-1", "thanks!")

        assert result.message == SMALL_TALK_REPLY
        client.search_my_items.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_command_reaches_action(self, action, client):
        result = await CommandRouter(action).route("user-1", "list")

        assert result.message == "Your shopping list is empty"
        client.list_items.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_text_gets_help(self, action):
        result = await CommandRouter(action).route("user-1", "buy me a boat")

        assert not result.success
        assert "Available commands" in result.message
