"""Tests for application wiring."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from listkeeper.app import build_app
from listkeeper.core.config import Config
from listkeeper.site.auth import StoreCredentials
from listkeeper.storage import GroceryStore

from conftest import ScriptedLLM

OWNER = "owner@c.us"


def make_pool() -> MagicMock:
    pool = MagicMock()
    pool.close_all = AsyncMock()
    return pool


@pytest.fixture
def credentials():
    return StoreCredentials(email="shopper@example.com", password="secret")


class TestBuildApp:
    @pytest.mark.asyncio
    async def test_agent_mode(self, credentials):
        llm = ScriptedLLM(AIMessage(content="Hello!"))
        app = build_app(
            Config(),
            llm=llm,
            owner_id=OWNER,
            credentials=credentials,
            pool=make_pool(),
            store=GroceryStore(":memory:"),
        )

        assert app.agent is not None
        assert app.agent.max_iterations == 5
        assert app.handler.router is None
        assert await app.handler.handle(OWNER, "hi") == "Hello!"
        assert "select_item" in app.agent.chat.system_prompt

        await app.close()
        app.pool.close_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_direct_mode_has_no_agent(self, credentials):
        app = build_app(
            Config(),
            direct=True,
            owner_id=OWNER,
            credentials=credentials,
            pool=make_pool(),
            store=GroceryStore(":memory:"),
        )

        assert app.agent is None
        assert app.handler.router is app.router
        assert app.session.context_name == "store"
        assert "Hi!" in await app.handler.handle(OWNER, "hello")

        await app.close()

    def test_store_settings_flow_into_session(self, credentials):
        config = Config.model_validate({"store": {"base_url": "https://store.example.com", "context_name": "wegmans"}})

        app = build_app(
            config,
            direct=True,
            owner_id=OWNER,
            credentials=credentials,
            pool=make_pool(),
            store=GroceryStore(":memory:"),
        )

        assert app.session.urls.base == "https://store.example.com"
        assert app.session.context_name == "wegmans"
        app.store.close()
