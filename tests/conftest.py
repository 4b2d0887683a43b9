"""Shared fakes for the listkeeper tests.

Nothing here starts a browser or calls a model: the store client, pages and
chat model are all replaced with mocks or scripted stand-ins.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from listkeeper.actions.pending import PendingSelectionStore
from listkeeper.actions.shopping_list import ShoppingListAction
from listkeeper.storage import GroceryStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedLLM:
    """Chat model stand-in that replays a list of responses.

    Each entry is an AIMessage to return or an exception to raise. When the
    script runs out the last entry repeats.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[list] = []

    async def ainvoke(self, messages, *args, **kwargs):
        self.calls.append(list(messages))
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, BaseException):
            raise response
        return response


def tool_call_message(name: str, args: dict | None = None, call_id: str = "call_1", content: str = "") -> AIMessage:
    return AIMessage(content=content, tool_calls=[{"name": name, "args": args or {}, "id": call_id}])


def make_client() -> MagicMock:
    client = MagicMock()
    client.search_my_items = AsyncMock(return_value=[])
    client.search_catalog = AsyncMock(return_value=[])
    client.add_from_my_items = AsyncMock(return_value=True)
    client.add_from_catalog = AsyncMock(return_value=True)
    client.remove_from_list = AsyncMock(return_value=None)
    client.list_items = AsyncMock(return_value=[])
    client.clear_list = AsyncMock(return_value=True)
    return client


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    grocery_store = GroceryStore(":memory:")
    yield grocery_store
    grocery_store.close()


@pytest.fixture
def pending(clock):
    return PendingSelectionStore(ttl_seconds=300, clock=clock)


@pytest.fixture
def client():
    return make_client()


@pytest.fixture
def action(client, store, pending):
    return ShoppingListAction(client, store, pending)
