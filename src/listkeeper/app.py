"""Application wiring.

Builds the full object graph (browser pool, authenticated session, shopping
list action, chat agent, message handler) from config.toml and the
environment, and tears it down again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from langchain_core.runnables import Runnable

from listkeeper.actions.pending import PendingSelectionStore
from listkeeper.actions.router import CommandRouter
from listkeeper.actions.shopping_list import ShoppingListAction
from listkeeper.core.browser import SessionPool
from listkeeper.core.config import Config, get_owner_id, get_store_credentials, load_config
from listkeeper.handler import MessageHandler
from listkeeper.llm.agent import ConversationAgent
from listkeeper.llm.chat import ChatService, create_chat_model, load_system_prompt
from listkeeper.llm.history import ConversationStore
from listkeeper.site.auth import StoreCredentials
from listkeeper.site.client import ShoppingListClient
from listkeeper.site.selectors import StoreUrls
from listkeeper.site.session import AuthenticatedSession
from listkeeper.storage import GroceryStore


@dataclass
class App:
    """Everything a transport needs to serve messages."""

    config: Config
    pool: SessionPool
    session: AuthenticatedSession
    store: GroceryStore
    action: ShoppingListAction
    router: CommandRouter
    handler: MessageHandler
    agent: Optional[ConversationAgent] = None

    async def close(self) -> None:
        """Persist the login context, release the browser and close the database."""
        print("[App] Shutting down")
        try:
            await self.session.close()
        finally:
            try:
                await self.pool.close_all()
            finally:
                self.store.close()


def build_app(
    config: Config | None = None,
    *,
    llm: Runnable | None = None,
    direct: bool = False,
    owner_id: str | None = None,
    credentials: StoreCredentials | None = None,
    pool: SessionPool | None = None,
    store: GroceryStore | None = None,
) -> App:
    """Create the application.

    Args:
        config: Loaded configuration. Defaults to load_config().
        llm: Tool-bound chat model. Defaults to create_chat_model().
        direct: Route messages through the command grammar instead of the LLM
        owner_id: Authorized sender. Defaults to OWNER_ID.
        credentials: Store login. Defaults to STORE_EMAIL / STORE_PASSWORD.
        pool: Browser pool. Defaults to one built from [browser].
        store: Local store. Defaults to one at [storage].db_path.

    Raises:
        ConfigError: If a required environment variable is missing
    """
    config = config or load_config()
    credentials = credentials or get_store_credentials()
    owner_id = owner_id or get_owner_id()

    pool = pool or SessionPool.from_config(config.browser)
    session = AuthenticatedSession(
        pool,
        credentials,
        urls=StoreUrls(config.store.base_url),
        context_name=config.store.context_name,
        navigation_timeout_ms=config.browser.timeouts.navigation_ms,
        selector_timeout_ms=config.browser.timeouts.selector_ms,
    )
    client = ShoppingListClient(
        session,
        max_results=config.selection.max_results,
        timeouts=config.browser.timeouts,
    )
    store = store or GroceryStore(config.storage.db_path)
    pending = PendingSelectionStore(ttl_seconds=config.selection.ttl_seconds)
    action = ShoppingListAction(client, store, pending)
    router = CommandRouter(action)

    agent = None
    if not direct:
        chat = ChatService(
            llm or create_chat_model(config),
            ConversationStore(limit=config.llm.history_limit),
            system_prompt=load_system_prompt(config),
        )
        agent = ConversationAgent(chat, action, max_iterations=config.llm.max_tool_iterations)

    handler = MessageHandler(agent, store, owner_id, router=router if direct else None)
    print(f"[App] Ready ({'direct commands' if direct else config.llm.chat_model})")

    return App(
        config=config,
        pool=pool,
        session=session,
        store=store,
        action=action,
        router=router,
        handler=handler,
        agent=agent,
    )
