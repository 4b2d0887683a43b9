"""Shopping list client for the store.

Provides typed methods for the site primitives the command layer needs. Each
method runs one page routine through ``AuthenticatedSession.with_page`` so
it always sees a logged-in page and never races another caller.
"""

from __future__ import annotations

from listkeeper.core.config import BrowserTimeoutConfig
from listkeeper.site import pages
from listkeeper.site.models import ListItem, SearchResult
from listkeeper.site.session import AuthenticatedSession


class ShoppingListClient:
    """Client for the store's shopping list, past purchases and catalog.

    Usage:
        session = AuthenticatedSession(pool, credentials)
        client = ShoppingListClient(session)
        results = await client.search_my_items("milk")
        await client.add_from_my_items("milk", results[0].index)
        items = await client.list_items()
    """

    def __init__(
        self,
        session: AuthenticatedSession,
        max_results: int = 5,
        timeouts: BrowserTimeoutConfig | None = None,
    ):
        """Initialize the client.

        Args:
            session: Authenticated session every call runs through
            max_results: Cap on search results returned for a menu
            timeouts: Per-step Playwright timeouts
        """
        self.session = session
        self.max_results = max_results
        self.timeouts = timeouts or BrowserTimeoutConfig()

    @property
    def urls(self):
        return self.session.urls

    async def search_my_items(self, query: str) -> list[SearchResult]:
        """Search past purchases.

        Args:
            query: Item name or fragment (e.g., "milk")

        Returns:
            Matching past purchases, at most ``max_results``
        """
        return await self.session.with_page(
            lambda page: pages.search_my_items(page, self.urls, query, self.max_results, self.timeouts)
        )

    async def search_catalog(self, query: str) -> list[SearchResult]:
        """Search the full product catalog.

        Returns:
            Top product cards, at most ``max_results``
        """
        return await self.session.with_page(
            lambda page: pages.search_products(page, self.urls, query, self.max_results, self.timeouts)
        )

    async def add_from_my_items(self, query: str, index: int) -> bool:
        """Add a past purchase to the list.

        Args:
            query: The search the index refers to
            index: Position of the item in that search's results page
        """
        return await self.session.with_page(
            lambda page: pages.add_my_item_to_list(page, self.urls, query, index, self.timeouts)
        )

    async def add_from_catalog(self, query: str, index: int) -> bool:
        return await self.session.with_page(
            lambda page: pages.add_search_result_to_list(page, self.urls, query, index, self.timeouts)
        )

    async def remove_from_list(self, item_name: str) -> str | None:
        """Remove an entry from the live list.

        Returns:
            The removed entry's name, or None if nothing matched
        """
        return await self.session.with_page(
            lambda page: pages.remove_item_from_list(page, self.urls, item_name, self.timeouts)
        )

    async def list_items(self) -> list[ListItem]:
        return await self.session.with_page(lambda page: pages.get_list_items(page, self.urls, self.timeouts))

    async def clear_list(self) -> bool:
        return await self.session.with_page(lambda page: pages.clear_list(page, self.urls, self.timeouts))
