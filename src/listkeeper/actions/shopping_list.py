"""Shopping list action: the add / search / pick / remove / list / clear flow.

``add`` looks in past purchases first and falls back to the catalog. When a
search is ambiguous a numbered menu is shown and parked in the
PendingSelectionStore until the user picks. Every failure from the browser
layer is caught here and turned into an ``ActionResult``.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any, Callable, Optional

from listkeeper.actions.base import ActionResult
from listkeeper.actions.commands import HELP_TEXT, parse_command
from listkeeper.actions.pending import PendingSelection, PendingSelectionStore, SelectionSource
from listkeeper.core.errors import SelectionError
from listkeeper.site.models import SearchResult

if TYPE_CHECKING:
    from listkeeper.site.client import ShoppingListClient
    from listkeeper.storage import GroceryStore


def format_menu(results: list[SearchResult]) -> str:
    return "\n".join(f"{i}. {result.display_name()}" for i, result in enumerate(results, start=1))


class ShoppingListAction:
    """Executes shopping list operations for one user at a time.

    Usage:
        action = ShoppingListAction(client, store, PendingSelectionStore())
        result = await action.add(user_id, "milk")
        if result.data and result.data.get("pending"):
            result = await action.pick(user_id, 2)
    """

    def __init__(self, client: "ShoppingListClient", store: "GroceryStore", pending: PendingSelectionStore):
        self.client = client
        self.store = store
        self.pending = pending

    # -------------------------------------------------------------------------
    # Add / search
    # -------------------------------------------------------------------------

    async def add(self, session_key: str, item: str) -> ActionResult:
        """Add ``item``, preferring a past purchase over a catalog product."""
        item = item.strip()
        print(f"[Action] add '{item}' for {session_key}")

        try:
            my_items = await self.client.search_my_items(item)

            if my_items:
                exact = next((r for r in my_items if r.name.lower() == item.lower()), None)
                if exact is not None:
                    added = await self._try_add(item, exact, SelectionSource.MY_ITEMS, "from your past purchases")
                    if added is not None:
                        return added
                    print(f"[Action] Direct add of '{exact.name}' failed, offering the menu")

                return self._offer_menu(session_key, item, my_items, SelectionSource.MY_ITEMS)

            return await self._search_catalog(session_key, item)

        except Exception as e:
            print(f"[Action] add '{item}' failed: {e}")
            return ActionResult(success=False, message=f'Failed to search for "{item}": {e}')

    async def search(self, session_key: str, item: str) -> ActionResult:
        """Like ``add`` but goes straight to the full catalog."""
        item = item.strip()
        print(f"[Action] search '{item}' for {session_key}")

        try:
            return await self._search_catalog(session_key, item)
        except Exception as e:
            print(f"[Action] search '{item}' failed: {e}")
            return ActionResult(success=False, message=f'Failed to search for "{item}": {e}')

    async def _search_catalog(self, session_key: str, item: str) -> ActionResult:
        results = await self.client.search_catalog(item)

        if not results:
            return ActionResult(
                success=False,
                message=f'Couldn\'t find "{item}" in the store. Try a different search term.',
            )

        if len(results) == 1:
            added = await self._try_add(item, results[0], SelectionSource.CATALOG, "to your list")
            if added is not None:
                return added
            print(f"[Action] Direct add of '{results[0].name}' failed, offering the menu")

        return self._offer_menu(session_key, item, results, SelectionSource.CATALOG)

    def _offer_menu(
        self, session_key: str, item: str, results: list[SearchResult], source: SelectionSource
    ) -> ActionResult:
        """Park ``results`` as the user's pending selection and show them numbered."""
        self.pending.create(session_key, item, results, source)

        if source is SelectionSource.MY_ITEMS:
            message = (
                f"Found in your past purchases:\n\n{format_menu(results)}\n\n"
                'Reply "pick <number>" to select, or "search '
                f'{item}" to search the full catalog.'
            )
        else:
            message = (
                f'Found {len(results)} items for "{item}":\n\n{format_menu(results)}\n\n'
                'Reply "pick <number>" to add one.'
            )

        return ActionResult(
            success=True,
            message=message,
            data={"pending": True, "source": source.value, "results": results},
        )

    async def _try_add(
        self, query: str, result: SearchResult, source: SelectionSource, where: str
    ) -> Optional[ActionResult]:
        """Add one chosen result remotely, then mirror it locally.

        Returns:
            The success result, or None when the site did not take the item
        """
        if source is SelectionSource.MY_ITEMS:
            added = await self.client.add_from_my_items(query, result.index)
        else:
            added = await self.client.add_from_catalog(query, result.index)

        if not added:
            return None

        print(f"[Action] Added '{result.name}' ({source.value})")
        record = self._mirror("add", self.store.add_item, result.name, synced=True)
        return ActionResult(
            success=True,
            message=f'Added "{result.name}" {where}',
            data={"item": result.name, "source": source.value, "record_id": record.id if record else None},
        )

    def _mirror(self, what: str, write: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Apply a change to the local mirror.

        A local failure is logged and yields None. The remote change stands.
        """
        try:
            return write(*args, **kwargs)
        except sqlite3.Error as e:
            print(f"[Action] Local mirror {what} failed: {e}")
            return None

    # -------------------------------------------------------------------------
    # Pick
    # -------------------------------------------------------------------------

    def _take_selection(self, session_key: str, number: int) -> tuple[PendingSelection, SearchResult]:
        # Consumed even when the pick turns out invalid
        pending = self.pending.consume(session_key)
        if pending is None:
            raise SelectionError('No pending selection. Use "add <item>" to search first.')

        if not 1 <= number <= len(pending.candidates):
            raise SelectionError(f"Please pick a number between 1 and {len(pending.candidates)}")

        return pending, pending.candidates[number - 1]

    async def pick(self, session_key: str, number: int) -> ActionResult:
        """Resolve the user's choice from their last menu."""
        print(f"[Action] pick {number} for {session_key}")

        try:
            pending, chosen = self._take_selection(session_key, number)
        except SelectionError as e:
            return ActionResult(success=False, message=str(e))

        try:
            added = await self._try_add(pending.query, chosen, pending.source, "to your list")
        except Exception as e:
            print(f"[Action] pick {number} failed: {e}")
            return ActionResult(success=False, message=f"Failed to add item: {e}")

        if added is None:
            return ActionResult(success=False, message=f'Couldn\'t add "{chosen.name}". Please try again.')
        return added

    # -------------------------------------------------------------------------
    # Remove / list / clear
    # -------------------------------------------------------------------------

    async def remove(self, session_key: str, item: str) -> ActionResult:
        item = item.strip()
        print(f"[Action] remove '{item}' for {session_key}")

        try:
            removed_name = await self.client.remove_from_list(item)
        except Exception as e:
            print(f"[Action] remove '{item}' failed: {e}")
            return ActionResult(success=False, message=f'Failed to remove "{item}": {e}')

        if removed_name is None:
            return ActionResult(success=False, message=f'Couldn\'t find "{item}" in your list')

        self._mirror("remove", self.store.remove_item, removed_name)
        return ActionResult(
            success=True,
            message=f'Removed "{removed_name}" from your list',
            data={"item": removed_name},
        )

    async def show_list(self, session_key: str) -> ActionResult:
        """Show the live list, or the local mirror if the store is unreachable."""
        print(f"[Action] list for {session_key}")

        try:
            items = await self.client.list_items()
        except Exception as e:
            print(f"[Action] Live list unavailable, using cached copy: {e}")
            return self._cached_list()

        if not items:
            return ActionResult(success=True, message="Your shopping list is empty", data=[])

        lines = "\n".join(f"{i}. {item.display_name()}" for i, item in enumerate(items, start=1))
        return ActionResult(
            success=True,
            message=f"Your shopping list ({len(items)} items):\n\n{lines}",
            data=items,
        )

    def _cached_list(self) -> ActionResult:
        try:
            records = self.store.list_items()
        except sqlite3.Error as e:
            print(f"[Action] Cached list unavailable: {e}")
            return ActionResult(success=False, message="Couldn't load your shopping list. Please try again.")

        if not records:
            return ActionResult(success=True, message="(Cached) Your shopping list is empty", data=[], cached=True)

        lines = "\n".join(f"{i}. {record.name}" for i, record in enumerate(records, start=1))
        return ActionResult(
            success=True,
            message=f"(Cached) Your shopping list ({len(records)} items):\n\n{lines}",
            data=records,
            cached=True,
        )

    async def clear(self, session_key: str) -> ActionResult:
        print(f"[Action] clear list for {session_key}")

        try:
            cleared = await self.client.clear_list()
        except Exception as e:
            print(f"[Action] clear failed: {e}")
            return ActionResult(success=False, message=f"Failed to clear list: {e}")

        if not cleared:
            return ActionResult(success=False, message="Failed to clear the list")

        count = self._mirror("clear", self.store.clear_items)
        if count is None:
            return ActionResult(success=True, message="Cleared your shopping list", data={"count": None})

        return ActionResult(
            success=True,
            message=f"Cleared your shopping list ({count} items removed)",
            data={"count": count},
        )

    # -------------------------------------------------------------------------
    # Direct commands
    # -------------------------------------------------------------------------

    @staticmethod
    def help_message() -> str:
        return HELP_TEXT

    async def execute(self, session_key: str, text: str) -> ActionResult:
        """Parse ``text`` with the command grammar and run the operation."""
        command = parse_command(text)
        if command is None:
            return ActionResult(success=False, message=self.help_message())

        if command.operation == "help":
            return ActionResult(success=True, message=self.help_message())
        if command.operation == "pick":
            return await self.pick(session_key, int(command.argument))
        if command.operation == "clear":
            return await self.clear(session_key)
        if command.operation == "list":
            return await self.show_list(session_key)
        if command.operation == "search":
            return await self.search(session_key, command.argument)
        if command.operation == "remove":
            return await self.remove(session_key, command.argument)
        if command.operation == "add":
            return await self.add(session_key, command.argument)

        return ActionResult(success=False, message=self.help_message())
