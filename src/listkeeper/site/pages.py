"""Page routines for the store's shopping list, past purchases and catalog.

Each routine drives an already-authenticated Playwright page. "Nothing
matched" outcomes are returned as empty lists / False / None. A broken page
(selector timeout, navigation failure, closed target) raises
AutomationError so the caller discards the page.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from listkeeper.core.config import BrowserTimeoutConfig
from listkeeper.core.errors import AutomationError
from listkeeper.site.models import ListItem, SearchResult
from listkeeper.site.selectors import SELECTORS, StoreUrls

if TYPE_CHECKING:
    from playwright.async_api import Page

DEFAULT_TIMEOUTS = BrowserTimeoutConfig()

_MY_ITEMS_JS = """
(elements, args) => elements
    .map((el, idx) => {
        const nameEl = el.querySelector(args.nameSelector);
        return { name: (nameEl && nameEl.textContent || '').trim(), index: idx };
    })
    .filter(item => item.name && item.name.toLowerCase().includes(args.query.toLowerCase()))
    .slice(0, args.limit)
"""

_PRODUCT_CARDS_JS = """
(elements, args) => elements.slice(0, args.limit).map((el, idx) => {
    const text = (sel) => {
        const found = el.querySelector(sel);
        return found && found.textContent ? found.textContent.trim() : null;
    };
    return {
        name: text(args.nameSelector) || 'Unknown product',
        price: text(args.priceSelector),
        size: text(args.sizeSelector),
        index: idx,
    };
})
"""

_LIST_ITEMS_JS = """
(elements, args) => elements.map(el => {
    const text = (sel) => {
        const found = el.querySelector(sel);
        return found && found.textContent ? found.textContent.trim() : null;
    };
    return {
        name: text(args.nameSelector) || 'Unknown item',
        price: text(args.priceSelector),
        size: text(args.sizeSelector),
    };
})
"""


@asynccontextmanager
async def automation_step(description: str):
    """Translate Playwright failures inside the block into AutomationError."""
    try:
        yield
    except PlaywrightError as e:
        raise AutomationError(f"{description}: {e}") from e


async def _goto(page: "Page", url: str, timeouts: BrowserTimeoutConfig) -> None:
    await page.goto(url, wait_until="networkidle", timeout=timeouts.navigation_ms)


# =============================================================================
# Shopping list
# =============================================================================


async def navigate_to_list(page: "Page", urls: StoreUrls, timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS) -> None:
    async with automation_step("Opening shopping list"):
        await _goto(page, urls.shopping_list, timeouts)
        list_selectors = SELECTORS["list"]
        await page.wait_for_selector(
            f"{list_selectors['container']}, {list_selectors['empty_message']}",
            timeout=timeouts.selector_ms,
        )


async def get_list_items(
    page: "Page", urls: StoreUrls, timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS
) -> list[ListItem]:
    """Read every entry on the live shopping list."""
    await navigate_to_list(page, urls, timeouts)

    list_selectors = SELECTORS["list"]
    async with automation_step("Reading shopping list"):
        raw_items = await page.eval_on_selector_all(
            list_selectors["item"],
            _LIST_ITEMS_JS,
            {
                "nameSelector": list_selectors["item_name"],
                "priceSelector": list_selectors["item_price"],
                "sizeSelector": list_selectors["item_size"],
            },
        )

    items = [ListItem(name=raw["name"], price=raw.get("price"), size=raw.get("size")) for raw in raw_items]
    print(f"[Store] Shopping list has {len(items)} items")
    return items


def choose_list_match(names: list[str], query: str) -> int | None:
    """Pick which list entry a remove request refers to.

    An exact (case-insensitive) name wins. Otherwise the first entry, in
    list order, containing the query as a substring.
    """
    wanted = query.strip().lower()
    if not wanted:
        return None

    lowered = [name.strip().lower() for name in names]
    for i, name in enumerate(lowered):
        if name == wanted:
            return i
    for i, name in enumerate(lowered):
        if wanted in name:
            return i
    return None


async def remove_item_from_list(
    page: "Page", urls: StoreUrls, item_name: str, timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS
) -> str | None:
    """Remove the entry matching ``item_name``.

    Returns:
        The removed entry's displayed name, or None if nothing matched
    """
    await navigate_to_list(page, urls, timeouts)

    list_selectors = SELECTORS["list"]
    async with automation_step(f"Removing '{item_name}'"):
        elements = await page.query_selector_all(list_selectors["item"])
        names = []
        for element in elements:
            name_el = await element.query_selector(list_selectors["item_name"])
            names.append((await name_el.text_content() or "").strip() if name_el else "")

        match = choose_list_match(names, item_name)
        if match is None:
            print(f"[Store] '{item_name}' not found on shopping list")
            return None

        remove_button = await elements[match].query_selector(list_selectors["remove_button"])
        if remove_button is None:
            print(f"[Store] No remove button for '{names[match]}'")
            return None

        await remove_button.click()
        await page.wait_for_timeout(1000)

    print(f"[Store] Removed '{names[match]}'")
    return names[match]


async def clear_list(page: "Page", urls: StoreUrls, timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS) -> bool:
    """Empty the shopping list, via "Clear All" when the site offers it."""
    await navigate_to_list(page, urls, timeouts)

    list_selectors = SELECTORS["list"]
    async with automation_step("Clearing shopping list"):
        clear_button = await page.query_selector(list_selectors["clear_all_button"])
        if clear_button is not None:
            await clear_button.click()
            confirm_button = await page.query_selector(list_selectors["confirm_button"])
            if confirm_button is not None:
                await confirm_button.click()
            await page.wait_for_timeout(timeouts.settle_ms)
            print("[Store] Shopping list cleared")
            return True

        remove_buttons = await page.query_selector_all(list_selectors["remove_button"])
        for button in remove_buttons:
            await button.click()
            await page.wait_for_timeout(500)

    print(f"[Store] Shopping list cleared item by item ({len(remove_buttons)} removed)")
    return True


# =============================================================================
# Past purchases ("My Items")
# =============================================================================


async def _open_my_items(page: "Page", urls: StoreUrls, query: str, timeouts: BrowserTimeoutConfig) -> None:
    await _goto(page, urls.my_items, timeouts)
    search_input = await page.query_selector(SELECTORS["my_items"]["search_input"])
    if search_input is not None:
        await search_input.fill(query)
        await page.keyboard.press("Enter")
        await page.wait_for_timeout(timeouts.settle_ms)


async def search_my_items(
    page: "Page",
    urls: StoreUrls,
    query: str,
    limit: int = 5,
    timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS,
) -> list[SearchResult]:
    """Search previously purchased items for names containing ``query``."""
    print(f"[Store] Searching past purchases for '{query}'")
    my_items = SELECTORS["my_items"]

    async with automation_step(f"Searching past purchases for '{query}'"):
        await _open_my_items(page, urls, query, timeouts)
        raw_items = await page.eval_on_selector_all(
            my_items["item"],
            _MY_ITEMS_JS,
            {"nameSelector": my_items["item_name"], "query": query, "limit": limit},
        )

    results = [SearchResult(name=raw["name"], index=raw["index"]) for raw in raw_items]
    print(f"[Store] {len(results)} past purchases match '{query}'")
    return results


async def add_my_item_to_list(
    page: "Page",
    urls: StoreUrls,
    query: str,
    index: int,
    timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS,
) -> bool:
    """Re-run the past purchases search for ``query`` and add the item at ``index``."""
    my_items = SELECTORS["my_items"]

    async with automation_step(f"Adding past purchase #{index} for '{query}'"):
        await _open_my_items(page, urls, query, timeouts)
        elements = await page.query_selector_all(my_items["item"])
        if index >= len(elements):
            print(f"[Store] Past purchase index {index} out of range ({len(elements)} shown)")
            return False

        add_button = await elements[index].query_selector(my_items["add_to_list_button"])
        if add_button is None:
            print("[Store] No 'Add to List' button on past purchase")
            return False

        await add_button.click()
        await page.wait_for_timeout(1500)

    print("[Store] Past purchase added to list")
    return True


# =============================================================================
# Catalog
# =============================================================================


async def search_products(
    page: "Page",
    urls: StoreUrls,
    query: str,
    limit: int = 5,
    timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS,
) -> list[SearchResult]:
    """Search the full catalog and return the top ``limit`` product cards."""
    print(f"[Store] Searching catalog for '{query}'")
    search = SELECTORS["search"]

    async with automation_step(f"Searching catalog for '{query}'"):
        await _goto(page, urls.search(query), timeouts)

        if await page.query_selector(search["no_results"]):
            print(f"[Store] No catalog results for '{query}'")
            return []

        await page.wait_for_selector(search["product_card"], timeout=timeouts.selector_ms)
        raw_items = await page.eval_on_selector_all(
            search["product_card"],
            _PRODUCT_CARDS_JS,
            {
                "nameSelector": search["product_name"],
                "priceSelector": search["product_price"],
                "sizeSelector": search["product_size"],
                "limit": limit,
            },
        )

    results = [
        SearchResult(name=raw["name"], index=raw["index"], price=raw.get("price"), size=raw.get("size"))
        for raw in raw_items
    ]
    print(f"[Store] {len(results)} catalog results for '{query}'")
    return results


async def add_search_result_to_list(
    page: "Page",
    urls: StoreUrls,
    query: str,
    index: int,
    timeouts: BrowserTimeoutConfig = DEFAULT_TIMEOUTS,
) -> bool:
    """Re-run the catalog search for ``query`` and add the card at ``index``."""
    search = SELECTORS["search"]

    async with automation_step(f"Adding catalog result #{index} for '{query}'"):
        await _goto(page, urls.search(query), timeouts)
        await page.wait_for_selector(search["product_card"], timeout=timeouts.selector_ms)

        cards = await page.query_selector_all(search["product_card"])
        if index >= len(cards):
            print(f"[Store] Catalog index {index} out of range ({len(cards)} shown)")
            return False

        card = cards[index]
        add_button = await card.query_selector(search["add_to_list_button"])
        if add_button is None:
            # Button lives on the product detail page for some cards
            await card.click()
            await page.wait_for_timeout(1500)
            add_button = await page.query_selector(search["add_to_list_button"])
            if add_button is None:
                print("[Store] Could not find 'Add to List' button")
                return False

        await add_button.click()
        await page.wait_for_timeout(timeouts.settle_ms)

    print("[Store] Catalog item added to list")
    return True
