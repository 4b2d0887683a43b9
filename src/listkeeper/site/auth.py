"""Login probe and form login for the store.

The store keeps its session in cookies/localStorage, so once a context has
logged in the saved storage state is usually enough. These helpers decide
whether a fresh page is authenticated and log in when it is not.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from listkeeper.site.selectors import SELECTORS, StoreUrls, is_login_url

if TYPE_CHECKING:
    from playwright.async_api import Page


@dataclass
class StoreCredentials:
    """Store account login.

    Attributes:
        email: Account email address
        password: Account password
    """

    email: str
    password: str

    def __repr__(self) -> str:
        return f"StoreCredentials(email={self.email!r}, password='***')"


async def is_logged_in(page: "Page", urls: StoreUrls, timeout_ms: int = 30000) -> bool:
    """Probe login state by opening the (protected) shopping list.

    A redirect to the sign-in flow means logged out. The account menu or the
    list container means logged in. Anything else is treated as logged out.
    """
    try:
        await page.goto(urls.shopping_list, wait_until="networkidle", timeout=timeout_ms)

        if is_login_url(page.url):
            print("[Auth] Not logged in: redirected to sign-in")
            return False

        if await page.query_selector(SELECTORS["nav"]["account_menu"]):
            print("[Auth] Logged in: account menu found")
            return True

        if await page.query_selector(SELECTORS["list"]["container"]):
            print("[Auth] Logged in: shopping list found")
            return True

        print("[Auth] Login status unclear, assuming logged out")
        return False

    except Exception as e:
        print(f"[Auth] Error checking login status: {e}")
        return False


async def login(
    page: "Page",
    credentials: StoreCredentials,
    urls: StoreUrls,
    navigation_timeout_ms: int = 30000,
    selector_timeout_ms: int = 10000,
) -> bool:
    """Submit the sign-in form.

    Returns:
        True if the browser left the sign-in flow after submitting
    """
    login_selectors = SELECTORS["login"]

    try:
        print("[Auth] Logging in to the store...")
        await page.goto(urls.login, wait_until="networkidle", timeout=navigation_timeout_ms)
        await page.wait_for_selector(login_selectors["email_input"], timeout=selector_timeout_ms)

        await page.fill(login_selectors["email_input"], credentials.email)
        await page.fill(login_selectors["password_input"], credentials.password)

        async with page.expect_navigation(wait_until="networkidle", timeout=navigation_timeout_ms):
            await page.click(login_selectors["submit_button"])

        if is_login_url(page.url):
            error_el = await page.query_selector(SELECTORS["common"]["error_message"])
            if error_el:
                error_text = (await error_el.text_content() or "").strip()
                print(f"[Auth] Login failed: {error_text}")
            else:
                print("[Auth] Login failed: still on sign-in page")
            return False

        print("[Auth] Login successful!")
        return True

    except Exception as e:
        print(f"[Auth] Login error: {e}")
        return False
