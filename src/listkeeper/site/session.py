"""Authenticated page access for the store.

Every store operation runs through ``AuthenticatedSession.with_page``, which
guarantees a logged-in page, serializes callers on that single reused page,
and snapshots the login context after each successful operation.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, TypeVar

from listkeeper.core.errors import AuthenticationError
from listkeeper.site.auth import StoreCredentials, is_logged_in, login
from listkeeper.site.selectors import StoreUrls

if TYPE_CHECKING:
    from playwright.async_api import Page

    from listkeeper.core.browser import SessionPool

T = TypeVar("T")


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class AuthenticatedSession:
    """One logged-in page on one store context.

    Authentication is checked on every new page and never carried over from
    a previous page. A page whose operation raised is closed and replaced on
    the next call.
    """

    def __init__(
        self,
        pool: "SessionPool",
        credentials: StoreCredentials,
        urls: StoreUrls | None = None,
        context_name: str = "store",
        navigation_timeout_ms: int = 30000,
        selector_timeout_ms: int = 10000,
    ):
        self._pool = pool
        self._credentials = credentials
        self.urls = urls or StoreUrls()
        self.context_name = context_name
        self.navigation_timeout_ms = navigation_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms

        self.state = AuthState.UNAUTHENTICATED
        self._page: Optional["Page"] = None
        self._lock = asyncio.Lock()

    async def _acquire_page(self) -> "Page":
        if self._page is not None and not self._page.is_closed():
            return self._page

        print(f"[Session] Opening new page on context '{self.context_name}'")
        self._page = None
        self.state = AuthState.UNAUTHENTICATED

        context = await self._pool.get_context(self.context_name)
        page = await context.new_page()

        try:
            if not await is_logged_in(page, self.urls, timeout_ms=self.navigation_timeout_ms):
                self.state = AuthState.AUTHENTICATING
                ok = await login(
                    page,
                    self._credentials,
                    self.urls,
                    navigation_timeout_ms=self.navigation_timeout_ms,
                    selector_timeout_ms=self.selector_timeout_ms,
                )
                if not ok:
                    raise AuthenticationError("Failed to authenticate with the store")
        except BaseException:
            self.state = AuthState.UNAUTHENTICATED
            await self._close_quietly(page)
            raise

        self.state = AuthState.AUTHENTICATED
        self._page = page
        await self._pool.save_context_state(self.context_name)
        return page

    async def with_page(self, operation: Callable[["Page"], Awaitable[T]]) -> T:
        """Run ``operation`` against the authenticated page.

        Raises:
            AuthenticationError: If the page could not be logged in
            Exception: Whatever ``operation`` raised; the page is discarded first
        """
        async with self._lock:
            page = await self._acquire_page()
            try:
                result = await operation(page)
            except BaseException as e:
                print(f"[Session] Page operation failed, discarding page: {e}")
                await self.discard_page()
                raise

            await self._pool.save_context_state(self.context_name)
            return result

    async def discard_page(self) -> None:
        page, self._page = self._page, None
        self.state = AuthState.UNAUTHENTICATED
        if page is not None:
            await self._close_quietly(page)

    async def close(self) -> None:
        async with self._lock:
            await self.discard_page()

    @staticmethod
    async def _close_quietly(page: "Page") -> None:
        try:
            if not page.is_closed():
                await page.close()
        except Exception as e:
            print(f"[Session] Error closing page: {e}")
