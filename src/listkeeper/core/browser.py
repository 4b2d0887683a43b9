"""Shared browser session and persisted login contexts.

One Chromium process is shared by all automation. Each target site gets a
named BrowserContext whose cookies/localStorage are snapshotted to
``<state_dir>/<name>.json`` so a login survives restarts.
"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from listkeeper.core.config import BrowserConfig, load_config

Launcher = Callable[[], Awaitable[Browser]]


class SessionPool:
    """Owns the shared browser and every named context.

    Usage:
        pool = SessionPool.from_config()
        context = await pool.get_context("store")
        ...
        await pool.save_context_state("store")
        await pool.close_all()
    """

    def __init__(
        self,
        state_dir: str | Path,
        headless: bool = True,
        launch_args: list[str] | None = None,
        viewport: tuple[int, int] = (1280, 720),
        user_agent: str | None = None,
        launcher: Launcher | None = None,
    ):
        """Initialize the pool. Nothing is launched until first use.

        Args:
            state_dir: Directory holding one storage-state JSON per context
            headless: Run Chromium headless
            launch_args: Extra Chromium command line flags
            viewport: Page viewport as (width, height)
            user_agent: User agent for new contexts
            launcher: Coroutine factory returning a Browser. Defaults to
                launching Playwright's Chromium.
        """
        self.state_dir = Path(state_dir)
        self.headless = headless
        self.launch_args = list(launch_args or [])
        self.viewport = viewport
        self.user_agent = user_agent
        self._launcher = launcher or self._launch_chromium

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._launch_task: Optional[asyncio.Task] = None
        self._contexts: dict[str, BrowserContext] = {}
        self._context_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: BrowserConfig | None = None, **kwargs) -> "SessionPool":
        """Build a pool from the [browser] section of config.toml."""
        if config is None:
            config = load_config().browser
        return cls(
            state_dir=config.state_dir,
            headless=config.headless,
            launch_args=config.launch_args,
            viewport=(config.viewport_width, config.viewport_height),
            user_agent=config.user_agent,
            **kwargs,
        )

    def state_path(self, name: str) -> Path:
        return self.state_dir / f"{name}.json"

    @property
    def context_names(self) -> list[str]:
        return list(self._contexts)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def get_session(self) -> Browser:
        """Return the live browser, launching it if absent or disconnected.

        Concurrent callers during a cold start await the same launch task,
        so at most one process is started. A cancelled waiter leaves the
        launch running for the others. A launch failure propagates to every
        waiter and the next call tries again.
        """
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        if self._launch_task is None:
            self._launch_task = asyncio.ensure_future(self._launcher())
        task = self._launch_task

        try:
            browser = await asyncio.shield(task)
        finally:
            if self._launch_task is task and task.done():
                self._launch_task = None

        if self._browser is not browser:
            self._browser = browser
            browser.on("disconnected", self._on_disconnected)
        return browser

    async def _launch_chromium(self) -> Browser:
        print(f"[Browser] Launching Chromium (headless={self.headless})")
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=self.launch_args,
        )
        print("[Browser] Chromium launched")
        return browser

    def _on_disconnected(self, browser: Browser) -> None:
        if browser is not self._browser:
            return
        print("[Browser] Browser disconnected, dropping cached contexts")
        self._browser = None
        self._contexts.clear()

    # -------------------------------------------------------------------------
    # Contexts
    # -------------------------------------------------------------------------

    async def get_context(self, name: str) -> BrowserContext:
        """Return the named context, creating it on first use.

        Creation hydrates from the on-disk snapshot when one exists. Any
        hydration failure falls back to a fresh, logged-out context.
        """
        existing = self._contexts.get(name)
        if existing is not None:
            return existing

        async with self._context_lock:
            existing = self._contexts.get(name)
            if existing is not None:
                return existing

            browser = await self.get_session()
            context_kwargs = {
                "viewport": {"width": self.viewport[0], "height": self.viewport[1]},
            }
            if self.user_agent:
                context_kwargs["user_agent"] = self.user_agent

            context = None
            storage_path = self.state_path(name)
            if storage_path.exists():
                try:
                    context = await browser.new_context(storage_state=str(storage_path), **context_kwargs)
                    print(f"[Browser] Loaded saved state for context '{name}'")
                except Exception as e:
                    print(f"[Browser] Could not load state for '{name}' ({e}), starting fresh")

            if context is None:
                context = await browser.new_context(**context_kwargs)
                print(f"[Browser] Created fresh context '{name}'")

            self._contexts[name] = context
            return context

    async def save_context_state(self, name: str) -> None:
        """Snapshot a context's cookies and storage to disk."""
        context = self._contexts.get(name)
        if context is None:
            print(f"[Browser] Cannot save state: context '{name}' not found")
            return

        self.state_dir.mkdir(parents=True, exist_ok=True)
        storage_path = self.state_path(name)
        await context.storage_state(path=str(storage_path))
        print(f"[Browser] Saved state for '{name}' to {storage_path}")

    async def close_context(self, name: str) -> None:
        """Persist, then close and forget, one context."""
        if name not in self._contexts:
            return

        try:
            await self.save_context_state(name)
        except Exception as e:
            print(f"[Browser] Failed to save state for '{name}': {e}")

        context = self._contexts.pop(name)
        try:
            await context.close()
        except Exception as e:
            print(f"[Browser] Error closing context '{name}': {e}")
        print(f"[Browser] Closed context '{name}'")

    async def close_all(self) -> None:
        """Persist every open context, then release the browser.

        Each step is attempted independently so a context that errored
        mid-operation cannot block the others from being saved.
        """
        print("[Browser] Closing session pool")

        for name in list(self._contexts):
            await self.close_context(name)

        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                print(f"[Browser] Error closing browser: {e}")

        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                print(f"[Browser] Error stopping Playwright: {e}")

        print("[Browser] Session pool closed")
