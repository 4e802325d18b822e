"""Playwright browser wrapper for Keycloak-backed E2E tests."""

from __future__ import annotations

import logging
from typing import Any, Callable

from playwright.async_api import Browser, BrowserContext, Page

from .transport import PlaywrightTransport

logger = logging.getLogger(__name__)


class KeycloakBrowser:
    """Wraps a Playwright BrowserContext as a single 'device'.

    Each KeycloakBrowser has its own isolated browser context (cookies,
    storage). It is the navigator used by ``KeycloakFlow.visit`` and holds
    the commands a flow registers on it, callable as attributes
    (``await kc_browser.keycloak_login("/home")``).
    """

    # Keycloak's pages register beforeunload handlers that can stall
    # automated navigation. Drop listener registration for that event and
    # turn the onbeforeunload property into a no-op.
    _BEFORE_UNLOAD_GUARD = """
    (() => {
        const original = EventTarget.prototype.addEventListener;
        EventTarget.prototype.addEventListener = function (type, ...rest) {
            if (type === 'beforeunload') {
                return;
            }
            return original.call(this, type, ...rest);
        };
        Object.defineProperty(window, 'onbeforeunload', {
            get: function () {},
            set: function () {},
        });
    })();
    """

    def __init__(
        self,
        browser: Browser,
        base_url: str,
        name: str = "default",
        block_before_unload: bool = True,
    ):
        self._browser = browser
        self._base_url = base_url.rstrip("/")
        self._name = name
        self._commands: dict[str, Callable[..., Any]] = {}
        self.block_before_unload = block_before_unload
        self.context: BrowserContext | None = None
        self.page: Page | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def request(self):
        """APIRequestContext of the browser context, for PlaywrightTransport."""
        if self.context is None:
            raise RuntimeError(f"Browser '{self._name}' is not started")
        return self.context.request

    def transport(self) -> PlaywrightTransport:
        return PlaywrightTransport(self)

    def configure_unload_guard(self, enabled: bool) -> None:
        if self.context is not None and enabled != self.block_before_unload:
            logger.warning(
                "Browser '%s' already started, beforeunload setting applies to new contexts only",
                self._name,
            )
        self.block_before_unload = enabled

    def add_command(self, name: str, fn: Callable[..., Any]) -> None:
        self._commands[name] = fn

    @property
    def commands(self) -> dict[str, Callable[..., Any]]:
        return dict(self._commands)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        commands = self.__dict__.get("_commands", {})
        if name in commands:
            return commands[name]
        raise AttributeError(f"{type(self).__name__!r} has no attribute or command {name!r}")

    async def start(self) -> "KeycloakBrowser":
        self.context = await self._browser.new_context(
            base_url=self._base_url,
            ignore_https_errors=True,
        )
        if self.block_before_unload:
            await self.context.add_init_script(self._BEFORE_UNLOAD_GUARD)
        self.page = await self.context.new_page()
        return self

    async def goto(self, url: str):
        """Navigate the page to an absolute URL or a path under base_url."""
        if self.page is None:
            raise RuntimeError(f"Browser '{self._name}' is not started")
        return await self.page.goto(url)

    async def close(self) -> None:
        if self.context:
            await self.context.close()
            self.context = None
            self.page = None

    async def __aenter__(self) -> "KeycloakBrowser":
        return await self.start()

    async def __aexit__(self, *args) -> None:
        await self.close()
