"""Blocking access to a KeycloakFlow from sync test code.

Playwright's sync API keeps a background event loop running, which prevents
asyncio.run() from working in the same thread. Calls are run in a separate
thread with their own event loop instead.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Awaitable, Callable

from .errors import MissingRedirectError
from .flow import KeycloakFlow, LoginResult
from .transport import FlowResponse


def run_async(coro, timeout: float = 60):
    """Run an async coroutine from sync code, even when an event loop exists."""
    result = [None]
    error = [None]

    def _target():
        try:
            result[0] = asyncio.run(coro)
        except BaseException as e:
            error[0] = e

    t = threading.Thread(target=_target)
    t.start()
    t.join(timeout=timeout)

    if t.is_alive():
        raise TimeoutError(f"Async operation timed out after {timeout}s")
    if error[0] is not None:
        raise error[0]
    return result[0]


class SyncKeycloakFlow:
    """Sync facade over KeycloakFlow.

    ``page`` is a sync Playwright Page used by ``visit``. Every call gets a
    fresh event loop, so the flow's transport is closed at the end of each
    call and reopened by the next one.
    """

    def __init__(self, flow: KeycloakFlow, page=None, timeout: float = 60):
        self.flow = flow
        self.page = page
        self._timeout = timeout

    def _run(self, call: Callable[[], Awaitable[Any]]):
        async def _call():
            try:
                return await call()
            finally:
                await self.flow.aclose()

        return run_async(_call(), timeout=self._timeout)

    def login(
        self,
        redirect_page: str = "",
        username: str | None = None,
        password: str | None = None,
    ) -> LoginResult:
        return self._run(lambda: self.flow.login(redirect_page, username, password))

    def logout(self) -> FlowResponse:
        return self._run(self.flow.logout)

    def visit(
        self,
        page: str = "",
        username: str | None = None,
        password: str | None = None,
    ):
        if self.page is None:
            raise MissingRedirectError("No page configured to visit the redirect target")
        result = self.login(page, username, password)
        if not result.redirected_to_url:
            raise MissingRedirectError(
                f"Login response from {result.response.url} has no redirect target"
            )
        return self.page.goto(result.redirected_to_url)
