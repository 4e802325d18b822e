"""Session cookie captured from identity provider responses."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .transport import FlowResponse


class SessionState:
    """Holds the Keycloak session cookie for one flow.

    Not shared between flows and not locked: callers are expected to run
    login/logout one at a time against a given instance.
    """

    def __init__(self) -> None:
        self._cookie: str | None = None

    @property
    def cookie(self) -> str | None:
        return self._cookie

    @property
    def has_cookie(self) -> bool:
        return bool(self._cookie)

    def update_cookie(self, response: "FlowResponse") -> None:
        """Replace the stored cookie with the response's Set-Cookie values, if any."""
        if response.set_cookies:
            self._cookie = ";".join(response.set_cookies)

    def get_cookie_headers(self) -> dict[str, str]:
        return {"Cookie": self._cookie} if self._cookie else {}

    def reset_cookie(self) -> None:
        self._cookie = None
