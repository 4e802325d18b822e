"""HTTP transports used to talk to the identity provider.

The flow only needs one operation: send a request (optionally without
following redirects) and get back a fully read response. Two
implementations are provided: a standalone aiohttp one, and one backed by
a Playwright browser context so the browser sees the same cookies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol
from urllib.parse import urljoin

import aiohttp

logger = logging.getLogger(__name__)

_MAX_LOGGED_BODY = 2000
_MASKED_FIELDS = ("password",)


@dataclass(frozen=True)
class FlowResponse:
    """A completed HTTP response, body already read.

    Header names are lower-cased. ``set_cookies`` keeps every Set-Cookie
    value in the order received.
    """

    status: int
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    set_cookies: tuple[str, ...] = ()
    body: str = ""
    method: str = "GET"

    @property
    def ok(self) -> bool:
        return self.status < 400

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400 and bool(self.location)

    @property
    def location(self) -> str | None:
        return self.headers.get("location") or None

    @property
    def redirected_to_url(self) -> str | None:
        """Absolute target of a 3xx response, None for anything else."""
        if not self.is_redirect:
            return None
        return urljoin(self.url, self.location)


class Transport(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> FlowResponse: ...

    async def close(self) -> None: ...


def _mask(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: ("***" if k in _MASKED_FIELDS else v) for k, v in data.items()}


def _log_request(
    method: str,
    url: str,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    data: Mapping[str, Any] | None = None,
) -> None:
    logger.debug(">>> %s %s", method, url)
    if params:
        logger.debug("    params: %s", dict(params))
    if headers:
        logger.debug("    headers: %s", list(headers))
    if data:
        logger.debug("    body: %s", _mask(data))


def _log_response(response: FlowResponse) -> None:
    logger.debug("<<< %s %s", response.status, response.url)
    logger.debug("    headers: %s", dict(response.headers))
    if response.body:
        if len(response.body) > _MAX_LOGGED_BODY:
            logger.debug(
                "    body: %s... (%d bytes total)",
                response.body[:_MAX_LOGGED_BODY],
                len(response.body),
            )
        else:
            logger.debug("    body: %s", response.body)


class AiohttpTransport:
    """Transport over a private aiohttp session.

    The session uses a DummyCookieJar: cookies only travel through the
    explicit ``Cookie`` header built from SessionState.
    """

    def __init__(self, timeout: aiohttp.ClientTimeout | None = None):
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            kwargs: dict[str, Any] = {"cookie_jar": aiohttp.DummyCookieJar()}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._session = aiohttp.ClientSession(**kwargs)
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> FlowResponse:
        session = await self._ensure_session()
        _log_request(method, url, params=params, headers=headers, data=form)
        async with session.request(
            method,
            url,
            params=params,
            data=form,
            headers=headers,
            allow_redirects=follow_redirects,
        ) as resp:
            body = await resp.text(errors="replace")
            response = FlowResponse(
                status=resp.status,
                url=str(resp.url),
                headers={k.lower(): v for k, v in resp.headers.items()},
                set_cookies=tuple(resp.headers.getall("Set-Cookie", ())),
                body=body,
                method=method,
            )
        _log_response(response)
        return response

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()


class PlaywrightTransport:
    """Transport over a Playwright ``APIRequestContext``.

    ``owner`` is anything exposing ``.request`` (a BrowserContext or a
    KeycloakBrowser); it is read on every call so the transport can be
    built before the context exists. Requests made through
    ``BrowserContext.request`` share the browser context's cookie storage,
    so pages opened afterwards are already signed in to the identity
    provider.
    """

    def __init__(self, owner):
        self._owner = owner

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> FlowResponse:
        _log_request(method, url, params=params, headers=headers, data=form)
        resp = await self._owner.request.fetch(
            url,
            method=method,
            params=dict(params) if params else None,
            form=dict(form) if form else None,
            headers=dict(headers) if headers else None,
            max_redirects=None if follow_redirects else 0,
            fail_on_status_code=False,
        )
        try:
            headers_array = resp.headers_array
            body = await resp.text()
            response = FlowResponse(
                status=resp.status,
                url=resp.url,
                headers={h["name"].lower(): h["value"] for h in headers_array},
                set_cookies=tuple(
                    h["value"]
                    for h in headers_array
                    if h["name"].lower() == "set-cookie"
                ),
                body=body,
                method=method,
            )
        finally:
            await resp.dispose()
        _log_response(response)
        return response

    async def close(self) -> None:
        # The request context belongs to the browser context.
        pass
