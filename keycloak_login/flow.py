"""Keycloak login/logout over HTTP for end-to-end tests.

The flow emulates the browser redirect chain of an OIDC authorization
request just far enough to obtain a Keycloak session cookie:

1. GET the realm's ``auth`` endpoint without following redirects.
2. If Keycloak redirects back to the client, the session already exists.
3. Otherwise scrape the login form and POST the credentials to it.

The response of the last step carries the redirect target (with the
authorization code or tokens) that a browser can then be sent to.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from .config import FlowConfig
from .constants import COMMAND_LOGIN, COMMAND_LOGOUT, COMMAND_VISIT, SCOPE
from .errors import LoginFormNotFound, MissingRedirectError, ResponseStatusError
from .ids import IdFactory, secure_uuid
from .login_form import (
    LoginFormFound,
    LoginPageOutcome,
    NoLoginForm,
    resolve_login_page,
)
from .session import SessionState
from .transport import AiohttpTransport, FlowResponse, Transport

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    async def goto(self, url: str) -> Any: ...


@dataclass(frozen=True)
class AuthorizationRequest:
    url: str
    params: Mapping[str, str]


@dataclass(frozen=True)
class LoginResult:
    """Final response of a login, plus how it was reached."""

    response: FlowResponse
    outcome: LoginPageOutcome

    @property
    def redirected_to_url(self) -> str | None:
        return self.response.redirected_to_url

    @property
    def submitted_credentials(self) -> bool:
        return isinstance(self.outcome, LoginFormFound)


class KeycloakFlow:
    """Login, visit and logout against one Keycloak realm/client.

    Each instance owns its SessionState. Calls on one instance must not
    overlap: concurrent logins would interleave cookie updates.
    """

    def __init__(
        self,
        config: FlowConfig,
        transport: Transport | None = None,
        session: SessionState | None = None,
        id_factory: IdFactory = secure_uuid,
        navigator: Navigator | None = None,
    ):
        self.config = config
        self.session = session or SessionState()
        self.navigator = navigator
        self._transport = transport or AiohttpTransport()
        self._id_factory = id_factory

    @property
    def transport(self) -> Transport:
        return self._transport

    def build_authorization_request(self, redirect_page: str = "") -> AuthorizationRequest:
        cfg = self.config
        return AuthorizationRequest(
            url=cfg.openid_connect_url("auth"),
            params={
                "client_id": cfg.client_id,
                "redirect_uri": cfg.redirect_uri + redirect_page,
                "state": self._id_factory(),
                "nonce": self._id_factory(),
                "response_mode": cfg.response_mode,
                "response_type": cfg.response_type,
                "scope": SCOPE,
            },
        )

    async def login(
        self,
        redirect_page: str = "",
        username: str | None = None,
        password: str | None = None,
    ) -> LoginResult:
        """Authenticate and return the response holding the redirect target.

        Skips the credential POST when Keycloak already recognizes the
        session cookie. HTTP errors are raised as ResponseStatusError;
        transport errors propagate unchanged. Nothing is retried.
        """
        username = self.config.default_user if username is None else username
        password = self.config.default_password if password is None else password

        if not self.session.has_cookie and self.config.additional_wait_ms:
            await asyncio.sleep(self.config.additional_wait_ms / 1000)

        auth_request = self.build_authorization_request(redirect_page)
        response = await self._transport.request(
            "GET",
            auth_request.url,
            params=auth_request.params,
            headers=self.session.get_cookie_headers(),
            follow_redirects=False,
        )
        self.session.update_cookie(response)
        if not response.ok:
            raise ResponseStatusError(response)

        outcome = resolve_login_page(response)
        if not isinstance(outcome, LoginFormFound):
            if isinstance(outcome, NoLoginForm):
                if self.config.strict_form_detection:
                    raise LoginFormNotFound(response)
                logger.warning(
                    "No redirect and no login form from %s, assuming an existing session",
                    response.url,
                )
            else:
                logger.info("Keycloak session already active for %s", self.config.client_id)
            return LoginResult(response, outcome)

        submit = await self._transport.request(
            "POST",
            outcome.form_action_url,
            form={"username": username, "password": password},
            headers=self.session.get_cookie_headers(),
            follow_redirects=False,
        )
        self.session.update_cookie(submit)
        if not submit.ok:
            raise ResponseStatusError(submit)
        logger.info("Logged in to realm %s as %r", self.config.realm, username)
        return LoginResult(submit, outcome)

    async def visit(
        self,
        page: str = "",
        username: str | None = None,
        password: str | None = None,
    ) -> Any:
        """Log in, then send the navigator to the redirect target."""
        if self.navigator is None:
            raise MissingRedirectError("No navigator configured to visit the redirect target")
        result = await self.login(page, username, password)
        target = result.redirected_to_url
        if not target:
            raise MissingRedirectError(
                f"Login response from {result.response.url} has no redirect target"
            )
        return await self.navigator.goto(target)

    async def logout(self) -> FlowResponse:
        """End the Keycloak session.

        Best effort: the stored cookie is dropped even when the request
        fails, and non-2xx responses are returned instead of raised.
        """
        try:
            response = await self._transport.request(
                "GET",
                self.config.openid_connect_url("logout"),
                params={"redirect_uri": self.config.redirect_uri},
                headers=self.session.get_cookie_headers(),
            )
        finally:
            self.session.reset_cookie()
        if not response.ok:
            logger.warning("Logout returned HTTP %s from %s", response.status, response.url)
        else:
            logger.info("Logged out of realm %s", self.config.realm)
        return response

    def attach_browser(self, browser) -> None:
        """Use a KeycloakBrowser as navigator and install the flow's commands on it."""
        self.navigator = browser
        browser.configure_unload_guard(self.config.block_before_unload)
        if self.config.register_commands:
            browser.add_command(COMMAND_LOGIN, self.login)
            browser.add_command(COMMAND_VISIT, self.visit)
            browser.add_command(COMMAND_LOGOUT, self.logout)

    async def aclose(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "KeycloakFlow":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def create_flow(
    base_url: str,
    realm: str,
    client_id: str,
    options: Mapping[str, Any] | None = None,
    *,
    transport: Transport | None = None,
    browser=None,
    id_factory: IdFactory | None = None,
) -> KeycloakFlow:
    """Build a KeycloakFlow from caller options layered over the defaults.

    When a KeycloakBrowser is given it becomes the navigator for ``visit``,
    supplies the transport unless one is passed, and receives the
    ``keycloak_login``/``keycloak_visit``/``keycloak_logout`` commands when
    ``register_commands`` is enabled. Build the flow before starting the
    browser so ``block_before_unload`` applies to its context.
    """
    config = FlowConfig.from_options(base_url, realm, client_id, options)
    if transport is None and browser is not None:
        transport = browser.transport()
    flow = KeycloakFlow(
        config,
        transport=transport,
        id_factory=id_factory or secure_uuid,
    )
    if browser is not None:
        flow.attach_browser(browser)
    return flow
