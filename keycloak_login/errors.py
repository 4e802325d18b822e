"""Exceptions raised by the Keycloak login flow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .transport import FlowResponse


class KeycloakFlowError(Exception):
    """Base class for login flow errors."""


class ResponseStatusError(KeycloakFlowError):
    """The identity provider answered with a 4xx/5xx status."""

    def __init__(self, response: "FlowResponse"):
        self.response = response
        super().__init__(
            f"{response.method} {response.url} returned HTTP {response.status}"
        )


class LoginFormNotFound(KeycloakFlowError):
    """Authorization response had neither a redirect nor a login form."""

    def __init__(self, response: "FlowResponse"):
        self.response = response
        super().__init__(
            f"No redirect and no <form> in authorization response from {response.url}"
        )


class MissingRedirectError(KeycloakFlowError):
    """Login finished without a redirect target to navigate to."""
