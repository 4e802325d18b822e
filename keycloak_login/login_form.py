"""Decide whether an authorization response still needs credentials."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

from selectolax.lexbor import LexborHTMLParser

from .transport import FlowResponse


@dataclass(frozen=True)
class AlreadyAuthenticated:
    """The identity provider redirected straight back to the client."""

    redirected_to_url: str


@dataclass(frozen=True)
class LoginFormFound:
    form_action_url: str


@dataclass(frozen=True)
class NoLoginForm:
    """Neither a redirect nor a form.

    Historically treated as "already logged in"; kept separate so callers
    can tell it apart from a real redirect.
    """


LoginPageOutcome = AlreadyAuthenticated | LoginFormFound | NoLoginForm


def find_form_action(html: str, base_url: str | None = None) -> str | None:
    """Return the first form's action URL, or None when the page has no form.

    Relative actions are resolved against ``base_url``; a form without an
    action submits to the page itself, as a browser would.
    """
    if not html:
        return None
    form = LexborHTMLParser(html).css_first("form")
    if form is None:
        return None
    action = (form.attributes.get("action") or "").strip()
    if base_url:
        return urljoin(base_url, action)
    return action


def resolve_login_page(response: FlowResponse) -> LoginPageOutcome:
    redirected = response.redirected_to_url
    if redirected:
        return AlreadyAuthenticated(redirected)
    action = find_form_action(response.body, response.url)
    if action is None:
        return NoLoginForm()
    return LoginFormFound(action)
