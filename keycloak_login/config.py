"""Flow configuration resolved from caller options or environment variables."""

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .constants import (
    DEFAULT_ADDITIONAL_WAIT_MS,
    DEFAULT_BLOCK_BEFORE_UNLOAD,
    DEFAULT_FLOW,
    DEFAULT_PASSWORD,
    DEFAULT_REGISTER_COMMANDS,
    DEFAULT_RESPONSE_MODE,
    DEFAULT_USER,
    ENV_ADDITIONAL_WAIT,
    ENV_BLOCK_BEFORE_UNLOAD,
    ENV_CLIENT_ID,
    ENV_FLOW,
    ENV_PASSWORD,
    ENV_REALM,
    ENV_REDIRECT_URI,
    ENV_REGISTER_COMMANDS,
    ENV_RESPONSE_MODE,
    ENV_STRICT_FORM,
    ENV_URL,
    ENV_USER,
    FLOW_TYPES,
    OPENID_CONNECT_PATH,
)

# Option names used by the Keycloak JS adapter / cypress-style setups
_OPTION_ALIASES = {
    "redirectUri": "redirect_uri",
    "responseMode": "response_mode",
    "defaultUser": "default_user",
    "defaultPassword": "default_password",
    "additionalWait": "additional_wait_ms",
    "additional_wait": "additional_wait_ms",
    "registerCommands": "register_commands",
    "blockBeforeUnload": "block_before_unload",
    "strictFormDetection": "strict_form_detection",
}

_KNOWN_OPTIONS = (
    "redirect_uri",
    "flow",
    "response_mode",
    "default_user",
    "default_password",
    "additional_wait_ms",
    "register_commands",
    "block_before_unload",
    "strict_form_detection",
)


def _env_flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class FlowConfig:
    base_url: str
    realm: str
    client_id: str
    redirect_uri: str = ""
    response_mode: str = DEFAULT_RESPONSE_MODE
    flow: str = DEFAULT_FLOW
    default_user: str = DEFAULT_USER
    default_password: str = DEFAULT_PASSWORD
    additional_wait_ms: int = DEFAULT_ADDITIONAL_WAIT_MS
    register_commands: bool = DEFAULT_REGISTER_COMMANDS
    block_before_unload: bool = DEFAULT_BLOCK_BEFORE_UNLOAD
    strict_form_detection: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(
        cls,
        base_url: str,
        realm: str,
        client_id: str,
        options: Mapping[str, Any] | None = None,
    ) -> "FlowConfig":
        """Layer caller options over the defaults.

        Options are not validated: unknown keys end up in ``extra`` and an
        unrecognized ``flow`` only shows up through ``response_type``.
        """
        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in (options or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in _KNOWN_OPTIONS:
                known[name] = value
            else:
                extra[key] = value
        return cls(
            base_url=base_url,
            realm=realm,
            client_id=client_id,
            extra=extra,
            **known,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FlowConfig":
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get(ENV_URL, "http://keycloak:8080"),
            realm=env.get(ENV_REALM, "master"),
            client_id=env.get(ENV_CLIENT_ID, ""),
            redirect_uri=env.get(ENV_REDIRECT_URI, ""),
            flow=env.get(ENV_FLOW, DEFAULT_FLOW),
            response_mode=env.get(ENV_RESPONSE_MODE, DEFAULT_RESPONSE_MODE),
            default_user=env.get(ENV_USER, DEFAULT_USER),
            default_password=env.get(ENV_PASSWORD, DEFAULT_PASSWORD),
            additional_wait_ms=int(
                env.get(ENV_ADDITIONAL_WAIT) or DEFAULT_ADDITIONAL_WAIT_MS
            ),
            register_commands=_env_flag(
                env.get(ENV_REGISTER_COMMANDS), DEFAULT_REGISTER_COMMANDS
            ),
            block_before_unload=_env_flag(
                env.get(ENV_BLOCK_BEFORE_UNLOAD), DEFAULT_BLOCK_BEFORE_UNLOAD
            ),
            strict_form_detection=_env_flag(env.get(ENV_STRICT_FORM), False),
        )

    @property
    def response_type(self) -> str:
        return FLOW_TYPES.get(self.flow, FLOW_TYPES[DEFAULT_FLOW])

    def openid_connect_url(self, endpoint: str = "") -> str:
        """Address of an OpenID Connect endpoint (``auth``, ``logout``...) of the realm."""
        path = OPENID_CONNECT_PATH.format(realm=self.realm, endpoint=endpoint)
        return f"{self.base_url}{path}"
