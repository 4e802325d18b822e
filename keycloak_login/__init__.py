"""Drive Keycloak's OIDC login and logout over HTTP from end-to-end tests."""

from .config import FlowConfig
from .errors import (
    KeycloakFlowError,
    LoginFormNotFound,
    MissingRedirectError,
    ResponseStatusError,
)
from .flow import AuthorizationRequest, KeycloakFlow, LoginResult, create_flow
from .ids import secure_uuid, seeded_uuid_factory
from .login_form import (
    AlreadyAuthenticated,
    LoginFormFound,
    LoginPageOutcome,
    NoLoginForm,
    find_form_action,
    resolve_login_page,
)
from .session import SessionState
from .transport import AiohttpTransport, FlowResponse, PlaywrightTransport, Transport

__all__ = [
    "AiohttpTransport",
    "AlreadyAuthenticated",
    "AuthorizationRequest",
    "FlowConfig",
    "FlowResponse",
    "KeycloakFlow",
    "KeycloakFlowError",
    "LoginFormFound",
    "LoginFormNotFound",
    "LoginPageOutcome",
    "LoginResult",
    "MissingRedirectError",
    "NoLoginForm",
    "PlaywrightTransport",
    "ResponseStatusError",
    "SessionState",
    "Transport",
    "create_flow",
    "find_form_action",
    "resolve_login_page",
    "secure_uuid",
    "seeded_uuid_factory",
]
