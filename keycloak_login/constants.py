"""Shared constants for the Keycloak login flow.

Values match the options accepted by the Keycloak JavaScript adapter
(``flow``, ``responseMode``) so test suites can reuse their app settings.
"""

# Flow name -> OIDC response_type
FLOW_TYPES = {
    "standard": "code",
    "implicit": "id_token token",
    "hybrid": "code id_token token",
}
RESPONSE_MODES = ("fragment", "query")

# Defaults
DEFAULT_FLOW = "standard"
DEFAULT_RESPONSE_MODE = "fragment"
DEFAULT_USER = ""
DEFAULT_PASSWORD = ""
DEFAULT_ADDITIONAL_WAIT_MS = 0
DEFAULT_REGISTER_COMMANDS = True
DEFAULT_BLOCK_BEFORE_UNLOAD = True

SCOPE = "openid"
OPENID_CONNECT_PATH = "/realms/{realm}/protocol/openid-connect/{endpoint}"

# Names of the commands installed on a KeycloakBrowser
COMMAND_LOGIN = "keycloak_login"
COMMAND_VISIT = "keycloak_visit"
COMMAND_LOGOUT = "keycloak_logout"

# Environment variables read by FlowConfig.from_env
ENV_URL = "KEYCLOAK_URL"
ENV_REALM = "KEYCLOAK_REALM"
ENV_CLIENT_ID = "KEYCLOAK_CLIENT_ID"
ENV_REDIRECT_URI = "KEYCLOAK_REDIRECT_URI"
ENV_FLOW = "KEYCLOAK_FLOW"
ENV_RESPONSE_MODE = "KEYCLOAK_RESPONSE_MODE"
ENV_USER = "KEYCLOAK_USER"
ENV_PASSWORD = "KEYCLOAK_PASSWORD"
ENV_ADDITIONAL_WAIT = "KEYCLOAK_ADDITIONAL_WAIT"
ENV_REGISTER_COMMANDS = "KEYCLOAK_REGISTER_COMMANDS"
ENV_BLOCK_BEFORE_UNLOAD = "KEYCLOAK_BLOCK_BEFORE_UNLOAD"
ENV_STRICT_FORM = "KEYCLOAK_STRICT_FORM"
