"""pytest plugin exposing the Keycloak flow as fixtures.

Configuration comes from KEYCLOAK_* environment variables. When no
KEYCLOAK_REDIRECT_URI is set, the run's ``--base-url`` (pytest-base-url /
pytest-playwright) is used as redirect URI.
"""

import dataclasses

import pytest
import pytest_asyncio

from .config import FlowConfig
from .flow import KeycloakFlow


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "keycloak: test logs in through the Keycloak login flow"
    )


@pytest.fixture
def keycloak_config(request) -> FlowConfig:
    cfg = FlowConfig.from_env()
    if not cfg.redirect_uri:
        base_url = request.config.getoption("base_url", default=None)
        if base_url:
            cfg = dataclasses.replace(cfg, redirect_uri=base_url)
    return cfg


@pytest_asyncio.fixture
async def keycloak(keycloak_config: FlowConfig):
    """Flow over a private aiohttp session, closed after the test."""
    flow = KeycloakFlow(keycloak_config)
    async with flow:
        yield flow


@pytest_asyncio.fixture
async def keycloak_browser(browser, keycloak_config: FlowConfig):
    """Browser context wired to a flow sharing its cookies.

    Needs an async Playwright ``browser`` fixture from the test suite.
    """
    from .browser import KeycloakBrowser

    client = KeycloakBrowser(browser, keycloak_config.redirect_uri, name="keycloak")
    flow = KeycloakFlow(keycloak_config, transport=client.transport())
    flow.attach_browser(client)
    async with client:
        yield client
