"""Shared fixtures: flow config, recording transport and a live mock Keycloak."""

import threading

import pytest
from werkzeug.serving import make_server

from keycloak_login import FlowConfig, KeycloakFlow, seeded_uuid_factory
from mock_keycloak import create_app
from fakes import RecordingTransport


@pytest.fixture
def flow_config() -> FlowConfig:
    return FlowConfig.from_options(
        "https://idp.example",
        "test",
        "app",
        {"redirectUri": "https://app.example", "defaultUser": "bob", "defaultPassword": "hunter2"},
    )


@pytest.fixture
def make_flow(flow_config):
    """Factory for a flow over a RecordingTransport replaying ``responses``."""

    def create(*responses, config: FlowConfig | None = None, navigator=None):
        transport = RecordingTransport(*responses)
        flow = KeycloakFlow(
            config or flow_config,
            transport=transport,
            id_factory=seeded_uuid_factory(1234),
            navigator=navigator,
        )
        return flow, transport

    return create


@pytest.fixture
def keycloak_app():
    return create_app(realm="test", users={"alice": "secret"})


@pytest.fixture
def keycloak_server(keycloak_app):
    """Serve the mock Keycloak on a random local port for one test."""
    server = make_server("127.0.0.1", 0, keycloak_app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.port}"
    server.shutdown()
    thread.join(timeout=5)
