"""Tests for HTTP transports and response snapshots."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from keycloak_login.transport import (
    AiohttpTransport,
    FlowResponse,
    PlaywrightTransport,
    _log_request,
    _log_response,
)


class TestFlowResponse:
    def test_redirect_target_resolved_against_url(self):
        resp = FlowResponse(status=302, url="https://idp.example/a/b", headers={"location": "/app#code=1"})
        assert resp.is_redirect
        assert resp.redirected_to_url == "https://idp.example/app#code=1"

    def test_non_redirect_has_no_target(self):
        resp = FlowResponse(status=200, url="https://idp.example", headers={"location": "/x"})
        assert not resp.is_redirect
        assert resp.redirected_to_url is None

    @pytest.mark.parametrize("status,ok", [(200, True), (302, True), (399, True), (400, False), (503, False)])
    def test_ok(self, status, ok):
        assert FlowResponse(status=status, url="u").ok is ok


class TestLogging:
    def test_request_password_masked(self, caplog):
        with caplog.at_level(logging.DEBUG, "keycloak_login"):
            _log_request("POST", "https://idp/submit", data={"username": "alice", "password": "secret"})
        assert ">>> POST https://idp/submit" in caplog.text
        assert "***" in caplog.text
        assert "secret" not in caplog.text
        assert "alice" in caplog.text

    def test_request_headers_values_not_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, "keycloak_login"):
            _log_request("GET", "https://idp", headers={"Cookie": "KEYCLOAK_SESSION=s1"})
        assert "Cookie" in caplog.text
        assert "KEYCLOAK_SESSION=s1" not in caplog.text

    def test_long_body_truncated(self, caplog):
        resp = FlowResponse(status=200, url="https://idp", body="x" * 3000)
        with caplog.at_level(logging.DEBUG, "keycloak_login"):
            _log_response(resp)
        assert "<<< 200 https://idp" in caplog.text
        assert "3000 bytes total" in caplog.text


@pytest.mark.integration
class TestAiohttpTransport:
    async def test_reads_redirect_without_following(self, keycloak_server):
        transport = AiohttpTransport()
        try:
            resp = await transport.request(
                "GET",
                f"{keycloak_server}/realms/test/protocol/openid-connect/logout",
                params={"redirect_uri": "https://app.example/"},
                follow_redirects=False,
            )
        finally:
            await transport.close()
        assert resp.status == 302
        assert resp.redirected_to_url == "https://app.example/"
        assert len(resp.set_cookies) == 2

    async def test_follows_redirects_by_default(self, keycloak_server):
        transport = AiohttpTransport()
        try:
            resp = await transport.request(
                "GET",
                f"{keycloak_server}/realms/test/protocol/openid-connect/logout",
                params={"redirect_uri": f"{keycloak_server}/app/done"},
            )
        finally:
            await transport.close()
        assert resp.status == 200
        assert resp.body == "app page done"

    async def test_session_reopened_after_close(self, keycloak_server):
        transport = AiohttpTransport()
        await transport.request("GET", f"{keycloak_server}/app")
        await transport.close()
        resp = await transport.request("GET", f"{keycloak_server}/app")
        await transport.close()
        assert resp.ok

    async def test_does_not_store_cookies(self, keycloak_server):
        """Cookies only travel through explicit headers."""
        transport = AiohttpTransport()
        try:
            first = await transport.request(
                "GET",
                f"{keycloak_server}/realms/test/protocol/openid-connect/auth",
                params={"client_id": "app", "redirect_uri": f"{keycloak_server}/app", "state": "s"},
                follow_redirects=False,
            )
            assert first.set_cookies
            session = await transport._ensure_session()
            assert len(session.cookie_jar) == 0
        finally:
            await transport.close()


class TestPlaywrightTransport:
    def _api_response(self, status=302, headers=None, body=""):
        resp = MagicMock()
        resp.status = status
        resp.url = "https://idp.example/realms/test/protocol/openid-connect/auth"
        resp.headers_array = headers or []
        resp.text = AsyncMock(return_value=body)
        resp.dispose = AsyncMock()
        return resp

    async def test_fetch_without_redirects(self):
        api_response = self._api_response(
            headers=[
                {"name": "Location", "value": "https://app.example/#code=1"},
                {"name": "Set-Cookie", "value": "a=1"},
                {"name": "Set-Cookie", "value": "b=2"},
            ]
        )
        owner = MagicMock()
        owner.request.fetch = AsyncMock(return_value=api_response)

        resp = await PlaywrightTransport(owner).request(
            "GET",
            "https://idp.example/auth",
            params={"client_id": "app"},
            headers={"Cookie": "x=1"},
            follow_redirects=False,
        )

        owner.request.fetch.assert_awaited_once_with(
            "https://idp.example/auth",
            method="GET",
            params={"client_id": "app"},
            form=None,
            headers={"Cookie": "x=1"},
            max_redirects=0,
            fail_on_status_code=False,
        )
        assert resp.set_cookies == ("a=1", "b=2")
        assert resp.redirected_to_url == "https://app.example/#code=1"
        api_response.dispose.assert_awaited_once()

    async def test_form_post_follows_redirects(self):
        api_response = self._api_response(status=200, body="ok")
        owner = MagicMock()
        owner.request.fetch = AsyncMock(return_value=api_response)

        resp = await PlaywrightTransport(owner).request(
            "POST", "https://idp/submit", form={"username": "a", "password": "b"}
        )

        kwargs = owner.request.fetch.await_args.kwargs
        assert kwargs["form"] == {"username": "a", "password": "b"}
        assert kwargs["max_redirects"] is None
        assert resp.body == "ok"
        assert resp.method == "POST"
