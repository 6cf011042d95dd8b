from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from webproof.core.errors import (
    BindingLoadError,
    CapabilityInvocationError,
    CapabilityMissingError,
    CapabilityTimeoutError,
    MalformedResponseError,
)
from webproof.main import app


class TestPostWebProof:
    def test_post_success(self, client):
        resp = client.post("/web-proof", json={"url": "https://example.com/"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["proof"] == "proof:https://example.com/"
        assert "duration" in body["metrics"]

    def test_post_with_options(self, client, loader):
        resp = client.post(
            "/web-proof",
            json={
                "url": "https://example.com/",
                "options": {"method": "POST", "headers": ["A: 1"], "max_recv_data": 100},
            },
        )
        assert resp.status_code == 200
        assert loader.state.module.CALLS[0]["max_recv_data"] == 100

    def test_post_failure_is_still_200(self, client):
        resp = client.post("/web-proof", json={"url": "javascript:alert(1)"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["error_kind"] == "InvalidUrl"

    def test_post_invalid_option_value(self, client):
        resp = client.post(
            "/web-proof",
            json={"url": "https://example.com/", "options": {"max_sent_data": 0}},
        )
        assert resp.status_code == 200
        assert resp.json()["error_kind"] == "InvalidOption"

    def test_post_unknown_option_returns_422(self, client):
        resp = client.post(
            "/web-proof",
            json={"url": "https://example.com/", "options": {"bogus": 1}},
        )
        assert resp.status_code == 422

    def test_post_missing_url_returns_422(self, client):
        resp = client.post("/web-proof", json={})
        assert resp.status_code == 422


class TestPostSimpleWebProof:
    _BODY = {"notary_host": "127.0.0.1", "notary_port": 7047, "url": "https://x.com"}

    def test_success(self, client):
        resp = client.post("/web-proof/simple", json=self._BODY)
        assert resp.status_code == 200
        assert resp.json() == {"proof": "simple:127.0.0.1:7047:https://x.com"}

    def test_bad_port_returns_422(self, client):
        resp = client.post("/web-proof/simple", json={**self._BODY, "notary_port": -1})
        assert resp.status_code == 422
        assert "between 1 and 65535" in resp.json()["detail"]
        assert resp.json()["kind"] == "InvalidNotaryUrl"

    def test_bad_url_returns_422(self, client):
        resp = client.post("/web-proof/simple", json={**self._BODY, "url": "not-a-url"})
        assert resp.status_code == 422
        assert "Invalid URL format" in resp.json()["detail"]
        assert resp.json()["kind"] == "InvalidUrl"

    @pytest.mark.parametrize(
        "exc, status",
        [
            (BindingLoadError("no binding"), 503),
            (CapabilityMissingError("no capability"), 503),
            (CapabilityTimeoutError("generate_simple_web_proof", 10), 504),
            (CapabilityInvocationError("native crash"), 502),
            (MalformedResponseError("not a string"), 502),
        ],
    )
    def test_error_status_mapping(self, client, exc, status):
        with patch(
            "webproof.api.proof.routes.WebProofService.simple_web_proof",
            new_callable=AsyncMock,
            side_effect=exc,
        ):
            resp = client.post("/web-proof/simple", json=self._BODY)
        assert resp.status_code == status
        assert resp.json() == {"detail": str(exc), "kind": exc.kind.value}


class TestBindingInfo:
    def test_info_before_and_after_load(self, client):
        before = client.get("/web-proof/binding").json()
        assert before["loaded"] is False
        assert before["phase"] == "unloaded"

        client.post("/web-proof", json={"url": "https://example.com/"})

        after = client.get("/web-proof/binding").json()
        assert after["loaded"] is True
        assert after["phase"] == "loaded"
        assert after["source"].endswith("vlayer_web_proof.py")


class TestLifespan:
    def test_preload_binding(self, loader):
        with (
            patch("webproof.main.binding", loader),
            patch("webproof.main.settings") as mock_settings,
        ):
            mock_settings.preload_binding = True
            with TestClient(app):
                assert loader.is_loaded() is True

    def test_preload_failure_does_not_block_startup(self, make_loader):
        loader = make_loader("nope.py")
        with (
            patch("webproof.main.binding", loader),
            patch("webproof.main.settings") as mock_settings,
        ):
            mock_settings.preload_binding = True
            with TestClient(app) as c:
                assert c.get("/health").status_code == 200
        assert loader.state.attempts == 1


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
