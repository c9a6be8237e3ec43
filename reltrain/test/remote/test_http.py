"""Tests for remote/http.py - HTTP client abstraction."""

from __future__ import annotations

import base64
import io
import urllib.request

import pytest

from reltrain.core.result import Err, Ok
from reltrain.remote.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

# =============================================================================
# HttpError tests
# =============================================================================


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url="https://dev.example.com/api", status=500, message="Internal Error")
        assert str(error) == "HTTP 500: Internal Error (https://dev.example.com/api)"

    def test_str_without_status(self) -> None:
        error = HttpError(url="https://dev.example.com", status=0, message="Timeout")
        assert str(error) == "Timeout (https://dev.example.com)"

    def test_is_frozen(self) -> None:
        error = HttpError(url="https://dev.example.com", status=404, message="Not Found")
        with pytest.raises(AttributeError):
            error.status = 200  # type: ignore[misc]


# =============================================================================
# MockHttpClient tests
# =============================================================================


class TestMockHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)

    def test_get_json_canned(self) -> None:
        client = MockHttpClient()
        client.set_json("https://x/refs", {"value": []})
        assert client.get_json("https://x/refs") == Ok({"value": []})

    def test_unknown_url_is_404(self) -> None:
        client = MockHttpClient()
        result = client.get_text("https://x/items")
        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_canned_error(self) -> None:
        client = MockHttpClient()
        client.set_json("https://x/refs", HttpError(url="https://x/refs", status=401, message="no"))
        result = client.get_json("https://x/refs")
        assert isinstance(result, Err)
        assert result.error.status == 401

    def test_send_is_keyed_by_method_and_recorded(self) -> None:
        client = MockHttpClient()
        client.set_send("POST", "https://x/pushes", {"pushId": 1})

        assert client.send_json("POST", "https://x/pushes", {"a": 1}) == Ok({"pushId": 1})
        assert isinstance(client.send_json("PATCH", "https://x/pushes", {}), Err)
        assert client.sent("POST") == [("https://x/pushes", {"a": 1})]
        assert [m for m, _, _ in client.calls] == ["POST", "PATCH"]


# =============================================================================
# RealHttpClient tests (unit tests only - no network)
# =============================================================================


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class TestRealHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(RealHttpClient(username="u", password="p"), HttpClient)

    def test_defaults(self) -> None:
        client = RealHttpClient(username="u", password="p")
        assert client.timeout == 60.0
        assert "reltrain" in client.user_agent

    def test_get_json_invalid_url(self) -> None:
        client = RealHttpClient(username="u", password="p", timeout=1.0)
        result = client.get_json("not-a-url")
        assert isinstance(result, Err)
        assert result.error.status == 0

    def test_sends_basic_auth_and_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: list[urllib.request.Request] = []

        def fake_urlopen(req: urllib.request.Request, **_: object) -> _FakeResponse:
            seen.append(req)
            return _FakeResponse(b'{"value": [{"success": true}]}')

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        client = RealHttpClient(username="bot", password="secret")

        result = client.send_json("POST", "https://dev.example.com/refs", [{"name": "x"}])

        assert result == Ok({"value": [{"success": True}]})
        req = seen[0]
        token = base64.b64encode(b"bot:secret").decode("ascii")
        assert req.get_header("Authorization") == f"Basic {token}"
        assert req.get_header("Content-type") == "application/json"
        assert req.get_method() == "POST"
        assert req.data == b'[{"name": "x"}]'

    def test_empty_reply_is_empty_object(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(urllib.request, "urlopen", lambda req, **_: _FakeResponse(b""))
        client = RealHttpClient(username="u", password="p")
        assert client.send_json("PATCH", "https://dev.example.com/pr/1", {}) == Ok({})

    def test_get_text_strips_bom(self, monkeypatch: pytest.MonkeyPatch) -> None:
        body = "\ufeff<root />".encode("utf-8")
        monkeypatch.setattr(urllib.request, "urlopen", lambda req, **_: _FakeResponse(body))
        client = RealHttpClient(username="u", password="p")
        assert client.get_text("https://dev.example.com/items") == Ok("<root />")

    def test_non_object_json_is_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(urllib.request, "urlopen", lambda req, **_: _FakeResponse(b"[1, 2]"))
        client = RealHttpClient(username="u", password="p")
        result = client.get_json("https://dev.example.com/refs")
        assert isinstance(result, Err)
        assert result.error.message == "Expected JSON object"
