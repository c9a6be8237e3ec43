"""HTTP client abstraction for the remote repository and build service.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib with basic auth
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import base64
import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from reltrain.core.result import Err, Ok, Result
from reltrain.core.structured import StrDict, as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations."""

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        """GET url and parse the body as a JSON object."""
        ...

    def get_text(self, url: str) -> Result[str, HttpError]:
        """GET url and return the body as text."""
        ...

    def send_json(self, method: str, url: str, payload: object) -> Result[StrDict, HttpError]:
        """Send payload as JSON with method and parse the JSON object reply.

        An empty reply body is returned as an empty dict.
        """
        ...


def _parse_object(url: str, raw: bytes) -> Result[StrDict, HttpError]:
    if not raw.strip():
        return Ok({})
    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
    data = as_str_dict(obj)
    if data is None:
        return Err(HttpError(url=url, status=0, message="Expected JSON object"))
    return Ok(data)


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles HTTPS with system certificates, basic authentication and JSON
    bodies. The timeout applies per socket operation.
    """

    def __init__(
        self,
        *,
        username: str,
        password: str,
        timeout: float = 60.0,
        user_agent: str = "reltrain/0.3.0",
    ) -> None:
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        self._auth = f"Basic {token}"
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(
        self,
        method: str,
        url: str,
        data: bytes | None = None,
    ) -> Result[bytes, HttpError]:
        headers = {"User-Agent": self.user_agent, "Authorization": self._auth}
        if data is not None:
            headers["Content-Type"] = "application/json"
        try:
            req = urllib.request.Request(url, data=data, headers=headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        result = self._request("GET", url)
        if isinstance(result, Err):
            return result
        return _parse_object(url, result.value)

    def get_text(self, url: str) -> Result[str, HttpError]:
        result = self._request("GET", url)
        if isinstance(result, Err):
            return result
        try:
            return Ok(result.value.decode("utf-8-sig"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"Decode error: {e}"))

    def send_json(self, method: str, url: str, payload: object) -> Result[StrDict, HttpError]:
        body = json.dumps(payload).encode("utf-8")
        result = self._request(method, url, body)
        if isinstance(result, Err):
            return result
        return _parse_object(url, result.value)


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url). Every call is recorded in
    ``calls`` as (method, url, payload).

    Usage:
        client = MockHttpClient()
        client.set_json("https://dev.example.com/refs", {"value": []})
        result = client.get_json("https://dev.example.com/refs")
        assert result == Ok({"value": []})
    """

    def __init__(self) -> None:
        self._json_responses: dict[str, StrDict | HttpError] = {}
        self._text_responses: dict[str, str | HttpError] = {}
        self._send_responses: dict[tuple[str, str], StrDict | HttpError] = {}
        self.calls: list[tuple[str, str, object]] = []

    def set_json(self, url: str, response: StrDict | HttpError) -> None:
        self._json_responses[url] = response

    def set_text(self, url: str, response: str | HttpError) -> None:
        self._text_responses[url] = response

    def set_send(self, method: str, url: str, response: StrDict | HttpError) -> None:
        self._send_responses[(method, url)] = response

    def sent(self, method: str) -> list[tuple[str, object]]:
        """Return (url, payload) of every call made with method."""
        return [(url, payload) for m, url, payload in self.calls if m == method]

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        self.calls.append(("GET", url, None))
        if url not in self._json_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._json_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_text(self, url: str) -> Result[str, HttpError]:
        self.calls.append(("GET", url, None))
        if url not in self._text_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._text_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def send_json(self, method: str, url: str, payload: object) -> Result[StrDict, HttpError]:
        self.calls.append((method, url, payload))
        key = (method, url)
        if key not in self._send_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._send_responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
