"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union
from urllib.parse import parse_qsl, urlsplit

import pytest

from airtable_records.client import AirtableClient


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)


def json_response(payload: Any, status_code: int = 200) -> FakeResponse:
    return FakeResponse(status_code=status_code, text=json.dumps(payload))


class FakeSession:
    """Stands in for requests.Session; replays queued responses in order."""

    def __init__(self, responses: Optional[List[Union[FakeResponse, Exception]]] = None) -> None:
        self.responses: List[Union[FakeResponse, Exception]] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, *responses: Union[FakeResponse, Exception]) -> "FakeSession":
        self.responses.extend(responses)
        return self

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def query(self, index: int = -1) -> List[tuple]:
        return parse_qsl(urlsplit(self.calls[index]["url"]).query)

    def body(self, index: int = -1) -> Any:
        return self.calls[index].get("json")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession) -> AirtableClient:
    return AirtableClient(
        "pat-test-token",
        session=fake_session,
        endpoint="https://api.airtable.com/v0",
        timeout=5,
    )


@pytest.fixture
def patch_requests_session(monkeypatch, fake_session: FakeSession) -> FakeSession:
    """Make every AirtableClient built without a session use the fake one."""
    monkeypatch.setattr("airtable_records.client.requests.Session", lambda: fake_session)
    return fake_session
