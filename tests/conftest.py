from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import pytest


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        text: str = "",
        content: Optional[bytes] = None,
        json_data: Any = None,
        reason: str = "OK",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        if json_data is not None and not text:
            text = json.dumps(json_data)
        self.text = text
        self.content = content if content is not None else text.encode("utf-8")
        self._json = json_data

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Records every ``get`` call and answers with a canned response or error."""

    def __init__(self, responder: Callable[..., FakeResponse]) -> None:
        self.responder = responder
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        return self.responder(url, **kwargs)


@pytest.fixture
def html_session() -> Callable[..., FakeSession]:
    def make(html: str, status_code: int = 200, reason: str = "OK") -> FakeSession:
        return FakeSession(lambda url, **kw: FakeResponse(status_code=status_code, text=html, reason=reason))

    return make


@pytest.fixture
def make_response() -> Callable[..., FakeResponse]:
    return FakeResponse


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    return FakeSession
