"""Shared fixtures for typed_http tests."""

from collections.abc import Callable
from collections.abc import Mapping
from typing import Any

import pytest

from typed_http import HTTPRequest
from typed_http import HTTPResponse
from typed_http import MemoryLogSink


class FakeTransport:
    """In-memory transport returning a canned response or raising an error."""

    def __init__(
        self,
        status: int = 200,
        body: bytes = b"{}",
        headers: Mapping[str, str] | None = None,
        error: BaseException | None = None,
        response: Any = None,
    ):
        self.status = status
        self.body = body
        self.headers = headers
        self.error = error
        self.response = response
        self.requests: list[HTTPRequest] = []
        self.closed = False

    async def send(self, request: HTTPRequest) -> tuple[bytes, Any]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.body, self.response
        return self.body, HTTPResponse.build(self.status, self.headers, request.url)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    return FakeTransport


@pytest.fixture
def sink() -> MemoryLogSink:
    return MemoryLogSink()
