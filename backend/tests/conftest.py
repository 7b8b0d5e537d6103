"""Shared fakes: an httpx client whose responses stream canned SSE bytes."""

import asyncio
from typing import Callable, List, Optional

import httpx
import pytest


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered as the given chunks, optionally stalling or failing at the end."""

    def __init__(self, chunks: List[bytes], stall: bool = False, error: Optional[Exception] = None):
        self.chunks = chunks
        self.stall = stall
        self.error = error

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        if self.stall:
            await asyncio.Event().wait()


class FakeServer:
    """Records every request and answers it with a streaming response."""

    def __init__(
        self,
        status: int = 200,
        chunks=None,
        stall=False,
        error=None,
        body=b"",
        raise_on_request=None,
        headers=None,
        header_delay: float = 0.0,
        on_request: Optional[Callable[[httpx.Request], None]] = None,
    ):
        self.status = status
        self.chunks = [c.encode() if isinstance(c, str) else c for c in (chunks or [])]
        self.stall = stall
        self.error = error
        self.body = body
        self.raise_on_request = raise_on_request
        self.headers = {"content-type": "text/event-stream", **(headers or {})}
        self.header_delay = header_delay
        self.on_request = on_request
        self.requests: List[httpx.Request] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        if self.header_delay:
            await asyncio.sleep(self.header_delay)
        if self.raise_on_request is not None:
            raise self.raise_on_request
        if self.status != 200:
            return httpx.Response(self.status, content=self.body)
        return httpx.Response(
            200,
            headers=self.headers,
            stream=ChunkStream(self.chunks, stall=self.stall, error=self.error),
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_server() -> Callable[..., FakeServer]:
    return FakeServer
