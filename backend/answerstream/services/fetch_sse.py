"""
Server-Sent Events transport built on an httpx streaming response.

Frames are yielded one payload at a time, in the order they arrived on the
wire. The connection is owned by the generator and released on every exit
path: normal end, error, cancellation, or the consumer closing the iterator.
"""

import asyncio
import codecs
import logging
from contextlib import AsyncExitStack
from typing import Any, AsyncIterator, Awaitable, Optional

import httpx

from answerstream.models.request import StreamRequest
from answerstream.utils.exceptions import (
    HttpError,
    RequestSetupError,
    StreamCancelledError,
    StreamReadError,
)
from answerstream.utils.sse import SSEFrameBuffer

logger = logging.getLogger(__name__)


def _validate(request: StreamRequest) -> None:
    if not request.url:
        raise RequestSetupError("Stream request has no URL")
    if not request.method:
        raise RequestSetupError("Stream request has no HTTP method")
    for name, value in request.headers.items():
        if not name or value is None or value == "":
            raise RequestSetupError(f"Empty value for header '{name}'")


async def _read_error_body(response: httpx.Response) -> str:
    """Read whatever body text a failed response carries."""
    try:
        raw = await response.aread()
    except httpx.HTTPError as e:
        logger.debug(f"Could not read error body from {response.url}: {e}")
        return ""
    return raw.decode("utf-8", errors="replace")


async def _race_abort(
    awaitable: Awaitable[Any], abort_waiter: Optional["asyncio.Future[bool]"], stage: str
) -> Any:
    """Await ``awaitable`` unless the abort waiter finishes first.

    The losing operation is cancelled and StreamCancelledError is raised as
    soon as the signal fires.
    """
    if abort_waiter is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    try:
        await asyncio.wait({task, abort_waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        if not task.done():
            task.cancel()
            await asyncio.wait({task})

    if abort_waiter.done():
        if not task.cancelled():
            # Mark the outcome retrieved; the stream is being abandoned
            task.exception()
        raise StreamCancelledError(f"Stream cancelled while {stage}")

    return task.result()


async def _next_chunk(
    chunks: AsyncIterator[bytes], abort_waiter: Optional["asyncio.Future[bool]"]
) -> Optional[bytes]:
    """Return the next network chunk, or None once the body is exhausted."""
    try:
        return await _race_abort(chunks.__anext__(), abort_waiter, "reading")
    except StopAsyncIteration:
        return None


async def fetch_sse(client: httpx.AsyncClient, request: StreamRequest) -> AsyncIterator[str]:
    """
    Issue ``request`` and yield each SSE frame payload as soon as it is complete.

    Args:
        client: The httpx client used to open the connection
        request: Method, URL, headers, body and optional cancellation signal

    Yields:
        Frame payloads (text after ``data:``), including the ``[DONE]`` sentinel

    Raises:
        RequestSetupError: URL, method or headers are missing (no I/O done)
        StreamCancelledError: the signal was set before or during the stream
        HttpError: the response status is not 2xx
        StreamReadError: connection, network, timeout or decode failure
    """
    _validate(request)

    signal = request.signal
    if signal is not None and signal.is_set():
        raise StreamCancelledError("Request cancelled before it was sent")

    abort_waiter = asyncio.ensure_future(signal.wait()) if signal is not None else None
    try:
        async with AsyncExitStack() as stack:
            # Connect, send and header wait are raced against the signal too;
            # an entered response is closed by the stack on every exit path
            stream = client.stream(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
            response = await _race_abort(
                stack.enter_async_context(stream), abort_waiter, "waiting for headers"
            )
            if signal is not None and signal.is_set():
                raise StreamCancelledError("Stream cancelled while waiting for headers")

            if not response.is_success:
                body = await _read_error_body(response)
                logger.error(
                    f"SSE request to {request.url} failed: "
                    f"status={response.status_code}, body={body}"
                )
                raise HttpError(response.status_code, body)

            decoder = codecs.getincrementaldecoder("utf-8")()
            frames = SSEFrameBuffer()
            chunks = response.aiter_bytes()

            while True:
                chunk = await _next_chunk(chunks, abort_waiter)
                if chunk is None:
                    break
                for payload in frames.feed(decoder.decode(chunk)):
                    if signal is not None and signal.is_set():
                        raise StreamCancelledError("Stream cancelled while reading")
                    yield payload

            if frames.pending.strip():
                logger.debug(f"Discarding unterminated SSE frame: {frames.pending!r}")

    except httpx.RequestError as e:
        # TransportError (connect, read, timeout) and DecodingError (bad Content-Encoding)
        logger.warning(f"SSE stream from {request.url} failed: {e!r}")
        raise StreamReadError(str(e) or type(e).__name__) from e
    except UnicodeDecodeError as e:
        logger.warning(f"SSE stream from {request.url} is not valid UTF-8: {e}")
        raise StreamReadError(f"Invalid UTF-8 in stream: {e}") from e
    finally:
        if abort_waiter is not None:
            abort_waiter.cancel()
