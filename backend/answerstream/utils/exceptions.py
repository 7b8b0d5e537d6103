"""
Error taxonomy for the streaming core.

Usage:
    from answerstream.utils.exceptions import HttpError, StreamReadError

    raise HttpError(401, '{"error": "invalid api key"}')

Setup, HTTP and stream errors end a call with a terminal error event.
FrameParseError never leaves the provider; StreamCancelledError is only
raised by the transport to its direct caller.
"""

from typing import Optional


class AnswerStreamError(Exception):
    """Base class for streaming-core failures."""


class RequestSetupError(AnswerStreamError):
    """Missing or malformed request parameters. Raised before any I/O."""


class HttpError(AnswerStreamError):
    """Non-success HTTP response from the vendor."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        message = f"HTTP {status}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class StreamReadError(AnswerStreamError):
    """Connection, network, timeout or decode failure.

    Covers failures while connecting as well as after the response headers arrived.
    """


class FrameParseError(AnswerStreamError):
    """A single frame payload is not a JSON object."""

    def __init__(self, payload: str, reason: Optional[str] = None):
        self.payload = payload
        super().__init__(reason or f"Unparsable frame: {payload!r}")


class StreamCancelledError(AnswerStreamError):
    """The caller's signal was triggered. Not reported as an error event."""
