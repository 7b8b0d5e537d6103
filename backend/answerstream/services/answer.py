"""
Drains a provider's answer stream into a final result.

This is what a caller such as a UI card does with the event stream: render
each cumulative answer as it arrives and settle on a final status.
"""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from answerstream.models.events import AnswerEvent
from answerstream.providers.base import BaseProvider
from answerstream.utils.exceptions import StreamReadError

logger = logging.getLogger(__name__)

AnswerStatus = Literal["success", "error", "cancelled"]


@dataclass
class AnswerResult:
    status: AnswerStatus
    text: str = ""
    message_id: str = ""
    error: Optional[Exception] = None


async def collect_answer(
    provider: BaseProvider,
    prompt: str,
    signal: Optional[asyncio.Event] = None,
    timeout: Optional[float] = None,
    on_event: Optional[Callable[[AnswerEvent], None]] = None,
) -> AnswerResult:
    """
    Run ``provider.generate_answer`` to completion.

    Args:
        provider: Any provider implementing generate_answer
        prompt: The user prompt
        signal: Optional cancellation signal, observed but never set here
        timeout: Optional overall deadline in seconds
        on_event: Called with every event, in order, as it arrives

    Returns:
        AnswerResult with the last cumulative text. The status is "cancelled"
        when the signal stopped the stream before a terminal event.
    """
    result = AnswerResult(status="cancelled")

    async def consume():
        async with aclosing(provider.generate_answer(prompt, signal)) as events:
            async for event in events:
                if on_event is not None:
                    on_event(event)
                if event.type == "answer":
                    result.text = event.data.text
                    result.message_id = event.data.message_id
                elif event.type == "done":
                    result.status = "success"
                elif event.type == "error":
                    result.status = "error"
                    result.error = event.error

    try:
        await asyncio.wait_for(consume(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Answer from {provider.name} timed out after {timeout}s")
        result.status = "error"
        result.error = StreamReadError(f"Timeout after {timeout}s")

    if result.status == "error":
        logger.info(f"Answer from {provider.name} failed: {result.error}")
    return result
