import asyncio
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
import orjson

from answerstream.config import settings
from answerstream.models.events import AnswerEvent, StreamState
from answerstream.models.request import ChatCompletionRequest, ChatMessage, StreamRequest
from answerstream.providers.base import BaseProvider
from answerstream.services.fetch_sse import fetch_sse
from answerstream.utils.exceptions import (
    AnswerStreamError,
    FrameParseError,
    RequestSetupError,
    StreamCancelledError,
    StreamReadError,
)
from answerstream.utils.sse import DONE_SENTINEL

logger = logging.getLogger(__name__)

FINISH_REASON_STOP = "stop"


class OpenAIProvider(BaseProvider):
    """OpenAI chat-completions provider streaming over SSE.

    Works against any server exposing the same ``/v1/chat/completions``
    contract when ``api_base_url`` points at it.
    """

    name = "openai"
    default_base_url = "https://api.openai.com"

    def __init__(
        self,
        token: str,
        model: str,
        api_base_url: Optional[str] = None,
        *,
        system_prompt: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(token, model, timeout=timeout)
        self.api_base_url = (api_base_url or self.default_base_url).rstrip("/")
        self.system_prompt = system_prompt or settings.system_prompt
        self._client = client

    @property
    def endpoint(self) -> str:
        return f"{self.api_base_url}/v1/chat/completions"

    def build_messages(self, prompt: str) -> List[ChatMessage]:
        # No history: each call is a fresh single-turn exchange
        return [
            ChatMessage(role="developer", content=self.system_prompt),
            ChatMessage(role="user", content=prompt),
        ]

    def build_request(self, prompt: str, signal: Optional[asyncio.Event] = None) -> StreamRequest:
        if not self.token:
            raise RequestSetupError(f"No API token configured for '{self.name}'")
        if not self.model:
            raise RequestSetupError(f"No model configured for '{self.name}'")

        payload = ChatCompletionRequest(
            model=self.model,
            messages=self.build_messages(prompt),
            stream=True,
        )
        return StreamRequest(
            url=self.endpoint,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.token}",
            },
            body=payload.to_json(),
            signal=signal,
        )

    @staticmethod
    def parse_frame(payload: str) -> Dict[str, Any]:
        """Decode a frame payload into a JSON object or raise FrameParseError."""
        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise FrameParseError(payload, f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise FrameParseError(payload, f"Expected a JSON object, got {type(data).__name__}")
        return data

    def handle_frame(self, state: StreamState, payload: str) -> Optional[AnswerEvent]:
        """
        Apply one frame payload to ``state``.

        Returns the event to publish, or None when the frame contributes
        nothing (keep-alive, unparsable, empty delta, or stream already closed).
        """
        if state.closed:
            return None

        if payload == DONE_SENTINEL:
            state.closed = True
            return AnswerEvent.done()

        try:
            data = self.parse_frame(payload)
        except FrameParseError as e:
            self._log_json_error(payload, e)
            return None

        state.record_message_id(data.get("id"))

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return None

        # Only the first choice is used
        choice = choices[0]
        if not isinstance(choice, dict):
            return None

        if choice.get("finish_reason") == FINISH_REASON_STOP:
            state.closed = True
            return AnswerEvent.done()

        delta = choice.get("delta") or {}
        content = delta.get("content") if isinstance(delta, dict) else None
        if not content or not isinstance(content, str):
            return None

        text = state.append(content)
        return AnswerEvent.answer(
            text,
            message_id=state.message_id,
            conversation_id=state.message_id,
        )

    async def generate_answer(
        self, prompt: str, signal: Optional[asyncio.Event] = None
    ) -> AsyncIterator[AnswerEvent]:
        """Stream chat completion answers using the OpenAI SSE format."""
        state = StreamState()
        try:
            request = self.build_request(prompt, signal)
            async with aclosing(fetch_sse(self.client, request)) as frames:
                async for payload in frames:
                    logger.debug(f"sse message: {payload}")
                    event = self.handle_frame(state, payload)
                    if event is None:
                        continue
                    yield event
                    if state.closed:
                        return

        except StreamCancelledError:
            logger.debug(f"{self.name} stream cancelled by caller")
            return
        except AnswerStreamError as e:
            if signal is not None and signal.is_set():
                logger.debug(f"{self.name} stream cancelled by caller, dropping {e!r}")
                return
            state.closed = True
            yield AnswerEvent.failure(e)
            return
        except Exception as e:
            if signal is not None and signal.is_set():
                logger.debug(f"{self.name} stream cancelled by caller, dropping {e!r}")
                return
            logger.exception(f"Unexpected error while streaming from {self.name}")
            state.closed = True
            yield AnswerEvent.failure(e)
            return

        if signal is not None and signal.is_set():
            return
        state.closed = True
        yield AnswerEvent.failure(StreamReadError("Stream ended before completion"))
