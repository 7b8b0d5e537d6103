from dataclasses import dataclass, field
from typing import List, Literal, Mapping, Optional, Union
import asyncio

import orjson
from pydantic import BaseModel


class ChatMessage(BaseModel):
    """Single chat-completions message"""
    role: Literal["developer", "system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    stream: bool = True

    def to_json(self) -> bytes:
        return orjson.dumps(self.model_dump())


@dataclass(frozen=True)
class StreamRequest:
    """Outbound streaming HTTP request. Immutable once issued."""

    url: str
    method: str = "POST"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Union[bytes, str, None] = None
    signal: Optional[asyncio.Event] = None
