import asyncio
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

import httpx

from answerstream.config import settings
from answerstream.models.events import AnswerEvent

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Abstract base class for answer providers"""

    name: str  # Provider identifier, e.g. "openai"

    def __init__(self, token: str, model: str, timeout: Optional[float] = None):
        self.token = token
        self.model = model
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeout(self) -> float:
        """Seconds a stream may stall before it is failed."""
        if self._timeout is not None:
            return float(self._timeout)
        return float(settings.provider_timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """HTTP client owned by this provider, created on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    @abstractmethod
    def generate_answer(
        self, prompt: str, signal: Optional[asyncio.Event] = None
    ) -> AsyncIterator[AnswerEvent]:
        """Stream answer events for ``prompt``.

        Every call ends with exactly one ``done`` or ``error`` event, unless
        ``signal`` is set first, in which case the stream just stops.
        """

    async def cleanup(self):
        """Cleanup HTTP client resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def is_configured(self) -> bool:
        """Check if provider has a token and a model"""
        return bool(self.token) and bool(self.model)

    def _log_json_error(self, payload: str, error: Exception) -> None:
        """Log frame parse error at debug level."""
        logger.debug(f"Skipping unparsable frame in {self.name}: {error} (payload={payload!r})")
