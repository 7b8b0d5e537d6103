from typing import List, Optional

# Constants
SSE_DATA_FIELD = "data"
DONE_SENTINEL = "[DONE]"


class SSEFrameBuffer:
    """Reassembles Server-Sent Events frames from arbitrarily split text.

    Text is fed as it arrives from the network; every event block terminated
    by a blank line that carries at least one ``data:`` line becomes one
    frame payload. Trailing text without a terminating blank line is held
    until more input arrives.
    """

    def __init__(self):
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet part of a complete frame."""
        return self._buffer

    def feed(self, text: str) -> List[str]:
        """Append ``text`` and return the payloads of all frames it completed."""
        self._buffer = (self._buffer + text).replace("\r\n", "\n")

        frames = []
        while True:
            boundary = self._buffer.find("\n\n")
            if boundary == -1:
                break
            block = self._buffer[:boundary]
            self._buffer = self._buffer[boundary + 2:]

            payload = self._parse_block(block)
            if payload is not None:
                frames.append(payload)
        return frames

    @staticmethod
    def _parse_block(block: str) -> Optional[str]:
        data_lines = []
        for line in block.split("\n"):
            if not line or line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if field != SSE_DATA_FIELD:
                # event:, id: and retry: carry nothing the providers use
                continue
            if value.startswith(" "):
                value = value[1:]
            data_lines.append(value)

        if not data_lines:
            return None
        return "\n".join(data_lines)
