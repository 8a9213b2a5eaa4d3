"""Incremental parser for ``data: <json>`` streaming chat frames.

The server's body arrives in chunks that are not aligned to line or even
character boundaries. The parser keeps two pieces of carry-over state: the
incremental UTF-8 decoder and the unterminated trailing line. Feeding the same
bytes split at any boundaries produces the same increments.
"""

import codecs
import json
from typing import Any, List, Optional

from ..utils.loguru_config import get_logger

logger = get_logger(__name__)

FRAME_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def extract_increment(frame: Any) -> Optional[str]:
    """Text at ``choices[0].delta.content``, or None for any other shape."""
    if not isinstance(frame, dict):
        return None
    choices = frame.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    if not isinstance(choice, dict):
        return None
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


class ChatStreamParser:
    """Turns body chunks into text increments."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._partial = ""
        self.skipped_frames = 0

    def feed(self, chunk: bytes) -> List[str]:
        """Consume one body chunk, return the increments it completed."""
        text = self._partial + self._decoder.decode(chunk)
        lines = text.split("\n")
        self._partial = lines.pop()
        return self._parse_lines(lines)

    def close(self) -> List[str]:
        """Flush decoder and trailing line at body close."""
        text = self._partial + self._decoder.decode(b"", final=True)
        self._partial = ""
        return self._parse_lines(text.split("\n"))

    def _parse_lines(self, lines: List[str]) -> List[str]:
        increments = []
        for line in lines:
            increment = self._parse_line(line.rstrip("\r"))
            if increment is not None:
                increments.append(increment)
        return increments

    def _parse_line(self, line: str) -> Optional[str]:
        if not line.startswith(FRAME_PREFIX):
            return None
        payload = line[len(FRAME_PREFIX):]
        # Advisory only, the body close ends the stream
        if payload == DONE_SENTINEL:
            return None
        try:
            frame = json.loads(payload)
        except ValueError:
            self.skipped_frames += 1
            logger.debug(f"Skipping non-JSON stream frame: {payload[:80]!r}")
            return None
        return extract_increment(frame)
