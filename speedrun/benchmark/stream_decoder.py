"""Incremental decoder for newline-delimited JSON streams."""
import codecs
import json
from typing import Any, Dict, List, Optional

from speedrun.shared.logging import LoggingManager


logger = LoggingManager.get_logger(__name__)


class JsonLinesDecoder:
    """Turns arbitrarily split byte chunks into parsed JSON objects.

    Bytes are decoded incrementally (multi-byte characters may straddle
    chunks), split on newlines, and the trailing partial line is kept until
    the next chunk. Blank, malformed, or non-object lines are dropped.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self.skipped_lines = 0

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, data: bytes) -> List[Dict[str, Any]]:
        """Consume a chunk and return the objects on every line it completed."""
        self._buffer += self._decoder.decode(data)
        *lines, self._buffer = self._buffer.split("\n")
        return [obj for obj in map(self._parse_line, lines) if obj is not None]

    def flush(self) -> List[Dict[str, Any]]:
        """Parse whatever is left once the stream has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        obj = self._parse_line(remainder)
        return [obj] if obj is not None else []

    def _parse_line(self, line: str) -> Optional[Dict[str, Any]]:
        if not line.strip():
            return None
        try:
            obj = json.loads(line)
        except ValueError:
            self.skipped_lines += 1
            logger.debug(f"Skipping malformed stream line: {line[:80]!r}")
            return None
        if not isinstance(obj, dict):
            self.skipped_lines += 1
            return None
        return obj
