"""Derives token timing statistics from a generation stream."""
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from speedrun.const import DONE_FIELD, EVAL_COUNT_FIELD, MS_PER_SECOND, PROMPT_EVAL_COUNT_FIELD, RESPONSE_FIELD


@dataclass
class StreamMetrics:
    """Final figures for one generation stream."""
    response_text: str
    total_tokens: int
    tokens_per_second: float
    time_to_first_token_ms: float
    total_time_ms: float
    eval_count: int
    prompt_eval_count: int


def _as_count(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return default


class LatencyAnalyzer:
    """Tracks one stream from request start to connection close.

    Call ``start`` right before the request is sent, ``observe`` for every
    parsed chunk, and ``finish`` once the stream has ended.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.perf_counter
        self.start_ms = 0.0
        self.first_token_ms: Optional[float] = None
        self.fragment_count = 0
        self.eval_count = 0
        self.prompt_eval_count = 0
        self._fragments: List[str] = []

    def _now_ms(self) -> float:
        return self._clock() * MS_PER_SECOND

    def start(self) -> None:
        self.start_ms = self._now_ms()
        self.first_token_ms = None
        self.fragment_count = 0
        self.eval_count = 0
        self.prompt_eval_count = 0
        self._fragments = []

    def observe(self, chunk: Dict[str, Any]) -> Optional[float]:
        """
        Account for one parsed chunk.

        Returns:
            Live tokens per second since the first token when the chunk carried
            a text fragment, otherwise None.
        """
        live_tps = None
        fragment = chunk.get(RESPONSE_FIELD)
        if isinstance(fragment, str) and fragment:
            now = self._now_ms()
            if self.first_token_ms is None:
                self.first_token_ms = now
            self._fragments.append(fragment)
            self.fragment_count += 1
            elapsed_s = (now - self.first_token_ms) / MS_PER_SECOND
            live_tps = self.fragment_count / elapsed_s if elapsed_s > 0 else 0.0

        if chunk.get(DONE_FIELD) is True:
            self.eval_count = _as_count(chunk.get(EVAL_COUNT_FIELD), self.fragment_count)
            self.prompt_eval_count = _as_count(chunk.get(PROMPT_EVAL_COUNT_FIELD), 0)
        return live_tps

    def finish(self) -> StreamMetrics:
        end_ms = self._now_ms()
        tokens_per_second = 0.0
        time_to_first_token_ms = 0.0
        if self.first_token_ms is not None:
            time_to_first_token_ms = self.first_token_ms - self.start_ms
            generation_s = (end_ms - self.first_token_ms) / MS_PER_SECOND
            if self.eval_count > 0 and generation_s > 0:
                tokens_per_second = self.eval_count / generation_s

        return StreamMetrics(
            response_text="".join(self._fragments),
            total_tokens=self.eval_count or self.fragment_count,
            tokens_per_second=tokens_per_second,
            time_to_first_token_ms=time_to_first_token_ms,
            total_time_ms=end_ms - self.start_ms,
            eval_count=self.eval_count,
            prompt_eval_count=self.prompt_eval_count,
        )
