"""Handles a single streamed generation request and its timing."""
from typing import Any, Callable, Dict, Optional

from speedrun.shared.config import Config
from speedrun.shared.logging import LoggingManager, ProgressWriter
from speedrun.shared.models import BenchmarkOutcome, ModelDescriptor
from speedrun.shared.ollama_client import OllamaClient

from .constants import BenchmarkConstants
from .latency_analyzer import LatencyAnalyzer
from .stream_decoder import JsonLinesDecoder


logger = LoggingManager.get_logger(__name__)


class RequestExecutor:
    """Handles individual streamed request execution and timing."""

    def __init__(
        self,
        config: Config,
        client: OllamaClient,
        progress_writer: Optional[ProgressWriter] = None,
        prompt: str = BenchmarkConstants.BENCHMARK_PROMPT,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config
        self.client = client
        self.progress_writer = progress_writer or ProgressWriter()
        self.prompt = prompt
        self.clock = clock

    async def send_request(self, model: ModelDescriptor) -> BenchmarkOutcome:
        """
        Benchmark one model with a single streamed generation.

        Args:
            model: Validated model to run.

        Returns:
            BenchmarkOutcome built from the stream's timing.

        Raises:
            BenchmarkExecutionError: If the host rejects the request.
            RequestError: If the connection fails or the stream aborts.
        """
        analyzer = LatencyAnalyzer(self.clock)
        decoder = JsonLinesDecoder()

        analyzer.start()
        stream = self.client.stream_generate(
            model.host.address, model.name, self.prompt, self.config.generate_timeout_s
        )
        async for data in stream:
            for chunk in decoder.feed(data):
                self._observe(analyzer, model, chunk)
        for chunk in decoder.flush():
            self._observe(analyzer, model, chunk)

        if decoder.skipped_lines:
            logger.debug(f"{model.name}: skipped {decoder.skipped_lines} malformed line(s)")

        metrics = analyzer.finish()
        return BenchmarkOutcome(
            model=model,
            response_text=metrics.response_text,
            total_tokens=metrics.total_tokens,
            tokens_per_second=metrics.tokens_per_second,
            time_to_first_token_ms=metrics.time_to_first_token_ms,
            total_time_ms=metrics.total_time_ms,
            eval_count=metrics.eval_count,
            prompt_eval_count=metrics.prompt_eval_count,
        )

    def _observe(self, analyzer: LatencyAnalyzer, model: ModelDescriptor, chunk: Dict[str, Any]) -> None:
        live_tps = analyzer.observe(chunk)
        if live_tps is not None:
            self.progress_writer.update(BenchmarkConstants.PROGRESS_LINE_FORMAT.format(
                name=model.name, tokens=analyzer.fragment_count, tps=live_tps
            ))
