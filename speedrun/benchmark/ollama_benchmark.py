"""Runs the throughput benchmark over every validated model, one at a time."""
from typing import List, Optional

from speedrun.const import MS_PER_SECOND
from speedrun.shared.config import Config
from speedrun.shared.exceptions import SpeedrunError
from speedrun.shared.logging import EventType, LoggingManager, ProgressWriter, event
from speedrun.shared.models import BenchmarkOutcome, ModelDescriptor
from speedrun.shared.ollama_client import OllamaClient

from .request_executor import RequestExecutor


logger = LoggingManager.get_logger(__name__)


class OllamaBenchmark:
    """Benchmarks models sequentially so no two runs share a host's load."""

    def __init__(
        self,
        config: Config,
        client: OllamaClient,
        progress_writer: Optional[ProgressWriter] = None,
        request_executor: Optional[RequestExecutor] = None,
    ):
        self.config = config
        self.progress_writer = progress_writer or ProgressWriter()
        self.request_executor = request_executor or RequestExecutor(config, client, self.progress_writer)

    async def benchmark(self, models: List[ModelDescriptor]) -> List[BenchmarkOutcome]:
        """
        Benchmark each model in order.

        Args:
            models: Models produced by enumeration.

        Returns:
            One outcome per model that succeeded. Failures are logged with
            their message and left out.
        """
        results: List[BenchmarkOutcome] = []
        total = len(models)

        for index, model in enumerate(models, start=1):
            logger.info(
                f"Benchmarking {model.name} on {model.host.hostname} ({index}/{total})...",
                extra=event(EventType.PROGRESS),
            )
            try:
                result = await self.request_executor.send_request(model)
            except SpeedrunError as e:
                self.progress_writer.clear()
                logger.error(f"{model.name}: benchmark failed -- {e}", extra=event(EventType.ERROR))
                continue

            self.progress_writer.clear()
            results.append(result)
            logger.info(
                f"{model.name}: {result.tokens_per_second:.1f} tok/s, "
                f"TTFT {result.time_to_first_token_ms:.0f}ms, "
                f"{result.total_tokens} tokens in {result.total_time_ms / MS_PER_SECOND:.1f}s",
                extra=event(EventType.SUCCESS),
            )

        return results
