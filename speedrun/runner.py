"""Runner that orchestrates discovery, enumeration, benchmark, and assessment."""
from typing import List, Optional, Sequence

from speedrun.benchmark import OllamaBenchmark
from speedrun.const import EXIT_FAILURE, EXIT_OK
from speedrun.discovery import DiscoveryEngine, Prober
from speedrun.enumeration import EnumerationEngine
from speedrun.report import ReportRenderer
from speedrun.scoring import ScoringEngine, top_recommendation
from speedrun.shared.config import Config
from speedrun.shared.logging import EventType, LoggingManager, ProgressWriter, event
from speedrun.shared.models import BenchmarkOutcome, HostAddress, ScoredOutcome
from speedrun.shared.ollama_client import OllamaClient


logger = LoggingManager.get_logger(__name__)


class SpeedrunRunner:
    """Runs the four phases in order and decides when an empty stage ends the run."""

    def __init__(
        self,
        config: Config,
        client: Optional[OllamaClient] = None,
        progress_writer: Optional[ProgressWriter] = None,
        renderer: Optional[ReportRenderer] = None,
        explicit_hosts: Sequence[str] = (),
        discovery_engine: Optional[DiscoveryEngine] = None,
    ):
        self.config = config
        self.client = client or OllamaClient()
        self.progress_writer = progress_writer or ProgressWriter()
        self.renderer = renderer or ReportRenderer()
        self.explicit_hosts = list(explicit_hosts)

        self.discovery_engine = discovery_engine or DiscoveryEngine(
            config, Prober(self.client, config.ollama_port), progress_writer=self.progress_writer
        )
        self.enumeration_engine = EnumerationEngine(config, self.client)
        self.benchmark = OllamaBenchmark(config, self.client, self.progress_writer)
        self.scoring_engine = ScoringEngine(config.speed_weight, config.quality_weight)

    async def discover(self) -> List[HostAddress]:
        if self.explicit_hosts:
            return await self.discovery_engine.probe_targets(self.explicit_hosts)
        return await self.discovery_engine.discover()

    def assess(self, results: List[BenchmarkOutcome]) -> Optional[ScoredOutcome]:
        """Score, render by tier, and announce the overall recommendation."""
        if not results:
            logger.error("No benchmark results to assess.", extra=event(EventType.ERROR))
            return None

        scored = self.scoring_engine.score(results)
        self.renderer.render_tiers(scored)

        best = top_recommendation(scored)
        model = best.outcome.model
        logger.info(
            f"Top recommendation: {model.name} on {model.host.hostname} "
            f"(score: {best.composite_score:.0f}, {best.tier.value})",
            extra=event(EventType.PHASE),
        )
        return best

    async def run(self) -> int:
        """Run the complete pipeline and return a process exit code."""
        logger.info("Phase 1: Discovering Ollama instances...", extra=event(EventType.PHASE))
        hosts = await self.discover()
        if not hosts:
            logger.error("No Ollama instances found.", extra=event(EventType.ERROR))
            return EXIT_FAILURE
        hostnames = ", ".join(h.hostname for h in hosts)
        logger.info(f"Found {len(hosts)} Ollama instance(s): {hostnames}", extra=event(EventType.SUCCESS))

        logger.info("Phase 2: Enumerating models...", extra=event(EventType.PHASE))
        models = await self.enumeration_engine.enumerate(hosts)
        if not models:
            logger.error("No models found on any instance.", extra=event(EventType.ERROR))
            return EXIT_FAILURE
        logger.info(f"Found {len(models)} model(s) across all instances", extra=event(EventType.SUCCESS))

        logger.info("Phase 3: Benchmarking models...", extra=event(EventType.PHASE))
        results = await self.benchmark.benchmark(models)

        logger.info("Phase 4: Assessment...", extra=event(EventType.PHASE))
        best = self.assess(results)
        return EXIT_OK if best is not None else EXIT_FAILURE
