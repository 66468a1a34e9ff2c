"""Main entry point for Ollama Speedrun."""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from speedrun.const import APP_DESCRIPTION, APP_VERSION, EXIT_FAILURE, EXIT_INTERRUPTED
from speedrun.report import ReportRenderer
from speedrun.runner import SpeedrunRunner
from speedrun.shared.config import Config
from speedrun.shared.logging import EventType, LoggingManager, ProgressWriter, event


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ollama-speedrun", description=APP_DESCRIPTION)
    parser.add_argument("--port", type=int, help="Ollama port to probe (env OLLAMA_PORT)")
    parser.add_argument(
        "--host",
        action="append",
        default=[],
        metavar="IP",
        help="Probe this address instead of scanning subnets; repeatable",
    )
    parser.add_argument("--localhost-only", action="store_true", help="Skip the subnet scan")
    parser.add_argument("--batch-size", type=int, help="Concurrent probes per subnet batch (env SUBNET_BATCH_SIZE)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (env LOG_LEVEL)")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colours")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser.parse_args(argv)


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map explicitly passed CLI flags onto Config fields."""
    overrides: Dict[str, Any] = {}
    if args.port is not None:
        overrides["ollama_port"] = args.port
    if args.batch_size is not None:
        overrides["subnet_batch_size"] = args.batch_size
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.localhost_only:
        overrides["scan_subnets"] = False
    return overrides


class OllamaSpeedrunApp:
    """Main application class for Ollama Speedrun."""

    def __init__(self, config: Config, explicit_hosts: List[str], color: Optional[bool] = None):
        self.config = config
        self.progress_writer = ProgressWriter(sys.stdout, color=color)
        self.renderer = ReportRenderer(sys.stdout, color=color)

        # Setup logging
        LoggingManager.setup_logging(
            config.log_level,
            progress_writer=self.progress_writer,
            library_log_levels=config.library_log_levels,
            color=color,
        )
        self.logger = LoggingManager.get_logger(__name__)

        self.runner = SpeedrunRunner(
            config,
            progress_writer=self.progress_writer,
            renderer=self.renderer,
            explicit_hosts=explicit_hosts,
        )

    def run(self) -> int:
        self.renderer.banner()
        try:
            return asyncio.run(self.runner.run())
        except KeyboardInterrupt:
            self.progress_writer.clear()
            self.logger.error("Interrupted.", extra=event(EventType.ERROR))
            return EXIT_INTERRUPTED
        except Exception as e:
            self.progress_writer.clear()
            self.logger.error(f"Fatal: {e}", extra=event(EventType.ERROR), exc_info=True)
            return EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = Config(**config_overrides(args))
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    app = OllamaSpeedrunApp(config, args.host, color=False if args.no_color else None)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
