"""Single-address connectivity check against the Ollama model list endpoint."""
from speedrun.const import MS_PER_SECOND
from speedrun.shared.logging import LoggingManager
from speedrun.shared.ollama_client import OllamaClient


logger = LoggingManager.get_logger(__name__)


class Prober:
    """Answers whether an Ollama server is listening at an IP address."""

    def __init__(self, client: OllamaClient, port: int):
        self.client = client
        self.port = port

    def address_for(self, ip: str) -> str:
        return f"{ip}:{self.port}"

    async def probe(self, ip: str, timeout_ms: int) -> bool:
        """
        Probe one address.

        Args:
            ip: IPv4 address to check.
            timeout_ms: Deadline for the whole request; expiry cancels it.

        Returns:
            True only for a 2xx answer within the deadline. Every failure,
            including non-2xx statuses, folds into False.
        """
        try:
            status = await self.client.ping(self.address_for(ip), timeout_ms / MS_PER_SECOND)
        except Exception as e:
            logger.debug(f"{ip}: unreachable ({e})")
            return False
        return 200 <= status < 300
