"""Finds reachable Ollama servers on localhost and the local /24 subnets."""
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from speedrun.const import LOCALHOST_IP, LOCALHOST_NAME, SUBNET_FIRST_HOST, SUBNET_LAST_HOST
from speedrun.shared.config import Config
from speedrun.shared.logging import EventType, LoggingManager, ProgressWriter, event
from speedrun.shared.models import HostAddress, SubnetInfo

from .concurrency_manager import ConcurrencyManager
from .network_interfaces import derive_subnets, list_ipv4_addresses
from .prober import Prober


logger = LoggingManager.get_logger(__name__)


class DiscoveryEngine:
    """Probes localhost with retries, then every host of each local /24 in batches."""

    def __init__(
        self,
        config: Config,
        prober: Prober,
        address_provider: Callable[[], Iterable[str]] = list_ipv4_addresses,
        progress_writer: Optional[ProgressWriter] = None,
    ):
        self.config = config
        self.prober = prober
        self.address_provider = address_provider
        self.progress_writer = progress_writer or ProgressWriter()
        self.concurrency_manager = ConcurrencyManager(config.subnet_batch_size)

    async def discover(self) -> List[HostAddress]:
        """
        Discover reachable hosts.

        Returns:
            Localhost first when found, then subnet hosts in subnet order and
            ascending address order. Never contains a local interface address.
        """
        hosts: List[HostAddress] = []

        localhost = await self.probe_localhost()
        if localhost is not None:
            hosts.append(localhost)

        if not self.config.scan_subnets:
            return hosts

        subnets, local_ips = derive_subnets(self.address_provider())
        for subnet in subnets:
            hosts.extend(await self.scan_subnet(subnet, local_ips))
        return hosts

    async def probe_with_retries(self, ip: str) -> bool:
        retries = self.config.localhost_retries
        for attempt in range(1, retries + 1):
            if await self.prober.probe(ip, self.config.localhost_timeout_ms):
                return True
            if attempt < retries:
                logger.info(f"{ip}: retry {attempt + 1}/{retries}...", extra=event(EventType.INFO))
        return False

    async def probe_localhost(self) -> Optional[HostAddress]:
        logger.info("Checking localhost...", extra=event(EventType.INFO))
        if await self.probe_with_retries(LOCALHOST_IP):
            logger.info(f"{LOCALHOST_NAME}: Ollama found", extra=event(EventType.SUCCESS))
            return HostAddress(address=self.prober.address_for(LOCALHOST_IP), hostname=LOCALHOST_NAME)
        logger.info(f"{LOCALHOST_NAME}: no Ollama instance detected", extra=event(EventType.INFO))
        return None

    async def probe_targets(self, ips: Sequence[str]) -> List[HostAddress]:
        """Probe explicitly named addresses with the localhost retry policy."""
        hosts = []
        for ip in ips:
            if await self.probe_with_retries(ip):
                hostname = LOCALHOST_NAME if ip == LOCALHOST_IP else ip
                hosts.append(HostAddress(address=self.prober.address_for(ip), hostname=hostname))
                logger.info(f"{hostname}: Ollama found", extra=event(EventType.SUCCESS))
            else:
                logger.info(f"{ip}: no Ollama instance detected", extra=event(EventType.INFO))
        return hosts

    @staticmethod
    def candidate_ips(subnet: SubnetInfo, local_ips: Set[str]) -> List[str]:
        candidates = (f"{subnet.prefix}.{i}" for i in range(SUBNET_FIRST_HOST, SUBNET_LAST_HOST + 1))
        return [ip for ip in candidates if ip not in local_ips]

    async def scan_subnet(self, subnet: SubnetInfo, local_ips: Set[str]) -> List[HostAddress]:
        logger.info(f"Scanning subnet {subnet.cidr}...", extra=event(EventType.INFO))
        hosts: List[HostAddress] = []

        def show_batch(batch: Sequence[str]) -> None:
            self.progress_writer.update(f"Probing {batch[0]}..{batch[-1]}")

        def collect(done: List[Tuple[str, bool]]) -> None:
            for ip, reachable in done:
                if reachable:
                    hosts.append(HostAddress(address=self.prober.address_for(ip), hostname=ip))
                    logger.info(f"{ip}: Ollama found", extra=event(EventType.SUCCESS))

        async def probe(ip: str) -> bool:
            return await self.prober.probe(ip, self.config.connect_timeout_ms)

        await self.concurrency_manager.run_batches(
            self.candidate_ips(subnet, local_ips), probe, on_batch_start=show_batch, on_batch_done=collect
        )
        self.progress_writer.clear()
        return hosts
