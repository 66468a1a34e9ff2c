"""Local IPv4 interface listing and /24 subnet derivation."""
import ipaddress
import re
import subprocess
from typing import Iterable, List, Sequence, Set, Tuple

from speedrun.shared.logging import LoggingManager
from speedrun.shared.models import SubnetInfo


logger = LoggingManager.get_logger(__name__)

IP_ADDR_COMMAND = ["ip", "-o", "-f", "inet", "addr", "show"]
IFCONFIG_COMMAND = ["ifconfig"]

_IFCONFIG_INET = re.compile(r"\binet (?:addr:)?(\d{1,3}(?:\.\d{1,3}){3})")


def parse_ip_addr_output(output: str) -> List[ipaddress.IPv4Address]:
    """Extract IPv4 addresses from ``ip -o -f inet addr show`` output."""
    addresses = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 4 or parts[2] != "inet":
            continue
        try:
            addresses.append(ipaddress.ip_interface(parts[3]).ip)
        except ValueError:
            continue
    return addresses


def parse_ifconfig_output(output: str) -> List[ipaddress.IPv4Address]:
    """Extract IPv4 addresses from ``ifconfig`` output (BSD and net-tools formats)."""
    addresses = []
    for match in _IFCONFIG_INET.finditer(output):
        try:
            addresses.append(ipaddress.IPv4Address(match.group(1)))
        except ValueError:
            continue
    return addresses


def _run(command: Sequence[str]) -> str:
    return subprocess.check_output(list(command), text=True, stderr=subprocess.DEVNULL)


def list_ipv4_addresses() -> List[str]:
    """
    List the machine's non-loopback IPv4 interface addresses.

    Tries ``ip`` first and falls back to ``ifconfig``. A host where neither
    tool is available yields an empty list.
    """
    for command, parser in ((IP_ADDR_COMMAND, parse_ip_addr_output), (IFCONFIG_COMMAND, parse_ifconfig_output)):
        try:
            output = _run(command)
        except (OSError, subprocess.CalledProcessError) as e:
            logger.debug(f"{command[0]} unavailable: {e}")
            continue
        return [str(ip) for ip in parser(output) if not ip.is_loopback]
    return []


def derive_subnets(addresses: Iterable[str]) -> Tuple[List[SubnetInfo], Set[str]]:
    """
    Group interface addresses by /24 prefix.

    Args:
        addresses: IPv4 interface addresses in interface order.

    Returns:
        Tuple of (distinct subnets in first-seen order, every local address).
        Loopback and malformed addresses are ignored.
    """
    subnets: List[SubnetInfo] = []
    local_ips: Set[str] = set()
    seen = set()

    for raw in addresses:
        try:
            ip = ipaddress.IPv4Address(raw)
        except ValueError:
            continue
        if ip.is_loopback:
            continue
        address = str(ip)
        local_ips.add(address)
        prefix = address.rsplit(".", 1)[0]
        if prefix not in seen:
            seen.add(prefix)
            subnets.append(SubnetInfo(prefix=prefix, local_ip=address))
    return subnets, local_ips
