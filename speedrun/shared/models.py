"""Data models passed between the pipeline stages."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


@dataclass(frozen=True)
class HostAddress:
    """A reachable inference server."""
    address: str  # e.g. "192.168.1.76:11434"
    hostname: str  # e.g. "192.168.1.76" or "localhost"


@dataclass(frozen=True)
class SubnetInfo:
    """A /24 prefix seen on a local interface."""
    prefix: str  # e.g. "192.168.1"
    local_ip: str

    @property
    def cidr(self) -> str:
        return f"{self.prefix}.0/24"


@dataclass(frozen=True)
class ModelDescriptor:
    """A model that passed validation on a specific host."""
    host: HostAddress
    name: str
    size_bytes: int  # bytes on disk
    parameter_size: str  # e.g. "7B"
    quantization: str  # e.g. "Q4_K_M"
    family: str
    capabilities: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BenchmarkOutcome:
    """Timing and throughput of one successful benchmark run."""
    model: ModelDescriptor
    response_text: str
    total_tokens: int
    tokens_per_second: float
    time_to_first_token_ms: float
    total_time_ms: float
    eval_count: int
    prompt_eval_count: int


class MemoryTier(str, Enum):
    """Memory-size bands, ordered smallest first."""
    TINY = "Tiny (<2GB)"
    SMALL = "Small (2-4GB)"
    MEDIUM = "Medium (4-8GB)"
    LARGE = "Large (8-16GB)"
    XL = "XL (16GB+)"


@dataclass(frozen=True)
class ScoredOutcome:
    """A benchmark outcome ranked against the rest of its run."""
    outcome: BenchmarkOutcome
    speed_score: float  # 0-100
    quality_score: float  # 0-100
    composite_score: float  # 0-100
    tier: MemoryTier
