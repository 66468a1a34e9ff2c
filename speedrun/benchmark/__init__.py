"""Benchmark package initialization."""
from .constants import BenchmarkConstants
from .stream_decoder import JsonLinesDecoder
from .latency_analyzer import LatencyAnalyzer, StreamMetrics
from .request_executor import RequestExecutor
from .ollama_benchmark import OllamaBenchmark

__all__ = [
    'BenchmarkConstants',
    'JsonLinesDecoder',
    'LatencyAnalyzer',
    'StreamMetrics',
    'RequestExecutor',
    'OllamaBenchmark',
]
