"""Shared test configuration and fixtures for all tests."""

import asyncio
import io
import json
from typing import Dict, Iterable, List, Optional, Tuple

import httpx
import pytest

from speedrun.shared.config import Config
from speedrun.shared.logging import ProgressWriter
from speedrun.shared.models import BenchmarkOutcome, HostAddress, ModelDescriptor
from speedrun.shared.ollama_client import OllamaClient
from .test_const import GIB, HTTP_NOT_FOUND, HTTP_SUCCESS, MOCK_DETAILS, TEST_PORT


def ndjson(*chunks: dict) -> bytes:
    """Encode chunks as newline-delimited JSON."""
    return b"".join(json.dumps(chunk).encode() + b"\n" for chunk in chunks)


def token_stream(fragments: Iterable[str], **final) -> List[bytes]:
    """One byte chunk per fragment, then a done chunk carrying ``final`` fields."""
    chunks = [ndjson({"response": fragment, "done": False}) for fragment in fragments]
    chunks.append(ndjson({"response": "", "done": True, **final}))
    return chunks


async def _aiter(chunks: List[bytes]):
    for chunk in chunks:
        yield chunk


class FakeHost:
    """Canned answers for one fake Ollama server."""

    def __init__(self, tags: Optional[dict] = None, tags_status: int = HTTP_SUCCESS, delay_s: float = 0.0):
        self.tags = tags if tags is not None else {"models": []}
        self.tags_status = tags_status
        self.delay_s = delay_s
        self.show: Dict[str, Tuple[int, dict]] = {}
        self.generate: Dict[str, Tuple[int, object]] = {}


class FakeOllama:
    """In-memory Ollama hosts served through ``httpx.MockTransport``.

    Unknown addresses refuse the connection.
    """

    def __init__(self):
        self.hosts: Dict[str, FakeHost] = {}
        self.requests: List[Tuple[str, str, str, dict]] = []
        self.transport = httpx.MockTransport(self.handler)

    def add_host(self, ip: str, port: int = TEST_PORT, **kwargs) -> FakeHost:
        host = FakeHost(**kwargs)
        self.hosts[f"{ip}:{port}"] = host
        return host

    def calls(self, path: str) -> List[Tuple[str, str, str, dict]]:
        return [r for r in self.requests if r[2] == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        address = f"{request.url.host}:{request.url.port}"
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.method, address, request.url.path, body))

        host = self.hosts.get(address)
        if host is None:
            raise httpx.ConnectError("Connection refused", request=request)
        if host.delay_s:
            await asyncio.sleep(host.delay_s)

        path = request.url.path
        if path == "/api/tags":
            return httpx.Response(host.tags_status, json=host.tags)
        if path == "/api/show":
            status, payload = host.show.get(body.get("model"), (HTTP_NOT_FOUND, {"error": "model not found"}))
            return httpx.Response(status, json=payload)
        if path == "/api/generate":
            status, stream = host.generate.get(body.get("model"), (HTTP_NOT_FOUND, '{"error":"model not found"}'))
            if status != HTTP_SUCCESS:
                return httpx.Response(status, text=stream)
            if callable(stream):
                return httpx.Response(status, content=stream())
            return httpx.Response(status, content=_aiter(list(stream)))
        return httpx.Response(HTTP_NOT_FOUND)


@pytest.fixture
def fake_ollama():
    """Fake Ollama network fixture."""
    return FakeOllama()


@pytest.fixture
def ollama_client(fake_ollama):
    """OllamaClient wired to the fake network."""
    return OllamaClient(transport=fake_ollama.transport)


@pytest.fixture
def config():
    """Config with fast timeouts and a small batch size."""
    return Config(
        ollama_port=TEST_PORT,
        connect_timeout_ms=200,
        localhost_timeout_ms=200,
        localhost_retries=3,
        subnet_batch_size=50,
        enum_timeout_ms=500,
        generate_timeout_s=5,
    )


@pytest.fixture
def progress_stream():
    return io.StringIO()


@pytest.fixture
def progress_writer(progress_stream):
    return ProgressWriter(progress_stream, color=False)


class FakeClock:
    """Manually advanced replacement for ``time.perf_counter``."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


def make_host(ip: str = "127.0.0.1", hostname: str = "localhost", port: int = TEST_PORT) -> HostAddress:
    return HostAddress(address=f"{ip}:{port}", hostname=hostname)


def make_model(name: str = "test-model", size_bytes: int = 3 * GIB, host: Optional[HostAddress] = None) -> ModelDescriptor:
    return ModelDescriptor(
        host=host or make_host(),
        name=name,
        size_bytes=size_bytes,
        parameter_size=MOCK_DETAILS["parameter_size"],
        quantization=MOCK_DETAILS["quantization_level"],
        family=MOCK_DETAILS["family"],
        capabilities=("completion",),
    )


def make_outcome(
    name: str = "test-model",
    size_bytes: int = 3 * GIB,
    tokens_per_second: float = 10.0,
    total_tokens: int = 100,
    host: Optional[HostAddress] = None,
) -> BenchmarkOutcome:
    return BenchmarkOutcome(
        model=make_model(name, size_bytes, host),
        response_text="text",
        total_tokens=total_tokens,
        tokens_per_second=tokens_per_second,
        time_to_first_token_ms=120.0,
        total_time_ms=5000.0,
        eval_count=total_tokens,
        prompt_eval_count=10,
    )
