"""Unit tests for the four-phase runner."""

import io
import logging

import pytest

from speedrun.const import EXIT_FAILURE, EXIT_OK
from speedrun.discovery import DiscoveryEngine, Prober
from speedrun.report import ReportRenderer
from speedrun.runner import SpeedrunRunner
from ..conftest import make_outcome, token_stream
from ..test_const import (
    HTTP_NOT_FOUND,
    HTTP_SUCCESS,
    MOCK_NOT_FOUND_BODY,
    MOCK_SHOW_RESPONSE,
    MOCK_TAGS_RESPONSE,
    TEST_MODEL,
    TEST_MODEL_2,
    TEST_PORT,
    TEST_REMOTE_IP,
)


@pytest.fixture
def report():
    return io.StringIO()


@pytest.fixture
def make_runner(config, ollama_client, progress_writer, report):
    def factory(explicit_hosts=(), addresses=()):
        discovery = DiscoveryEngine(
            config,
            Prober(ollama_client, TEST_PORT),
            address_provider=lambda: list(addresses),
            progress_writer=progress_writer,
        )
        return SpeedrunRunner(
            config,
            client=ollama_client,
            progress_writer=progress_writer,
            renderer=ReportRenderer(report, color=False),
            explicit_hosts=explicit_hosts,
            discovery_engine=discovery,
        )
    return factory


def add_remote(fake_ollama):
    host = fake_ollama.add_host(TEST_REMOTE_IP, tags=MOCK_TAGS_RESPONSE)
    for name in (TEST_MODEL, TEST_MODEL_2):
        host.show[name] = (HTTP_SUCCESS, MOCK_SHOW_RESPONSE)
    return host


class TestSpeedrunRunner:
    """Test phase sequencing and exit codes."""

    @pytest.mark.asyncio
    async def test_no_hosts(self, make_runner, caplog):
        caplog.set_level(logging.INFO)

        assert await make_runner().run() == EXIT_FAILURE
        assert "No Ollama instances found." in caplog.text
        assert "Phase 2" not in caplog.text

    @pytest.mark.asyncio
    async def test_no_models(self, fake_ollama, make_runner, caplog):
        caplog.set_level(logging.INFO)
        fake_ollama.add_host(TEST_REMOTE_IP)

        assert await make_runner(explicit_hosts=[TEST_REMOTE_IP]).run() == EXIT_FAILURE
        assert "No models found on any instance." in caplog.text
        assert fake_ollama.calls("/api/generate") == []

    @pytest.mark.asyncio
    async def test_every_benchmark_fails(self, fake_ollama, make_runner, report, caplog):
        caplog.set_level(logging.INFO)
        host = add_remote(fake_ollama)
        host.generate[TEST_MODEL] = (HTTP_NOT_FOUND, MOCK_NOT_FOUND_BODY)
        host.generate[TEST_MODEL_2] = (HTTP_NOT_FOUND, MOCK_NOT_FOUND_BODY)

        assert await make_runner(explicit_hosts=[TEST_REMOTE_IP]).run() == EXIT_FAILURE
        assert "No benchmark results to assess." in caplog.text
        assert "Tok/s" not in report.getvalue()

    @pytest.mark.asyncio
    async def test_explicit_host_full_run(self, fake_ollama, make_runner, report, caplog):
        """Test a named host goes through every phase without a subnet scan."""
        caplog.set_level(logging.INFO)
        host = add_remote(fake_ollama)
        host.generate[TEST_MODEL] = (HTTP_SUCCESS, token_stream(["a", "b", "c"], eval_count=3))
        host.generate[TEST_MODEL_2] = (HTTP_NOT_FOUND, MOCK_NOT_FOUND_BODY)

        assert await make_runner(explicit_hosts=[TEST_REMOTE_IP]).run() == EXIT_OK

        assert f"Top recommendation: {TEST_MODEL} on {TEST_REMOTE_IP}" in caplog.text
        assert f"{TEST_MODEL_2}: benchmark failed" in caplog.text
        assert TEST_MODEL in report.getvalue()
        probed = {address for _, address, path, _ in fake_ollama.requests if path == "/api/tags"}
        assert probed == {f"{TEST_REMOTE_IP}:{TEST_PORT}"}

    def test_assess_returns_best(self, make_runner, report):
        runner = make_runner()
        best = runner.assess([make_outcome("slow", tokens_per_second=5), make_outcome("quick", tokens_per_second=50)])

        assert best.outcome.model.name == "quick"
        assert "quick" in report.getvalue()

    def test_assess_empty(self, make_runner):
        assert make_runner().assess([]) is None
