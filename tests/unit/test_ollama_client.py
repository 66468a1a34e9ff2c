"""Unit tests for the Ollama HTTP client."""

import httpx
import pytest

from speedrun.shared.exceptions import (
    BenchmarkExecutionError,
    InvalidResponseFormatError,
    ModelValidationError,
    RequestError,
)
from speedrun.shared.ollama_client import OllamaClient
from ..test_const import (
    HTTP_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SUCCESS,
    MOCK_NOT_FOUND_BODY,
    MOCK_SHOW_RESPONSE,
    MOCK_TAGS_RESPONSE,
    SLOW_RESPONSE_S,
    TEST_MODEL,
    TEST_PORT,
    TEST_PROMPT,
    TEST_REMOTE_IP,
)
from ..conftest import ndjson

ADDRESS = f"{TEST_REMOTE_IP}:{TEST_PORT}"


class TestOllamaClient:
    """Test OllamaClient requests against a fake server."""

    @pytest.mark.asyncio
    async def test_ping_returns_status(self, fake_ollama, ollama_client):
        fake_ollama.add_host(TEST_REMOTE_IP, tags_status=HTTP_ERROR)
        assert await ollama_client.ping(ADDRESS, 1.0) == HTTP_ERROR

    @pytest.mark.asyncio
    async def test_ping_connection_refused(self, ollama_client):
        with pytest.raises(RequestError) as exc_info:
            await ollama_client.ping(ADDRESS, 1.0)
        assert "Failed to connect" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_deadline_cancels_request(self, fake_ollama, ollama_client):
        """Test the timeout cancels a request that never answers."""
        fake_ollama.add_host(TEST_REMOTE_IP, delay_s=SLOW_RESPONSE_S)
        with pytest.raises(RequestError) as exc_info:
            await ollama_client.list_models(ADDRESS, 0.05)
        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_list_models(self, fake_ollama, ollama_client):
        """Test list_models method."""
        fake_ollama.add_host(TEST_REMOTE_IP, tags=MOCK_TAGS_RESPONSE)

        result = await ollama_client.list_models(ADDRESS, 1.0)

        assert result == MOCK_TAGS_RESPONSE
        assert fake_ollama.calls("/api/tags")[0][:2] == ("GET", ADDRESS)

    @pytest.mark.asyncio
    async def test_list_models_error_status(self, fake_ollama, ollama_client):
        fake_ollama.add_host(TEST_REMOTE_IP, tags_status=HTTP_ERROR)
        with pytest.raises(RequestError) as exc_info:
            await ollama_client.list_models(ADDRESS, 1.0)
        assert "HTTP 500" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_list_models_invalid_json(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(HTTP_SUCCESS, text="not json"))
        client = OllamaClient(transport=transport)
        with pytest.raises(InvalidResponseFormatError):
            await client.list_models(ADDRESS, 1.0)

    @pytest.mark.asyncio
    async def test_show_model(self, fake_ollama, ollama_client):
        """Test show_model method."""
        host = fake_ollama.add_host(TEST_REMOTE_IP)
        host.show[TEST_MODEL] = (HTTP_SUCCESS, MOCK_SHOW_RESPONSE)

        result = await ollama_client.show_model(ADDRESS, TEST_MODEL, 1.0)

        assert result == MOCK_SHOW_RESPONSE
        method, _, _, body = fake_ollama.calls("/api/show")[0]
        assert method == "POST"
        assert body == {"model": TEST_MODEL}

    @pytest.mark.asyncio
    async def test_show_model_not_found(self, fake_ollama, ollama_client):
        fake_ollama.add_host(TEST_REMOTE_IP)
        with pytest.raises(ModelValidationError) as exc_info:
            await ollama_client.show_model(ADDRESS, TEST_MODEL, 1.0)
        assert exc_info.value.status_code == HTTP_NOT_FOUND

    @pytest.mark.asyncio
    async def test_stream_generate_yields_chunks(self, fake_ollama, ollama_client):
        """Test stream_generate passes raw chunks through in order."""
        chunks = [ndjson({"response": "a"}), ndjson({"response": "b", "done": True})]
        host = fake_ollama.add_host(TEST_REMOTE_IP)
        host.generate[TEST_MODEL] = (HTTP_SUCCESS, chunks)

        received = [c async for c in ollama_client.stream_generate(ADDRESS, TEST_MODEL, TEST_PROMPT, 5)]

        assert b"".join(received) == b"".join(chunks)
        _, _, _, body = fake_ollama.calls("/api/generate")[0]
        assert body == {"model": TEST_MODEL, "prompt": TEST_PROMPT, "stream": True}

    @pytest.mark.asyncio
    async def test_stream_generate_not_found_hint(self, fake_ollama, ollama_client):
        """Test a rejected request carries the status and the removed-model hint."""
        host = fake_ollama.add_host(TEST_REMOTE_IP)
        host.generate[TEST_MODEL] = (HTTP_NOT_FOUND, MOCK_NOT_FOUND_BODY)

        with pytest.raises(BenchmarkExecutionError) as exc_info:
            async for _ in ollama_client.stream_generate(ADDRESS, TEST_MODEL, TEST_PROMPT, 5):
                pass
        assert exc_info.value.status_code == HTTP_NOT_FOUND
        assert str(exc_info.value) == "HTTP 404 (model removed or not pulled)"

    @pytest.mark.asyncio
    async def test_stream_generate_error_without_hint(self, fake_ollama, ollama_client):
        host = fake_ollama.add_host(TEST_REMOTE_IP)
        host.generate[TEST_MODEL] = (HTTP_ERROR, "out of memory")

        with pytest.raises(BenchmarkExecutionError) as exc_info:
            async for _ in ollama_client.stream_generate(ADDRESS, TEST_MODEL, TEST_PROMPT, 5):
                pass
        assert str(exc_info.value) == "HTTP 500"

    @pytest.mark.asyncio
    async def test_stream_generate_aborted_stream(self, fake_ollama, ollama_client):
        """Test a stream cut mid-way surfaces as a RequestError."""
        async def broken():
            yield ndjson({"response": "partial"})
            raise httpx.ReadError("connection reset")

        host = fake_ollama.add_host(TEST_REMOTE_IP)
        host.generate[TEST_MODEL] = (HTTP_SUCCESS, broken)

        with pytest.raises(RequestError) as exc_info:
            async for _ in ollama_client.stream_generate(ADDRESS, TEST_MODEL, TEST_PROMPT, 5):
                pass
        assert "connection reset" in str(exc_info.value)
