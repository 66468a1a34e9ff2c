import asyncio
from typing import Any, AsyncIterator, Dict, Optional, Union

import httpx

from speedrun.const import (
    GENERATE_PATH,
    MODEL_FIELD,
    MODEL_NOT_FOUND_MARKER,
    MODEL_REMOVED_HINT,
    PROMPT_FIELD,
    SHOW_PATH,
    STREAM_FIELD,
    TAGS_PATH,
)
from .exceptions import BenchmarkExecutionError, InvalidResponseFormatError, ModelValidationError, RequestError


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _request_error(url: str, exc: Exception) -> RequestError:
    """Translate an httpx failure into a RequestError with a readable message."""
    if isinstance(exc, httpx.ConnectError):
        return RequestError(f"Failed to connect to {url}: {_describe(exc)}", url=url)
    if isinstance(exc, httpx.TimeoutException):
        return RequestError(f"Request to {url} timed out: {_describe(exc)}", url=url)
    return RequestError(f"Request to {url} failed: {_describe(exc)}", url=url)


class OllamaClient:
    """Async client for the Ollama HTTP API.

    Every call opens a fresh ``httpx.AsyncClient``; nothing is pooled between
    requests. Bounded calls are wrapped in ``asyncio.wait_for`` so that an
    expired deadline cancels the in-flight request.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client(self, timeout: Union[float, httpx.Timeout]) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def _request(self, method: str, url: str, timeout_s: float, **kwargs) -> httpx.Response:
        async def send() -> httpx.Response:
            async with self._client(timeout_s) as client:
                return await client.request(method, url, **kwargs)

        try:
            return await asyncio.wait_for(send(), timeout_s)
        except asyncio.TimeoutError as e:
            raise RequestError(f"Request to {url} timed out after {timeout_s:g}s", url=url) from e
        except httpx.HTTPError as e:
            raise _request_error(url, e) from e

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseFormatError(f"Invalid JSON from {response.url}") from e
        if not isinstance(data, dict):
            raise InvalidResponseFormatError(f"Expected a JSON object from {response.url}")
        return data

    async def ping(self, address: str, timeout_s: float) -> int:
        """Hit the model list endpoint and return the HTTP status code."""
        response = await self._request("GET", f"http://{address}{TAGS_PATH}", timeout_s)
        return response.status_code

    async def list_models(self, address: str, timeout_s: float) -> Dict[str, Any]:
        """List the models a host advertises (``GET /api/tags``)."""
        url = f"http://{address}{TAGS_PATH}"
        response = await self._request("GET", url, timeout_s)
        if not response.is_success:
            raise RequestError(f"HTTP {response.status_code} from {url}", url=url)
        return self._json(response)

    async def show_model(self, address: str, name: str, timeout_s: float) -> Dict[str, Any]:
        """Show model information (``POST /api/show``).

        Raises:
            ModelValidationError: If the host answers with a non-success status.
        """
        url = f"http://{address}{SHOW_PATH}"
        response = await self._request("POST", url, timeout_s, json={MODEL_FIELD: name})
        if not response.is_success:
            raise ModelValidationError(
                f"model not available, HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return self._json(response)

    async def stream_generate(
        self,
        address: str,
        model: str,
        prompt: str,
        read_timeout_s: float,
    ) -> AsyncIterator[bytes]:
        """Stream a generation (``POST /api/generate``) as raw byte chunks.

        Args:
            address: Host address as ``ip:port``.
            model: Model name.
            prompt: Prompt text.
            read_timeout_s: Longest wait for the connection or any single read.

        Yields:
            Body chunks in arrival order, not aligned to line boundaries.

        Raises:
            BenchmarkExecutionError: If the initial response is not successful.
            RequestError: On any transport failure, including an aborted stream.
        """
        url = f"http://{address}{GENERATE_PATH}"
        payload = {MODEL_FIELD: model, PROMPT_FIELD: prompt, STREAM_FIELD: True}
        try:
            async with self._client(httpx.Timeout(read_timeout_s)) as client:
                async with client.stream("POST", url, json=payload) as response:
                    if not response.is_success:
                        body = await self._error_body(response)
                        hint = MODEL_REMOVED_HINT if MODEL_NOT_FOUND_MARKER in body else ""
                        raise BenchmarkExecutionError(
                            f"HTTP {response.status_code}",
                            status_code=response.status_code,
                            hint=hint,
                        )
                    async for chunk in response.aiter_bytes():
                        yield chunk
        except httpx.HTTPError as e:
            raise _request_error(url, e) from e

    @staticmethod
    async def _error_body(response: httpx.Response) -> str:
        try:
            return (await response.aread()).decode("utf-8", errors="replace")
        except httpx.HTTPError:
            return ""
