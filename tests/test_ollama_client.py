# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the Ollama streaming client."""

import json

import httpx
import pytest

from edit_prediction.errors import OllamaStreamError, OllamaTransportError
from edit_prediction.ollama_client import OllamaClient
from edit_prediction.protocol import ChatMessage, ChatOptions, ChatRequest, ChatRole


def _request() -> ChatRequest:
    return ChatRequest(
        model="codellama:7b-code",
        messages=[ChatMessage.system("be brief"), ChatMessage.user("<PRE> x <SUF> <MID>")],
        options=ChatOptions(num_predict=256),
    )


def _ndjson(*objects) -> bytes:
    return "".join(json.dumps(obj) + "\n" for obj in objects).encode("utf-8")


def _chunk(content: str, done: bool = False) -> dict:
    return {
        "model": "codellama:7b-code",
        "created_at": "2025-01-01T00:00:00Z",
        "message": {"role": "assistant", "content": content},
        "done": done,
    }


async def _collect(client: OllamaClient):
    return [delta async for delta in client.stream_chat_completion(_request())]


class _BrokenStream(httpx.AsyncByteStream):
    """Body that fails after the first line."""

    async def __aiter__(self):
        yield _ndjson(_chunk("partial"))
        raise httpx.ReadError("connection reset by peer")


class TestStreamChatCompletion:
    """Tests for OllamaClient.stream_chat_completion."""

    @pytest.mark.asyncio
    async def test_streams_deltas_in_order(self):
        """Test each NDJSON line becomes one delta."""
        body = _ndjson(_chunk("ret"), _chunk("urn 1"), _chunk("", done=True))
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        client = OllamaClient("http://ollama.local:11434", http_client=httpx.AsyncClient(transport=transport))

        deltas = await _collect(client)

        assert [d.message.content for d in deltas] == ["ret", "urn 1", ""]
        assert [d.done for d in deltas] == [False, False, True]
        assert deltas[0].message.role == ChatRole.ASSISTANT

    @pytest.mark.asyncio
    async def test_request_body_and_headers(self):
        """Test the POST body, endpoint and bearer credential."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=_ndjson(_chunk("", done=True)))

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = OllamaClient("https://ollama.example.com/", api_key="secret", http_client=http_client)

        await _collect(client)

        assert seen["method"] == "POST"
        assert seen["url"] == "https://ollama.example.com/api/chat"
        assert seen["auth"] == "Bearer secret"
        assert seen["body"] == {
            "model": "codellama:7b-code",
            "messages": [
                {"role": "system", "content": "be brief"},
                {"role": "user", "content": "<PRE> x <SUF> <MID>"},
            ],
            "stream": True,
            "keep_alive": -1,
            "options": {"num_predict": 256},
        }

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        """Test no Authorization header is sent without a credential."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, content=_ndjson(_chunk("", done=True)))

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = OllamaClient("http://localhost:11434", http_client=http_client)

        await _collect(client)

        assert seen["auth"] is None

    @pytest.mark.asyncio
    async def test_blank_lines_skipped(self):
        """Test keep-alive blank lines produce no deltas."""
        body = b"\n" + _ndjson(_chunk("a")) + b"\n\n" + _ndjson(_chunk("", done=True))
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        client = OllamaClient("http://localhost:11434", http_client=httpx.AsyncClient(transport=transport))

        deltas = await _collect(client)

        assert len(deltas) == 2

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """Test a non-success status raises a transport error with the body."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(404, text='{"error":"model not found"}')
        )
        client = OllamaClient("http://localhost:11434", http_client=httpx.AsyncClient(transport=transport))

        with pytest.raises(OllamaTransportError) as exc_info:
            await _collect(client)

        assert exc_info.value.status_code == 404
        assert "model not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test connection failures raise a transport error."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = OllamaClient(
            "http://localhost:11434",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(OllamaTransportError) as exc_info:
            await _collect(client)

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_line(self):
        """Test a non-JSON line raises a stream error."""
        body = _ndjson(_chunk("a")) + b"not json\n"
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        client = OllamaClient("http://localhost:11434", http_client=httpx.AsyncClient(transport=transport))

        with pytest.raises(OllamaStreamError):
            await _collect(client)

    @pytest.mark.asyncio
    async def test_error_object_in_stream(self):
        """Test an error object mid-stream raises a stream error."""
        body = _ndjson(_chunk("a"), {"error": "out of memory"})
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        client = OllamaClient("http://localhost:11434", http_client=httpx.AsyncClient(transport=transport))

        with pytest.raises(OllamaStreamError, match="out of memory"):
            await _collect(client)

    @pytest.mark.asyncio
    async def test_truncated_stream(self):
        """Test a connection dropped mid-body raises a stream error."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, stream=_BrokenStream())
        )
        client = OllamaClient("http://localhost:11434", http_client=httpx.AsyncClient(transport=transport))

        received = []
        with pytest.raises(OllamaStreamError):
            async for delta in client.stream_chat_completion(_request()):
                received.append(delta)

        assert [d.message.content for d in received] == ["partial"]

    @pytest.mark.asyncio
    async def test_invalid_url(self):
        """Test an unparseable server URL raises a transport error."""
        client = OllamaClient("http://localhost:abc")

        with pytest.raises(OllamaTransportError) as exc_info:
            await _collect(client)

        assert exc_info.value.status_code is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_consumed_stream(self):
        """Test httpx stream misuse surfaces as a stream error."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.StreamConsumed()

        client = OllamaClient(
            "http://localhost:11434",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(OllamaStreamError):
            await _collect(client)


class TestClientLifecycle:
    """Tests for client ownership."""

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        """Test aclose does not close a caller-owned HTTP client."""
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        client = OllamaClient("http://localhost:11434", http_client=http_client)

        await client.aclose()

        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        """Test aclose closes a lazily created HTTP client."""
        client = OllamaClient("http://localhost:11434")
        http_client = client._get_client()

        await client.aclose()

        assert http_client.is_closed

    def test_api_url_trailing_slash(self):
        """Test trailing slashes are removed from the base URL."""
        assert OllamaClient("http://localhost:11434/").api_url == "http://localhost:11434"
