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

"""Streaming client for the Ollama chat API.

Requests go to POST {api_url}/api/chat with stream=true; the server
answers with one JSON object per line until an object with done=true.
"""

import logging
from typing import AsyncIterator, Dict, Optional

import httpx
from pydantic import ValidationError

from edit_prediction.errors import OllamaStreamError, OllamaTransportError
from edit_prediction.protocol import ChatRequest, ChatResponseDelta

logger = logging.getLogger(__name__)

CHAT_ENDPOINT = "/api/chat"


class OllamaClient:
    """Async HTTP client for streamed chat completions.

    No request timeout is applied; a stalled stream is abandoned by the
    caller rather than timed out here.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            api_url: Base URL of the Ollama server
            api_key: Optional bearer token
            http_client: Preconfigured client (owned by the caller)
        """
        self._api_url = api_url.rstrip("/")
        self._api_key = api_key
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def api_url(self) -> str:
        return self._api_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or lazily create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(None))
        return self._client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def stream_chat_completion(
        self, request: ChatRequest
    ) -> AsyncIterator[ChatResponseDelta]:
        """Stream a chat completion.

        Args:
            request: Chat request; sent as-is

        Yields:
            Response deltas in arrival order

        Raises:
            OllamaTransportError: Connection failure or non-success status
            OllamaStreamError: Malformed, truncated or error-bearing stream
        """
        url = f"{self._api_url}{CHAT_ENDPOINT}"
        payload = request.model_dump(mode="json", exclude_none=True)
        client = self._get_client()

        response_started = False
        try:
            async with client.stream("POST", url, json=payload, headers=self._headers()) as response:
                response_started = True
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise OllamaTransportError(
                        f"Failed to connect to Ollama API: {response.status_code} {body}",
                        status_code=response.status_code,
                    )

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        delta = ChatResponseDelta.model_validate_json(line)
                    except ValidationError as e:
                        raise OllamaStreamError(f"Invalid chat response line: {line!r}") from e
                    if delta.error:
                        raise OllamaStreamError(f"Ollama reported an error: {delta.error}")
                    yield delta
        except httpx.InvalidURL as e:
            raise OllamaTransportError(f"Invalid Ollama API URL {url!r}: {e}") from e
        except httpx.StreamError as e:
            raise OllamaStreamError(f"Chat response stream unusable: {e}") from e
        except httpx.HTTPError as e:
            if response_started:
                raise OllamaStreamError(f"Chat response stream interrupted: {e}") from e
            raise OllamaTransportError(f"Failed to connect to Ollama API at {url}: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
