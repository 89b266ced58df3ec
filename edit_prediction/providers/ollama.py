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

"""Ollama-backed edit prediction provider.

Streams a completion from a local or remote Ollama server and offers it
as a single insertion at the cursor (Copilot-style ghost text).

At most one refresh runs at a time. Each refresh captures the text
window synchronously, optionally waits out a short debounce, streams the
response, cleans it and commits it, but only while it is still the
installed refresh. A newer refresh cancels the old task and takes over
the slot, so a superseded response can never overwrite newer state.
"""

import asyncio
import logging
import time
from contextlib import aclosing
from typing import Hashable, Optional

from edit_prediction.buffer import TextBuffer
from edit_prediction.config import OllamaSettings
from edit_prediction.context import collect_context
from edit_prediction.errors import EditPredictionError
from edit_prediction.ollama_client import OllamaClient
from edit_prediction.postprocess import clean_completion
from edit_prediction.prompts import build_messages, supports_fim
from edit_prediction.protocol import (
    Anchor,
    ChatOptions,
    ChatRequest,
    ChatRole,
    EditPrediction,
    PredictionCapabilities,
    PredictionMetrics,
    TextEdit,
    TextWindow,
)
from edit_prediction.provider import BaseEditPredictionProvider

logger = logging.getLogger(__name__)


class OllamaCompletionProvider(BaseEditPredictionProvider):
    """Edit prediction provider using an Ollama chat model.

    Supports:
    - Fill-in-the-middle prompts for code models (CodeLlama, DeepSeek, StarCoder, ...)
    - Chat-instruction prompts for everything else
    - Debounced, cancellable streaming refreshes
    """

    def __init__(
        self,
        settings: Optional[OllamaSettings] = None,
        client: Optional[OllamaClient] = None,
    ):
        """Initialize the provider.

        Args:
            settings: Provider settings (read from the environment if not provided)
            client: Streaming client (created from settings on first use)
        """
        super().__init__()
        self._settings = settings if settings is not None else OllamaSettings.from_env()
        self._client = client
        self._owns_client = client is None
        self._metrics = PredictionMetrics()

        self._pending_refresh: Optional[asyncio.Task] = None
        self._buffer_id: Optional[Hashable] = None
        self._cursor_position: Optional[Anchor] = None
        self._prediction: Optional[EditPrediction] = None

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def display_name(self) -> str:
        return "Ollama"

    @property
    def settings(self) -> OllamaSettings:
        return self._settings

    @property
    def model(self) -> Optional[str]:
        """Configured model identity, or None when predictions are disabled."""
        return self._settings.model

    @property
    def metrics(self) -> PredictionMetrics:
        return self._metrics

    @property
    def pending_refresh(self) -> Optional[asyncio.Task]:
        """The in-flight refresh task, if any."""
        return self._pending_refresh

    def get_capabilities(self) -> PredictionCapabilities:
        return PredictionCapabilities(
            show_completions_in_menu=True,
            show_tab_accept_marker=True,
            supports_jump_to_edit=False,
            supports_cycling=False,
            supports_streaming=True,
        )

    def _get_client(self) -> OllamaClient:
        """Get or lazily create the streaming client."""
        if self._client is None:
            self._client = OllamaClient(
                api_url=self._settings.api_url,
                api_key=self._settings.api_key,
            )
        return self._client

    def _clear_prediction(self) -> None:
        self._prediction = None
        self._buffer_id = None
        self._cursor_position = None

    def is_enabled(self, buffer: TextBuffer, cursor: Anchor) -> bool:
        return self._settings.model is not None and super().is_enabled(buffer, cursor)

    def is_refreshing(self) -> bool:
        return self._pending_refresh is not None

    def refresh(self, buffer: TextBuffer, cursor: Anchor, debounce: bool) -> None:
        """Start a new prediction for the cursor, superseding any in-flight one.

        Must be called from a running event loop. The prompt is built from
        the buffer as it is now; later edits do not affect this request.

        Args:
            buffer: Buffer being edited
            cursor: Cursor anchor the prediction is computed for
            debounce: Wait a short quiet period before sending the request
        """
        model = self._settings.model
        if model is None:
            self._clear_prediction()
            return

        window = collect_context(buffer, cursor)
        is_fim = supports_fim(model)
        request = ChatRequest(
            model=model,
            messages=build_messages(window, model),
            stream=True,
            keep_alive=self._settings.keep_alive,
            options=ChatOptions(num_predict=self._settings.max_predict_tokens),
        )

        self._clear_prediction()
        self._metrics.total_refreshes += 1

        previous = self._pending_refresh
        self._pending_refresh = asyncio.get_running_loop().create_task(
            self._run_refresh(request, window, is_fim, buffer.buffer_id, cursor, debounce)
        )
        if previous is not None and not previous.done():
            previous.cancel()
            self._metrics.superseded_refreshes += 1
            logger.debug("Superseded in-flight Ollama refresh")

        logger.debug(
            f"Scheduled Ollama refresh (model={model}, fim={is_fim}, debounce={debounce})"
        )

    async def _run_refresh(
        self,
        request: ChatRequest,
        window: TextWindow,
        is_fim: bool,
        buffer_id: Hashable,
        cursor: Anchor,
        debounce: bool,
    ) -> None:
        """Body of one refresh task."""
        task = asyncio.current_task()

        try:
            if debounce:
                await asyncio.sleep(self._settings.debounce_ms / 1000)

            start_time = time.time()
            raw_completion = await self._stream_completion(request)
        except EditPredictionError as e:
            if self._pending_refresh is not task:
                logger.debug(f"Superseded Ollama refresh failed: {e}")
                return
            logger.warning(f"Ollama edit prediction failed: {e}")
            self._pending_refresh = None
            self._metrics.failed_refreshes += 1
            return

        if self._pending_refresh is not task:
            logger.debug("Dropping completion from superseded Ollama refresh")
            return

        self._pending_refresh = None
        self._metrics.total_latency_ms += (time.time() - start_time) * 1000

        completion = clean_completion(raw_completion, window.prefix, window.suffix, is_fim)
        if not completion.strip():
            logger.debug("Ollama returned an empty completion")
            self._clear_prediction()
            self._metrics.empty_results += 1
            return

        self._prediction = EditPrediction(
            edits=(TextEdit(start=cursor, end=cursor, new_text=completion),)
        )
        self._buffer_id = buffer_id
        self._cursor_position = cursor
        self._metrics.completed_refreshes += 1
        logger.debug(f"Stored Ollama prediction ({len(completion)} chars)")

    async def _stream_completion(self, request: ChatRequest) -> str:
        """Concatenate assistant content until a delta reports done."""
        chunks: list[str] = []
        stream = self._get_client().stream_chat_completion(request)
        async with aclosing(stream):
            async for delta in stream:
                if delta.message is not None and delta.message.role == ChatRole.ASSISTANT:
                    chunks.append(delta.message.content)
                if delta.done:
                    break
        return "".join(chunks)

    def accept(self) -> None:
        self._clear_prediction()

    def discard(self) -> None:
        self._clear_prediction()

    def suggest(self, buffer: TextBuffer, cursor: Anchor) -> Optional[EditPrediction]:
        """Return the stored prediction if it was computed for this buffer and cursor.

        Args:
            buffer: Buffer the host is showing
            cursor: Current cursor anchor

        Returns:
            The prediction, or None if nothing matches
        """
        if self._buffer_id == buffer.buffer_id and self._cursor_position == cursor:
            return self._prediction
        return None

    async def aclose(self) -> None:
        """Cancel any in-flight refresh and close the client if owned."""
        if self._pending_refresh is not None:
            self._pending_refresh.cancel()
            self._pending_refresh = None
        if self._client is not None and self._owns_client:
            await self._client.aclose()
