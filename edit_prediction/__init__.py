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

"""Inline edit prediction for code editors backed by Ollama.

This package turns the text around a cursor into a prompt, streams a
completion from an Ollama server, cleans it up, and offers it as a
single insertion at the cursor. Refreshes are debounced and superseded
refreshes are cancelled, so a stale response never replaces a newer one.

Example usage:
    import asyncio
    from edit_prediction import InMemoryBuffer, OllamaCompletionProvider

    provider = OllamaCompletionProvider()  # reads OLLAMA_MODEL etc.

    buffer = InMemoryBuffer(text="def add(a, b):\n    ", path="math.py", language="Python")
    cursor = buffer.anchor_at(len(buffer.text))

    provider.refresh(buffer, cursor, debounce=True)
    await provider.pending_refresh

    prediction = provider.suggest(buffer, cursor)
    if prediction is not None:
        print(prediction.text)
"""

from edit_prediction.buffer import InMemoryBuffer, LanguageSettings, TextBuffer
from edit_prediction.config import OllamaSettings
from edit_prediction.context import collect_context
from edit_prediction.errors import (
    EditPredictionError,
    OllamaStreamError,
    OllamaTransportError,
)
from edit_prediction.ollama_client import OllamaClient
from edit_prediction.postprocess import clean_completion
from edit_prediction.prompts import build_messages, supports_fim
from edit_prediction.protocol import (
    Anchor,
    Bias,
    ChatMessage,
    ChatOptions,
    ChatRequest,
    ChatResponseDelta,
    ChatRole,
    Direction,
    EditPrediction,
    PredictionCapabilities,
    PredictionMetrics,
    TextEdit,
    TextWindow,
)
from edit_prediction.provider import BaseEditPredictionProvider, EditPredictionProvider
from edit_prediction.providers import OllamaCompletionProvider
from edit_prediction.registry import (
    EditPredictionProviderRegistry,
    get_prediction_registry,
    reset_prediction_registry,
)

__all__ = [
    # Protocol types
    "Anchor",
    "Bias",
    "ChatMessage",
    "ChatOptions",
    "ChatRequest",
    "ChatResponseDelta",
    "ChatRole",
    "Direction",
    "EditPrediction",
    "PredictionCapabilities",
    "PredictionMetrics",
    "TextEdit",
    "TextWindow",
    # Buffer
    "InMemoryBuffer",
    "LanguageSettings",
    "TextBuffer",
    # Pipeline
    "collect_context",
    "build_messages",
    "supports_fim",
    "clean_completion",
    # Configuration and transport
    "OllamaSettings",
    "OllamaClient",
    # Errors
    "EditPredictionError",
    "OllamaStreamError",
    "OllamaTransportError",
    # Providers
    "BaseEditPredictionProvider",
    "EditPredictionProvider",
    "OllamaCompletionProvider",
    # Registry
    "EditPredictionProviderRegistry",
    "get_prediction_registry",
    "reset_prediction_registry",
]
