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

"""Shared fixtures for edit prediction tests."""

import pytest

from edit_prediction.buffer import InMemoryBuffer
from edit_prediction.config import OllamaSettings


@pytest.fixture
def chat_settings():
    """Settings for a chat-only model without debounce delay."""
    return OllamaSettings(model="llama3.2:3b", debounce_ms=0)


@pytest.fixture
def fim_settings():
    """Settings for a FIM-capable model."""
    return OllamaSettings(model="deepseek-coder:6.7b", debounce_ms=0)


@pytest.fixture
def python_buffer():
    """A small Python buffer with the cursor intended at its end."""
    return InMemoryBuffer(text="def add(a, b):\n    ", path="src/math_utils.py", language="Python")
