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

"""Tests for Ollama settings."""

import pytest
from pydantic import ValidationError

from edit_prediction.config import OLLAMA_API_URL, OllamaSettings


class TestOllamaSettings:
    """Tests for OllamaSettings."""

    def test_defaults(self):
        """Test defaults match the provider's tuning."""
        settings = OllamaSettings()

        assert settings.model is None
        assert settings.api_url == OLLAMA_API_URL == "http://localhost:11434"
        assert settings.api_key is None
        assert settings.debounce_ms == 75
        assert settings.max_predict_tokens == 256
        assert settings.keep_alive == -1
        assert not settings.enabled

    def test_from_env(self):
        """Test all recognized variables are read."""
        settings = OllamaSettings.from_env(
            {
                "OLLAMA_MODEL": "codellama:7b-code",
                "OLLAMA_API_URL": "http://gpu-box:11434",
                "OLLAMA_API_KEY": "secret",
            }
        )

        assert settings.model == "codellama:7b-code"
        assert settings.api_url == "http://gpu-box:11434"
        assert settings.api_key == "secret"
        assert settings.enabled

    def test_empty_values_ignored(self):
        """Test empty variables count as unset."""
        settings = OllamaSettings.from_env(
            {"OLLAMA_MODEL": "", "OLLAMA_API_URL": "", "OLLAMA_API_KEY": ""}
        )

        assert settings.model is None
        assert settings.api_url == OLLAMA_API_URL
        assert settings.api_key is None

    def test_reads_process_environment(self, monkeypatch):
        """Test os.environ is used by default."""
        monkeypatch.setenv("OLLAMA_MODEL", "starcoder2:3b")
        monkeypatch.delenv("OLLAMA_API_URL", raising=False)
        monkeypatch.delenv("OLLAMA_API_KEY", raising=False)

        settings = OllamaSettings.from_env()

        assert settings.model == "starcoder2:3b"
        assert settings.api_url == OLLAMA_API_URL

    def test_negative_debounce_rejected(self):
        """Test the debounce delay cannot be negative."""
        with pytest.raises(ValidationError):
            OllamaSettings(model="llama3", debounce_ms=-1)

    @pytest.mark.parametrize("url", ["http://localhost:abc", "not a url", "ftp://ollama.local"])
    def test_invalid_api_url_rejected(self, url):
        """Test malformed server URLs fail at construction."""
        with pytest.raises(ValidationError, match="invalid Ollama API URL"):
            OllamaSettings(model="llama3", api_url=url)

    def test_invalid_api_url_from_env(self):
        """Test a malformed OLLAMA_API_URL is rejected too."""
        with pytest.raises(ValidationError):
            OllamaSettings.from_env({"OLLAMA_MODEL": "llama3", "OLLAMA_API_URL": "http://:11434"})

    def test_api_url_trailing_slash_removed(self):
        """Test the stored URL has no trailing slash."""
        assert OllamaSettings(api_url="http://gpu-box:11434/").api_url == "http://gpu-box:11434"
