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

"""Ollama edit prediction settings.

Settings are read from the process environment once, when a provider is
constructed, and then passed through the refresh pipeline unchanged.
"""

import os
from typing import Mapping, Optional, Union

from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

OLLAMA_MODEL_ENV = "OLLAMA_MODEL"
OLLAMA_API_URL_ENV = "OLLAMA_API_URL"
OLLAMA_API_KEY_ENV = "OLLAMA_API_KEY"

OLLAMA_API_URL = "http://localhost:11434"

DEFAULT_DEBOUNCE_MS = 75
DEFAULT_MAX_PREDICT_TOKENS = 256

_HTTP_URL = TypeAdapter(AnyHttpUrl)


class OllamaSettings(BaseModel):
    """Configuration for the Ollama completion provider."""

    model: Optional[str] = Field(
        default=None,
        description="Model identity (e.g. codellama:7b-code). None disables predictions",
    )
    api_url: str = Field(default=OLLAMA_API_URL, description="Base URL of the Ollama server")
    api_key: Optional[str] = Field(
        default=None, description="Optional bearer token sent with each request"
    )
    debounce_ms: int = Field(
        default=DEFAULT_DEBOUNCE_MS,
        ge=0,
        description="Quiet period before a debounced refresh issues its request",
    )
    max_predict_tokens: int = Field(
        default=DEFAULT_MAX_PREDICT_TOKENS,
        description="Maximum tokens the model may generate (num_predict)",
    )
    keep_alive: Union[int, str] = Field(
        default=-1,
        description="How long Ollama keeps the model loaded (-1 = indefinitely, or '5m')",
    )

    @field_validator("api_url")
    @classmethod
    def _valid_api_url(cls, v: str) -> str:
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"invalid Ollama API URL {v!r}: {e.errors()[0]['msg']}") from e
        return v.rstrip("/")

    @property
    def enabled(self) -> bool:
        """Whether a model is configured."""
        return self.model is not None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OllamaSettings":
        """Build settings from environment variables.

        Empty values are treated as unset.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings with model, URL and credential resolved
        """
        if environ is None:
            environ = os.environ

        def _read(name: str) -> Optional[str]:
            value = environ.get(name)
            return value if value else None

        return cls(
            model=_read(OLLAMA_MODEL_ENV),
            api_url=_read(OLLAMA_API_URL_ENV) or OLLAMA_API_URL,
            api_key=_read(OLLAMA_API_KEY_ENV),
        )
