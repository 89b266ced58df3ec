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

"""Edit prediction provider interface and base implementation.

Defines the contract between the host editor and a prediction source
following the Strategy pattern, so backends can be swapped without the
host knowing which one is active.
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable

from edit_prediction.buffer import TextBuffer
from edit_prediction.protocol import (
    Anchor,
    Direction,
    EditPrediction,
    PredictionCapabilities,
)


@runtime_checkable
class EditPredictionProvider(Protocol):
    """Protocol for edit prediction providers.

    The host calls refresh on typing and cursor movement, then asks
    suggest whether a prediction is ready for the current position.
    """

    @property
    def name(self) -> str:
        """Unique identifier for this provider."""
        ...

    @property
    def display_name(self) -> str:
        """Human-readable provider name."""
        ...

    def get_capabilities(self) -> PredictionCapabilities:
        """Return the capabilities of this provider."""
        ...

    def is_enabled(self, buffer: TextBuffer, cursor: Anchor) -> bool:
        """Whether predictions can be produced for this buffer and cursor."""
        ...

    def is_refreshing(self) -> bool:
        """Whether a refresh is in flight."""
        ...

    def refresh(self, buffer: TextBuffer, cursor: Anchor, debounce: bool) -> None:
        """Start computing a prediction for the cursor, replacing any in-flight one."""
        ...

    def cycle(self, buffer: TextBuffer, cursor: Anchor, direction: Direction) -> None:
        """Move to another candidate prediction."""
        ...

    def accept(self) -> None:
        """Called after the host applied the current prediction."""
        ...

    def discard(self) -> None:
        """Called when the user dismissed the current prediction."""
        ...

    def suggest(self, buffer: TextBuffer, cursor: Anchor) -> Optional[EditPrediction]:
        """Return the prediction computed for exactly this buffer and cursor, if any."""
        ...


class BaseEditPredictionProvider(ABC):
    """Abstract base class for edit prediction providers.

    Provides common functionality and default implementations.
    Subclasses must implement the abstract methods.
    """

    def __init__(self):
        """Initialize the provider."""
        self._enabled = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this provider."""
        ...

    @property
    def display_name(self) -> str:
        """Human-readable provider name (defaults to name)."""
        return self.name

    @property
    def enabled(self) -> bool:
        """Whether this provider is switched on by the host."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        """Enable or disable this provider."""
        self._enabled = value

    def get_capabilities(self) -> PredictionCapabilities:
        """Return default capabilities.

        Override in subclasses that report different UI behavior.
        """
        return PredictionCapabilities()

    def is_enabled(self, buffer: TextBuffer, cursor: Anchor) -> bool:
        if not self._enabled:
            return False
        language = buffer.language_at(buffer.to_offset(cursor))
        return language is None or self.supports_language(language)

    def supports_language(self, language: str) -> bool:
        """Check if this provider supports a language.

        Args:
            language: Language name (e.g., 'Python', 'Rust')

        Returns:
            True if supported, False otherwise
        """
        capabilities = self.get_capabilities()
        if not capabilities.supported_languages:
            return True  # Empty means all languages
        return language.lower() in [lang.lower() for lang in capabilities.supported_languages]

    def is_refreshing(self) -> bool:
        return False

    @abstractmethod
    def refresh(self, buffer: TextBuffer, cursor: Anchor, debounce: bool) -> None:
        """Start computing a prediction."""
        ...

    def cycle(self, buffer: TextBuffer, cursor: Anchor, direction: Direction) -> None:
        """Cycle through candidates.

        Default implementation does nothing; single-candidate providers
        have nothing to cycle through.
        """

    @abstractmethod
    def accept(self) -> None:
        """Forget the prediction after it has been applied."""
        ...

    @abstractmethod
    def discard(self) -> None:
        """Forget the prediction after it has been dismissed."""
        ...

    @abstractmethod
    def suggest(self, buffer: TextBuffer, cursor: Anchor) -> Optional[EditPrediction]:
        """Return the stored prediction if it matches buffer and cursor."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, enabled={self.enabled})"
