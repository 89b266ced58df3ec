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

"""Text buffer interface consumed by prediction providers.

The host editor owns the document model. Providers only need a text
snapshot, anchor resolution, and per-language indentation settings,
which is what the TextBuffer protocol describes. InMemoryBuffer is a
plain implementation for hosts without their own document model.
"""

import itertools
from dataclasses import dataclass, field
from pathlib import PurePath, PurePosixPath
from typing import Dict, Hashable, Optional, Protocol, Union, runtime_checkable

from edit_prediction.protocol import Anchor, Bias

_buffer_ids = itertools.count(1)


@dataclass(frozen=True)
class LanguageSettings:
    """Indentation settings for a language."""

    tab_size: int = 4
    hard_tabs: bool = False

    @property
    def insert_spaces(self) -> bool:
        return not self.hard_tabs


@runtime_checkable
class TextBuffer(Protocol):
    """Protocol for documents a provider can predict edits in."""

    @property
    def buffer_id(self) -> Hashable:
        """Identity of the buffer, stable for its lifetime."""
        ...

    @property
    def file_path(self) -> Optional[PurePath]:
        """Path of the backing file, or None for unsaved buffers."""
        ...

    def snapshot(self) -> str:
        """Return the current text."""
        ...

    def to_offset(self, anchor: Anchor) -> int:
        """Resolve an anchor to an offset in the current snapshot."""
        ...

    def anchor_at(self, offset: int, bias: Bias = Bias.LEFT) -> Anchor:
        """Create an anchor at an offset."""
        ...

    def language_at(self, offset: int) -> Optional[str]:
        """Name of the language at an offset, if known."""
        ...

    def language_settings(self, language: Optional[str]) -> LanguageSettings:
        """Indentation settings for a language."""
        ...


@dataclass
class InMemoryBuffer:
    """A text buffer held entirely in memory.

    Offsets are code point indices into the text.
    """

    text: str = ""
    path: Optional[Union[str, PurePath]] = None
    language: Optional[str] = None
    default_settings: LanguageSettings = field(default_factory=LanguageSettings)
    language_overrides: Dict[str, LanguageSettings] = field(default_factory=dict)
    _id: int = field(default_factory=lambda: next(_buffer_ids), init=False, repr=False)

    @property
    def buffer_id(self) -> int:
        return self._id

    @property
    def file_path(self) -> Optional[PurePath]:
        if self.path is None:
            return None
        return PurePosixPath(self.path) if isinstance(self.path, str) else self.path

    def snapshot(self) -> str:
        return self.text

    def to_offset(self, anchor: Anchor) -> int:
        return max(0, min(anchor.offset, len(self.text)))

    def anchor_at(self, offset: int, bias: Bias = Bias.LEFT) -> Anchor:
        return Anchor(offset=max(0, min(offset, len(self.text))), bias=bias)

    def language_at(self, offset: int) -> Optional[str]:
        return self.language

    def language_settings(self, language: Optional[str]) -> LanguageSettings:
        if language is not None and language in self.language_overrides:
            return self.language_overrides[language]
        return self.default_settings

    def edit(self, start: int, end: int, new_text: str) -> None:
        """Replace text[start:end] with new_text.

        Existing anchors keep their offsets and are clipped on resolution.
        """
        if not 0 <= start <= end <= len(self.text):
            raise ValueError(f"Invalid edit range {start}..{end} for length {len(self.text)}")
        self.text = self.text[:start] + new_text + self.text[end:]
