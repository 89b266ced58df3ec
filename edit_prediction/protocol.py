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

"""Edit prediction protocol types.

Defines the document-side types (anchors, edits, text windows), the
provider-facing result types, and the chat wire models exchanged with
the inference service.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class Bias(Enum):
    """Which side of an offset an anchor sticks to."""

    LEFT = "left"
    RIGHT = "right"


class Direction(Enum):
    """Direction for cycling through candidate predictions."""

    PREV = "prev"
    NEXT = "next"


@dataclass(frozen=True)
class Anchor:
    """A logical position in a buffer, resolved to an offset against a snapshot."""

    offset: int
    bias: Bias = Bias.LEFT


@dataclass(frozen=True)
class TextEdit:
    """Replacement of the half-open range [start, end) with new_text."""

    start: Anchor
    end: Anchor
    new_text: str

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class EditPrediction:
    """A prediction surfaced to the host editor."""

    edits: tuple[TextEdit, ...]
    id: Optional[str] = None

    @property
    def text(self) -> str:
        """Concatenated replacement text of all edits."""
        return "".join(edit.new_text for edit in self.edits)

    @property
    def is_insertion(self) -> bool:
        return all(edit.is_insertion for edit in self.edits)


@dataclass(frozen=True)
class TextWindow:
    """Bounded text around the cursor plus workspace metadata."""

    prefix: str
    suffix: str
    workspace_summary: str

    @property
    def language(self) -> str:
        """Language name recorded in the workspace summary."""
        for line in self.workspace_summary.splitlines():
            if line.startswith("Language: "):
                return line[len("Language: ") :]
        return "unknown"


@dataclass
class PredictionCapabilities:
    """What the provider supports, as reported to the host."""

    show_completions_in_menu: bool = True
    show_tab_accept_marker: bool = True
    supports_jump_to_edit: bool = False
    supports_cycling: bool = False
    supports_streaming: bool = True
    supported_languages: List[str] = field(default_factory=list)


@dataclass
class PredictionMetrics:
    """Counters for refresh outcomes."""

    total_refreshes: int = 0
    completed_refreshes: int = 0
    empty_results: int = 0
    failed_refreshes: int = 0
    superseded_refreshes: int = 0
    total_latency_ms: float = 0.0

    @property
    def average_latency_ms(self) -> float:
        """Mean latency of refreshes that reached the commit step."""
        finished = self.completed_refreshes + self.empty_results
        if finished == 0:
            return 0.0
        return self.total_latency_ms / finished


# Chat wire models (Ollama /api/chat)


class ChatRole(str, Enum):
    """Message author role."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One conversation turn."""

    role: ChatRole
    content: str = ""

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.ASSISTANT, content=content)


class ChatOptions(BaseModel):
    """Generation options."""

    num_predict: Optional[int] = Field(default=None, description="Maximum tokens to generate")
    temperature: Optional[float] = None
    stop: Optional[List[str]] = None


class ChatRequest(BaseModel):
    """Streaming chat request body."""

    model: str
    messages: List[ChatMessage]
    stream: bool = True
    keep_alive: Union[int, str] = -1
    options: Optional[ChatOptions] = None


class ChatResponseDelta(BaseModel):
    """One newline-delimited JSON object of a streamed chat response."""

    model: Optional[str] = None
    created_at: Optional[str] = None
    message: Optional[ChatMessage] = None
    done: bool = False
    error: Optional[str] = None
