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

"""Prompt construction for edit predictions.

Models trained for Fill-In-the-Middle (FIM) get the prefix and suffix
wrapped in their native delimiter tokens. Every other model gets a
chat-style instruction prompt showing a few lines around the cursor.
"""

from typing import Dict, List

from edit_prediction.protocol import ChatMessage, TextWindow

# Model name fragments known to support FIM prompting
FIM_MODELS = (
    "codellama",
    "code-llama",
    "deepseek",
    "starcoder",
    "codegemma",
    "granite-code",
)

# FIM prompt templates per model family
FIM_TEMPLATES: Dict[str, str] = {
    "codellama": "<PRE> {prefix} <SUF>{suffix} <MID>",
    "deepseek": "<｜fim▁begin｜>{prefix}<｜fim▁hole｜>{suffix}<｜fim▁end｜>",
    "starcoder": "<fim_prefix>{prefix}<fim_suffix>{suffix}<fim_middle>",
    "default": "<|fim_prefix|>{prefix}<|fim_suffix|>{suffix}<|fim_middle|>",
}

# Checked in order, first match wins
FIM_TEMPLATE_MATCHERS = (
    ("codellama", "codellama"),
    ("code-llama", "codellama"),
    ("deepseek", "deepseek"),
    ("starcoder", "starcoder"),
)

CHAT_SYSTEM_PROMPT = (
    "You are a code autocompletion engine. Generate ONLY the code to insert at the "
    "cursor position. Do not include any explanations, comments about your completion, "
    "or markdown formatting. Do not repeat existing code. Focus on completing the "
    "current line or block based on context."
)

CURSOR_MARKER = "█  <-- Complete from here"
CLOSING_INSTRUCTION = "Generate only the code that should be inserted at the cursor position."

MAX_PREFIX_LINES = 15
MAX_SUFFIX_LINES = 3


def supports_fim(model: str) -> bool:
    """Check whether a model accepts FIM prompts.

    Args:
        model: Model identity, matched case-insensitively by substring

    Returns:
        True if any FIM_MODELS fragment occurs in the name
    """
    model_lower = model.lower()
    return any(fragment in model_lower for fragment in FIM_MODELS)


def fim_template_for(model: str) -> str:
    """Select the FIM template for a model name."""
    model_lower = model.lower()
    for fragment, template_name in FIM_TEMPLATE_MATCHERS:
        if fragment in model_lower:
            return FIM_TEMPLATES[template_name]
    return FIM_TEMPLATES["default"]


def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping a trailing empty line and stray carriage returns."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def build_fim_messages(window: TextWindow, model: str) -> List[ChatMessage]:
    """Build a single-message FIM prompt.

    The prefix and suffix are embedded verbatim.
    """
    template = fim_template_for(model)
    content = template.format(prefix=window.prefix, suffix=window.suffix)
    return [ChatMessage.user(content)]


def build_chat_messages(window: TextWindow) -> List[ChatMessage]:
    """Build a system + user instruction prompt for chat-only models."""
    parts = [f"Language: {window.language}\n"]

    prefix_lines = split_lines(window.prefix)[-MAX_PREFIX_LINES:]
    if prefix_lines:
        parts.append("\nCode context before cursor:\n")
        parts.extend(f"{line}\n" for line in prefix_lines)

    parts.append(f"{CURSOR_MARKER}\n")

    if window.suffix.strip():
        suffix_lines = [line for line in split_lines(window.suffix) if line.strip()]
        parts.append("\nCode context after cursor:\n")
        parts.extend(f"{line}\n" for line in suffix_lines[:MAX_SUFFIX_LINES])

    parts.append(f"\n{CLOSING_INSTRUCTION}\n")

    return [ChatMessage.system(CHAT_SYSTEM_PROMPT), ChatMessage.user("".join(parts))]


def build_messages(window: TextWindow, model: str) -> List[ChatMessage]:
    """Build the request messages for a model.

    Args:
        window: Text around the cursor
        model: Model identity deciding FIM vs. chat dialect

    Returns:
        Ordered message list
    """
    if supports_fim(model):
        return build_fim_messages(window, model)
    return build_chat_messages(window)
