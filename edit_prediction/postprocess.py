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

"""Cleanup of streamed completion text.

FIM models return the infill span verbatim, so only the byte-order mark
is removed. Chat models tend to wrap code in markdown and echo the code
around the cursor; both are stripped here.
"""

from edit_prediction.prompts import split_lines

BYTE_ORDER_MARK = "\ufeff"

MAX_PREFIX_OVERLAP = 100
MAX_SUFFIX_OVERLAP = 80


def strip_markdown_code_blocks(text: str) -> str:
    """Remove a surrounding ``` fence or a pair of inline backticks.

    Args:
        text: Completion text

    Returns:
        Whitespace-trimmed text without the markdown wrapper
    """
    text = text.strip()

    if text.startswith("```"):
        lines = split_lines(text)
        if len(lines) > 2 and lines[-1].strip() == "```":
            return "\n".join(lines[1:-1])

    if text.startswith("`") and text.endswith("`") and len(text) > 2:
        return text[1:-1]

    return text


def trim_redundant_prefix(completion: str, prefix: str) -> str:
    """Drop the longest leading run of completion that repeats the end of prefix."""
    longest = min(len(prefix), len(completion), MAX_PREFIX_OVERLAP)
    for count in range(longest, 0, -1):
        if prefix[len(prefix) - count :] == completion[:count]:
            return completion[count:]
    return completion


def trim_redundant_suffix(completion: str, suffix: str) -> str:
    """Drop the longest trailing run of completion that repeats the start of suffix."""
    longest = min(len(suffix), len(completion), MAX_SUFFIX_OVERLAP)
    for count in range(longest, 0, -1):
        if completion[len(completion) - count :] == suffix[:count]:
            return completion[: len(completion) - count]
    return completion


def clean_completion(raw_text: str, prefix: str, suffix: str, is_fim: bool) -> str:
    """Turn accumulated model output into insertable text.

    Args:
        raw_text: Concatenated streamed content
        prefix: Text before the cursor that was sent to the model
        suffix: Text after the cursor that was sent to the model
        is_fim: Whether the prompt used FIM format

    Returns:
        Cleaned completion; empty or whitespace-only means no suggestion
    """
    completion = raw_text.strip(BYTE_ORDER_MARK)

    if not is_fim:
        completion = strip_markdown_code_blocks(completion)
        completion = trim_redundant_prefix(completion, prefix)
        completion = trim_redundant_suffix(completion, suffix)

    return completion
