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

"""Text window extraction around the cursor."""

from edit_prediction.buffer import TextBuffer
from edit_prediction.protocol import Anchor, TextWindow

# Budgets are in code points
MAX_PREFIX_CHARS = 2000
MAX_SUFFIX_CHARS = 500

UNTITLED_PATH = "<untitled>"
UNKNOWN_LANGUAGE = "unknown"


def window_bounds(length: int, cursor_offset: int) -> tuple[int, int]:
    """Compute the [start, end) span of the window for a cursor offset.

    Args:
        length: Length of the text
        cursor_offset: Cursor offset, clipped into [0, length]

    Returns:
        (start, end) with start <= cursor_offset <= end
    """
    cursor_offset = max(0, min(cursor_offset, length))
    start = max(0, cursor_offset - MAX_PREFIX_CHARS)
    end = min(length, cursor_offset + MAX_SUFFIX_CHARS)
    return start, end


def build_workspace_summary(
    file_path: str, language: str, tab_size: int, insert_spaces: bool
) -> str:
    """Format the key: value metadata block sent alongside the code."""
    return (
        f"File: {file_path}\n"
        f"Language: {language}\n"
        f"Tab size: {tab_size}\n"
        f"Insert spaces: {'true' if insert_spaces else 'false'}\n"
    )


def collect_context(buffer: TextBuffer, cursor: Anchor) -> TextWindow:
    """Extract the prefix/suffix window and workspace summary at a cursor.

    Pure function of the buffer's current snapshot and settings.

    Args:
        buffer: Document to read from
        cursor: Cursor anchor

    Returns:
        TextWindow for prompt construction
    """
    text = buffer.snapshot()
    cursor_offset = max(0, min(buffer.to_offset(cursor), len(text)))
    start, end = window_bounds(len(text), cursor_offset)

    language = buffer.language_at(cursor_offset)
    settings = buffer.language_settings(language)

    path = buffer.file_path
    summary = build_workspace_summary(
        file_path=path.as_posix() if path is not None else UNTITLED_PATH,
        language=language or UNKNOWN_LANGUAGE,
        tab_size=settings.tab_size,
        insert_spaces=not settings.hard_tabs,
    )

    return TextWindow(
        prefix=text[start:cursor_offset],
        suffix=text[cursor_offset:end],
        workspace_summary=summary,
    )
