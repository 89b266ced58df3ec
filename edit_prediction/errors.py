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

"""Edit prediction exception hierarchy."""

from typing import Optional


class EditPredictionError(Exception):
    """Base exception for a failed prediction refresh."""


class OllamaTransportError(EditPredictionError):
    """Raised when the inference service cannot be reached or rejects a request.

    Covers connection failures and non-success HTTP statuses.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OllamaStreamError(EditPredictionError):
    """Raised when the streamed response is malformed, truncated or reports an error."""
