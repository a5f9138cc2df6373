# Copyright 2025 Google LLC
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
# ==============================================================================

from dataclasses import dataclass
from typing import Any


@dataclass
class StorageCheckRequest:
    """Request object for the pre-upload storage check."""

    file_size_bytes: Any = None


@dataclass
class StorageCheckResult:
    """Result of the pre-upload storage check, returned to the client."""

    allowed: bool
    current_bytes: int
    limit_bytes: int
    # Float when the requested file size is fractional.
    projected_bytes: float
    # Percentage of the limit, rounded to one decimal (e.g. 72.3).
    projected_pct: float
    message: str
