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

"""
Pre-upload admission check.

Advisory only: nothing is reserved, so a file admitted here can still
overshoot the limit if other uploads land first.
"""

from __future__ import annotations

import math
from typing import Any

from shared.api import StorageCheckResult
from shared.constants import DEFAULT_LIMIT_BYTES
from storage_quota.db import QuotaDbClient
from storage_quota.formatting import format_bytes, format_percent
from storage_quota.quota_state import QuotaStateStore
from storage_quota.usage import recalc_total_usage

OK_MESSAGE = "OK"


class InvalidFileSizeError(ValueError):
    """Raised when the requested upload size is not a positive number."""


def validate_file_size(file_size_bytes: Any) -> float:
    if (
        isinstance(file_size_bytes, bool)
        or not isinstance(file_size_bytes, (int, float))
        or not math.isfinite(file_size_bytes)
        or file_size_bytes <= 0
    ):
        raise InvalidFileSizeError("fileSizeBytes must be a positive number")
    return file_size_bytes


def _round_half_up(value: float, digits: int) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def compute_admission(
    total_bytes: int, limit_bytes: int, file_size_bytes: float
) -> StorageCheckResult:
    """Projects usage with the new file added; exactly 100% is rejected."""
    projected_bytes = total_bytes + file_size_bytes
    projected_ratio = projected_bytes / limit_bytes
    allowed = projected_ratio < 1.0

    if allowed:
        message = OK_MESSAGE
    else:
        message = (
            f"Upload rejected: this file ({format_bytes(file_size_bytes)}) would "
            f"push storage to {format_percent(projected_ratio)}% of the limit. "
            "Please delete some files first."
        )

    return StorageCheckResult(
        allowed=allowed,
        current_bytes=total_bytes,
        limit_bytes=limit_bytes,
        projected_bytes=projected_bytes,
        projected_pct=_round_half_up(projected_ratio * 100, 1),
        message=message,
    )


def check_admission(
    db: QuotaDbClient,
    file_size_bytes: Any,
    default_limit_bytes: int = DEFAULT_LIMIT_BYTES,
) -> StorageCheckResult:
    """
    Checks whether a file of the given size fits under the storage limit.

    Usage is recomputed from the tracked collections rather than read from
    the cached total. Nothing is written.

    Raises:
        InvalidFileSizeError: If file_size_bytes is not a positive number.
    """
    file_size_bytes = validate_file_size(file_size_bytes)
    total_bytes = recalc_total_usage(db)
    limit_bytes = QuotaStateStore(db, default_limit_bytes).read().limit_bytes
    return compute_admission(total_bytes, limit_bytes, file_size_bytes)
