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
Persistence for the singleton storage usage record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.constants import DEFAULT_LIMIT_BYTES
from shared.firebase_constants import STORAGE_USAGE_DOC
from shared.json_utils import convert_keys
from shared.types import QuotaState
from storage_quota.db import QuotaDbClient
from storage_quota.usage import file_size_of


def default_quota_state(limit_bytes: int = DEFAULT_LIMIT_BYTES) -> QuotaState:
    """State used before siteSettings/storageUsage has ever been written."""
    return QuotaState(total_bytes=0, limit_bytes=limit_bytes)


def to_epoch_ms(value: Any) -> Optional[int]:
    """Normalizes a stored timestamp (epoch ms or datetime) to epoch ms."""
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def quota_state_from_doc(
    data: Optional[dict], default_limit_bytes: int = DEFAULT_LIMIT_BYTES
) -> QuotaState:
    if data is None:
        return default_quota_state(default_limit_bytes)

    limit_bytes = file_size_of(data.get("limitBytes"))
    return QuotaState(
        total_bytes=file_size_of(data.get("totalBytes")),
        limit_bytes=limit_bytes if limit_bytes > 0 else default_limit_bytes,
        warning_email_sent_at=to_epoch_ms(data.get("warningEmailSentAt")),
        last_checked=data.get("lastChecked"),
    )


class QuotaStateStore:
    """Reads and merge-writes siteSettings/storageUsage."""

    def __init__(
        self,
        db: QuotaDbClient,
        default_limit_bytes: int = DEFAULT_LIMIT_BYTES,
        path: str = STORAGE_USAGE_DOC,
    ):
        self.db = db
        self.default_limit_bytes = default_limit_bytes
        self.path = path

    def read(self) -> QuotaState:
        return quota_state_from_doc(
            self.db.get_document(self.path), self.default_limit_bytes
        )

    def write(self, total_bytes: int, **extra: Any) -> QuotaState:
        """
        Merges new usage numbers into the record.

        The existing limitBytes is carried over so writes that only refresh
        usage never reset a limit an admin configured. `extra` takes
        snake_case field names (e.g. warning_email_sent_at).
        """
        current = self.read()
        payload = {
            "totalBytes": total_bytes,
            "limitBytes": current.limit_bytes,
            "lastChecked": SERVER_TIMESTAMP,
        }
        payload.update(convert_keys(extra, "snake_to_camel"))
        self.db.set_document(self.path, payload, merge=True)

        current.total_bytes = total_bytes
        current.last_checked = SERVER_TIMESTAMP
        if "warning_email_sent_at" in extra:
            current.warning_email_sent_at = to_epoch_ms(extra["warning_email_sent_at"])
        return current
