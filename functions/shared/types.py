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

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from shared.constants import DEFAULT_LIMIT_BYTES


class AlertSeverity(str, Enum):
    WARNING = "WARNING"
    URGENT = "URGENT"


class DeletionOutcome(str, Enum):
    """What happened to a single cleanup victim."""

    DELETED = "DELETED"
    # The record was deleted but its backing file could not be removed.
    FILE_DELETE_FAILED = "FILE_DELETE_FAILED"
    # The record could not be deleted; the item was skipped.
    RECORD_DELETE_FAILED = "RECORD_DELETE_FAILED"


@dataclass
class QuotaState:
    """Singleton storage usage record (siteSettings/storageUsage)."""

    total_bytes: int = 0
    limit_bytes: int = DEFAULT_LIMIT_BYTES
    # Epoch milliseconds of the last queued threshold email.
    warning_email_sent_at: Optional[int] = None
    last_checked: Any = None  # Firestore timestamp


@dataclass
class ContentItem:
    """A gallery or media entry whose backing file counts toward usage."""

    id: str
    file_size: Any = 0  # Raw Firestore value, may be missing or malformed
    created_at: Any = None
    is_published: bool = False
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None


@dataclass
class MailMessage:
    subject: str
    html: str


@dataclass
class AlertMessage:
    """Outbound mail record, in the format the mail dispatcher consumes."""

    to: List[str]
    message: MailMessage


@dataclass
class ItemDeletionResult:
    item_id: str
    outcome: DeletionOutcome
    freed_bytes: int = 0
    error: Optional[str] = None

    @property
    def record_deleted(self) -> bool:
        return self.outcome != DeletionOutcome.RECORD_DELETE_FAILED


@dataclass
class CleanupResult:
    before_bytes: int
    after_bytes: int
    limit_bytes: int
    triggered: bool = False
    deleted_ids: List[str] = field(default_factory=list)
    results: List[ItemDeletionResult] = field(default_factory=list)

    @property
    def freed_bytes(self) -> int:
        return self.before_bytes - self.after_bytes


@dataclass
class CleanupPlan:
    """Items a cleanup pass would remove if every deletion succeeded."""

    victim_ids: List[str]
    before_bytes: int
    projected_bytes: int
    target_bytes: float
