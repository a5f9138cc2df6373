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

from __future__ import annotations

import logging
from typing import Optional

from shared.constants import DEFAULT_LIMIT_BYTES, EMAIL_COOLDOWN_MS
from shared.types import QuotaState
from storage_quota.alerts import maybe_alert
from storage_quota.db import QuotaDbClient
from storage_quota.quota_state import QuotaStateStore
from storage_quota.usage import recalc_total_usage

logger = logging.getLogger(__name__)


def refresh_usage(
    db: QuotaDbClient,
    *,
    check_alerts: bool = True,
    default_limit_bytes: int = DEFAULT_LIMIT_BYTES,
    cooldown_ms: int = EMAIL_COOLDOWN_MS,
    now_ms: Optional[int] = None,
) -> QuotaState:
    """
    Recomputes usage after a content write and persists it.

    When `check_alerts` is set, a threshold email is queued if one is due and
    its send time is saved along with the new total.
    """
    total_bytes = recalc_total_usage(db)
    store = QuotaStateStore(db, default_limit_bytes)
    extra = {}

    if check_alerts:
        state = store.read()
        sent, sent_at = maybe_alert(
            db,
            total_bytes,
            state.limit_bytes,
            state.warning_email_sent_at,
            now_ms=now_ms,
            cooldown_ms=cooldown_ms,
        )
        if sent:
            extra["warning_email_sent_at"] = sent_at

    logger.info("Storage usage recalculated: %d bytes", total_bytes)
    return store.write(total_bytes, **extra)
