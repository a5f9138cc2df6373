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
Threshold alerts and cleanup reports, queued through the mail collection.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Optional, Tuple

from shared.constants import (
    CLEANUP_TARGET,
    DANGER_THRESHOLD,
    EMAIL_COOLDOWN_MS,
    WARN_THRESHOLD,
)
from shared.firebase_constants import MAIL_COLLECTION, SITE_SETTINGS_MAIN_DOC
from shared.types import AlertMessage, AlertSeverity, CleanupResult, MailMessage
from storage_quota.db import QuotaDbClient
from storage_quota.formatting import format_bytes, format_percent

logger = logging.getLogger(__name__)

SEVERITY_MARKERS = {
    AlertSeverity.URGENT: "\U0001F534",  # red circle
    AlertSeverity.WARNING: "\U0001F7E1",  # yellow circle
}


@dataclass
class AlertDecision:
    should_send: bool
    ratio: float
    severity: Optional[AlertSeverity] = None


def now_epoch_ms() -> int:
    return int(time.time() * 1000)


def severity_for(ratio: float) -> Optional[AlertSeverity]:
    if ratio >= DANGER_THRESHOLD:
        return AlertSeverity.URGENT
    if ratio >= WARN_THRESHOLD:
        return AlertSeverity.WARNING
    return None


def evaluate_alert(
    total_bytes: int,
    limit_bytes: int,
    warning_email_sent_at: Optional[int],
    now_ms: int,
    cooldown_ms: int = EMAIL_COOLDOWN_MS,
) -> AlertDecision:
    """
    Decides whether a threshold email is due.

    No email below the warning threshold, and none while the previous email
    is still within the cooldown window. A missing timestamp means no email
    has ever been sent.
    """
    ratio = total_bytes / limit_bytes
    severity = severity_for(ratio)
    if severity is None:
        return AlertDecision(should_send=False, ratio=ratio)

    last_sent = warning_email_sent_at or 0
    if now_ms - last_sent <= cooldown_ms:
        return AlertDecision(should_send=False, ratio=ratio, severity=severity)
    return AlertDecision(should_send=True, ratio=ratio, severity=severity)


def _usage_table(rows) -> str:
    cells = "".join(
        f'<tr><td style="padding:4px 12px;"><strong>{label}:</strong></td>'
        f"<td>{value}</td></tr>"
        for label, value in rows
    )
    return f'<table style="border-collapse:collapse;">{cells}</table>'


def compose_usage_alert(
    severity: AlertSeverity, total_bytes: int, limit_bytes: int
) -> MailMessage:
    level = f"{SEVERITY_MARKERS[severity]} {severity.value}"
    pct = format_percent(total_bytes / limit_bytes)
    free_bytes = max(limit_bytes - total_bytes, 0)
    table = _usage_table(
        [
            ("Used", format_bytes(total_bytes)),
            ("Limit", format_bytes(limit_bytes)),
            ("Free", format_bytes(free_bytes)),
        ]
    )
    html = (
        f"<h2>{level}: Storage Usage Alert</h2>"
        f"<p>Your school website storage is at <strong>{pct}%</strong> "
        "of the configured limit.</p>"
        f"{table}"
        '<p style="margin-top:16px;">'
        "Please log in to the admin panel and delete unused photos/videos, or "
        "older items will be automatically removed when usage exceeds 95%."
        "</p>"
    )
    return MailMessage(subject=f"{level}: Storage at {pct}% capacity", html=html)


def compose_cleanup_report(result: CleanupResult) -> MailMessage:
    count = len(result.deleted_ids)
    pct = format_percent(result.before_bytes / result.limit_bytes)
    table = _usage_table(
        [
            ("Before", format_bytes(result.before_bytes)),
            ("After", format_bytes(result.after_bytes)),
            ("Freed", format_bytes(result.freed_bytes)),
        ]
    )
    html = (
        "<h2>Automatic Storage Cleanup Report</h2>"
        f"<p>Storage was at <strong>{pct}%</strong> capacity. "
        f"The system automatically deleted <strong>{count}</strong> gallery "
        f"item(s) to bring usage below {CLEANUP_TARGET * 100:.0f}%.</p>"
        f"{table}"
        '<p style="margin-top:16px;">'
        "To prevent automatic deletion, regularly review and delete unused "
        "media from the admin panel."
        "</p>"
    )
    return MailMessage(
        subject=f"⚠️ Auto-Cleanup: {count} item(s) deleted", html=html
    )


def get_admin_email(db: QuotaDbClient) -> Optional[str]:
    """Reads the notification recipient from siteSettings/main."""
    settings_doc = db.get_document(SITE_SETTINGS_MAIN_DOC)
    if not settings_doc:
        return None
    return settings_doc.get("email") or None


def enqueue_alert(db: QuotaDbClient, to: str, message: MailMessage) -> str:
    """Queues an email for the mail dispatcher. Returns the mail doc id."""
    alert = AlertMessage(to=[to], message=message)
    return db.add_document(MAIL_COLLECTION, asdict(alert))


def send_to_admin(db: QuotaDbClient, message: MailMessage) -> bool:
    """Queues `message` to the admin recipient, if one is configured."""
    admin_email = get_admin_email(db)
    if not admin_email:
        logger.info("No admin email configured, skipping: %s", message.subject)
        return False
    enqueue_alert(db, admin_email, message)
    return True


def maybe_alert(
    db: QuotaDbClient,
    total_bytes: int,
    limit_bytes: int,
    warning_email_sent_at: Optional[int],
    now_ms: Optional[int] = None,
    cooldown_ms: int = EMAIL_COOLDOWN_MS,
) -> Tuple[bool, Optional[int]]:
    """
    Queues a threshold email when one is due.

    Returns:
        (sent, new_warning_email_sent_at). The timestamp is only set when an
        email was actually queued; the caller persists it.
    """
    if now_ms is None:
        now_ms = now_epoch_ms()

    decision = evaluate_alert(
        total_bytes, limit_bytes, warning_email_sent_at, now_ms, cooldown_ms
    )
    if not decision.should_send:
        return False, None

    message = compose_usage_alert(decision.severity, total_bytes, limit_bytes)
    if not send_to_admin(db, message):
        return False, None

    logger.warning(
        "Queued %s storage alert at %s%%",
        decision.severity.value,
        format_percent(decision.ratio),
    )
    return True, now_ms
