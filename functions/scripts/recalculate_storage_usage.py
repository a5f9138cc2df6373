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
Recalculate storage usage and optionally run the cleanup pass by hand.

Useful after bulk imports/deletes done outside the admin panel, or to preview
which gallery items the daily cleanup would remove.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from firebase_admin import initialize_app

from shared.firebase_constants import CLEANUP_COLLECTION
from storage_quota import cleanup, monitor
from storage_quota.config import get_settings
from storage_quota.db import QuotaDbClient
from storage_quota.dependencies import get_blob_storage_client, get_db_client
from storage_quota.formatting import format_bytes
from storage_quota.quota_state import QuotaStateStore
from storage_quota.usage import recalc_total_usage

logger = logging.getLogger(__name__)


def preview_cleanup(db: QuotaDbClient, default_limit_bytes: int) -> int:
    total_bytes = recalc_total_usage(db)
    limit_bytes = QuotaStateStore(db, default_limit_bytes).read().limit_bytes
    plan = cleanup.plan_cleanup(
        cleanup.fetch_content_items(db, CLEANUP_COLLECTION, False),
        cleanup.fetch_content_items(db, CLEANUP_COLLECTION, True),
        total_bytes,
        limit_bytes,
    )
    logger.info(
        "Usage %s / %s, cleanup would delete %d items (projected %s)",
        format_bytes(plan.before_bytes),
        format_bytes(limit_bytes),
        len(plan.victim_ids),
        format_bytes(plan.projected_bytes),
    )
    for victim_id in plan.victim_ids:
        logger.info("  would delete %s/%s", CLEANUP_COLLECTION, victim_id)
    return len(plan.victim_ids)


def main() -> int:
    parser = argparse.ArgumentParser(description="Recalculate storage usage")
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Run the cleanup pass after recalculating",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report usage and the cleanup plan without writing anything",
    )
    parser.add_argument(
        "--no-alerts",
        action="store_true",
        help="Do not queue a threshold email when recalculating",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    initialize_app()
    settings = get_settings()
    db = get_db_client()

    if args.dry_run:
        preview_cleanup(db, settings.default_limit_bytes)
        return 0

    if args.cleanup:
        result = cleanup.run_cleanup(
            db,
            get_blob_storage_client(),
            default_limit_bytes=settings.default_limit_bytes,
        )
        logger.info(
            "Deleted %d items, usage %s -> %s",
            len(result.deleted_ids),
            format_bytes(result.before_bytes),
            format_bytes(result.after_bytes),
        )
        return 0

    state = monitor.refresh_usage(
        db,
        check_alerts=not args.no_alerts,
        default_limit_bytes=settings.default_limit_bytes,
        cooldown_ms=settings.email_cooldown_ms,
    )
    logger.info(
        "Usage %s / %s", format_bytes(state.total_bytes), format_bytes(state.limit_bytes)
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
