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
Automatic storage cleanup.

When usage crosses CLEANUP_TRIGGER of the limit, gallery items are deleted
oldest first until usage is at or below CLEANUP_TARGET. Every unpublished
item is considered before any published one.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple
from urllib.parse import unquote, urlparse

from shared.constants import CLEANUP_TARGET, CLEANUP_TRIGGER, DEFAULT_LIMIT_BYTES
from shared.firebase_constants import CLEANUP_COLLECTION, TRACKED_COLLECTIONS
from shared.types import (
    CleanupPlan,
    CleanupResult,
    ContentItem,
    DeletionOutcome,
    ItemDeletionResult,
)
from storage_quota.alerts import compose_cleanup_report, send_to_admin
from storage_quota.blob_storage import BlobStorageClient
from storage_quota.db import QuotaDbClient, content_item_from_doc
from storage_quota.formatting import format_bytes, format_percent
from storage_quota.quota_state import QuotaStateStore
from storage_quota.usage import file_size_of, recalc_total_usage

logger = logging.getLogger(__name__)

DeleteFn = Callable[[ContentItem], ItemDeletionResult]
FetchFn = Callable[[bool], List[ContentItem]]


def storage_path_from_url(url: Optional[str]) -> Optional[str]:
    """
    Derives the storage object path for a file URL.

    Args:
        url (str): A Firebase download URL (".../o/<encoded path>?...") or a
            gs://bucket/path URL.

    Returns:
        The decoded object path, or None for empty and inline data: URLs,
        which have no backing file.

    Raises:
        ValueError: If no object path can be derived from the URL.
    """
    if not url or url.startswith("data:"):
        return None

    parsed = urlparse(url)
    if parsed.scheme == "gs":
        path = parsed.path.lstrip("/")
    else:
        _, found, encoded_path = parsed.path.partition("/o/")
        path = unquote(encoded_path) if found else ""

    if not path:
        raise ValueError(f"Cannot derive a storage path from URL: {url}")
    return path


def _delete_backing_files(blobs: BlobStorageClient, item: ContentItem) -> Optional[str]:
    """Best-effort removal of an item's files. Returns an error summary, if any."""
    urls = [item.url]
    if item.thumbnail_url and item.thumbnail_url != item.url:
        urls.append(item.thumbnail_url)

    errors = []
    for url in urls:
        try:
            path = storage_path_from_url(url)
            if path is None:
                continue
            if not blobs.delete(path):
                logger.info("Storage file already missing: %s", path)
        except Exception as e:
            logger.warning("Could not delete storage file for item %s: %s", item.id, e)
            errors.append(str(e))
    return "; ".join(errors) or None


def delete_content_item(
    db: QuotaDbClient,
    blobs: BlobStorageClient,
    collection: str,
    item: ContentItem,
) -> ItemDeletionResult:
    """Deletes an item's backing files (best-effort) and then its record."""
    file_error = _delete_backing_files(blobs, item)

    try:
        db.delete_document(collection, item.id)
    except Exception as e:
        logger.exception("Failed to delete %s/%s, skipping", collection, item.id)
        return ItemDeletionResult(
            item_id=item.id,
            outcome=DeletionOutcome.RECORD_DELETE_FAILED,
            error=str(e),
        )

    freed_bytes = file_size_of(item.file_size)
    if file_error:
        return ItemDeletionResult(
            item_id=item.id,
            outcome=DeletionOutcome.FILE_DELETE_FAILED,
            freed_bytes=freed_bytes,
            error=file_error,
        )
    return ItemDeletionResult(
        item_id=item.id, outcome=DeletionOutcome.DELETED, freed_bytes=freed_bytes
    )


def _delete_until_target(
    items: List[ContentItem],
    current_bytes: int,
    target_bytes: float,
    delete_fn: DeleteFn,
) -> Tuple[int, List[ItemDeletionResult]]:
    results = []
    for item in items:
        if current_bytes <= target_bytes:
            break
        result = delete_fn(item)
        results.append(result)
        if result.record_deleted:
            current_bytes -= result.freed_bytes
    return current_bytes, results


def _run_phases(
    fetch_items: FetchFn,
    total_bytes: int,
    target_bytes: float,
    delete_fn: DeleteFn,
) -> Tuple[int, List[ItemDeletionResult]]:
    # Unpublished items first, then published ones only if still over target.
    current_bytes, results = _delete_until_target(
        fetch_items(False), total_bytes, target_bytes, delete_fn
    )
    if current_bytes > target_bytes:
        current_bytes, published_results = _delete_until_target(
            fetch_items(True), current_bytes, target_bytes, delete_fn
        )
        results.extend(published_results)
    return current_bytes, results


def plan_cleanup(
    unpublished: List[ContentItem],
    published: List[ContentItem],
    total_bytes: int,
    limit_bytes: int,
) -> CleanupPlan:
    """
    Computes which items a cleanup pass would delete, assuming every deletion
    succeeds. Both lists must already be ordered oldest first.
    """
    target_bytes = limit_bytes * CLEANUP_TARGET
    if total_bytes / limit_bytes < CLEANUP_TRIGGER:
        return CleanupPlan(
            victim_ids=[],
            before_bytes=total_bytes,
            projected_bytes=total_bytes,
            target_bytes=target_bytes,
        )

    def simulate(item: ContentItem) -> ItemDeletionResult:
        return ItemDeletionResult(
            item_id=item.id,
            outcome=DeletionOutcome.DELETED,
            freed_bytes=file_size_of(item.file_size),
        )

    projected_bytes, results = _run_phases(
        lambda is_published: published if is_published else unpublished,
        total_bytes,
        target_bytes,
        simulate,
    )
    return CleanupPlan(
        victim_ids=[result.item_id for result in results],
        before_bytes=total_bytes,
        projected_bytes=projected_bytes,
        target_bytes=target_bytes,
    )


def fetch_content_items(
    db: QuotaDbClient, collection: str, is_published: bool
) -> List[ContentItem]:
    """Items with the given publish state, oldest createdAt first."""
    return [
        content_item_from_doc(doc_id, data)
        for doc_id, data in db.query_by_published(collection, is_published)
    ]


def run_cleanup(
    db: QuotaDbClient,
    blobs: BlobStorageClient,
    default_limit_bytes: int = DEFAULT_LIMIT_BYTES,
    collection: str = CLEANUP_COLLECTION,
    tracked_collections=TRACKED_COLLECTIONS,
) -> CleanupResult:
    """
    Runs one cleanup pass and persists the resulting usage.

    Individual failures never abort the pass: a file that cannot be removed
    still has its record deleted, and a record that cannot be deleted is
    skipped without counting its bytes as freed.
    """
    total_bytes = recalc_total_usage(db, tracked_collections)
    store = QuotaStateStore(db, default_limit_bytes)
    limit_bytes = store.read().limit_bytes
    ratio = total_bytes / limit_bytes

    logger.info(
        "Storage check: %s / %s (%s%%)",
        format_bytes(total_bytes),
        format_bytes(limit_bytes),
        format_percent(ratio),
    )

    if ratio < CLEANUP_TRIGGER:
        store.write(total_bytes)
        return CleanupResult(
            before_bytes=total_bytes, after_bytes=total_bytes, limit_bytes=limit_bytes
        )

    logger.warning("Storage at %s%%, starting auto-cleanup", format_percent(ratio))
    current_bytes, results = _run_phases(
        lambda is_published: fetch_content_items(db, collection, is_published),
        total_bytes,
        limit_bytes * CLEANUP_TARGET,
        lambda item: delete_content_item(db, blobs, collection, item),
    )
    store.write(current_bytes)

    result = CleanupResult(
        before_bytes=total_bytes,
        after_bytes=current_bytes,
        limit_bytes=limit_bytes,
        triggered=True,
        deleted_ids=[r.item_id for r in results if r.record_deleted],
        results=results,
    )
    if result.deleted_ids:
        send_to_admin(db, compose_cleanup_report(result))

    logger.info(
        "Cleanup complete: deleted %d items, usage now %s",
        len(result.deleted_ids),
        format_bytes(current_bytes),
    )
    return result
