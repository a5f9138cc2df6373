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

# Cloud functions for the school website - storage usage tracking, alerting
# and automatic cleanup.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from dataclasses import asdict

# Third-party library imports
from dacite import from_dict, Config
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, options, scheduler_fn
from firebase_functions.firestore_fn import (
    on_document_written,
    Event,
    Change,
    DocumentSnapshot,
)

# Local application imports
from shared.api import StorageCheckRequest
from shared.firebase_constants import GALLERY_COLLECTION, MEDIA_FILES_COLLECTION
from shared.json_utils import convert_keys
from storage_quota import admission, cleanup, monitor
from storage_quota.config import get_settings
from storage_quota.dependencies import get_blob_storage_client, get_db_client
from storage_quota.formatting import format_bytes

initialize_app()

settings = get_settings()


def _alerts_enabled_for(collection: str) -> bool:
    """Gallery writes always check thresholds; other collections only when configured."""
    return collection == GALLERY_COLLECTION or get_settings().alert_on_all_collections


def _on_content_written(collection: str) -> None:
    state = monitor.refresh_usage(
        get_db_client(),
        check_alerts=_alerts_enabled_for(collection),
        default_limit_bytes=get_settings().default_limit_bytes,
        cooldown_ms=get_settings().email_cooldown_ms,
    )
    logger.info(
        f"Write to {collection}: storage usage now {format_bytes(state.total_bytes)}"
        f" / {format_bytes(state.limit_bytes)}"
    )


@on_document_written(document=GALLERY_COLLECTION + "/{docId}")
def on_gallery_written(event: Event[Change[DocumentSnapshot]]) -> None:
    """
    Recalculates total storage usage after any gallery write and queues a
    threshold email to the admin when one is due.
    """
    _on_content_written(GALLERY_COLLECTION)


@on_document_written(document=MEDIA_FILES_COLLECTION + "/{docId}")
def on_media_file_written(event: Event[Change[DocumentSnapshot]]) -> None:
    """
    Recalculates total storage usage after any media file write, and queues a
    threshold email when alerting is enabled for all tracked collections.
    """
    _on_content_written(MEDIA_FILES_COLLECTION)


@scheduler_fn.on_schedule(
    schedule=settings.cleanup_schedule,
    timezone=settings.cleanup_timezone,
    memory=options.MemoryOption.MB_512,
)
def scheduled_storage_cleanup(event: scheduler_fn.ScheduledEvent) -> None:
    """
    Daily job: when usage is above 95% of the limit, deletes the oldest
    unpublished gallery items (then published ones) until usage is at or
    below 85%, and emails the admin a report.
    """
    result = cleanup.run_cleanup(
        get_db_client(),
        get_blob_storage_client(),
        default_limit_bytes=get_settings().default_limit_bytes,
    )
    if result.triggered:
        failed = [r.item_id for r in result.results if not r.record_deleted]
        if failed:
            logger.warn(f"Cleanup could not delete items: {failed}")


@https_fn.on_call(memory=options.MemoryOption.MB_512)
def check_storage_before_upload(req: https_fn.CallableRequest) -> dict:
    """
    Checks whether a file of the given size fits under the storage limit.
    The client calls this before uploading.

    Args:
        req (https_fn.CallableRequest): The request, containing fileSizeBytes.

    Returns:
        A dictionary representation of the StorageCheckResult object.
    """
    data = req.data if isinstance(req.data, dict) else {}
    request = from_dict(
        data_class=StorageCheckRequest,
        data=convert_keys(data, "camel_to_snake"),
        config=Config(check_types=False),
    )
    file_size_bytes = request.file_size_bytes

    try:
        result = admission.check_admission(
            get_db_client(),
            file_size_bytes,
            default_limit_bytes=get_settings().default_limit_bytes,
        )
    except admission.InvalidFileSizeError as e:
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, str(e))
    except Exception as e:
        logger.error(f"Storage check failed for {file_size_bytes} bytes: {e}")
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INTERNAL, str(e))

    return convert_keys(asdict(result), "snake_to_camel")
