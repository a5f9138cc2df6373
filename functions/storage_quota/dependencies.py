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
Client wiring for the storage functions.
"""

from __future__ import annotations

from firebase_admin import firestore, storage

from storage_quota.blob_storage import (
    BlobStorageClient,
    FirebaseBlobStorageClient,
    InMemoryBlobStorageClient,
)
from storage_quota.config import get_settings
from storage_quota.db import FirestoreDbClient, InMemoryDbClient, QuotaDbClient

_db_client: QuotaDbClient | None = None
_blob_storage_client: BlobStorageClient | None = None


def get_db_client() -> QuotaDbClient:
    """
    Return a singleton document store client, reused across invocations of a
    warm function instance.
    """
    global _db_client
    if _db_client:
        return _db_client

    if get_settings().use_in_memory_backends:
        _db_client = InMemoryDbClient()
    else:
        _db_client = FirestoreDbClient(firestore.client())
    return _db_client


def get_blob_storage_client() -> BlobStorageClient:
    global _blob_storage_client
    if _blob_storage_client:
        return _blob_storage_client

    if get_settings().use_in_memory_backends:
        _blob_storage_client = InMemoryBlobStorageClient()
    else:
        _blob_storage_client = FirebaseBlobStorageClient(bucket=storage.bucket())
    return _blob_storage_client
