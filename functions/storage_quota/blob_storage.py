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
Blob storage abstraction for Firebase Storage and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from google.api_core import exceptions


class BlobStorageClient(Protocol):
    """Defines the storage operations cleanup needs."""

    def delete(self, path: str) -> bool:
        """Deletes the object at `path`. Returns False if it did not exist."""
        ...


@dataclass
class InMemoryBlobStorageClient:
    """Test double for storage interactions."""

    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def delete(self, path: str) -> bool:
        return self.stored_objects.pop(path, None) is not None


@dataclass
class FirebaseBlobStorageClient:
    """
    Firebase Storage client on top of the default bucket.

    `bucket` is a google.cloud.storage Bucket, normally from
    firebase_admin.storage.bucket().
    """

    bucket: Any

    def delete(self, path: str) -> bool:
        try:
            self.bucket.blob(path).delete()
        except exceptions.NotFound:
            return False
        return True
