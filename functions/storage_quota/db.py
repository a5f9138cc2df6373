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
Document store abstraction for Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Protocol, Tuple

from dacite import Config, from_dict
from google.cloud.firestore_v1 import Query
from google.cloud.firestore_v1.base_query import FieldFilter

from shared.json_utils import convert_keys
from shared.types import ContentItem

DocEntry = Tuple[str, dict]


class QuotaDbClient(Protocol):
    """Document store operations used by the storage functions."""

    def get_document(self, path: str) -> Optional[dict]:
        ...

    def set_document(self, path: str, data: dict, merge: bool = True) -> None:
        ...

    def stream_collection(self, collection: str) -> List[DocEntry]:
        ...

    def query_by_published(self, collection: str, is_published: bool) -> List[DocEntry]:
        """Returns docs with the given isPublished flag, oldest createdAt first."""
        ...

    def delete_document(self, collection: str, doc_id: str) -> None:
        ...

    def add_document(self, collection: str, data: dict) -> str:
        ...


def content_item_from_doc(doc_id: str, data: dict) -> ContentItem:
    """Builds a ContentItem from a camelCase Firestore document."""
    fields = convert_keys(data or {}, "camel_to_snake")
    fields["id"] = doc_id
    return from_dict(
        data_class=ContentItem,
        data=fields,
        config=Config(check_types=False),
    )


def _split_path(path: str) -> Tuple[str, str]:
    collection, _, doc_id = path.partition("/")
    if not collection or not doc_id or "/" in doc_id:
        raise ValueError(f"Expected a 'collection/document' path, got: {path}")
    return collection, doc_id


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, collection: str) -> Dict[str, dict]:
        return self.collections.setdefault(collection, {})

    def get_document(self, path: str) -> Optional[dict]:
        collection, doc_id = _split_path(path)
        data = self._collection(collection).get(doc_id)
        return dict(data) if data is not None else None

    def set_document(self, path: str, data: dict, merge: bool = True) -> None:
        collection, doc_id = _split_path(path)
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id].update(data)
        else:
            docs[doc_id] = dict(data)

    def put(self, collection: str, doc_id: str, data: dict) -> None:
        self._collection(collection)[doc_id] = dict(data)

    def stream_collection(self, collection: str) -> List[DocEntry]:
        return [
            (doc_id, dict(data)) for doc_id, data in self._collection(collection).items()
        ]

    def query_by_published(self, collection: str, is_published: bool) -> List[DocEntry]:
        # Like Firestore, order_by drops documents without the ordered field.
        matches = [
            (doc_id, dict(data))
            for doc_id, data in self._collection(collection).items()
            if data.get("isPublished") == is_published and "createdAt" in data
        ]
        return sorted(matches, key=lambda entry: entry[1]["createdAt"])

    def delete_document(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    def add_document(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex
        self._collection(collection)[doc_id] = dict(data)
        return doc_id


class FirestoreDbClient:
    """Firestore-backed document store."""

    def __init__(self, client: Any):
        self._db = client

    def get_document(self, path: str) -> Optional[dict]:
        snapshot = self._db.document(path).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def set_document(self, path: str, data: dict, merge: bool = True) -> None:
        self._db.document(path).set(data, merge=merge)

    def stream_collection(self, collection: str) -> List[DocEntry]:
        return [
            (snapshot.id, snapshot.to_dict() or {})
            for snapshot in self._db.collection(collection).stream()
        ]

    def query_by_published(self, collection: str, is_published: bool) -> List[DocEntry]:
        query = (
            self._db.collection(collection)
            .where(filter=FieldFilter("isPublished", "==", is_published))
            .order_by("createdAt", direction=Query.ASCENDING)
        )
        return [(snapshot.id, snapshot.to_dict() or {}) for snapshot in query.stream()]

    def delete_document(self, collection: str, doc_id: str) -> None:
        self._db.collection(collection).document(doc_id).delete()

    def add_document(self, collection: str, data: dict) -> str:
        _, doc_ref = self._db.collection(collection).add(data)
        return doc_ref.id
