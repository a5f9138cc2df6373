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

import unittest
from unittest.mock import MagicMock

from google.cloud.firestore_v1 import Query

from shared.firebase_constants import GALLERY_COLLECTION
from storage_quota.db import FirestoreDbClient, content_item_from_doc


def _snapshot(doc_id, data):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.to_dict.return_value = data
    return snapshot


class FirestoreDbClientTest(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.collection = self.client.collection.return_value
        self.filtered = self.collection.where.return_value
        self.ordered = self.filtered.order_by.return_value

    def test_query_by_published_filters_and_orders_oldest_first(self):
        self.ordered.stream.return_value = [
            _snapshot("old", {"fileSize": 10}),
            _snapshot("empty", None),
        ]

        entries = FirestoreDbClient(self.client).query_by_published(
            GALLERY_COLLECTION, False
        )

        self.client.collection.assert_called_once_with(GALLERY_COLLECTION)
        field_filter = self.collection.where.call_args.kwargs["filter"]
        self.assertEqual(field_filter.field_path, "isPublished")
        self.assertEqual(field_filter.op_string, "==")
        self.assertIs(field_filter.value, False)
        self.filtered.order_by.assert_called_once_with(
            "createdAt", direction=Query.ASCENDING
        )
        self.assertEqual(entries, [("old", {"fileSize": 10}), ("empty", {})])

    def test_query_by_published_passes_published_flag(self):
        self.ordered.stream.return_value = []

        FirestoreDbClient(self.client).query_by_published(GALLERY_COLLECTION, True)

        field_filter = self.collection.where.call_args.kwargs["filter"]
        self.assertIs(field_filter.value, True)

    def test_add_document_returns_new_id(self):
        doc_ref = MagicMock()
        doc_ref.id = "mail-1"
        self.collection.add.return_value = (None, doc_ref)

        doc_id = FirestoreDbClient(self.client).add_document("mail", {"to": "a"})

        self.assertEqual(doc_id, "mail-1")
        self.collection.add.assert_called_once_with({"to": "a"})

    def test_missing_document_is_none(self):
        self.client.document.return_value.get.return_value.exists = False

        self.assertIsNone(FirestoreDbClient(self.client).get_document("a/b"))


class ContentItemFromDocTest(unittest.TestCase):

    def test_camel_case_fields_map_to_item(self):
        item = content_item_from_doc(
            "g1", {"fileSize": 42, "isPublished": True, "thumbnailUrl": "t"}
        )

        self.assertEqual(item.id, "g1")
        self.assertEqual(item.file_size, 42)
        self.assertTrue(item.is_published)
        self.assertEqual(item.thumbnail_url, "t")


if __name__ == "__main__":
    unittest.main()
