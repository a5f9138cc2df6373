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
# Standard library imports
import os
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

# Third-party library imports
from functions_framework import create_app

# Local application imports
# This patch must be applied before importing 'main'
with patch("firebase_admin.initialize_app"):
    import main
from shared.constants import GIB
from shared.firebase_constants import (
    GALLERY_COLLECTION,
    MAIL_COLLECTION,
    MEDIA_FILES_COLLECTION,
    SITE_SETTINGS_MAIN_DOC,
    STORAGE_USAGE_DOC,
)
from storage_quota.blob_storage import InMemoryBlobStorageClient
from storage_quota.config import Settings
from storage_quota.db import InMemoryDbClient

MAIN_SOURCE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "main.py")
MIB = 1024 * 1024


class TestMainCheckStorageBeforeUpload(unittest.TestCase):

    @patch("firebase_admin.initialize_app")
    def setUp(self, initialize_app_mock):
        # Create a test client for the callable using functions-framework.
        self.client = create_app(
            "check_storage_before_upload", MAIN_SOURCE
        ).test_client()
        self.db = InMemoryDbClient()
        self.db.set_document(STORAGE_USAGE_DOC, {"limitBytes": int(4.5 * GIB)})

    @patch("main.get_db_client")
    def test_allowed_upload(self, mock_get_db_client):
        # Arrange
        mock_get_db_client.return_value = self.db
        self.db.put(GALLERY_COLLECTION, "g1", {"fileSize": 3 * GIB})

        # Act
        response = self.client.post("/", json={"data": {"fileSizeBytes": 10 * MIB}})

        # Assert
        self.assertEqual(
            response.status_code,
            200,
            f"Request failed with status {response.status_code}. Body: {response.get_data(as_text=True)}",
        )
        # Callable responses carry the payload under "result".
        result = response.get_json()["result"]
        self.assertTrue(result["allowed"])
        self.assertEqual(result["currentBytes"], 3 * GIB)
        self.assertEqual(result["limitBytes"], int(4.5 * GIB))
        self.assertEqual(result["projectedBytes"], 3 * GIB + 10 * MIB)
        self.assertEqual(result["projectedPct"], 66.9)
        self.assertEqual(result["message"], "OK")

    @patch("main.get_db_client")
    def test_rejected_upload(self, mock_get_db_client):
        # Arrange: 4.0 GB used, 600 MB upload against a 4.5 GB limit.
        mock_get_db_client.return_value = self.db
        self.db.put(GALLERY_COLLECTION, "g1", {"fileSize": 3 * GIB})
        self.db.put(MEDIA_FILES_COLLECTION, "m1", {"fileSize": GIB})

        # Act
        response = self.client.post("/", json={"data": {"fileSizeBytes": 600 * MIB}})

        # Assert
        self.assertEqual(response.status_code, 200)
        result = response.get_json()["result"]
        self.assertFalse(result["allowed"])
        self.assertGreater(result["projectedBytes"], result["limitBytes"])
        self.assertIn("Upload rejected", result["message"])

    @patch("main.get_db_client")
    def test_fractional_size_and_extra_fields(self, mock_get_db_client):
        # Arrange: unknown payload fields are ignored when parsing the request.
        mock_get_db_client.return_value = self.db
        self.db.put(GALLERY_COLLECTION, "g1", {"fileSize": 1000})
        payload = {"fileSizeBytes": 1.5, "fileName": "sports-day.jpg"}

        # Act
        response = self.client.post("/", json={"data": payload})

        # Assert
        self.assertEqual(response.status_code, 200, response.get_data(as_text=True))
        result = response.get_json()["result"]
        self.assertTrue(result["allowed"])
        self.assertEqual(result["projectedBytes"], 1001.5)

    @patch("main.get_db_client")
    def test_invalid_file_size(self, mock_get_db_client):
        mock_get_db_client.return_value = self.db

        for payload in ({"fileSizeBytes": 0}, {"fileSizeBytes": "big"}, {}):
            with self.subTest(payload=payload):
                response = self.client.post("/", json={"data": payload})

                self.assertEqual(response.status_code, 400)
                response_data = response.get_json()
                self.assertEqual(response_data["error"]["status"], "INVALID_ARGUMENT")
                self.assertIn(
                    "fileSizeBytes must be a positive number",
                    response_data["error"]["message"],
                )


class TestMainScheduledStorageCleanup(unittest.TestCase):

    @patch("firebase_admin.initialize_app")
    def setUp(self, initialize_app_mock):
        self.client = create_app(
            "scheduled_storage_cleanup", MAIN_SOURCE
        ).test_client()

    @patch("main.get_blob_storage_client")
    @patch("main.get_db_client")
    def test_cleanup_runs_on_schedule(self, mock_get_db_client, mock_get_blobs):
        # Arrange
        db = InMemoryDbClient()
        db.set_document(STORAGE_USAGE_DOC, {"limitBytes": 1000})
        db.set_document(SITE_SETTINGS_MAIN_DOC, {"email": "admin@school.edu.np"})
        db.put(
            GALLERY_COLLECTION,
            "old",
            {
                "fileSize": 960,
                "createdAt": datetime(2025, 1, 1, tzinfo=timezone.utc),
                "isPublished": False,
                "url": "data:image/png;base64,AAAA",
            },
        )
        mock_get_db_client.return_value = db
        mock_get_blobs.return_value = InMemoryBlobStorageClient()

        # Act
        response = self.client.post(
            "/", headers={"X-CloudScheduler-JobName": "storage-cleanup"}
        )

        # Assert
        self.assertEqual(response.status_code, 200, response.get_data(as_text=True))
        self.assertEqual(db.stream_collection(GALLERY_COLLECTION), [])
        self.assertEqual(db.get_document(STORAGE_USAGE_DOC)["totalBytes"], 0)
        self.assertEqual(len(db.stream_collection(MAIL_COLLECTION)), 1)


class TestMainContentWritten(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.db.set_document(SITE_SETTINGS_MAIN_DOC, {"email": "admin@school.edu.np"})
        self.db.put(GALLERY_COLLECTION, "g1", {"fileSize": int(3.6 * GIB)})

    def _write(self, collection, alert_on_all_collections):
        with patch.object(main, "get_db_client", return_value=self.db), patch.object(
            main,
            "get_settings",
            return_value=Settings(alert_on_all_collections=alert_on_all_collections),
        ):
            main._on_content_written(collection)

    def _mail(self):
        return self.db.stream_collection(MAIL_COLLECTION)

    def test_gallery_write_updates_usage_and_alerts(self):
        self._write(GALLERY_COLLECTION, alert_on_all_collections=False)

        doc = self.db.get_document(STORAGE_USAGE_DOC)
        self.assertEqual(doc["totalBytes"], int(3.6 * GIB))
        self.assertIn("warningEmailSentAt", doc)
        self.assertEqual(len(self._mail()), 1)

    def test_media_write_alerts_when_enabled_for_all_collections(self):
        self._write(MEDIA_FILES_COLLECTION, alert_on_all_collections=True)

        self.assertEqual(len(self._mail()), 1)
        self.assertIn(
            "warningEmailSentAt", self.db.get_document(STORAGE_USAGE_DOC)
        )

    def test_media_write_silent_when_alerts_limited_to_gallery(self):
        self._write(MEDIA_FILES_COLLECTION, alert_on_all_collections=False)

        doc = self.db.get_document(STORAGE_USAGE_DOC)
        self.assertEqual(doc["totalBytes"], int(3.6 * GIB))
        self.assertNotIn("warningEmailSentAt", doc)
        self.assertEqual(self._mail(), [])

    def test_alert_routing(self):
        with patch.object(
            main, "get_settings", return_value=Settings(alert_on_all_collections=False)
        ):
            self.assertTrue(main._alerts_enabled_for(GALLERY_COLLECTION))
            self.assertFalse(main._alerts_enabled_for(MEDIA_FILES_COLLECTION))
        with patch.object(
            main, "get_settings", return_value=Settings(alert_on_all_collections=True)
        ):
            self.assertTrue(main._alerts_enabled_for(MEDIA_FILES_COLLECTION))


if __name__ == "__main__":
    unittest.main()
