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

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.json_utils import camel_to_snake, convert_keys, snake_to_camel


class JsonUtilsTest(unittest.TestCase):

    def test_key_conversions(self):
        self.assertEqual(snake_to_camel("warning_email_sent_at"), "warningEmailSentAt")
        self.assertEqual(camel_to_snake("thumbnailUrl"), "thumbnail_url")
        self.assertEqual(camel_to_snake("id"), "id")

    def test_convert_nested_and_keeps_values(self):
        data = {
            "file_size": 10,
            "last_checked": SERVER_TIMESTAMP,
            "items": [{"is_published": True}],
        }

        converted = convert_keys(data, "snake_to_camel")

        self.assertEqual(
            converted,
            {
                "fileSize": 10,
                "lastChecked": SERVER_TIMESTAMP,
                "items": [{"isPublished": True}],
            },
        )
        self.assertEqual(convert_keys(converted, "camel_to_snake"), data)

    def test_unknown_direction(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "kebab")


if __name__ == "__main__":
    unittest.main()
