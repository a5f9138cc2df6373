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

# Firestore collection and document paths used by the storage functions.

GALLERY_COLLECTION = "gallery"
MEDIA_FILES_COLLECTION = "mediaFiles"
MAIL_COLLECTION = "mail"
SITE_SETTINGS_COLLECTION = "siteSettings"

# Collections whose items' fileSize counts toward total storage usage.
TRACKED_COLLECTIONS = (GALLERY_COLLECTION, MEDIA_FILES_COLLECTION)

# Collection that cleanup is allowed to delete from.
CLEANUP_COLLECTION = GALLERY_COLLECTION

STORAGE_USAGE_DOC = SITE_SETTINGS_COLLECTION + "/storageUsage"
SITE_SETTINGS_MAIN_DOC = SITE_SETTINGS_COLLECTION + "/main"
