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

GIB = 1024 * 1024 * 1024

# 4.5 GB, leaving 0.5 GB of headroom in the 5 GB free tier.
DEFAULT_LIMIT_BYTES = int(4.5 * GIB)

WARN_THRESHOLD = 0.70
DANGER_THRESHOLD = 0.90
CLEANUP_TRIGGER = 0.95
CLEANUP_TARGET = 0.85

EMAIL_COOLDOWN_MS = 24 * 60 * 60 * 1000

CLEANUP_SCHEDULE = "every 24 hours"
CLEANUP_TIMEZONE = "Asia/Kathmandu"
