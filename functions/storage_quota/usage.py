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

import math
from typing import Any, Iterable

from shared.firebase_constants import TRACKED_COLLECTIONS
from storage_quota.db import QuotaDbClient


def file_size_of(value: Any) -> int:
    """
    Returns the byte count stored in a fileSize field.

    Missing, non-numeric, non-finite and negative values count as 0 so a
    single malformed record never breaks aggregation.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value)


def sum_collection_size(db: QuotaDbClient, collection: str) -> int:
    """Sums fileSize over every document in a collection."""
    return sum(
        file_size_of(data.get("fileSize")) for _, data in db.stream_collection(collection)
    )


def recalc_total_usage(
    db: QuotaDbClient, collections: Iterable[str] = TRACKED_COLLECTIONS
) -> int:
    """Recalculates total storage usage from all tracked collections."""
    return sum(sum_collection_size(db, collection) for collection in collections)
