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

KB = 1024
MB = 1024 * KB
GB = 1024 * MB


def format_bytes(num_bytes: float) -> str:
    """Human-readable binary size, e.g. "512 B", "1.5 KB", "3.2 MB", "4.50 GB"."""
    if num_bytes < KB:
        return f"{int(num_bytes)} B"
    if num_bytes < MB:
        return f"{num_bytes / KB:.1f} KB"
    if num_bytes < GB:
        return f"{num_bytes / MB:.1f} MB"
    return f"{num_bytes / GB:.2f} GB"


def format_percent(ratio: float) -> str:
    """Formats a 0-1 ratio as a percentage with one decimal, without the sign."""
    return f"{ratio * 100:.1f}"
