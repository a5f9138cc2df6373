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

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def camel_to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


_CONVERTERS = {
    "snake_to_camel": snake_to_camel,
    "camel_to_snake": camel_to_snake,
}


def convert_keys(data: Any, direction: str) -> Any:
    """
    Recursively converts dictionary keys between snake_case and camelCase.

    Firestore documents are written in camelCase (shared with the web
    client) while the Python dataclasses use snake_case.

    Args:
        data: A dict, list, or scalar value. Non-string keys and scalar values
            are returned unchanged.
        direction (str): "snake_to_camel" or "camel_to_snake".

    Returns:
        A copy of `data` with converted keys.
    """
    if direction not in _CONVERTERS:
        raise ValueError(f"Unknown key conversion direction: {direction}")
    convert = _CONVERTERS[direction]

    if isinstance(data, dict):
        return {
            (convert(key) if isinstance(key, str) else key): convert_keys(
                value, direction
            )
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [convert_keys(item, direction) for item in data]
    return data
