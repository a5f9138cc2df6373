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
Configuration and settings for the storage functions.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import (
    CLEANUP_SCHEDULE,
    CLEANUP_TIMEZONE,
    DEFAULT_LIMIT_BYTES,
    EMAIL_COOLDOWN_MS,
)


class Settings(BaseSettings):
    """Environment-backed settings for the storage functions."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Used when siteSettings/storageUsage has no limitBytes yet.
    default_limit_bytes: int = Field(default=DEFAULT_LIMIT_BYTES, gt=0)
    email_cooldown_seconds: int = Field(default=EMAIL_COOLDOWN_MS // 1000, ge=0)

    cleanup_schedule: str = Field(default=CLEANUP_SCHEDULE)
    cleanup_timezone: str = Field(default=CLEANUP_TIMEZONE)

    # When False, only gallery writes can queue threshold emails.
    alert_on_all_collections: bool = Field(default=True)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def email_cooldown_ms(self) -> int:
        return self.email_cooldown_seconds * 1000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
