"""
Feature flags for the optional surfaces around the look pipeline.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the matching endpoint answers 404. The core keeps working.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Looks ────────────────────────────────────────────────────────
    enable_conversational_edit: bool = Field(default=True, alias="FF_ENABLE_CONVERSATIONAL_EDIT")
    # ON  → POST /v1/looks/{id}/edit sends free-form edits to the gateway.
    # OFF → Endpoint disabled. Needs GEMINI_API_KEY when on.

    enable_look_import: bool = Field(default=True, alias="FF_ENABLE_LOOK_IMPORT")
    # ON  → POST /v1/looks/import accepts exported look batches.
    # OFF → Export still works, import is disabled.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
