"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``DaybookConfig``
instance.  Dict-based access keeps working unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


def _expand(v: Any) -> Any:
    if isinstance(v, str):
        return Path(v).expanduser()
    if isinstance(v, Path):
        return v.expanduser()
    return v


class PathsConfig(BaseModel):
    """File-system paths used by the local backend."""

    data_dir: Path
    entries_dir: Path | None = None

    @field_validator("data_dir", "entries_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        return _expand(v)


class SupabaseConfig(BaseModel):
    """Connection settings for the hosted entry table and auth service."""

    url: str = ""
    api_key: str = ""
    table: str = "journal_entries"
    timeout: int = 20
    token_file: Path | None = None

    @field_validator("token_file", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        return _expand(v) if v else None

    @field_validator("url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


class LocalConfig(BaseModel):
    """Settings for the file-backed backend."""

    session_file: Path | None = None

    @field_validator("session_file", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        return _expand(v) if v else None


class JournalConfig(BaseModel):
    """How new entries are dated and placed in the local mirror."""

    insert_policy: Literal["prepend", "sorted"] = "prepend"
    timezone: str = ""

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        if v:
            try:
                ZoneInfo(v)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"unknown timezone {v!r}") from e
        return v


class LoggingConfig(BaseModel):
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class DaybookConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.daybook"))
    backend: Literal["local", "supabase"] = "local"
    supabase: SupabaseConfig = SupabaseConfig()
    local: LocalConfig = LocalConfig()
    journal: JournalConfig = JournalConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _supabase_credentials(self) -> DaybookConfig:
        if self.backend == "supabase" and not (self.supabase.url and self.supabase.api_key):
            raise ValueError("backend 'supabase' requires supabase.url and supabase.api_key")
        return self
