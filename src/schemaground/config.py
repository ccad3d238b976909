"""Engine configuration with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_settings()
2. Environment variables (SCHEMAGROUND__<KEY>)
3. Built-in defaults (this file)

Examples:
    SCHEMAGROUND__DATA_DIR=/var/lib/schemaground
    SCHEMAGROUND__LOG_LEVEL=DEBUG
    SCHEMAGROUND__INDENT_DOCUMENTS=0
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .catalog.types import DEFAULT_TIMESTAMP_FORMAT

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class EngineSettings(BaseSettings):
    """Settings of the engine and of the storage of its databases.

    Env vars: SCHEMAGROUND__DATA_DIR, SCHEMAGROUND__LOG_LEVEL, etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAGROUND__",
        case_sensitive=False,
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory containing one directory for each database.",
    )
    indent_documents: int | None = Field(
        default=2,
        description="Indentation of the stored JSON documents, 0 or None for compact output.",
    )
    timestamp_format: str = Field(
        default=DEFAULT_TIMESTAMP_FORMAT,
        description="strptime format of TIMESTAMP values and of transaction log entries.",
    )
    log_level: LogLevel = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("indent_documents")
    @classmethod
    def validate_indent(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError(f"Indentation can't be negative: {v}")
        return v or None


def load_settings(**kwargs: Any) -> EngineSettings:
    """Load settings: defaults < env vars < kwargs."""
    return EngineSettings(**kwargs)
