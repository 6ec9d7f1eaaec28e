# formstore/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Mapping and list settings (CLEANUP, CONTENT_DIMENSIONS, NODE_TYPES_*) are read
as JSON from the environment.
"""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


class CleanupRule(BaseModel):
    """Retention rule for one bucket.

    The interval is kept as a raw string; it is validated per bucket when a
    cleanup runs so a single broken rule cannot block the others.
    """

    model_config = ConfigDict(populate_by_name=True)

    interval: str | None = Field(
        default=None,
        alias="dateInterval",
        description="ISO 8601 calendar interval, e.g. P30D or P1Y2M",
    )
    remove_files: bool = Field(
        default=False,
        alias="removeFiles",
        description="Also delete uploaded files referenced by removed entries",
    )


class DimensionPreset(BaseModel):
    """One preset of a content dimension (e.g. the 'de' language)."""

    values: list[str] = Field(default_factory=list, description="Fallback chain, most specific first")


class ContentDimension(BaseModel):
    """A content dimension axis such as language or country."""

    default: str
    presets: dict[str, DimensionPreset] = Field(default_factory=dict)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="SQLAlchemy connection URL for the entry store",
    )

    # Authentication
    ADMIN_API_KEY: str | None = Field(
        default=None,
        description="API key for the storage admin endpoints",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (False = human readable)",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level",
    )

    # Resource storage (uploaded files)
    STORAGE_PROVIDER: str = Field(
        default="local",
        description="Resource storage provider: local, s3",
    )
    LOCAL_STORAGE_PATH: str = Field(
        default="./resources",
        description="Path for local resource storage",
    )
    RESOURCE_BASE_URL: str = Field(
        default="/_resources",
        description="Public base URL the local resources are served under",
    )
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    S3_BUCKET: str | None = None
    S3_PUBLIC_BASE_URL: str | None = Field(
        default=None,
        description="Public base URL for S3 objects. Empty = presigned URLs.",
    )

    # Listing / export
    DATETIME_FORMAT: str = Field(
        default="Y-m-d H:i:s",
        description="Output datetime format (PHP date() notation) for dates in listings and exports",
    )
    NODE_TYPES_IGNORED_IN_EXPORT: list[str] = Field(
        default_factory=lambda: [
            "Neos.Form.Builder:Section",
            "Neos.Form.Builder:StaticText",
            "Neos.Form.Builder:Page",
        ],
        description="Form element types that never get an export column",
    )
    NODE_TYPES_IGNORED_IN_FINISHER: list[str] = Field(
        default_factory=lambda: [
            "Neos.Form.Builder:Section",
            "Neos.Form.Builder:StaticText",
        ],
        description="Form element types whose values are never stored",
    )
    CONTENT_DIMENSIONS: dict[str, ContentDimension] = Field(
        default_factory=dict,
        description="Content dimensions used to look up localized form definitions",
    )
    EXPORT_CREATOR: str = Field(default="formstore")
    EXPORT_TITLE: str = Field(default="Form Storage")
    EXPORT_SUBJECT: str = Field(default="Form Storage Export")

    # Retention
    CLEANUP: dict[str, CleanupRule] = Field(
        default_factory=dict,
        description='Bucket retention rules, e.g. {"newsletter": {"interval": "P30D", "removeFiles": false}}',
    )

    @field_validator("STORAGE_PROVIDER")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.lower().strip()

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
