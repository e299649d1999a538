"""
Configuration Management for KGB Assistant

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The cycle length and the spreadsheet import strategy are
configuration, not constants. Both changed over the lifetime of the tool
(one year vs two years, literal date column vs year matrix), so they are
chosen per deployment instead of being baked into the calculator.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ImportStrategyName = Literal["auto", "year_matrix", "date_column"]


class KGBSettings(BaseSettings):
    """Review cycle, import and storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KGB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    cycle_length_years: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Years between two successive salary-step reviews"
    )
    import_strategy: ImportStrategyName = Field(
        default="auto",
        description="Spreadsheet layout to expect on import"
    )
    review_window_days: int = Field(
        default=90,
        ge=0,
        description="Reviews due within this many days are listed as upcoming"
    )

    # Persistence
    storage_key: str = Field(
        default="kgb-assistant-employees",
        min_length=1,
        description="Key holding the serialized employee collection"
    )
    storage_path: str = Field(
        default="kgb_data.json",
        description="Path of the JSON file backing the key-value store"
    )

    # Audit trail
    audit_storage_key: str = Field(
        default="kgb-assistant-audit",
        min_length=1,
        description="Key holding the append-only audit trail"
    )
    audit_max_events: int = Field(
        default=1000,
        ge=10,
        description="Oldest audit events are dropped beyond this count"
    )


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # File import limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum import file size in MB"
    )
    supported_import_formats: str = Field(
        default="json,xlsx,csv",
        description="Comma-separated list of importable file extensions"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_import_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the Gemini key is only required
    # when the promotion agent is actually used.

    @property
    def kgb(self) -> KGBSettings:
        return KGBSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry describing each failure. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("kgb", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
