from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = ".clipfinder"
_DATA_DIR_RELATIVE_DEFAULTS: tuple[tuple[str, Path], ...] = (("log_dir", Path("logs")),)
_PATH_FIELDS: tuple[str, ...] = (
    "data_dir",
    *(field_name for field_name, _ in _DATA_DIR_RELATIVE_DEFAULTS),
)
_BOOLEAN_COERCION_FIELDS: tuple[str, ...] = ("telemetry_enabled",)


def _default_in_data_dir(relative_path: Path) -> Path:
    return Path(DEFAULT_DATA_DIR) / relative_path


def _data_dir_default_note(relative_path: Path) -> str:
    return f"Defaults to `${{CLIPFINDER_DATA_DIR}}/{relative_path}` when not explicitly set."


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _parse_bool_with_default(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return default
    if not isinstance(value, str):
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _normalize_optional_limit(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"", "none", "off", "0"}:
            return None
        return normalized
    return value


class AppSettings(BaseSettings):
    """
    Canonical runtime configuration.

    Every option is read from a `CLIPFINDER_*` environment variable (or `.env`)
    and documented here together with its default.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLIPFINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Core paths.
    data_dir: Path = Field(
        default=Path(DEFAULT_DATA_DIR),
        description="Root runtime directory for local state and logs.",
    )

    # Upstream search page.
    search_base_url: str = Field(
        default="https://www.youtube.com",
        description="Origin of the video site whose `/results` page is scraped.",
    )
    search_language: str = Field(
        default="pt-BR",
        description="Interface language hint sent as the `hl` query parameter.",
    )
    search_accept_language: str = Field(
        default="pt-BR,pt;q=0.9",
        description="Accept-Language header sent with the search request.",
    )
    search_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
        ),
        description="Browser User-Agent sent with the search request.",
    )
    search_http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description=(
            "Socket timeout for the upstream search request. Unset keeps the transport "
            "default, so a hung upstream stalls the request until the caller gives up."
        ),
    )
    search_max_scan_nodes: int | None = Field(
        default=None,
        ge=1,
        description="Optional cap on JSON containers visited while looking for video records.",
    )

    # Result bounds for the search endpoint.
    search_min_results: int = Field(
        default=3,
        ge=1,
        description="Lower bound applied to the requested result count.",
    )
    search_max_results: int = Field(
        default=10,
        ge=1,
        description="Upper bound applied to the requested result count.",
    )
    search_default_results: int = Field(
        default=6,
        ge=1,
        description="Result count used when the request does not specify one.",
    )

    # Logging.
    log_dir: Path = Field(
        default=_default_in_data_dir(Path("logs")),
        description=f"Directory for backend log files. {_data_dir_default_note(Path('logs'))}",
    )
    log_level: str = Field(
        default="INFO",
        description="Console log level (stdout).",
    )

    # Telemetry.
    telemetry_enabled: bool = Field(
        default=True,
        description="Enable lightweight internal telemetry events.",
    )
    telemetry_sink: Literal["none", "log"] = Field(
        default="log",
        description=(
            "Telemetry sink backend. `log` emits structured telemetry locally; "
            "`none` disables sink output."
        ),
    )

    @field_validator("telemetry_sink", mode="before")
    @classmethod
    def _normalize_telemetry_sink(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("CLIPFINDER_TELEMETRY_SINK must be a string.")
        normalized = value.strip().lower()
        if normalized in {"none", "log"}:
            return normalized
        raise ValueError("CLIPFINDER_TELEMETRY_SINK must be set to: none, log.")

    @field_validator("search_base_url", mode="before")
    @classmethod
    def _normalize_search_base_url(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("CLIPFINDER_SEARCH_BASE_URL must be a string.")
        normalized = value.strip().rstrip("/")
        if not normalized.startswith(("http://", "https://")):
            raise ValueError("CLIPFINDER_SEARCH_BASE_URL must be an absolute http/https URL.")
        return normalized

    @field_validator("search_language", "search_accept_language", "search_user_agent", mode="before")
    @classmethod
    def _normalize_required_text(cls, value: Any, info: ValidationInfo) -> str:
        env_name = f"CLIPFINDER_{str(info.field_name).upper()}"
        if not isinstance(value, str):
            raise ValueError(f"{env_name} must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError(f"{env_name} must not be empty.")
        return normalized

    @field_validator("search_http_timeout_seconds", "search_max_scan_nodes", mode="before")
    @classmethod
    def _normalize_optional_limits(cls, value: Any) -> Any:
        return _normalize_optional_limit(value)

    @field_validator(*_PATH_FIELDS, mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        if value is None:
            return None
        return _resolve_path(value)

    @field_validator(*_BOOLEAN_COERCION_FIELDS, mode="before")
    @classmethod
    def _normalize_booleans(cls, value: Any, info: ValidationInfo) -> bool:
        field_name = info.field_name
        assert field_name is not None
        default_value = cls.model_fields[field_name].default
        assert isinstance(default_value, bool)
        return _parse_bool_with_default(value, default=default_value)

    @model_validator(mode="after")
    def _validate_result_bounds(self) -> AppSettings:
        if self.search_min_results > self.search_max_results:
            raise ValueError(
                "CLIPFINDER_SEARCH_MIN_RESULTS must not exceed CLIPFINDER_SEARCH_MAX_RESULTS."
            )
        if not self.search_min_results <= self.search_default_results <= self.search_max_results:
            raise ValueError(
                "CLIPFINDER_SEARCH_DEFAULT_RESULTS must lie between the min and max result bounds."
            )
        return self

    def clamp_result_count(self, requested: float | None) -> int:
        if requested is None:
            return self.search_default_results
        clamped = min(max(requested, self.search_min_results), self.search_max_results)
        return math.ceil(clamped)


def _apply_path_defaults(settings: AppSettings) -> AppSettings:
    updates: dict[str, Path] = {}
    for field_name, relative_default in _DATA_DIR_RELATIVE_DEFAULTS:
        if field_name in settings.model_fields_set:
            continue
        updates[field_name] = settings.data_dir / relative_default
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def _resolve_path_fields(settings: AppSettings) -> AppSettings:
    resolved_updates = {
        field_name: _resolve_path(getattr(settings, field_name))
        for field_name in _PATH_FIELDS
    }
    return settings.model_copy(update=resolved_updates)


def load_settings() -> AppSettings:
    settings = AppSettings()
    settings = _apply_path_defaults(settings)
    return _resolve_path_fields(settings)
