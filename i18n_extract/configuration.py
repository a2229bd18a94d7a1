"""Prepper-backed configuration loader for the i18n extractor."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Literal, Mapping, Sequence

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import ConfigurationError
from .structures import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MULTI_LINE_COMMENT,
    DEFAULT_SCRIPT_PATTERN,
    DEFAULT_SINGLE_LINE_COMMENT,
    ExtractionOptions,
)

APP_NAME = "I18nExtract"

# Patterns may contain commas, so they are kept one per line.
LIST_SEPARATORS = {
    "I18N_SCAN_DIRS": ",",
    "I18N_IGNORE": ",",
    "I18N_EXTENSIONS": ",",
    "I18N_EXCLUDE_PATTERNS": "\n",
}


def split_list_value(value: str, separator: str = ",") -> List[str]:
    """Split a list setting stored as a single string."""

    return [item.strip() for item in value.split(separator) if item.strip()]


class ExtractorConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    I18N_SCAN_DIRS: str = Field(
        default="./src",
        description="Directories scanned for component files.",
    )
    I18N_IGNORE: str = Field(default="node_modules,dist")
    I18N_EXTENSIONS: str = Field(default=".vue")
    I18N_DICTIONARY_PATH: str = Field(
        default="./i18n/zh-CN.json",
        description="Dictionary file consumed by the localization runtime.",
    )
    I18N_BACKUP: bool = Field(default=False)
    I18N_BACKUP_DIR: str = Field(default="./i18n-backup")
    I18N_GENERATE_LOG: bool = Field(default=False)
    I18N_LOG_PATH: str = Field(default="./i18n-extract.log")
    I18N_SCRIPT_PATTERN: str = Field(default=DEFAULT_SCRIPT_PATTERN)
    I18N_SINGLE_LINE_COMMENT: str = Field(default=DEFAULT_SINGLE_LINE_COMMENT)
    I18N_MULTI_LINE_COMMENT: str = Field(default=DEFAULT_MULTI_LINE_COMMENT)
    I18N_EXCLUDE_PATTERNS: str = Field(default="\n".join(DEFAULT_EXCLUDE_PATTERNS))
    I18N_KEY_NAMER: Literal["local", "http", "openai"] = Field(
        default="local",
        description="How lookup keys are named.",
    )
    I18N_AI_ENDPOINT: str | None = Field(default=None)
    I18N_AI_API_KEY: str | None = Field(default=None, secret=True)
    I18N_AI_TIMEOUT: float = Field(default=5.0)
    OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    I18N_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_values(data: Any) -> Any:
        if isinstance(data, dict):
            for name, separator in LIST_SEPARATORS.items():
                if isinstance(data.get(name), (list, tuple)):
                    data[name] = separator.join(str(item) for item in data[name])
            raw_value = data.get("I18N_KEY_NAMER")
            if isinstance(raw_value, str):
                normalized = raw_value.strip().lower()
                synonyms = {"remote": "http", "ai": "http", "gpt": "openai"}
                data["I18N_KEY_NAMER"] = synonyms.get(normalized, normalized)
        return data


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    try:
        provenance = ProvenanceRecorder()
        combined = _load_discovered_yaml(app_dir=base_dir, provenance=provenance)
        _merge_env_sources(
            combined,
            provenance=provenance,
            app_dir=base_dir,
            schema=ExtractorConfig,
        )

        model = ExtractorConfig.validate(combined, provenance=provenance)
        _validate_key_namer_settings(model)

        return ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=ExtractorConfig,
        )
    except IoError as exc:
        raise ConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise ConfigurationError(f"Configuration schema error: {exc}") from exc
    except ValidationError as exc:
        issues = _format_validation_errors(exc.to_dict())
        raise ConfigurationError(issues) from exc


def _load_discovered_yaml(
    *,
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> dict[str, Any]:
    """Load YAML configuration files using Prepper's discovery rules."""

    result: dict[str, Any] = {}
    discovered = discover_file_paths(
        APP_NAME,
        "yaml",
        app_dir=app_dir,
        extra_paths=None,
    )
    for path, label in discovered:
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        source = _path_to_source(label, "yaml", path)
        merge_layer(result, parsed, provenance=provenance, source=source, layer="file")
    return result


def _merge_env_sources(
    target: dict[str, Any],
    *,
    provenance: ProvenanceRecorder,
    app_dir: Path,
    schema: type[SchemaModel],
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(schema.__field_infos__.keys())

    def merge_values(values: Mapping[str, str], *, source_prefix: str) -> None:
        for key, value in sorted(values.items()):
            if key not in allowed:
                continue
            merge_layer(
                target,
                {key: value},
                provenance=provenance,
                source=f"env:{source_prefix}:{key}",
                layer="env",
            )

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        dotenv_content = dotenv_values(dotenv_path)
        merge_values(
            {k: v for k, v in dotenv_content.items() if v is not None},
            source_prefix=".env",
        )

    merge_values(
        {k: v for k, v in os.environ.items() if isinstance(v, str)},
        source_prefix="process",
    )


def _validate_key_namer_settings(settings: ExtractorConfig) -> None:
    errors = key_namer_problems(
        settings.I18N_KEY_NAMER,
        endpoint=settings.I18N_AI_ENDPOINT,
        openai_api_key=settings.OPENAI_API_KEY,
        timeout=settings.I18N_AI_TIMEOUT,
    )
    if errors:
        bullet_list = "\n".join(f"- {message}" for message in errors)
        raise ConfigurationError(
            "Configuration validation errors detected:\n" + bullet_list
        )


def key_namer_problems(
    key_namer: str,
    *,
    endpoint: str | None,
    openai_api_key: str | None,
    timeout: float,
) -> list[str]:
    """List what is missing for the selected key namer."""

    errors: list[str] = []
    if key_namer == "http" and not endpoint:
        errors.append("I18N_AI_ENDPOINT is required when I18N_KEY_NAMER is 'http'.")
    elif key_namer == "openai" and not openai_api_key:
        errors.append("OPENAI_API_KEY is required when I18N_KEY_NAMER is 'openai'.")
    if timeout <= 0:
        errors.append("I18N_AI_TIMEOUT must be a positive number of seconds.")
    return errors


def _format_validation_errors(entries: Sequence[dict[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("message") or entry.get("msg") or "Invalid value")
        source = entry.get("source")
        origin = f" (source: {source})" if source else ""
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}{origin}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> ExtractorConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()


def build_options(settings: ExtractorConfig, **overrides: Any) -> ExtractionOptions:
    """Resolve settings into run options; ``None`` overrides are ignored."""

    values: dict[str, Any] = {
        "scan_dirs": [Path(item) for item in split_list_value(settings.I18N_SCAN_DIRS)],
        "dictionary_path": Path(settings.I18N_DICTIONARY_PATH),
        "ignore": split_list_value(settings.I18N_IGNORE),
        "extensions": split_list_value(settings.I18N_EXTENSIONS),
        "backup": settings.I18N_BACKUP,
        "backup_dir": Path(settings.I18N_BACKUP_DIR),
        "generate_log": settings.I18N_GENERATE_LOG,
        "log_path": Path(settings.I18N_LOG_PATH),
        "script_pattern": settings.I18N_SCRIPT_PATTERN,
        "single_line_comment": settings.I18N_SINGLE_LINE_COMMENT,
        "multi_line_comment": settings.I18N_MULTI_LINE_COMMENT,
        "exclude_patterns": split_list_value(settings.I18N_EXCLUDE_PATTERNS, "\n"),
        "key_namer": settings.I18N_KEY_NAMER,
        "ai_endpoint": settings.I18N_AI_ENDPOINT,
        "ai_api_key": settings.I18N_AI_API_KEY,
        "ai_timeout": settings.I18N_AI_TIMEOUT,
        "openai_api_key": settings.OPENAI_API_KEY,
        "provider_debug": settings.I18N_PROVIDER_DEBUG,
    }
    values.update({name: value for name, value in overrides.items() if value is not None})
    return ExtractionOptions(**values)
