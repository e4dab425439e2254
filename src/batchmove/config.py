"""Configuration management using pydantic-settings."""

import json
import os
import re
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

ENV_REFERENCE_PREFIX = "ENV:"
LOG_FORMATS = ("csv", "json", "txt", "xlsx")
DEFAULT_FILE_NAME_PREFIX = "AnalysesJour"
DEFAULT_LOG_FILE_NAME_FORMAT = "%Y_%m_%d_%H%M%S_%A"
DEFAULT_RETENTION_DAYS = 30
DEFAULT_MAX_ATTACHMENT_SIZE = 20 * 1024 * 1024


def resolve_env_reference(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Resolve an ``ENV:NAME`` value to the content of variable NAME.

    Values without the prefix are returned unchanged.
    """
    if not value.startswith(ENV_REFERENCE_PREFIX):
        return value

    env = os.environ if environ is None else environ
    name = value[len(ENV_REFERENCE_PREFIX):].strip()
    if not name:
        raise ConfigurationError(f"Empty environment variable reference '{value}'")
    if name not in env:
        raise ConfigurationError(f"Environment variable '{name}' is not set")
    return env[name]


def _resolve_path(v: str | Path) -> Path:
    return Path(resolve_env_reference(str(v))).expanduser()


class ConfigSection(BaseModel):
    """Base for sections of the JSON document (camelCase keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


class SourceConfig(ConfigSection):
    folder: Path
    match_pattern: str
    recursive: bool = False

    @field_validator("folder", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return _resolve_path(v)

    @field_validator("match_pattern")
    @classmethod
    def check_regex(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex '{v}': {e}") from e
        return v

    @property
    def pattern(self) -> re.Pattern[str]:
        return re.compile(self.match_pattern)


class DestinationConfig(ConfigSection):
    folder: Path
    year_subfolder: bool = True
    file_name_prefix: str = DEFAULT_FILE_NAME_PREFIX
    file_extension: str | None = None  # None keeps the source extension

    @field_validator("folder", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return _resolve_path(v)


class LogWhereConfig(ConfigSection):
    folder: Path | None = None
    file_extensions: list[str] = []
    file_name_format: str = DEFAULT_LOG_FILE_NAME_FORMAT

    @field_validator("folder", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path | None) -> Path | None:
        if v is None or v == "":
            return None
        return _resolve_path(v)

    @field_validator("file_extensions")
    @classmethod
    def check_formats(cls, v: list[str]) -> list[str]:
        formats = []
        for ext in v:
            fmt = ext.strip().lstrip(".").lower()
            if fmt not in LOG_FORMATS:
                raise ValueError(
                    f"Unsupported log file extension '{ext}', expected one of {LOG_FORMATS}"
                )
            formats.append(fmt)
        return formats


class LogWhatConfig(ConfigSection):
    system_errors: bool = True
    all_actions: bool = True
    only_action_errors: bool = False


class SaveLogFilesConfig(ConfigSection):
    where: LogWhereConfig = LogWhereConfig()
    what: LogWhatConfig = LogWhatConfig()
    append: bool = False
    delete_logs_after_days: int = DEFAULT_RETENTION_DAYS
    recursive_cleanup: bool = False

    @model_validator(mode="after")
    def require_folder(self) -> Self:
        if self.where.file_extensions and self.where.folder is None:
            raise ValueError("saveLogFiles.where.folder is required when fileExtensions are set")
        return self


class EventLogConfig(ConfigSection):
    save: bool = False
    log_name: str = "Scripts"


class SendWhen(str, Enum):
    """When the summary mail is sent."""

    NEVER = "Never"
    ALWAYS = "Always"
    ON_ERROR = "OnError"
    ON_ERROR_OR_ACTION = "OnErrorOrAction"


class ConnectionType(str, Enum):
    """SMTP transport security."""

    NONE = "None"
    AUTO = "Auto"
    SSL_ON_CONNECT = "SslOnConnect"
    START_TLS = "StartTls"
    START_TLS_WHEN_AVAILABLE = "StartTlsWhenAvailable"


class SmtpConfig(ConfigSection):
    server_name: str = "localhost"
    port: int = 25
    connection_type: ConnectionType = ConnectionType.START_TLS_WHEN_AVAILABLE
    user_name: str | None = None
    password: str | None = Field(default=None, repr=False)

    @field_validator("server_name", "user_name", "password", mode="before")
    @classmethod
    def resolve_env(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return resolve_env_reference(str(v))


class SendMailConfig(ConfigSection):
    when: SendWhen = SendWhen.ON_ERROR
    from_address: str | None = Field(default=None, alias="from")
    from_display_name: str | None = None
    to: list[str] = []
    bcc: list[str] = []
    subject: str = ""
    body: str = ""
    attachments: list[Path] = []
    max_total_attachment_size: int = DEFAULT_MAX_ATTACHMENT_SIZE
    smtp: SmtpConfig = SmtpConfig()
    # Location of .NET mail assemblies in older deployments; not used here
    assembly_path: dict[str, Any] = {}

    @field_validator("to", "bcc", mode="before")
    @classmethod
    def listify(cls, v: str | list[str] | None) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("attachments", mode="before")
    @classmethod
    def expand_paths(cls, v: list[str | Path] | None) -> list[Path]:
        return [_resolve_path(p) for p in v or []]


class RunSettings(ConfigSection):
    script_name: str = "batchmove"
    save_log_files: SaveLogFilesConfig = SaveLogFilesConfig()
    save_in_event_log: EventLogConfig = EventLogConfig()
    send_mail: SendMailConfig = SendMailConfig()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BATCHMOVE_", env_nested_delimiter="__", extra="forbid"
    )

    source: SourceConfig
    destination: DestinationConfig
    settings: RunSettings = RunSettings()


def load_settings(config_path: Path) -> Settings:
    """Load and validate the JSON configuration document.

    Raises ConfigurationError for a missing file, malformed JSON, invalid
    values or unresolvable ``ENV:`` references.
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        data = json.loads(config_path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be an object: {config_path}")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e
