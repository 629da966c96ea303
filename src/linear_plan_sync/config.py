"""Configuration for plan syncing.

Settings are resolved from two places:
- a JSON config file (default `~/.claude/linear-sync.json`)
- environment variables

When the config file exists it is the only source for the sync options; the
`LINEAR_TEAM_ID`, `LINEAR_CREATE_MIRROR`, `LINEAR_TITLE_FORMAT` and
`LINEAR_COMMENT_HEADER` variables are consulted only when it does not.
`LINEAR_API_KEY` always wins over an `apiKey` stored in the file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from linear_plan_sync.outcome import SkipReason, SyncOutcome

logger = logging.getLogger(__name__)

TICKET_ID_PLACEHOLDER = "{TICKET_ID}"
DEFAULT_TITLE_FORMAT = "{TICKET_ID}: Plan Documentation"
DEFAULT_COMMENT_HEADER = "## Implementation Plan"
DEFAULT_API_URL = "https://api.linear.app/graphql"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_CONFIG_PATH = Path("~/.claude/linear-sync.json")

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_BOOL_ADAPTER = TypeAdapter(bool)


class ConfigurationError(Exception):
    """Raised when the config file exists but cannot be used."""


class RuntimeSettings(BaseSettings):
    """Values read from the process environment.

    Environment variables:
    - LINEAR_API_KEY          (always consulted)
    - LINEAR_TEAM_ID          (only without a config file)
    - LINEAR_CREATE_MIRROR    (only without a config file)
    - LINEAR_TITLE_FORMAT     (only without a config file)
    - LINEAR_COMMENT_HEADER   (only without a config file)
    - LINEAR_API_URL          (optional)
    - LINEAR_TIMEOUT_SECONDS  (optional)
    - LINEAR_SYNC_LOG_LEVEL   (optional)
    - LINEAR_SYNC_CONFIG      (optional)
    """

    api_key: str = Field(
        default="",
        validation_alias="LINEAR_API_KEY",
        description="Linear personal API key",
    )
    team_id: str = Field(
        default="",
        validation_alias="LINEAR_TEAM_ID",
        description="Team that owns newly created mirror issues",
    )
    # Kept raw: only parsed when there is no config file.
    create_mirror: str | None = Field(
        default=None,
        validation_alias="LINEAR_CREATE_MIRROR",
        description="Create a mirror issue when none matches the ticket identifier",
    )
    title_format: str = Field(
        default=DEFAULT_TITLE_FORMAT,
        validation_alias="LINEAR_TITLE_FORMAT",
        description="Mirror issue title; {TICKET_ID} is replaced with the identifier",
    )
    comment_header: str = Field(
        default=DEFAULT_COMMENT_HEADER,
        validation_alias="LINEAR_COMMENT_HEADER",
        description="First line of every posted comment",
    )

    api_url: str = Field(
        default=DEFAULT_API_URL,
        validation_alias="LINEAR_API_URL",
        description="Linear GraphQL endpoint",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        validation_alias="LINEAR_TIMEOUT_SECONDS",
        description="Timeout applied to each API request",
    )
    log_level: str = Field(
        default="WARNING",
        validation_alias="LINEAR_SYNC_LOG_LEVEL",
        description="Root logging level",
    )
    config_path: Path = Field(
        default=DEFAULT_CONFIG_PATH,
        validation_alias="LINEAR_SYNC_CONFIG",
        description="Location of the JSON config file",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level


class ConfigFile(BaseModel):
    """Shape of the JSON config file. Every key is optional."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    team_id: str = Field(default="", alias="teamId")
    create_mirror_tickets: bool = Field(default=True, alias="createMirrorTickets")
    ticket_title_format: str = Field(default=DEFAULT_TITLE_FORMAT, alias="ticketTitleFormat")
    comment_header: str = Field(default=DEFAULT_COMMENT_HEADER, alias="commentHeader")
    api_key: str = Field(default="", alias="apiKey")

    @classmethod
    def read(cls, path: Path) -> ConfigFile:
        try:
            raw: Any = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")

        # null behaves like a missing key.
        present = {key: value for key, value in raw.items() if value is not None}
        try:
            return cls.model_validate(present)
        except ValidationError as e:
            raise ConfigurationError(f"Config file {path} has invalid values: {e}") from e


class SyncSettings(BaseModel):
    """Effective settings for one sync attempt."""

    model_config = ConfigDict(frozen=True)

    team_id: str = ""
    create_mirror: bool = True
    title_format: str = DEFAULT_TITLE_FORMAT
    comment_header: str = DEFAULT_COMMENT_HEADER
    api_key: str = Field(default="", repr=False)

    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    config_path: Path = DEFAULT_CONFIG_PATH

    def mirror_title(self, ticket_id: str) -> str:
        """Return the mirror issue title for a ticket identifier."""

        return self.title_format.replace(TICKET_ID_PLACEHOLDER, ticket_id)


def parse_create_mirror(raw: str | None) -> bool:
    """Interpret `LINEAR_CREATE_MIRROR`; unset means enabled.

    Accepts the usual boolean spellings (true/false, 1/0, yes/no, on/off).
    """

    if raw is None:
        return True
    try:
        return _BOOL_ADAPTER.validate_python(raw.strip())
    except ValidationError as e:
        raise ConfigurationError(
            f"LINEAR_CREATE_MIRROR must be true or false, got {raw!r}"
        ) from e


def load_settings(
    config_path: Path | None = None,
    *,
    runtime: RuntimeSettings | None = None,
) -> SyncSettings:
    """Merge the config file and environment into `SyncSettings`.

    Raises:
        ConfigurationError: if the config file exists but is unusable.
    """

    runtime = runtime or RuntimeSettings()
    path = (config_path or runtime.config_path).expanduser()

    if path.is_file():
        file_config = ConfigFile.read(path)
        logger.debug("Loaded config file", extra={"path": str(path)})
        options: dict[str, Any] = {
            "team_id": file_config.team_id,
            "create_mirror": file_config.create_mirror_tickets,
            "title_format": file_config.ticket_title_format,
            "comment_header": file_config.comment_header,
        }
        file_api_key = file_config.api_key
    else:
        logger.debug("No config file; using environment", extra={"path": str(path)})
        options = {
            "team_id": runtime.team_id,
            "create_mirror": parse_create_mirror(runtime.create_mirror),
            "title_format": runtime.title_format,
            "comment_header": runtime.comment_header,
        }
        file_api_key = ""

    return SyncSettings(
        **options,
        api_key=runtime.api_key or file_api_key,
        api_url=runtime.api_url,
        timeout_seconds=runtime.timeout_seconds,
        config_path=path,
    )


def check_configured(settings: SyncSettings) -> SyncOutcome | None:
    """Return a skip outcome when credentials or the team are missing."""

    if not settings.api_key.strip():
        return SyncOutcome.skipped(
            SkipReason.MISSING_API_KEY,
            "LINEAR_API_KEY environment variable not set\n"
            "Get your API key from: https://linear.app/settings/api",
        )

    if not settings.team_id.strip():
        return SyncOutcome.skipped(
            SkipReason.MISSING_TEAM_ID,
            "Linear team ID not configured\n"
            f"Set teamId in {settings.config_path} or LINEAR_TEAM_ID env var\n"
            "Find your team ID in Linear: Settings > Teams > [Team] > Copy ID",
        )

    return None
