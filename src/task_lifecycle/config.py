"""Load optional engine configuration from `.task_lifecycle/config.yaml`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    CONFIG_FILE,
    DEFAULT_COPY_TAG,
    DEFAULT_COPY_TITLE_SUFFIX,
    DEFAULT_LOG_LEVEL,
    DEFAULT_NEXT_WEEK_DAYS,
    DEFAULT_USER_ID,
    STATE_DIR_NAME,
)
from .io_utils import _load_data_with_error

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class ProviderConfig(BaseModel):
    """Capabilities of the task provider the board syncs with."""

    name: str = "local"
    supports_revert_done: bool = True


class EngineConfig(BaseModel):
    """Engine settings."""

    user_id: str = DEFAULT_USER_ID
    log_level: str = DEFAULT_LOG_LEVEL
    next_week_days: int = Field(default=DEFAULT_NEXT_WEEK_DAYS, ge=1)
    copy_title_suffix: str = DEFAULT_COPY_TITLE_SUFFIX
    copy_tag: str = DEFAULT_COPY_TAG
    provider: ProviderConfig = Field(default_factory=ProviderConfig)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")
        return level


def config_path(project_dir: Path) -> Path:
    return project_dir.resolve() / STATE_DIR_NAME / CONFIG_FILE


def parse_engine_config(data: dict[str, Any]) -> tuple[EngineConfig, str | None]:
    """Validate a raw config mapping.

    Returns:
        A tuple of `(config, error_message)`. Invalid data yields the defaults
        plus a message naming the offending fields.
    """
    try:
        return EngineConfig.model_validate(data), None
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return EngineConfig(), f"{CONFIG_FILE}: {problems}"


def load_engine_config(project_dir: Path) -> tuple[EngineConfig, str | None]:
    """Load the optional engine config file.

    Args:
        project_dir: Directory holding the `.task_lifecycle/` state directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns
        the defaults and `None`.
    """
    path = config_path(project_dir)
    data, err = _load_data_with_error(path, {})
    if err:
        return EngineConfig(), err
    return parse_engine_config(data)
