# ridr/core/app_config.py
"""
Schema of the nested app config.

Only the recognized top-level options are checked; other keys are
kept as they are so plugins can read their own sections.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ridr.core.errors import InvalidConfigError


class RoutingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    intent_map: dict[str, str] = Field(default_factory=dict)
    intents_to_skip_unhandled: list[str] = Field(default_factory=list)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    request: bool = True
    response: bool = True
    indentation: Optional[int] = 2


class I18nConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    resources: dict[str, dict[str, Any]] = Field(default_factory=dict)
    resource_dir: Optional[Union[str, Path]] = None
    fallback_locale: str = "en"
    default_namespace: str = "translation"


class AppConfigSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    i18n: Optional[I18nConfig] = None
    logging: Union[bool, LoggingConfig, None] = None
    routing: Optional[RoutingConfig] = None
    plugin: dict[str, dict[str, Any]] = Field(default_factory=dict)


def validate_app_config(config: dict) -> None:
    """Raise InvalidConfigError if a recognized option has the wrong shape."""
    try:
        AppConfigSchema.model_validate(config)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidConfigError(f"Invalid app config: {errors}") from exc
