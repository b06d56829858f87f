from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .utils import read_json

DEFAULT_URI_PREFIX = "http://example.org/jphyloref"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PHYLOREFCHECK_")

    uri_prefix: str = DEFAULT_URI_PREFIX
    strip_uri_prefix: bool = True
    preferred_langs: List[str] = Field(default_factory=lambda: ["en"])
    workers: int = Field(default=1, ge=1)
    log_level: str = "WARNING"


def load_settings(config: Optional[Path]) -> Settings:
    """Build settings from the environment, overlaid with a JSON config file."""
    data = {} if config is None else read_json(config)
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file '{config}' must hold a JSON object")
    try:
        return Settings(**data)
    except ValidationError as exc:
        source = "the environment" if config is None else f"'{config}'"
        raise ConfigurationError(f"invalid settings in {source}: {exc}") from exc
