"""MindMark settings: defaults, then TOML, then ``MINDMARK_*`` env vars, then CLI flags."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".mindmark.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "mindmark" / "config.toml"

DEFAULT_STORE_PATH = Path.home() / ".local" / "share" / "mindmark" / "snapshots.json"


class StoreSectionConfig(BaseModel):
    """[store] section."""

    path: str = str(DEFAULT_STORE_PATH)
    max_snapshots: int = Field(default=100, ge=1)
    dedup_window_seconds: int = Field(default=300, ge=0)
    excerpt_chars: int = Field(default=1500, ge=1)


class SummarySectionConfig(BaseModel):
    """[summary] section."""

    max_input_chars: int = Field(default=15000, ge=1)
    short_word_threshold: int = 400


class AISectionConfig(BaseModel):
    """[ai] section."""

    enabled: bool = True
    model: str | None = None
    timeout: int = 60


class NetworkSectionConfig(BaseModel):
    """[network] section."""

    probe_url: str = "https://www.gstatic.com/generate_204"
    probe_timeout: float = 2.0


class ExtractSectionConfig(BaseModel):
    """[extract] section."""

    timeout: int = 15
    max_chars: int = 6000


class MindmarkConfig(BaseModel):
    """All settings for capturing, understanding and storing snapshots."""

    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)
    summary: SummarySectionConfig = Field(default_factory=SummarySectionConfig)
    ai: AISectionConfig = Field(default_factory=AISectionConfig)
    network: NetworkSectionConfig = Field(default_factory=NetworkSectionConfig)
    extract: ExtractSectionConfig = Field(default_factory=ExtractSectionConfig)

    @property
    def store_path(self) -> Path:
        return Path(self.store.path).expanduser()


# (section, field) targets for env vars and CLI flags
_ENV_FIELDS: dict[str, tuple[str, str]] = {
    "MINDMARK_STORE_PATH": ("store", "path"),
    "MINDMARK_MODEL": ("ai", "model"),
    "MINDMARK_PROBE_URL": ("network", "probe_url"),
}
_CLI_FIELDS: dict[str, tuple[str, str]] = {
    "store_path": ("store", "path"),
    "model": ("ai", "model"),
    "probe_timeout": ("network", "probe_timeout"),
}
_TRUTHY = frozenset({"true", "1", "yes"})


def _find_config_file() -> Path | None:
    for search_dir in CONFIG_SEARCH_PATHS:
        candidate = search_dir / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return GLOBAL_CONFIG_PATH if GLOBAL_CONFIG_PATH.exists() else None


def load_config(path: str | Path | None = None) -> MindmarkConfig:
    """Build the configuration for one run.

    An explicit ``path`` is the only file consulted. Without one, the
    first of ``./.mindmark.toml`` and ``~/.config/mindmark/config.toml``
    that exists is used. ``MINDMARK_*`` environment variables are applied
    on top either way.
    """
    toml_path = Path(path) if path is not None else _find_config_file()
    data: dict[str, Any] = {}
    if toml_path is not None:
        if toml_path.exists():
            data = _load_toml(toml_path)
            logger.info("Loaded config from %s", toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)

    return _apply_env_vars(MindmarkConfig.model_validate(data))


def merge_cli_overrides(config: MindmarkConfig, **cli_kwargs: Any) -> MindmarkConfig:
    """Apply CLI flags that were actually given (``None`` means not given).

    ``offline=True`` turns the AI path off for the run.
    """
    data = config.model_dump()
    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in _CLI_FIELDS:
            section, field = _CLI_FIELDS[key]
            data[section][field] = str(value) if isinstance(value, Path) else value
        elif key == "offline" and value:
            data["ai"]["enabled"] = False
    return MindmarkConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: MindmarkConfig) -> MindmarkConfig:
    data = config.model_dump()
    for env_var, (section, field) in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    enabled = os.environ.get("MINDMARK_AI_ENABLED")
    if enabled is not None:
        data["ai"]["enabled"] = enabled.strip().lower() in _TRUTHY
    return MindmarkConfig.model_validate(data)
