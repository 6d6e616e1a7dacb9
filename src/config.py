"""Unified configuration loaded from .qulome.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".qulome.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "qulome",
]

# localStorage budget in most browsers
DEFAULT_MAX_BYTES = 5 * 1024 * 1024


class StorageKeys(BaseModel):
    """Key names for every collection and pointer in the store."""

    drafts: str = "drafts"
    current_draft: str = "current_draft_id"
    themes: str = "themes"
    active_theme: str = "active_theme_id"
    icons: str = "icons"
    published: str = "published"


class StorageSectionConfig(BaseModel):
    """[storage] section."""

    data_dir: str = "./.qulome"
    prefix: str = "qulome_"
    max_bytes: int | None = DEFAULT_MAX_BYTES
    keys: StorageKeys = Field(default_factory=StorageKeys)

    def key(self, name: str) -> str:
        """Return the fully prefixed store key for a logical key name."""
        return f"{self.prefix}{getattr(self.keys, name)}"


class EditorSectionConfig(BaseModel):
    """[editor] section."""

    autosave_delay: float = 1.0
    empty_content: str = "<p><br></p>"


class LoggingSectionConfig(BaseModel):
    """[logging] section."""

    level: str = "WARNING"


class QulomeConfig(BaseModel):
    """Top-level configuration model for the studio core."""

    storage: StorageSectionConfig = Field(default_factory=StorageSectionConfig)
    editor: EditorSectionConfig = Field(default_factory=EditorSectionConfig)
    logging: LoggingSectionConfig = Field(default_factory=LoggingSectionConfig)

    @property
    def data_dir(self) -> Path:
        return Path(self.storage.data_dir).expanduser()


def load_config(path: str | Path | None = None) -> QulomeConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .qulome.toml in CWD
    3. ~/.config/qulome/.qulome.toml, then ~/.config/qulome/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged QulomeConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "qulome" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = QulomeConfig.model_validate(data) if data else QulomeConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: QulomeConfig, **cli_kwargs: object) -> QulomeConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values keyed by flattened name
            (e.g., ``data_dir``, ``autosave_delay``).

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_dir": ("storage", "data_dir"),
        "max_bytes": ("storage", "max_bytes"),
        "autosave_delay": ("editor", "autosave_delay"),
        "log_level": ("logging", "level"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return QulomeConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: QulomeConfig) -> QulomeConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "QULOME_DATA_DIR": ("storage", "data_dir"),
        "QULOME_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    delay_raw = os.environ.get("QULOME_AUTOSAVE_DELAY")
    if delay_raw is not None:
        try:
            data["editor"]["autosave_delay"] = float(delay_raw)
        except ValueError:
            logger.warning("Ignoring invalid QULOME_AUTOSAVE_DELAY=%r", delay_raw)

    max_bytes_raw = os.environ.get("QULOME_STORAGE_MAX_BYTES")
    if max_bytes_raw is not None:
        if max_bytes_raw.strip().lower() in ("", "none", "0"):
            data["storage"]["max_bytes"] = None
        else:
            try:
                data["storage"]["max_bytes"] = int(max_bytes_raw)
            except ValueError:
                logger.warning("Ignoring invalid QULOME_STORAGE_MAX_BYTES=%r", max_bytes_raw)

    return QulomeConfig.model_validate(data)
