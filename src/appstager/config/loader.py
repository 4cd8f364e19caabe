"""Load an AppConfig from a JSON configuration file."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from appstager.config.models import AppConfig
from appstager.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _resolve(base: Path, value: str) -> str:
    """Resolve a config-relative path; absolute paths are kept as-is."""
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return str(path)


def _read_text(path: str, what: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {what} file {path}: {exc}") from exc


def load_config(path: Path | str) -> AppConfig:
    """Read and validate a configuration file.

    Relative icon paths, template file paths and the output directory are
    resolved against the directory holding the configuration file. Desktop
    and metainfo template files are read into ``desktop_entry`` and
    ``meta_info``.

    Raises ConfigurationError if the file is missing or invalid.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc

    try:
        config = AppConfig.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration {path}:\n{exc}") from exc

    base = path.resolve().parent
    update: dict = {"icons": [_resolve(base, icon) for icon in config.icons]}

    # Left untouched when blank so the layout resolver reports it
    if config.output_directory.strip():
        update["output_directory"] = _resolve(base, config.output_directory)

    if config.desktop_file:
        update["desktop_file"] = _resolve(base, config.desktop_file)
        update["desktop_entry"] = _read_text(update["desktop_file"], "desktop")
    if config.metainfo_file:
        update["metainfo_file"] = _resolve(base, config.metainfo_file)
        update["meta_info"] = _read_text(update["metainfo_file"], "metainfo")

    logger.debug("Loaded configuration %s for %s", path, config.app_id)
    return config.model_copy(update=update)
