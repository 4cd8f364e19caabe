"""Starter files for a new project: configuration, desktop entry, metainfo, changelog."""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from pathlib import Path

from appstager.config.models import AppConfig

logger = logging.getLogger(__name__)


class NewKind(str, Enum):
    CONF = "conf"
    CONF_MIN = "confmin"
    DESKTOP = "desktop"
    META = "meta"
    CHANGELOG = "changelog"
    ALL = "all"

    @property
    def file_ext(self) -> str:
        return _FILE_EXT.get(self, "")


_FILE_EXT = {
    NewKind.CONF: ".appstager.json",
    NewKind.CONF_MIN: ".appstager.json",
    NewKind.DESKTOP: ".desktop",
    NewKind.META: ".metainfo.xml",
    NewKind.CHANGELOG: ".changelog.txt",
}

# Fields a configuration file must always carry
_REQUIRED_FIELDS = {"app_base_name", "app_friendly_name", "app_id", "app_version_release"}

DESKTOP_TEMPLATE = """[Desktop Entry]
Type=Application
Name=${APP_FRIENDLY_NAME}
Icon=${APP_ID}
Comment=${APP_SUMMARY}
Exec=${DESKTOP_EXEC}
TryExec=${DESKTOP_EXEC}
NoDisplay=false
X-AppImage-Integrate=true
Terminal=false
Categories=Utility
MimeType=
Keywords=
"""

METAINFO_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<component type="desktop-application">
  <id>${APP_ID}</id>
  <metadata_license>MIT</metadata_license>
  <project_license>${APP_LICENSE}</project_license>
  <content_rating type="oars-1.1" />

  <name>${APP_FRIENDLY_NAME}</name>
  <summary>${APP_SUMMARY}</summary>

  <description>
    <p>${APP_SUMMARY}</p>
  </description>

  <launchable type="desktop-id">${APP_ID}.desktop</launchable>
  <url type="homepage">${APP_URL}</url>
  <developer_name>${APP_VENDOR}</developer_name>

  <provides>
    <binary>${APP_BASE_NAME}</binary>
  </provides>

  <releases>
    <release version="${APP_VERSION}" date="${ISO_DATE}" />
  </releases>
</component>
"""

CHANGELOG_TEMPLATE = """+ 1.0.0;{date}
- Initial release
"""


def example_config(base_name: str = "app") -> AppConfig:
    """A complete configuration with placeholder values."""
    return AppConfig(
        app_base_name=base_name,
        app_friendly_name=base_name.title(),
        app_id=f"net.example.{base_name}",
        app_version_release="1.0.0[1]",
        app_short_summary="A short one-line description",
        app_license_id="MIT",
        app_vendor="Example Vendor",
        app_url="https://example.net",
        desktop_file=f"{base_name}{NewKind.DESKTOP.file_ext}",
        metainfo_file=f"{base_name}{NewKind.META.file_ext}",
        icons=[],
    )


def render(kind: NewKind, base_name: str = "app") -> str:
    """Text of a single starter file."""
    if kind is NewKind.CONF:
        return example_config(base_name).model_dump_json(
            indent=2, exclude={"desktop_entry", "meta_info"}
        ) + "\n"
    if kind is NewKind.CONF_MIN:
        return example_config(base_name).model_dump_json(
            indent=2, include=_REQUIRED_FIELDS
        ) + "\n"
    if kind is NewKind.DESKTOP:
        return DESKTOP_TEMPLATE
    if kind is NewKind.META:
        return METAINFO_TEMPLATE
    if kind is NewKind.CHANGELOG:
        return CHANGELOG_TEMPLATE.format(date=date.today().isoformat())
    raise ValueError(f"Cannot render {kind.value}")


def create_new_files(
    kind: NewKind,
    directory: Path | str,
    base_name: str = "app",
    *,
    overwrite: bool = False,
) -> list[Path]:
    """Write starter files into directory and return their paths.

    ``NewKind.ALL`` writes the full configuration, desktop, metainfo and
    changelog files. Raises FileExistsError rather than replacing a file
    unless ``overwrite`` is set.
    """
    directory = Path(directory)
    if kind is NewKind.ALL:
        kinds = [NewKind.CONF, NewKind.DESKTOP, NewKind.META, NewKind.CHANGELOG]
    else:
        kinds = [kind]

    targets = [(k, directory / f"{base_name}{k.file_ext}") for k in kinds]
    if not overwrite:
        for _, path in targets:
            if path.exists():
                raise FileExistsError(f"File already exists: {path}")

    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for k, path in targets:
        path.write_text(render(k, base_name), encoding="utf-8")
        logger.info("Created %s", path)
        written.append(path)
    return written
