"""Macro identifiers usable as ${NAME} in manifest, desktop and metainfo templates.

The enum value is the name written in templates. Do not change names; user
templates in the wild reference them literally.
"""

from __future__ import annotations

from enum import Enum


class MacroId(str, Enum):
    APP_BASE_NAME = "APP_BASE_NAME"
    APP_FRIENDLY_NAME = "APP_FRIENDLY_NAME"
    APP_ID = "APP_ID"
    APP_SUMMARY = "APP_SUMMARY"
    APP_LICENSE = "APP_LICENSE"
    APP_VENDOR = "APP_VENDOR"
    APP_URL = "APP_URL"

    APP_VERSION = "APP_VERSION"
    PACK_RELEASE = "PACK_RELEASE"
    PACK_KIND = "PACK_KIND"
    DOTNET_RUNTIME = "DOTNET_RUNTIME"
    BUILD_ARCH = "BUILD_ARCH"
    BUILD_TARGET = "BUILD_TARGET"
    OUTPUT_PATH = "OUTPUT_PATH"
    ISO_DATE = "ISO_DATE"

    BUILD_ROOT = "BUILD_ROOT"
    BUILD_SHARE = "BUILD_SHARE"
    PUBLISH_BIN = "PUBLISH_BIN"
    DESKTOP_EXEC = "DESKTOP_EXEC"

    @property
    def var(self) -> str:
        """Template form, e.g. '${APP_ID}'."""
        return "${" + self.value + "}"


MACRO_NAMES = {m.value: m for m in MacroId}
