"""Pydantic v2 models for the project configuration and build arguments."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Package kinds
# ---------------------------------------------------------------------------

class PackKind(str, Enum):
    """Target installer formats. The value is the kind name used in paths and macros."""

    APPIMAGE = "AppImage"
    FLATPAK = "Flatpak"
    RPM = "Rpm"
    DEB = "Deb"
    ZIP = "Zip"
    WINSETUP = "WinSetup"

    @property
    def is_windows(self) -> bool:
        """Windows kinds use a flat layout with no FHS tree."""
        return self is PackKind.WINSETUP

    @classmethod
    def parse(cls, text: str) -> PackKind:
        """Case-insensitive lookup by kind name (e.g. 'deb', 'appimage')."""
        lowered = text.strip().lower()
        for kind in cls:
            if kind.value.lower() == lowered:
                return kind
        names = ", ".join(k.value for k in cls)
        raise ValueError(f"Unknown package kind '{text}' (expected one of: {names})")


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    """Project configuration, normally loaded from an .appstager.json file."""

    # Application identity
    app_base_name: str = Field(min_length=1, description="Executable base name, e.g. 'helloworld'")
    app_friendly_name: str = Field(min_length=1, description="Human readable name")
    app_id: str = Field(
        pattern=r"^[A-Za-z0-9][A-Za-z0-9._-]*$",
        description="Reverse-DNS style id, e.g. 'net.example.helloworld'",
    )
    app_version_release: str = Field(
        min_length=1, description="Version with optional release, e.g. '1.2.3[1]'"
    )
    app_short_summary: str = ""
    app_license_id: str = ""
    app_vendor: str = ""
    app_url: str = ""

    # Desktop integration (inline text, or a file read by load_config)
    desktop_entry: str = ""
    desktop_file: str | None = None
    meta_info: str = ""
    metainfo_file: str | None = None
    icons: list[str] = Field(default_factory=list, description="Icon source paths")

    # Output
    output_directory: str = "Deploy/OUT"
    output_version: bool = Field(False, description="Append version and release to output name")

    # Publish
    post_publish: str | None = Field(
        None, description="Shell command run after the published tree is staged"
    )

    # Kind specific
    rpm_requires: list[str] = Field(default_factory=list)
    deb_depends: list[str] = Field(default_factory=list)
    flatpak_platform_runtime: str = "org.freedesktop.Platform"
    flatpak_platform_sdk: str = "org.freedesktop.Sdk"
    flatpak_platform_version: str = "23.08"
    flatpak_finish_args: list[str] = Field(
        default_factory=lambda: [
            "--socket=wayland",
            "--socket=x11",
            "--filesystem=host",
            "--share=network",
        ]
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Build arguments
# ---------------------------------------------------------------------------

class BuildArguments(BaseModel):
    """Per-invocation arguments, normally taken from the command line."""

    kind: PackKind
    runtime: str = Field("linux-x64", description="Runtime identifier, e.g. 'linux-arm64'")
    build: str = Field("Release", description="Build target / configuration name")
    arch: str | None = Field(None, description="Explicit architecture override")
    output: str | None = Field(None, description="Explicit output path or file name")

    model_config = {"frozen": True}

    def is_windows_runtime(self) -> bool:
        return self.runtime.lower().startswith("win")
