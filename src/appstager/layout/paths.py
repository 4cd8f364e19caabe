"""Output naming and staging-tree layout for a package kind.

All functions here are pure: they compute paths but never touch the
filesystem.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from appstager.config.models import AppConfig, BuildArguments, PackKind
from appstager.errors import ConfigurationError

DEFAULT_RELEASE = "1"

# Runtime CPU suffix -> Linux architecture name
_LINUX_ARCH = {
    "x64": "x86_64",
    "arm64": "aarch64",
    "x86": "i686",
    "arm": "armhf",
}


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

def split_version(text: str | None) -> tuple[str, str]:
    """Split 'X.Y.Z[release]' into (version, release).

    Release defaults to "1". Malformed brackets ('[' first, ']' before '[',
    missing ']' or an empty '[]' span) leave the whole string as the
    version.
    """
    release = DEFAULT_RELEASE
    if not text:
        return "", release

    start = text.find("[")
    length = text.find("]") - start - 1

    if start > 0 and length > 0:
        inner = text[start + 1 : start + 1 + length].strip()
        text = text[:start].strip()
        if inner:
            release = inner

    return text, release


# ---------------------------------------------------------------------------
# Architecture
# ---------------------------------------------------------------------------

def get_build_arch(arguments: BuildArguments, kind: PackKind) -> str:
    """Architecture name used in file names and manifests.

    An explicit ``arch`` argument wins. Otherwise the CPU suffix of the
    runtime id is used ('linux-x64' -> 'x86_64'); Windows kinds keep the
    raw suffix ('win-x64' -> 'x64').
    """
    if arguments.arch:
        return arguments.arch

    cpu = arguments.runtime.rsplit("-", 1)[-1].lower()
    if kind.is_windows:
        return cpu
    return _LINUX_ARCH.get(cpu, cpu)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _checked_path(value: str | None, what: str) -> str:
    if value is None or not value.strip() or "\0" in value:
        raise ConfigurationError(f"Invalid {what}: {value!r}")
    return value


def get_output_extension(kind: PackKind) -> str:
    if kind is PackKind.APPIMAGE:
        return ".AppImage"
    if kind is PackKind.WINSETUP:
        return ".exe"
    return "." + kind.value.lower()


def get_output_directory(config: AppConfig, arguments: BuildArguments) -> Path:
    """Directory receiving the final artifact.

    The directory part of an explicit output path is used verbatim when
    absolute, otherwise it is taken relative to the configured output
    directory.
    """
    base = Path(_checked_path(config.output_directory, "output directory"))

    if arguments.output is None:
        return base

    output = _checked_path(arguments.output, "output path")
    head = Path(output) if output.endswith(("/", "\\")) else Path(output).parent
    if head.is_absolute():
        return head
    return base / head


def get_output_name(
    config: AppConfig,
    arguments: BuildArguments,
    kind: PackKind,
    version: str,
    release: str,
    arch: str,
) -> str:
    """Artifact file name: '{base}[-{version}-{release}].{arch}.{ext}'.

    An explicit file name in the output argument is used verbatim.
    """
    if arguments.output is not None:
        output = _checked_path(arguments.output, "output path")
        # A trailing separator means "directory only"
        if not output.endswith(("/", "\\")):
            return Path(output).name

    name = config.app_base_name
    if config.output_version and version:
        name += f"-{version}-{release}"

    return f"{name}.{arch}{get_output_extension(kind)}"


# ---------------------------------------------------------------------------
# Staging tree
# ---------------------------------------------------------------------------

class StagingLayout(BaseModel):
    """FHS sub-paths under a build root. All None for Windows kinds."""

    usr_bin: Path | None = None
    usr_share: Path | None = None
    share_meta: Path | None = None
    share_applications: Path | None = None
    share_icons: Path | None = None

    model_config = {"frozen": True}

    @classmethod
    def create(cls, build_root: Path, is_windows: bool) -> StagingLayout:
        if is_windows:
            return cls()

        usr = build_root / "usr"
        share = usr / "share"
        return cls(
            usr_bin=usr / "bin",
            usr_share=share,
            share_meta=share / "metainfo",
            share_applications=share / "applications",
            share_icons=share / "icons",
        )


def get_pack_root(temp_root: Path, app_id: str, arch: str, build: str, kind: PackKind) -> Path:
    """Unique per-run root keyed by '{app_id}-{arch}-{build}-{kind}'."""
    return Path(temp_root) / f"{app_id}-{arch}-{build}-{kind.value}"


def get_desktop_path(layout: StagingLayout, app_id: str, content: str | None) -> Path | None:
    if content and layout.share_applications is not None:
        return layout.share_applications / f"{app_id}.desktop"
    return None


def get_metainfo_path(layout: StagingLayout, app_id: str, content: str | None) -> Path | None:
    if content and layout.share_meta is not None:
        return layout.share_meta / f"{app_id}.metainfo.xml"
    return None
