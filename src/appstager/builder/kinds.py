"""Per-kind layout, manifest and command profiles.

Each package kind is one profile object answering three questions for a
BuildContext: where the application is published and how the desktop
entry launches it (``layout_fields``), which manifest file to write
(``manifest``), and which commands build the artifact (``build_commands``).
Manifests and commands may contain ${NAME} macros; the builder expands
them. Manifest lines copied from configuration lists are expanded
leniently.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from appstager.builder.context import BuildContext
from appstager.config.models import PackKind
from appstager.errors import ConfigurationError
from appstager.macros.expander import MacroExpander
from appstager.macros.macro_id import MacroId

# Linux arch -> Debian arch
_DEB_ARCH = {
    "x86_64": "amd64",
    "aarch64": "arm64",
    "i686": "i386",
    "armhf": "armhf",
}

_BUILD_ROOT = MacroId.BUILD_ROOT.var
_OUTPUT_PATH = MacroId.OUTPUT_PATH.var


class KindLayout(BaseModel):
    desktop_exec: str
    publish_bin: Path


class Manifest(BaseModel):
    """A manifest file as (text, strict) sections.

    Template sections are expanded strictly. Sections copied from
    configuration data are expanded leniently so shell or flatpak
    ${VAR} references pass through.
    """

    path: Path
    sections: list[tuple[str, bool]] = Field(default_factory=list)

    @classmethod
    def from_text(cls, path: Path, content: str) -> Manifest:
        return cls(path=path, sections=[(content, True)])

    @property
    def content(self) -> str:
        """Unexpanded text."""
        return "".join(text for text, _ in self.sections)

    def render(self, expander: MacroExpander, source: str = "manifest") -> str:
        return "".join(
            expander.expand(text, strict=strict, source=source)
            for text, strict in self.sections
        )


class _ManifestLines:
    def __init__(self) -> None:
        self.sections: list[tuple[str, bool]] = []

    def add(self, *lines: str) -> None:
        self.sections.extend((line + "\n", True) for line in lines)

    def add_data(self, *lines: str) -> None:
        self.sections.extend((line + "\n", False) for line in lines)

    def manifest(self, path: Path) -> Manifest:
        return Manifest(path=path, sections=self.sections)


def _q(path: Path | str) -> str:
    return f'"{path}"'


def _rooted(ctx: BuildContext, path: Path) -> str:
    """Installed location of a staged path, e.g. '/usr/share/...'."""
    return "/" + path.relative_to(ctx.build_root).as_posix()


class KindProfile:
    """Capability interface shared by every package kind."""

    build_root_name = "AppDir"

    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        raise NotImplementedError

    def manifest(self, ctx: BuildContext) -> Manifest | None:
        return None

    def build_commands(self, ctx: BuildContext) -> list[str]:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# AppImage
# ---------------------------------------------------------------------------

_APPRUN = """#!/bin/sh
HERE="$(dirname "$(readlink -f "$0")")"
exec "$HERE/usr/bin/{exec_name}" "$@"
"""


class AppImageProfile(KindProfile):
    """AppDir with an AppRun launcher, packed by appimagetool."""

    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        return KindLayout(
            desktop_exec=f"usr/bin/{ctx.app_exec_name}",
            publish_bin=ctx.usr_bin,
        )

    def manifest(self, ctx: BuildContext) -> Manifest | None:
        return Manifest.from_text(
            ctx.build_root / "AppRun", _APPRUN.format(exec_name=ctx.app_exec_name)
        )

    def build_commands(self, ctx: BuildContext) -> list[str]:
        commands = [f"chmod a+x {_q(ctx.build_root / 'AppRun')}"]

        # appimagetool expects the desktop file and icon at the AppDir root
        if ctx.desktop_path is not None:
            root_desktop = ctx.build_root / ctx.desktop_path.name
            commands.append(f"cp {_q(ctx.desktop_path)} {_q(root_desktop)}")
        if ctx.prime_icon_path is not None:
            root_icon = ctx.build_root / ctx.prime_icon_path.name
            commands.append(f"cp {_q(ctx.prime_icon_path)} {_q(root_icon)}")

        commands.append(
            f"ARCH={ctx.build_arch} appimagetool {_q(_BUILD_ROOT)} {_q(_OUTPUT_PATH)}"
        )
        return commands


# ---------------------------------------------------------------------------
# Flatpak
# ---------------------------------------------------------------------------

class FlatpakProfile(KindProfile):
    """flatpak-builder manifest over the staged usr tree, exported as a bundle."""

    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        return KindLayout(desktop_exec=ctx.app_exec_name, publish_bin=ctx.usr_bin)

    def manifest(self, ctx: BuildContext) -> Manifest | None:
        conf = ctx.config
        text = _ManifestLines()
        text.add("app-id: ${APP_ID}")
        text.add_data(
            f"runtime: {conf.flatpak_platform_runtime}",
            f"runtime-version: '{conf.flatpak_platform_version}'",
            f"sdk: {conf.flatpak_platform_sdk}",
        )
        text.add(
            f"command: {ctx.app_exec_name}",
            "modules:",
            "  - name: ${APP_ID}",
            "    buildsystem: simple",
            "    sources:",
            "      - type: dir",
            f"        path: {self.build_root_name}/usr",
            "    build-commands:",
            "      - mkdir -p /app/bin /app/share",
            "      - cp -r bin/. /app/bin/",
            "      - cp -r share/. /app/share/",
        )
        if conf.flatpak_finish_args:
            text.add("finish-args:")
            text.add_data(*(f"  - {arg}" for arg in conf.flatpak_finish_args))

        return text.manifest(ctx.pack_root / f"{ctx.app_id}.yml")

    def build_commands(self, ctx: BuildContext) -> list[str]:
        manifest = ctx.pack_root / f"{ctx.app_id}.yml"
        repo = ctx.pack_root / "repo"
        state = ctx.pack_root / "build"
        arch = ctx.build_arch
        return [
            f"flatpak-builder --arch={arch} --force-clean --repo={_q(repo)} "
            f"{_q(state)} {_q(manifest)}",
            f"flatpak build-bundle --arch={arch} {_q(repo)} {_q(_OUTPUT_PATH)} "
            + MacroId.APP_ID.var,
        ]


# ---------------------------------------------------------------------------
# RPM
# ---------------------------------------------------------------------------

class RpmProfile(KindProfile):
    """rpmbuild against a prebuilt buildroot with the app under /opt."""

    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        return KindLayout(
            desktop_exec=f"/opt/{ctx.app_id}/{ctx.app_exec_name}",
            publish_bin=ctx.build_root / "opt" / ctx.app_id,
        )

    def manifest(self, ctx: BuildContext) -> Manifest | None:
        conf = ctx.config
        text = _ManifestLines()
        text.add(
            "Name: ${APP_BASE_NAME}",
            "Version: ${APP_VERSION}",
            "Release: ${PACK_RELEASE}",
            "BuildArch: ${BUILD_ARCH}",
            "Summary: ${APP_SUMMARY}",
            "License: ${APP_LICENSE}",
        )
        if conf.app_vendor:
            text.add("Vendor: ${APP_VENDOR}")
        if conf.app_url:
            text.add("URL: ${APP_URL}")
        text.add("AutoReqProv: no")
        text.add_data(*(f"Requires: {item}" for item in conf.rpm_requires))

        text.add("", "%define _build_id_links none", "", "%description", "${APP_SUMMARY}")
        text.add("", "%files", "/opt/${APP_ID}")

        if ctx.desktop_path is not None:
            text.add(_rooted(ctx, ctx.desktop_path))
        if ctx.metainfo_path is not None:
            text.add(_rooted(ctx, ctx.metainfo_path))
        for dest in ctx.icon_map.values():
            text.add(_rooted(ctx, dest))

        return text.manifest(ctx.pack_root / f"{ctx.app_id}.spec")

    def build_commands(self, ctx: BuildContext) -> list[str]:
        spec = ctx.pack_root / f"{ctx.app_id}.spec"
        rpms = ctx.pack_root / "RPMS"
        return [
            f"rpmbuild -bb {_q(spec)} --target {ctx.build_arch}"
            f' --define "_topdir {ctx.pack_root / "rpmbuild"}"'
            f" --buildroot={_q(_BUILD_ROOT)}"
            f' --define "_rpmdir {rpms}"'
            f' --define "_build_name_fmt {ctx.output_name}"',
            f"mv {_q(rpms / ctx.output_name)} {_q(_OUTPUT_PATH)}",
        ]


# ---------------------------------------------------------------------------
# DEB
# ---------------------------------------------------------------------------

class DebProfile(KindProfile):
    """dpkg-deb over the build root with a DEBIAN/control file."""

    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        return KindLayout(
            desktop_exec=f"/opt/{ctx.app_id}/{ctx.app_exec_name}",
            publish_bin=ctx.build_root / "opt" / ctx.app_id,
        )

    def manifest(self, ctx: BuildContext) -> Manifest | None:
        conf = ctx.config
        text = _ManifestLines()
        text.add(
            f"Package: {ctx.app_id.lower().replace('_', '-')}",
            "Version: ${APP_VERSION}-${PACK_RELEASE}",
            "Section: utils",
            "Priority: optional",
            f"Architecture: {_DEB_ARCH.get(ctx.build_arch, ctx.build_arch)}",
            "Maintainer: ${APP_VENDOR}",
        )
        if conf.app_url:
            text.add("Homepage: ${APP_URL}")
        if conf.deb_depends:
            text.add_data("Depends: " + ", ".join(conf.deb_depends))
        text.add("Description: ${APP_SUMMARY}")

        return text.manifest(ctx.build_root / "DEBIAN" / "control")

    def build_commands(self, ctx: BuildContext) -> list[str]:
        return [f"dpkg-deb --root-owner-group --build {_q(_BUILD_ROOT)} {_q(_OUTPUT_PATH)}"]


# ---------------------------------------------------------------------------
# Zip
# ---------------------------------------------------------------------------

class ZipProfile(KindProfile):
    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        return KindLayout(
            desktop_exec=f"usr/bin/{ctx.app_exec_name}",
            publish_bin=ctx.usr_bin,
        )

    def build_commands(self, ctx: BuildContext) -> list[str]:
        return [
            f"rm -f {_q(_OUTPUT_PATH)}",
            f"cd {_q(_BUILD_ROOT)} && zip -r -q {_q(_OUTPUT_PATH)} .",
        ]


# ---------------------------------------------------------------------------
# Windows setup
# ---------------------------------------------------------------------------

class WinSetupProfile(KindProfile):
    """Inno Setup script over a flat build root."""

    def layout_fields(self, ctx: BuildContext) -> KindLayout:
        return KindLayout(desktop_exec=ctx.app_exec_name, publish_bin=ctx.build_root)

    def manifest(self, ctx: BuildContext) -> Manifest | None:
        exe = ctx.app_exec_name
        base_name = ctx.output_name
        if base_name.lower().endswith(".exe"):
            base_name = base_name[: -len(".exe")]

        lines = [
            "[Setup]",
            "AppId=${APP_ID}",
            "AppName=${APP_FRIENDLY_NAME}",
            "AppVersion=${APP_VERSION}",
            "AppVerName=${APP_FRIENDLY_NAME} ${APP_VERSION}",
            "AppPublisher=${APP_VENDOR}",
            "AppPublisherURL=${APP_URL}",
            "DefaultDirName={autopf}\\${APP_FRIENDLY_NAME}",
            "DefaultGroupName=${APP_FRIENDLY_NAME}",
            f"OutputDir={ctx.output_directory}",
            f"OutputBaseFilename={base_name}",
            f"UninstallDisplayIcon={{app}}\\{exe}",
            "Compression=lzma2",
            "SolidCompression=yes",
            "WizardStyle=modern",
        ]
        # iscc accepts only .ico here
        if ctx.prime_icon_path is not None and ctx.prime_icon_path.suffix.lower() == ".ico":
            lines.append(f"SetupIconFile={ctx.prime_icon_path}")
        if ctx.build_arch in ("x64", "arm64"):
            lines.append(f"ArchitecturesAllowed={ctx.build_arch}")
            lines.append(f"ArchitecturesInstallIn64BitMode={ctx.build_arch}")

        lines += [
            "",
            "[Files]",
            'Source: "${PUBLISH_BIN}\\*"; DestDir: "{app}"; '
            "Flags: ignoreversion recursesubdirs createallsubdirs",
            "",
            "[Icons]",
            f'Name: "{{group}}\\${{APP_FRIENDLY_NAME}}"; Filename: "{{app}}\\{exe}"',
            "",
            "[Run]",
            f'Filename: "{{app}}\\{exe}"; Description: "Launch ${{APP_FRIENDLY_NAME}}"; '
            "Flags: postinstall nowait skipifsilent",
        ]

        return Manifest.from_text(ctx.pack_root / f"{ctx.app_id}.iss", "\n".join(lines) + "\n")

    def build_commands(self, ctx: BuildContext) -> list[str]:
        return [f"iscc /Q {_q(ctx.pack_root / f'{ctx.app_id}.iss')}"]


KIND_PROFILES: dict[PackKind, KindProfile] = {
    PackKind.APPIMAGE: AppImageProfile(),
    PackKind.FLATPAK: FlatpakProfile(),
    PackKind.RPM: RpmProfile(),
    PackKind.DEB: DebProfile(),
    PackKind.ZIP: ZipProfile(),
    PackKind.WINSETUP: WinSetupProfile(),
}


def get_kind_profile(kind: PackKind) -> KindProfile:
    """Return the profile for a package kind."""
    try:
        return KIND_PROFILES[kind]
    except KeyError:
        raise ConfigurationError(f"No builder for package kind {kind!r}") from None
