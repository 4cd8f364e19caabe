"""Immutable per-run build context."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel

from appstager.config.models import AppConfig, BuildArguments, PackKind
from appstager.layout.icons import resolve_icons
from appstager.layout.paths import (
    StagingLayout,
    get_build_arch,
    get_desktop_path,
    get_metainfo_path,
    get_output_directory,
    get_output_name,
    get_pack_root,
    split_version,
)

logger = logging.getLogger(__name__)


class BuildContext(BaseModel):
    """Everything one package build needs to know, resolved up front.

    Created once per invocation by ``BuildContext.create`` and never
    mutated. Paths are computed here but nothing is written to disk.
    """

    config: AppConfig
    arguments: BuildArguments

    kind: PackKind
    is_windows: bool

    app_id: str
    app_base_name: str
    app_exec_name: str
    app_version: str
    pack_release: str

    runtime: str
    build_target: str
    build_arch: str
    build_date: datetime

    pack_root: Path
    build_root: Path
    layout: StagingLayout

    desktop_path: Path | None = None
    metainfo_path: Path | None = None

    output_directory: Path
    output_name: str

    prime_icon_source: str | None = None
    prime_icon_path: Path | None = None
    themed_icons: tuple[tuple[str, Path], ...] = ()

    model_config = {"frozen": True}

    @classmethod
    def create(
        cls,
        config: AppConfig,
        arguments: BuildArguments,
        *,
        temp_root: Path | str,
        build_root_name: str = "AppDir",
        default_icons: list[str] | None = None,
        build_date: datetime | None = None,
    ) -> BuildContext:
        """Resolve version, output, staging paths and icons for one build.

        Raises ConfigurationError for an unusable output path and
        IconFormatError for a PNG icon without a standard size.
        """
        kind = arguments.kind
        version, release = split_version(config.app_version_release)
        arch = get_build_arch(arguments, kind)

        # Absolute paths; commands run with the pack root as cwd
        temp_root = Path(temp_root).resolve()
        pack_root = get_pack_root(temp_root, config.app_id, arch, arguments.build, kind)
        build_root = pack_root / build_root_name
        layout = StagingLayout.create(build_root, kind.is_windows)

        exec_name = config.app_base_name
        if arguments.is_windows_runtime():
            exec_name += ".exe"

        icons = resolve_icons(
            kind,
            list(config.icons),
            list(default_icons or []),
            config.app_id,
            pack_root,
            layout.share_icons,
        )

        context = cls(
            config=config,
            arguments=arguments,
            kind=kind,
            is_windows=kind.is_windows,
            app_id=config.app_id,
            app_base_name=config.app_base_name,
            app_exec_name=exec_name,
            app_version=version,
            pack_release=release,
            runtime=arguments.runtime,
            build_target=arguments.build,
            build_arch=arch,
            build_date=build_date or datetime.now(),
            pack_root=pack_root,
            build_root=build_root,
            layout=layout,
            desktop_path=get_desktop_path(layout, config.app_id, config.desktop_entry),
            metainfo_path=get_metainfo_path(layout, config.app_id, config.meta_info),
            output_directory=get_output_directory(config, arguments).resolve(),
            output_name=get_output_name(config, arguments, kind, version, release, arch),
            prime_icon_source=icons.prime_source,
            prime_icon_path=icons.prime_path,
            themed_icons=tuple(icons.icon_map.items()),
        )
        logger.debug("Build context for %s: pack root %s", kind.value, pack_root)
        return context

    # Shortcuts to the staging layout

    @property
    def usr_bin(self) -> Path | None:
        return self.layout.usr_bin

    @property
    def usr_share(self) -> Path | None:
        return self.layout.usr_share

    @property
    def share_meta(self) -> Path | None:
        return self.layout.share_meta

    @property
    def share_applications(self) -> Path | None:
        return self.layout.share_applications

    @property
    def share_icons(self) -> Path | None:
        return self.layout.share_icons

    @property
    def icon_map(self) -> MappingProxyType[str, Path]:
        """Read-only map of icon source to staged theme path."""
        return MappingProxyType(dict(self.themed_icons))

    @property
    def output_path(self) -> Path:
        return self.output_directory / self.output_name
