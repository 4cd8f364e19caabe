"""Package builder: stages a published application and drives the native packager.

Pipeline (``build_package``), always in this order:
1. Write the expanded desktop entry
2. Write the expanded AppStream metainfo
3. Write the expanded kind manifest
4. Copy the prime icon
5. Copy the themed icons
6. Run the kind's build commands, each expanded just before it runs

The first failure stops the run. Nothing is rolled back; the pack root is
left on disk for inspection.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path

from appstager.builder.context import BuildContext
from appstager.builder.fileops import FileOps
from appstager.builder.kinds import KindLayout, Manifest, get_kind_profile
from appstager.config.models import AppConfig, BuildArguments
from appstager.errors import BuildStateError
from appstager.layout.icons import bundled_icons, get_standard_png_size, probe_png_size
from appstager.macros.expander import MacroExpander
from appstager.macros.macro_id import MacroId

logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    CONSTRUCTED = "constructed"
    STAGED = "staged"
    BUILT = "built"
    FAILED = "failed"


def build_macro_table(ctx: BuildContext, layout: KindLayout) -> dict[MacroId, str]:
    """Macro values for one build."""
    conf = ctx.config
    return {
        MacroId.APP_BASE_NAME: ctx.app_base_name,
        MacroId.APP_FRIENDLY_NAME: conf.app_friendly_name,
        MacroId.APP_ID: ctx.app_id,
        MacroId.APP_SUMMARY: conf.app_short_summary,
        MacroId.APP_LICENSE: conf.app_license_id,
        MacroId.APP_VENDOR: conf.app_vendor,
        MacroId.APP_URL: conf.app_url,
        MacroId.APP_VERSION: ctx.app_version,
        MacroId.PACK_RELEASE: ctx.pack_release,
        MacroId.PACK_KIND: ctx.kind.value,
        MacroId.DOTNET_RUNTIME: ctx.runtime,
        MacroId.BUILD_ARCH: ctx.build_arch,
        MacroId.BUILD_TARGET: ctx.build_target,
        MacroId.OUTPUT_PATH: str(ctx.output_path),
        MacroId.ISO_DATE: ctx.build_date.strftime("%Y-%m-%d"),
        MacroId.BUILD_ROOT: str(ctx.build_root),
        MacroId.BUILD_SHARE: str(ctx.usr_share) if ctx.usr_share is not None else "",
        MacroId.PUBLISH_BIN: str(layout.publish_bin),
        MacroId.DESKTOP_EXEC: layout.desktop_exec,
    }


class PackageBuilder:
    """Builds one package kind for one architecture in one pack root.

    Construction resolves paths and icons but writes nothing. ``stage``
    prepares the build root and ``build_package`` runs the pipeline.
    """

    def __init__(
        self,
        config: AppConfig,
        arguments: BuildArguments,
        *,
        temp_root: Path | str,
        default_icons: list[str] | None = None,
        operations: FileOps | None = None,
        build_date: datetime | None = None,
    ) -> None:
        self.profile = get_kind_profile(arguments.kind)
        self.context = BuildContext.create(
            config,
            arguments,
            temp_root=temp_root,
            build_root_name=self.profile.build_root_name,
            default_icons=bundled_icons() if default_icons is None else default_icons,
            build_date=build_date,
        )
        self.layout = self.profile.layout_fields(self.context)
        self.expander = MacroExpander(build_macro_table(self.context, self.layout))
        self.operations = operations if operations is not None else FileOps(self.context.pack_root)
        self.state = BuildState.CONSTRUCTED

    def __repr__(self) -> str:
        return f"PackageBuilder(kind={self.context.kind.value}, pack_root={self.context.pack_root})"

    # ------------------------------------------------------------------
    # Kind fields
    # ------------------------------------------------------------------

    @property
    def desktop_exec(self) -> str:
        return self.layout.desktop_exec

    @property
    def publish_bin(self) -> Path:
        return self.layout.publish_bin

    @property
    def manifest(self) -> Manifest | None:
        return self.profile.manifest(self.context)

    @property
    def package_commands(self) -> list[str]:
        """Build commands, still containing their macros."""
        return self.profile.build_commands(self.context)

    @property
    def macros(self) -> dict[str, str]:
        return self.expander.values

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _require(self, state: BuildState, action: str) -> None:
        if self.state is not state:
            raise BuildStateError(
                f"Cannot {action} in state '{self.state.value}' (expected '{state.value}')"
            )

    def clean(self) -> None:
        """Remove a pack root left over from an earlier run."""
        self._require(BuildState.CONSTRUCTED, "clean")
        self.operations.remove_directory(self.context.pack_root)

    def stage(self, publish_source: Path | str | None = None) -> None:
        """Create the build root and stage the published application.

        ``publish_source`` is copied into ``publish_bin``. A configured
        post-publish command runs afterwards with known macros expanded;
        other ${...} references are left for the shell.
        """
        self._require(BuildState.CONSTRUCTED, "stage")
        try:
            self.operations.create_directory(self.context.build_root)
            self.operations.create_directory(self.publish_bin)

            if publish_source is not None:
                self.operations.copy_directory(publish_source, self.publish_bin)

            post = self.context.config.post_publish
            if post:
                command = self.expander.expand(post, strict=False, source="post_publish")
                self.operations.execute(command, cwd=self.context.build_root)
        except Exception:
            self.state = BuildState.FAILED
            raise

        self.state = BuildState.STAGED
        logger.info("Staged %s", self.context.build_root)

    def build_package(self) -> Path:
        """Run the pipeline and return the expected output path."""
        self._require(BuildState.STAGED, "build package")
        try:
            self._run_pipeline()
        except Exception:
            self.state = BuildState.FAILED
            logger.error("Build failed; staging left at %s", self.context.pack_root)
            raise

        self.state = BuildState.BUILT
        logger.info("Built %s", self.context.output_path)
        return self.context.output_path

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run_pipeline(self) -> None:
        ctx = self.context
        ops = self.operations
        expand = self.expander.expand

        # 1-3. Templates; a None path means the file does not apply
        if ctx.desktop_path is not None:
            desktop = expand(ctx.config.desktop_entry, source="desktop entry")
            ops.write_file(ctx.desktop_path, desktop)
        else:
            logger.debug("No desktop entry for %s", ctx.kind.value)

        if ctx.metainfo_path is not None:
            metainfo = expand(ctx.config.meta_info, source="metainfo")
            ops.write_file(ctx.metainfo_path, metainfo)
        else:
            logger.debug("No metainfo for %s", ctx.kind.value)

        manifest = self.manifest
        if manifest is not None:
            content = manifest.render(self.expander, source=f"{ctx.kind.value} manifest")
            ops.write_file(manifest.path, content)

        # 4. Prime icon
        ops.copy_file(ctx.prime_icon_source, ctx.prime_icon_path, replace=True)

        # 5. Themed icons
        for source, dest in ctx.icon_map.items():
            ops.copy_file(source, dest, replace=True)
            self._check_icon_size(source)

        # 6. Commands
        ops.create_directory(ctx.output_directory)
        for index, command in enumerate(self.package_commands, start=1):
            command = expand(command, source=f"package command {index}")
            ops.execute(command, cwd=ctx.pack_root)

    def _check_icon_size(self, source: str) -> None:
        declared = get_standard_png_size(source)
        if declared == 0:
            return

        actual = probe_png_size(source)
        if actual is not None and actual != (declared, declared):
            logger.warning(
                "Icon %s is %dx%d but its name declares %dx%d",
                source, actual[0], actual[1], declared, declared,
            )
