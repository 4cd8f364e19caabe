"""Tests for per-kind layout, manifests and build commands."""

import pytest

from appstager.builder.kinds import KIND_PROFILES, get_kind_profile
from appstager.config.models import PackKind
from appstager.errors import ConfigurationError, MacroResolutionError


def _runtime(kind):
    return "win-x64" if kind.is_windows else "linux-x64"


class TestKindProfiles:
    def test_every_kind_has_a_profile(self):
        assert set(KIND_PROFILES) == set(PackKind)

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            get_kind_profile("Snap")

    @pytest.mark.parametrize("kind", list(PackKind))
    def test_manifest_and_commands_fully_expand(self, demo_config, icon_dir, make_builder, kind):
        config = demo_config.model_copy(
            update={"icons": [str(p) for p in sorted(icon_dir.iterdir())]}
        )
        builder = make_builder(config, kind=kind, runtime=_runtime(kind))

        manifest = builder.manifest
        if manifest is not None:
            assert "${" not in builder.expander.expand(manifest.content)
        assert builder.package_commands
        for command in builder.package_commands:
            assert "${" not in builder.expander.expand(command)


class TestLayoutFields:
    def test_appimage(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.APPIMAGE)
        assert builder.desktop_exec == "usr/bin/demo"
        assert builder.publish_bin == builder.context.usr_bin

    @pytest.mark.parametrize("kind", [PackKind.DEB, PackKind.RPM])
    def test_opt_install(self, demo_config, make_builder, kind):
        builder = make_builder(demo_config, kind=kind)
        assert builder.desktop_exec == "/opt/net.example.demo/demo"
        assert builder.publish_bin == builder.context.build_root / "opt" / "net.example.demo"

    def test_flatpak(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.FLATPAK)
        assert builder.desktop_exec == "demo"
        assert builder.publish_bin == builder.context.usr_bin

    def test_winsetup_is_flat(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.WINSETUP, runtime="win-x64")
        assert builder.desktop_exec == "demo.exe"
        assert builder.publish_bin == builder.context.build_root


class TestManifests:
    def test_deb_control(self, demo_config, make_builder):
        config = demo_config.model_copy(update={"deb_depends": ["libc6", "libssl3"]})
        builder = make_builder(config, kind=PackKind.DEB)
        manifest = builder.manifest
        assert manifest.path == builder.context.build_root / "DEBIAN" / "control"

        content = builder.expander.expand(manifest.content)
        assert "Package: net.example.demo" in content
        assert "Version: 1.0-2" in content
        assert "Architecture: amd64" in content
        assert "Maintainer: Example Ltd" in content
        assert "Depends: libc6, libssl3" in content

    def test_rpm_spec_lists_staged_files(self, demo_config, icon_dir, make_builder):
        config = demo_config.model_copy(update={"icons": [str(icon_dir / "icon.svg")]})
        builder = make_builder(config, kind=PackKind.RPM)
        content = builder.expander.expand(builder.manifest.content)

        assert "Release: 2" in content
        assert "BuildArch: x86_64" in content
        assert "Vendor: Example Ltd" in content
        assert "/opt/net.example.demo" in content
        assert "/usr/share/applications/net.example.demo.desktop" in content
        assert "/usr/share/metainfo/net.example.demo.metainfo.xml" in content
        assert "/usr/share/icons/hicolor/scalable/apps/net.example.demo.svg" in content

    def test_rpm_spec_omits_unset_vendor(self, demo_config, make_builder):
        config = demo_config.model_copy(update={"app_vendor": "", "app_url": ""})
        builder = make_builder(config, kind=PackKind.RPM)
        assert "Vendor:" not in builder.manifest.content
        assert "URL:" not in builder.manifest.content

    def test_appimage_apprun(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.APPIMAGE)
        manifest = builder.manifest
        assert manifest.path == builder.context.build_root / "AppRun"
        assert manifest.content.startswith("#!/bin/sh")
        assert "usr/bin/demo" in manifest.content

    def test_flatpak_finish_args(self, demo_config, make_builder):
        config = demo_config.model_copy(update={"flatpak_finish_args": ["--share=network"]})
        builder = make_builder(config, kind=PackKind.FLATPAK)
        content = builder.expander.expand(builder.manifest.content)
        assert "app-id: net.example.demo" in content
        assert "  - --share=network" in content

    def test_winsetup_script(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.WINSETUP, runtime="win-x64")
        content = builder.expander.expand(builder.manifest.content)
        assert "OutputBaseFilename=demo-1.0-2.x64" in content
        assert f'Source: "{builder.context.build_root}\\*"' in content
        assert "ArchitecturesAllowed=x64" in content

    def test_zip_has_no_manifest(self, demo_config, make_builder):
        assert make_builder(demo_config, kind=PackKind.ZIP).manifest is None


class TestCommands:
    def test_deb(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.DEB)
        ctx = builder.context
        commands = [builder.expander.expand(c) for c in builder.package_commands]
        assert commands == [
            f'dpkg-deb --root-owner-group --build "{ctx.build_root}" "{ctx.output_path}"'
        ]

    def test_appimage_copies_desktop_and_icon_to_root(self, demo_config, icon_dir, make_builder):
        config = demo_config.model_copy(update={"icons": [str(icon_dir / "icon.svg")]})
        builder = make_builder(config, kind=PackKind.APPIMAGE)
        commands = builder.package_commands
        assert commands[0].startswith("chmod a+x")
        assert any("net.example.demo.desktop" in c for c in commands[1:-1])
        assert any("net.example.demo.svg" in c for c in commands[1:-1])
        assert commands[-1].startswith("ARCH=x86_64 appimagetool")

    def test_rpm_moves_output(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.RPM)
        commands = [builder.expander.expand(c) for c in builder.package_commands]
        assert commands[0].startswith("rpmbuild -bb")
        assert f'--buildroot="{builder.context.build_root}"' in commands[0]
        assert commands[1].endswith(f'"{builder.context.output_path}"')


class TestConfigDataInManifests:
    def test_rpm_and_deb_requirements_keep_variables(self, demo_config, make_builder):
        config = demo_config.model_copy(
            update={"rpm_requires": ["libfoo >= ${LIBFOO_MIN}"], "deb_depends": ["libfoo (>= ${v})"]}
        )
        rpm = make_builder(config, kind=PackKind.RPM)
        assert "Requires: libfoo >= ${LIBFOO_MIN}" in rpm.manifest.render(rpm.expander)

        deb = make_builder(config, kind=PackKind.DEB)
        assert "Depends: libfoo (>= ${v})" in deb.manifest.render(deb.expander)

    def test_template_lines_stay_strict(self, demo_config, make_builder):
        builder = make_builder(demo_config, kind=PackKind.DEB)
        manifest = builder.manifest.model_copy(
            update={"sections": builder.manifest.sections + [("X: ${NOPE}\n", True)]}
        )
        with pytest.raises(MacroResolutionError):
            manifest.render(builder.expander)


class TestWinSetupIcon:
    def test_ico_sets_setup_icon(self, demo_config, icon_dir, make_builder):
        config = demo_config.model_copy(update={"icons": [str(icon_dir / "icon.ico")]})
        builder = make_builder(config, kind=PackKind.WINSETUP, runtime="win-x64")
        assert "SetupIconFile=" in builder.manifest.content

    def test_png_fallback_has_no_setup_icon(self, demo_config, icon_dir, make_builder):
        config = demo_config.model_copy(update={"icons": [str(icon_dir / "icon.64x64.png")]})
        builder = make_builder(config, kind=PackKind.WINSETUP, runtime="win-x64")
        assert builder.context.prime_icon_path.suffix == ".png"
        assert "SetupIconFile=" not in builder.manifest.content
