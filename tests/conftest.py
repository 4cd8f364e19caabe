"""Shared test fixtures for appstager."""

from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from appstager.builder.fileops import FileOps
from appstager.builder.package import PackageBuilder
from appstager.config.models import AppConfig, BuildArguments, PackKind
from appstager.errors import CommandExecutionError

BUILD_DATE = datetime(2024, 3, 9, 12, 0, 0)

DESKTOP_ENTRY = """[Desktop Entry]
Type=Application
Name=${APP_FRIENDLY_NAME}
Icon=${APP_ID}
Exec=${DESKTOP_EXEC}
"""

META_INFO = """<component type="desktop-application">
  <id>${APP_ID}</id>
  <release version="${APP_VERSION}" date="${ISO_DATE}" />
</component>
"""


def write_png(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (size, size), (47, 111, 179, 255)).save(path)
    return path


class RecordingOps(FileOps):
    """FileOps that records commands instead of running them."""

    def __init__(self, fail_on: str | None = None) -> None:
        super().__init__()
        self.commands: list[str] = []
        self.fail_on = fail_on

    def execute(self, command: str, cwd=None) -> str:
        self.commands.append(command)
        if self.fail_on is not None and self.fail_on in command:
            raise CommandExecutionError(command, 1, "simulated failure")
        return ""


@pytest.fixture
def demo_config(tmp_path):
    """A 'demo' application with desktop and metainfo content."""
    return AppConfig(
        app_base_name="demo",
        app_friendly_name="Demo App",
        app_id="net.example.demo",
        app_version_release="1.0[2]",
        app_short_summary="A demo application",
        app_license_id="MIT",
        app_vendor="Example Ltd",
        app_url="https://example.net",
        desktop_entry=DESKTOP_ENTRY,
        meta_info=META_INFO,
        output_directory=str(tmp_path / "out"),
        output_version=True,
    )


@pytest.fixture
def icon_dir(tmp_path):
    """Real icon files: two PNGs, an SVG and an ICO."""
    root = tmp_path / "icons"
    write_png(root / "icon.32x32.png", 32)
    write_png(root / "icon.64x64.png", 64)
    (root / "icon.svg").write_text("<svg xmlns='http://www.w3.org/2000/svg'/>", encoding="utf-8")
    Image.new("RGBA", (32, 32)).save(root / "icon.ico", format="ICO")
    return root


@pytest.fixture
def make_builder(tmp_path):
    """Factory for a PackageBuilder rooted under tmp_path."""

    def _make(config, kind=PackKind.DEB, operations=None, **arg_kw):
        arguments = BuildArguments(kind=kind, **arg_kw)
        return PackageBuilder(
            config,
            arguments,
            temp_root=tmp_path / "temp",
            default_icons=[],
            operations=operations,
            build_date=BUILD_DATE,
        )

    return _make


@pytest.fixture
def make_png():
    """Factory writing a real square PNG: make_png(path, size)."""
    return write_png


@pytest.fixture
def recording_ops():
    """Factory for RecordingOps: recording_ops(fail_on=None)."""
    return RecordingOps
