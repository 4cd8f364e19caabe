"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

from appstager import __main__ as cli
from appstager.builder.fileops import FileOps
from appstager.config.models import PackKind
from appstager.errors import CommandExecutionError
from appstager.templates.newfiles import NewKind, create_new_files


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "_configure_logging", lambda verbose, log_file: None)


@pytest.fixture
def executed():
    """Patch command execution; yields the mock."""
    with patch.object(FileOps, "execute", return_value="") as mock_execute:
        yield mock_execute


class TestParser:
    def test_kind_parsed(self):
        args = cli.build_parser().parse_args(["c.json", "-k", "appimage"])
        assert args.kind is PackKind.APPIMAGE
        assert args.runtime == "linux-x64"
        assert args.build == "Release"

    def test_bad_kind(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["c.json", "-k", "snap"])


class TestMain:
    def test_new_files(self, tmp_path):
        assert cli.main(["--new", "all", "--dir", str(tmp_path), "--name", "hello"]) == 0
        assert (tmp_path / "hello.appstager.json").is_file()

    def test_new_files_exist(self, tmp_path):
        (tmp_path / "app.desktop").write_text("", encoding="utf-8")
        assert cli.main(["--new", "desktop", "--dir", str(tmp_path)]) == 1

    def test_needs_config_and_kind(self, tmp_path):
        assert cli.main([]) == 2
        assert cli.main([str(tmp_path / "c.json")]) == 2

    def test_missing_config(self, tmp_path):
        assert cli.main([str(tmp_path / "missing.json"), "-k", "deb"]) == 1

    def test_build(self, tmp_path, executed):
        create_new_files(NewKind.ALL, tmp_path, "hello")
        publish = tmp_path / "publish"
        publish.mkdir()
        (publish / "hello").write_text("binary", encoding="utf-8")

        code = cli.main([
            str(tmp_path / "hello.appstager.json"),
            "-k", "deb",
            "--publish-dir", str(publish),
            "--temp-root", str(tmp_path / "temp"),
        ])

        assert code == 0
        assert executed.call_count == 1
        assert executed.call_args.args[0].startswith("dpkg-deb")
        pack_root = tmp_path / "temp" / "net.example.hello-x86_64-Release-Deb"
        assert (pack_root / "AppDir" / "opt" / "net.example.hello" / "hello").is_file()
        desktop = pack_root / "AppDir" / "usr" / "share" / "applications" / "net.example.hello.desktop"
        assert "Exec=/opt/net.example.hello/hello" in desktop.read_text(encoding="utf-8")
        # bundled default icon
        icon = pack_root / "AppDir/usr/share/icons/hicolor/scalable/apps/net.example.hello.svg"
        assert icon.is_file()

    def test_build_failure_returns_one(self, tmp_path):
        create_new_files(NewKind.ALL, tmp_path, "hello")

        error = CommandExecutionError("dpkg-deb", 2, "no dpkg-deb")
        with patch.object(FileOps, "execute", side_effect=error):
            code = cli.main([
                str(tmp_path / "hello.appstager.json"),
                "-k", "deb",
                "--temp-root", str(tmp_path / "temp"),
            ])
        assert code == 1

    def test_relative_temp_root(self, tmp_path, monkeypatch, executed):
        create_new_files(NewKind.ALL, tmp_path, "hello")
        monkeypatch.chdir(tmp_path)

        code = cli.main(["hello.appstager.json", "-k", "zip", "--temp-root", "temp"])

        assert code == 0
        command = executed.call_args.args[0]
        assert str(tmp_path / "temp" / "net.example.hello-x86_64-Release-Zip" / "AppDir") in command
        assert str(tmp_path / "Deploy" / "OUT" / "hello.x86_64.zip") in command
