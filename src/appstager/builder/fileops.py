"""Filesystem and process operations used by the package builder."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from appstager.errors import CommandExecutionError, StagingIOError

logger = logging.getLogger(__name__)


class FileOps:
    """Write, copy and execute against a staging tree.

    Every method that takes an optional path treats None as "skip".
    """

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = Path(root) if root is not None else None

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def create_directory(self, path: Path | str | None) -> None:
        if path is None:
            return
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StagingIOError(f"Cannot create directory {path}: {exc}", path) from exc

    def remove_directory(self, path: Path | str | None) -> None:
        """Delete a directory tree if it exists."""
        if path is None or not Path(path).exists():
            return
        logger.info("Removing %s", path)
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise StagingIOError(f"Cannot remove {path}: {exc}", path) from exc

    def copy_directory(self, source: Path | str, dest: Path | str) -> None:
        """Copy the contents of source into dest, merging with existing files."""
        source = Path(source)
        if not source.is_dir():
            raise StagingIOError(f"Directory not found: {source}", source)
        logger.info("Copying %s -> %s", source, dest)
        try:
            shutil.copytree(source, dest, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            raise StagingIOError(f"Cannot copy {source} to {dest}: {exc}", dest) from exc

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def write_file(
        self, path: Path | str | None, content: str | None, replace: bool = True
    ) -> bool:
        """Write text, creating parent directories.

        Returns False (and writes nothing) if path or content is None.
        """
        if path is None or content is None:
            return False

        path = Path(path)
        if path.exists() and not replace:
            raise StagingIOError(f"File already exists: {path}", path)

        logger.info("Writing %s", path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StagingIOError(f"Cannot write {path}: {exc}", path) from exc
        return True

    def copy_file(
        self, source: Path | str | None, dest: Path | str | None, replace: bool = False
    ) -> bool:
        """Copy a single file, creating the destination directory.

        Returns False if source or dest is None. A missing source, or an
        existing dest when replace is False, raises StagingIOError.
        """
        if source is None or dest is None:
            return False

        source = Path(source)
        dest = Path(dest)
        if not source.is_file():
            raise StagingIOError(f"File not found: {source}", source)
        if dest.exists() and not replace:
            raise StagingIOError(f"File already exists: {dest}", dest)

        logger.info("Copying %s -> %s", source, dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, dest)
        except OSError as exc:
            raise StagingIOError(f"Cannot copy {source} to {dest}: {exc}", dest) from exc
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def execute(self, command: str, cwd: Path | str | None = None) -> str:
        """Run a shell command to completion and return its combined output.

        Runs in ``cwd``, or in the ops root (once it exists) when cwd is
        None. Raises CommandExecutionError on a non-zero exit, with the
        output verbatim.
        """
        if cwd is None and self.root is not None and self.root.is_dir():
            cwd = self.root

        logger.info("Running: %s", command)
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise CommandExecutionError(command, None, str(exc)) from exc

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            raise CommandExecutionError(command, result.returncode, output)

        if output.strip():
            logger.debug("%s", output.rstrip())
        return output
