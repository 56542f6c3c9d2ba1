"""Filesystem collaborator used by the path resolver and both stores."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from .errors import FileSystemError


class LocalFileSystem:
    """Thin wrapper over pathlib/shutil that reports failures as ``FileSystemError``."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def make_dir(self, path: Path, parents: bool = True) -> None:
        try:
            Path(path).mkdir(parents=parents, exist_ok=True)
        except OSError as e:
            raise FileSystemError("create directory", path, e) from e

    def read_bytes(self, path: Path) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise FileSystemError("read", path, e) from e

    def write_bytes(self, path: Path, data: bytes, atomic: bool = True) -> None:
        """Write *data* to *path*.

        Atomic writes go to a hidden sibling ``.<name>.tmp`` first and are
        moved into place with ``os.replace``.
        """
        p = Path(path)
        if not atomic:
            try:
                p.write_bytes(data)
            except OSError as e:
                raise FileSystemError("write", p, e) from e
            return
        tmp = p.with_name(f".{p.name}.tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(data)
            os.replace(tmp, p)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise FileSystemError("write", p, e) from e

    def copy(self, source: Path, destination: Path) -> None:
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise FileSystemError(f"copy {source} to", destination, e) from e

    def remove(self, path: Path) -> None:
        """Remove a file, or a directory recursively."""
        p = Path(path)
        try:
            if p.is_dir() and not p.is_symlink():
                shutil.rmtree(p)
            else:
                p.unlink()
        except OSError as e:
            raise FileSystemError("remove", p, e) from e

    def list_dir(self, path: Path, include_hidden: bool = False) -> list[Path]:
        """Regular files directly inside *path*, sorted by name."""
        p = Path(path)
        try:
            entries = sorted(p.iterdir())
        except OSError as e:
            raise FileSystemError("list", p, e) from e
        return [
            entry
            for entry in entries
            if entry.is_file() and (include_hidden or not entry.name.startswith("."))
        ]
