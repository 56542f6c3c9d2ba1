"""Local Store - Central path configuration."""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class Platform(StrEnum):
    WINDOWS = "win32"
    MACOS = "darwin"
    LINUX = "linux"

    @classmethod
    def current(cls) -> "Platform":
        """Return the Platform matching the running OS."""
        for member in cls:
            if sys.platform.startswith(member.value):
                return member
        return cls.LINUX  # fallback for other unix-likes


CURRENT_PLATFORM = Platform.current()

USER_HOME = Path.home()
STORE_HOME = USER_HOME / ".local-store"
LOG_FILE = STORE_HOME / "store.log"

APP_DIR_NAME = "LocalStore"
IMAGES_DIRNAME = "images"
DATA_DIRNAME = "data"

ENV_DOCUMENTS = "LOCAL_STORE_DOCUMENTS"
ENV_TMP = "LOCAL_STORE_TMP"
ENV_LOG_FILE = "LOCAL_STORE_LOG_FILE"
ENV_LOG = "LOCAL_STORE_LOG"
ENV_LOG_STDERR = "LOCAL_STORE_LOG_STDERR"


def default_documents_root(platform: Platform = CURRENT_PLATFORM, home: Path = USER_HOME) -> Path:
    """Return the per-user documents folder for *platform*."""
    if platform in (Platform.MACOS, Platform.WINDOWS):
        return home / "Documents" / APP_DIR_NAME
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "local-store"
    return home / ".local" / "share" / "local-store"


def _bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class StoreConfig:
    """Where the store keeps its files and how it logs."""

    documents_root: Path
    temporary_root: Path
    images_dirname: str = IMAGES_DIRNAME
    data_dirname: str = DATA_DIRNAME
    log_file: Path = LOG_FILE
    log_enabled: bool = True
    log_to_stderr: bool = True

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "StoreConfig":
        """Build a config from environment overrides, falling back to platform defaults."""
        env = os.environ if environ is None else environ
        documents = env.get(ENV_DOCUMENTS)
        tmp = env.get(ENV_TMP)
        log_file = env.get(ENV_LOG_FILE)
        return cls(
            documents_root=Path(documents) if documents else default_documents_root(),
            temporary_root=Path(tmp) if tmp else Path(tempfile.gettempdir()),
            log_file=Path(log_file) if log_file else LOG_FILE,
            log_enabled=_bool(env.get(ENV_LOG), True),
            log_to_stderr=_bool(env.get(ENV_LOG_STDERR), True),
        )

    @classmethod
    def rooted_at(cls, root: Path | str, **overrides) -> "StoreConfig":
        """Config with every path placed under *root* (handy for tests and sandboxes)."""
        base = Path(root)
        values = {
            "documents_root": base / "documents",
            "temporary_root": base / "tmp",
            "log_file": base / "store.log",
        }
        values.update(overrides)
        return cls(**values)
