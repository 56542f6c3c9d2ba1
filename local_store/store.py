"""Local Store entry point wiring configuration, logging and both stores."""

from __future__ import annotations

from pathlib import Path

from .blob_store import BlobStore, ImageCodec
from .codec import JsonCodec
from .conf import StoreConfig
from .document_store import DocumentStore
from .file_system import LocalFileSystem
from .log import StoreLogger
from .paths import PathResolver


class LocalStore:
    """One store per application, built once at start-up.

    Every collaborator can be injected; anything omitted is built from
    ``config`` (which itself defaults to ``StoreConfig.from_env()``).
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        logger: StoreLogger | None = None,
        file_system: LocalFileSystem | None = None,
        codec: JsonCodec | None = None,
        image_codec: ImageCodec | None = None,
    ) -> None:
        self.config = config or StoreConfig.from_env()
        self.logger = logger or StoreLogger.from_config(self.config)
        self.file_system = file_system or LocalFileSystem()
        self.codec = codec or JsonCodec(logger=self.logger)
        self.paths = PathResolver(self.config, self.file_system, self.logger)
        self.documents = DocumentStore(self.paths, self.file_system, self.codec, self.logger)
        self.blobs = BlobStore(self.paths, self.file_system, self.logger, image_codec)

    @classmethod
    def at(cls, root: Path | str, **kwargs) -> "LocalStore":
        """Store with every path under *root*."""
        return cls(StoreConfig.rooted_at(root), **kwargs)

    @property
    def tmp_folder(self) -> Path:
        return self.paths.temporary_root
