"""Namespace-to-path resolution for documents and blobs."""

from __future__ import annotations

from functools import cached_property
from pathlib import Path
from uuid import UUID

from .conf import StoreConfig
from .errors import FileSystemError
from .file_system import LocalFileSystem
from .log import StoreLogger

JSON_SUFFIX = ".json"


def _segment(value: str | UUID, label: str) -> str:
    text = str(value)
    if not text or text in (".", "..") or "/" in text or "\\" in text or "\x00" in text:
        raise ValueError(f"Invalid {label}: {text!r}")
    return text


class PathResolver:
    """Resolve namespaces, ids and blob identifiers to paths.

    Layout:
    - documents: {documents_root}/<namespace>[/<subfolder>]/<id>.json
    - single:    {documents_root}/<namespace>/<namespace>.json
    - named:     {documents_root}/<filename>.json
    - collection:{documents_root}/<namespace>.json
    - images:    {documents_root}/images/<id>
    - data:      {documents_root}/data/<id>

    Roots are resolved on first access and cached for the life of the
    resolver.
    """

    def __init__(
        self,
        config: StoreConfig,
        file_system: LocalFileSystem | None = None,
        logger: StoreLogger | None = None,
    ) -> None:
        self.config = config
        self.fs = file_system or LocalFileSystem()
        self.logger = logger or StoreLogger.from_config(config)

    # -- Roots --

    @cached_property
    def documents_root(self) -> Path:
        root = self.config.documents_root
        self._ensure_dir(root, parents=True)
        self.logger.debug(f"Doc path is: {root}")
        return root

    @cached_property
    def images_root(self) -> Path:
        return self._child_root(self.config.images_dirname)

    @cached_property
    def data_root(self) -> Path:
        return self._child_root(self.config.data_dirname)

    @cached_property
    def temporary_root(self) -> Path:
        root = self.config.temporary_root
        self._ensure_dir(root, parents=True)
        return root

    def _child_root(self, name: str) -> Path:
        folder = self.documents_root / name
        self._ensure_dir(folder, parents=False)
        return folder

    def _ensure_dir(self, path: Path, parents: bool) -> bool:
        if self.fs.is_dir(path):
            return True
        try:
            self.fs.make_dir(path, parents=parents)
        except FileSystemError as e:
            self.logger.error(str(e))
            return False
        return True

    # -- Documents --

    def type_dir(self, namespace: str, subfolder: str | None = None) -> Path:
        folder = self.documents_root / _segment(namespace, "namespace")
        if subfolder is not None:
            folder = folder / _segment(subfolder, "subfolder")
        return folder

    def ensure_type_dir(self, namespace: str, subfolder: str | None = None) -> Path:
        """Return the (sub)directory for *namespace*, creating it if needed."""
        folder = self.type_dir(namespace, subfolder)
        if not self.fs.exists(folder):
            try:
                self.fs.make_dir(folder, parents=True)
            except FileSystemError as e:
                self.logger.error(f"Could not create folder for type {namespace}: {e}")
        return folder

    def document_path(self, namespace: str, entity_id, subfolder: str | None = None) -> Path:
        return self.type_dir(namespace, subfolder) / f"{_segment(entity_id, 'id')}{JSON_SUFFIX}"

    def single_path(self, namespace: str) -> Path:
        return self.type_dir(namespace) / f"{_segment(namespace, 'namespace')}{JSON_SUFFIX}"

    def named_path(self, filename: str) -> Path:
        return self.documents_root / f"{_segment(filename, 'filename')}{JSON_SUFFIX}"

    def collection_path(self, namespace: str) -> Path:
        return self.documents_root / f"{_segment(namespace, 'namespace')}{JSON_SUFFIX}"

    # -- Blobs --

    def image_path(self, image_id: str | UUID) -> Path:
        return self.images_root / _segment(image_id, "image id")

    def data_path(self, blob_id: str | UUID) -> Path:
        return self.data_root / _segment(blob_id, "blob id")
