"""Namespace-keyed CRUD for entities stored as one JSON file each."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, TypeVar

from pydantic import BaseModel

from .codec import JsonCodec
from .entity import Entity, namespace_of
from .errors import (
    DecodeError,
    EncodeError,
    FileSystemError,
    NotFoundError,
    StoreResult,
)
from .file_system import LocalFileSystem
from .log import StoreLogger
from .paths import PathResolver

E = TypeVar("E", bound=Entity)
M = TypeVar("M", bound=BaseModel)


class DocumentStore:
    """Save, load, update and delete entities under ``<namespace>/<id>.json``.

    Mutating operations never raise for store failures: they log the
    failure and return a falsy ``StoreResult`` carrying the error.  Load
    operations return ``None`` (or an empty list) when nothing usable is on
    disk, which looks the same as "never saved".
    """

    def __init__(
        self,
        resolver: PathResolver,
        file_system: LocalFileSystem,
        codec: JsonCodec,
        logger: StoreLogger,
    ) -> None:
        self.resolver = resolver
        self.fs = file_system
        self.codec = codec
        self.logger = logger

    # =========================================================================
    # CREATE
    # =========================================================================

    def save(self, instance: Entity, subfolder: str | None = None, namespace: str | None = None) -> StoreResult:
        """Write *instance* to ``<namespace>[/<subfolder>]/<id>.json``, overwriting."""
        ns = namespace_of(type(instance), namespace)
        path = self.resolver.document_path(ns, instance.id, subfolder)
        self.resolver.ensure_type_dir(ns, subfolder)
        return self._write(instance, path, f"instance of {ns} with id {instance.id}")

    def save_file(self, filename: str, instance: BaseModel | None = None) -> StoreResult:
        """Write *instance* to ``<filename>.json`` under the documents root.

        Passing ``instance=None`` deletes the file instead; an already
        missing file counts as success.
        """
        path = self.resolver.named_path(filename)
        if instance is not None:
            return self._write(instance, path, f"instance of {type(instance).__name__}")
        if not self.fs.exists(path):
            return StoreResult.success(path=path)
        try:
            self.fs.remove(path)
        except FileSystemError as e:
            self.logger.error(f"Could not remove instance: {e}")
            return StoreResult.failure(e, path)
        self.logger.debug(f"Removed file {path}")
        return StoreResult.success(path=path)

    def save_single(self, instance: BaseModel, namespace: str | None = None) -> StoreResult:
        """Store the one and only value of a namespace at ``<namespace>/<namespace>.json``."""
        ns = namespace_of(type(instance), namespace)
        self.resolver.ensure_type_dir(ns)
        path = self.resolver.single_path(ns)
        return self._write(instance, path, f"instance of {ns}")

    def save_collection(
        self,
        model: type[E],
        items: Iterable[E],
        subfolder: str | None = None,
        reset_save_folder: bool = True,
        namespace: str | None = None,
    ) -> StoreResult:
        """Save every item as its own document file.

        With ``reset_save_folder`` (the default) the (sub)directory is
        deleted first so items dropped from the collection leave no files
        behind.  Every item is attempted; the result fails if any did and
        ``value`` holds the number of items written.
        """
        ns = namespace_of(model, namespace)
        if reset_save_folder:
            self.reset_save_folder(model, subfolder, namespace=ns)
        saved = 0
        first_error = None
        for item in items:
            result = self.save(item, subfolder, namespace=ns)
            if result:
                saved += 1
            elif first_error is None:
                first_error = result.error
        folder = self.resolver.type_dir(ns, subfolder)
        if first_error is not None:
            return StoreResult(ok=False, value=saved, error=first_error, path=folder)
        return StoreResult.success(saved, folder)

    def save_collection_file(self, model: type[M], items: Iterable[M], namespace: str | None = None) -> StoreResult:
        """Write all *items* as one JSON array to ``<namespace>.json``."""
        ns = namespace_of(model, namespace)
        path = self.resolver.collection_path(ns)
        try:
            data = self.codec.encode_many(items, model)
        except EncodeError as e:
            self.logger.error(f"Could not encode collection data: {e}")
            return StoreResult.failure(e, path)
        try:
            self.fs.write_bytes(path, data)
        except FileSystemError as e:
            self.logger.error(f"Could not save collection data: {e}")
            return StoreResult.failure(e, path)
        self.logger.debug(f"Saved collection of {ns} to file {path}")
        return StoreResult.success(path=path)

    def _write(self, instance: BaseModel, path: Path, label: str) -> StoreResult:
        try:
            data = self.codec.encode(instance)
        except EncodeError as e:
            self.logger.error(f"Could not encode data: {e}")
            return StoreResult.failure(e, path)
        try:
            self.fs.write_bytes(path, data)
        except FileSystemError as e:
            self.logger.error(f"Could not save data: {e}")
            return StoreResult.failure(e, path)
        self.logger.debug(f"Saved {label} to file {path}")
        return StoreResult.success(instance, path)

    # =========================================================================
    # READ
    # =========================================================================

    def load_file(self, model: type[M], filename: str) -> M | None:
        """Load ``<filename>.json`` from the documents root."""
        return self._read(model, self.resolver.named_path(filename))

    def load(self, model: type[M], namespace: str | None = None) -> M | None:
        """Load the namespace's only file.

        Zero files and several files both yield ``None``: the store does not
        guess which one is canonical.
        """
        ns = namespace_of(model, namespace)
        folder = self.resolver.type_dir(ns)
        if not self.fs.is_dir(folder):
            self.logger.info(f"There was no file of type {ns} found.")
            return None
        try:
            files = self.fs.list_dir(folder)
        except FileSystemError as e:
            self.logger.error(f"Could not load content of directory: {e}")
            return None
        if len(files) != 1:
            self.logger.info(f"Expected exactly one file in {folder}, found {len(files)}")
            return None
        return self._read(model, files[0])

    def get(self, model: type[E], entity_id, subfolder: str | None = None, namespace: str | None = None) -> E | None:
        """Load one document by id."""
        ns = namespace_of(model, namespace)
        return self._read(model, self.resolver.document_path(ns, entity_id, subfolder))

    def load_all(self, model: type[E], subfolder: str | None = None, namespace: str | None = None) -> list[E]:
        """Decode every visible file in the (sub)directory.

        Files that fail to decode are logged and skipped; the rest are
        returned in filename order.
        """
        ns = namespace_of(model, namespace)
        folder = self.resolver.type_dir(ns, subfolder)
        if not self.fs.is_dir(folder):
            return []
        try:
            files = self.fs.list_dir(folder)
        except FileSystemError as e:
            self.logger.error(f"Could not load content of directory: {e}")
            return []
        result: list[E] = []
        for path in files:
            instance = self._read(model, path)
            if instance is not None:
                result.append(instance)
        return result

    def load_collection(self, model: type[M], namespace: str | None = None) -> list[M]:
        """Read the ``<namespace>.json`` array; empty when missing or undecodable."""
        ns = namespace_of(model, namespace)
        path = self.resolver.collection_path(ns)
        if not self.fs.exists(path):
            return []
        try:
            data = self.fs.read_bytes(path)
        except FileSystemError as e:
            self.logger.error(str(e))
            return []
        try:
            return self.codec.decode_many(data, model)
        except DecodeError as e:
            self.logger.error(f"Could not decode collection data: {e}")
            return []

    def exists(self, instance: Entity, subfolder: str | None = None, namespace: str | None = None) -> bool:
        ns = namespace_of(type(instance), namespace)
        return self.fs.exists(self.resolver.document_path(ns, instance.id, subfolder))

    def _read(self, model: type[M], path: Path) -> M | None:
        if not self.fs.exists(path):
            return None
        try:
            data = self.fs.read_bytes(path)
        except FileSystemError as e:
            self.logger.error(str(e))
            return None
        try:
            instance = self.codec.decode(data, model)
        except DecodeError as e:
            self.logger.error(f"Loading instance of {model.__name__} at {path} failed: {e}")
            return None
        self.logger.debug(f"Loading instance of {model.__name__} at {path} successfully.")
        return instance

    # =========================================================================
    # UPDATE
    # =========================================================================

    def update(self, instance: Entity, subfolder: str | None = None, namespace: str | None = None) -> StoreResult:
        """Replace the stored document: delete the old file, then save."""
        if self.exists(instance, subfolder, namespace):
            self.delete(instance, subfolder, namespace)
        return self.save(instance, subfolder, namespace)

    # =========================================================================
    # DELETE
    # =========================================================================

    def reset_save_folder(self, model: type, subfolder: str | None = None, namespace: str | None = None) -> StoreResult:
        """Recursively delete the namespace (sub)directory; missing is fine."""
        ns = namespace_of(model, namespace)
        folder = self.resolver.type_dir(ns, subfolder)
        if not self.fs.exists(folder):
            return StoreResult.success(path=folder)
        try:
            self.fs.remove(folder)
        except FileSystemError as e:
            self.logger.error(f"Could not reset folder of type {ns}: {e}")
            return StoreResult.failure(e, folder)
        self.logger.debug(f"Reset folder {folder}")
        return StoreResult.success(path=folder)

    def delete(self, instance: Entity, subfolder: str | None = None, namespace: str | None = None) -> StoreResult:
        """Remove the instance's document file.

        A missing file is logged and reported through the result, never
        raised.
        """
        ns = namespace_of(type(instance), namespace)
        path = self.resolver.document_path(ns, instance.id, subfolder)
        if not self.fs.exists(path):
            error = NotFoundError(path)
            self.logger.error(f"Could not delete file because it does not exist: {path}")
            return StoreResult.failure(error, path)
        try:
            self.fs.remove(path)
        except FileSystemError as e:
            self.logger.error(f"Could not delete file: {e}")
            return StoreResult.failure(e, path)
        self.logger.debug(f"Deleted instance of {ns} with id {instance.id} successfully.")
        return StoreResult.success(path=path)
