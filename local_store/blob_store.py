"""Blob and image storage under the fixed ``data`` and ``images`` folders."""

from __future__ import annotations

import io
import uuid
from pathlib import Path
from typing import Any, Protocol
from uuid import UUID

from PIL import Image

from .errors import EncodeError, FileSystemError, NotFoundError, StoreError, StoreResult
from .file_system import LocalFileSystem
from .log import StoreLogger
from .paths import PathResolver

JPEG = "JPEG"
PNG = "PNG"


class ImageCodec(Protocol):
    """Turns images into compressed bytes and back."""

    def encode(self, image: Any, fmt: str = JPEG, quality: int = 100) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...

    def to_generic(self, image: Any) -> Any: ...


class PillowImageCodec:
    """``ImageCodec`` backed by Pillow."""

    def encode(self, image: Image.Image, fmt: str = JPEG, quality: int = 100) -> bytes:
        if fmt.upper() == JPEG and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        buffer = io.BytesIO()
        image.save(buffer, format=fmt, quality=quality)
        return buffer.getvalue()

    def decode(self, data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image

    def to_generic(self, image: Image.Image) -> Image.Image:
        return image.convert("RGBA")


class BlobStore:
    """Opaque byte payloads and images addressed by a generated identifier."""

    def __init__(
        self,
        resolver: PathResolver,
        file_system: LocalFileSystem,
        logger: StoreLogger,
        image_codec: ImageCodec | None = None,
    ) -> None:
        self.resolver = resolver
        self.fs = file_system
        self.logger = logger
        self.image_codec = image_codec or PillowImageCodec()

    # -- Generic data --

    def copy_file(self, source: Path | str) -> str | None:
        """Copy *source* into the data folder under a new id; ``None`` on failure."""
        blob_id = str(uuid.uuid4())
        path = self.resolver.data_path(blob_id)
        self.logger.debug(f"Save path for new file is: {path}")
        try:
            self.fs.copy(Path(source), path)
        except FileSystemError as e:
            self.logger.error(str(e))
            return None
        return blob_id

    def save_data(self, data: bytes, blob_id: str | UUID) -> StoreResult:
        path = self.resolver.data_path(blob_id)
        try:
            self.fs.write_bytes(path, data, atomic=True)
        except FileSystemError as e:
            self.logger.error(f"Error saving data to {path}: {e}")
            return StoreResult.failure(e, path)
        self.logger.debug(f"Saved data with id {blob_id} to {path}")
        return StoreResult.success(path=path)

    def load_data(self, blob_id: str | UUID) -> bytes | None:
        path = self.resolver.data_path(blob_id)
        if not self.fs.exists(path):
            return None
        try:
            return self.fs.read_bytes(path)
        except FileSystemError as e:
            self.logger.error(str(e))
            return None

    def delete_data(self, blob_id: str | UUID) -> StoreResult:
        return self._delete(self.resolver.data_path(blob_id), f"data with id {blob_id}")

    # -- Images --

    def save_image(self, image: Any, image_id: str | UUID) -> StoreResult:
        """Save *image* as full-quality JPEG; failures are logged and returned."""
        path = self.resolver.image_path(image_id)
        try:
            self._write_image(image, path, JPEG)
        except StoreError as e:
            self.logger.error(str(e))
            return StoreResult.failure(e, path)
        self.logger.debug(f"Saved image successfully to {path}")
        return StoreResult.success(path=path)

    def write_png(self, image: Any, image_id: str | UUID) -> Path:
        """Save *image* as PNG, raising ``EncodeError``/``FileSystemError`` on failure."""
        path = self.resolver.image_path(image_id)
        self._write_image(image, path, PNG)
        self.logger.debug(f"Save image with id {image_id} successfully to {path}")
        return path

    def _write_image(self, image: Any, path: Path, fmt: str) -> None:
        try:
            data = self.image_codec.encode(image, fmt)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            raise EncodeError(f"Could not encode image as {fmt}: {e}") from e
        self.fs.write_bytes(path, data, atomic=True)

    def load_image(self, image_id: str | UUID) -> Any | None:
        path = self.resolver.image_path(image_id)
        if not self.fs.exists(path):
            return None
        try:
            data = self.fs.read_bytes(path)
        except FileSystemError as e:
            self.logger.error(str(e))
            return None
        try:
            return self.image_codec.decode(data)
        except (OSError, ValueError) as e:
            self.logger.error(f"Could not decode image at {path}: {e}")
            return None

    def load_generic_image(self, image_id: str | UUID) -> Any | None:
        """Load the image normalised to the codec's generic (RGBA) form."""
        image = self.load_image(image_id)
        if image is None:
            return None
        return self.image_codec.to_generic(image)

    def delete_image(self, image_id: str | UUID) -> StoreResult:
        return self._delete(self.resolver.image_path(image_id), f"image with id {image_id}")

    def _delete(self, path: Path, label: str) -> StoreResult:
        if not self.fs.exists(path):
            self.logger.error(f"Could not delete {label} because it does not exist.")
            return StoreResult.failure(NotFoundError(path), path)
        try:
            self.fs.remove(path)
        except FileSystemError as e:
            self.logger.error(f"Could not delete {label}: {e}")
            return StoreResult.failure(e, path)
        self.logger.debug(f"Deleted {label} successfully.")
        return StoreResult.success(path=path)
