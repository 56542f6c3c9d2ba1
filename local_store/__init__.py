"""File-backed JSON document and blob storage."""

from .blob_store import BlobStore, ImageCodec, PillowImageCodec
from .codec import DEFAULT_PROFILE, DEFAULT_PROFILES, ISO8601_PROFILE, DecodeProfile, JsonCodec
from .conf import Platform, StoreConfig
from .document_store import DocumentStore
from .entity import Entity, namespace_of
from .errors import (
    AmbiguousStateError,
    DecodeError,
    EncodeError,
    FileSystemError,
    NotFoundError,
    StoreError,
    StoreResult,
)
from .file_system import LocalFileSystem
from .log import LogLevel, StoreLogger
from .paths import PathResolver
from .store import LocalStore

__all__ = [
    "AmbiguousStateError",
    "BlobStore",
    "DEFAULT_PROFILE",
    "DEFAULT_PROFILES",
    "DecodeError",
    "DecodeProfile",
    "DocumentStore",
    "EncodeError",
    "Entity",
    "FileSystemError",
    "ISO8601_PROFILE",
    "ImageCodec",
    "JsonCodec",
    "LocalFileSystem",
    "LocalStore",
    "LogLevel",
    "NotFoundError",
    "PathResolver",
    "PillowImageCodec",
    "Platform",
    "StoreConfig",
    "StoreError",
    "StoreLogger",
    "StoreResult",
    "namespace_of",
]
