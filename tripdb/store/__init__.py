"""
Document store and blob backends.
"""

from .backend import (
    BlobBackend,
    BlobEntry,
    BlobNotFoundError,
    BlobStore,
    MemoryBackend,
    MemoryBlobStore,
)
from .document_store import Document, DocumentStore
from .redis_backend import RedisBackend, RedisBlobStore
from .factory import create_backend, create_document_store

__all__ = [
    "BlobBackend",
    "BlobEntry",
    "BlobNotFoundError",
    "BlobStore",
    "MemoryBackend",
    "MemoryBlobStore",
    "Document",
    "DocumentStore",
    "RedisBackend",
    "RedisBlobStore",
    "create_backend",
    "create_document_store",
]
