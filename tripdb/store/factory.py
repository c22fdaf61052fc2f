"""Build the configured blob backend and document store."""

from typing import Optional

from tripdb.config.settings import BackendType, Settings, get_settings
from tripdb.store.backend import BlobBackend, MemoryBackend
from tripdb.store.document_store import DocumentStore
from tripdb.store.redis_backend import RedisBackend


def create_backend(settings: Optional[Settings] = None) -> BlobBackend:
    settings = settings or get_settings()
    if settings.store.backend == BackendType.REDIS:
        return RedisBackend(namespace=settings.store.namespace, settings=settings.redis)
    return MemoryBackend()


def create_document_store(
    settings: Optional[Settings] = None,
    backend: Optional[BlobBackend] = None,
) -> DocumentStore:
    settings = settings or get_settings()
    return DocumentStore(
        backend or create_backend(settings),
        collections=settings.store.collections,
        default_limit=settings.store.default_list_limit,
        scan_limit=settings.store.scan_limit,
    )
