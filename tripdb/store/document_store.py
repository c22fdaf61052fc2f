"""
Generic document store over a namespaced blob backend.

Documents are flat JSON objects stored one per key. The store stamps and owns
``_id``, ``createdAt``, ``updatedAt`` and ``_version``; it knows nothing about
the domain. Listing, field lookup, counting and search are linear scans over a
capped key listing. A production deployment with a large catalog should put a
secondary-key table or inverted index behind ``find_by_field`` and ``search``
without changing their signatures.
"""

import asyncio
import json
import logging
import uuid
import weakref
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from tripdb.config.settings import DEFAULT_COLLECTIONS
from tripdb.core.exceptions import (
    NotFoundError,
    StoreBackendError,
    StoreConfigurationError,
    VersionConflictError,
)
from tripdb.store.backend import BlobBackend, BlobNotFoundError, BlobStore

logger = logging.getLogger(__name__)

ID_FIELD = "_id"
VERSION_FIELD = "_version"
CREATED_FIELD = "createdAt"
UPDATED_FIELD = "updatedAt"
MANAGED_FIELDS = frozenset({ID_FIELD, VERSION_FIELD, CREATED_FIELD, UPDATED_FIELD})

Document = Dict[str, Any]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix and microsecond precision."""
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


class DocumentStore:
    """
    CRUD, listing, filtering and text search over named collections.

    Reads of a missing id return ``None``. Writes that need an existing
    document (``update``, ``delete``) raise ``NotFoundError``. Backend
    transport errors propagate, except for single documents that fail to load
    during ``find_all``, which are logged and left out of the result.
    """

    def __init__(
        self,
        backend: BlobBackend,
        collections: Iterable[str] = DEFAULT_COLLECTIONS,
        default_limit: int = 100,
        scan_limit: int = 1000,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.backend = backend
        self.stores: Dict[str, BlobStore] = {name: backend.store(name) for name in collections}
        self.default_limit = default_limit
        self.scan_limit = scan_limit
        self._clock = clock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        self.connected = False

    async def connect(self) -> bool:
        """Probe the backend by listing the users collection."""
        try:
            await self.backend.connect()
            await self.get_store("users").list(prefix="test", limit=1)
        except StoreBackendError as e:
            logger.error(f"Failed to connect to blob backend: {e.message}")
            self.connected = False
            return False
        self.connected = True
        logger.info("Connected to blob backend")
        return True

    def is_connected(self) -> bool:
        return self.connected

    async def close(self) -> None:
        await self.backend.close()
        self.connected = False

    def get_store(self, collection: str) -> BlobStore:
        try:
            return self.stores[collection]
        except KeyError:
            raise StoreConfigurationError(collection) from None

    def _lock_for(self, collection: str, document_id: str) -> asyncio.Lock:
        key = f"{collection}/{document_id}"
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def _now(self) -> str:
        return isoformat(self._clock())

    # Generic CRUD operations

    async def create(self, collection: str, document_id: str, data: Mapping[str, Any]) -> Document:
        """Stamp and write a document. Overwrites whatever is stored at ``document_id``."""
        store = self.get_store(collection)
        now = self._now()
        document = {
            **data,
            ID_FIELD: document_id,
            CREATED_FIELD: now,
            UPDATED_FIELD: now,
            VERSION_FIELD: 1,
        }
        await store.set(document_id, json.dumps(document))
        logger.debug("Created document", extra={"collection": collection, "document_id": document_id})
        return document

    async def find_by_id(self, collection: str, document_id: str) -> Optional[Document]:
        store = self.get_store(collection)
        try:
            raw = await store.get(document_id)
        except BlobNotFoundError:
            return None
        return json.loads(raw)

    async def find_all(
        self,
        collection: str,
        limit: Optional[int] = None,
        prefix: str = "",
    ) -> List[Document]:
        store = self.get_store(collection)
        entries = await store.list(prefix=prefix, limit=self.default_limit if limit is None else limit)
        documents: List[Document] = []

        for entry in entries:
            try:
                documents.append(json.loads(await store.get(entry.key)))
            except (BlobNotFoundError, StoreBackendError, json.JSONDecodeError) as e:
                logger.warning(
                    f"Failed to retrieve document {entry.key}: {e}",
                    extra={"collection": collection, "document_id": entry.key},
                )

        return documents

    async def find_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
        prefix: str = "",
    ) -> List[Document]:
        """Equality filter over ``find_all``. Does not assume ``field`` is unique."""
        documents = await self.find_all(collection, limit=limit, prefix=prefix)
        return [doc for doc in documents if doc.get(field) == value]

    async def update(
        self,
        collection: str,
        document_id: str,
        patch: Mapping[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        """
        Shallow-merge ``patch`` over the stored document.

        Store-managed fields in ``patch`` are ignored. When ``expected_version``
        is given the write is rejected with ``VersionConflictError`` unless the
        stored document is still at that version.
        """
        store = self.get_store(collection)
        async with self._lock_for(collection, document_id):
            existing = await self.find_by_id(collection, document_id)
            if existing is None:
                raise NotFoundError(collection, document_id)

            current_version = existing.get(VERSION_FIELD, 0)
            if expected_version is not None and expected_version != current_version:
                raise VersionConflictError(collection, document_id, expected_version, current_version)

            changes = {k: v for k, v in patch.items() if k not in MANAGED_FIELDS}
            updated = {
                **existing,
                **changes,
                ID_FIELD: document_id,
                UPDATED_FIELD: self._now(),
                VERSION_FIELD: current_version + 1,
            }
            await store.set(document_id, json.dumps(updated))
        return updated

    async def delete(self, collection: str, document_id: str) -> Document:
        """Remove a document and return the last stored snapshot."""
        store = self.get_store(collection)
        async with self._lock_for(collection, document_id):
            existing = await self.find_by_id(collection, document_id)
            if existing is None:
                raise NotFoundError(collection, document_id)
            try:
                await store.delete(document_id)
            except BlobNotFoundError:
                raise NotFoundError(collection, document_id) from None
        return existing

    async def delete_many(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> int:
        """
        Delete every document whose fields equal all of ``filter``.

        Deletions are applied one at a time; a failure part way leaves the
        earlier ones in place.
        """
        filter = filter or {}
        documents = await self.find_all(collection, limit=self.scan_limit)
        deleted = 0

        for doc in documents:
            if all(doc.get(key) == value for key, value in filter.items()):
                await self.delete(collection, doc[ID_FIELD])
                deleted += 1

        logger.info(f"Deleted {deleted} documents", extra={"collection": collection})
        return deleted

    # Utility methods

    @staticmethod
    def generate_id() -> str:
        return uuid.uuid4().hex

    async def count(self, collection: str) -> int:
        documents = await self.find_all(collection, limit=self.scan_limit)
        return len(documents)

    async def exists(self, collection: str, document_id: str) -> bool:
        return await self.find_by_id(collection, document_id) is not None

    async def search(
        self,
        collection: str,
        term: Optional[str],
        fields: Optional[Iterable[str]] = None,
    ) -> List[Document]:
        """
        Case-insensitive substring search.

        With no ``fields`` every string value of each document is checked.
        An empty ``term`` matches everything.
        """
        documents = await self.find_all(collection, limit=self.scan_limit)
        if not term:
            return documents

        needle = term.lower()
        fields = list(fields or [])

        def matches(doc: Document) -> bool:
            values = doc.values() if not fields else (doc.get(f) for f in fields)
            return any(isinstance(v, str) and needle in v.lower() for v in values)

        return [doc for doc in documents if matches(doc)]
