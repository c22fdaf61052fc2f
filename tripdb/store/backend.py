"""
Blob backend contract used by the document store.

A backend hands out one ``BlobStore`` per named collection. Each store is a
flat key -> string map with full-value overwrite, delete that fails on a
missing key, and a capped prefix listing without continuation cursors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List
import logging


class BlobNotFoundError(KeyError):
    """The backend's signal that a key does not exist."""

    def __init__(self, collection: str, key: str):
        super().__init__(key)
        self.collection = collection
        self.key = key

    def __str__(self) -> str:
        return f"Blob '{self.key}' not found in {self.collection}"


@dataclass(frozen=True)
class BlobEntry:
    """A single listed key."""
    key: str


class BlobStore(ABC):
    """One named collection of blobs."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get(self, key: str) -> str:
        """Return the stored value; raise ``BlobNotFoundError`` when absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Overwrite the value stored at ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; raise ``BlobNotFoundError`` when absent."""

    @abstractmethod
    async def list(self, prefix: str = "", limit: int = 100) -> List[BlobEntry]:
        """List at most ``limit`` keys starting with ``prefix``."""


class BlobBackend(ABC):
    """Factory for named blob stores plus connection lifecycle."""

    @abstractmethod
    def store(self, name: str) -> BlobStore:
        raise NotImplementedError

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None


class MemoryBlobStore(BlobStore):
    """In-process blob store. Keys are listed in sorted order."""

    def __init__(self, name: str):
        super().__init__(name)
        self._blobs: Dict[str, str] = {}

    async def get(self, key: str) -> str:
        try:
            return self._blobs[key]
        except KeyError:
            raise BlobNotFoundError(self.name, key) from None

    async def set(self, key: str, value: str) -> None:
        self._blobs[key] = value

    async def delete(self, key: str) -> None:
        if key not in self._blobs:
            raise BlobNotFoundError(self.name, key)
        del self._blobs[key]

    async def list(self, prefix: str = "", limit: int = 100) -> List[BlobEntry]:
        keys = sorted(k for k in self._blobs if k.startswith(prefix))
        return [BlobEntry(key=k) for k in keys[:limit]]


class MemoryBackend(BlobBackend):
    """Backend keeping every collection in memory for the life of the process."""

    def __init__(self):
        self._stores: Dict[str, MemoryBlobStore] = {}
        self.logger = logging.getLogger(__name__)

    def store(self, name: str) -> MemoryBlobStore:
        if name not in self._stores:
            self._stores[name] = MemoryBlobStore(name)
        return self._stores[name]

    async def connect(self) -> None:
        self.logger.info("Using in-memory blob backend")
