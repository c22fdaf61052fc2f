"""
Shared persistence operations for domain services.

Every service receives the ``DocumentStore`` through its constructor and
works on one collection. Saves are optimistic: the entity's ``version`` is
sent as the expected version, so a writer holding a stale copy gets
``VersionConflictError`` instead of silently overwriting a newer one.
"""

import logging
from typing import Any, Callable, ClassVar, Generic, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from tripdb.core.exceptions import NotFoundError, VersionConflictError
from tripdb.models.base import CreateResult, DomainModel
from tripdb.store.document_store import ID_FIELD, DocumentStore

M = TypeVar("M", bound=DomainModel)

logger = logging.getLogger(__name__)


class EntityService(Generic[M]):
    """CRUD for one entity type on top of the document store."""

    collection: ClassVar[str]
    model: ClassVar[Type[DomainModel]]
    search_fields: ClassVar[Optional[List[str]]] = None

    def __init__(self, store: DocumentStore, conflict_retries: int = 3):
        self.store = store
        self.conflict_retries = conflict_retries

    def build(self, data: Union[M, Mapping[str, Any]]) -> M:
        if isinstance(data, self.model):
            return data
        return self.model.from_document(self.model.to_aliases(data))

    def _wrap(self, documents: Iterable[Mapping[str, Any]]) -> List[M]:
        entities: List[M] = []
        for doc in documents:
            try:
                entities.append(self.model.from_document(doc))
            except ValidationError as e:
                logger.warning(
                    f"Skipping unreadable document {doc.get(ID_FIELD)}: {e.error_count()} invalid field(s)",
                    extra={"collection": self.collection, "document_id": doc.get(ID_FIELD)},
                )
        return entities

    async def create(self, data: Union[M, Mapping[str, Any]]) -> M:
        """Persist a new entity. Validation is not checked here."""
        entity = self.build(data)
        document = await self.store.create(self.collection, entity.id, entity.to_object())
        return self.model.from_document(document)

    async def create_checked(self, data: Union[M, Mapping[str, Any]]) -> CreateResult[M]:
        """Persist a new entity only if it passes ``validate_fields``."""
        entity = self.build(data)
        result = entity.validate_fields()
        if not result.is_valid:
            return CreateResult(errors=result.errors)
        return CreateResult(model=await self.create(entity))

    async def find_by_id(self, entity_id: str) -> Optional[M]:
        document = await self.store.find_by_id(self.collection, entity_id)
        return self.model.from_document(document) if document else None

    async def find_all(self, limit: Optional[int] = None, prefix: str = "") -> List[M]:
        return self._wrap(await self.store.find_all(self.collection, limit=limit, prefix=prefix))

    async def find_by(self, field: str, value: Any, limit: Optional[int] = None) -> List[M]:
        return self._wrap(await self.store.find_by_field(self.collection, field, value, limit=limit))

    async def find_one_by(self, field: str, value: Any) -> Optional[M]:
        matches = await self.find_by(field, value)
        return matches[0] if matches else None

    async def search(self, term: str) -> List[M]:
        return self._wrap(await self.store.search(self.collection, term, self.search_fields))

    async def delete_by_id(self, entity_id: str) -> M:
        return self.model.from_document(await self.store.delete(self.collection, entity_id))

    async def save(self, entity: M) -> M:
        """
        Create the entity if it was never stored, otherwise update it at its current version.

        An entity that was stored once (``version`` >= 1) is never recreated: if its
        document has since been deleted the update raises ``NotFoundError``.
        """
        entity.touch()
        if entity.version == 0:
            document = await self.store.create(self.collection, entity.id, entity.to_object())
        else:
            document = await self.store.update(
                self.collection, entity.id, entity.to_object(), expected_version=entity.version
            )
        entity.refresh_from(document)
        return entity

    async def update(self, entity: M, updates: Mapping[str, Any]) -> M:
        entity.apply(updates)
        entity.touch()
        document = await self.store.update(
            self.collection, entity.id, entity.to_object(), expected_version=entity.version
        )
        entity.refresh_from(document)
        return entity

    async def delete(self, entity: M) -> M:
        await self.store.delete(self.collection, entity.id)
        return entity

    async def mutate(self, entity: M, change: Callable[[M], None]) -> M:
        """
        Apply ``change`` and save, reloading and reapplying on a version conflict.

        ``change`` must be safe to run again on a freshly loaded copy.
        """
        attempt = 0
        while True:
            change(entity)
            try:
                return await self.save(entity)
            except VersionConflictError:
                if attempt >= self.conflict_retries:
                    raise
                attempt += 1
                logger.info(
                    f"Version conflict on {self.collection}/{entity.id}, retrying ({attempt})",
                    extra={"collection": self.collection, "document_id": entity.id},
                )
                fresh = await self.find_by_id(entity.id)
                if fresh is None:
                    raise NotFoundError(self.collection, entity.id)
                for name in type(entity).model_fields:
                    setattr(entity, name, getattr(fresh, name))
