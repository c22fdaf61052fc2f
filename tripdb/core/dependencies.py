"""
Dependency wiring for the document store and domain services.

The store is built once per container and handed to every service through its
constructor; nothing in the package holds a module-level store.
"""

import asyncio
import logging
from typing import Optional

from tripdb.config.settings import Settings, get_settings
from tripdb.core.logging import configure_logging
from tripdb.services import (
    AccommodationService,
    BookingService,
    PaymentService,
    ReviewService,
    TripService,
    UserService,
)
from tripdb.store.backend import BlobBackend
from tripdb.store.document_store import DocumentStore
from tripdb.store.factory import create_document_store

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for the document store and the services built on it.
    """

    def __init__(self, settings: Optional[Settings] = None, backend: Optional[BlobBackend] = None):
        self.settings = settings or get_settings()
        self.store: DocumentStore = create_document_store(self.settings, backend=backend)

        retries = self.settings.store.conflict_retries
        self.users = UserService(self.store, auth=self.settings.auth, conflict_retries=retries)
        self.trips = TripService(self.store, conflict_retries=retries)
        self.accommodations = AccommodationService(self.store, conflict_retries=retries)
        self.bookings = BookingService(self.store, conflict_retries=retries)
        self.payments = PaymentService(self.store, conflict_retries=retries)
        self.reviews = ReviewService(
            self.store, self.trips, self.accommodations, conflict_retries=retries
        )

        self._initialized = False
        self._initialization_lock = asyncio.Lock()

    async def initialize(self) -> bool:
        """Configure logging and connect the backend once."""
        async with self._initialization_lock:
            if self._initialized:
                return True

            configure_logging(self.settings.log_level.value)
            logger.info(
                f"Initializing {self.settings.app_name} on {self.settings.store.backend.value} backend"
            )
            self._initialized = await self.store.connect()
            return self._initialized

    async def shutdown(self) -> None:
        async with self._initialization_lock:
            await self.store.close()
            self._initialized = False
            logger.info("Service container shut down")

    @property
    def is_initialized(self) -> bool:
        return self._initialized
