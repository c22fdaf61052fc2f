"""
Shared fixtures: an in-memory backend, a document store on top of it and the
domain services wired to that store.
"""
from datetime import datetime, timedelta, timezone

import pytest

from tripdb.config.settings import AuthSettings
from tripdb.services import (
    AccommodationService,
    BookingService,
    PaymentService,
    ReviewService,
    TripService,
    UserService,
)
from tripdb.store.backend import MemoryBackend
from tripdb.store.document_store import DocumentStore


class TickingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        moment = self.current
        self.current = self.current + timedelta(seconds=1)
        return moment


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def clock():
    return TickingClock(datetime(2026, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def store(backend, clock):
    return DocumentStore(backend, clock=clock)


@pytest.fixture
def auth_settings():
    return AuthSettings(jwt_secret="test-secret", jwt_expires_in="1h", bcrypt_rounds=4)


@pytest.fixture
def user_service(store, auth_settings):
    return UserService(store, auth=auth_settings)


@pytest.fixture
def trip_service(store):
    return TripService(store)


@pytest.fixture
def booking_service(store):
    return BookingService(store)


@pytest.fixture
def accommodation_service(store):
    return AccommodationService(store)


@pytest.fixture
def payment_service(store):
    return PaymentService(store)


@pytest.fixture
def review_service(store, trip_service, accommodation_service):
    return ReviewService(store, trip_service, accommodation_service)
