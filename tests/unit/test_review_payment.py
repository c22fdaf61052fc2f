"""
Unit tests for reviews, accommodations and payments
"""
import re
from datetime import datetime, timezone

import pytest

from tripdb.core.exceptions import InvalidStatusTransitionError, NotFoundError, RefundExceedsAmountError
from tripdb.models.accommodation import Accommodation
from tripdb.models.payment import Payment
from tripdb.services.payment_service import generate_payment_number


def _review(item_id, rating=5, **overrides):
    data = {
        "item_id": item_id,
        "item_type": "trip",
        "booking_id": "booking-1",
        "user_id": "user-1",
        "rating": rating,
        "title": "Unforgettable",
        "content": "Our guide was superb",
    }
    data.update(overrides)
    return data


def _listing(**overrides):
    data = {
        "host_id": "host-1",
        "title": "Lakeside Lodge",
        "description": "Cabins on Lake Bunyonyi",
        "type": "lodge",
        "pricing": {"basePrice": 120, "currency": "USD"},
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
async def test_submit_forces_pending(review_service):
    result = await review_service.submit(_review("trip-1", moderation_status="approved"))

    assert result.ok
    assert result.model.moderation_status == "pending"
    assert [r.id for r in await review_service.find_pending()] == [result.model.id]


@pytest.mark.asyncio
async def test_submit_rejects_out_of_range_rating(review_service, store):
    result = await review_service.submit(_review("trip-1", rating=6))

    assert not result.ok
    assert result.errors == ["Rating must be between 1 and 5"]
    assert await store.count("reviews") == 0


@pytest.mark.asyncio
async def test_approve_folds_rating_into_trip(review_service, trip_service):
    trip = await trip_service.create({"title": "Rwenzori Hike", "description": "Glaciers", "ratings": {"average": 4, "count": 1}})
    review = (await review_service.submit(_review(trip.id, rating=5))).model

    await review_service.approve(review)

    reloaded = await trip_service.find_by_id(trip.id)
    assert reloaded.ratings.average == 4.5
    assert reloaded.ratings.count == 2
    assert [r.id for r in await review_service.find_by_item(trip.id)] == [review.id]


@pytest.mark.asyncio
async def test_reject_leaves_rating_untouched(review_service, trip_service):
    trip = await trip_service.create({"title": "Sipi Falls", "description": "Waterfalls"})
    review = (await review_service.submit(_review(trip.id, rating=1))).model

    await review_service.reject(review)

    reloaded = await trip_service.find_by_id(trip.id)
    assert reloaded.ratings.count == 0
    assert await review_service.find_by_item(trip.id) == []
    assert len(await review_service.find_by_item(trip.id, include_unapproved=True)) == 1


@pytest.mark.asyncio
async def test_moderating_twice_is_rejected(review_service, trip_service):
    trip = await trip_service.create({"title": "Murchison", "description": "Falls"})
    review = (await review_service.submit(_review(trip.id))).model
    await review_service.approve(review)

    with pytest.raises(InvalidStatusTransitionError):
        await review_service.approve(review)
    with pytest.raises(InvalidStatusTransitionError):
        await review_service.reject(review)

    assert (await trip_service.find_by_id(trip.id)).ratings.count == 1


@pytest.mark.asyncio
async def test_approve_for_missing_item_leaves_review_pending(review_service, trip_service):
    review = (await review_service.submit(_review("ghost-trip"))).model

    with pytest.raises(NotFoundError):
        await review_service.approve(review)

    stored = await review_service.find_by_id(review.id)
    assert stored.moderation_status == "pending"
    assert stored.version == 1

    await trip_service.create({"id": "ghost-trip", "title": "Found", "description": "Late listing"})
    await review_service.approve(review)
    assert (await trip_service.find_by_id("ghost-trip")).ratings.count == 1


@pytest.mark.asyncio
async def test_approve_folds_rating_into_accommodation(review_service, accommodation_service):
    listing = await accommodation_service.create(_listing())
    review = (await review_service.submit(_review(listing.id, rating=3, item_type="accommodation"))).model

    await review_service.approve(review)

    reloaded = await accommodation_service.find_by_id(listing.id)
    assert reloaded.rating.average == 3
    assert reloaded.rating.count == 1


@pytest.mark.asyncio
async def test_mark_helpful_and_find_by_user(review_service):
    review = (await review_service.submit(_review("trip-1"))).model

    await review_service.mark_helpful(review)
    await review_service.mark_helpful(review)

    [mine] = await review_service.find_by_user("user-1")
    assert mine.helpful_votes == 2


@pytest.mark.asyncio
async def test_accommodation_archive_hides_listing(accommodation_service):
    kept = await accommodation_service.create(_listing(featured=True))
    archived = await accommodation_service.create(_listing(title="Old Camp", type="camp"))

    await accommodation_service.delete(archived)

    assert [a.id for a in await accommodation_service.find_all()] == [kept.id]
    assert len(await accommodation_service.find_all(include_archived=True)) == 2
    assert [a.id for a in await accommodation_service.find_by_host("host-1")] == [kept.id]
    assert [a.id for a in await accommodation_service.find_featured()] == [kept.id]
    assert await accommodation_service.search("old camp") == []
    assert (await accommodation_service.find_by_id(archived.id)).status == "archived"


@pytest.mark.asyncio
async def test_accommodation_pricing_is_camel_case(accommodation_service, store):
    listing = await accommodation_service.create(_listing())

    stored = await store.find_by_id("accommodations", listing.id)
    assert stored["hostId"] == "host-1"
    assert stored["pricing"] == {"basePrice": 120, "currency": "USD"}
    assert listing.pricing.base_price == 120


def test_accommodation_validate_fields():
    assert Accommodation(**_listing()).validate_fields().is_valid

    result = Accommodation(type="castle", pricing={"base_price": -5}).validate_fields()
    assert result.errors == [
        "Host ID is required",
        "Title is required",
        "Description is required",
        "Invalid accommodation type",
        "Base price cannot be negative",
    ]


def test_generate_payment_number_format():
    number = generate_payment_number(datetime(2026, 10, 19, tzinfo=timezone.utc))

    assert re.fullmatch(r"PAY261019\d{6}", number)


@pytest.mark.asyncio
async def test_create_assigns_payment_number(payment_service):
    payment = await payment_service.create({"booking_id": "b1", "user_id": "u1", "amount": 200})

    assert payment.payment_number.startswith("PAY")
    found = await payment_service.find_by_payment_number(payment.payment_number)
    assert found.id == payment.id
    assert [p.id for p in await payment_service.find_by_booking("b1")] == [payment.id]


@pytest.mark.asyncio
async def test_partial_then_full_refund(payment_service):
    payment = await payment_service.create(
        {"booking_id": "b1", "user_id": "u1", "amount": 200, "status": "completed"}
    )

    await payment_service.add_refund(payment, 50, "late arrival")
    assert payment.status == "partially_refunded"
    assert payment.refundable_amount == 150

    await payment_service.add_refund(payment, 150)
    stored = await payment_service.find_by_id(payment.id)
    assert stored.status == "refunded"
    assert stored.refunded_total == 200
    assert [r.amount for r in stored.refunds] == [50, 150]
    assert stored.refunds[0].reason == "late arrival"
    assert [h.status for h in stored.status_history] == ["completed", "partially_refunded"]


@pytest.mark.parametrize("amount", [0, -10, 250.01])
@pytest.mark.asyncio
async def test_refund_outside_refundable_amount_is_rejected(payment_service, amount):
    payment = await payment_service.create({"booking_id": "b1", "user_id": "u1", "amount": 250})

    with pytest.raises(RefundExceedsAmountError) as exc_info:
        await payment_service.add_refund(payment, amount)

    assert exc_info.value.status_code == 422
    stored = await payment_service.find_by_id(payment.id)
    assert stored.refunds == []
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_update_status_keeps_history(payment_service):
    payment = await payment_service.create({"booking_id": "b1", "user_id": "u1", "amount": 80})

    await payment_service.update_status(payment, "processing")
    await payment_service.update_status(payment, "failed", reason="card declined")

    stored = await payment_service.find_by_id(payment.id)
    assert stored.status == "failed"
    assert stored.failure_reason == "card declined"
    assert [h.status for h in stored.status_history] == ["pending", "processing"]
    assert [p.id for p in await payment_service.find_by_user("u1", status="failed")] == [payment.id]
    assert await payment_service.find_by_user("u1", status="completed") == []


def test_payment_validate_fields():
    assert Payment(booking_id="b1", user_id="u1", amount=10).validate_fields().is_valid

    result = Payment(amount=0, currency="XYZ", status="lost").validate_fields()
    assert result.errors == [
        "Booking ID is required",
        "User ID is required",
        "Amount must be greater than 0",
        "Currency must be one of USD, UGX, EUR, GBP, KES, TZS",
        "Invalid payment status",
    ]
