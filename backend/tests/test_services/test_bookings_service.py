from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from urbanstay.db import crud_bookings
from urbanstay.db.models import Booking
from urbanstay.exceptions.custom import NotFoundError, ValidationError
from urbanstay.services import bookings as booking_service


async def test_pending_key_follows_status(db, make_user, make_property):
    buyer = await make_user("user")
    seller = await make_user("seller")
    prop = await make_property(seller)

    booking = await booking_service.create_booking(
        db,
        buyer,
        property_id=prop.id,
        booking_type="visit",
        visit_date=date(2025, 6, 1),
        visit_time=" 10:00-11:00 ",
    )
    assert booking.pending_key == f"{prop.id}:{buyer.id}"
    assert booking.visit_time == "10:00-11:00"
    assert booking.seller_id == seller.id

    booking = await booking_service.confirm_seller(db, booking.id, seller)
    assert booking.pending_key is None
    assert booking.stage == "awaiting_buyer"


async def test_unique_pending_key_blocks_second_insert(db, make_user, make_property):
    buyer = await make_user("user")
    prop = await make_property(await make_user("seller"))
    kwargs = dict(
        property_id=prop.id,
        buyer_id=buyer.id,
        seller_id=prop.owner_id,
        booking_type="visit",
        visit_date=date(2025, 6, 1),
        visit_time="10:00",
    )

    await crud_bookings.create_booking(db, **kwargs)
    # bypassing the lookup, as a concurrent request would
    with pytest.raises(IntegrityError):
        await crud_bookings.create_booking(db, **kwargs)


async def test_race_loser_gets_duplicate_error(db, make_user, make_property, monkeypatch):
    buyer = await make_user("user")
    prop = await make_property(await make_user("seller"))

    async def _no_pending(*args, **kwargs):
        return None

    await booking_service.create_booking(
        db, buyer, property_id=prop.id, booking_type="visit", visit_date=date(2025, 6, 1), visit_time="10:00"
    )
    monkeypatch.setattr(crud_bookings, "find_pending", _no_pending)
    with pytest.raises(ValidationError, match="already have a pending booking"):
        await booking_service.create_booking(
            db, buyer, property_id=prop.id, booking_type="visit", visit_date=date(2025, 6, 2), visit_time="11:00"
        )


async def test_missing_property(db, make_user):
    buyer = await make_user("user")
    with pytest.raises(NotFoundError):
        await booking_service.create_booking(
            db, buyer, property_id=123, booking_type="visit", visit_date=date(2025, 6, 1), visit_time="10:00"
        )


def test_booking_row_exposes_workflow_state():
    booking = Booking(status="confirmed", buyer_confirmed_at=None)
    assert booking.stage == "awaiting_buyer"
    assert Booking.property.property.mapper.class_.__name__ == "Property"
