# urbanstay/services/bookings.py
#
# Booking operations: load, authorize and transition through
# booking_workflow.transition, then persist. Routers stay thin.

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.core.config import get_settings
from urbanstay.db import crud_bookings, crud_properties
from urbanstay.db.models import Booking, User, utcnow
from urbanstay.exceptions.custom import AuthorizationError, NotFoundError, ValidationError
from urbanstay.services.booking_workflow import (
    Action,
    Party,
    party_of,
    transition,
)

logger = logging.getLogger(__name__)

DUPLICATE_PENDING = "You already have a pending booking for this property"


async def create_booking(
    db: AsyncSession,
    buyer: User,
    *,
    property_id: int,
    booking_type: str,
    visit_date: date,
    visit_time: str,
    message: Optional[str] = None,
    price_negotiated: Optional[float] = None,
) -> Booking:
    prop = await crud_properties.get_property(db, property_id)
    if not prop:
        raise NotFoundError("Property")

    if prop.owner_id == buyer.id:
        raise ValidationError("You cannot book your own property")

    if await crud_bookings.find_pending(db, property_id, buyer.id):
        raise ValidationError(DUPLICATE_PENDING)

    try:
        booking = await crud_bookings.create_booking(
            db,
            property_id=prop.id,
            buyer_id=buyer.id,
            # snapshot: seller at booking time
            seller_id=prop.owner_id,
            booking_type=booking_type,
            visit_date=visit_date,
            visit_time=visit_time.strip(),
            buyer_message=message or "",
            price_negotiated=price_negotiated,
        )
    except IntegrityError:
        # lost the race against a concurrent create for the same pair
        await db.rollback()
        raise ValidationError(DUPLICATE_PENDING)

    logger.info(
        "Booking %s created: property=%s buyer=%s seller=%s type=%s",
        booking.id, prop.id, buyer.id, prop.owner_id, booking_type,
    )
    return booking


async def _load(db: AsyncSession, booking_id: int) -> Booking:
    booking = await crud_bookings.get_booking(db, booking_id)
    if not booking:
        raise NotFoundError("Booking")
    return booking


async def _apply(
    db: AsyncSession,
    booking_id: int,
    user: User,
    action: Action,
    note: Optional[str] = None,
) -> Booking:
    booking = await _load(db, booking_id)
    party = party_of(user.id, booking.buyer_id, booking.seller_id)
    before = booking.state
    after = transition(before, action, party, strict=get_settings().BOOKING_STRICT_TRANSITIONS)

    booking.status = after.status.value
    now = utcnow()
    if action is Action.CONFIRM_SELLER:
        booking.seller_confirmed_at = now
        if note:
            booking.seller_confirmation_note = note
        if not after.buyer_acked:
            # reconfirming a cancelled or completed booking asks the buyer again
            booking.buyer_confirmed_at = None
    elif action is Action.CONFIRM_BUYER and booking.buyer_confirmed_at is None:
        booking.buyer_confirmed_at = now

    booking = await crud_bookings.save_booking(db, booking)
    logger.info(
        "Booking %s %s by %s %s: %s -> %s",
        booking.id, action.value, party.value, user.id, before.stage, after.stage,
    )
    return booking


async def confirm_seller(db: AsyncSession, booking_id: int, user: User, note: Optional[str] = None) -> Booking:
    return await _apply(db, booking_id, user, Action.CONFIRM_SELLER, note=note)


async def confirm_buyer(db: AsyncSession, booking_id: int, user: User) -> Booking:
    return await _apply(db, booking_id, user, Action.CONFIRM_BUYER)


async def cancel(db: AsyncSession, booking_id: int, user: User) -> Booking:
    return await _apply(db, booking_id, user, Action.CANCEL)


async def complete(db: AsyncSession, booking_id: int, user: User) -> Booking:
    return await _apply(db, booking_id, user, Action.COMPLETE)


async def get_for_party(db: AsyncSession, booking_id: int, user: User) -> Booking:
    booking = await _load(db, booking_id)
    if party_of(user.id, booking.buyer_id, booking.seller_id) is Party.OUTSIDER:
        raise AuthorizationError("Not authorized to view this booking")
    return booking


async def list_for_user(
    db: AsyncSession,
    user: User,
    *,
    role: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Booking]:
    return await crud_bookings.list_bookings_for_user(db, user.id, role=role, status=status)

