# urbanstay/db/crud_bookings.py

from datetime import date
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.core.security import generate_confirmation_token
from urbanstay.db.models import Booking


def pending_key(property_id: int, buyer_id: int) -> str:
    return f"{property_id}:{buyer_id}"


async def get_booking(db: AsyncSession, booking_id: int) -> Optional[Booking]:
    res = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def find_pending(db: AsyncSession, property_id: int, buyer_id: int) -> Optional[Booking]:
    res = await db.execute(
        select(Booking).where(
            Booking.property_id == property_id,
            Booking.buyer_id == buyer_id,
            Booking.status == "pending",
        )
    )
    return res.scalars().first()


async def create_booking(
    db: AsyncSession,
    *,
    property_id: int,
    buyer_id: int,
    seller_id: int,
    booking_type: str,
    visit_date: date,
    visit_time: str,
    buyer_message: str = "",
    price_negotiated: Optional[float] = None,
) -> Booking:
    """
    Insert a pending booking. Raises IntegrityError when the buyer already
    holds a pending booking for the property (unique ``pending_key``).
    """
    booking = Booking(
        property_id=property_id,
        buyer_id=buyer_id,
        seller_id=seller_id,
        booking_type=booking_type,
        status="pending",
        visit_date=visit_date,
        visit_time=visit_time,
        buyer_message=buyer_message,
        price_negotiated=price_negotiated,
        confirmation_token=generate_confirmation_token(),
        pending_key=pending_key(property_id, buyer_id),
    )
    db.add(booking)
    await db.commit()
    return await get_booking(db, booking.id)


async def save_booking(db: AsyncSession, booking: Booking) -> Booking:
    # only a pending booking holds the pair's slot
    booking.pending_key = (
        pending_key(booking.property_id, booking.buyer_id) if booking.status == "pending" else None
    )
    db.add(booking)
    await db.commit()
    return await get_booking(db, booking.id)


async def list_bookings_for_user(
    db: AsyncSession,
    user_id: int,
    *,
    role: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Booking]:
    """
    role="buyer" / "seller" narrows to that side; anything else returns
    both. Newest first.
    """
    stmt = select(Booking)
    if role == "buyer":
        stmt = stmt.where(Booking.buyer_id == user_id)
    elif role == "seller":
        stmt = stmt.where(Booking.seller_id == user_id)
    else:
        stmt = stmt.where(or_(Booking.buyer_id == user_id, Booking.seller_id == user_id))

    if status:
        stmt = stmt.where(Booking.status == status)

    stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
    res = await db.execute(stmt)
    return list(res.scalars().all())
