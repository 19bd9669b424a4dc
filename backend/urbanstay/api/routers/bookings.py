# urbanstay/api/routers/bookings.py
from typing import Literal, Optional

from fastapi import APIRouter, BackgroundTasks, status

from urbanstay.api.dependencies import CurrentUser, DbSession
from urbanstay.db.enums import BookingStatus
from urbanstay.schemas.booking import BookingCreate, BookingOut, SellerConfirm
from urbanstay.services import bookings as booking_service
from urbanstay.services import mailer

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    current_user: CurrentUser,
    db: DbSession,
    background_tasks: BackgroundTasks,
):
    booking = await booking_service.create_booking(
        db,
        current_user,
        property_id=body.property_id,
        booking_type=body.booking_type.value,
        visit_date=body.visit_date,
        visit_time=body.visit_time,
        message=body.message,
        price_negotiated=body.price_negotiated,
    )

    # runs after the response; failures are logged by the mailer
    background_tasks.add_task(
        mailer.send_booking_request_email,
        booking.seller.email,
        booking.property.title,
        current_user.name,
        booking.booking_type,
        booking.visit_date.isoformat(),
        booking.visit_time,
    )
    return {
        "success": True,
        "message": "Booking request sent successfully",
        "data": BookingOut.model_validate(booking),
    }


@router.get("")
async def list_bookings(
    current_user: CurrentUser,
    db: DbSession,
    role: Optional[Literal["buyer", "seller"]] = None,
    status: Optional[BookingStatus] = None,
):
    """
    role=buyer / role=seller narrows to one side of the booking;
    without it both sides are returned. Newest first.
    """
    items = await booking_service.list_for_user(
        db,
        current_user,
        role=role,
        status=status.value if status else None,
    )
    return {
        "success": True,
        "count": len(items),
        "data": [BookingOut.model_validate(b) for b in items],
    }


@router.get("/{booking_id}")
async def get_booking(booking_id: int, current_user: CurrentUser, db: DbSession):
    booking = await booking_service.get_for_party(db, booking_id, current_user)
    return {"success": True, "data": BookingOut.model_validate(booking)}


@router.put("/{booking_id}/confirm-seller")
async def confirm_seller(
    booking_id: int,
    current_user: CurrentUser,
    db: DbSession,
    body: Optional[SellerConfirm] = None,
):
    booking = await booking_service.confirm_seller(
        db,
        booking_id,
        current_user,
        note=body.note if body else None,
    )
    return {
        "success": True,
        "message": "Booking confirmed by seller",
        "data": BookingOut.model_validate(booking),
    }


@router.put("/{booking_id}/confirm-buyer")
async def confirm_buyer(booking_id: int, current_user: CurrentUser, db: DbSession):
    booking = await booking_service.confirm_buyer(db, booking_id, current_user)
    return {
        "success": True,
        "message": "Booking confirmed by buyer",
        "data": BookingOut.model_validate(booking),
    }


@router.put("/{booking_id}/cancel")
async def cancel_booking(booking_id: int, current_user: CurrentUser, db: DbSession):
    booking = await booking_service.cancel(db, booking_id, current_user)
    return {
        "success": True,
        "message": "Booking cancelled",
        "data": BookingOut.model_validate(booking),
    }


@router.put("/{booking_id}/complete")
async def complete_booking(booking_id: int, current_user: CurrentUser, db: DbSession):
    booking = await booking_service.complete(db, booking_id, current_user)
    return {
        "success": True,
        "message": "Booking marked as completed",
        "data": BookingOut.model_validate(booking),
    }
