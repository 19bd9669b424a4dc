# urbanstay/api/routers/inquiries.py
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, status

from urbanstay.api.dependencies import CurrentUser, DbSession
from urbanstay.db import crud_inquiries, crud_properties
from urbanstay.db.enums import InquiryStatus
from urbanstay.exceptions.custom import AuthorizationError, NotFoundError, ValidationError
from urbanstay.schemas.inquiry import InquiryCreate, InquiryOut, InquiryReply, InquiryStatusUpdate
from urbanstay.services import mailer

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load(db, inquiry_id: int):
    inquiry = await crud_inquiries.get_inquiry(db, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry")
    return inquiry


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    body: InquiryCreate,
    current_user: CurrentUser,
    db: DbSession,
    background_tasks: BackgroundTasks,
):
    prop = await crud_properties.get_property(db, body.property_id)
    if not prop:
        raise NotFoundError("Property")
    if prop.owner_id == current_user.id:
        raise ValidationError("You cannot inquire about your own property")

    inquiry = await crud_inquiries.create_inquiry(
        db,
        property_id=prop.id,
        sender_id=current_user.id,
        receiver_id=prop.owner_id,
        message=body.message,
        inquiry_type=body.inquiry_type.value,
        preferred_visit_date=body.preferred_visit_date,
        preferred_visit_time=body.preferred_visit_time,
        phone=body.phone or current_user.phone,
        email=body.email or current_user.email,
    )
    logger.info("Inquiry %s sent by user %s for property %s", inquiry.id, current_user.id, prop.id)

    background_tasks.add_task(
        mailer.send_inquiry_email,
        prop.owner.email,
        prop.title,
        inquiry.inquiry_type,
        current_user.name,
        inquiry.email,
        inquiry.phone,
        inquiry.message,
        inquiry.preferred_visit_date.isoformat() if inquiry.preferred_visit_date else None,
        inquiry.preferred_visit_time,
    )
    return {
        "success": True,
        "message": "Inquiry sent successfully",
        "data": InquiryOut.model_validate(inquiry),
    }


@router.get("/sent")
async def sent_inquiries(current_user: CurrentUser, db: DbSession):
    items = await crud_inquiries.list_sent(db, current_user.id)
    return {
        "success": True,
        "count": len(items),
        "data": [InquiryOut.model_validate(i) for i in items],
    }


@router.get("/received")
async def received_inquiries(
    current_user: CurrentUser,
    db: DbSession,
    status: Optional[InquiryStatus] = None,
):
    items = await crud_inquiries.list_received(
        db,
        current_user.id,
        status=status.value if status else None,
    )
    return {
        "success": True,
        "count": len(items),
        "unread": sum(1 for i in items if not i.is_read),
        "data": [InquiryOut.model_validate(i) for i in items],
    }


@router.get("/{inquiry_id}")
async def get_inquiry(inquiry_id: int, current_user: CurrentUser, db: DbSession):
    """
    Visible to sender and receiver. The receiver opening it marks it read.
    """
    inquiry = await _load(db, inquiry_id)
    if current_user.id not in (inquiry.sender_id, inquiry.receiver_id):
        raise AuthorizationError("Not authorized to view this inquiry")

    if current_user.id == inquiry.receiver_id and not inquiry.is_read:
        inquiry = await crud_inquiries.mark_read(db, inquiry)
    return {"success": True, "data": InquiryOut.model_validate(inquiry)}


@router.post("/{inquiry_id}/respond")
async def respond_to_inquiry(
    inquiry_id: int,
    body: InquiryReply,
    current_user: CurrentUser,
    db: DbSession,
):
    inquiry = await _load(db, inquiry_id)
    if current_user.id not in (inquiry.sender_id, inquiry.receiver_id):
        raise AuthorizationError("Not authorized to respond to this inquiry")

    new_status = None
    if current_user.id == inquiry.receiver_id and inquiry.status == InquiryStatus.PENDING.value:
        new_status = InquiryStatus.RESPONDED.value

    inquiry = await crud_inquiries.add_response(
        db,
        inquiry,
        responder_id=current_user.id,
        message=body.message,
        new_status=new_status,
    )
    return {
        "success": True,
        "message": "Response added successfully",
        "data": InquiryOut.model_validate(inquiry),
    }


@router.put("/{inquiry_id}/status")
async def update_inquiry_status(
    inquiry_id: int,
    body: InquiryStatusUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    inquiry = await _load(db, inquiry_id)
    if current_user.id != inquiry.receiver_id:
        raise AuthorizationError("Only the property owner can update inquiry status")

    inquiry = await crud_inquiries.set_status(db, inquiry, body.status.value)
    return {
        "success": True,
        "message": "Inquiry status updated",
        "data": InquiryOut.model_validate(inquiry),
    }
