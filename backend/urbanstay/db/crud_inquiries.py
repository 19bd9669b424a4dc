# urbanstay/db/crud_inquiries.py

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.db.models import Inquiry, InquiryResponse, utcnow


async def get_inquiry(db: AsyncSession, inquiry_id: int) -> Optional[Inquiry]:
    res = await db.execute(
        select(Inquiry)
        .where(Inquiry.id == inquiry_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def create_inquiry(db: AsyncSession, **kwargs) -> Inquiry:
    inquiry = Inquiry(**kwargs)
    db.add(inquiry)
    await db.commit()
    return await get_inquiry(db, inquiry.id)


async def list_sent(db: AsyncSession, sender_id: int) -> List[Inquiry]:
    res = await db.execute(
        select(Inquiry)
        .where(Inquiry.sender_id == sender_id)
        .order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
    )
    return list(res.scalars().all())


async def list_received(
    db: AsyncSession,
    receiver_id: int,
    status: Optional[str] = None,
) -> List[Inquiry]:
    stmt = select(Inquiry).where(Inquiry.receiver_id == receiver_id)
    if status:
        stmt = stmt.where(Inquiry.status == status)
    stmt = stmt.order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def mark_read(db: AsyncSession, inquiry: Inquiry) -> Inquiry:
    inquiry.is_read = True
    inquiry.read_at = utcnow()
    db.add(inquiry)
    await db.commit()
    return await get_inquiry(db, inquiry.id)


async def add_response(
    db: AsyncSession,
    inquiry: Inquiry,
    responder_id: int,
    message: str,
    new_status: Optional[str] = None,
) -> Inquiry:
    db.add(InquiryResponse(inquiry_id=inquiry.id, responder_id=responder_id, message=message))
    if new_status:
        inquiry.status = new_status
        db.add(inquiry)
    await db.commit()
    return await get_inquiry(db, inquiry.id)


async def set_status(db: AsyncSession, inquiry: Inquiry, status: str) -> Inquiry:
    inquiry.status = status
    db.add(inquiry)
    await db.commit()
    return await get_inquiry(db, inquiry.id)
