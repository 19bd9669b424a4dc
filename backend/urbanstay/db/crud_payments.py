# urbanstay/db/crud_payments.py

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.db.models import Payment, Property


async def feature_property_with_payment(
    db: AsyncSession,
    *,
    prop: Property,
    transaction_id: str,
    seller_id: int,
    amount: int,
    currency: str,
    plan: str,
    featured_until: datetime,
    status: str = "captured",
    method: str = "mock",
) -> Payment:
    """
    Flag the listing as featured and write the audit row in one commit.
    """
    prop.is_featured = True
    prop.featured_until = featured_until
    db.add(prop)

    payment = Payment(
        transaction_id=transaction_id,
        property_id=prop.id,
        seller_id=seller_id,
        amount=amount,
        currency=currency,
        status=status,
        method=method,
        plan=plan,
        featured_until=featured_until,
    )
    db.add(payment)
    await db.commit()
    res = await db.execute(
        select(Payment)
        .where(Payment.id == payment.id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one()


async def list_payments(db: AsyncSession, seller_id: Optional[int] = None) -> List[Payment]:
    stmt = select(Payment)
    if seller_id is not None:
        stmt = stmt.where(Payment.seller_id == seller_id)
    stmt = stmt.order_by(Payment.created_at.desc(), Payment.id.desc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def total_revenue(db: AsyncSession) -> int:
    res = await db.execute(select(func.coalesce(func.sum(Payment.amount), 0)))
    return int(res.scalar_one())
