# urbanstay/db/crud_alerts.py

from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.db.models import Alert, Property


async def get_alert(db: AsyncSession, alert_id: int, user_id: int) -> Optional[Alert]:
    """Scoped to the owner; another user's alert reads as missing."""
    res = await db.execute(select(Alert).where(Alert.id == alert_id, Alert.user_id == user_id))
    return res.scalar_one_or_none()


async def list_alerts(db: AsyncSession, user_id: int) -> List[Alert]:
    res = await db.execute(
        select(Alert).where(Alert.user_id == user_id).order_by(Alert.created_at.desc(), Alert.id.desc())
    )
    return list(res.scalars().all())


async def count_active(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(
        select(func.count(Alert.id)).where(Alert.user_id == user_id, Alert.is_active.is_(True))
    )
    return int(res.scalar_one())


async def create_alert(db: AsyncSession, **kwargs) -> Alert:
    alert = Alert(**kwargs)
    db.add(alert)
    await db.commit()
    await db.refresh(alert)
    return alert


async def update_alert(db: AsyncSession, alert: Alert, data: dict) -> Alert:
    for k, v in data.items():
        setattr(alert, k, v)
    db.add(alert)
    await db.commit()
    await db.refresh(alert)
    return alert


async def delete_alert(db: AsyncSession, alert: Alert) -> None:
    await db.delete(alert)
    await db.commit()


async def find_matches(db: AsyncSession, alert: Alert, limit: int = 20) -> List[Property]:
    """
    Available listings satisfying the alert's criteria, newest first.
    Empty criteria lists match everything.
    """
    stmt = select(Property).where(Property.status == "available")

    if alert.listing_type:
        stmt = stmt.where(Property.listing_type == alert.listing_type)
    if alert.property_types:
        stmt = stmt.where(Property.property_type.in_(alert.property_types))
    if alert.cities:
        stmt = stmt.where(func.lower(Property.city).in_([c.strip().lower() for c in alert.cities]))
    if alert.min_price is not None:
        stmt = stmt.where(Property.price >= alert.min_price)
    if alert.max_price is not None:
        stmt = stmt.where(Property.price <= alert.max_price)
    if alert.min_bedrooms is not None:
        stmt = stmt.where(Property.bedrooms >= alert.min_bedrooms)

    stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc()).limit(limit)
    res = await db.execute(stmt)
    return list(res.scalars().all())
