# urbanstay/services/payments.py
#
# Mock checkout for the "Featured Listing" plan. No gateway is called: every
# purchase is captured immediately and recorded for the admin audit trail.

import logging
import time
from datetime import timedelta
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.core.config import get_settings
from urbanstay.db import crud_payments, crud_properties
from urbanstay.db.models import Payment, User, utcnow
from urbanstay.exceptions.custom import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

BENEFITS = [
    "Highlighted in Featured Properties section on the homepage",
    "Priority placement in search results",
    "Star badge on your listing",
]


def pricing() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "amount": settings.FEATURED_PRICE,
        "currency": settings.FEATURED_CURRENCY,
        "duration": f"{settings.FEATURED_DAYS} days",
        "label": "Featured Listing",
        "benefits": BENEFITS + [f"{settings.FEATURED_DAYS} days of featured visibility"],
    }


def mock_transaction_id() -> str:
    return f"TXN-MOCK-{int(time.time() * 1000)}"


async def feature_property(db: AsyncSession, property_id: int, user: User) -> Payment:
    settings = get_settings()

    prop = await crud_properties.get_property(db, property_id)
    if not prop:
        raise NotFoundError("Property")

    if prop.owner_id != user.id and user.role != "admin":
        raise AuthorizationError("You do not have permission to feature this property.")

    now = utcnow()
    if prop.is_featured and prop.featured_until and prop.featured_until > now:
        raise ValidationError(
            f"This property is already featured until {prop.featured_until.date().isoformat()}."
        )

    payment = await crud_payments.feature_property_with_payment(
        db,
        prop=prop,
        transaction_id=mock_transaction_id(),
        seller_id=user.id,
        amount=settings.FEATURED_PRICE,
        currency=settings.FEATURED_CURRENCY,
        plan=f"Featured Listing ({settings.FEATURED_DAYS} days)",
        featured_until=now + timedelta(days=settings.FEATURED_DAYS),
    )
    logger.info(
        "Property %s featured until %s by user %s (%s)",
        prop.id, payment.featured_until.isoformat(), user.id, payment.transaction_id,
    )
    return payment
