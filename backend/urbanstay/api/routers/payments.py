# urbanstay/api/routers/payments.py
from fastapi import APIRouter

from urbanstay.api.dependencies import AdminUser, DbSession, SellerUser
from urbanstay.db import crud_payments
from urbanstay.schemas.payment import PaymentAdminOut, PaymentOut
from urbanstay.schemas.property import PropertyDetail
from urbanstay.services import payments as payment_service

router = APIRouter()


@router.get("/pricing")
async def get_pricing():
    return {"success": True, "data": payment_service.pricing()}


@router.post("/feature/{property_id}")
async def feature_property(property_id: int, current_user: SellerUser, db: DbSession):
    """
    Mock checkout: the payment is captured on the spot and the listing is
    featured for the plan duration.
    """
    payment = await payment_service.feature_property(db, property_id, current_user)
    return {
        "success": True,
        "message": "Payment successful. Your property is now featured.",
        "data": {
            "property": PropertyDetail.model_validate(payment.property),
            "transaction": {
                "transaction_id": payment.transaction_id,
                "amount": payment.amount,
                "currency": payment.currency,
                "status": payment.status,
                "plan": payment.plan,
                "featured_until": payment.featured_until,
            },
        },
    }


@router.get("/my")
async def my_payments(current_user: SellerUser, db: DbSession):
    items = await crud_payments.list_payments(db, seller_id=current_user.id)
    return {
        "success": True,
        "count": len(items),
        "data": [PaymentOut.model_validate(p) for p in items],
    }


@router.get("")
async def all_payments(current_user: AdminUser, db: DbSession):
    items = await crud_payments.list_payments(db)
    return {
        "success": True,
        "count": len(items),
        "total_revenue": await crud_payments.total_revenue(db),
        "data": [PaymentAdminOut.model_validate(p) for p in items],
    }
