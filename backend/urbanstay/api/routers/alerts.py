# urbanstay/api/routers/alerts.py
from fastapi import APIRouter, status

from urbanstay.api.dependencies import CurrentUser, DbSession
from urbanstay.core.config import get_settings
from urbanstay.db import crud_alerts
from urbanstay.exceptions.custom import NotFoundError, ValidationError
from urbanstay.schemas.alert import AlertCreate, AlertOut, AlertUpdate
from urbanstay.schemas.property import PropertyDetail

router = APIRouter()


async def _load(db, alert_id: int, user_id: int):
    alert = await crud_alerts.get_alert(db, alert_id, user_id)
    if not alert:
        raise NotFoundError("Alert")
    return alert


async def _check_limit(db, user_id: int) -> None:
    limit = get_settings().MAX_ACTIVE_ALERTS
    if await crud_alerts.count_active(db, user_id) >= limit:
        raise ValidationError(f"You can only have {limit} active alerts")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_alert(body: AlertCreate, current_user: CurrentUser, db: DbSession):
    await _check_limit(db, current_user.id)
    alert = await crud_alerts.create_alert(
        db,
        user_id=current_user.id,
        **body.model_dump(mode="json"),
    )
    return {
        "success": True,
        "message": "Alert created successfully",
        "data": AlertOut.model_validate(alert),
    }


@router.get("")
async def list_alerts(current_user: CurrentUser, db: DbSession):
    items = await crud_alerts.list_alerts(db, current_user.id)
    return {
        "success": True,
        "count": len(items),
        "data": [AlertOut.model_validate(a) for a in items],
    }


@router.get("/{alert_id}")
async def get_alert(alert_id: int, current_user: CurrentUser, db: DbSession):
    alert = await _load(db, alert_id, current_user.id)
    return {"success": True, "data": AlertOut.model_validate(alert)}


@router.put("/{alert_id}")
async def update_alert(alert_id: int, body: AlertUpdate, current_user: CurrentUser, db: DbSession):
    alert = await _load(db, alert_id, current_user.id)
    data = body.model_dump(mode="json", exclude_unset=True)

    if data.get("is_active") and not alert.is_active:
        await _check_limit(db, current_user.id)

    min_price = data.get("min_price", alert.min_price)
    max_price = data.get("max_price", alert.max_price)
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("min_price cannot exceed max_price")

    for key in ("name", "property_types", "cities", "frequency", "is_active"):
        # NOT NULL columns: an explicit null leaves them unchanged
        if key in data and data[key] is None:
            del data[key]

    alert = await crud_alerts.update_alert(db, alert, data)
    return {
        "success": True,
        "message": "Alert updated successfully",
        "data": AlertOut.model_validate(alert),
    }


@router.delete("/{alert_id}")
async def delete_alert(alert_id: int, current_user: CurrentUser, db: DbSession):
    alert = await _load(db, alert_id, current_user.id)
    await crud_alerts.delete_alert(db, alert)
    return {"success": True, "message": "Alert deleted successfully"}


@router.put("/{alert_id}/toggle")
async def toggle_alert(alert_id: int, current_user: CurrentUser, db: DbSession):
    alert = await _load(db, alert_id, current_user.id)
    if not alert.is_active:
        await _check_limit(db, current_user.id)

    alert = await crud_alerts.update_alert(db, alert, {"is_active": not alert.is_active})
    return {
        "success": True,
        "message": "Alert activated" if alert.is_active else "Alert paused",
        "data": AlertOut.model_validate(alert),
    }


@router.get("/{alert_id}/matches")
async def alert_matches(alert_id: int, current_user: CurrentUser, db: DbSession):
    alert = await _load(db, alert_id, current_user.id)
    items = await crud_alerts.find_matches(db, alert, limit=20)
    return {
        "success": True,
        "count": len(items),
        "data": [PropertyDetail.model_validate(p) for p in items],
    }
