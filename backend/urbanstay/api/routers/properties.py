# urbanstay/api/routers/properties.py
import logging
from typing import Optional

from fastapi import APIRouter, Query, status

from urbanstay.api.dependencies import AdminUser, CurrentUser, DbSession, SellerUser
from urbanstay.db import crud_properties
from urbanstay.db.enums import Furnishing, ListingType, PropertyType
from urbanstay.db.models import User
from urbanstay.exceptions.custom import AuthorizationError, NotFoundError
from urbanstay.schemas.property import (
    FeatureRequest,
    PropertyBase,
    PropertyCreate,
    PropertyDetail,
    PropertyUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _pages(total: int, per_page: int) -> int:
    return (total + per_page - 1) // per_page


def _can_manage(prop, user: User) -> bool:
    return prop.owner_id == user.id or user.role == "admin"


async def _load(db, prop_id: int):
    prop = await crud_properties.get_property(db, prop_id)
    if not prop:
        raise NotFoundError("Property")
    return prop


@router.get("")
async def list_properties(
    db: DbSession,
    status: Optional[str] = None,
    listing_type: Optional[ListingType] = None,
    property_type: Optional[PropertyType] = None,
    city: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    bedrooms: Optional[int] = None,
    min_area: Optional[float] = None,
    max_area: Optional[float] = None,
    furnishing: Optional[Furnishing] = None,
    amenities: Optional[str] = Query(None, description="comma separated"),
    featured: bool = False,
    verified: bool = False,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
):
    """
    Public listings. Without ``status`` only available, sold and rented
    listings are returned; ``status=all`` lifts the filter.
    """
    filters = {
        "status": status,
        "listing_type": listing_type.value if listing_type else None,
        "property_type": property_type.value if property_type else None,
        "city": city,
        "min_price": min_price,
        "max_price": max_price,
        "bedrooms": bedrooms,
        "min_area": min_area,
        "max_area": max_area,
        "furnishing": furnishing.value if furnishing else None,
        "amenities": amenities.split(",") if amenities else [],
        "featured": featured,
        "verified": verified,
        "search": search,
        "sort": sort,
    }
    items, total = await crud_properties.list_properties(
        db,
        filters=filters,
        page=page,
        per_page=limit,
    )
    return {
        "success": True,
        "count": len(items),
        "total": total,
        "page": page,
        "pages": _pages(total, limit),
        "data": [PropertyDetail.model_validate(p) for p in items],
    }


@router.get("/featured")
async def featured_properties(db: DbSession):
    items = await crud_properties.list_featured(db, limit=8)
    return {
        "success": True,
        "count": len(items),
        "data": [PropertyDetail.model_validate(p) for p in items],
    }


@router.get("/stats/cities")
async def city_stats(db: DbSession):
    return {"success": True, "data": await crud_properties.city_stats(db, limit=10)}


@router.get("/stats/admin")
async def admin_stats(current_user: AdminUser, db: DbSession):
    stats = await crud_properties.admin_stats(db)
    stats["recent"] = [PropertyBase.model_validate(p) for p in stats["recent"]]
    return {"success": True, "data": stats}


@router.get("/user/my")
async def my_properties(
    current_user: CurrentUser,
    db: DbSession,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """
    Seller dashboard: every listing the caller owns plus per-status counts.
    """
    items, total = await crud_properties.list_properties_for_owner(
        db,
        current_user.id,
        status=status,
        page=page,
        per_page=limit,
    )
    stats = await crud_properties.owner_stats(db, current_user.id)
    return {
        "success": True,
        "count": len(items),
        "total": total,
        "page": page,
        "pages": _pages(total, limit),
        "stats": stats,
        "data": [PropertyBase.model_validate(p) for p in items],
    }


@router.get("/slug/{slug}")
async def property_by_slug(slug: str, db: DbSession):
    prop = await crud_properties.get_property_by_slug(db, slug)
    if not prop:
        raise NotFoundError("Property")
    prop = await crud_properties.increment_views(db, prop.id)
    return {"success": True, "data": PropertyDetail.model_validate(prop)}


@router.get("/{prop_id}")
async def property_detail(prop_id: int, db: DbSession):
    prop = await crud_properties.increment_views(db, prop_id)
    if not prop:
        raise NotFoundError("Property")
    return {"success": True, "data": PropertyDetail.model_validate(prop)}


@router.get("/{prop_id}/similar")
async def similar_properties(prop_id: int, db: DbSession):
    prop = await _load(db, prop_id)
    items = await crud_properties.list_similar(db, prop, limit=6)
    return {
        "success": True,
        "count": len(items),
        "data": [PropertyDetail.model_validate(p) for p in items],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_property(body: PropertyCreate, current_user: SellerUser, db: DbSession):
    prop = await crud_properties.create_property(
        db,
        owner_id=current_user.id,
        **body.model_dump(mode="json"),
    )
    logger.info("Property %s created by user %s", prop.id, current_user.id)
    return {
        "success": True,
        "message": "Property created successfully",
        "data": PropertyDetail.model_validate(prop),
    }


@router.put("/{prop_id}")
async def update_property(prop_id: int, body: PropertyUpdate, current_user: CurrentUser, db: DbSession):
    prop = await _load(db, prop_id)
    if not _can_manage(prop, current_user):
        raise AuthorizationError("Not authorized to update this property")

    prop = await crud_properties.update_property(db, prop, body.model_dump(mode="json", exclude_unset=True))
    return {
        "success": True,
        "message": "Property updated successfully",
        "data": PropertyDetail.model_validate(prop),
    }


@router.delete("/{prop_id}")
async def delete_property(prop_id: int, current_user: CurrentUser, db: DbSession):
    prop = await _load(db, prop_id)
    if not _can_manage(prop, current_user):
        raise AuthorizationError("Not authorized to delete this property")

    await crud_properties.delete_property(db, prop)
    logger.info("Property %s deleted by user %s", prop_id, current_user.id)
    return {"success": True, "message": "Property deleted successfully"}


@router.put("/{prop_id}/verify")
async def verify_property(prop_id: int, current_user: AdminUser, db: DbSession):
    prop = await _load(db, prop_id)
    prop = await crud_properties.verify_property(db, prop, current_user.id)
    return {
        "success": True,
        "message": "Property verified successfully",
        "data": PropertyDetail.model_validate(prop),
    }


@router.put("/{prop_id}/feature")
async def feature_property(
    prop_id: int,
    current_user: AdminUser,
    db: DbSession,
    body: Optional[FeatureRequest] = None,
):
    """
    Admin override: feature a listing without a payment record.
    """
    days = body.days if body else 30
    prop = await _load(db, prop_id)
    prop = await crud_properties.mark_featured(db, prop, days)
    return {
        "success": True,
        "message": f"Property featured for {days} days",
        "data": PropertyDetail.model_validate(prop),
    }
