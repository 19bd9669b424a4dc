# urbanstay/db/crud_properties.py
import re
import secrets
from datetime import datetime, timedelta
from typing import Tuple, List, Dict, Any, Optional

from sqlalchemy import select, func, and_, or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.db.models import Property, PropertyAmenity, utcnow

# status=None on the public listing means "everything a buyer may see"
PUBLIC_STATUSES = ("available", "sold", "rented")

SORTS = {
    "price_low": (Property.price.asc(), Property.id.asc()),
    "price_high": (Property.price.desc(), Property.id.desc()),
    "newest": (Property.created_at.desc(), Property.id.desc()),
    "oldest": (Property.created_at.asc(), Property.id.asc()),
    "popular": (Property.views.desc(), Property.id.desc()),
}
DEFAULT_SORT = (Property.is_featured.desc(), Property.created_at.desc(), Property.id.desc())

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def make_slug(title: str) -> str:
    base = _SLUG_STRIP.sub("-", title.lower()).strip("-")[:280] or "property"
    return f"{base}-{secrets.token_hex(3)}"


def _filter_clauses(filters: Dict[str, Any], now: datetime) -> list:
    clauses = []

    status = filters.get("status")
    if status and status != "all":
        clauses.append(Property.status == status)
    elif not status:
        clauses.append(Property.status.in_(PUBLIC_STATUSES))

    if filters.get("listing_type"):
        clauses.append(Property.listing_type == filters["listing_type"])
    if filters.get("property_type"):
        clauses.append(Property.property_type == filters["property_type"])
    if filters.get("city"):
        clauses.append(func.lower(Property.city).contains(filters["city"].strip().lower(), autoescape=True))
    if filters.get("min_price") is not None:
        clauses.append(Property.price >= float(filters["min_price"]))
    if filters.get("max_price") is not None:
        clauses.append(Property.price <= float(filters["max_price"]))
    if filters.get("bedrooms") is not None:
        clauses.append(Property.bedrooms == int(filters["bedrooms"]))
    if filters.get("min_area") is not None:
        clauses.append(Property.carpet_area >= float(filters["min_area"]))
    if filters.get("max_area") is not None:
        clauses.append(Property.carpet_area <= float(filters["max_area"]))
    if filters.get("furnishing"):
        clauses.append(Property.furnishing == filters["furnishing"])

    amenities = [a.strip() for a in filters.get("amenities") or [] if a and a.strip()]
    if amenities:
        # listing must carry every requested amenity
        wanted = sorted(set(amenities))
        having_all = (
            select(PropertyAmenity.property_id)
            .where(PropertyAmenity.name.in_(wanted))
            .group_by(PropertyAmenity.property_id)
            .having(func.count(func.distinct(PropertyAmenity.name)) == len(wanted))
        )
        clauses.append(Property.id.in_(having_all))

    if filters.get("featured"):
        clauses.append(Property.is_featured.is_(True))
        clauses.append(Property.featured_until >= now)
    if filters.get("verified"):
        clauses.append(Property.is_verified.is_(True))

    if filters.get("search"):
        term = filters["search"].strip().lower()
        clauses.append(
            or_(
                func.lower(Property.title).contains(term, autoescape=True),
                func.lower(Property.description).contains(term, autoescape=True),
                func.lower(Property.city).contains(term, autoescape=True),
                func.lower(Property.locality).contains(term, autoescape=True),
            )
        )
    return clauses


async def list_properties(
    db: AsyncSession,
    filters: Optional[dict] = None,
    page: int = 1,
    per_page: int = 12,
) -> Tuple[List[Property], int]:
    """
    Public search. Unknown sort keys fall back to featured-first, newest.
    """
    filters = filters or {}
    stmt = select(Property)

    where_clauses = _filter_clauses(filters, utcnow())
    if where_clauses:
        stmt = stmt.where(and_(*where_clauses))

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    stmt = stmt.order_by(*SORTS.get(filters.get("sort") or "", DEFAULT_SORT))
    stmt = stmt.offset((page - 1) * per_page).limit(per_page)
    res = await db.execute(stmt)
    return list(res.scalars().all()), int(total)


async def get_property(db: AsyncSession, prop_id: int) -> Property | None:
    res = await db.execute(
        select(Property)
        .where(Property.id == prop_id)
        .execution_options(populate_existing=True)
    )
    return res.scalars().first()


async def get_property_by_slug(db: AsyncSession, slug: str) -> Property | None:
    res = await db.execute(select(Property).where(Property.slug == slug))
    return res.scalars().first()


async def increment_views(db: AsyncSession, prop_id: int) -> Property | None:
    """
    Bump the view counter in one UPDATE and return the fresh row.
    Every call counts; there is no per-viewer dedup.
    """
    await db.execute(
        update(Property)
        .where(Property.id == prop_id)
        .values(views=Property.views + 1)
    )
    await db.commit()
    return await get_property(db, prop_id)


async def list_featured(db: AsyncSession, limit: int = 8) -> List[Property]:
    stmt = (
        select(Property)
        .where(
            Property.status == "available",
            Property.is_featured.is_(True),
            Property.featured_until >= utcnow(),
        )
        .order_by(Property.created_at.desc(), Property.id.desc())
        .limit(limit)
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_similar(db: AsyncSession, prop: Property, limit: int = 6) -> List[Property]:
    """
    Same listing type, still available, and close on at least one of
    city, property type or price (+-20%).
    """
    price = float(prop.price)
    stmt = (
        select(Property)
        .where(
            Property.id != prop.id,
            Property.status == "available",
            Property.listing_type == prop.listing_type,
            or_(
                Property.city == prop.city,
                Property.property_type == prop.property_type,
                and_(Property.price >= price * 0.8, Property.price <= price * 1.2),
            ),
        )
        .order_by(Property.created_at.desc(), Property.id.desc())
        .limit(limit)
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def city_stats(db: AsyncSession, limit: int = 10) -> List[Dict[str, Any]]:
    """
    Return [{city, count, avg_price}] for available listings, busiest first.
    """
    stmt = (
        select(
            Property.city,
            func.count(Property.id).label("count"),
            func.avg(Property.price).label("avg_price"),
        )
        .where(Property.status == "available")
        .group_by(Property.city)
        .order_by(func.count(Property.id).desc(), Property.city.asc())
        .limit(limit)
    )
    res = await db.execute(stmt)
    return [
        {"city": r.city, "count": int(r.count), "avg_price": round(float(r.avg_price or 0), 2)}
        for r in res.all()
    ]


async def list_properties_for_owner(
    db: AsyncSession,
    owner_id: int,
    *,
    status: Optional[str] = None,
    page: int = 1,
    per_page: int = 10,
) -> Tuple[List[Property], int]:
    """
    Seller dashboard: all their listings, whatever the status.
    """
    stmt = select(Property).where(Property.owner_id == owner_id)
    if status:
        stmt = stmt.where(Property.status == status)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc())
    stmt = stmt.offset((page - 1) * per_page).limit(per_page)
    res = await db.execute(stmt)
    return list(res.scalars().all()), int(total)


async def owner_stats(db: AsyncSession, owner_id: int) -> List[Dict[str, Any]]:
    stmt = (
        select(
            Property.status,
            func.count(Property.id).label("count"),
            func.coalesce(func.sum(Property.views), 0).label("total_views"),
        )
        .where(Property.owner_id == owner_id)
        .group_by(Property.status)
        .order_by(Property.status)
    )
    res = await db.execute(stmt)
    return [
        {"status": r.status, "count": int(r.count), "total_views": int(r.total_views)}
        for r in res.all()
    ]


async def create_property(db: AsyncSession, **kwargs) -> Property:
    """
    Generic create. Slug is derived from the title when not supplied.
    """
    amenities = kwargs.pop("amenities", None) or []
    if not kwargs.get("slug"):
        kwargs["slug"] = make_slug(kwargs["title"])
    prop = Property(**kwargs)
    prop.amenities = list(dict.fromkeys(amenities))
    db.add(prop)
    await db.commit()
    return await get_property(db, prop.id)


async def update_property(db: AsyncSession, prop: Property, data: dict) -> Property:
    amenities = data.pop("amenities", None)
    for k, v in data.items():
        if v is not None:
            setattr(prop, k, v)
    if amenities is not None:
        prop.amenities.clear()
        # flush the removals first so the (property, name) unique index
        # never sees the old and new row together
        await db.flush()
        prop.amenities.extend(dict.fromkeys(amenities))
    db.add(prop)
    await db.commit()
    return await get_property(db, prop.id)


async def delete_property(db: AsyncSession, prop: Property):
    await db.delete(prop)
    await db.commit()
    return True


async def verify_property(db: AsyncSession, prop: Property, admin_id: int) -> Property:
    prop.is_verified = True
    prop.verified_at = utcnow()
    prop.verified_by_id = admin_id
    db.add(prop)
    await db.commit()
    return await get_property(db, prop.id)


async def mark_featured(db: AsyncSession, prop: Property, days: int) -> Property:
    prop.is_featured = True
    prop.featured_until = utcnow() + timedelta(days=days)
    db.add(prop)
    await db.commit()
    return await get_property(db, prop.id)


async def admin_stats(db: AsyncSession) -> Dict[str, Any]:
    async def _count(*where) -> int:
        stmt = select(func.count(Property.id))
        if where:
            stmt = stmt.where(*where)
        return int((await db.execute(stmt)).scalar_one())

    async def _group(column) -> List[Dict[str, Any]]:
        res = await db.execute(
            select(column, func.count(Property.id)).group_by(column).order_by(column)
        )
        return [{"value": value, "count": int(count)} for value, count in res.all()]

    recent = await db.execute(
        select(Property).order_by(Property.created_at.desc(), Property.id.desc()).limit(5)
    )
    return {
        "total_properties": await _count(),
        "active_properties": await _count(Property.status == "available"),
        "pending_properties": await _count(Property.status == "pending"),
        "verified_properties": await _count(Property.is_verified.is_(True)),
        "by_property_type": await _group(Property.property_type),
        "by_listing_type": await _group(Property.listing_type),
        "recent": list(recent.scalars().all()),
    }
