# urbanstay/db/crud_reviews.py

from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.db.models import Review, ReviewVote, utcnow


async def get_review(db: AsyncSession, review_id: int) -> Optional[Review]:
    res = await db.execute(
        select(Review)
        .where(Review.id == review_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def find_review(db: AsyncSession, property_id: int, user_id: int) -> Optional[Review]:
    res = await db.execute(
        select(Review).where(Review.property_id == property_id, Review.user_id == user_id)
    )
    return res.scalar_one_or_none()


async def create_review(db: AsyncSession, **kwargs) -> Review:
    review = Review(**kwargs)
    db.add(review)
    await db.commit()
    return await get_review(db, review.id)


async def list_for_property(
    db: AsyncSession,
    property_id: int,
    *,
    page: int = 1,
    per_page: int = 10,
) -> Tuple[List[Review], int, Optional[float]]:
    """
    Approved reviews only. Returns (items, total, average rating).
    """
    where = (Review.property_id == property_id, Review.status == "approved")

    agg = await db.execute(select(func.count(Review.id), func.avg(Review.rating)).where(*where))
    total, average = agg.one()

    res = await db.execute(
        select(Review)
        .where(*where)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    avg = round(float(average), 2) if average is not None else None
    return list(res.scalars().all()), int(total), avg


async def list_for_user(db: AsyncSession, user_id: int) -> List[Review]:
    res = await db.execute(
        select(Review)
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(res.scalars().all())


async def list_by_status(db: AsyncSession, status: str) -> List[Review]:
    res = await db.execute(
        select(Review)
        .where(Review.status == status)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(res.scalars().all())


async def update_review(db: AsyncSession, review: Review, data: dict) -> Review:
    for k, v in data.items():
        setattr(review, k, v)
    db.add(review)
    await db.commit()
    return await get_review(db, review.id)


async def delete_review(db: AsyncSession, review: Review) -> None:
    await db.delete(review)
    await db.commit()


async def vote(db: AsyncSession, review: Review, user_id: int, is_helpful: bool) -> Review:
    """
    One vote per user. Changing a vote moves the helpful counter by one;
    repeating the same vote changes nothing.
    """
    existing = next((v for v in review.votes if v.user_id == user_id), None)
    if existing is None:
        db.add(ReviewVote(review_id=review.id, user_id=user_id, is_helpful=is_helpful))
        if is_helpful:
            review.helpful_votes += 1
    elif existing.is_helpful != is_helpful:
        existing.is_helpful = is_helpful
        review.helpful_votes += 1 if is_helpful else -1
    db.add(review)
    await db.commit()
    return await get_review(db, review.id)


async def set_owner_response(db: AsyncSession, review: Review, message: str) -> Review:
    review.owner_response = message
    review.owner_responded_at = utcnow()
    db.add(review)
    await db.commit()
    return await get_review(db, review.id)
