# urbanstay/api/routers/reviews.py
import logging

from fastapi import APIRouter, Query, status

from urbanstay.api.dependencies import AdminUser, CurrentUser, DbSession
from urbanstay.db import crud_properties, crud_reviews
from urbanstay.db.enums import ReviewStatus
from urbanstay.exceptions.custom import AuthorizationError, NotFoundError, ValidationError
from urbanstay.schemas.review import (
    OwnerReply,
    ReviewCreate,
    ReviewModeration,
    ReviewOut,
    ReviewUpdate,
    ReviewVoteIn,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load(db, review_id: int):
    review = await crud_reviews.get_review(db, review_id)
    if not review:
        raise NotFoundError("Review")
    return review


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(body: ReviewCreate, current_user: CurrentUser, db: DbSession):
    prop = await crud_properties.get_property(db, body.property_id)
    if not prop:
        raise NotFoundError("Property")
    if prop.owner_id == current_user.id:
        raise ValidationError("You cannot review your own property")
    if await crud_reviews.find_review(db, prop.id, current_user.id):
        raise ValidationError("You have already reviewed this property")

    review = await crud_reviews.create_review(
        db,
        property_id=prop.id,
        user_id=current_user.id,
        **body.model_dump(exclude={"property_id"}),
    )
    return {
        "success": True,
        "message": "Review submitted and awaiting moderation",
        "data": ReviewOut.model_validate(review),
    }


@router.get("/property/{property_id}")
async def property_reviews(
    property_id: int,
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
):
    items, total, average = await crud_reviews.list_for_property(
        db,
        property_id,
        page=page,
        per_page=limit,
    )
    return {
        "success": True,
        "count": len(items),
        "total": total,
        "page": page,
        "pages": (total + limit - 1) // limit,
        "average_rating": average,
        "data": [ReviewOut.model_validate(r) for r in items],
    }


@router.get("/my")
async def my_reviews(current_user: CurrentUser, db: DbSession):
    items = await crud_reviews.list_for_user(db, current_user.id)
    return {
        "success": True,
        "count": len(items),
        "data": [ReviewOut.model_validate(r) for r in items],
    }


@router.get("/pending")
async def pending_reviews(current_user: AdminUser, db: DbSession):
    items = await crud_reviews.list_by_status(db, ReviewStatus.PENDING.value)
    return {
        "success": True,
        "count": len(items),
        "data": [ReviewOut.model_validate(r) for r in items],
    }


@router.put("/{review_id}")
async def update_review(review_id: int, body: ReviewUpdate, current_user: CurrentUser, db: DbSession):
    review = await _load(db, review_id)
    if review.user_id != current_user.id:
        raise AuthorizationError("Not authorized to update this review")

    data = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    # edited reviews go back through moderation
    data["status"] = ReviewStatus.PENDING.value
    data["rejection_reason"] = None
    review = await crud_reviews.update_review(db, review, data)
    return {
        "success": True,
        "message": "Review updated and awaiting moderation",
        "data": ReviewOut.model_validate(review),
    }


@router.delete("/{review_id}")
async def delete_review(review_id: int, current_user: CurrentUser, db: DbSession):
    review = await _load(db, review_id)
    if review.user_id != current_user.id and current_user.role != "admin":
        raise AuthorizationError("Not authorized to delete this review")

    await crud_reviews.delete_review(db, review)
    return {"success": True, "message": "Review deleted successfully"}


@router.put("/{review_id}/vote")
async def vote_review(review_id: int, body: ReviewVoteIn, current_user: CurrentUser, db: DbSession):
    review = await _load(db, review_id)
    if review.user_id == current_user.id:
        raise ValidationError("You cannot vote on your own review")

    review = await crud_reviews.vote(db, review, current_user.id, body.is_helpful)
    return {
        "success": True,
        "message": "Vote recorded",
        "data": {"helpful_votes": review.helpful_votes},
    }


@router.put("/{review_id}/respond")
async def respond_to_review(review_id: int, body: OwnerReply, current_user: CurrentUser, db: DbSession):
    review = await _load(db, review_id)
    if review.property is None or review.property.owner_id != current_user.id:
        raise AuthorizationError("Only the property owner can respond to reviews")

    review = await crud_reviews.set_owner_response(db, review, body.message)
    return {
        "success": True,
        "message": "Response added successfully",
        "data": ReviewOut.model_validate(review),
    }


@router.put("/{review_id}/moderate")
async def moderate_review(review_id: int, body: ReviewModeration, current_user: AdminUser, db: DbSession):
    review = await _load(db, review_id)
    if body.status == "rejected" and not body.rejection_reason:
        raise ValidationError("A rejection reason is required")

    data = {
        "status": body.status,
        "rejection_reason": body.rejection_reason if body.status == "rejected" else None,
    }
    review = await crud_reviews.update_review(db, review, data)
    logger.info("Review %s %s by admin %s", review.id, body.status, current_user.id)
    return {
        "success": True,
        "message": f"Review {body.status}",
        "data": ReviewOut.model_validate(review),
    }
