"""Administrative routes for platform statistics, KYC and moderation."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import List, Optional
import models
import schemas
from database import get_db
from errors import NotFoundError
from policies import Action, authorize
from routers.properties import get_property_or_404
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin Panel"])


def get_admin(current_user: models.User = Depends(get_current_user)):
    authorize(current_user, Action.ADMIN_PANEL)
    return current_user


@router.get("/stats")
def get_admin_stats(
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_admin)
):
    """Returns user, listing and activity counts."""
    def count_by_status(model):
        return {
            status: db.query(model).filter(model.status == status).count()
            for status in sorted({row[0] for row in db.query(model.status).distinct()})
        }

    return {
        "user_stats": {
            "total_users": db.query(models.User).count(),
            "owners": db.query(models.User).filter(
                models.User.role == models.UserRole.OWNER.value
            ).count(),
            "pending_kyc": db.query(models.User).filter(
                models.User.kyc_status == models.KycStatus.PENDING.value
            ).count()
        },
        "content_stats": {
            "properties": count_by_status(models.Property),
            "applications": count_by_status(models.RentalApplication),
            "visit_requests": count_by_status(models.VisitRequest),
            "total_reviews": db.query(models.Review).count()
        },
        "system_info": {
            "report_generated_at": datetime.now(timezone.utc).isoformat(),
            "admin_user": current_user.email
        }
    }


@router.patch("/users/{user_id}/kyc", response_model=schemas.UserResponse)
def update_kyc_status(
        user_id: int,
        update: schemas.KycUpdate,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_admin)
):
    """Records the outcome of a user's KYC review."""
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise NotFoundError("Target user not found")

    user.kyc_status = update.kyc_status.value
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set KYC of user %s to %s", current_user.id, user.id, user.kyc_status)
    return user


@router.patch("/properties/{property_id}/verify", response_model=schemas.PropertyResponse)
def verify_property(
        property_id: int,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_admin)
):
    """Marks a listing as verified."""
    db_property = get_property_or_404(db, property_id)
    db_property.is_verified = True
    db.commit()
    db.refresh(db_property)
    return db_property


REVIEW_PAGE_LIMIT = 100


def _review_target(review: models.Review) -> str:
    if review.property_id is not None:
        return f"property {review.property_id}"
    return f"user {review.user_id}"


@router.get("/reviews", response_model=List[schemas.ReviewResponse])
def list_reviews_for_moderation(
        property_id: Optional[int] = None,
        user_id: Optional[int] = None,
        max_rating: Optional[int] = Query(None, ge=1, le=5),
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_admin)
):
    """Newest reviews first, optionally narrowed to one target or to low ratings."""
    query = db.query(models.Review)
    if property_id is not None:
        query = query.filter(models.Review.property_id == property_id)
    if user_id is not None:
        query = query.filter(models.Review.user_id == user_id)
    if max_rating is not None:
        query = query.filter(models.Review.rating <= max_rating)
    return query.order_by(
        models.Review.created_at.desc(), models.Review.id.desc()
    ).limit(REVIEW_PAGE_LIMIT).all()


@router.delete("/reviews/{review_id}")
def remove_review(
        review_id: int,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_admin)
):
    """Takes down a review; the removal is logged against its target."""
    review = db.query(models.Review).filter(models.Review.id == review_id).first()
    if not review:
        raise NotFoundError("Review not found")

    target = _review_target(review)
    db.delete(review)
    db.commit()
    logger.info("Admin %s removed review %s of %s", current_user.id, review_id, target)
    return {"id": review_id, "message": f"Review of {target} removed"}
