"""Reviews of properties and of other users."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import models
import schemas
from database import get_db
from errors import BadRequestError, ConflictError, NotFoundError
from routers.auth import get_current_user
from routers.properties import get_property_or_404

router = APIRouter(tags=["Reviews"])


@router.post("/reviews", response_model=schemas.ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    review_data: schemas.ReviewCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Creates a review of a property or a user. One review per reviewer and target."""
    if review_data.user_id is not None:
        if review_data.user_id == current_user.id:
            raise BadRequestError("You cannot review yourself")
        if not db.query(models.User).filter(models.User.id == review_data.user_id).first():
            raise NotFoundError("User not found")
        target = models.Review.user_id == review_data.user_id
    else:
        get_property_or_404(db, review_data.property_id)
        target = models.Review.property_id == review_data.property_id

    existing_review = db.query(models.Review).filter(
        models.Review.reviewer_id == current_user.id,
        target
    ).first()
    if existing_review:
        raise ConflictError("You have already submitted this review")

    new_review = models.Review(
        reviewer_id=current_user.id,
        property_id=review_data.property_id,
        user_id=review_data.user_id,
        rating=review_data.rating,
        comment=review_data.comment.strip() if review_data.comment else None
    )

    db.add(new_review)
    db.commit()
    db.refresh(new_review)
    return new_review


@router.get("/properties/{property_id}/reviews", response_model=List[schemas.ReviewResponse])
def get_property_reviews(property_id: int, db: Session = Depends(get_db)):
    """Retrieves all reviews for a specific property, newest first."""
    return db.query(models.Review).filter(
        models.Review.property_id == property_id
    ).order_by(models.Review.created_at.desc(), models.Review.id.desc()).all()


@router.get("/users/{user_id}/reviews", response_model=List[schemas.ReviewResponse])
def get_user_reviews(user_id: int, db: Session = Depends(get_db)):
    """Retrieves all reviews written about a user, newest first."""
    return db.query(models.Review).filter(
        models.Review.user_id == user_id
    ).order_by(models.Review.created_at.desc(), models.Review.id.desc()).all()
