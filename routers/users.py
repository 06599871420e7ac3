"""Profile management for the authenticated user."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import models
import schemas
from database import get_db
from errors import BadRequestError
from routers.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.patch("/me", response_model=schemas.UserResponse)
def update_profile(
    profile: schemas.ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Updates name and/or phone."""
    for field, value in profile.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return current_user


@router.patch("/me/role", response_model=schemas.UserResponse)
def convert_to_owner(
    conversion: schemas.RoleConversion,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """One-way tenant to owner conversion."""
    if current_user.role == models.UserRole.OWNER.value:
        raise BadRequestError("User is already an owner")

    if current_user.role == models.UserRole.ADMIN.value:
        raise BadRequestError("Cannot change admin role")

    current_user.role = models.UserRole.OWNER.value
    db.commit()
    db.refresh(current_user)
    logger.info("User %s converted to owner", current_user.id)
    return current_user
