"""Saving properties to a personal favorites list."""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import models
import schemas
from database import get_db
from errors import ConflictError, NotFoundError
from policies import ensure_not_self_dealing
from routers.auth import get_current_user
from routers.properties import get_property_or_404

router = APIRouter(tags=["Favorites"])


@router.post(
    "/properties/{property_id}/favorite",
    response_model=schemas.FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_favorite(
    property_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Adds a property to the caller's favorites. Each property can be saved once."""
    prop = get_property_or_404(db, property_id)
    ensure_not_self_dealing(current_user, prop, "You cannot favorite your own property")

    existing = db.query(models.Favorite).filter(
        models.Favorite.tenant_id == current_user.id,
        models.Favorite.property_id == property_id
    ).first()
    if existing:
        raise ConflictError("Property already in favorites")

    favorite = models.Favorite(tenant_id=current_user.id, property_id=property_id)
    db.add(favorite)
    db.commit()
    db.refresh(favorite)
    return favorite


@router.delete("/properties/{property_id}/favorite")
def remove_favorite(
    property_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Removes a property from the caller's favorites."""
    favorite = db.query(models.Favorite).filter(
        models.Favorite.tenant_id == current_user.id,
        models.Favorite.property_id == property_id
    ).first()
    if not favorite:
        raise NotFoundError("Favorite not found")

    favorite_id = favorite.id
    db.delete(favorite)
    db.commit()
    return {"id": favorite_id, "message": "Property removed from favorites"}


@router.get("/favorites", response_model=List[schemas.FavoriteResponse])
def get_favorites(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Lists the caller's favorites, newest first."""
    return db.query(models.Favorite).filter(
        models.Favorite.tenant_id == current_user.id
    ).order_by(models.Favorite.created_at.desc(), models.Favorite.id.desc()).all()
