"""Search, creation, updates and image uploads for property listings."""
import logging
import math
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, UploadFile, File, Query, status
from sqlalchemy.orm import Session
import models
import schemas
import storage
from database import get_db
from errors import NotFoundError
from lifecycle import PROPERTY_LIFECYCLE
from policies import Action, authorize, require_role
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Properties"])

SORT_ORDERS = {
    "newest": models.Property.created_at.desc(),
    "rent_low_to_high": models.Property.rent.asc(),
    "rent_high_to_low": models.Property.rent.desc(),
}


def get_property_or_404(db: Session, property_id: int) -> models.Property:
    db_property = db.query(models.Property).filter(models.Property.id == property_id).first()
    if not db_property:
        raise NotFoundError("Property not found")
    return db_property


def _apply_fields(db_property: models.Property, data: dict) -> None:
    images = data.pop("images", None)
    for field, value in data.items():
        setattr(db_property, field, value.value if hasattr(value, "value") else value)
    if images is not None:
        db_property.images = [models.PropertyImage(url=url) for url in images]


@router.get("/properties", response_model=schemas.PropertyPage)
def get_properties(
        city: Optional[str] = None,
        area: Optional[str] = None,
        min_rent: Optional[float] = Query(None, ge=0),
        max_rent: Optional[float] = Query(None, ge=0),
        bhk: Optional[int] = Query(None, ge=1),
        furnishing: Optional[models.Furnishing] = None,
        property_type: Optional[models.PropertyType] = None,
        allowed_tenants: Optional[models.AllowedTenants] = None,
        pets_allowed: Optional[bool] = None,
        sort_by: Literal["newest", "rent_low_to_high", "rent_high_to_low"] = "newest",
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        db: Session = Depends(get_db)
):
    """Lists active properties. Supports filtering, sorting and pagination."""
    query = db.query(models.Property).filter(
        models.Property.status == models.PropertyStatus.ACTIVE.value
    )

    if city:
        query = query.filter(models.Property.city.ilike(f"%{city}%"))
    if area:
        query = query.filter(models.Property.area.ilike(f"%{area}%"))
    if min_rent is not None:
        query = query.filter(models.Property.rent >= min_rent)
    if max_rent is not None:
        query = query.filter(models.Property.rent <= max_rent)
    if bhk is not None:
        query = query.filter(models.Property.bhk == bhk)
    if furnishing:
        query = query.filter(models.Property.furnishing == furnishing.value)
    if property_type:
        query = query.filter(models.Property.property_type == property_type.value)
    if allowed_tenants:
        query = query.filter(models.Property.allowed_tenants == allowed_tenants.value)
    if pets_allowed is not None:
        query = query.filter(models.Property.pets_allowed == pets_allowed)

    total_items = query.count()
    items = (
        query.order_by(SORT_ORDERS[sort_by], models.Property.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "items": items,
        "page": page,
        "limit": limit,
        "total_items": total_items,
        "total_pages": math.ceil(total_items / limit),
    }


@router.get("/owner/properties", response_model=List[schemas.PropertyResponse])
def get_owner_properties(
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user)
):
    """Lists the caller's own listings in every status, newest first."""
    authorize(current_user, Action.PROPERTY_LIST_OWN)
    return db.query(models.Property).filter(
        models.Property.owner_id == current_user.id
    ).order_by(models.Property.created_at.desc()).all()


@router.post("/properties", response_model=schemas.PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
        property_data: schemas.PropertyCreate,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user)
):
    """Creates a new property listing owned by the caller."""
    authorize(current_user, Action.PROPERTY_CREATE)

    new_prop = models.Property(owner_id=current_user.id, status=PROPERTY_LIFECYCLE.initial)
    _apply_fields(new_prop, property_data.model_dump())

    db.add(new_prop)
    db.commit()
    db.refresh(new_prop)
    logger.info("Property %s created by owner %s", new_prop.id, current_user.id)
    return new_prop


@router.get("/properties/{property_id}", response_model=schemas.PropertyResponse)
def get_property_details(property_id: int, db: Session = Depends(get_db)):
    """Detailed view for a specific property."""
    return get_property_or_404(db, property_id)


@router.patch("/properties/{property_id}", response_model=schemas.PropertyResponse)
def update_property(
        property_id: int,
        property_data: schemas.PropertyUpdate,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user)
):
    """Partially updates a listing. Only its owner may do this."""
    require_role(current_user, Action.PROPERTY_UPDATE)
    db_property = get_property_or_404(db, property_id)
    authorize(current_user, Action.PROPERTY_UPDATE, db_property)

    changes = property_data.model_dump(exclude_unset=True)
    requested_status = changes.pop("status", None)
    if requested_status is not None:
        db_property.status = PROPERTY_LIFECYCLE.transition(db_property.status, requested_status.value)
    _apply_fields(db_property, changes)

    db.commit()
    db.refresh(db_property)
    return db_property


@router.delete("/properties/{property_id}")
def delete_property(
        property_id: int,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user)
):
    """Soft-deletes a listing by pausing it; nothing is removed from storage."""
    require_role(current_user, Action.PROPERTY_DELETE)
    db_property = get_property_or_404(db, property_id)
    authorize(current_user, Action.PROPERTY_DELETE, db_property)

    db_property.status = PROPERTY_LIFECYCLE.transition(
        db_property.status, models.PropertyStatus.PAUSED.value
    )
    db.commit()
    logger.info("Property %s paused by owner %s", db_property.id, current_user.id)
    return {"id": db_property.id, "message": "Property deleted successfully"}


@router.post("/properties/{property_id}/images", response_model=schemas.PropertyResponse)
def upload_images(
        property_id: int,
        files: List[UploadFile] = File(...),
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user)
):
    """Uploads up to five images and appends them to the listing."""
    require_role(current_user, Action.PROPERTY_UPLOAD_IMAGES)
    db_property = get_property_or_404(db, property_id)
    authorize(current_user, Action.PROPERTY_UPLOAD_IMAGES, db_property)

    urls = storage.save_images(files)
    for url in urls:
        db_property.images.append(models.PropertyImage(url=url))

    db.commit()
    db.refresh(db_property)
    return db_property
