"""Rental applications submitted by tenants and answered by property owners."""
import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import models
import schemas
from database import get_db
from errors import NotFoundError
from lifecycle import APPLICATION_LIFECYCLE
from policies import Action, authorize, ensure_not_self_dealing, require_role
from routers.auth import get_current_user
from routers.properties import get_property_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Rental Applications"])


@router.post(
    "/properties/{property_id}/applications",
    response_model=schemas.ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_application(
    property_id: int,
    application_data: schemas.ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Submits an application; the property's current owner is recorded on it."""
    prop = get_property_or_404(db, property_id)
    ensure_not_self_dealing(current_user, prop, "You cannot apply for your own property")

    application = models.RentalApplication(
        property_id=prop.id,
        tenant_id=current_user.id,
        owner_id=prop.owner_id,
        message=application_data.message,
        monthly_rent_offered=application_data.monthly_rent_offered,
        move_in_date=application_data.move_in_date,
        status=APPLICATION_LIFECYCLE.initial
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("Application %s submitted for property %s", application.id, prop.id)
    return application


@router.get("/applications/me", response_model=List[schemas.ApplicationResponse])
def get_tenant_applications(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Applications the caller has submitted, newest first."""
    return db.query(models.RentalApplication).filter(
        models.RentalApplication.tenant_id == current_user.id
    ).order_by(models.RentalApplication.created_at.desc(), models.RentalApplication.id.desc()).all()


@router.get("/owner/applications", response_model=List[schemas.ApplicationResponse])
def get_owner_applications(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Applications received on the caller's properties, newest first."""
    authorize(current_user, Action.APPLICATION_LIST_RECEIVED)
    return db.query(models.RentalApplication).filter(
        models.RentalApplication.owner_id == current_user.id
    ).order_by(models.RentalApplication.created_at.desc(), models.RentalApplication.id.desc()).all()


@router.patch("/applications/{application_id}", response_model=schemas.ApplicationResponse)
def update_application_status(
    application_id: int,
    update: schemas.ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Moves an application along its lifecycle. Only the recorded owner may answer."""
    require_role(current_user, Action.APPLICATION_RESPOND)

    application = db.query(models.RentalApplication).filter(
        models.RentalApplication.id == application_id
    ).first()
    if not application:
        raise NotFoundError("Application not found")

    authorize(current_user, Action.APPLICATION_RESPOND, application)

    previous = application.status
    application.status = APPLICATION_LIFECYCLE.transition(previous, update.status)
    db.commit()
    db.refresh(application)
    logger.info("Application %s moved from %s to %s", application.id, previous, application.status)
    return application
