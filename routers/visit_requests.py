"""Property visit scheduling between tenants and owners."""
import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import models
import schemas
from database import get_db
from errors import NotFoundError
from lifecycle import VISIT_REQUEST_LIFECYCLE
from policies import Action, authorize, ensure_not_self_dealing, require_role
from routers.auth import get_current_user
from routers.properties import get_property_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Visit Requests"])


@router.post(
    "/properties/{property_id}/visit-requests",
    response_model=schemas.VisitRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_visit_request(
    property_id: int,
    visit_data: schemas.VisitRequestCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Requests a property visit at a future date and time."""
    prop = get_property_or_404(db, property_id)
    ensure_not_self_dealing(current_user, prop, "You cannot request to visit your own property")

    visit_request = models.VisitRequest(
        property_id=prop.id,
        tenant_id=current_user.id,
        owner_id=prop.owner_id,
        preferred_date_time=visit_data.preferred_date_time,
        notes=visit_data.notes.strip() if visit_data.notes else None,
        status=VISIT_REQUEST_LIFECYCLE.initial
    )
    db.add(visit_request)
    db.commit()
    db.refresh(visit_request)
    logger.info("Visit request %s created for property %s", visit_request.id, prop.id)
    return visit_request


@router.get("/visit-requests/me", response_model=List[schemas.VisitRequestResponse])
def get_tenant_visit_requests(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Visit requests the caller has made, newest first."""
    return db.query(models.VisitRequest).filter(
        models.VisitRequest.tenant_id == current_user.id
    ).order_by(models.VisitRequest.created_at.desc(), models.VisitRequest.id.desc()).all()


@router.get("/owner/visit-requests", response_model=List[schemas.VisitRequestResponse])
def get_owner_visit_requests(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Visit requests received on the caller's properties, newest first."""
    authorize(current_user, Action.VISIT_LIST_RECEIVED)
    return db.query(models.VisitRequest).filter(
        models.VisitRequest.owner_id == current_user.id
    ).order_by(models.VisitRequest.created_at.desc(), models.VisitRequest.id.desc()).all()


@router.patch("/visit-requests/{visit_request_id}", response_model=schemas.VisitRequestResponse)
def update_visit_request_status(
    visit_request_id: int,
    update: schemas.VisitRequestStatusUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Allows the property owner to accept, decline, complete or cancel a visit."""
    require_role(current_user, Action.VISIT_RESPOND)

    visit_request = db.query(models.VisitRequest).filter(
        models.VisitRequest.id == visit_request_id
    ).first()
    if not visit_request:
        raise NotFoundError("Visit request not found")

    authorize(current_user, Action.VISIT_RESPOND, visit_request)

    previous = visit_request.status
    visit_request.status = VISIT_REQUEST_LIFECYCLE.transition(previous, update.status)
    db.commit()
    db.refresh(visit_request)
    logger.info("Visit request %s moved from %s to %s", visit_request.id, previous, visit_request.status)
    return visit_request
