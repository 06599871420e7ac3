"""Property-scoped conversations between a tenant and an owner."""
import logging
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
import models
import schemas
from database import get_db
from errors import BadRequestError, ForbiddenError, NotFoundError
from routers.auth import get_current_user
from routers.properties import get_property_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["Messaging"])


def _find_conversation(db: Session, property_id: int, user_a: int, user_b: int):
    """Looks up the conversation for this property and participant pair, in either order."""
    return db.query(models.Conversation).filter(
        models.Conversation.property_id == property_id,
        or_(
            and_(models.Conversation.starter_id == user_a, models.Conversation.recipient_id == user_b),
            and_(models.Conversation.starter_id == user_b, models.Conversation.recipient_id == user_a)
        )
    ).first()


def _get_participating_conversation(db: Session, conversation_id: int, user: models.User, denial: str):
    conversation = db.query(models.Conversation).filter(
        models.Conversation.id == conversation_id
    ).first()
    if not conversation:
        raise NotFoundError("Conversation not found")

    if user.id not in conversation.participant_ids:
        raise ForbiddenError(denial)

    return conversation


@router.post("", response_model=schemas.ConversationResponse, status_code=status.HTTP_201_CREATED)
def start_conversation(
    data: schemas.ConversationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Opens a conversation about a property, or returns the existing one."""
    if data.owner_id == current_user.id:
        raise BadRequestError("You cannot chat with yourself")

    get_property_or_404(db, data.property_id)
    counterpart = db.query(models.User).filter(models.User.id == data.owner_id).first()
    if not counterpart:
        raise NotFoundError("User not found")

    conversation = _find_conversation(db, data.property_id, current_user.id, data.owner_id)
    if conversation:
        return conversation

    conversation = models.Conversation(
        property_id=data.property_id,
        starter_id=current_user.id,
        recipient_id=data.owner_id,
        last_message="Started conversation",
        last_message_at=datetime.now(timezone.utc)
    )
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    logger.info("Conversation %s started on property %s", conversation.id, data.property_id)
    return conversation


@router.get("", response_model=List[schemas.ConversationResponse])
def get_conversations(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Conversations the caller takes part in, most recently active first."""
    return db.query(models.Conversation).filter(
        or_(
            models.Conversation.starter_id == current_user.id,
            models.Conversation.recipient_id == current_user.id
        )
    ).order_by(models.Conversation.last_message_at.desc(), models.Conversation.id.desc()).all()


@router.get("/{conversation_id}/messages", response_model=List[schemas.MessageResponse])
def get_messages(
    conversation_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Messages of one conversation, oldest first."""
    _get_participating_conversation(
        db, conversation_id, current_user, "Not authorized to view these messages"
    )
    return db.query(models.Message).filter(
        models.Message.conversation_id == conversation_id
    ).order_by(models.Message.created_at.asc(), models.Message.id.asc()).all()


@router.post(
    "/{conversation_id}/messages",
    response_model=schemas.MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    conversation_id: int,
    msg: schemas.MessageCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Appends a message and refreshes the conversation preview."""
    conversation = _get_participating_conversation(
        db, conversation_id, current_user, "Not authorized to send messages to this conversation"
    )

    new_msg = models.Message(
        conversation_id=conversation.id,
        sender_id=current_user.id,
        content=msg.content
    )
    conversation.last_message = msg.content
    conversation.last_message_at = datetime.now(timezone.utc)

    db.add(new_msg)
    db.commit()
    db.refresh(new_msg)
    return new_msg
