"""
Conversations between two users, optionally tied to a listing, and the
messages exchanged in them.
"""
import logging
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import Forbidden, NotFound, ValidationFailed, backend_call
from ..models import Conversation, ListingKind, Message, User

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


def _pair(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def _is_participant(conversation: Conversation, user_id: int) -> bool:
    return user_id in (conversation.user_id_1, conversation.user_id_2)


def get_or_create_conversation(
    db: Session,
    user_id: int,
    other_user_id: int,
    listing_id: int | None = None,
    listing_type: ListingKind | None = None,
    title: str | None = None,
) -> tuple[Conversation, bool]:
    """Return (conversation, created). One conversation exists per user pair and listing (id and kind)."""
    if user_id == other_user_id:
        raise ValidationFailed("Cannot start a conversation with yourself")
    first, second = _pair(user_id, other_user_id)
    kind = listing_type.value if listing_type is not None else None
    stmt = select(Conversation).where(
        Conversation.user_id_1 == first,
        Conversation.user_id_2 == second,
        Conversation.listing_id.is_(None) if listing_id is None else Conversation.listing_id == listing_id,
        Conversation.listing_type.is_(None) if kind is None else Conversation.listing_type == kind,
    )
    with backend_call(db, "start conversation"):
        if db.get(User, other_user_id) is None:
            raise NotFound("User not found")
        existing = db.scalar(stmt)
        if existing is not None:
            return existing, False
        conversation = Conversation(user_id_1=first, user_id_2=second, listing_id=listing_id, listing_type=kind, title=title)
        db.add(conversation)
        try:
            db.commit()
        except IntegrityError:
            # Opened concurrently by the other participant
            db.rollback()
            return db.scalar(stmt), False
        db.refresh(conversation)
    logger.info("Conversation %s opened between users %s and %s", conversation.id, first, second)
    return conversation, True


def get_conversation(db: Session, user_id: int, conversation_id: int) -> Conversation:
    with backend_call(db, "load conversation"):
        conversation = db.get(Conversation, conversation_id)
    if conversation is None:
        raise NotFound("Conversation not found")
    if not _is_participant(conversation, user_id):
        raise Forbidden("Not a participant in this conversation")
    return conversation


def list_conversations(db: Session, user_id: int) -> list[Conversation]:
    stmt = (
        select(Conversation)
        .where(or_(Conversation.user_id_1 == user_id, Conversation.user_id_2 == user_id))
        .order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
    )
    with backend_call(db, "load conversations"):
        return list(db.scalars(stmt))


def send_message(db: Session, user_id: int, conversation_id: int, content: str) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationFailed("Message cannot be empty")
    conversation = get_conversation(db, user_id, conversation_id)
    with backend_call(db, "send message"):
        message = Message(conversation_id=conversation.id, sender_id=user_id, content=content, created_at=datetime.utcnow())
        db.add(message)
        conversation.last_message_at = message.created_at
        db.commit()
        db.refresh(message)
    return message


def list_messages(db: Session, user_id: int, conversation_id: int, before_id: int | None = None, limit: int = PAGE_SIZE) -> list[Message]:
    """Newest page of messages (older ones via ``before_id``), returned oldest first."""
    get_conversation(db, user_id, conversation_id)
    stmt = select(Message).where(Message.conversation_id == conversation_id)
    if before_id is not None:
        stmt = stmt.where(Message.id < before_id)
    stmt = stmt.order_by(Message.id.desc()).limit(limit)
    with backend_call(db, "load messages"):
        page = list(db.scalars(stmt))
    page.reverse()
    return page
